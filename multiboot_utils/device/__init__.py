"""Device catalog loading, property access and hardware matching.

Main Functions:
    - resolve_device(): Find the catalog record for the running hardware
    - load_device_catalog(): Read and parse a catalog file
    - parse_device_catalog(): Parse catalog JSON text
    - get_property(): Look up an Android system property
"""

from .catalog import device_from_dict, parse_device_catalog
from .properties import get_property
from .resolver import load_device_catalog, resolve_device

__all__ = [
    "device_from_dict",
    "get_property",
    "load_device_catalog",
    "parse_device_catalog",
    "resolve_device",
]
