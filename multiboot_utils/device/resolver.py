"""Match the running hardware against the device catalog."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable

from multiboot_utils.domain import DeviceRecord
from multiboot_utils.exceptions import (
    CatalogParseError,
    CatalogReadError,
    DeviceNotFoundError,
)
from multiboot_utils.logging import LoggerFactory

from .catalog import parse_device_catalog
from .properties import get_property

PROP_PRODUCT_DEVICE = "ro.product.device"
PROP_BUILD_PRODUCT = "ro.build.product"

PropertyGetter = Callable[[str, str], str]


def load_device_catalog(catalog_path: str | os.PathLike) -> list[DeviceRecord]:
    """Read and parse the catalog file. The catalog is never cached.

    Raises:
        CatalogReadError: If the file cannot be read
        CatalogParseError: If the contents are not a valid catalog
    """
    path = Path(catalog_path)
    try:
        contents = path.read_bytes()
    except OSError as error:
        raise CatalogReadError(str(path), error.strerror or str(error)) from error
    try:
        text = contents.decode("utf-8")
    except UnicodeDecodeError as error:
        raise CatalogParseError(f"Not valid UTF-8: {error}", path=str(path)) from error
    try:
        return parse_device_catalog(text)
    except CatalogParseError as error:
        raise CatalogParseError(str(error), path=str(path)) from error


def resolve_device(
    catalog_path: str | os.PathLike,
    property_getter: PropertyGetter = get_property,
) -> DeviceRecord:
    """Return the first valid catalog record matching this device's codename.

    Both ``ro.product.device`` and ``ro.build.product`` are compared against
    each record's codenames; records failing validation are skipped.

    Raises:
        CatalogReadError: If the catalog cannot be read
        CatalogParseError: If the catalog is malformed
        DeviceNotFoundError: If no valid record matches
    """
    log = LoggerFactory.for_device()

    product_device = property_getter(PROP_PRODUCT_DEVICE, "")
    build_product = property_getter(PROP_BUILD_PRODUCT, "")
    log.debug(f"{PROP_PRODUCT_DEVICE} = {product_device}")
    log.debug(f"{PROP_BUILD_PRODUCT} = {build_product}")

    devices = load_device_catalog(catalog_path)

    for index, device in enumerate(devices):
        errors = device.validation_errors()
        if errors:
            log.warning(
                f"Skipping invalid device #{index} ({device.id or 'no id'}): "
                f"{', '.join(errors)}"
            )
            continue
        if device.matches(product_device, build_product):
            log.debug(f"Matched device {device.id} ({device.name})")
            return device

    raise DeviceNotFoundError(product_device)
