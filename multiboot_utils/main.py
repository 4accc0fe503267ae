"""Command line entry point.

Usage:
    multiboot-utils [opt...] generate <template dir> <output file>
    multiboot-utils [opt...] switch <ROM ID> [--force]
    multiboot-utils [opt...] wipe-system|wipe-cache|wipe-data|wipe-dalvik-cache|wipe-multiboot <ROM ID>

Exit status is 0 on success and 1 on any failure, including usage errors.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass, field
from typing import Optional, Sequence

from multiboot_utils.actions.switch_actions import switch_rom
from multiboot_utils.actions.wipe_actions import wipe_rom
from multiboot_utils.config.settings import UtilitiesConfig, get_setting
from multiboot_utils.domain import WipeTarget
from multiboot_utils.exceptions import MultibootError, UsageError
from multiboot_utils.installer import generate
from multiboot_utils.logging import LoggerFactory, operation_context, setup_logging
from multiboot_utils.roms import RomRegistry

PROG = "multiboot-utils"

USAGE = f"""\
Usage: {PROG} [opt...] generate [template dir] [output file]
   OR: {PROG} [opt...] switch [ROM ID] [--force]
   OR: {PROG} [opt...] wipe-system [ROM ID]
   OR: {PROG} [opt...] wipe-cache [ROM ID]
   OR: {PROG} [opt...] wipe-data [ROM ID]
   OR: {PROG} [opt...] wipe-dalvik-cache [ROM ID]
   OR: {PROG} [opt...] wipe-multiboot [ROM ID]

Options:
  -h, --help       Show this help and exit
  -f, --force      Force (only for 'switch' action)
  -d, --devices    Path to device definitions file
  --debug          Enable verbose debug output
  --log-dir        Directory for log files
"""

GENERATE_ACTION = "generate"
SWITCH_ACTION = "switch"

ACTION_ARG_COUNTS = {
    GENERATE_ACTION: 2,
    SWITCH_ACTION: 1,
    **{target.value: 1 for target in WipeTarget},
}


class UsageArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        raise UsageError(message)


@dataclass(frozen=True)
class Command:
    action: Optional[str] = None
    arguments: list[str] = field(default_factory=list)
    force: bool = False
    devices: Optional[str] = None
    debug: bool = False
    log_dir: Optional[str] = None
    show_help: bool = False


def build_parser() -> argparse.ArgumentParser:
    parser = UsageArgumentParser(prog=PROG, add_help=False, usage=USAGE)
    parser.add_argument("-h", "--help", dest="show_help", action="store_true")
    parser.add_argument("-f", "--force", action="store_true")
    parser.add_argument("-d", "--devices")
    parser.add_argument("--debug", action="store_true")
    parser.add_argument("--log-dir")
    parser.add_argument("action", nargs="?")
    parser.add_argument("arguments", nargs="*")
    return parser


def parse_command(argv: Optional[Sequence[str]] = None) -> Command:
    """Parse and validate the command line.

    Raises:
        UsageError: For unknown options or actions, wrong argument counts, or
            ``--force`` with anything but ``switch``
    """
    args = build_parser().parse_intermixed_args(argv)
    command = Command(
        action=args.action,
        arguments=list(args.arguments),
        force=args.force,
        devices=args.devices,
        debug=args.debug,
        log_dir=args.log_dir,
        show_help=args.show_help,
    )
    if command.show_help:
        return command

    if command.action is None:
        raise UsageError("No action specified")
    expected = ACTION_ARG_COUNTS.get(command.action)
    if expected is None:
        raise UsageError(f"Unknown action: {command.action}")
    if len(command.arguments) != expected:
        raise UsageError(
            f"'{command.action}' takes {expected} argument(s), "
            f"got {len(command.arguments)}"
        )
    if command.force and command.action != SWITCH_ACTION:
        raise UsageError("--force is only valid with 'switch'")
    return command


def run_action(command: Command, config: UtilitiesConfig) -> bool:
    action = command.action
    if action == GENERATE_ACTION:
        template_dir, output_file = command.arguments
        registry = RomRegistry.detect(config.multiboot_dir)
        return generate(
            template_dir,
            output_file,
            layout=registry.layout,
            registry=registry,
            version=config.version,
        )
    if action == SWITCH_ACTION:
        return switch_rom(command.arguments[0], command.force, config)
    registry = RomRegistry.detect(config.multiboot_dir)
    return wipe_rom(WipeTarget(action), command.arguments[0], registry)


def main(argv: Optional[Sequence[str]] = None) -> int:
    try:
        command = parse_command(argv)
    except UsageError as error:
        print(f"{PROG}: {error}", file=sys.stderr)
        print(USAGE, end="", file=sys.stderr)
        return 1

    if command.show_help:
        print(USAGE, end="")
        return 0

    log_dir = command.log_dir or get_setting("log_dir")
    try:
        setup_logging(debug=command.debug, log_dir=log_dir)
    except OSError as error:
        print(f"{PROG}: {log_dir}: Failed to set up logging: {error}", file=sys.stderr)
        return 1
    config = UtilitiesConfig.from_settings(command.devices)

    try:
        with operation_context(command.action, arguments=" ".join(command.arguments)):
            success = run_action(command, config)
    except MultibootError:
        return 1

    if not success:
        LoggerFactory.for_system().error(f"{command.action} failed")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
