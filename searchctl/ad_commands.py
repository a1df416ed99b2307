"""Anomaly detection commands: create, delete, get, start, stop and update detectors."""

from __future__ import annotations

import argparse
import dataclasses
import json
import sys
from typing import Any, List, Optional, Sequence, TextIO

AD_COMMAND_NAME = "ad"

_PATTERN_NOTE = (
    "Wrap regex patterns in quotation marks to prevent the terminal from matching patterns "
    "against the files in the current directory. The default input is detector name. "
    "Use the `--id` flag if input is detector ID instead of name"
)


def create_detectors(handler: Any, file_names: Sequence[str]) -> None:
    """Create one detector per configuration file, stopping at the first failure."""
    for name in file_names:
        handler.create_anomaly_detector(name)


def delete_detectors(
    handler: Any, detectors: Sequence[str], force: bool = False, by_id: bool = False
) -> None:
    """Delete detectors by ID or by name pattern, stopping at the first failure."""
    delete = (
        handler.delete_anomaly_detector_by_id
        if by_id
        else handler.delete_anomaly_detector_by_name_pattern
    )
    for detector in detectors:
        delete(detector, force)


def get_detectors(handler: Any, detectors: Sequence[str], by_id: bool = False) -> List[Any]:
    """Fetch the detectors matching each ID or name pattern, in order."""
    results: List[Any] = []
    for detector in detectors:
        if by_id:
            results.append(handler.get_anomaly_detector_by_id(detector))
        else:
            results.extend(handler.get_anomaly_detectors_by_name_pattern(detector))
    return results


def _jsonable(detector: Any) -> Any:
    if dataclasses.is_dataclass(detector) and not isinstance(detector, type):
        return dataclasses.asdict(detector)
    return detector


def print_detector(out: Optional[TextIO], detector: Any) -> None:
    """Write a detector as indented JSON followed by a newline."""
    out = out if out is not None else sys.stdout
    out.write(json.dumps(_jsonable(detector), indent=2, ensure_ascii=False) + "\n")


def start_detectors(handler: Any, detectors: Sequence[str], by_id: bool = False) -> None:
    """Start detectors by ID or by name pattern, stopping at the first failure."""
    start = (
        handler.start_anomaly_detector_by_id
        if by_id
        else handler.start_anomaly_detector_by_name_pattern
    )
    for detector in detectors:
        start(detector)


def stop_detectors(handler: Any, detectors: Sequence[str], by_id: bool = False) -> None:
    """Stop detectors by ID or by name pattern, stopping at the first failure."""
    stop = (
        handler.stop_anomaly_detector_by_id
        if by_id
        else handler.stop_anomaly_detector_by_name_pattern
    )
    for detector in detectors:
        stop(detector)


def update_detectors(
    handler: Any, file_names: Sequence[str], force: bool = False, start: bool = False
) -> None:
    """Update detectors from configuration files, stopping at the first failure."""
    for name in file_names:
        handler.update_anomaly_detector(name, force, start)


def _as_text(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def add_ad_parser(subparsers: Any) -> argparse.ArgumentParser:
    """Register ``ad`` with its detector sub-commands.

    Each command stores ``run(args, handler)`` and ``command_name`` as defaults.
    """
    parser = subparsers.add_parser(
        AD_COMMAND_NAME,
        help="Manage the Anomaly Detection plugin",
        description="Use the Anomaly Detection commands to create, configure, and manage detectors.",
    )
    parser.set_defaults(
        command_name=AD_COMMAND_NAME, run=lambda args, handler: parser.print_help()
    )
    commands = parser.add_subparsers(dest="ad_command", metavar="sub-command")

    create = commands.add_parser(
        "create",
        help="Create detectors based on JSON files",
        description=(
            "Create detectors based on a local JSON file. To begin, use "
            "`ad create --generate-template` to generate a sample configuration. Save this "
            "template locally and update it for your use case. Then use "
            "`ad create file-path` to create detector."
        ),
    )
    create.add_argument("files", nargs="*", metavar="json-file-path")
    create.add_argument(
        "-g",
        "--generate-template",
        dest="generate_template",
        action="store_true",
        help="Output sample detector configuration",
    )

    def run_create(args: argparse.Namespace, handler: Any) -> None:
        if args.generate_template:
            print(_as_text(handler.generate_anomaly_detector()))
            return
        if not args.files:
            create.print_usage(sys.stdout)
            return
        create_detectors(handler, args.files)

    create.set_defaults(command_name="create", run=run_create)

    delete = commands.add_parser(
        "delete",
        help="Delete detectors based on a list of IDs, names, or name regex patterns",
        description="Delete detectors based on list of IDs, names, or name regex patterns. "
        + _PATTERN_NOTE,
    )
    delete.add_argument("detectors", nargs="+", metavar="detector_name")
    delete.add_argument(
        "-f", "--force", action="store_true", help="Delete the detector even if it is running"
    )
    delete.add_argument("--id", action="store_true", help="Input is detector ID")
    delete.set_defaults(
        command_name="delete",
        run=lambda args, handler: delete_detectors(handler, args.detectors, args.force, args.id),
    )

    get = commands.add_parser(
        "get",
        help="Get detectors based on a list of IDs, names, or name regex patterns",
        description="Get detectors based on a list of IDs, names, or name regex patterns. "
        + _PATTERN_NOTE,
    )
    get.add_argument("detectors", nargs="+", metavar="detector_name")
    get.add_argument("--id", action="store_true", help="Input is detector ID")

    def run_get(args: argparse.Namespace, handler: Any) -> None:
        for detector in get_detectors(handler, args.detectors, args.id):
            print_detector(sys.stdout, detector)

    get.set_defaults(command_name="get", run=run_get)

    start = commands.add_parser(
        "start",
        help="Start detectors based on a list of IDs, names, or name regex patterns",
        description="Start detectors based on a list of IDs, names, or name regex patterns. "
        + _PATTERN_NOTE,
    )
    start.add_argument("detectors", nargs="+", metavar="detector_name")
    start.add_argument("--id", action="store_true", help="Input is detector ID")
    start.set_defaults(
        command_name="start",
        run=lambda args, handler: start_detectors(handler, args.detectors, args.id),
    )

    stop = commands.add_parser(
        "stop",
        help="Stop detectors based on a list of IDs, names, or name regex patterns",
        description="Stop detectors based on a list of IDs, names, or name regex patterns. "
        + _PATTERN_NOTE,
    )
    stop.add_argument("detectors", nargs="*", metavar="detector_name")
    stop.add_argument("--id", action="store_true", help="Input is detector ID")

    def run_stop(args: argparse.Namespace, handler: Any) -> None:
        if not args.detectors:
            stop.print_usage(sys.stdout)
            return
        stop_detectors(handler, args.detectors, args.id)

    stop.set_defaults(command_name="stop", run=run_stop)

    update = commands.add_parser(
        "update",
        help="Update detectors based on JSON files",
        description=(
            "Update detectors based on JSON files. To begin, use "
            "`ad get detector-name > detector_to_be_updated.json` to download the detector. "
            "Modify the file, and then use `ad update file-path` to update the detector."
        ),
    )
    update.add_argument("files", nargs="+", metavar="json-file-path")
    update.add_argument(
        "-f", "--force", action="store_true", help="Stop detector and update forcefully"
    )
    update.add_argument(
        "-s", "--start", action="store_true", help="Start detector if update is successful"
    )
    update.set_defaults(
        command_name="update",
        run=lambda args, handler: update_detectors(handler, args.files, args.force, args.start),
    )
    return parser