"""The k-NN plugin commands: statistics and index warmup."""

from __future__ import annotations

import argparse
import sys
from typing import Any, Optional, Sequence, TextIO

KNN_COMMAND_NAME = "knn"
STATS_COMMAND_NAME = "stats"
WARMUP_COMMAND_NAME = "warmup"


class WarmupError(Exception):
    """Some shards could not be loaded into memory."""

    def __init__(self, failed: int, total: int) -> None:
        super().__init__(f"{failed}/{total} shards were failed to load into memory")
        self.failed = failed
        self.total = total


def _as_text(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def get_statistics(handler: Any, nodes: str, names: str, out: Optional[TextIO] = None) -> None:
    """Print the plugin statistics for the given nodes and stat names."""
    out = out if out is not None else sys.stdout
    stats = handler.get_statistics(nodes, names)
    print(_as_text(stats), file=out)


def warmup_indices(handler: Any, indices: Sequence[str], out: Optional[TextIO] = None) -> None:
    """Load the graphs of every shard of ``indices`` into memory.

    Raises WarmupError when any shard failed to load.
    """
    out = out if out is not None else sys.stdout
    shards = handler.warmup_indices(list(indices))
    if shards.failed > 0:
        raise WarmupError(shards.failed, shards.total)
    print(f"successfully loaded {shards.total} shards into memory", file=out)


def _run_stats(args: argparse.Namespace, handler: Any) -> None:
    get_statistics(handler, args.nodes, args.stat_names)


def _run_warmup(args: argparse.Namespace, handler: Any) -> None:
    warmup_indices(handler, args.indices)


def add_knn_parser(subparsers: Any) -> argparse.ArgumentParser:
    """Register ``knn`` with its stats and warmup sub-commands.

    Each command stores ``run(args, handler)`` and ``command_name`` as defaults.
    """
    parser = subparsers.add_parser(
        KNN_COMMAND_NAME,
        help="Manage the k-NN plugin",
        description="Use the k-NN commands to perform operations like stats, warmup.",
    )
    parser.set_defaults(
        command_name=KNN_COMMAND_NAME, run=lambda args, handler: parser.print_help()
    )
    commands = parser.add_subparsers(dest="knn_command", metavar="sub-command")

    stats = commands.add_parser(
        STATS_COMMAND_NAME,
        help="Display current status of the k-NN Plugin",
        description="Display current status of the k-NN Plugin.",
    )
    stats.add_argument(
        "-n", "--nodes", default="", help="Input is list of node Ids, separated by ','"
    )
    stats.add_argument(
        "-s",
        "--stat-names",
        dest="stat_names",
        default="",
        help="Input is list of stats names, separated by ','",
    )
    stats.set_defaults(command_name=STATS_COMMAND_NAME, run=_run_stats)

    warmup = commands.add_parser(
        WARMUP_COMMAND_NAME,
        help="Warmup shards for given indices",
        description=(
            "Warmup command loads all graphs for all of the shards (primaries and replicas) "
            "for given indices into native memory. This is an asynchronous operation. If the "
            "command times out, the operation will still be going on in the cluster. To "
            "monitor this, use the _tasks API. Use the `knn stats` command to verify whether "
            "indices are successfully loaded into memory."
        ),
    )
    warmup.add_argument("indices", nargs="+", metavar="index")
    warmup.set_defaults(command_name=WARMUP_COMMAND_NAME, run=_run_warmup)
    return parser