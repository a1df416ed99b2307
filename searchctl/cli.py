"""Command-line entry point that wires every command group together."""

from __future__ import annotations

import argparse
import sys
from typing import Any, Callable, Optional, Sequence

from .ad_commands import add_ad_parser
from .client import new_client
from .completion import add_completion_parser
from .curl_commands import add_curl_parser
from .knn_commands import add_knn_parser
from .profile_commands import ProfileError, add_profile_parser, check_config_permissions
from .root import (
    ROOT_COMMAND_NAME,
    build_version_string,
    default_config_file_path,
    display_error,
    get_config_file_path,
    get_profile,
)

ControllerFactory = Callable[[str], Any]
HandlerFactory = Callable[[Any, Any], Any]


class _Lazy:
    """Builds its target on first attribute access and forwards to it."""

    def __init__(self, build: Callable[[], Any]) -> None:
        self._build = build
        self._target: Any = None

    def __getattr__(self, name: str) -> Any:
        if self._target is None:
            self._target = self._build()
        return getattr(self._target, name)


def _add_global_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help=f"Configuration file, default is {default_config_file_path()}",
    )
    parser.add_argument(
        "-p",
        "--profile",
        default=None,
        help="Use a specific profile from your configuration file",
    )


def _global_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(add_help=False, allow_abbrev=False)
    _add_global_options(parser)
    return parser


def build_parser() -> argparse.ArgumentParser:
    """Build the root parser with every command group registered."""
    parser = argparse.ArgumentParser(
        prog=ROOT_COMMAND_NAME,
        description=f"{ROOT_COMMAND_NAME} is a unified command line interface for managing clusters",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"{ROOT_COMMAND_NAME} version {build_version_string()}",
    )
    _add_global_options(parser)
    commands = parser.add_subparsers(dest="command", metavar="command")
    add_ad_parser(commands).set_defaults(service="ad")
    add_completion_parser(commands).set_defaults(service="completion")
    add_curl_parser(commands).set_defaults(service="curl")
    add_knn_parser(commands).set_defaults(service="knn")
    add_profile_parser(commands).set_defaults(service="profile")
    return parser


def _config_path(config_flag: Optional[str]) -> str:
    try:
        return get_config_file_path(config_flag)
    except OSError as exc:
        raise ProfileError(f"failed to get config file due to: {exc}") from exc


def _exit_code(exc: SystemExit) -> int:
    if exc.code is None:
        return 0
    return exc.code if isinstance(exc.code, int) else 1


def _run(
    argv: Optional[Sequence[str]],
    profile_controller: Optional[ControllerFactory] = None,
    ad_handler: Optional[HandlerFactory] = None,
    knn_handler: Optional[HandlerFactory] = None,
    curl_handler: Optional[HandlerFactory] = None,
) -> int:
    arguments = list(sys.argv[1:] if argv is None else argv)
    parser = build_parser()
    try:
        global_options, rest = _global_parser().parse_known_args(arguments)
        args = parser.parse_args(rest)
    except SystemExit as exc:
        return _exit_code(exc)
    args.config = global_options.config
    args.profile = global_options.profile

    service = getattr(args, "service", None)
    if service is None:
        parser.print_help()
        return 0

    def controller() -> Any:
        if profile_controller is None:
            raise ProfileError("no profile controller is configured")
        path = _config_path(args.config)
        check_config_permissions(path)
        return profile_controller(path)

    if service == "profile":
        dependency: Any = _Lazy(controller)
    elif service == "completion":
        dependency = parser
    else:
        factory = {"ad": ad_handler, "knn": knn_handler, "curl": curl_handler}[service]

        def build() -> Any:
            if factory is None:
                raise RuntimeError(f"no {service} handler is configured")
            client = new_client()
            profile = get_profile(controller(), args.profile or "")
            return factory(client, profile)

        dependency = _Lazy(build)

    try:
        args.run(args, dependency)
    except Exception as err:
        display_error(err, args.command_name)
        return 1
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command line; return the exit status."""
    return _run(argv)


if __name__ == "__main__":
    sys.exit(main())