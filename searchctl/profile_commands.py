"""Named connection profiles: model, validation, prompts and the profile sub-commands."""

from __future__ import annotations

import argparse
import getpass
import os
import stat
import sys
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Iterable, Optional, Sequence, TextIO

FILE_PERMISSION = 0o600
DEFAULT_MAX_RETRY = 3
DEFAULT_TIMEOUT = 10
AUTH_TYPES = ("disabled", "basic", "aws-iam", "cert")
_PADDING = 3

ReadLine = Callable[[], str]


class ProfileError(Exception):
    """A profile operation failed."""


@dataclass
class AWSIAM:
    """AWS IAM settings for signing requests."""

    profile_name: str = ""
    service_name: str = ""


@dataclass
class Trust:
    """Certificate and key file locations for TLS authentication."""

    ca_file_path: Optional[str] = None
    client_certificate_file_path: Optional[str] = None
    client_key_file_path: Optional[str] = None


@dataclass
class Profile:
    """A named set of settings and credentials for a cluster."""

    name: str
    endpoint: str
    user_name: str = ""
    password: str = field(default="", repr=False)
    aws: Optional[AWSIAM] = None
    certificate: Optional[Trust] = None
    max_retry: Optional[int] = None
    timeout: Optional[int] = None


def check_config_permissions(path: str) -> int:
    """Return the file's permission bits; raise ProfileError unless only the owner may use it."""
    try:
        info = os.stat(path)
    except OSError as exc:
        raise ProfileError(f"failed to get config file info due to: {exc}") from exc
    mode = stat.S_IMODE(info.st_mode) & 0o777
    if mode != FILE_PERMISSION:
        raise ProfileError(
            f"permissions {mode:o} for '{path}' are too open. "
            "It is required that your config file is NOT accessible by others"
        )
    return mode


def create_profile(controller: Any, profile: Profile) -> None:
    """Store a new profile through the controller."""
    try:
        controller.create_profile(profile)
    except Exception as exc:
        raise ProfileError(f"failed to create profile {profile} due to: {exc}") from exc


def validate_profile_name(name: str, controller: Any) -> None:
    """Raise ProfileError if a profile with this name already exists."""
    if name in controller.get_profiles_map():
        raise ProfileError(f"profile {name} already exists")


def delete_profiles(controller: Any, names: Sequence[str]) -> None:
    """Delete the named profiles."""
    controller.delete_profiles(list(names))


def format_profile_table(profiles: Iterable[Profile]) -> str:
    """Render profiles as an aligned table of name, user name and endpoint."""
    rows = [
        ("Name", "UserName", "Endpoint-url"),
        ("----", "--------", "------------"),
        *((p.name, p.user_name, p.endpoint) for p in profiles),
    ]
    widths = [max(len(cell) for cell in column) + _PADDING for column in zip(*rows)]
    gap = " " * _PADDING
    return "".join(
        "".join(cell.ljust(width) + gap for cell, width in zip(row, widths)) + "\n"
        for row in rows
    )


def list_profiles(controller: Any, verbose: bool, out: Optional[TextIO] = None) -> None:
    """Print profile names, or a full table when ``verbose``."""
    out = out if out is not None else sys.stdout
    if verbose:
        profiles = controller.get_profiles()
        if not profiles:
            raise ProfileError("no profiles found")
        out.write(format_profile_table(profiles))
        return
    names = controller.get_profile_names()
    if not names:
        raise ProfileError("no profiles found")
    for name in names:
        print(name, file=out)


def _prompt(message: str) -> None:
    print(message, end="", flush=True)


def _require_non_empty(value: str) -> bool:
    if value:
        return True
    _prompt("Value cannot be empty, please enter non-empty value: ")
    return False


def _read_masked() -> str:
    return getpass.getpass("")


def prompt_text(read_line: ReadLine, is_valid: Optional[Callable[[str], bool]] = None) -> str:
    """Read the first word of a line, asking again until ``is_valid`` accepts it."""
    while True:
        words = read_line().split()
        response = words[0] if words else ""
        if is_valid is None or is_valid(response):
            return response.strip()


def read_basic_auth(
    profile: Profile, read_text: ReadLine = input, read_secret: ReadLine = _read_masked
) -> Profile:
    """Ask for a user name and password and return the profile carrying them."""
    _prompt("Username: ")
    user_name = prompt_text(read_text, _require_non_empty)
    _prompt("Password: ")
    password = read_secret()
    while not _require_non_empty(password):
        password = read_secret()
    print()
    return replace(profile, user_name=user_name, password=password)


def read_aws_iam_auth(profile: Profile, read_text: ReadLine = input) -> Profile:
    """Ask for AWS profile and service names and return the profile carrying them."""
    _prompt(
        "AWS profile name (leave blank if you want to provide credentials "
        "using environment variables): "
    )
    profile_name = prompt_text(read_text)
    _prompt(
        "AWS service name where your cluster is deployed "
        "(for Amazon Elasticsearch Service, use 'es'. For EC2, use 'ec2'): "
    )
    service_name = prompt_text(read_text, _require_non_empty)
    return replace(profile, aws=AWSIAM(profile_name=profile_name, service_name=service_name))


def read_certificate_auth(profile: Profile, read_text: ReadLine = input) -> Profile:
    """Ask for certificate, key and CA file paths and return the profile carrying them."""
    trust = Trust()
    _prompt("Certificate file path (leave blank if N/A): ")
    certificate_path = prompt_text(read_text)
    if certificate_path:
        trust.client_certificate_file_path = certificate_path
        _prompt("Key file path: ")
        trust.client_key_file_path = prompt_text(read_text, _require_non_empty)
    _prompt("Certificate Authority's (CA) certificate file path (leave blank if N/A): ")
    ca_path = prompt_text(read_text)
    if ca_path:
        trust.ca_file_path = ca_path
    return replace(profile, certificate=trust)


def _run_create(
    args: argparse.Namespace,
    controller: Any,
    read_text: ReadLine = input,
    read_secret: ReadLine = _read_masked,
) -> None:
    validate_profile_name(args.name, controller)
    profile = Profile(
        name=args.name,
        endpoint=args.endpoint,
        max_retry=args.max_retry,
        timeout=args.timeout,
    )
    auth_type = args.auth_type
    if auth_type == "basic":
        profile = read_basic_auth(profile, read_text, read_secret)
    elif auth_type == "aws-iam":
        profile = read_aws_iam_auth(profile, read_text)
    elif auth_type == "cert":
        profile = read_certificate_auth(profile, read_text)
    elif auth_type != "disabled":
        raise ProfileError(
            "invalid value for auth-type. Use --help -h command to see permitted values"
        )
    create_profile(controller, profile)
    print("Profile created successfully.")


def _run_delete(args: argparse.Namespace, controller: Any) -> None:
    delete_profiles(controller, args.names)
    print("Profile deleted successfully.")


def _run_list(args: argparse.Namespace, controller: Any) -> None:
    list_profiles(controller, args.verbose)


def add_profile_parser(subparsers: Any) -> argparse.ArgumentParser:
    """Register ``profile`` with its create, delete and list sub-commands.

    Each command stores ``run(args, controller)`` and ``command_name`` as defaults.
    """
    parser = subparsers.add_parser(
        "profile",
        help="Manage a collection of settings and credentials that you can apply to a command",
        description=(
            "A named profile is a collection of settings and credentials that you can apply "
            "to a command. To configure a default profile for commands, either name it in "
            "an environment variable or create a profile named `default`."
        ),
    )
    parser.set_defaults(command_name="profile", run=lambda args, controller: parser.print_help())
    commands = parser.add_subparsers(dest="profile_command", metavar="sub-command")

    create = commands.add_parser(
        "create",
        help="Create profile",
        description="Create named profile to save settings and credentials.",
    )
    create.add_argument("-n", "--name", required=True, help="Create profile with this name")
    create.add_argument(
        "-e", "--endpoint", required=True, help="Create profile with this endpoint or host"
    )
    create.add_argument(
        "-a",
        "--auth-type",
        required=True,
        help="Authentication type: " + ", ".join(AUTH_TYPES),
    )
    create.add_argument(
        "-m",
        "--max-retry",
        type=int,
        default=DEFAULT_MAX_RETRY,
        help="Maximum retry attempts allowed if transient problems occur",
    )
    create.add_argument(
        "-t",
        "--timeout",
        type=int,
        default=DEFAULT_TIMEOUT,
        help="Maximum time allowed for connection in seconds",
    )
    create.set_defaults(command_name="create", run=_run_create)

    delete = commands.add_parser(
        "delete",
        help="Delete profiles by names",
        description="Delete profiles by names from the config file permanently.",
    )
    delete.add_argument("names", nargs="+", metavar="profile_name")
    delete.set_defaults(command_name="delete", run=_run_delete)

    listing = commands.add_parser(
        "list",
        help="List profiles from the config file",
        description="List profiles from the config file",
    )
    listing.add_argument(
        "-l",
        "--verbose",
        action="store_true",
        help="Shows information like name, endpoint, user",
    )
    listing.set_defaults(command_name="list", run=_run_list)
    return parser