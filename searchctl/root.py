"""Root settings: version, configuration file location, error display and profile lookup."""

from __future__ import annotations

import os
import platform
import sys
from pathlib import Path
from typing import Any, Optional, TextIO

from .profile_commands import FILE_PERMISSION, Profile, ProfileError

ROOT_COMMAND_NAME = "searchctl"
VERSION = "1.0.0"
CONFIG_ENV_VAR = "SEARCHCTL_CONFIG"
FOLDER_PERMISSION = 0o700
_CONFIG_FILE_NAME = "config.yaml"


def build_version_string() -> str:
    """Version followed by operating system and architecture."""
    return f"{VERSION} {platform.system().lower()}/{platform.machine().lower()}"


def _config_root() -> Path:
    try:
        return Path.home()
    except (RuntimeError, KeyError):
        pass
    try:
        return Path.cwd()
    except OSError:
        return Path("")


def default_config_file_path() -> str:
    """Path of the configuration file used when none is given."""
    return str(_config_root() / f".{ROOT_COMMAND_NAME}" / _CONFIG_FILE_NAME)


def create_default_config_file() -> str:
    """Create the default configuration file and its folder if missing; return its path."""
    path = Path(default_config_file_path())
    if path.exists():
        return str(path)
    folder = path.parent
    if not folder.exists():
        folder.mkdir(mode=FOLDER_PERMISSION)
    path.touch()
    os.chmod(path, FILE_PERMISSION)
    return str(path)


def get_config_file_path(config_flag: Optional[str] = None) -> str:
    """Resolve the configuration file: flag, then environment, then the default file."""
    if config_flag:
        return config_flag
    from_env = os.environ.get(CONFIG_ENV_VAR)
    if from_env is not None:
        return from_env
    return create_default_config_file()


def display_error(err: Optional[BaseException], command_name: str, out: Optional[TextIO] = None) -> None:
    """Print the failed command's name and the reason, if there is an error."""
    if err is None:
        return
    out = out if out is not None else sys.stdout
    print(command_name, "Command failed.", file=out)
    print("Reason:", err, file=out)


def get_profile(controller: Any, profile_name: str = "") -> Profile:
    """Return the profile to run with, or raise ProfileError when there is none."""
    profile = controller.get_profile_for_execution(profile_name)
    if profile is None:
        raise ProfileError(
            f"no profile found for execution. Try {ROOT_COMMAND_NAME} profile --help "
            "for more information"
        )
    return profile