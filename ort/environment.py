"""Host environment facts and the well-known ORT directories.

Usage:
    env = Environment()
    env.processors, env.max_memory       # shown in the startup banner
    ort_config_directory()                # $ORT_CONFIG_DIR or ~/.ort/config
"""

import os
import platform
import sys
from pathlib import Path

import psutil

from ort import __version__

ORT_NAME = "ort"
ORT_CONFIG_FILENAME = "config.yml"
ORT_CONFIG_DIR_ENV_NAME = "ORT_CONFIG_DIR"
ORT_DATA_DIR_ENV_NAME = "ORT_DATA_DIR"

# Host variables that influence the tools run by ORT and are worth echoing.
RELEVANT_VARIABLES = (
    "http_proxy",
    "https_proxy",
    "no_proxy",
    "HTTP_PROXY",
    "HTTPS_PROXY",
    "NO_PROXY",
    "JAVA_HOME",
    "ANDROID_HOME",
    "GOPATH",
    "PYTHONPATH",
    "REQUESTS_CA_BUNDLE",
    "TERM",
)


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

def expand_tilde(path: str) -> str:
    """Replace a leading ``~`` with the user's home directory."""
    return os.path.expanduser(path)


def ort_data_directory() -> Path:
    value = os.environ.get(ORT_DATA_DIR_ENV_NAME)
    if value:
        return Path(expand_tilde(value))
    return Path.home() / f".{ORT_NAME}"


def ort_config_directory() -> Path:
    value = os.environ.get(ORT_CONFIG_DIR_ENV_NAME)
    if value:
        return Path(expand_tilde(value))
    return ort_data_directory() / "config"


def default_config_file() -> Path:
    return ort_config_directory() / ORT_CONFIG_FILENAME


def fixup_user_home() -> None:
    """Make sure ``HOME`` points to a real directory.

    Some container setups run as a user without a home entry, which leaves
    ``HOME`` unset or set to ``?``. Fall back to the user profile on Windows
    and to the password database elsewhere.
    """
    home = os.environ.get("HOME", "")
    if home and home != "?":
        return

    fallback = os.environ.get("USERPROFILE")
    if not fallback:
        try:
            import pwd

            fallback = pwd.getpwuid(os.getuid()).pw_dir
        except (ImportError, KeyError):
            fallback = None

    if fallback:
        os.environ["HOME"] = fallback


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------

class Environment:
    """Snapshot of the interpreter and host the toolkit is running on."""

    def __init__(self, environ: dict[str, str] | None = None) -> None:
        self._environ = os.environ if environ is None else environ
        self.ort_version = __version__
        self.python_version = platform.python_version()
        self.os = f"{platform.system()} {platform.release()}".strip() or sys.platform
        self.processors = psutil.cpu_count(logical=True) or 1

    @property
    def max_memory(self) -> int:
        """Memory available to this process in bytes.

        Uses the address space limit when one is set, the total physical
        memory otherwise.
        """
        total = psutil.virtual_memory().total
        try:
            import resource

            soft, _ = resource.getrlimit(resource.RLIMIT_AS)
        except (ImportError, ValueError, OSError):
            return total

        if soft == resource.RLIM_INFINITY or soft <= 0:
            return total
        return min(soft, total)

    @property
    def variables(self) -> dict[str, str]:
        return {
            name: self._environ[name]
            for name in RELEVANT_VARIABLES
            if self._environ.get(name)
        }
