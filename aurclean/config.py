"""Configuration for the build cache location, the AUR endpoint and pacman"""

import configparser
import logging
import os
import platform
from typing import Optional, Any, Set

from pathlib import Path

APP_NAME = "aurclean"

_home = os.path.expanduser("~")

xdg_config_home = os.environ.get("XDG_CONFIG_HOME") or os.path.join(_home, ".config")
xdg_cache_home = os.environ.get("XDG_CACHE_HOME") or os.path.join(_home, ".cache")


default_cfg = {
    "dirs": {"build_dir": os.path.join(xdg_cache_home, APP_NAME)},
    "aur": {
        "url": "https://aur.archlinux.org",
        "request_split_n": "150",
        "timeout": "30",
    },
    "pacman": {
        "conf": "/etc/pacman.conf",
        "db_path": "/var/lib/pacman",
        "bin": "pacman",
        "sudo": "sudo",
    },
    "clean": {"workers": "1"},
}

# pacman's own default when CleanMethod is absent
DEFAULT_CLEAN_METHOD = frozenset({"KeepInstalled"})

if platform.system() == "Darwin":
    # macOS
    config_dir = Path("~/Library/Application Support/aurclean").expanduser()
else:
    # Linux or others
    config_dir = Path(os.path.join(xdg_config_home, APP_NAME))


def get_config_file():
    return config_dir / f"{APP_NAME}.cfg"


def init_dirs():
    """Initialize the configuration directory.

    Fails gracefully if the directory cannot be created (e.g., read-only filesystem).
    """
    logger = logging.getLogger(__name__)

    try:
        os.makedirs(config_dir, exist_ok=True)
    except OSError as e:
        logger.warning(
            f"Could not create config directory {config_dir}: {e}. "
            "Using in-memory configuration only."
        )


class ConfigAccessor:
    """
    A dict-like accessor for configuration files.

    This class provides a way to access configuration options with a dictionary-like
    interface while handling missing sections or keys gracefully.

    Usage:
        config = ConfigAccessor()
        value = config.get('section', 'key', default='default')
    """

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize a ConfigAccessor with an optional config file path.

        Args:
            config_path: Path to the configuration file. If None, uses the default path.
        """
        if config_path is None:
            self.config_path = get_config_file()
            # Only the default location is created on demand
            init_dirs()
        else:
            self.config_path = config_path

        self.config = configparser.ConfigParser()
        if self.config_path.exists():
            self.config.read(self.config_path)

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """
        Get a configuration value from the specified section and key.

        Args:
            section: The configuration section
            key: The configuration key
            default: Value to return if the section or key doesn't exist

        Returns:
            The configuration value if it exists, otherwise the default value
        """
        try:
            return self.config[section][key]
        except (KeyError, configparser.NoSectionError, configparser.NoOptionError):
            return default

    def get_int(self, section: str, key: str, default: int) -> int:
        """Get an integer value, falling back to the default on a malformed entry."""
        raw = self.get(section, key)
        if raw is None:
            return default
        try:
            return int(raw)
        except ValueError:
            logging.getLogger(__name__).warning(
                f"Ignoring non-integer value '{raw}' for [{section}] {key}"
            )
            return default


# Create a global config accessor instance
config = ConfigAccessor()


def _get(section: str, key: str) -> str:
    return config.get(section, key, default_cfg[section][key])


def get_build_dir() -> Path:
    """
    Get the configured build cache directory (one subdirectory per package base).

    The directory is not created here: a missing cache root is reported by the
    inventory scan.

    Returns:
        Path to the build directory (defaults to ~/.cache/aurclean)
    """
    return Path(_get("dirs", "build_dir")).expanduser()


def get_vcs_file() -> Path:
    """Path of the persisted VCS info store (defaults to <build_dir>/vcs.json)."""
    vcs_file = config.get("dirs", "vcs_file")
    if vcs_file is None:
        return get_build_dir() / "vcs.json"
    return Path(vcs_file).expanduser()


def get_aur_url() -> str:
    return _get("aur", "url").rstrip("/")


def get_request_split_n() -> int:
    """Maximum number of package names per AUR RPC request."""
    value = config.get_int(
        "aur", "request_split_n", int(default_cfg["aur"]["request_split_n"])
    )
    return max(1, value)


def get_aur_timeout() -> float:
    raw = _get("aur", "timeout")
    try:
        return float(raw)
    except ValueError:
        return float(default_cfg["aur"]["timeout"])


def get_pacman_conf() -> Path:
    return Path(_get("pacman", "conf")).expanduser()


def get_pacman_db_path() -> Path:
    return Path(_get("pacman", "db_path")).expanduser()


def get_pacman_bin() -> str:
    return _get("pacman", "bin")


def get_sudo_bin() -> str:
    """Privilege escalation command; an empty value disables it."""
    return _get("pacman", "sudo")


def get_clean_workers() -> int:
    return max(1, config.get_int("clean", "workers", 1))


def read_clean_method(pacman_conf: Optional[Path] = None) -> Set[str]:
    """
    Read the CleanMethod option from the [options] section of pacman.conf.

    pacman.conf contains bare flags (``Color``) and repeated ``Include`` keys,
    so the parser is lenient about both.

    Args:
        pacman_conf: Path to pacman.conf (defaults to the configured one)

    Returns:
        Set of clean methods, e.g. {"KeepInstalled", "KeepCurrent"}
    """
    if pacman_conf is None:
        pacman_conf = get_pacman_conf()

    parser = configparser.ConfigParser(
        allow_no_value=True, strict=False, interpolation=None
    )
    parser.optionxform = str  # type: ignore[assignment]
    try:
        with open(pacman_conf) as f:
            parser.read_file(f)
    except (OSError, configparser.Error) as e:
        logging.getLogger(__name__).debug(
            f"Could not read {pacman_conf}: {e}. Using default CleanMethod."
        )
        return set(DEFAULT_CLEAN_METHOD)

    raw = parser.get("options", "CleanMethod", fallback=None)
    if not raw:
        return set(DEFAULT_CLEAN_METHOD)
    return set(raw.split())
