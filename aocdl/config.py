import json
import logging
import os
from os import PathLike
from pathlib import Path
from typing import Any, Final, Mapping

from .errors import ConfigError
from .settings import Settings, merge_all

CONFIG_FILENAME: Final = ".aocdlconfig"
SESSION_ENV: Final = "AOC_SESSION"

logger = logging.getLogger(__name__)


def _home_dir() -> Path | None:
    try:
        return Path.home()
    except (KeyError, RuntimeError):
        # no passwd entry and no $HOME
        return None


def _cwd() -> Path | None:
    try:
        return Path.cwd()
    except OSError:
        return None


def config_paths(
    explicit: str | PathLike[str] | None = None,
    home: Path | None = None,
    cwd: Path | None = None,
) -> list[Path]:
    """Candidate config files, lowest precedence first.

    An explicit path replaces the search entirely. Otherwise the file in the
    home directory is read first and the one in the working directory is
    layered over it, unless both directories are the same.
    """
    if explicit:
        return [Path(explicit)]

    if home is None:
        home = _home_dir()
    if cwd is None:
        cwd = _cwd()

    paths = []
    if home is not None:
        paths.append(home / CONFIG_FILENAME)
    if home is None or cwd is None or cwd != home:
        paths.append(Path(CONFIG_FILENAME))
    return paths


def _get_str(data: Mapping[str, Any], key: str, path: Path) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ConfigError(f"{path}: '{key}' must be a string")
    return value


def _get_int(data: Mapping[str, Any], key: str, path: Path) -> int:
    value = data.get(key)
    if value is None:
        return 0
    # bool is a subclass of int, reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{path}: '{key}' must be an integer")
    return value


def load_config(path: Path) -> Settings | None:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"failed to read config file '{path}': {e}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigError(f"failed to parse config file '{path}': {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: config root must be a JSON object")

    logger.info("Loaded config from %s", path)
    return Settings(
        session_cookie=_get_str(data, "session-cookie", path),
        output=_get_str(data, "output", path),
        year=_get_int(data, "year", path),
        day=_get_int(data, "day", path),
    )


def load_configs(explicit: str | PathLike[str] | None = None) -> Settings:
    return merge_all(load_config(p) for p in config_paths(explicit))


def load_environment(environ: Mapping[str, str] | None = None) -> Settings:
    if environ is None:
        environ = os.environ
    cookie = environ.get(SESSION_ENV, "").strip()
    if cookie:
        logger.info("Using session cookie from $%s", SESSION_ENV)
    return Settings(session_cookie=cookie)
