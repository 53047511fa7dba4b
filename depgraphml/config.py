"""Configuration helpers backed by environment variables.

Values may also come from a ``.env`` file in the working directory (or any
parent directory found by :func:`dotenv.find_dotenv`). Variables already set
in the process environment always win over the file.
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv

DEFAULT_MVN = "mvn"
DEFAULT_GRADLE = "gradle"
DEFAULT_GRADLE_CONFIGURATION = "runtimeClasspath"
DEFAULT_TIMEOUT = 300
DEFAULT_OUTPUT = "dependencies.graphml"
DEFAULT_LOG_FILE = "debug.log"
DEFAULT_LOG_LEVEL = "DEBUG"


@lru_cache(maxsize=1)
def _load_environment() -> None:
    """Load ``.env`` once per process."""
    load_dotenv(find_dotenv(usecwd=True), override=False)


def get_env(key: str, default: Optional[str] = None) -> Optional[str]:
    _load_environment()
    return os.environ.get(key, default)


def get_mvn_executable() -> str:
    return get_env("DEPGRAPHML_MVN", DEFAULT_MVN)


def get_gradle_executable(project_dir: Path = Path(".")) -> str:
    """Explicit setting first, then the project's wrapper, then plain gradle."""
    configured = get_env("DEPGRAPHML_GRADLE")
    if configured:
        return configured

    wrapper = Path(project_dir) / "gradlew"
    if wrapper.exists():
        return str(wrapper.resolve())
    return DEFAULT_GRADLE


def get_gradle_configuration() -> str:
    return get_env("DEPGRAPHML_GRADLE_CONFIGURATION", DEFAULT_GRADLE_CONFIGURATION)


def get_timeout() -> int:
    raw = get_env("DEPGRAPHML_TIMEOUT")
    if not raw:
        return DEFAULT_TIMEOUT

    try:
        timeout = int(raw)
    except ValueError:
        logging.warning(f"Invalid DEPGRAPHML_TIMEOUT {raw!r}, using {DEFAULT_TIMEOUT}s")
        return DEFAULT_TIMEOUT

    if timeout <= 0:
        logging.warning(f"DEPGRAPHML_TIMEOUT must be positive, using {DEFAULT_TIMEOUT}s")
        return DEFAULT_TIMEOUT
    return timeout


def get_output_path() -> Path:
    return Path(get_env("DEPGRAPHML_OUTPUT", DEFAULT_OUTPUT))


def get_log_file() -> str:
    return get_env("DEPGRAPHML_LOG_FILE", DEFAULT_LOG_FILE)


def get_log_level() -> int:
    name = get_env("DEPGRAPHML_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.DEBUG


def setup_logging() -> None:
    logging.basicConfig(
        filename=get_log_file(),
        level=get_log_level(),
        filemode="w",
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


__all__ = [
    "get_env",
    "get_mvn_executable",
    "get_gradle_executable",
    "get_gradle_configuration",
    "get_timeout",
    "get_output_path",
    "setup_logging",
]
