"""Application version lookup."""

from __future__ import annotations

import tomllib
from functools import lru_cache
from importlib import metadata
from pathlib import Path

DISTRIBUTION_NAME = "cookiesifter"
UNKNOWN_VERSION = "0.0.0"


@lru_cache(maxsize=1)
def get_app_version() -> str:
    """
    Return the version of the running application.

    The installed distribution metadata wins; a source checkout falls back
    to the ``[project]`` table of ``pyproject.toml``.
    """
    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        pass

    pyproject_path = Path(__file__).resolve().parents[2] / "pyproject.toml"
    try:
        with pyproject_path.open("rb") as handle:
            project = tomllib.load(handle).get("project", {})
    except (OSError, tomllib.TOMLDecodeError):
        return UNKNOWN_VERSION
    return str(project.get("version") or UNKNOWN_VERSION)
