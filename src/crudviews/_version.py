"""Version lookup for crudviews."""

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

_PYPROJECT = Path(__file__).resolve().parents[2] / "pyproject.toml"


def _source_version() -> str:
    if not _PYPROJECT.exists():
        return "0.0.0"
    with open(_PYPROJECT, "rb") as f:
        return tomllib.load(f).get("project", {}).get("version", "0.0.0")


def get_version() -> str:
    """Installed distribution version, or the one in a source checkout's pyproject."""
    try:
        return version("crudviews")
    except PackageNotFoundError:
        return _source_version()
