"""
Configuration models.

Defaults for route generation and schema derivation can be set in the
``[tool.crudviews]`` table of ``pyproject.toml`` or at the top level of a
``crudviews.toml`` file:

    [tool.crudviews]
    lookup_field = "uuid"
    lookup_url_param = "uuid"
    default_read_only = ["id", "uuid", "created_at", "updated_at"]
    tags = ["api"]

    [tool.crudviews.descriptions]
    LIST = "Fetch all records."
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_READ_ONLY: tuple[str, ...] = ("id", "createdAt", "updatedAt", "created_at", "updated_at")

CONFIG_FILE_NAME = "crudviews.toml"


class CrudViewsConfig(BaseModel):
    """Project-wide defaults for generated views."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    lookup_field: str = Field(default="id", description="Entity field used by the default lookup")
    lookup_url_param: str = Field(
        default="id", description="Path parameter carrying the lookup value"
    )
    default_read_only: tuple[str, ...] = Field(
        default=DEFAULT_READ_ONLY,
        description="Fields that are read-only unless listed as write-only",
    )
    tags: list[str] = Field(default_factory=list, description="Default OpenAPI tags")
    descriptions: dict[str, str] = Field(
        default_factory=dict, description="Default description overrides per operation key"
    )
    operation_ids: dict[str, str] = Field(
        default_factory=dict, description="Default operation id overrides per operation key"
    )


def _read_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def load_config(path: Path | str | None = None) -> CrudViewsConfig:
    """
    Load configuration.

    Args:
        path: A ``pyproject.toml``, a ``crudviews.toml`` or a directory holding
            either. Defaults to the current directory.

    Returns:
        CrudViewsConfig with parsed values or defaults
    """
    target = Path(path) if path is not None else Path.cwd()

    if target.is_dir():
        candidates = [target / CONFIG_FILE_NAME, target / "pyproject.toml"]
        target = next((c for c in candidates if c.exists()), candidates[-1])

    if not target.exists():
        return CrudViewsConfig()

    data = _read_toml(target)
    if target.name == "pyproject.toml":
        data = data.get("tool", {}).get("crudviews", {})

    if not data:
        return CrudViewsConfig()

    return CrudViewsConfig.model_validate(data)
