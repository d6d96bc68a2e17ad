"""
Model generator - builds Pydantic models from registered JSON schemas.

FastAPI validates request bodies and serializes responses through pydantic,
so every schema in the registry gets a model named after its ``$id``.
"""

import keyword
from datetime import date, datetime, time
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, create_model

# =============================================================================
# Type Mapping
# =============================================================================

_FORMAT_TYPES: dict[str, type] = {
    "date-time": datetime,
    "date": date,
    "time": time,
    "uuid": UUID,
}

_JSON_TYPES: dict[str, Any] = {
    "string": str,
    "integer": int,
    "number": float,
    "boolean": bool,
    "object": dict[str, Any],
}


class GeneratedModel(BaseModel):
    """Base for generated models: reads attributes, ignores unknown keys."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        extra="ignore",
        protected_namespaces=(),
    )


def _is_nullable(schema: dict[str, Any]) -> bool:
    json_type = schema.get("type")
    if isinstance(json_type, list) and "null" in json_type:
        return True
    return bool(schema.get("nullable"))


def _schema_to_python(schema: dict[str, Any]) -> Any:
    """
    Convert a property schema to a Python type.

    Unknown shapes (``$ref``, combinators, missing type) become ``Any``.
    """
    values = tuple(v for v in schema.get("enum") or () if v is not None)
    if values:
        return Literal[values]  # type: ignore[valid-type]

    json_type = schema.get("type")
    if isinstance(json_type, list):
        non_null = [t for t in json_type if t != "null"]
        json_type = non_null[0] if len(non_null) == 1 else None

    if json_type == "string" and schema.get("format") in _FORMAT_TYPES:
        return _FORMAT_TYPES[schema["format"]]
    if json_type == "array":
        items = schema.get("items")
        return list[_schema_to_python(items)] if isinstance(items, dict) else list[Any]  # type: ignore[misc]
    return _JSON_TYPES.get(json_type, Any)  # type: ignore[arg-type]


def _field_kwargs(schema: dict[str, Any]) -> dict[str, Any]:
    kwargs: dict[str, Any] = {}
    if schema.get("description"):
        kwargs["description"] = schema["description"]
    if "maxLength" in schema:
        kwargs["max_length"] = schema["maxLength"]
    if "minLength" in schema:
        kwargs["min_length"] = schema["minLength"]
    if "pattern" in schema:
        kwargs["pattern"] = schema["pattern"]
    if "minimum" in schema:
        kwargs["ge"] = schema["minimum"]
    if "maximum" in schema:
        kwargs["le"] = schema["maximum"]
    return kwargs


def _python_name(name: str) -> str:
    """Attribute name for a field; the JSON name becomes an alias when they differ."""
    candidate = name if name.isidentifier() else "".join(c if c.isalnum() else "_" for c in name)
    if (
        not candidate.isidentifier()
        or keyword.iskeyword(candidate)
        or candidate.startswith("_")
        or hasattr(BaseModel, candidate)
    ):
        candidate = f"field_{candidate.lstrip('_')}"
    return candidate


def _build_field_info(
    name: str, schema: dict[str, Any], required: bool, optional_nullable: bool = False
) -> tuple[Any, Any]:
    """
    Build the ``create_model`` field tuple for one property.

    An optional field defaults to None but only accepts an explicit null when
    its schema is nullable, or when ``optional_nullable`` is set.

    Returns:
        Tuple of (type, FieldInfo)
    """
    python_type = _schema_to_python(schema)
    if _is_nullable(schema) or (optional_nullable and not required):
        python_type = python_type | None if python_type is not Any else Any

    kwargs = _field_kwargs(schema)
    attr = _python_name(name)
    if attr != name:
        kwargs["alias"] = name
    if not required:
        kwargs["default"] = None

    return (python_type, Field(**kwargs))


# =============================================================================
# Model Generation
# =============================================================================


def schema_to_model(
    schema: dict[str, Any], name: str | None = None, optional_nullable: bool = False
) -> type[BaseModel]:
    """
    Generate a Pydantic model from an object schema.

    Args:
        schema: Object schema with ``properties`` and ``required``
        name: Model name, defaults to the schema ``$id``
        optional_nullable: Let optional fields hold None (response models read
            instances whose unset fields are None)

    Example:
        >>> Widget = schema_to_model({"$id": "Widget", "properties": {"name": {"type": "string"}}, "required": ["name"]})
        >>> Widget(name="bolt").name
        'bolt'
    """
    model_name = name or schema.get("$id") or schema.get("title") or "Model"
    required = set(schema.get("required", []))

    field_definitions: dict[str, Any] = {}
    for prop_name, prop_schema in schema.get("properties", {}).items():
        attr = _python_name(prop_name)
        field_definitions[attr] = _build_field_info(
            prop_name, prop_schema, prop_name in required, optional_nullable
        )

    return create_model(
        model_name,
        __base__=GeneratedModel,
        __doc__=schema.get("description") or f"Generated model for {model_name}",
        **field_definitions,
    )


def params_schema(params: dict[str, Any]) -> dict[str, Any]:
    """
    Normalize a path parameter spec into an object schema.

    ``{"id": "integer"}`` and ``{"id": {"type": "integer"}}`` are equivalent.
    All path parameters are required.
    """
    properties = {
        name: {"type": spec} if isinstance(spec, str) else dict(spec)
        for name, spec in params.items()
    }
    return {"type": "object", "properties": properties, "required": list(properties)}


def params_to_model(name: str, params: dict[str, Any]) -> type[BaseModel]:
    """Generate the model validating a route's path parameters."""
    return schema_to_model(params_schema(params), name=name)
