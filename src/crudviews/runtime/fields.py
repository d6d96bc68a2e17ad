"""
FieldDescriptor extraction.

Reads an entity's ordered field map, and builds descriptors from the two
model sources crudviews understands out of the box: pydantic models and
SQLAlchemy ``Table`` objects.
"""

from __future__ import annotations

import datetime
import decimal
import logging
import types
import uuid
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, Union, get_args, get_origin

from pydantic import BaseModel

from crudviews.specs.entity import Entity, FieldDescriptor

if TYPE_CHECKING:
    import sqlalchemy

logger = logging.getLogger(__name__)


def extract_fields(entity: Entity, exclude: Iterable[str] = ()) -> list[FieldDescriptor]:
    """
    Ordered field descriptors of an entity, minus excluded names.

    The mapping key is authoritative for the field name.
    """
    excluded = set(exclude)
    descriptors: list[FieldDescriptor] = []
    for name, descriptor in entity.fields.items():
        if name in excluded:
            continue
        if descriptor.name != name:
            descriptor = descriptor.model_copy(update={"name": name})
        descriptors.append(descriptor)
    return descriptors


# =============================================================================
# Pydantic models
# =============================================================================


def _admits_none(annotation: Any) -> bool:
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        return type(None) in get_args(annotation)
    return annotation is None or annotation is type(None)


def fields_from_model(model_cls: type[BaseModel]) -> dict[str, FieldDescriptor]:
    """
    Build descriptors from a pydantic model class.

    Property schemas come from ``model_json_schema()`` with the generated
    ``title`` dropped; nested models stay as opaque ``$ref`` entries.
    """
    schema = model_cls.model_json_schema(by_alias=True)
    properties: dict[str, Any] = schema.get("properties", {})
    required = set(schema.get("required", []))

    descriptors: dict[str, FieldDescriptor] = {}
    for field_name, info in model_cls.model_fields.items():
        name = info.alias or field_name
        prop = dict(properties.get(name, {}))
        prop.pop("title", None)
        description = prop.pop("description", None) or info.description
        descriptors[name] = FieldDescriptor(
            name=name,
            json_schema=prop,
            description=description,
            required=name in required,
            nullable=True if _admits_none(info.annotation) else None,
        )
    return descriptors


# =============================================================================
# SQLAlchemy tables
# =============================================================================


def _python_type_to_json(python_type: type) -> dict[str, Any]:
    """Map a column's Python type to JSON type information."""
    # bool before int: bool is an int subclass
    mapping: list[tuple[type, dict[str, Any]]] = [
        (bool, {"type": "boolean"}),
        (int, {"type": "integer"}),
        (float, {"type": "number"}),
        (decimal.Decimal, {"type": "number"}),
        (str, {"type": "string"}),
        (datetime.datetime, {"type": "string", "format": "date-time"}),
        (datetime.date, {"type": "string", "format": "date"}),
        (datetime.time, {"type": "string", "format": "time"}),
        (uuid.UUID, {"type": "string", "format": "uuid"}),
        (dict, {"type": "object"}),
        (list, {"type": "array"}),
    ]
    for candidate, schema in mapping:
        if issubclass(python_type, candidate):
            return dict(schema)
    return {}


def _column_json_schema(column: sqlalchemy.Column[Any]) -> dict[str, Any]:
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        logger.debug("No python type for column %s; leaving it untyped", column.name)
        return {}
    schema = _python_type_to_json(python_type)
    length = getattr(column.type, "length", None)
    if length and schema.get("type") == "string":
        schema["maxLength"] = length
    return schema


def fields_from_table(table: sqlalchemy.Table) -> dict[str, FieldDescriptor]:
    """
    Build descriptors from a SQLAlchemy ``Table``.

    A column is required when it is not nullable and has neither a client
    nor a server default. Column comments become descriptions.
    """
    descriptors: dict[str, FieldDescriptor] = {}
    for column in table.columns:
        has_default = column.default is not None or column.server_default is not None
        descriptors[column.name] = FieldDescriptor(
            name=column.name,
            json_schema=_column_json_schema(column),
            description=column.comment,
            required=not column.nullable and not has_default,
            nullable=True if column.nullable else None,
        )
    return descriptors
