"""
crudviews specification types.

Plain data describing entities, fields, generic views and the HTTP
bindings they expand into. Nothing here touches a web framework.
"""

from crudviews.specs.entity import Entity, FieldDescriptor, Instance
from crudviews.specs.views import (
    GenericView,
    HttpMethod,
    LogicalOperation,
    OperationBinding,
    SchemaTriple,
    SchemaVariant,
    Visibility,
    get_schema_name,
    resolve_operations,
)

__all__ = [
    "Entity",
    "FieldDescriptor",
    "GenericView",
    "HttpMethod",
    "Instance",
    "LogicalOperation",
    "OperationBinding",
    "SchemaTriple",
    "SchemaVariant",
    "Visibility",
    "get_schema_name",
    "resolve_operations",
]
