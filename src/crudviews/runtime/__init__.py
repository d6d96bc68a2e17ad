"""
crudviews runtime.

This module provides:
- Schema derivation and registration (Out/Post/Patch triples)
- Pydantic model generation from registered schemas
- View composition (generic view -> HTTP bindings)
- The authorization pipeline, hooks and operation handlers
- Route generation against a FastAPI router

Example usage:
    >>> from fastapi import APIRouter, FastAPI
    >>> from crudviews.runtime import SchemaRegistry, generate_routes, register_entity_schemas
    >>>
    >>> registry = SchemaRegistry()
    >>> register_entity_schemas(registry, Widget)
    >>> router = APIRouter()
    >>> generate_routes(router, Widget, "ListCreateAPIView", registry=registry, prefix="/widgets")
    >>> app = FastAPI()
    >>> app.include_router(router)
"""

from crudviews.runtime.fields import extract_fields, fields_from_model, fields_from_table
from crudviews.runtime.handlers import HandlerResult, apply_changes
from crudviews.runtime.hooks import ViewHooks, maybe_await
from crudviews.runtime.model_generator import params_to_model, schema_to_model
from crudviews.runtime.pipeline import AuthorizationPipeline, RequestContext
from crudviews.runtime.route_generator import RouteGenerator, generate_routes
from crudviews.runtime.schema_deriver import classify_field, derive_schemas
from crudviews.runtime.schema_registry import SchemaRegistry, register_entity_schemas
from crudviews.runtime.view_composer import compose_bindings

__all__ = [
    "AuthorizationPipeline",
    "HandlerResult",
    "RequestContext",
    "RouteGenerator",
    "SchemaRegistry",
    "ViewHooks",
    "apply_changes",
    "classify_field",
    "compose_bindings",
    "derive_schemas",
    "extract_fields",
    "fields_from_model",
    "fields_from_table",
    "generate_routes",
    "maybe_await",
    "params_to_model",
    "register_entity_schemas",
    "schema_to_model",
]
