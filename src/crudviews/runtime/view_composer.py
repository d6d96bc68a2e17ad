"""
View composer - expands a generic view into concrete HTTP bindings.

Every binding of a view shares one path (the caller's prefix). Instance-
scoped views therefore pass a prefix with the lookup parameter, e.g.
``/widgets/{id}``; ``:id`` is accepted and normalized.
"""

import re
from collections.abc import Iterable, Mapping
from typing import Any

from crudviews.runtime.handlers import HANDLERS
from crudviews.runtime.model_generator import params_schema as build_params_schema
from crudviews.specs.views import (
    HttpMethod,
    LogicalOperation,
    OperationBinding,
    SchemaVariant,
    ViewLike,
    get_schema_name,
    resolve_operations,
)
from crudviews.strings import camel_case

_COLON_PARAM_RE = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")

DEFAULT_DESCRIPTIONS: dict[str, str] = {
    "LIST": "Fetch instances.",
    "RETRIEVE": "Retrieve an instance.",
    "CREATE": "Create a new instance.",
    "UPDATE": "Update an instance.",
    "DESTROY": "Destroy an instance.",
}

# Canonical binding order, independent of the order operations were listed in
_CANONICAL_ORDER = (
    LogicalOperation.RETRIEVE,
    LogicalOperation.LIST,
    LogicalOperation.CREATE,
    LogicalOperation.UPDATE,
    LogicalOperation.DESTROY,
)


def normalize_path(path: str) -> str:
    """Rewrite ``:param`` segments as ``{param}``."""
    return _COLON_PARAM_RE.sub(r"{\1}", path)


def default_operation_ids(entity_name: str) -> dict[str, str]:
    """
    Operation ids keyed by RETRIEVE, LIST, CREATE, UPDATE_PATCH, UPDATE_PUT, DESTROY.

    Examples:
        >>> default_operation_ids("Widget")["LIST"]
        'getWidgets'
    """
    return {
        "RETRIEVE": camel_case(f"get {entity_name}"),
        "LIST": camel_case(f"get {entity_name}s"),
        "CREATE": camel_case(f"post {entity_name}"),
        "UPDATE_PATCH": camel_case(f"patch {entity_name}"),
        "UPDATE_PUT": camel_case(f"put {entity_name}"),
        "DESTROY": camel_case(f"delete {entity_name}"),
    }


def _ref(schema_id: str) -> dict[str, Any]:
    return {"$ref": schema_id}


def compose_bindings(
    entity_name: str,
    view: ViewLike,
    *,
    prefix: str = "",
    params: Mapping[str, Any] | None = None,
    tags: Iterable[str] = (),
    descriptions: Mapping[str, str] | None = None,
    operation_ids: Mapping[str, str] | None = None,
    response_schema: dict[str, Any] | None = None,
) -> list[OperationBinding]:
    """
    Produce the bindings of a view for one entity.

    Pure: nothing is registered. UPDATE expands into a PATCH binding (partial
    body) and a PUT binding (full create body) sharing one handler.

    Args:
        entity_name: Entity name the schema identifiers derive from
        view: Generic view, view name/label, or iterable of operation names
        prefix: Route path shared by every binding
        params: Path parameter spec, ``{"id": "integer"}``
        tags: OpenAPI tags
        descriptions: Per-operation description overrides
        operation_ids: Per-key operation id overrides
        response_schema: Replaces the ``{"$ref": <Out>}`` response schema

    Returns:
        Bindings ordered RETRIEVE, LIST, CREATE, PATCH, PUT, DESTROY
    """
    operations = set(resolve_operations(view))
    path = normalize_path(prefix)
    tags = tuple(tags)
    descriptions = {**DEFAULT_DESCRIPTIONS, **(descriptions or {})}
    ids = {**default_operation_ids(entity_name), **(operation_ids or {})}
    params_spec = build_params_schema(dict(params)) if params else None

    out_schema = response_schema if response_schema is not None else _ref(get_schema_name(entity_name))
    post_ref = _ref(get_schema_name(entity_name, SchemaVariant.POST))
    patch_ref = _ref(get_schema_name(entity_name, SchemaVariant.PATCH))

    def bind(
        operation: LogicalOperation,
        method: HttpMethod,
        id_key: str,
        *,
        status_code: int = 200,
        body_schema: dict[str, Any] | None = None,
        responses: dict[int, dict[str, Any]],
    ) -> OperationBinding:
        return OperationBinding(
            operation=operation,
            method=method,
            path=path,
            operation_id=ids[id_key],
            description=descriptions[operation.value],
            handler=HANDLERS[operation],
            status_code=status_code,
            tags=tags,
            params_schema=params_spec,
            body_schema=body_schema,
            responses=responses,
        )

    bindings: list[OperationBinding] = []
    for operation in _CANONICAL_ORDER:
        if operation not in operations:
            continue

        if operation == LogicalOperation.RETRIEVE:
            bindings.append(
                bind(operation, HttpMethod.GET, "RETRIEVE", responses={200: out_schema, 403: {}})
            )
        elif operation == LogicalOperation.LIST:
            bindings.append(
                bind(
                    operation,
                    HttpMethod.GET,
                    "LIST",
                    responses={200: {"type": "array", "items": out_schema}, 403: {}},
                )
            )
        elif operation == LogicalOperation.CREATE:
            bindings.append(
                bind(
                    operation,
                    HttpMethod.POST,
                    "CREATE",
                    status_code=201,
                    body_schema=post_ref,
                    responses={201: out_schema},
                )
            )
        elif operation == LogicalOperation.UPDATE:
            bindings.append(
                bind(
                    operation,
                    HttpMethod.PATCH,
                    "UPDATE_PATCH",
                    body_schema=patch_ref,
                    responses={200: out_schema},
                )
            )
            bindings.append(
                bind(
                    operation,
                    HttpMethod.PUT,
                    "UPDATE_PUT",
                    body_schema=dict(post_ref),
                    responses={200: out_schema},
                )
            )
        elif operation == LogicalOperation.DESTROY:
            bindings.append(bind(operation, HttpMethod.DELETE, "DESTROY", responses={200: {}}))

    return bindings
