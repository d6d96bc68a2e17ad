"""
Route generator - registers a generic view's bindings on a FastAPI router.

Per request, in order:

1. dependencies passed by the caller (FastAPI ``Depends``)
2. path parameter and body validation (422 on failure)
3. the authorization pipeline (401 / 404 / 403 with an empty body)
4. the operation handler
5. serialization through the response model
"""

import logging
import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from http import HTTPStatus
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.params import Depends as DependsParam
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ValidationError

from crudviews.config import CrudViewsConfig
from crudviews.errors import ConfigurationError, DestroyFailure, RequestRejected
from crudviews.runtime.handlers import HandlerResult
from crudviews.runtime.hooks import ViewHooks
from crudviews.runtime.model_generator import params_to_model
from crudviews.runtime.pipeline import AuthorizationPipeline, RequestContext
from crudviews.runtime.schema_registry import SchemaRegistry
from crudviews.runtime.view_composer import compose_bindings, normalize_path
from crudviews.specs.entity import Entity
from crudviews.specs.views import (
    HttpMethod,
    LogicalOperation,
    OperationBinding,
    ViewLike,
    get_schema_name,
    resolve_operations,
)

logger = logging.getLogger(__name__)

_PATH_PARAM_RE = re.compile(r"{([^{}:]+)}")


async def _parse_request_body(request: Request) -> Any:
    """Parse the request body as JSON or form data; an empty body is ``{}``."""
    content_type = (request.headers.get("content-type") or "").lower()
    if "application/x-www-form-urlencoded" in content_type or "multipart/form-data" in content_type:
        form = await request.form()
        return dict(form)

    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        return await request.json()
    except ValueError as exc:
        raise RequestValidationError(
            [{"type": "json_invalid", "loc": ("body", 0), "msg": "JSON decode error", "input": {}}]
        ) from exc


def _validation_errors(exc: ValidationError, location: str) -> list[dict[str, Any]]:
    errors = exc.errors(include_url=False)
    for error in errors:
        error["loc"] = (location, *error.get("loc", ()))
    return errors


def _path_parameters(schema: dict[str, Any]) -> list[dict[str, Any]]:
    return [
        {"name": name, "in": "path", "required": True, "schema": prop}
        for name, prop in schema.get("properties", {}).items()
    ]


def _as_dependency(dep: Any) -> Any:
    return dep if isinstance(dep, DependsParam) else Depends(dep)


class RouteGenerator:
    """
    Generates FastAPI routes for generic views.

    Schemas must be registered (``register_entity_schemas``) before routes
    for an entity are generated; the generated pydantic models validate
    bodies and serialize responses.

    Example:
        >>> router = APIRouter()
        >>> registry = SchemaRegistry()
        >>> register_entity_schemas(registry, Widget)
        >>> RouteGenerator(router, registry).generate(Widget, GenericView.LIST_CREATE, prefix="/widgets")
    """

    def __init__(
        self,
        router: APIRouter,
        registry: SchemaRegistry,
        config: CrudViewsConfig | None = None,
    ):
        if router is None:
            raise ConfigurationError("A router is required")
        if registry is None:
            raise ConfigurationError("A schema registry is required")
        self._router = router
        self._registry = registry
        self._config = config or CrudViewsConfig()

    @property
    def router(self) -> APIRouter:
        """Get the router routes are added to."""
        return self._router

    def generate(
        self,
        entity: Entity,
        view: ViewLike,
        *,
        prefix: str = "",
        params: Mapping[str, Any] | None = None,
        dependencies: Sequence[Any] = (),
        hooks: ViewHooks | None = None,
        lookup_field: str | None = None,
        lookup_url_param: str | None = None,
        tags: Iterable[str] | None = None,
        descriptions: Mapping[str, str] | None = None,
        operation_ids: Mapping[str, str] | None = None,
        response_model: type[BaseModel] | None = None,
    ) -> list[OperationBinding]:
        """
        Register the routes of one view.

        Args:
            entity: Entity exposed by the view
            view: Generic view, view name/label, or iterable of operation names
            prefix: Route path; instance-scoped views include the lookup
                parameter (``/widgets/{id}``)
            params: Path parameter types, ``{"id": "integer"}``; parameters
                not listed are strings
            dependencies: Callables (or ``Depends``) run before the pipeline
            hooks: Hook overrides, defaults to ``ViewHooks(entity)``
            lookup_field: Entity field the default lookup matches
            lookup_url_param: Path parameter the lookup value comes from
            tags: OpenAPI tags
            descriptions: Description overrides per operation
            operation_ids: Operation id overrides per key
            response_model: Model replacing the registered Out schema

        Returns:
            The registered bindings

        Raises:
            ConfigurationError: on any composition problem; nothing is registered
        """
        if entity is None:
            raise ConfigurationError("An entity is required")
        if view is None:
            raise ConfigurationError("A generic view is required")
        try:
            operations = resolve_operations(view)
        except KeyError as exc:
            raise ConfigurationError(str(exc.args[0])) from exc

        if not self._registry.has_triple(entity.name):
            raise ConfigurationError(
                f"Schemas for {entity.name} are not registered; "
                "call register_entity_schemas() before generating routes"
            )
        if prefix and not prefix.startswith("/"):
            raise ConfigurationError(f"Route prefix must start with '/': {prefix!r}")

        lookup_field = lookup_field or self._config.lookup_field
        lookup_url_param = lookup_url_param or self._config.lookup_url_param
        path = normalize_path(prefix)
        path_params = _PATH_PARAM_RE.findall(path)

        if any(op.is_instance_scoped for op in operations) and lookup_url_param not in path_params:
            raise ConfigurationError(
                f"{entity.name}: path {path!r} has no {{{lookup_url_param}}} parameter "
                "required by instance operations"
            )
        unknown_params = set(params or {}) - set(path_params)
        if unknown_params:
            raise ConfigurationError(
                f"{entity.name}: params not in path {path!r}: {', '.join(sorted(unknown_params))}"
            )
        resolved_params: dict[str, Any] = {name: "string" for name in path_params}
        resolved_params.update(params or {})

        out_model = response_model or self._registry.get_model(get_schema_name(entity.name))
        if out_model is None:
            raise ConfigurationError(f"No response model registered for {entity.name}")

        bindings = compose_bindings(
            entity.name,
            operations,
            prefix=path,
            params=resolved_params,
            tags=list(tags) if tags is not None else self._config.tags,
            descriptions={**self._config.descriptions, **(descriptions or {})},
            operation_ids={**self._config.operation_ids, **(operation_ids or {})},
            response_schema={"$ref": response_model.__name__} if response_model else None,
        )

        hooks = hooks or ViewHooks(
            entity, lookup_field=lookup_field, lookup_url_param=lookup_url_param
        )
        pipeline = AuthorizationPipeline(hooks, lookup_url_param=lookup_url_param)
        params_model = (
            params_to_model(f"{get_schema_name(entity.name)}Params", resolved_params)
            if resolved_params
            else None
        )
        route_dependencies = [_as_dependency(dep) for dep in dependencies]

        for binding in bindings:
            body_model = (
                self._registry.get_model(binding.body_schema["$ref"]) if binding.body_schema else None
            )
            endpoint = self._create_endpoint(binding, hooks, pipeline, params_model, body_model, out_model)
            self._add_route(binding, endpoint, out_model, body_model, route_dependencies)

        logger.info(
            "Generated %d route(s) for %s at %s", len(bindings), entity.name, path or "/"
        )
        return bindings

    def _create_endpoint(
        self,
        binding: OperationBinding,
        hooks: ViewHooks,
        pipeline: AuthorizationPipeline,
        params_model: type[BaseModel] | None,
        body_model: type[BaseModel] | None,
        out_model: type[BaseModel],
    ) -> Callable[..., Any]:
        """Create the endpoint function for one binding."""

        async def endpoint(request: Request) -> Any:
            if params_model is not None:
                try:
                    validated = params_model.model_validate(dict(request.path_params))
                except ValidationError as exc:
                    raise RequestValidationError(_validation_errors(exc, "path")) from exc
                params = validated.model_dump(by_alias=True)
            else:
                params = dict(request.path_params)

            data = None
            if body_model is not None:
                body = await _parse_request_body(request)
                try:
                    data = body_model.model_validate(body).model_dump(
                        by_alias=True, exclude_unset=True
                    )
                except ValidationError as exc:
                    raise RequestValidationError(_validation_errors(exc, "body")) from exc

            ctx = RequestContext(request=request, operation=binding.operation, params=params)
            try:
                await pipeline.run(ctx)
                result = await binding.handler(ctx, hooks, data)
            except DestroyFailure as exc:
                return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.detail))
            except RequestRejected as exc:
                return Response(status_code=exc.status_code)

            return _serialize(result, out_model)

        endpoint.__name__ = binding.operation_id
        return endpoint

    def _add_route(
        self,
        binding: OperationBinding,
        endpoint: Callable[..., Any],
        out_model: type[BaseModel],
        body_model: type[BaseModel] | None,
        dependencies: list[Any],
    ) -> None:
        """Add a route to the router."""
        method_map = {
            HttpMethod.GET: self._router.get,
            HttpMethod.POST: self._router.post,
            HttpMethod.PUT: self._router.put,
            HttpMethod.PATCH: self._router.patch,
            HttpMethod.DELETE: self._router.delete,
        }
        router_method = method_map[binding.method]

        response_model: Any = None
        if binding.operation == LogicalOperation.LIST:
            response_model = list[out_model]  # type: ignore[valid-type]
        elif binding.operation != LogicalOperation.DESTROY:
            response_model = out_model

        openapi_extra: dict[str, Any] = {}
        if binding.params_schema:
            openapi_extra["parameters"] = _path_parameters(binding.params_schema)
        if body_model is not None:
            openapi_extra["requestBody"] = {
                "required": True,
                "content": {
                    "application/json": {
                        "schema": body_model.model_json_schema(
                            by_alias=True, ref_template="#/components/schemas/{model}"
                        )
                    }
                },
            }

        route_kwargs: dict[str, Any] = {
            "tags": list(binding.tags),
            "operation_id": binding.operation_id,
            "description": binding.description,
            "status_code": binding.status_code,
            "response_model": response_model,
            "responses": {
                code: {"description": HTTPStatus(code).phrase}
                for code in binding.responses
                if code != binding.status_code
            },
            "name": binding.operation_id,
        }
        if dependencies:
            route_kwargs["dependencies"] = dependencies
        if openapi_extra:
            route_kwargs["openapi_extra"] = openapi_extra

        router_method(binding.path, **route_kwargs)(endpoint)
        logger.debug("Added route %s (%s)", binding.full_path, binding.operation_id)


def _serialize(result: HandlerResult, out_model: type[BaseModel]) -> Response:
    if result.content is None and not result.many:
        return Response(status_code=result.status_code)

    def dump(item: Any) -> Any:
        return out_model.model_validate(item, from_attributes=True).model_dump(
            mode="json", by_alias=True
        )

    content = [dump(item) for item in result.content] if result.many else dump(result.content)
    return JSONResponse(status_code=result.status_code, content=content)


# =============================================================================
# Convenience Functions
# =============================================================================


def generate_routes(
    router: APIRouter,
    entity: Entity,
    view: ViewLike,
    *,
    registry: SchemaRegistry,
    config: CrudViewsConfig | None = None,
    **kwargs: Any,
) -> list[OperationBinding]:
    """
    Generate the routes of one generic view.

    Shorthand for ``RouteGenerator(router, registry, config).generate(...)``.

    Example:
        >>> generate_routes(router, Widget, "ListCreateAPIView", registry=registry, prefix="/widgets")
    """
    return RouteGenerator(router, registry, config).generate(entity, view, **kwargs)


__all__ = ["RouteGenerator", "generate_routes"]
