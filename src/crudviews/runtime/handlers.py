"""
Operation handlers - the per-operation work done after authorization.

Every handler takes the request context prepared by the pipeline, the view
hooks and the validated body (``None`` when the operation has none) and
returns a ``HandlerResult``. Serialization is left to the route layer.
"""

import logging
from collections.abc import Awaitable, Callable, Mapping, MutableMapping
from dataclasses import dataclass
from typing import Any

from crudviews.errors import DestroyFailure
from crudviews.logging import log_with_context
from crudviews.runtime.hooks import ViewHooks, maybe_await
from crudviews.runtime.pipeline import RequestContext
from crudviews.specs.views import LogicalOperation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HandlerResult:
    """Status code and payload of a handled operation."""

    status_code: int
    content: Any = None
    many: bool = False


Handler = Callable[[RequestContext, ViewHooks, Mapping[str, Any] | None], Awaitable[HandlerResult]]


def apply_changes(instance: Any, data: Mapping[str, Any]) -> Any:
    """
    Merge body fields onto an instance.

    Only the keys present in ``data`` are written; everything else keeps its
    current value. Mapping instances are updated by key, others by attribute.
    """
    if isinstance(instance, MutableMapping):
        instance.update(data)
    else:
        for key, value in data.items():
            setattr(instance, key, value)
    return instance


async def handle_retrieve(
    ctx: RequestContext, hooks: ViewHooks, data: Mapping[str, Any] | None = None
) -> HandlerResult:
    return HandlerResult(200, ctx.instance)


async def handle_list(
    ctx: RequestContext, hooks: ViewHooks, data: Mapping[str, Any] | None = None
) -> HandlerResult:
    return HandlerResult(200, list(ctx.instances or []), many=True)


async def handle_create(
    ctx: RequestContext, hooks: ViewHooks, data: Mapping[str, Any] | None = None
) -> HandlerResult:
    """Build an unsaved instance from the body and run ``perform_create``."""
    instance = hooks.entity.build(dict(data or {}))
    await maybe_await(hooks.perform_create(ctx, instance))
    ctx.instance = instance
    return HandlerResult(201, instance)


async def handle_update(
    ctx: RequestContext, hooks: ViewHooks, data: Mapping[str, Any] | None = None
) -> HandlerResult:
    """
    Merge the body onto the resolved instance and run ``perform_update``.

    Shared by PATCH and PUT. For PUT the body was validated against the
    create schema, so required fields are present; omitted optional fields
    keep their stored values.
    """
    instance = apply_changes(ctx.instance, data or {})
    await maybe_await(hooks.perform_update(ctx, instance))
    return HandlerResult(200, instance)


async def handle_destroy(
    ctx: RequestContext, hooks: ViewHooks, data: Mapping[str, Any] | None = None
) -> HandlerResult:
    """
    Run ``perform_destroy`` on the resolved instance.

    Raises:
        DestroyFailure: the hook raised; carries the 400 response body
    """
    try:
        await maybe_await(hooks.perform_destroy(ctx, ctx.instance))
    except Exception as exc:
        log_with_context(
            logger,
            logging.WARNING,
            f"Destroy failed: {exc}",
            operation=ctx.operation.value,
            params=ctx.params,
            error_type=type(exc).__name__,
        )
        raise DestroyFailure.from_exception(exc) from exc
    return HandlerResult(200)


HANDLERS: dict[LogicalOperation, Handler] = {
    LogicalOperation.RETRIEVE: handle_retrieve,
    LogicalOperation.LIST: handle_list,
    LogicalOperation.CREATE: handle_create,
    LogicalOperation.UPDATE: handle_update,
    LogicalOperation.DESTROY: handle_destroy,
}
