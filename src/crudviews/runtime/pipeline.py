"""
Authorization pipeline - the checks run before every handler.

States, in order:

    START -> coarse permission -> (create: allowed)
          -> (no lookup param: allowed)
          -> lookup -> object permission -> allowed

A failed coarse check ends in 401, a missing instance in 404, a failed
object check in 403. Each hook is awaited before the next step starts and
no step is skipped or reordered. LIST additionally resolves its collection
once the checks pass.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from crudviews.errors import Forbidden, NotFound, Unauthorized
from crudviews.runtime.hooks import ViewHooks, maybe_await
from crudviews.specs.views import LogicalOperation

logger = logging.getLogger(__name__)


@dataclass
class RequestContext:
    """
    Per-request state threaded through the pipeline and the handler.

    Owned by a single in-flight request; never shared.
    """

    request: Any
    operation: LogicalOperation
    params: dict[str, Any] = field(default_factory=dict)
    instance: Any = None
    instances: list[Any] | None = None


class AuthorizationPipeline:
    """Runs the permission and lookup hooks for one view."""

    def __init__(self, hooks: ViewHooks, lookup_url_param: str = "id"):
        self.hooks = hooks
        self.lookup_url_param = lookup_url_param

    async def run(self, ctx: RequestContext) -> RequestContext:
        """
        Run the checks for ``ctx.operation``.

        Returns:
            The same context, with ``instance`` (and ``instances`` for LIST) set

        Raises:
            Unauthorized: coarse permission hook returned falsy
            NotFound: lookup hook returned None
            Forbidden: object permission hook returned falsy
        """
        await self._authorize(ctx)

        if ctx.operation == LogicalOperation.LIST:
            ctx.instances = list(await maybe_await(self.hooks.get_objects(ctx)))

        return ctx

    async def _authorize(self, ctx: RequestContext) -> None:
        if not await maybe_await(self.hooks.has_permission(ctx)):
            logger.debug("%s rejected by has_permission", ctx.operation)
            raise Unauthorized()

        if ctx.operation == LogicalOperation.CREATE:
            return

        if ctx.params.get(self.lookup_url_param) is None:
            return

        instance = await maybe_await(self.hooks.get_object(ctx))
        if instance is None:
            logger.debug(
                "%s: no instance for %s=%r",
                ctx.operation,
                self.lookup_url_param,
                ctx.params[self.lookup_url_param],
            )
            raise NotFound()

        if not await maybe_await(self.hooks.has_object_permission(ctx, instance)):
            logger.debug("%s rejected by has_object_permission", ctx.operation)
            raise Forbidden()

        ctx.instance = instance
