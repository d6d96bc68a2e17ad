"""
View hooks - the customization points of a generated view.

``ViewHooks`` is an explicit capability object handed to the authorization
pipeline and the handlers. Its methods are the defaults; override them by
subclassing or by passing callables to the constructor:

    class OwnerOnly(ViewHooks):
        async def has_object_permission(self, ctx, instance):
            return instance.owner_id == ctx.request.state.user_id

    hooks = ViewHooks(Widget, perform_destroy=archive_widget)

Every hook may be a plain function or a coroutine function.
"""

import inspect
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from crudviews.errors import ConfigurationError
from crudviews.specs.entity import Entity

if TYPE_CHECKING:
    from crudviews.runtime.pipeline import RequestContext

HOOK_NAMES = frozenset(
    {
        "has_permission",
        "has_object_permission",
        "get_object",
        "get_objects",
        "perform_create",
        "perform_update",
        "perform_destroy",
    }
)


async def maybe_await(value: Any) -> Any:
    """Resolve a hook result that may or may not be awaitable."""
    if inspect.isawaitable(value):
        return await value
    return value


class ViewHooks:
    """
    Default hook implementations for one entity.

    Args:
        entity: Entity the view is generated for
        lookup_field: Entity field matched by the default ``get_object``
        lookup_url_param: Path parameter holding the lookup value
        **overrides: Callables replacing individual hooks by name
    """

    def __init__(
        self,
        entity: Entity,
        *,
        lookup_field: str = "id",
        lookup_url_param: str = "id",
        **overrides: Callable[..., Any],
    ):
        self.entity = entity
        self.lookup_field = lookup_field
        self.lookup_url_param = lookup_url_param

        unknown = set(overrides) - HOOK_NAMES
        if unknown:
            raise ConfigurationError(f"Unknown hook(s): {', '.join(sorted(unknown))}")
        for name, func in overrides.items():
            if not callable(func):
                raise ConfigurationError(f"Hook {name} must be callable")
            setattr(self, name, func)

    async def has_permission(self, ctx: "RequestContext") -> bool:
        return True

    async def has_object_permission(self, ctx: "RequestContext", instance: Any) -> bool:
        return True

    async def get_object(self, ctx: "RequestContext") -> Any | None:
        value = ctx.params[self.lookup_url_param]
        return await self.entity.find_one(**{self.lookup_field: value})

    async def get_objects(self, ctx: "RequestContext") -> list[Any]:
        return await self.entity.find_all()

    async def perform_create(self, ctx: "RequestContext", instance: Any) -> None:
        await instance.save()

    async def perform_update(self, ctx: "RequestContext", instance: Any) -> None:
        await instance.save()

    async def perform_destroy(self, ctx: "RequestContext", instance: Any) -> None:
        await instance.destroy()
