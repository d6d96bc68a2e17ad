"""
crudviews - generic CRUD views for FastAPI.

Derives Out/Post/Patch schemas from an entity's fields, expands generic
views (ListCreate, RetrieveUpdateDestroy, ...) into FastAPI routes and runs
a permission/lookup pipeline in front of each operation handler.
"""

from crudviews._version import get_version as _get_version

__version__ = _get_version()

from crudviews.config import CrudViewsConfig, load_config  # noqa: E402
from crudviews.errors import (  # noqa: E402
    AmbiguousVisibilityError,
    ConfigurationError,
    CrudViewsError,
    DestroyFailure,
    Forbidden,
    NotFound,
    RequestRejected,
    Unauthorized,
)
from crudviews.runtime import (  # noqa: E402
    RouteGenerator,
    SchemaRegistry,
    ViewHooks,
    derive_schemas,
    generate_routes,
    register_entity_schemas,
)
from crudviews.specs import (  # noqa: E402
    Entity,
    FieldDescriptor,
    GenericView,
    LogicalOperation,
    SchemaTriple,
    get_schema_name,
)

__all__ = [
    "AmbiguousVisibilityError",
    "ConfigurationError",
    "CrudViewsConfig",
    "CrudViewsError",
    "DestroyFailure",
    "Entity",
    "FieldDescriptor",
    "Forbidden",
    "GenericView",
    "LogicalOperation",
    "NotFound",
    "RequestRejected",
    "RouteGenerator",
    "SchemaRegistry",
    "SchemaTriple",
    "Unauthorized",
    "ViewHooks",
    "__version__",
    "derive_schemas",
    "generate_routes",
    "get_schema_name",
    "load_config",
    "register_entity_schemas",
]
