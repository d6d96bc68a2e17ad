"""
Schema registry - registers an entity's schema triple at most once.

The registry is the only state shared between requests. It is written while
routes are composed (normally at startup) and read afterwards. Existence
check and registration of the three schemas happen under one lock. Writers
publish new dicts with a single assignment each (models, then triples, then
schemas), so a lock-free reader never observes one or two of a triple.
"""

import logging
import threading
from collections.abc import Callable, Iterable
from typing import Any

from pydantic import BaseModel

from crudviews.config import CrudViewsConfig
from crudviews.errors import ConfigurationError
from crudviews.runtime.model_generator import schema_to_model
from crudviews.runtime.schema_deriver import derive_schemas
from crudviews.specs.entity import Entity
from crudviews.specs.views import SchemaTriple, SchemaVariant, get_schema_name

logger = logging.getLogger(__name__)

__all__ = ["SchemaRegistry", "get_schema_name", "register_entity_schemas"]


class SchemaRegistry:
    """
    Identifier -> schema (and generated pydantic model) store.

    Identifiers come from ``get_schema_name`` so the same entity name always
    maps onto the same three identifiers.
    """

    def __init__(self) -> None:
        self._schemas: dict[str, dict[str, Any]] = {}
        self._models: dict[str, type[BaseModel]] = {}
        self._triples: dict[str, SchemaTriple] = {}
        self._lock = threading.Lock()

    def __contains__(self, schema_id: object) -> bool:
        return schema_id in self._schemas

    def __len__(self) -> int:
        return len(self._schemas)

    @property
    def schema_ids(self) -> list[str]:
        return list(self._schemas)

    def get_schema(self, schema_id: str) -> dict[str, Any] | None:
        return self._schemas.get(schema_id)

    def get_model(self, schema_id: str) -> type[BaseModel] | None:
        return self._models.get(schema_id)

    def has_triple(self, entity_name: str) -> bool:
        """Whether all three schemas of an entity are registered."""
        schemas = self._schemas
        return all(get_schema_name(entity_name, variant) in schemas for variant in SchemaVariant)

    def get_triple(self, entity_name: str) -> SchemaTriple | None:
        """The triple registered for an entity name, or None."""
        return self._triples.get(get_schema_name(entity_name))

    def register_once(self, entity_name: str, triple: SchemaTriple) -> bool:
        """
        Register a triple unless all three identifiers already exist.

        Returns:
            True when the triple was registered, False when it was a no-op
        """
        with self._lock:
            _, registered = self._register_locked(entity_name, lambda: triple)
        return registered

    def _register_locked(
        self, entity_name: str, derive: Callable[[], SchemaTriple]
    ) -> tuple[SchemaTriple, bool]:
        if self.has_triple(entity_name):
            logger.debug("Schemas for %s already registered", entity_name)
            return self._triples[get_schema_name(entity_name)], False

        triple = derive()
        schemas = {schema["$id"]: schema for schema in (triple.out, triple.post, triple.patch)}
        models = {
            schema_id: schema_to_model(schema, optional_nullable=schema_id == triple.out["$id"])
            for schema_id, schema in schemas.items()
        }
        self._models = {**self._models, **models}
        self._triples = {**self._triples, triple.out["$id"]: triple}
        self._schemas = {**self._schemas, **schemas}

        logger.info("Registered schemas %s for %s", ", ".join(triple.schema_ids), entity_name)
        return triple, True

    def register_entity(
        self,
        entity: Entity,
        exclude: Iterable[str] = (),
        read_only: Iterable[str] = (),
        write_only: Iterable[str] = (),
        default_read_only: Iterable[str] | None = None,
    ) -> SchemaTriple:
        """Derive (only if missing) and register an entity's triple."""
        defaults = {} if default_read_only is None else {"default_read_only": default_read_only}
        with self._lock:
            triple, _ = self._register_locked(
                entity.name,
                lambda: derive_schemas(entity, exclude, read_only, write_only, **defaults),
            )
        return triple


def register_entity_schemas(
    registry: SchemaRegistry,
    entity: Entity,
    exclude: Iterable[str] = (),
    read_only: Iterable[str] = (),
    write_only: Iterable[str] = (),
    config: CrudViewsConfig | None = None,
) -> SchemaTriple:
    """
    Register (or confirm) the schema triple of an entity.

    Adds three schemas to the registry:

    - <EntityName> - every response body
    - <EntityName>Post - create and PUT bodies
    - <EntityName>Patch - PATCH bodies, same as Post with nothing required

    A second call for the same entity is a no-op and returns the schemas
    registered by the first.
    """
    if registry is None:
        raise ConfigurationError("A schema registry is required")
    config = config or CrudViewsConfig()
    return registry.register_entity(
        entity,
        exclude=exclude,
        read_only=read_only,
        write_only=write_only,
        default_read_only=config.default_read_only,
    )
