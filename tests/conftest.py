"""Shared pytest fixtures for crudviews tests."""

import asyncio
import logging
from collections.abc import Callable, Iterator
from typing import Any

import pytest
from fastapi import APIRouter, FastAPI
from fastapi.testclient import TestClient

from crudviews.adapters.base import Record
from crudviews.adapters.memory import MemoryEntity
from crudviews.logging import ROOT_LOGGER
from crudviews.runtime.route_generator import generate_routes
from crudviews.runtime.schema_registry import SchemaRegistry, register_entity_schemas
from crudviews.specs.entity import FieldDescriptor


@pytest.fixture(autouse=True)
def _reset_crudviews_logger() -> Iterator[None]:
    """Undo setup_logging() calls so caplog keeps seeing crudviews records."""
    yield
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def widget_fields() -> list[FieldDescriptor]:
    return [
        FieldDescriptor(name="id", json_schema={"type": "integer"}, required=True),
        FieldDescriptor(
            name="name",
            json_schema={"type": "string", "maxLength": 200},
            required=True,
            description="Display name",
        ),
        FieldDescriptor(name="secret", json_schema={"type": "string"}),
        FieldDescriptor(name="createdAt", json_schema={"type": "string"}, format="date-time"),
        FieldDescriptor(name="updatedAt", json_schema={"type": "string"}, format="date-time"),
    ]


@pytest.fixture
def widgets() -> MemoryEntity:
    """An empty Widget entity: id, name, secret, createdAt, updatedAt."""
    return MemoryEntity("Widget", widget_fields())


@pytest.fixture
def registry(widgets: MemoryEntity) -> SchemaRegistry:
    """Registry with the Widget triple registered, ``secret`` write-only."""
    registry = SchemaRegistry()
    register_entity_schemas(registry, widgets, write_only=["secret"])
    return registry


@pytest.fixture
def seed(widgets: MemoryEntity) -> Callable[..., Record]:
    """Store a widget synchronously and return the saved record."""

    def _seed(**data: Any) -> Record:
        record = widgets.build(data)
        asyncio.run(record.save())
        return record

    return _seed


@pytest.fixture
def build_client(widgets: MemoryEntity, registry: SchemaRegistry) -> Callable[..., TestClient]:
    """Build a TestClient serving one generic view of the Widget entity."""

    def _build(view: Any, prefix: str, **kwargs: Any) -> TestClient:
        router = APIRouter()
        generate_routes(router, widgets, view, registry=registry, prefix=prefix, **kwargs)
        app = FastAPI()
        app.include_router(router)
        return TestClient(app)

    return _build
