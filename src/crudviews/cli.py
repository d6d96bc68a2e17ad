"""
crudviews command line.

Inspect what crudviews derives for an entity without running a server:

- crudviews schemas TARGET: the Out/Post/Patch schema triple
- crudviews routes TARGET: the bindings of a generic view
- crudviews openapi TARGET: the OpenAPI document of a generic view

TARGET is ``module:attribute`` naming an entity, a pydantic model class or
a SQLAlchemy ``Table``.
"""

from __future__ import annotations

import importlib
import json
import logging
import sys
from pathlib import Path
from typing import Annotated, Any

import typer
import yaml
from fastapi import APIRouter, FastAPI
from pydantic import BaseModel
from rich.console import Console
from rich.table import Table

from crudviews._version import get_version
from crudviews.adapters.memory import MemoryEntity, entity_from_model
from crudviews.config import CrudViewsConfig, load_config
from crudviews.errors import ConfigurationError
from crudviews.logging import setup_logging
from crudviews.runtime.fields import fields_from_table
from crudviews.runtime.route_generator import RouteGenerator
from crudviews.runtime.schema_deriver import derive_schemas
from crudviews.runtime.schema_registry import SchemaRegistry, register_entity_schemas
from crudviews.specs.entity import Entity
from crudviews.specs.views import OperationBinding

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Generic CRUD views for FastAPI: inspect derived schemas and routes",
    no_args_is_help=True,
)
console = Console()

TargetArg = Annotated[str, typer.Argument(help="module:attribute of an entity, model or table")]
FormatOpt = Annotated[str, typer.Option("--format", "-f", help="Output format (json or yaml)")]
ViewOpt = Annotated[
    str, typer.Option("--view", "-v", help="Generic view (ListCreateAPIView, RETRIEVE_UPDATE_DESTROY, ...)")
]
PrefixOpt = Annotated[str, typer.Option("--prefix", "-p", help="Route path, e.g. /widgets/{id}")]


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"crudviews {get_version()}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    log_level: Annotated[
        str, typer.Option("--log-level", help="Logging level (DEBUG, INFO, WARNING, ...)")
    ] = "WARNING",
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="crudviews.toml or pyproject.toml to read defaults from"),
    ] = None,
    version: Annotated[
        bool,
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show version"),
    ] = False,
) -> None:
    setup_logging(level=log_level.upper())
    try:
        ctx.obj = load_config(config)
    except Exception as e:
        typer.echo(f"Error loading config: {e}", err=True)
        raise typer.Exit(code=1)


def _is_table(obj: Any) -> bool:
    return type(obj).__module__.startswith("sqlalchemy") and hasattr(obj, "columns")


def load_target(target: str) -> Entity:
    """Import ``module:attribute`` and describe it as an entity."""
    module_name, _, attr_path = target.partition(":")
    if not module_name or not attr_path:
        typer.echo(f"Target must look like module:attribute, got {target!r}", err=True)
        raise typer.Exit(code=1)

    if str(Path.cwd()) not in sys.path:
        sys.path.insert(0, str(Path.cwd()))

    try:
        obj: Any = importlib.import_module(module_name)
        for attr in attr_path.split("."):
            obj = getattr(obj, attr)
    except (ImportError, AttributeError) as e:
        typer.echo(f"Cannot load {target}: {e}", err=True)
        raise typer.Exit(code=1)

    if isinstance(obj, type) and issubclass(obj, BaseModel):
        return entity_from_model(obj)
    if _is_table(obj):
        return MemoryEntity(obj.name, fields_from_table(obj))
    if isinstance(obj, Entity):
        return obj

    typer.echo(f"{target} is not an entity, pydantic model or SQLAlchemy table", err=True)
    raise typer.Exit(code=1)


def _dump(data: Any, format: str) -> str:
    if format.lower() == "json":
        return json.dumps(data, indent=2)
    return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)


def _generate(
    entity: Entity, view: str, prefix: str, config: CrudViewsConfig
) -> tuple[APIRouter, list[OperationBinding]]:
    registry = SchemaRegistry()
    router = APIRouter()
    try:
        register_entity_schemas(registry, entity, config=config)
        bindings = RouteGenerator(router, registry, config).generate(entity, view, prefix=prefix)
    except ConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    return router, bindings


@app.command(name="schemas")
def schemas_command(
    ctx: typer.Context,
    target: TargetArg,
    exclude: Annotated[
        list[str] | None, typer.Option("--exclude", "-x", help="Field to drop (repeatable)")
    ] = None,
    read_only: Annotated[
        list[str] | None, typer.Option("--read-only", "-r", help="Read-only field (repeatable)")
    ] = None,
    write_only: Annotated[
        list[str] | None, typer.Option("--write-only", "-w", help="Write-only field (repeatable)")
    ] = None,
    format: FormatOpt = "json",
) -> None:
    """
    Print the schema triple derived for TARGET.

    Examples:
        crudviews schemas app.models:Widget
        crudviews schemas app.models:Widget -w secret -f yaml
    """
    config: CrudViewsConfig = ctx.obj or CrudViewsConfig()
    entity = load_target(target)
    try:
        triple = derive_schemas(
            entity,
            exclude=exclude or (),
            read_only=read_only or (),
            write_only=write_only or (),
            default_read_only=config.default_read_only,
        )
    except ConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    schemas = {schema["$id"]: schema for schema in (triple.out, triple.post, triple.patch)}
    typer.echo(_dump(schemas, format))


@app.command(name="routes")
def routes_command(
    ctx: typer.Context,
    target: TargetArg,
    view: ViewOpt = "ListCreateAPIView",
    prefix: PrefixOpt = "",
) -> None:
    """
    Show the routes a generic view produces for TARGET.

    Examples:
        crudviews routes app.models:Widget --prefix /widgets
        crudviews routes app.models:Widget -v RetrieveUpdateDestroyAPIView -p /widgets/{id}
    """
    config: CrudViewsConfig = ctx.obj or CrudViewsConfig()
    entity = load_target(target)
    prefix = prefix or f"/{entity.name.lower()}s"
    _, bindings = _generate(entity, view, prefix, config)

    table = Table(title=f"{entity.name} routes")
    table.add_column("Method", style="bold")
    table.add_column("Path")
    table.add_column("Operation ID", style="cyan")
    table.add_column("Body")
    table.add_column("Status")

    for binding in bindings:
        table.add_row(
            binding.method.value,
            binding.path,
            binding.operation_id,
            binding.body_schema["$ref"] if binding.body_schema else "",
            str(binding.status_code),
        )

    console.print(table)
    console.print(f"\n[dim]{len(bindings)} route(s)[/dim]")


@app.command(name="openapi")
def openapi_command(
    ctx: typer.Context,
    target: TargetArg,
    view: ViewOpt = "ListCreateAPIView",
    prefix: PrefixOpt = "",
    title: Annotated[str, typer.Option("--title", help="API title")] = "crudviews",
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Output file (default: stdout)")
    ] = None,
    format: FormatOpt = "yaml",
) -> None:
    """
    Generate the OpenAPI document of a generic view for TARGET.

    Examples:
        crudviews openapi app.models:Widget -p /widgets
        crudviews openapi app.models:Widget -f json -o openapi.json
    """
    config: CrudViewsConfig = ctx.obj or CrudViewsConfig()
    entity = load_target(target)
    prefix = prefix or f"/{entity.name.lower()}s"
    router, _ = _generate(entity, view, prefix, config)

    api = FastAPI(title=title, version=get_version())
    api.include_router(router)
    content = _dump(api.openapi(), format)

    if output:
        output.write_text(content)
        typer.echo(f"OpenAPI specification written to {output}")
    else:
        typer.echo(content)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
