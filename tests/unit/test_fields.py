"""Tests for field descriptor extraction."""

import sqlalchemy as sa
from pydantic import BaseModel, Field

from crudviews.adapters.memory import MemoryEntity
from crudviews.runtime.fields import extract_fields, fields_from_model, fields_from_table
from crudviews.specs.entity import FieldDescriptor


class Widget(BaseModel):
    id: int
    name: str = Field(max_length=200, description="Display name")
    secret: str | None = None
    tags: list[str] = Field(default_factory=list)


class TestExtractFields:
    """Tests for extract_fields."""

    def test_order_and_exclude(self, widgets):
        names = [f.name for f in extract_fields(widgets, exclude=["secret"])]
        assert names == ["id", "name", "createdAt", "updatedAt"]

    def test_mapping_key_is_authoritative(self):
        entity = MemoryEntity("Thing", {"label": FieldDescriptor(name="title")})
        (descriptor,) = extract_fields(entity)
        assert descriptor.name == "label"


class TestFieldsFromModel:
    """Tests for fields_from_model."""

    def test_field_order_and_required(self):
        fields = fields_from_model(Widget)
        assert list(fields) == ["id", "name", "secret", "tags"]
        assert fields["id"].required is True
        assert fields["name"].required is True
        assert fields["secret"].required is False

    def test_property_schema_without_title(self):
        fields = fields_from_model(Widget)
        assert fields["name"].json_schema == {"type": "string", "maxLength": 200}
        assert fields["name"].description == "Display name"
        assert fields["tags"].json_schema["type"] == "array"

    def test_nullable_hint(self):
        fields = fields_from_model(Widget)
        assert fields["secret"].nullable is True
        assert fields["name"].nullable is None


class TestFieldsFromTable:
    """Tests for fields_from_table."""

    def test_column_mapping(self):
        table = sa.Table(
            "gadgets",
            sa.MetaData(),
            sa.Column("id", sa.Integer, primary_key=True),
            sa.Column("name", sa.String(120), nullable=False, comment="Display name"),
            sa.Column("price", sa.Numeric(10, 2)),
            sa.Column("active", sa.Boolean, nullable=False, default=True),
            sa.Column("released", sa.Date),
            sa.Column("updated_at", sa.DateTime, server_default=sa.func.now()),
        )

        fields = fields_from_table(table)

        assert list(fields) == ["id", "name", "price", "active", "released", "updated_at"]
        assert fields["id"].json_schema == {"type": "integer"}
        assert fields["id"].required is True
        assert fields["name"].json_schema == {"type": "string", "maxLength": 120}
        assert fields["name"].description == "Display name"
        assert fields["price"].json_schema == {"type": "number"}
        assert fields["price"].nullable is True
        assert fields["active"].json_schema == {"type": "boolean"}
        assert fields["active"].required is False
        assert fields["released"].json_schema == {"type": "string", "format": "date"}
        assert fields["updated_at"].json_schema == {"type": "string", "format": "date-time"}
        assert fields["updated_at"].required is False
