"""Tests for pydantic model generation from JSON schemas."""

from datetime import datetime
from uuid import UUID

import pytest
from pydantic import ValidationError

from crudviews.adapters.base import Record
from crudviews.runtime.model_generator import params_schema, params_to_model, schema_to_model


def _schema(properties: dict, required: list[str] | None = None) -> dict:
    return {
        "$id": "Sample",
        "type": "object",
        "properties": properties,
        "required": required or [],
    }


class TestSchemaToModel:
    """Tests for schema_to_model."""

    def test_named_after_id(self):
        model = schema_to_model(_schema({"name": {"type": "string"}}))
        assert model.__name__ == "Sample"

    def test_required_and_optional(self):
        model = schema_to_model(
            _schema({"name": {"type": "string"}, "count": {"type": "integer"}}, ["name"])
        )
        assert model(name="bolt").count is None
        with pytest.raises(ValidationError):
            model(count=1)

    def test_optional_is_not_nullable(self):
        model = schema_to_model(_schema({"name": {"type": "string"}}))
        assert model().name is None
        with pytest.raises(ValidationError):
            model(name=None)

    def test_optional_nullable_for_response_models(self):
        model = schema_to_model(
            _schema({"name": {"type": "string"}, "id": {"type": "integer"}}, ["id"]),
            optional_nullable=True,
        )
        assert model.model_validate(Record({"id": 1, "name": None})).name is None
        with pytest.raises(ValidationError):
            model(id=None)

    def test_constraints(self):
        model = schema_to_model(
            _schema(
                {
                    "name": {"type": "string", "maxLength": 3},
                    "qty": {"type": "integer", "minimum": 0, "maximum": 10},
                }
            )
        )
        with pytest.raises(ValidationError):
            model(name="toolong")
        with pytest.raises(ValidationError):
            model(qty=11)
        assert model(name="abc", qty=0).qty == 0

    def test_enum_becomes_literal(self):
        model = schema_to_model(_schema({"status": {"type": "string", "enum": ["todo", "done"]}}))
        assert model(status="done").status == "done"
        with pytest.raises(ValidationError):
            model(status="later")

    def test_formats(self):
        model = schema_to_model(
            _schema(
                {
                    "at": {"type": "string", "format": "date-time"},
                    "ref": {"type": "string", "format": "uuid"},
                    "email": {"type": "string", "format": "email"},
                }
            )
        )
        instance = model(
            at="2024-05-01T12:00:00",
            ref="12345678-1234-5678-1234-567812345678",
            email="a@example.com",
        )
        assert isinstance(instance.at, datetime)
        assert isinstance(instance.ref, UUID)
        assert instance.email == "a@example.com"

    def test_nullable_required_field_accepts_none(self):
        model = schema_to_model(_schema({"note": {"type": "string", "nullable": True}}, ["note"]))
        assert model(note=None).note is None
        with pytest.raises(ValidationError):
            model()

    def test_type_list_with_null(self):
        model = schema_to_model(_schema({"n": {"type": ["integer", "null"]}}, ["n"]))
        assert model(n=None).n is None
        assert model(n="4").n == 4

    def test_arrays_and_unknown_shapes(self):
        model = schema_to_model(
            _schema({"tags": {"type": "array", "items": {"type": "string"}}, "meta": {"$ref": "#/x"}})
        )
        instance = model(tags=["a"], meta={"anything": 1})
        assert instance.tags == ["a"]
        assert instance.meta == {"anything": 1}

    def test_non_identifier_names_use_aliases(self):
        model = schema_to_model(
            _schema({"first-name": {"type": "string"}, "schema": {"type": "string"}})
        )
        instance = model.model_validate({"first-name": "Ada", "schema": "v1"})
        assert instance.model_dump(by_alias=True) == {"first-name": "Ada", "schema": "v1"}

    def test_reads_attributes(self):
        model = schema_to_model(_schema({"id": {"type": "integer"}, "name": {"type": "string"}}))
        instance = model.model_validate(Record({"id": 1, "name": "bolt", "secret": "s"}))
        assert instance.model_dump() == {"id": 1, "name": "bolt"}

    def test_unknown_keys_ignored(self):
        model = schema_to_model(_schema({"name": {"type": "string"}}))
        assert model.model_validate({"name": "a", "id": 5}).model_dump(exclude_unset=True) == {
            "name": "a"
        }


class TestParamsModel:
    """Tests for path parameter models."""

    def test_params_schema_shorthand(self):
        assert params_schema({"id": "integer"}) == params_schema({"id": {"type": "integer"}})
        assert params_schema({"id": "integer"})["required"] == ["id"]

    def test_coerces_path_strings(self):
        model = params_to_model("WidgetParams", {"id": "integer", "slug": "string"})
        params = model.model_validate({"id": "3", "slug": "bolt"})
        assert params.model_dump() == {"id": 3, "slug": "bolt"}

    def test_rejects_bad_values(self):
        model = params_to_model("WidgetParams", {"id": "integer"})
        with pytest.raises(ValidationError):
            model.model_validate({"id": "abc"})
