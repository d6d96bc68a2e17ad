"""Tests for generic view composition."""

import pytest

from crudviews.runtime.handlers import handle_update
from crudviews.runtime.view_composer import compose_bindings, default_operation_ids, normalize_path
from crudviews.specs.views import (
    GenericView,
    HttpMethod,
    LogicalOperation,
    resolve_operations,
)


def _routes(bindings) -> list[tuple[str, str]]:
    return [(b.operation.value, b.method.value) for b in bindings]


class TestGenericView:
    """Tests for GenericView and resolve_operations."""

    def test_operation_sets(self):
        assert GenericView.LIST_CREATE.operations == (LogicalOperation.LIST, LogicalOperation.CREATE)
        assert GenericView.RETRIEVE_UPDATE_DESTROY.operations == (
            LogicalOperation.RETRIEVE,
            LogicalOperation.UPDATE,
            LogicalOperation.DESTROY,
        )

    def test_labels(self):
        assert GenericView.LIST_CREATE.label == "ListCreateAPIView"
        assert GenericView.RETRIEVE_UPDATE_DESTROY.label == "RetrieveUpdateDestroyAPIView"
        assert GenericView.resolve("RetrieveAPIView") is GenericView.RETRIEVE
        assert GenericView.resolve("UPDATE") is GenericView.UPDATE

    def test_unknown_view_name(self):
        with pytest.raises(KeyError):
            GenericView.resolve("FancyAPIView")

    def test_unknown_operation_names_ignored(self):
        assert resolve_operations(["list", "FROBNICATE", "DESTROY", "LIST"]) == (
            LogicalOperation.LIST,
            LogicalOperation.DESTROY,
        )


class TestComposeBindings:
    """Tests for compose_bindings."""

    def test_list_create(self):
        bindings = compose_bindings("Widget", GenericView.LIST_CREATE, prefix="/widgets")
        assert _routes(bindings) == [("LIST", "GET"), ("CREATE", "POST")]

        list_binding, create_binding = bindings
        assert list_binding.responses == {
            200: {"type": "array", "items": {"$ref": "Widget"}},
            403: {},
        }
        assert list_binding.body_schema is None
        assert create_binding.body_schema == {"$ref": "WidgetPost"}
        assert create_binding.responses == {201: {"$ref": "Widget"}}
        assert create_binding.status_code == 201

    def test_retrieve_update_destroy(self):
        bindings = compose_bindings(
            "Widget", "RetrieveUpdateDestroyAPIView", prefix="/widgets/{id}"
        )
        assert _routes(bindings) == [
            ("RETRIEVE", "GET"),
            ("UPDATE", "PATCH"),
            ("UPDATE", "PUT"),
            ("DESTROY", "DELETE"),
        ]
        retrieve, _, _, destroy = bindings
        assert retrieve.responses == {200: {"$ref": "Widget"}, 403: {}}
        assert destroy.responses == {200: {}}
        assert destroy.body_schema is None

    def test_update_yields_patch_and_put(self):
        bindings = compose_bindings("Widget", GenericView.UPDATE, prefix="/widgets/{id}")
        patch, put = bindings

        assert (patch.method, put.method) == (HttpMethod.PATCH, HttpMethod.PUT)
        assert patch.body_schema == {"$ref": "WidgetPatch"}
        assert put.body_schema == {"$ref": "WidgetPost"}
        assert patch.responses[200] == put.responses[200] == {"$ref": "Widget"}
        assert patch.handler is put.handler is handle_update

    def test_canonical_order(self):
        bindings = compose_bindings("Widget", ["DESTROY", "CREATE", "RETRIEVE", "LIST"])
        assert [b.operation for b in bindings] == [
            LogicalOperation.RETRIEVE,
            LogicalOperation.LIST,
            LogicalOperation.CREATE,
            LogicalOperation.DESTROY,
        ]

    def test_empty_operation_set(self):
        assert compose_bindings("Widget", ["NOTHING"]) == []

    def test_default_operation_ids_and_descriptions(self):
        bindings = compose_bindings(
            "Widget", ["LIST", "RETRIEVE", "CREATE", "UPDATE", "DESTROY"], prefix="/w/{id}"
        )
        assert [b.operation_id for b in bindings] == [
            "getWidget",
            "getWidgets",
            "postWidget",
            "patchWidget",
            "putWidget",
            "deleteWidget",
        ]
        assert [b.description for b in bindings] == [
            "Retrieve an instance.",
            "Fetch instances.",
            "Create a new instance.",
            "Update an instance.",
            "Update an instance.",
            "Destroy an instance.",
        ]

    def test_overrides(self):
        bindings = compose_bindings(
            "Widget",
            GenericView.UPDATE,
            prefix="/widgets/{id}",
            operation_ids={"UPDATE_PUT": "replaceWidget"},
            descriptions={"UPDATE": "Change a widget."},
            tags=["widgets"],
        )
        assert [b.operation_id for b in bindings] == ["patchWidget", "replaceWidget"]
        assert {b.description for b in bindings} == {"Change a widget."}
        assert all(b.tags == ("widgets",) for b in bindings)

    def test_response_schema_override(self):
        summary = {"type": "object", "properties": {"id": {"type": "integer"}}}
        retrieve, listing = compose_bindings(
            "Widget", ["RETRIEVE", "LIST"], prefix="/w/{id}", response_schema=summary
        )
        assert retrieve.responses[200] == summary
        assert listing.responses[200] == {"type": "array", "items": summary}

    def test_colon_params_normalized(self):
        (binding,) = compose_bindings(
            "Widget", GenericView.RETRIEVE, prefix="/shops/:shop_id/widgets/:id"
        )
        assert binding.path == "/shops/{shop_id}/widgets/{id}"
        assert binding.full_path == "GET /shops/{shop_id}/widgets/{id}"

    def test_params_schema(self):
        (binding,) = compose_bindings(
            "Widget", GenericView.RETRIEVE, prefix="/widgets/{id}", params={"id": "integer"}
        )
        assert binding.params_schema == {
            "type": "object",
            "properties": {"id": {"type": "integer"}},
            "required": ["id"],
        }


def test_normalize_path_leaves_braces():
    assert normalize_path("/widgets/{id}") == "/widgets/{id}"


def test_default_operation_ids_use_camel_case():
    ids = default_operation_ids("order_item")
    assert ids["LIST"] == "getOrderItems"
    assert ids["UPDATE_PATCH"] == "patchOrderItem"
