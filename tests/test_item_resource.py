from unittest.mock import MagicMock

import httpx

from openhab_provider.api.client import OpenhabClient
from openhab_provider.api.types import ApiAuth, ApiConnection
from openhab_provider.core.values import ListValue, StringValue
from openhab_provider.framework.resource import ResourceResponse
from openhab_provider.provider import ProviderContext
from openhab_provider.resources.item import ItemResource, ItemResourceData, data_to_item


def _resource(*responses):
    http = MagicMock(spec=httpx.Client)
    http.request.side_effect = list(responses)
    conn = ApiConnection(base_url="http://openhab/rest", timeout_seconds=1.0, headers={}, auth=ApiAuth(api_token="oh.t"))
    return ItemResource(ProviderContext(client=OpenhabClient(conn, client=http), version="test")), http


def _data(**overrides) -> ItemResourceData:
    values = dict(
        id=StringValue.unknown(),
        name=StringValue.of("KitchenLight"),
        label=StringValue.of("Kitchen light"),
        type=StringValue.of("Switch"),
        category=StringValue.null(),
        tags=ListValue.of([StringValue.of("Lighting")]),
        group_names=ListValue.null(),
    )
    values.update(overrides)
    return ItemResourceData(**values)


ENRICHED = {
    "name": "KitchenLight",
    "label": "Kitchen light",
    "type": "Switch",
    "tags": ["Lighting"],
    "groupNames": [],
    "state": "NULL",
    "editable": True,
    "link": "http://openhab/rest/items/KitchenLight",
}


def test_data_to_item_omits_absent_values():
    body = data_to_item(_data()).to_body()

    assert body == {"name": "KitchenLight", "label": "Kitchen light", "type": "Switch", "tags": ["Lighting"]}


def test_create_stores_enriched_item():
    resource, http = _resource(httpx.Response(201, json=ENRICHED))
    resp = ResourceResponse()

    resource.create(_data(), resp)

    assert len(resp.diagnostics) == 0
    assert resp.state.id == StringValue.of("KitchenLight")
    assert resp.state.type == StringValue.of("Switch")
    assert resp.state.category.is_null
    # configured as null, answered with []
    assert resp.state.group_names.is_null
    assert http.request.call_args.args == ("PUT", "/items/KitchenLight")


def test_create_warns_when_item_already_existed():
    resource, _ = _resource(httpx.Response(200, json=ENRICHED))
    resp = ResourceResponse()

    resource.create(_data(), resp)

    assert not resp.diagnostics.has_error()
    assert resp.diagnostics.warnings[0].summary == "Create Item Warning"
    assert "KitchenLight was not created, but updated" in resp.diagnostics.warnings[0].detail
    assert resp.state is not None


def test_create_error_status():
    resource, _ = _resource(httpx.Response(400))
    resp = ResourceResponse()

    resource.create(_data(), resp)

    assert resp.diagnostics.errors[0].summary == "Create Item Error"
    assert "400 Bad Request" in resp.diagnostics.errors[0].detail
    assert resp.state is None


def test_create_transport_error_becomes_diagnostic():
    resource, _ = _resource(httpx.ConnectError("refused"))
    resp = ResourceResponse()

    resource.create(_data(), resp)

    assert resp.diagnostics.errors[0].summary == "Client Error"
    assert "refused" in resp.diagnostics.errors[0].detail


def test_create_undecodable_body():
    resource, _ = _resource(httpx.Response(201, text="not json"))
    resp = ResourceResponse()

    resource.create(_data(), resp)

    assert resp.diagnostics.errors[0].summary == "Create Item Error"
    assert "Unable to read response" in resp.diagnostics.errors[0].detail


def test_read_refreshes_state():
    changed = dict(ENRICHED, label="Changed", groupNames=["gKitchen"])
    resource, http = _resource(httpx.Response(200, json=changed))
    resp = ResourceResponse()

    resource.read(_data(id=StringValue.of("KitchenLight")), resp)

    assert resp.state.label == StringValue.of("Changed")
    assert resp.state.group_names == ListValue.of([StringValue.of("gKitchen")])
    assert http.request.call_args.args == ("GET", "/items/KitchenLight")


def test_read_not_found_removes_resource():
    resource, _ = _resource(httpx.Response(404))
    resp = ResourceResponse()

    resource.read(_data(), resp)

    assert resp.removed
    assert resp.state is None
    assert len(resp.diagnostics) == 0


def test_read_unexpected_status():
    resource, _ = _resource(httpx.Response(500))
    resp = ResourceResponse()

    resource.read(_data(), resp)

    assert resp.diagnostics.errors[0].summary == "Read Item Error"
    assert "500 Internal Server Error" in resp.diagnostics.errors[0].detail


def test_update_ok():
    resource, _ = _resource(httpx.Response(200, json=dict(ENRICHED, label="New")))
    resp = ResourceResponse()

    resource.update(_data(label=StringValue.of("New")), resp)

    assert len(resp.diagnostics) == 0
    assert resp.state.label == StringValue.of("New")


def test_update_warns_when_item_was_created():
    resource, _ = _resource(httpx.Response(201, json=ENRICHED))
    resp = ResourceResponse()

    resource.update(_data(), resp)

    assert resp.diagnostics.warnings[0].summary == "Update Item Warning"


def test_update_error_status():
    resource, _ = _resource(httpx.Response(405))
    resp = ResourceResponse()

    resource.update(_data(), resp)

    assert resp.diagnostics.errors[0].summary == "Update Item Error"


def test_delete_ok_and_already_removed():
    for status in (200, 404):
        resource, http = _resource(httpx.Response(status))
        resp = ResourceResponse()

        resource.delete(_data(), resp)

        assert resp.removed
        assert len(resp.diagnostics) == 0
        assert http.request.call_args.args == ("DELETE", "/items/KitchenLight")


def test_delete_error_status():
    resource, _ = _resource(httpx.Response(500))
    resp = ResourceResponse()

    resource.delete(_data(), resp)

    assert not resp.removed
    assert resp.diagnostics.errors[0].summary == "Delete Item Error"


def test_import_state_passes_id_through_to_name():
    resource, _ = _resource()
    resp = ResourceResponse()

    resource.import_state("KitchenLight", resp)

    assert resp.state.name == StringValue.of("KitchenLight")
    assert resp.state.type.is_null


def test_schema_wires_item_type_validator():
    schema = ItemResource.schema()

    assert schema.attributes["type"].validators[0].description() == "Ensures a given type is valid."
    assert schema.attributes["name"].has_modifier("requires_replace")
    assert schema.attributes["id"].computed
