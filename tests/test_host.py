from typing import Dict, Tuple
from unittest.mock import MagicMock

import httpx
import pytest

from openhab_provider.host import ProviderHost, empty_state

PROVIDER = {"endpoint": "http://openhab/rest", "api_token": "oh.t"}
CHANNEL = "hue:0210:bridge:bulb1:color"

ITEM_CFG = {
    "type": "openhab_item",
    "name": "kitchen",
    "attributes": {"name": "KitchenLight", "label": "Kitchen light", "type": "Switch", "tags": ["Lighting"]},
}
LINK_CFG = {
    "type": "openhab_link",
    "name": "kitchen_bulb",
    "attributes": {"item_name": "KitchenLight", "channel_uid": CHANNEL},
}

ENRICHED_ITEM = {
    "name": "KitchenLight",
    "label": "Kitchen light",
    "type": "Switch",
    "tags": ["Lighting"],
    "groupNames": [],
    "state": "NULL",
}
ENRICHED_LINK = {"itemName": "KitchenLight", "channelUID": CHANNEL, "configuration": {}, "editable": True}

ITEM_STATE = {
    "type": "openhab_item",
    "attributes": {
        "id": "KitchenLight",
        "name": "KitchenLight",
        "label": "Kitchen light",
        "type": "Switch",
        "category": None,
        "tags": ["Lighting"],
        "group_names": None,
    },
}
LINK_STATE = {
    "type": "openhab_link",
    "attributes": {
        "id": f"KitchenLight-{CHANNEL}",
        "item_name": "KitchenLight",
        "channel_uid": CHANNEL,
        "configuration": None,
    },
}


def _http(routes: Dict[Tuple[str, str], httpx.Response]):
    """Mocked httpx.Client answering by (method, path); unrouted calls fail the test."""
    http = MagicMock(spec=httpx.Client)

    def _request(method, url, **kwargs):
        return routes[(method, url)]

    http.request.side_effect = _request
    return http


def _calls(http):
    return [c.args for c in http.request.call_args_list]


def _document(*resources):
    return {"provider": PROVIDER, "resources": list(resources)}


def _state(**resources):
    state = empty_state()
    state["resources"].update(resources)
    return state


def test_validate_reports_scoped_attribute_errors():
    cfg = {**ITEM_CFG, "attributes": {**ITEM_CFG["attributes"], "type": "Number:Speeed"}}

    result = ProviderHost(_document(cfg)).validate()

    assert not result.ok
    [error] = result.diagnostics.errors
    assert error.attribute_path == "openhab_item.kitchen.type"
    assert error.summary == "Unknown dimension used for Number type"


def test_validate_unknown_resource_type():
    result = ProviderHost(_document({"type": "openhab_thing", "name": "x", "attributes": {}})).validate()

    assert result.diagnostics.errors[0].summary == "Invalid resource type"
    assert result.diagnostics.errors[0].attribute_path == "openhab_thing.x"


def test_validate_missing_required_and_read_only():
    cfg = {"type": "openhab_item", "name": "kitchen", "attributes": {"id": "x", "name": "KitchenLight", "type": "Switch"}}

    result = ProviderHost(_document(cfg)).validate()

    summaries = {(d.attribute_path, d.summary) for d in result.diagnostics.errors}
    assert ("openhab_item.kitchen.label", "Missing required argument") in summaries
    assert ("openhab_item.kitchen.id", "Invalid configuration for read-only attribute") in summaries


def test_validate_accepts_unknown_values():
    cfg = {**ITEM_CFG, "attributes": {**ITEM_CFG["attributes"], "type": {"unknown": True}}}

    result = ProviderHost(_document(cfg)).validate()

    assert result.ok


def test_apply_creates_resources_and_renders_state():
    http = _http(
        {
            ("PUT", "/items/KitchenLight"): httpx.Response(201, json=ENRICHED_ITEM),
            ("PUT", f"/links/KitchenLight/{CHANNEL}"): httpx.Response(200),
        }
    )

    result = ProviderHost(_document(ITEM_CFG, LINK_CFG), http_client=http).apply()

    assert result.ok, [str(d) for d in result.diagnostics]
    assert [(c.address, c.action) for c in result.changes] == [
        ("openhab_item.kitchen", "create"),
        ("openhab_link.kitchen_bulb", "create"),
    ]
    assert result.state == _state(**{"openhab_item.kitchen": ITEM_STATE, "openhab_link.kitchen_bulb": LINK_STATE})


def test_apply_is_noop_when_remote_matches_state():
    http = _http(
        {
            ("GET", "/items/KitchenLight"): httpx.Response(200, json=ENRICHED_ITEM),
            ("GET", f"/links/KitchenLight/{CHANNEL}"): httpx.Response(200, json=ENRICHED_LINK),
        }
    )
    state = _state(**{"openhab_item.kitchen": ITEM_STATE, "openhab_link.kitchen_bulb": LINK_STATE})

    result = ProviderHost(_document(ITEM_CFG, LINK_CFG), state, http_client=http).apply()

    assert result.ok
    assert {c.action for c in result.changes} == {"noop"}
    assert result.state == state
    assert all(method == "GET" for method, _ in _calls(http))


def test_apply_updates_drifted_item():
    drifted = {**ENRICHED_ITEM, "label": "Changed in UI"}
    http = _http(
        {
            ("GET", "/items/KitchenLight"): httpx.Response(200, json=drifted),
            ("PUT", "/items/KitchenLight"): httpx.Response(200, json=ENRICHED_ITEM),
        }
    )

    result = ProviderHost(_document(ITEM_CFG), _state(**{"openhab_item.kitchen": ITEM_STATE}), http_client=http).apply()

    assert result.ok
    [change] = result.changes
    assert change.action == "update"
    assert change.changed_paths == ["label"]
    assert result.state["resources"]["openhab_item.kitchen"]["attributes"]["label"] == "Kitchen light"


def test_apply_replaces_item_on_rename():
    renamed = {**ITEM_CFG, "attributes": {**ITEM_CFG["attributes"], "name": "KitchenLamp"}}
    http = _http(
        {
            ("GET", "/items/KitchenLight"): httpx.Response(200, json=ENRICHED_ITEM),
            ("DELETE", "/items/KitchenLight"): httpx.Response(200),
            ("PUT", "/items/KitchenLamp"): httpx.Response(201, json={**ENRICHED_ITEM, "name": "KitchenLamp"}),
        }
    )

    result = ProviderHost(_document(renamed), _state(**{"openhab_item.kitchen": ITEM_STATE}), http_client=http).apply()

    assert result.ok
    assert result.changes[0].action == "replace"
    assert result.changes[0].replace_paths == ["name"]
    assert _calls(http)[1:] == [("DELETE", "/items/KitchenLight"), ("PUT", "/items/KitchenLamp")]
    assert result.state["resources"]["openhab_item.kitchen"]["attributes"]["id"] == "KitchenLamp"


def test_apply_recreates_resource_removed_outside():
    http = _http(
        {
            ("GET", "/items/KitchenLight"): httpx.Response(404),
            ("PUT", "/items/KitchenLight"): httpx.Response(201, json=ENRICHED_ITEM),
        }
    )

    result = ProviderHost(_document(ITEM_CFG), _state(**{"openhab_item.kitchen": ITEM_STATE}), http_client=http).apply()

    assert result.ok
    assert result.changes[0].action == "create"
    assert "openhab_item.kitchen" in result.state["resources"]


def test_apply_deletes_resources_dropped_from_config():
    http = _http(
        {
            ("GET", "/items/KitchenLight"): httpx.Response(200, json=ENRICHED_ITEM),
            ("GET", f"/links/KitchenLight/{CHANNEL}"): httpx.Response(200, json=ENRICHED_LINK),
            ("DELETE", f"/links/KitchenLight/{CHANNEL}"): httpx.Response(200),
        }
    )
    state = _state(**{"openhab_item.kitchen": ITEM_STATE, "openhab_link.kitchen_bulb": LINK_STATE})

    result = ProviderHost(_document(ITEM_CFG), state, http_client=http).apply()

    assert result.ok
    assert [(c.address, c.action) for c in result.changes] == [
        ("openhab_link.kitchen_bulb", "delete"),
        ("openhab_item.kitchen", "noop"),
    ]
    assert list(result.state["resources"]) == ["openhab_item.kitchen"]


def test_apply_keeps_prior_state_when_create_fails():
    http = _http({("PUT", "/items/KitchenLight"): httpx.Response(500)})

    result = ProviderHost(_document(ITEM_CFG), http_client=http).apply()

    assert not result.ok
    assert result.diagnostics.errors[0].attribute_path == "openhab_item.kitchen"
    assert result.state["resources"] == {}


def test_apply_stops_before_contacting_openhab_on_invalid_config():
    http = _http({})
    cfg = {**ITEM_CFG, "attributes": {**ITEM_CFG["attributes"], "type": "Colour"}}

    result = ProviderHost(_document(cfg), http_client=http).apply()

    assert result.diagnostics.errors[0].summary == "Unknown type"
    http.request.assert_not_called()


def test_apply_reports_provider_errors(monkeypatch):
    monkeypatch.delenv("OPENHAB_ENDPOINT", raising=False)
    monkeypatch.delenv("OPENHAB_API_TOKEN", raising=False)

    result = ProviderHost({"resources": [ITEM_CFG]}, http_client=_http({})).apply()

    assert not result.ok
    assert all(d.attribute_path.startswith("provider") for d in result.diagnostics.errors)


def test_plan_is_offline():
    http = _http({})
    relabelled = {**ITEM_CFG, "attributes": {**ITEM_CFG["attributes"], "label": "Kitchen"}}
    state = _state(**{"openhab_item.kitchen": ITEM_STATE, "openhab_link.kitchen_bulb": LINK_STATE})

    result = ProviderHost(_document(relabelled), state, http_client=http).plan()

    assert [(c.address, c.action) for c in result.changes] == [
        ("openhab_link.kitchen_bulb", "delete"),
        ("openhab_item.kitchen", "update"),
    ]
    http.request.assert_not_called()


def test_plan_rejects_type_change_at_same_address():
    cfg = {"type": "openhab_link", "name": "kitchen", "attributes": LINK_CFG["attributes"]}

    result = ProviderHost(_document(cfg), _state(**{"openhab_link.kitchen": ITEM_STATE})).plan()

    assert result.diagnostics.errors[0].summary == "Resource type changed"


def test_destroy_removes_in_reverse_order():
    http = _http(
        {
            ("DELETE", f"/links/KitchenLight/{CHANNEL}"): httpx.Response(200),
            ("DELETE", "/items/KitchenLight"): httpx.Response(404),
        }
    )
    state = _state(**{"openhab_item.kitchen": ITEM_STATE, "openhab_link.kitchen_bulb": LINK_STATE})

    result = ProviderHost(_document(ITEM_CFG, LINK_CFG), state, http_client=http).destroy()

    assert result.ok
    assert _calls(http) == [("DELETE", f"/links/KitchenLight/{CHANNEL}"), ("DELETE", "/items/KitchenLight")]
    assert result.state == empty_state()


def test_destroy_keeps_resources_that_failed_to_delete():
    http = _http({("DELETE", "/items/KitchenLight"): httpx.Response(500)})

    result = ProviderHost(_document(ITEM_CFG), _state(**{"openhab_item.kitchen": ITEM_STATE}), http_client=http).destroy()

    assert not result.ok
    assert "openhab_item.kitchen" in result.state["resources"]


def test_import_item_reads_remote_object():
    http = _http({("GET", "/items/KitchenLight"): httpx.Response(200, json=ENRICHED_ITEM)})

    result = ProviderHost(_document(), http_client=http).import_resource("openhab_item.kitchen", "KitchenLight")

    assert result.ok
    attributes = result.state["resources"]["openhab_item.kitchen"]["attributes"]
    assert attributes["type"] == "Switch"
    assert attributes["tags"] == ["Lighting"]


def test_import_link():
    http = _http({("GET", f"/links/KitchenLight/{CHANNEL}"): httpx.Response(200, json=ENRICHED_LINK)})

    result = ProviderHost(_document(), http_client=http).import_resource(
        "openhab_link.kitchen_bulb", f"KitchenLight-{CHANNEL}"
    )

    assert result.ok
    assert result.state["resources"]["openhab_link.kitchen_bulb"]["attributes"]["channel_uid"] == CHANNEL


@pytest.mark.parametrize(
    "address, import_id, summary",
    [
        ("openhab_thing.x", "a", "Invalid resource type"),
        ("openhab_item.kitchen", "Missing", "Cannot import non-existent remote object"),
        ("openhab_link.bulb", "no_separator", "Import Link Error"),
    ],
)
def test_import_errors(address, import_id, summary):
    http = _http({("GET", "/items/Missing"): httpx.Response(404)})

    result = ProviderHost(_document(), http_client=http).import_resource(address, import_id)

    assert result.diagnostics.errors[0].summary == summary
    assert result.state == empty_state()


def test_apply_rejects_configured_values_still_unknown():
    http = _http({})
    cfg = {**ITEM_CFG, "attributes": {**ITEM_CFG["attributes"], "name": {"unknown": True}}}
    host = ProviderHost(_document(cfg), http_client=http)
    assert host.validate().ok

    result = host.apply()

    assert not result.ok
    [error] = result.diagnostics.errors
    assert error.summary == "Value unknown at apply time"
    assert error.attribute_path == "openhab_item.kitchen.name"
    assert result.state == empty_state()
    http.request.assert_not_called()


def test_apply_unknown_value_falls_back_to_prior_state():
    http = _http({("GET", "/items/KitchenLight"): httpx.Response(200, json=ENRICHED_ITEM)})
    cfg = {**ITEM_CFG, "attributes": {**ITEM_CFG["attributes"], "label": {"unknown": True}}}

    result = ProviderHost(_document(cfg), _state(**{"openhab_item.kitchen": ITEM_STATE}), http_client=http).apply()

    assert result.ok
    assert result.changes[0].action == "noop"


def test_state_with_unsupported_type_is_a_diagnostic():
    http = _http({})
    state = _state(**{"openhab_thing.x": {"type": "openhab_thing", "attributes": {}}})
    host = ProviderHost(_document(ITEM_CFG), state, http_client=http)

    for result in (host.plan(), host.apply(), host.destroy(), host.import_resource("openhab_item.kitchen", "KitchenLight")):
        assert not result.ok
        assert result.diagnostics.errors[0].summary == "Invalid resource type"
        assert result.diagnostics.errors[0].attribute_path == "openhab_thing.x"
        assert result.state == state

    http.request.assert_not_called()
