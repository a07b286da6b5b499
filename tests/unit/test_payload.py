"""
Unit tests for event payload helpers
"""
import json

import pytest

from jsontag.payload import (EventRecord, EventType, build_body, merge_event_data,
                             serialize, to_json_value)


class TestEventType:
    """Test event type values sent to the server"""

    def test_full_set_of_types(self):
        assert [t.value for t in EventType] == [
            "view", "lifecycle", "callback", "error",
            "generic action", "impression", "non interaction",
        ]

    def test_record_adds_event_type(self):
        record = EventRecord("screen_view", EventType.VIEW, {"page_title": "Home"})
        assert record.with_type() == {"page_title": "Home", "event_type": "view"}
        # Original data untouched
        assert "event_type" not in record.data


class TestMerge:
    """Test merging global and event data"""

    def test_event_keys_override_global(self):
        merged = merge_event_data({"a": 1, "b": 2}, {"b": 3, "c": 4})
        assert merged == {"a": 1, "b": 3, "c": 4}
        assert list(merged) == ["a", "b", "c"]

    def test_inputs_not_mutated(self):
        global_data = {"a": 1}
        merge_event_data(global_data, {"a": 2})
        assert global_data == {"a": 1}

    def test_none_inputs(self):
        assert merge_event_data(None, None) == {}


class TestToJsonValue:
    """Test recursive conversion of nested data"""

    def test_nested_containers(self):
        value = {"outer": {"inner": ({"x": 1}, [2, 3])}}
        assert to_json_value(value) == {"outer": {"inner": [{"x": 1}, [2, 3]]}}

    def test_primitives_pass_through(self):
        for value in ("text", 1, 2.5, True, None):
            assert to_json_value(value) is value

    def test_unsupported_values_pass_through(self):
        marker = object()
        assert to_json_value([marker])[0] is marker

    def test_none_inside_list_kept(self):
        assert to_json_value([1, None, "a"]) == [1, None, "a"]


class TestSerialize:
    """Test the JSON body"""

    def test_body_starts_with_name_and_platform(self):
        body = build_body("screen_view", {"page_title": "Home"}, "python app")
        assert list(body) == ["event_name", "jsontag", "page_title"]
        assert body["jsontag"] == "python app"

    def test_nested_payload_survives_json(self):
        data = {
            "ecommerce": {
                "items": [
                    {"id": "sku-1", "price": 9.99, "in_stock": True},
                    {"id": "sku-2", "price": 20, "tags": ["a", "b"], "coupon": None},
                ],
                "currency": "EUR",
            },
            "z_last": 1,
            "a_first": 2,
        }
        body = build_body("purchase", data, "python app")
        decoded = json.loads(serialize(body).decode("utf-8"))

        assert decoded == body
        assert list(decoded) == ["event_name", "jsontag", "ecommerce", "z_last", "a_first"]
        assert list(decoded["ecommerce"]) == ["items", "currency"]
        assert list(decoded["ecommerce"]["items"][1]) == ["id", "price", "tags", "coupon"]
        assert isinstance(decoded["ecommerce"]["items"][0]["price"], float)
        assert isinstance(decoded["ecommerce"]["items"][1]["price"], int)
        assert decoded["ecommerce"]["items"][0]["in_stock"] is True

    def test_unicode_kept_readable(self):
        payload = serialize({"city": "München"})
        assert "München".encode("utf-8") in payload

    def test_unencodable_value_raises_type_error(self):
        with pytest.raises(TypeError):
            serialize({"when": object()})
