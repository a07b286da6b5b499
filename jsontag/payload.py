"""
Event payloads

Event types, the queued event record and the helpers that turn nested
event data into the JSON body sent to the collection endpoint.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

PLATFORM_FIELD = "jsontag"
EVENT_NAME_FIELD = "event_name"
EVENT_TYPE_FIELD = "event_type"


class EventType(Enum):
    VIEW = "view"
    LIFECYCLE = "lifecycle"
    CALLBACK = "callback"
    ERROR = "error"
    GENERIC_ACTION = "generic action"
    IMPRESSION = "impression"
    NON_INTERACTION = "non interaction"


@dataclass
class EventRecord:
    """A tracking call waiting to be sent"""

    name: str
    type: EventType
    data: Dict[str, Any] = field(default_factory=dict)

    def with_type(self) -> Dict[str, Any]:
        """Event data plus the event_type field"""
        data = dict(self.data)
        data[EVENT_TYPE_FIELD] = self.type.value
        return data


def to_json_value(value: Any) -> Any:
    """
    Recursively convert mappings and sequences to dicts and lists

    Key order and list order are preserved. Anything else (str, numbers,
    bool, None, unknown objects) is returned unchanged.
    """
    if isinstance(value, Mapping):
        return {str(k): to_json_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_value(item) for item in value]
    return value


def merge_event_data(global_data: Optional[Mapping], event_data: Optional[Mapping]) -> Dict[str, Any]:
    """Global data first, event-local keys override on collision"""
    merged: Dict[str, Any] = dict(global_data or {})
    merged.update(event_data or {})
    return merged


def build_body(event_name: str, data: Mapping, platform_tag: str) -> Dict[str, Any]:
    """Request body: event name, platform tag, then the merged data"""
    body: Dict[str, Any] = {
        EVENT_NAME_FIELD: event_name,
        PLATFORM_FIELD: platform_tag,
    }
    for key, value in data.items():
        body[key] = to_json_value(value)
    return body


def serialize(body: Mapping) -> bytes:
    """UTF-8 JSON; raises TypeError for values json cannot encode"""
    return json.dumps(body, ensure_ascii=False).encode("utf-8")
