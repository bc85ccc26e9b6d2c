"""Reads decoded events from a JSON lines file.

Each line is one event in chain order:

    {"event": "Transfer", "address": "0x...", "block_number": 1, ...}
"""

import json

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, Optional

from processors.item_exchange.event_types import ChainEvent, EVENT_TYPES
from processors.item_exchange.exceptions import UnknownEventError


def parse_event(data: Dict[str, Any]) -> ChainEvent:
    data = dict(data)
    event_name = data.pop("event")
    event_type = EVENT_TYPES.get(event_name)
    if event_type is None:
        raise UnknownEventError(f"Unknown event type {event_name}")
    return event_type(**data)


class EventSource(ABC):
    @abstractmethod
    def events(
        self, starting_event_index: int, ending_event_index: Optional[int] = None
    ) -> Iterator[ChainEvent]:
        pass


class JsonLinesEventSource(EventSource):
    def __init__(self, path: str):
        self.path = path

    def events(
        self, starting_event_index: int, ending_event_index: Optional[int] = None
    ) -> Iterator[ChainEvent]:
        with open(self.path, "r") as file:
            event_index = 0
            for line in file:
                if not line.strip():
                    continue
                if ending_event_index is not None and event_index > ending_event_index:
                    return
                if event_index >= starting_event_index:
                    yield parse_event(json.loads(line))
                event_index += 1
