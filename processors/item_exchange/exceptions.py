from typing import Any, Dict, Optional


class ItemExchangeError(Exception):
    pass


class MissingReferentError(ItemExchangeError):
    """An entity the protocol guarantees to exist was not found in the store."""

    def __init__(
        self, entity_type: str, key: Any, context: Optional[Dict[str, Any]] = None
    ):
        self.entity_type = entity_type
        self.key = key
        self.context = context or {}
        super().__init__(f"{entity_type} not found for key {key!r}")


class UnknownEventError(ItemExchangeError):
    pass


class CallReverted(ItemExchangeError):
    """A contract read reverted or the node could not be reached."""
