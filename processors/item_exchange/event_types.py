"""Decoded item, exchange and reserve listing contract events.

Every event carries the emitting contract address and its position in the
chain; the rest of the fields mirror the contract event parameters.
"""

from typing import ClassVar, Dict, Optional, Type

from pydantic.dataclasses import dataclass

from processors.item_exchange.enums import EventClass


@dataclass
class ChainEvent:
    address: str
    block_number: int
    block_timestamp: int
    transaction_hash: str
    # Position of the log within its transaction
    log_index: int

    event_class: ClassVar[Optional[EventClass]] = None


@dataclass
class DecimalValue:
    value: int


@dataclass
class BidShares:
    creator: DecimalValue
    owner: DecimalValue
    prev_owner: DecimalValue


@dataclass
class AskParams:
    amount: int
    currency: str


@dataclass
class BidParams:
    amount: int
    currency: str
    bidder: str
    recipient: str
    sell_on_share: DecimalValue


# Item contract


@dataclass
class TransferEvent(ChainEvent):
    from_address: str
    to_address: str
    token_id: int

    event_class: ClassVar[EventClass] = EventClass.ITEM


@dataclass
class ApprovalEvent(ChainEvent):
    owner: str
    approved: str
    token_id: int

    event_class: ClassVar[EventClass] = EventClass.ITEM


@dataclass
class ApprovalForAllEvent(ChainEvent):
    owner: str
    operator: str
    approved: bool

    event_class: ClassVar[EventClass] = EventClass.ITEM


@dataclass
class TokenURIUpdatedEvent(ChainEvent):
    token_id: int
    owner: str
    uri: str

    event_class: ClassVar[EventClass] = EventClass.ITEM


@dataclass
class TokenMetadataURIUpdatedEvent(ChainEvent):
    token_id: int
    owner: str
    uri: str

    event_class: ClassVar[EventClass] = EventClass.ITEM


# Exchange contract


@dataclass
class BidShareUpdatedEvent(ChainEvent):
    token_id: int
    bid_shares: BidShares

    event_class: ClassVar[EventClass] = EventClass.EXCHANGE


@dataclass
class AskCreatedEvent(ChainEvent):
    token_id: int
    ask: AskParams

    event_class: ClassVar[EventClass] = EventClass.EXCHANGE


@dataclass
class AskRemovedEvent(ChainEvent):
    token_id: int
    ask: AskParams

    event_class: ClassVar[EventClass] = EventClass.EXCHANGE


@dataclass
class BidCreatedEvent(ChainEvent):
    token_id: int
    bid: BidParams

    event_class: ClassVar[EventClass] = EventClass.EXCHANGE


@dataclass
class BidRemovedEvent(ChainEvent):
    token_id: int
    bid: BidParams

    event_class: ClassVar[EventClass] = EventClass.EXCHANGE


@dataclass
class BidFinalizedEvent(ChainEvent):
    token_id: int
    bid: BidParams

    event_class: ClassVar[EventClass] = EventClass.EXCHANGE


# Reserve listing contract


@dataclass
class ReserveListingCreatedEvent(ChainEvent):
    listing_id: int
    token_id: int
    token_contract: str
    starts_at: int
    duration: int
    list_price: int
    list_type: int
    intermediary_fee_percentage: int
    token_owner: str
    intermediary: str
    list_currency: str

    event_class: ClassVar[EventClass] = EventClass.RESERVE_LISTING


@dataclass
class ReserveListingBidEvent(ChainEvent):
    listing_id: int
    token_id: int
    token_contract: str
    sender: str
    value: int
    first_bid: bool
    extended: bool

    event_class: ClassVar[EventClass] = EventClass.RESERVE_LISTING


@dataclass
class ReserveListingDurationExtendedEvent(ChainEvent):
    listing_id: int
    token_id: int
    token_contract: str
    duration: int

    event_class: ClassVar[EventClass] = EventClass.RESERVE_LISTING


@dataclass
class ReserveListingPriceUpdatedEvent(ChainEvent):
    listing_id: int
    token_id: int
    token_contract: str
    list_price: int

    event_class: ClassVar[EventClass] = EventClass.RESERVE_LISTING


@dataclass
class ReserveListingEndedEvent(ChainEvent):
    listing_id: int
    token_id: int
    token_contract: str
    token_owner: str
    intermediary: str
    winner: str
    amount: int
    list_currency: str

    event_class: ClassVar[EventClass] = EventClass.RESERVE_LISTING


@dataclass
class ReserveListingCanceledEvent(ChainEvent):
    listing_id: int
    token_id: int
    token_contract: str
    token_owner: str

    event_class: ClassVar[EventClass] = EventClass.RESERVE_LISTING


EVENT_TYPES: Dict[str, Type[ChainEvent]] = {
    "Transfer": TransferEvent,
    "Approval": ApprovalEvent,
    "ApprovalForAll": ApprovalForAllEvent,
    "TokenURIUpdated": TokenURIUpdatedEvent,
    "TokenMetadataURIUpdated": TokenMetadataURIUpdatedEvent,
    "BidShareUpdated": BidShareUpdatedEvent,
    "AskCreated": AskCreatedEvent,
    "AskRemoved": AskRemovedEvent,
    "BidCreated": BidCreatedEvent,
    "BidRemoved": BidRemovedEvent,
    "BidFinalized": BidFinalizedEvent,
    "ReserveListingCreated": ReserveListingCreatedEvent,
    "ReserveListingBid": ReserveListingBidEvent,
    "ReserveListingDurationExtended": ReserveListingDurationExtendedEvent,
    "ReserveListingPriceUpdated": ReserveListingPriceUpdatedEvent,
    "ReserveListingEnded": ReserveListingEndedEvent,
    "ReserveListingCanceled": ReserveListingCanceledEvent,
}

EVENT_NAMES: Dict[Type[ChainEvent], str] = {v: k for k, v in EVENT_TYPES.items()}


def get_event_name(event: ChainEvent) -> str:
    return EVENT_NAMES.get(type(event), type(event).__name__)
