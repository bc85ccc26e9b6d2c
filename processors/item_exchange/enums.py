from enum import Enum


class InactiveAskType(Enum):
    REMOVED = "Removed"


class InactiveBidType(Enum):
    REMOVED = "Removed"
    FINALIZED = "Finalized"


class URIUpdateType(Enum):
    CONTENT = "Content"
    METADATA = "Metadata"


class ReserveListingStatus(Enum):
    ACTIVE = "Active"
    CANCELED = "Canceled"
    FINISHED = "Finished"


class ReserveListingBidType(Enum):
    ACTIVE = "Active"
    FINAL = "Final"
    REFUNDED = "Refunded"


class EventClass(Enum):
    """Groups events by the kind of contract allowed to emit them."""

    ITEM = "item"
    EXCHANGE = "exchange"
    RESERVE_LISTING = "reserve_listing"
