from typing import NamedTuple
from utils.general_utils import standardize_address


class ItemKey(NamedTuple):
    token_contract: str
    token_id: int

    @classmethod
    def create(cls, token_contract: str, token_id: int) -> "ItemKey":
        return cls(standardize_address(token_contract), int(token_id))

    def to_id(self) -> str:
        # Neither part can contain "-": a hex address and a decimal integer
        return f"{standardize_address(self.token_contract)}-{int(self.token_id)}"


class EventPositionKey(NamedTuple):
    """Identity of a historical record: the token and the log that produced it."""

    token_id: str
    transaction_hash: str
    log_index: int

    @classmethod
    def create(
        cls, token_id: int, transaction_hash: str, log_index: int
    ) -> "EventPositionKey":
        return cls(str(int(token_id)), transaction_hash.lower(), int(log_index))


class ReserveListingBidKey(NamedTuple):
    reserve_listing_id: str
    transaction_hash: str
    log_index: int

    def to_id(self) -> str:
        return f"{self.reserve_listing_id}-{self.transaction_hash.lower()}-{int(self.log_index)}"
