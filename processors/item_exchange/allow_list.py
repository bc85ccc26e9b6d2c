from dataclasses import dataclass
from types import MappingProxyType
from typing import FrozenSet, Iterable, Mapping, Optional, Tuple

from utils.general_utils import standardize_address


@dataclass(frozen=True)
class ExchangeContract:
    address: str
    item_contract: str
    finalize_transfer_log_offset: int


@dataclass(frozen=True)
class AllowList:
    """Contracts whose events the indexer accepts, per event class.

    Addresses are standardized on construction so lookups are case insensitive.
    """

    item_contracts: FrozenSet[str]
    exchange_contracts: Mapping[str, ExchangeContract]
    reserve_listing_contracts: FrozenSet[str]

    @classmethod
    def build(
        cls,
        item_contracts: Iterable[str],
        exchange_contracts: Mapping[str, Tuple[str, int]],
        reserve_listing_contracts: Iterable[str] = (),
    ) -> "AllowList":
        exchanges = {}
        for address, (item_contract, offset) in exchange_contracts.items():
            exchange = ExchangeContract(
                address=standardize_address(address),
                item_contract=standardize_address(item_contract),
                finalize_transfer_log_offset=offset,
            )
            exchanges[exchange.address] = exchange

        return cls(
            item_contracts=frozenset(
                standardize_address(address) for address in item_contracts
            ),
            exchange_contracts=MappingProxyType(exchanges),
            reserve_listing_contracts=frozenset(
                standardize_address(address) for address in reserve_listing_contracts
            ),
        )

    def is_item_contract(self, address: str) -> bool:
        return standardize_address(address) in self.item_contracts

    def get_exchange_contract(self, address: str) -> Optional[ExchangeContract]:
        return self.exchange_contracts.get(standardize_address(address))

    def is_reserve_listing_contract(self, address: str) -> bool:
        return standardize_address(address) in self.reserve_listing_contracts
