import logging

from typing import Callable, Optional

from processors.item_exchange.chain_reader import ChainReader
from processors.item_exchange.exceptions import CallReverted
from processors.item_exchange.models import Currency
from utils.config import NativeCurrencyConfig
from utils.general_utils import ZERO_ADDRESS, bytes32_to_str, standardize_address
from utils.store import EntityStore

UNKNOWN = "unknown"

# bytes32 value returned by tokens that do not implement name()/symbol()
NULL_ETH_VALUE = "0x" + "00" * 31 + "01"


class CurrencyCatalog:
    def __init__(
        self,
        store: EntityStore,
        chain_reader: ChainReader,
        native_currency: NativeCurrencyConfig,
        default_decimals: Optional[int] = None,
    ):
        self.store = store
        self.chain_reader = chain_reader
        self.native_currency = native_currency
        self.default_decimals = default_decimals

    def find_or_create_currency(self, address: str) -> Currency:
        currency_id = standardize_address(address)
        currency = self.store.load(Currency, currency_id)

        if currency is None:
            currency = self.create_currency(currency_id)

        return currency

    def create_currency(self, currency_id: str) -> Currency:
        if currency_id == ZERO_ADDRESS:
            currency = Currency(
                id=currency_id,
                name=self.native_currency.name,
                symbol=self.native_currency.symbol,
                decimals=self.native_currency.decimals,
                liquidity=0,
            )
        else:
            currency = Currency(
                id=currency_id,
                name=self.fetch_string(
                    currency_id,
                    self.chain_reader.erc20_name,
                    self.chain_reader.erc20_name_bytes32,
                ),
                symbol=self.fetch_string(
                    currency_id,
                    self.chain_reader.erc20_symbol,
                    self.chain_reader.erc20_symbol_bytes32,
                ),
                decimals=self.fetch_decimals(currency_id),
                liquidity=0,
            )

        logging.info(
            "[ItemExchange] Creating currency",
            extra={
                "currency": currency_id,
                "symbol": currency.symbol,
                "decimals": currency.decimals,
            },
        )
        return self.store.save(currency)

    def fetch_string(
        self,
        currency_id: str,
        fetch_typed: Callable[[str], str],
        fetch_bytes32: Callable[[str], bytes],
    ) -> str:
        try:
            return fetch_typed(currency_id)
        except CallReverted:
            pass

        try:
            value = fetch_bytes32(currency_id)
        except CallReverted:
            logging.warning(
                "[ItemExchange] Could not read currency metadata",
                extra={"currency": currency_id},
            )
            return UNKNOWN

        # for broken tokens that have no string accessor exposed
        if "0x" + value.hex() == NULL_ETH_VALUE:
            return UNKNOWN
        return bytes32_to_str(value)

    def fetch_decimals(self, currency_id: str) -> Optional[int]:
        try:
            return self.chain_reader.erc20_decimals(currency_id)
        except CallReverted:
            logging.warning(
                "[ItemExchange] Could not read currency decimals",
                extra={"currency": currency_id, "default_decimals": self.default_decimals},
            )
            return self.default_decimals
