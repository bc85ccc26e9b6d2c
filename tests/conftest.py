"""
Shared pytest fixtures.

Every test gets a fresh in-memory SQLite database bound to the global
Session, with the "per_schema" placeholder translated away, and a chain
reader that answers from dictionaries.
"""

import copy

from typing import Callable, Iterable

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from factories import EXCHANGE_CONTRACT, ITEM_CONTRACT, RESERVE_LISTING_CONTRACT
from processors.item_exchange import models  # noqa: F401
from processors.item_exchange.allow_list import AllowList
from processors.item_exchange.chain_reader import ChainReader
from processors.item_exchange.event_types import BidShares, ChainEvent, DecimalValue
from processors.item_exchange.exceptions import CallReverted
from processors.item_exchange.processor import ItemExchangeProcessor
from processors.item_exchange.router import EventRouter
from utils.events_processor import ProcessingResult
from utils.general_utils import standardize_address
from utils.models.general_models import Base
from utils.session import Session


class FakeChainReader(ChainReader):
    """Answers contract reads from dictionaries; anything missing reverts.

    A value may also be a `{from_block: value}` dict, answered with the entry
    in effect at the block the reader was pinned to.
    """

    def __init__(self):
        self.block_number = None
        # (block_number, key) of every read, shared by all pinned readers
        self.reads = []
        self.token_uris = {}
        self.token_metadata_uris = {}
        self.content_hashes = {}
        self.metadata_hashes = {}
        self.exchange_contracts = {}
        self.bid_shares_by_token = {}
        self.erc20_names = {}
        self.erc20_names_bytes32 = {}
        self.erc20_symbols = {}
        self.erc20_symbols_bytes32 = {}
        self.erc20_decimals_by_currency = {}

    def at_block(self, block_number):
        reader = copy.copy(self)
        reader.block_number = block_number
        return reader

    def lookup(self, values, key):
        self.reads.append((self.block_number, key))
        if key not in values:
            raise CallReverted(f"execution reverted: {key}")
        value = values[key]
        if isinstance(value, dict):
            in_effect = [block for block in value if block <= self.block_number]
            if not in_effect:
                raise CallReverted(f"execution reverted: {key}")
            return value[max(in_effect)]
        return value

    def token_uri(self, item_contract, token_id):
        return self.lookup(self.token_uris, token_id)

    def token_metadata_uri(self, item_contract, token_id):
        return self.lookup(self.token_metadata_uris, token_id)

    def token_content_hash(self, item_contract, token_id):
        return self.lookup(self.content_hashes, token_id)

    def token_metadata_hash(self, item_contract, token_id):
        return self.lookup(self.metadata_hashes, token_id)

    def exchange_contract(self, item_contract):
        return self.lookup(self.exchange_contracts, standardize_address(item_contract))

    def bid_shares(self, exchange_contract, token_id):
        return self.lookup(self.bid_shares_by_token, token_id)

    def erc20_name(self, currency):
        return self.lookup(self.erc20_names, standardize_address(currency))

    def erc20_name_bytes32(self, currency):
        return self.lookup(self.erc20_names_bytes32, standardize_address(currency))

    def erc20_symbol(self, currency):
        return self.lookup(self.erc20_symbols, standardize_address(currency))

    def erc20_symbol_bytes32(self, currency):
        return self.lookup(self.erc20_symbols_bytes32, standardize_address(currency))

    def erc20_decimals(self, currency):
        return self.lookup(self.erc20_decimals_by_currency, standardize_address(currency))

    def set_token(self, token_id, uri="ipfs://content", metadata_uri="ipfs://metadata"):
        self.token_uris[token_id] = uri
        self.token_metadata_uris[token_id] = metadata_uri
        self.content_hashes[token_id] = b"\x11" * 32
        self.metadata_hashes[token_id] = b"\x22" * 32
        self.bid_shares_by_token[token_id] = BidShares(
            creator=DecimalValue(value=10),
            owner=DecimalValue(value=85),
            prev_owner=DecimalValue(value=5),
        )


@pytest.fixture(autouse=True)
def database():
    """Fresh in-memory database bound to the global Session."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    ).execution_options(schema_translate_map={"per_schema": None})
    Session.configure(bind=engine)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def chain_reader() -> FakeChainReader:
    reader = FakeChainReader()
    reader.exchange_contracts[standardize_address(ITEM_CONTRACT)] = EXCHANGE_CONTRACT
    reader.set_token(1)
    return reader


@pytest.fixture
def allow_list() -> AllowList:
    return AllowList.build(
        item_contracts=[ITEM_CONTRACT],
        exchange_contracts={EXCHANGE_CONTRACT: (ITEM_CONTRACT, 2)},
        reserve_listing_contracts=[RESERVE_LISTING_CONTRACT],
    )


@pytest.fixture
def router(allow_list, chain_reader) -> EventRouter:
    return EventRouter(allow_list, chain_reader)


@pytest.fixture
def processor(router) -> ItemExchangeProcessor:
    return ItemExchangeProcessor(router)


@pytest.fixture
def apply(processor) -> Callable[..., ProcessingResult]:
    """Process events in order, as one batch starting at index 0."""

    def _apply(*events: ChainEvent) -> ProcessingResult:
        return processor.process_events(list(events), 0)

    return _apply


@pytest.fixture
def load():
    """Read an entity back in its own session."""

    def _load(entity_type, key):
        with Session() as session:
            entity = session.get(entity_type, key)
            if entity is not None:
                session.expunge(entity)
            return entity

    return _load


@pytest.fixture
def load_all():
    def _load_all(entity_type) -> Iterable:
        with Session() as session:
            entities = session.query(entity_type).all()
            for entity in entities:
                session.expunge(entity)
            return entities

    return _load_all
