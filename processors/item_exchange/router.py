import logging

from typing import Optional

from processors.item_exchange.allow_list import AllowList
from processors.item_exchange.auction_lifecycle import AuctionLifecycle
from processors.item_exchange.chain_reader import ChainReader
from processors.item_exchange.currency import CurrencyCatalog
from processors.item_exchange.enums import EventClass
from processors.item_exchange.event_types import (
    ApprovalEvent,
    ApprovalForAllEvent,
    AskCreatedEvent,
    AskRemovedEvent,
    BidCreatedEvent,
    BidFinalizedEvent,
    BidRemovedEvent,
    BidShareUpdatedEvent,
    ChainEvent,
    ReserveListingBidEvent,
    ReserveListingCanceledEvent,
    ReserveListingCreatedEvent,
    ReserveListingDurationExtendedEvent,
    ReserveListingEndedEvent,
    ReserveListingPriceUpdatedEvent,
    TokenMetadataURIUpdatedEvent,
    TokenURIUpdatedEvent,
    TransferEvent,
    get_event_name,
)
from processors.item_exchange.exceptions import UnknownEventError
from processors.item_exchange.identity import IdentityResolver
from processors.item_exchange.item_lifecycle import ItemLifecycle
from processors.item_exchange.market_lifecycle import MarketLifecycle
from utils.config import NativeCurrencyConfig
from utils.store import EntityStore
from utils.token_utils import ItemKey


class EventRouter:
    """Checks the emitting contract against the allow list and hands the event
    to the lifecycle that owns its entities. Never writes entities itself.
    """

    def __init__(
        self,
        allow_list: AllowList,
        chain_reader: ChainReader,
        native_currency: NativeCurrencyConfig = NativeCurrencyConfig(),
        default_currency_decimals: Optional[int] = None,
    ):
        self.allow_list = allow_list
        self.chain_reader = chain_reader
        self.native_currency = native_currency
        self.default_currency_decimals = default_currency_decimals

    def is_allowed(self, event: ChainEvent) -> bool:
        match event.event_class:
            case EventClass.ITEM:
                return self.allow_list.is_item_contract(event.address)
            case EventClass.EXCHANGE:
                return self.allow_list.get_exchange_contract(event.address) is not None
            case EventClass.RESERVE_LISTING:
                return self.allow_list.is_reserve_listing_contract(event.address)
            case _:
                raise UnknownEventError(
                    f"No event class for event {type(event).__name__}"
                )

    def route(self, event: ChainEvent, store: EntityStore) -> bool:
        """Dispatch one event. Returns False when the source contract is not allow listed."""
        if not self.is_allowed(event):
            logging.info(
                "[Router] Contract is not allow listed for this event, not proceeding",
                extra={
                    "event_type": get_event_name(event),
                    "contract_address": event.address,
                    "transaction_hash": event.transaction_hash,
                },
            )
            return False

        # Contract state is read as of the block that emitted the event
        chain_reader = self.chain_reader.at_block(event.block_number)
        users = IdentityResolver(store)
        currencies = CurrencyCatalog(
            store,
            chain_reader,
            self.native_currency,
            self.default_currency_decimals,
        )
        items = ItemLifecycle(store, users, chain_reader)
        market = MarketLifecycle(store, users, currencies)
        auctions = AuctionLifecycle(store, users, currencies)

        match event:
            case TransferEvent():
                items.handle_transfer(event, self.item_key(event, event.token_id))
            case ApprovalEvent():
                items.handle_approval(event, self.item_key(event, event.token_id))
            case ApprovalForAllEvent():
                items.handle_approval_for_all(event)
            case TokenURIUpdatedEvent():
                items.handle_token_uri_updated(
                    event, self.item_key(event, event.token_id)
                )
            case TokenMetadataURIUpdatedEvent():
                items.handle_token_metadata_uri_updated(
                    event, self.item_key(event, event.token_id)
                )
            case BidShareUpdatedEvent():
                items.handle_bid_share_updated(
                    event, self.item_key(event, event.token_id)
                )
            case AskCreatedEvent():
                market.handle_ask_created(event, self.item_key(event, event.token_id))
            case AskRemovedEvent():
                market.handle_ask_removed(event, self.item_key(event, event.token_id))
            case BidCreatedEvent():
                market.handle_bid_created(event, self.item_key(event, event.token_id))
            case BidRemovedEvent():
                market.handle_bid_removed(event, self.item_key(event, event.token_id))
            case BidFinalizedEvent():
                exchange = self.allow_list.get_exchange_contract(event.address)
                market.handle_bid_finalized(
                    event,
                    self.item_key(event, event.token_id),
                    exchange.finalize_transfer_log_offset,
                )
            case ReserveListingCreatedEvent():
                auctions.handle_reserve_listing_created(event, str(event.listing_id))
            case ReserveListingBidEvent():
                auctions.handle_reserve_listing_bid(event, str(event.listing_id))
            case ReserveListingDurationExtendedEvent():
                auctions.handle_reserve_listing_duration_extended(
                    event, str(event.listing_id)
                )
            case ReserveListingPriceUpdatedEvent():
                auctions.handle_reserve_listing_price_updated(
                    event, str(event.listing_id)
                )
            case ReserveListingEndedEvent():
                auctions.handle_reserve_listing_ended(event, str(event.listing_id))
            case ReserveListingCanceledEvent():
                auctions.handle_reserve_listing_canceled(event, str(event.listing_id))
            case _:
                raise UnknownEventError(
                    f"No handler for event {type(event).__name__}"
                )

        return True

    def item_key(self, event: ChainEvent, token_id: int) -> ItemKey:
        # Exchange events refer to tokens of the item contract they are paired with
        if event.event_class == EventClass.EXCHANGE:
            exchange = self.allow_list.get_exchange_contract(event.address)
            return ItemKey.create(exchange.item_contract, token_id)
        return ItemKey.create(event.address, token_id)
