import logging

from processors.item_exchange.currency import CurrencyCatalog
from processors.item_exchange.enums import InactiveAskType, InactiveBidType
from processors.item_exchange.event_types import (
    AskCreatedEvent,
    AskRemovedEvent,
    BidCreatedEvent,
    BidFinalizedEvent,
    BidParams,
    BidRemovedEvent,
    ChainEvent,
)
from processors.item_exchange.identity import IdentityResolver
from processors.item_exchange.models import (
    Ask,
    Bid,
    Currency,
    InactiveAsk,
    InactiveBid,
    Item,
    Transfer,
)
from utils.store import EntityStore
from utils.token_utils import EventPositionKey, ItemKey

DEFAULT_FINALIZE_TRANSFER_LOG_OFFSET = 2


class MarketLifecycle:
    """Asks and bids on items.

    At most one live Ask exists per (item, owner) and one live Bid per
    (item, bidder). Every ask or bid that stops being live leaves exactly one
    inactive snapshot behind, and Currency.liquidity tracks the sum of live
    bid amounts incrementally.
    """

    def __init__(
        self,
        store: EntityStore,
        users: IdentityResolver,
        currencies: CurrencyCatalog,
    ):
        self.store = store
        self.users = users
        self.currencies = currencies

    def handle_ask_created(self, event: AskCreatedEvent, item_key: ItemKey) -> None:
        logging.info(
            "[ItemExchange] Starting handler for AskCreated",
            extra={"token_id": str(item_key.token_id), "amount": str(event.ask.amount)},
        )

        item = self.store.require(Item, item_key.to_id(), token_id=str(item_key.token_id))
        currency = self.currencies.find_or_create_currency(event.ask.currency)
        ask = self.store.load(Ask, (item.id, item.owner))

        if ask is None:
            ask = Ask(
                item_id=item.id,
                owner=item.owner,
                amount=event.ask.amount,
                currency=currency.id,
                transaction_hash=event.transaction_hash,
                created_at_timestamp=event.block_timestamp,
                created_at_block_number=event.block_number,
            )
        else:
            self.create_inactive_ask(event, item, ask)

            # update the fields on the original ask
            ask.amount = event.ask.amount
            ask.currency = currency.id
            ask.transaction_hash = event.transaction_hash
            ask.created_at_timestamp = event.block_timestamp
            ask.created_at_block_number = event.block_number

        self.store.save(ask)

        logging.info(
            "[ItemExchange] Completed handler for AskCreated",
            extra={"item": item.id, "owner": ask.owner, "amount": str(ask.amount)},
        )

    def handle_ask_removed(self, event: AskRemovedEvent, item_key: ItemKey) -> None:
        # asks must be > 0 and evenly split by bid shares
        if event.ask.amount == 0:
            logging.info(
                "[ItemExchange] AskRemoved has a 0 amount, returning early and not updating state",
                extra={
                    "token_id": str(item_key.token_id),
                    "transaction_hash": event.transaction_hash,
                },
            )
            return

        item = self.store.require(Item, item_key.to_id(), token_id=str(item_key.token_id))
        ask_key = (item.id, item.owner)
        ask = self.store.require(Ask, ask_key, token_id=str(item_key.token_id))

        self.create_inactive_ask(event, item, ask)
        self.store.remove(Ask, ask_key)

        logging.info(
            "[ItemExchange] Completed handler for AskRemoved",
            extra={"item": item.id, "owner": item.owner},
        )

    def handle_bid_created(self, event: BidCreatedEvent, item_key: ItemKey) -> None:
        logging.info(
            "[ItemExchange] Starting handler for BidCreated",
            extra={"token_id": str(item_key.token_id), "amount": str(event.bid.amount)},
        )

        item = self.store.require(Item, item_key.to_id(), token_id=str(item_key.token_id))
        bidder = self.users.find_or_create_user(event.bid.bidder)
        recipient = self.users.find_or_create_user(event.bid.recipient)
        currency = self.currencies.find_or_create_currency(event.bid.currency)

        # A bidder holds one bid per item: a new bid overwrites the old one
        bid = self.store.load(Bid, (item.id, bidder.id))
        if bid is None:
            bid = Bid(item_id=item.id, bidder=bidder.id)
        else:
            logging.warning(
                "[ItemExchange] Replacing live bid without a BidRemoved",
                extra={"item": item.id, "bidder": bidder.id},
            )
            self.release_liquidity(bid.currency, bid.amount)

        bid.amount = event.bid.amount
        bid.currency = currency.id
        bid.sell_on_share = event.bid.sell_on_share.value
        bid.recipient = recipient.id
        bid.transaction_hash = event.transaction_hash
        bid.created_at_timestamp = event.block_timestamp
        bid.created_at_block_number = event.block_number
        self.store.save(bid)

        currency.liquidity = currency.liquidity + event.bid.amount
        self.store.save(currency)

        logging.info(
            "[ItemExchange] Completed handler for BidCreated",
            extra={"item": item.id, "bidder": bidder.id, "amount": str(bid.amount)},
        )

    def handle_bid_removed(self, event: BidRemovedEvent, item_key: ItemKey) -> None:
        item = self.store.require(Item, item_key.to_id(), token_id=str(item_key.token_id))
        bidder = self.users.find_or_create_user(event.bid.bidder)
        bid_key = (item.id, bidder.id)
        bid = self.store.require(Bid, bid_key, token_id=str(item_key.token_id))

        self.create_inactive_bid(
            event,
            item,
            InactiveBidType.REMOVED,
            event.bid,
            created_at_timestamp=bid.created_at_timestamp,
            created_at_block_number=bid.created_at_block_number,
        )

        self.release_liquidity(bid.currency, bid.amount)
        self.store.remove(Bid, bid_key)

        logging.info(
            "[ItemExchange] Completed handler for BidRemoved",
            extra={"item": item.id, "bidder": bidder.id},
        )

    def handle_bid_finalized(
        self,
        event: BidFinalizedEvent,
        item_key: ItemKey,
        transfer_log_offset: int = DEFAULT_FINALIZE_TRANSFER_LOG_OFFSET,
    ) -> None:
        item = self.store.require(Item, item_key.to_id(), token_id=str(item_key.token_id))
        bidder = self.users.find_or_create_user(event.bid.bidder)

        # The exchange emits BidFinalized a fixed number of logs after the
        # item Transfer of the same settlement
        transfer_key = EventPositionKey.create(
            item_key.token_id,
            event.transaction_hash,
            event.log_index - transfer_log_offset,
        )
        transfer = self.store.require(
            Transfer, transfer_key, token_id=str(item_key.token_id)
        )

        item.prev_owner = transfer.from_address
        self.store.save(item)

        self.create_inactive_bid(
            event,
            item,
            InactiveBidType.FINALIZED,
            event.bid,
            created_at_timestamp=event.block_timestamp,
            created_at_block_number=event.block_number,
        )

        if self.store.remove(Bid, (item.id, bidder.id)) is not None:
            currency = self.currencies.find_or_create_currency(event.bid.currency)
            self.release_liquidity(currency.id, event.bid.amount)
        else:
            logging.warning(
                "[ItemExchange] Finalized bid was not live, liquidity unchanged",
                extra={"item": item.id, "bidder": bidder.id},
            )

        logging.info(
            "[ItemExchange] Completed handler for BidFinalized",
            extra={"item": item.id, "bidder": bidder.id, "prev_owner": item.prev_owner},
        )

    def release_liquidity(self, currency_id: str, amount: int) -> None:
        currency = self.store.require(Currency, currency_id)
        currency.liquidity = currency.liquidity - amount
        self.store.save(currency)

    def create_inactive_ask(self, event: ChainEvent, item: Item, ask: Ask) -> InactiveAsk:
        key = EventPositionKey.create(
            int(item.token_id), event.transaction_hash, event.log_index
        )
        return self.store.save(
            InactiveAsk(
                token_id=key.token_id,
                transaction_hash=key.transaction_hash,
                log_index=key.log_index,
                item_id=item.id,
                type=InactiveAskType.REMOVED.value,
                amount=ask.amount,
                currency=ask.currency,
                owner=ask.owner,
                created_at_timestamp=ask.created_at_timestamp,
                created_at_block_number=ask.created_at_block_number,
                inactivated_at_timestamp=event.block_timestamp,
                inactivated_at_block_number=event.block_number,
            )
        )

    def create_inactive_bid(
        self,
        event: ChainEvent,
        item: Item,
        inactive_type: InactiveBidType,
        bid: BidParams,
        created_at_timestamp: int,
        created_at_block_number: int,
    ) -> InactiveBid:
        bidder = self.users.find_or_create_user(bid.bidder)
        recipient = self.users.find_or_create_user(bid.recipient)
        currency = self.currencies.find_or_create_currency(bid.currency)
        key = EventPositionKey.create(
            int(item.token_id), event.transaction_hash, event.log_index
        )
        return self.store.save(
            InactiveBid(
                token_id=key.token_id,
                transaction_hash=key.transaction_hash,
                log_index=key.log_index,
                item_id=item.id,
                type=inactive_type.value,
                amount=bid.amount,
                currency=currency.id,
                sell_on_share=bid.sell_on_share.value,
                bidder=bidder.id,
                recipient=recipient.id,
                created_at_timestamp=created_at_timestamp,
                created_at_block_number=created_at_block_number,
                inactivated_at_timestamp=event.block_timestamp,
                inactivated_at_block_number=event.block_number,
            )
        )
