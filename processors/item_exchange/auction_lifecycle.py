import logging

from typing import Optional

from processors.item_exchange.currency import CurrencyCatalog
from processors.item_exchange.enums import ReserveListingBidType, ReserveListingStatus
from processors.item_exchange.event_types import (
    ChainEvent,
    ReserveListingBidEvent,
    ReserveListingCanceledEvent,
    ReserveListingCreatedEvent,
    ReserveListingDurationExtendedEvent,
    ReserveListingEndedEvent,
    ReserveListingPriceUpdatedEvent,
)
from processors.item_exchange.identity import IdentityResolver
from processors.item_exchange.models import (
    InactiveReserveListingBid,
    Item,
    ReserveListing,
    ReserveListingBid,
)
from utils.store import EntityStore
from utils.token_utils import ItemKey, ReserveListingBidKey


class AuctionLifecycle:
    """Reserve listings and their bids.

    A listing goes Active -> Finished | Canceled and references at most one
    live ReserveListingBid. A superseded bid is archived under its own id in
    the inactive table before the live row is deleted.
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

    def handle_reserve_listing_created(
        self, event: ReserveListingCreatedEvent, listing_id: str
    ) -> ReserveListing:
        item_key = ItemKey.create(event.token_contract, event.token_id)
        item = self.store.load(Item, item_key.to_id())
        token_owner = self.users.find_or_create_user(event.token_owner)
        intermediary = self.users.find_or_create_user(event.intermediary)
        currency = self.currencies.find_or_create_currency(event.list_currency)

        listing = ReserveListing(
            id=listing_id,
            transaction_hash=event.transaction_hash,
            token_id=str(item_key.token_id),
            token_contract=item_key.token_contract,
            token=item_key.to_id(),
            item_id=item.id if item is not None else None,
            approved=True,
            approved_timestamp=event.block_timestamp,
            starts_at=event.starts_at,
            duration=event.duration,
            first_bid_time=0,
            expected_end_timestamp=None,
            list_price=event.list_price,
            list_type=event.list_type,
            intermediary_fee_percentage=event.intermediary_fee_percentage,
            token_owner=token_owner.id,
            intermediary=intermediary.id,
            list_currency=currency.id,
            status=ReserveListingStatus.ACTIVE.value,
            current_bid_id=None,
            created_at_timestamp=event.block_timestamp,
            created_at_block_number=event.block_number,
        )
        self.store.save(listing)

        logging.info(
            "[ItemExchange] Created reserve listing",
            extra={
                "listing_id": listing_id,
                "token": listing.token,
                "indexed_item": item is not None,
            },
        )
        return listing

    def handle_reserve_listing_bid(
        self, event: ReserveListingBidEvent, listing_id: str
    ) -> None:
        listing = self.require_active_listing(listing_id, event)
        if listing is None:
            return

        if event.first_bid or listing.first_bid_time == 0:
            self.set_first_bid_time(listing, event.block_timestamp)

        if listing.current_bid_id is not None:
            self.archive_current_bid(listing, event, winning_bid=False)

        self.create_reserve_listing_bid(listing, event)

    def handle_reserve_listing_duration_extended(
        self, event: ReserveListingDurationExtendedEvent, listing_id: str
    ) -> None:
        listing = self.require_active_listing(listing_id, event)
        if listing is None:
            return

        listing.duration = event.duration
        listing.expected_end_timestamp = listing.first_bid_time + event.duration
        self.store.save(listing)

        logging.info(
            "[ItemExchange] Extended reserve listing",
            extra={
                "listing_id": listing_id,
                "duration": event.duration,
                "expected_end_timestamp": listing.expected_end_timestamp,
            },
        )

    def handle_reserve_listing_price_updated(
        self, event: ReserveListingPriceUpdatedEvent, listing_id: str
    ) -> None:
        listing = self.require_active_listing(listing_id, event)
        if listing is None:
            return

        listing.list_price = event.list_price
        self.store.save(listing)

    def handle_reserve_listing_ended(
        self, event: ReserveListingEndedEvent, listing_id: str
    ) -> None:
        listing = self.require_active_listing(listing_id, event)
        if listing is None:
            return

        canceled = listing.current_bid_id is None
        if not canceled:
            self.archive_current_bid(listing, event, winning_bid=True)

        self.finish_listing(listing, event, canceled=canceled)

    def handle_reserve_listing_canceled(
        self, event: ReserveListingCanceledEvent, listing_id: str
    ) -> None:
        listing = self.require_active_listing(listing_id, event)
        if listing is None:
            return

        if listing.current_bid_id is not None:
            self.archive_current_bid(listing, event, winning_bid=False)

        self.finish_listing(listing, event, canceled=True)

    def require_active_listing(
        self, listing_id: str, event: ChainEvent
    ) -> Optional[ReserveListing]:
        listing = self.store.require(ReserveListing, listing_id, listing_id=listing_id)

        if listing.status != ReserveListingStatus.ACTIVE.value:
            logging.warning(
                "[ItemExchange] Reserve listing is no longer active, ignoring event",
                extra={
                    "listing_id": listing_id,
                    "status": listing.status,
                    "transaction_hash": event.transaction_hash,
                },
            )
            return None
        return listing

    def set_first_bid_time(self, listing: ReserveListing, time: int) -> None:
        listing.first_bid_time = time
        listing.expected_end_timestamp = listing.duration + time
        self.store.save(listing)

    def create_reserve_listing_bid(
        self, listing: ReserveListing, event: ReserveListingBidEvent
    ) -> ReserveListingBid:
        bidder = self.users.find_or_create_user(event.sender)
        bid_id = ReserveListingBidKey(
            listing.id, event.transaction_hash, event.log_index
        ).to_id()

        logging.info(
            "[ItemExchange] Creating active reserve listing bid",
            extra={"listing_id": listing.id, "bid_id": bid_id, "bidder": bidder.id},
        )

        bid = self.store.save(
            ReserveListingBid(
                id=bid_id,
                reserve_listing_id=listing.id,
                transaction_hash=event.transaction_hash,
                amount=event.value,
                bidder=bidder.id,
                bid_type=ReserveListingBidType.ACTIVE.value,
                created_at_timestamp=event.block_timestamp,
                created_at_block_number=event.block_number,
            )
        )

        listing.current_bid_id = bid.id
        self.store.save(listing)
        return bid

    def archive_current_bid(
        self, listing: ReserveListing, event: ChainEvent, winning_bid: bool
    ) -> InactiveReserveListingBid:
        active_bid = self.store.require(
            ReserveListingBid, listing.current_bid_id, listing_id=listing.id
        )

        inactive_bid = self.store.save(
            InactiveReserveListingBid(
                id=active_bid.id,
                reserve_listing_id=active_bid.reserve_listing_id,
                transaction_hash=active_bid.transaction_hash,
                amount=active_bid.amount,
                bidder=active_bid.bidder,
                bid_type=(
                    ReserveListingBidType.FINAL.value
                    if winning_bid
                    else ReserveListingBidType.REFUNDED.value
                ),
                created_at_timestamp=active_bid.created_at_timestamp,
                created_at_block_number=active_bid.created_at_block_number,
                bid_inactivated_at_timestamp=event.block_timestamp,
                bid_inactivated_at_block_number=event.block_number,
            )
        )

        self.store.remove(ReserveListingBid, active_bid.id)
        listing.current_bid_id = None
        self.store.save(listing)

        logging.info(
            "[ItemExchange] Archived reserve listing bid",
            extra={
                "listing_id": listing.id,
                "bid_id": inactive_bid.id,
                "bid_type": inactive_bid.bid_type,
            },
        )
        return inactive_bid

    def finish_listing(
        self, listing: ReserveListing, event: ChainEvent, canceled: bool
    ) -> None:
        listing.finalized_at_timestamp = event.block_timestamp
        listing.finalized_at_block_number = event.block_number
        listing.status = (
            ReserveListingStatus.CANCELED.value
            if canceled
            else ReserveListingStatus.FINISHED.value
        )
        self.store.save(listing)

        logging.info(
            "[ItemExchange] Reserve listing closed",
            extra={"listing_id": listing.id, "status": listing.status},
        )
