"""Event builders and contract addresses shared by the test modules."""

from typing import Dict, Optional

from processors.item_exchange.event_types import (
    ApprovalEvent,
    ApprovalForAllEvent,
    AskCreatedEvent,
    AskParams,
    AskRemovedEvent,
    BidCreatedEvent,
    BidFinalizedEvent,
    BidParams,
    BidRemovedEvent,
    BidShares,
    BidShareUpdatedEvent,
    DecimalValue,
    ReserveListingBidEvent,
    ReserveListingCanceledEvent,
    ReserveListingCreatedEvent,
    ReserveListingDurationExtendedEvent,
    ReserveListingEndedEvent,
    ReserveListingPriceUpdatedEvent,
    TokenMetadataURIUpdatedEvent,
    TokenURIUpdatedEvent,
    TransferEvent,
)
from utils.general_utils import ZERO_ADDRESS

ITEM_CONTRACT = "0x" + "a1" * 20
EXCHANGE_CONTRACT = "0x" + "e1" * 20
RESERVE_LISTING_CONTRACT = "0x" + "5e" * 20
UNLISTED_CONTRACT = "0x" + "99" * 20

ALICE = "0x" + "0a" * 20
BOB = "0x" + "0b" * 20
CAROL = "0x" + "0c" * 20
WETH = "0x" + "77" * 20
DAI = "0x" + "da" * 20


def position(
    tx: str = "0x01", log: int = 0, block: int = 1, ts: Optional[int] = None
) -> Dict:
    return dict(
        block_number=block,
        block_timestamp=ts if ts is not None else block * 10,
        transaction_hash=tx,
        log_index=log,
    )


def transfer(from_address, to_address, token_id=1, address=ITEM_CONTRACT, **pos):
    return TransferEvent(
        address=address,
        from_address=from_address,
        to_address=to_address,
        token_id=token_id,
        **position(**pos),
    )


def mint(to_address, token_id=1, **pos):
    return transfer(ZERO_ADDRESS, to_address, token_id, **pos)


def approval(owner, approved, token_id=1, **pos):
    return ApprovalEvent(
        address=ITEM_CONTRACT,
        owner=owner,
        approved=approved,
        token_id=token_id,
        **position(**pos),
    )


def approval_for_all(owner, operator, approved, **pos):
    return ApprovalForAllEvent(
        address=ITEM_CONTRACT,
        owner=owner,
        operator=operator,
        approved=approved,
        **position(**pos),
    )


def token_uri_updated(owner, uri, token_id=1, **pos):
    return TokenURIUpdatedEvent(
        address=ITEM_CONTRACT, token_id=token_id, owner=owner, uri=uri, **position(**pos)
    )


def token_metadata_uri_updated(owner, uri, token_id=1, **pos):
    return TokenMetadataURIUpdatedEvent(
        address=ITEM_CONTRACT, token_id=token_id, owner=owner, uri=uri, **position(**pos)
    )


def bid_share_updated(creator, owner, prev_owner, token_id=1, **pos):
    return BidShareUpdatedEvent(
        address=EXCHANGE_CONTRACT,
        token_id=token_id,
        bid_shares=BidShares(
            creator=DecimalValue(value=creator),
            owner=DecimalValue(value=owner),
            prev_owner=DecimalValue(value=prev_owner),
        ),
        **position(**pos),
    )


def ask_created(amount, currency=WETH, token_id=1, **pos):
    return AskCreatedEvent(
        address=EXCHANGE_CONTRACT,
        token_id=token_id,
        ask=AskParams(amount=amount, currency=currency),
        **position(**pos),
    )


def ask_removed(amount, currency=WETH, token_id=1, **pos):
    return AskRemovedEvent(
        address=EXCHANGE_CONTRACT,
        token_id=token_id,
        ask=AskParams(amount=amount, currency=currency),
        **position(**pos),
    )


def bid_params(bidder, amount, currency=WETH, recipient=None, sell_on_share=0):
    return BidParams(
        amount=amount,
        currency=currency,
        bidder=bidder,
        recipient=recipient or bidder,
        sell_on_share=DecimalValue(value=sell_on_share),
    )


def bid_created(bidder, amount, currency=WETH, token_id=1, **pos):
    return BidCreatedEvent(
        address=EXCHANGE_CONTRACT,
        token_id=token_id,
        bid=bid_params(bidder, amount, currency),
        **position(**pos),
    )


def bid_removed(bidder, amount, currency=WETH, token_id=1, **pos):
    return BidRemovedEvent(
        address=EXCHANGE_CONTRACT,
        token_id=token_id,
        bid=bid_params(bidder, amount, currency),
        **position(**pos),
    )


def bid_finalized(bidder, amount, currency=WETH, token_id=1, **pos):
    return BidFinalizedEvent(
        address=EXCHANGE_CONTRACT,
        token_id=token_id,
        bid=bid_params(bidder, amount, currency),
        **position(**pos),
    )


def listing_fields(listing_id, token_id):
    return dict(
        address=RESERVE_LISTING_CONTRACT,
        listing_id=listing_id,
        token_id=token_id,
        token_contract=ITEM_CONTRACT,
    )


def reserve_listing_created(
    listing_id=1, token_id=1, token_owner=ALICE, duration=86400, list_price=100, **pos
):
    return ReserveListingCreatedEvent(
        **listing_fields(listing_id, token_id),
        starts_at=0,
        duration=duration,
        list_price=list_price,
        list_type=1,
        intermediary_fee_percentage=5,
        token_owner=token_owner,
        intermediary=CAROL,
        list_currency=ZERO_ADDRESS,
        **position(**pos),
    )


def reserve_listing_bid(sender, value, listing_id=1, token_id=1, first_bid=False, **pos):
    return ReserveListingBidEvent(
        **listing_fields(listing_id, token_id),
        sender=sender,
        value=value,
        first_bid=first_bid,
        extended=False,
        **position(**pos),
    )


def reserve_listing_duration_extended(duration, listing_id=1, token_id=1, **pos):
    return ReserveListingDurationExtendedEvent(
        **listing_fields(listing_id, token_id), duration=duration, **position(**pos)
    )


def reserve_listing_price_updated(list_price, listing_id=1, token_id=1, **pos):
    return ReserveListingPriceUpdatedEvent(
        **listing_fields(listing_id, token_id), list_price=list_price, **position(**pos)
    )


def reserve_listing_ended(winner, amount, listing_id=1, token_id=1, **pos):
    return ReserveListingEndedEvent(
        **listing_fields(listing_id, token_id),
        token_owner=ALICE,
        intermediary=CAROL,
        winner=winner,
        amount=amount,
        list_currency=ZERO_ADDRESS,
        **position(**pos),
    )


def reserve_listing_canceled(listing_id=1, token_id=1, **pos):
    return ReserveListingCanceledEvent(
        **listing_fields(listing_id, token_id), token_owner=ALICE, **position(**pos)
    )
