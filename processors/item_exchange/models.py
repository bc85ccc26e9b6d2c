from utils.models.annotated_types import (
    BigIntegerPrimaryKeyType,
    BigIntegerType,
    BooleanType,
    InsertedAtType,
    IntegerType,
    NullableBigIntegerType,
    NullableIntegerType,
    NullableNumericType,
    NullableStringType,
    NumericType,
    StringPrimaryKeyType,
    StringType,
)
from utils.models.general_models import Base
from sqlalchemy import Index


class User(Base):
    __tablename__ = "users"
    __table_args__ = {"schema": "per_schema"}

    id: StringPrimaryKeyType
    inserted_at: InsertedAtType


class AuthorizedOperator(Base):
    """One row per operator an owner approved through ApprovalForAll."""

    __tablename__ = "authorized_operators"
    __table_args__ = {"schema": "per_schema"}

    owner: StringPrimaryKeyType
    operator: StringPrimaryKeyType
    inserted_at: InsertedAtType


class Currency(Base):
    __tablename__ = "currencies"
    __table_args__ = {"schema": "per_schema"}

    id: StringPrimaryKeyType
    name: StringType
    symbol: StringType
    decimals: NullableIntegerType
    # Sum of the amounts of all live bids in this currency
    liquidity: NumericType
    inserted_at: InsertedAtType


class Item(Base):
    __tablename__ = "items"
    __table_args__ = (
        (Index("item_token_index", "token_contract", "token_id", unique=True)),
        (Index("item_owner_index", "owner")),
        (Index("item_creator_index", "creator")),
        {"schema": "per_schema"},
    )

    id: StringPrimaryKeyType
    token_id: StringType
    token_contract: StringType
    exchange_contract: NullableStringType
    transaction_hash: StringType
    owner: StringType
    creator: StringType
    prev_owner: StringType
    approved: NullableStringType
    content_uri: NullableStringType
    content_hash: NullableStringType
    metadata_uri: NullableStringType
    metadata_hash: NullableStringType
    creator_bid_share: NullableNumericType
    owner_bid_share: NullableNumericType
    prev_owner_bid_share: NullableNumericType
    created_at_timestamp: BigIntegerType
    created_at_block_number: BigIntegerType
    burned_at_timestamp: NullableBigIntegerType
    burned_at_block_number: NullableBigIntegerType
    inserted_at: InsertedAtType


class Transfer(Base):
    __tablename__ = "transfers"
    __table_args__ = (
        (Index("transfer_item_index", "item_id")),
        {"schema": "per_schema"},
    )

    token_id: StringPrimaryKeyType
    transaction_hash: StringPrimaryKeyType
    log_index: BigIntegerPrimaryKeyType
    item_id: StringType
    from_address: StringType
    to_address: StringType
    created_at_timestamp: BigIntegerType
    created_at_block_number: BigIntegerType
    inserted_at: InsertedAtType


class URIUpdate(Base):
    __tablename__ = "uri_updates"
    __table_args__ = (
        (Index("uri_update_item_index", "item_id")),
        {"schema": "per_schema"},
    )

    token_id: StringPrimaryKeyType
    transaction_hash: StringPrimaryKeyType
    log_index: BigIntegerPrimaryKeyType
    item_id: StringType
    type: StringType
    from_uri: NullableStringType
    to_uri: StringType
    updater: StringType
    owner: StringType
    created_at_timestamp: BigIntegerType
    created_at_block_number: BigIntegerType
    inserted_at: InsertedAtType


class Ask(Base):
    __tablename__ = "asks"
    __table_args__ = {"schema": "per_schema"}

    item_id: StringPrimaryKeyType
    owner: StringPrimaryKeyType
    amount: NumericType
    currency: StringType
    transaction_hash: StringType
    created_at_timestamp: BigIntegerType
    created_at_block_number: BigIntegerType
    inserted_at: InsertedAtType


class InactiveAsk(Base):
    __tablename__ = "inactive_asks"
    __table_args__ = (
        (Index("inactive_ask_item_index", "item_id")),
        {"schema": "per_schema"},
    )

    token_id: StringPrimaryKeyType
    transaction_hash: StringPrimaryKeyType
    log_index: BigIntegerPrimaryKeyType
    item_id: StringType
    type: StringType
    amount: NumericType
    currency: StringType
    owner: StringType
    created_at_timestamp: BigIntegerType
    created_at_block_number: BigIntegerType
    inactivated_at_timestamp: BigIntegerType
    inactivated_at_block_number: BigIntegerType
    inserted_at: InsertedAtType


class Bid(Base):
    __tablename__ = "bids"
    __table_args__ = {"schema": "per_schema"}

    item_id: StringPrimaryKeyType
    bidder: StringPrimaryKeyType
    amount: NumericType
    currency: StringType
    sell_on_share: NumericType
    recipient: StringType
    transaction_hash: StringType
    created_at_timestamp: BigIntegerType
    created_at_block_number: BigIntegerType
    inserted_at: InsertedAtType


class InactiveBid(Base):
    __tablename__ = "inactive_bids"
    __table_args__ = (
        (Index("inactive_bid_item_index", "item_id")),
        (Index("inactive_bid_bidder_index", "bidder")),
        {"schema": "per_schema"},
    )

    token_id: StringPrimaryKeyType
    transaction_hash: StringPrimaryKeyType
    log_index: BigIntegerPrimaryKeyType
    item_id: StringType
    type: StringType
    amount: NumericType
    currency: StringType
    sell_on_share: NumericType
    bidder: StringType
    recipient: StringType
    created_at_timestamp: BigIntegerType
    created_at_block_number: BigIntegerType
    inactivated_at_timestamp: BigIntegerType
    inactivated_at_block_number: BigIntegerType
    inserted_at: InsertedAtType


class ReserveListing(Base):
    __tablename__ = "reserve_listings"
    __table_args__ = (
        (Index("reserve_listing_token_index", "token")),
        (Index("reserve_listing_status_index", "status")),
        {"schema": "per_schema"},
    )

    id: StringPrimaryKeyType
    transaction_hash: StringType
    token_id: StringType
    token_contract: StringType
    token: StringType
    # Listings may reference tokens that were never minted through an indexed contract
    item_id: NullableStringType
    approved: BooleanType
    approved_timestamp: NullableBigIntegerType
    starts_at: BigIntegerType
    duration: BigIntegerType
    first_bid_time: BigIntegerType
    expected_end_timestamp: NullableBigIntegerType
    list_price: NumericType
    list_type: IntegerType
    intermediary_fee_percentage: IntegerType
    token_owner: StringType
    intermediary: StringType
    list_currency: StringType
    status: StringType
    current_bid_id: NullableStringType
    created_at_timestamp: BigIntegerType
    created_at_block_number: BigIntegerType
    finalized_at_timestamp: NullableBigIntegerType
    finalized_at_block_number: NullableBigIntegerType
    inserted_at: InsertedAtType


class ReserveListingBid(Base):
    __tablename__ = "reserve_listing_bids"
    __table_args__ = (
        (Index("reserve_listing_bid_listing_index", "reserve_listing_id")),
        {"schema": "per_schema"},
    )

    id: StringPrimaryKeyType
    reserve_listing_id: StringType
    transaction_hash: StringType
    amount: NumericType
    bidder: StringType
    bid_type: StringType
    created_at_timestamp: BigIntegerType
    created_at_block_number: BigIntegerType
    inserted_at: InsertedAtType


class InactiveReserveListingBid(Base):
    """Archived ReserveListingBid. Shares the id of the live bid it replaced."""

    __tablename__ = "inactive_reserve_listing_bids"
    __table_args__ = (
        (Index("inactive_reserve_listing_bid_listing_index", "reserve_listing_id")),
        {"schema": "per_schema"},
    )

    id: StringPrimaryKeyType
    reserve_listing_id: StringType
    transaction_hash: StringType
    amount: NumericType
    bidder: StringType
    bid_type: StringType
    created_at_timestamp: BigIntegerType
    created_at_block_number: BigIntegerType
    bid_inactivated_at_timestamp: BigIntegerType
    bid_inactivated_at_block_number: BigIntegerType
    inserted_at: InsertedAtType
