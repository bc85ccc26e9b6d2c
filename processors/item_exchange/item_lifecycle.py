import logging

from typing import Callable, Optional, TypeVar

from processors.item_exchange.chain_reader import ChainReader
from processors.item_exchange.enums import URIUpdateType
from processors.item_exchange.event_types import (
    ApprovalEvent,
    ApprovalForAllEvent,
    BidShareUpdatedEvent,
    ChainEvent,
    TokenMetadataURIUpdatedEvent,
    TokenURIUpdatedEvent,
    TransferEvent,
)
from processors.item_exchange.exceptions import CallReverted
from processors.item_exchange.identity import IdentityResolver
from processors.item_exchange.models import (
    AuthorizedOperator,
    Item,
    Transfer,
    URIUpdate,
    User,
)
from utils.general_utils import ZERO_ADDRESS, bytes_to_hex, is_zero_address
from utils.store import EntityStore
from utils.token_utils import EventPositionKey, ItemKey

T = TypeVar("T")


class ItemLifecycle:
    """Owns the Item entity: mint, transfer, burn, approvals, URIs and bid shares."""

    def __init__(
        self, store: EntityStore, users: IdentityResolver, chain_reader: ChainReader
    ):
        self.store = store
        self.users = users
        self.chain_reader = chain_reader

    def handle_transfer(self, event: TransferEvent, item_key: ItemKey) -> None:
        logging.info(
            "[ItemExchange] Starting handler for Transfer",
            extra={
                "token_id": str(item_key.token_id),
                "from_address": event.from_address,
                "to_address": event.to_address,
            },
        )

        to_user = self.users.find_or_create_user(event.to_address)
        from_user = self.users.find_or_create_user(event.from_address)

        if from_user.id == ZERO_ADDRESS:
            self.handle_mint(event, item_key, to_user, from_user)
            return

        item = self.store.require(Item, item_key.to_id(), token_id=str(item_key.token_id))

        if to_user.id == ZERO_ADDRESS:
            item.prev_owner = ZERO_ADDRESS
            item.burned_at_timestamp = event.block_timestamp
            item.burned_at_block_number = event.block_number

        item.owner = to_user.id
        item.approved = None
        self.store.save(item)

        self.create_transfer(event, item, from_user, to_user)

        logging.info(
            "[ItemExchange] Completed handler for Transfer",
            extra={"item": item.id, "owner": item.owner},
        )

    def handle_mint(
        self,
        event: TransferEvent,
        item_key: ItemKey,
        creator: User,
        zero_user: User,
    ) -> Item:
        token_contract = item_key.token_contract
        token_id = item_key.token_id

        content_uri = self.read(self.chain_reader.token_uri, token_contract, token_id)
        metadata_uri = self.read(
            self.chain_reader.token_metadata_uri, token_contract, token_id
        )
        content_hash = self.read(
            self.chain_reader.token_content_hash, token_contract, token_id
        )
        metadata_hash = self.read(
            self.chain_reader.token_metadata_hash, token_contract, token_id
        )
        exchange_contract = self.read(self.chain_reader.exchange_contract, token_contract)

        bid_shares = None
        if exchange_contract is not None:
            bid_shares = self.read(
                self.chain_reader.bid_shares, exchange_contract, token_id
            )

        # A burned token id can be minted again
        if self.store.remove(Item, item_key.to_id()) is not None:
            logging.warning(
                "[ItemExchange] Replacing existing item on mint",
                extra={"item": item_key.to_id()},
            )

        item = Item(
            id=item_key.to_id(),
            token_id=str(token_id),
            token_contract=token_contract,
            exchange_contract=exchange_contract,
            transaction_hash=event.transaction_hash,
            owner=creator.id,
            creator=creator.id,
            prev_owner=creator.id,
            approved=None,
            content_uri=content_uri,
            content_hash=bytes_to_hex(content_hash),
            metadata_uri=metadata_uri,
            metadata_hash=bytes_to_hex(metadata_hash),
            creator_bid_share=bid_shares.creator.value if bid_shares else None,
            owner_bid_share=bid_shares.owner.value if bid_shares else None,
            prev_owner_bid_share=bid_shares.prev_owner.value if bid_shares else None,
            created_at_timestamp=event.block_timestamp,
            created_at_block_number=event.block_number,
        )
        self.store.save(item)

        self.create_transfer(event, item, zero_user, creator)

        logging.info(
            "[ItemExchange] Minted item",
            extra={"item": item.id, "creator": creator.id},
        )
        return item

    def handle_approval(self, event: ApprovalEvent, item_key: ItemKey) -> None:
        item = self.store.require(Item, item_key.to_id(), token_id=str(item_key.token_id))

        if is_zero_address(event.approved):
            item.approved = None
        else:
            approved_user = self.users.find_or_create_user(event.approved)
            item.approved = approved_user.id

        self.store.save(item)

        logging.info(
            "[ItemExchange] Completed handler for Approval",
            extra={"item": item.id, "approved": item.approved},
        )

    def handle_approval_for_all(self, event: ApprovalForAllEvent) -> None:
        owner = self.users.find_or_create_user(event.owner)
        operator = self.users.find_or_create_user(event.operator)
        key = (owner.id, operator.id)

        if event.approved:
            if self.store.load(AuthorizedOperator, key) is None:
                self.store.save(AuthorizedOperator(owner=owner.id, operator=operator.id))
        elif self.store.remove(AuthorizedOperator, key) is None:
            logging.info(
                "[ItemExchange] Operator is not authorized by owner. No db changes necessary.",
                extra={"owner": owner.id, "operator": operator.id},
            )
            return

        logging.info(
            "[ItemExchange] Completed handler for ApprovalForAll",
            extra={
                "owner": owner.id,
                "operator": operator.id,
                "approved": event.approved,
            },
        )

    def handle_token_uri_updated(
        self, event: TokenURIUpdatedEvent, item_key: ItemKey
    ) -> None:
        item = self.store.require(Item, item_key.to_id(), token_id=str(item_key.token_id))
        self.create_uri_update(event, item, URIUpdateType.CONTENT, item.content_uri)

        item.content_uri = event.uri
        self.store.save(item)

    def handle_token_metadata_uri_updated(
        self, event: TokenMetadataURIUpdatedEvent, item_key: ItemKey
    ) -> None:
        item = self.store.require(Item, item_key.to_id(), token_id=str(item_key.token_id))
        self.create_uri_update(event, item, URIUpdateType.METADATA, item.metadata_uri)

        item.metadata_uri = event.uri
        self.store.save(item)

    def handle_bid_share_updated(
        self, event: BidShareUpdatedEvent, item_key: ItemKey
    ) -> None:
        item = self.store.require(Item, item_key.to_id(), token_id=str(item_key.token_id))

        item.creator_bid_share = event.bid_shares.creator.value
        item.owner_bid_share = event.bid_shares.owner.value
        item.prev_owner_bid_share = event.bid_shares.prev_owner.value
        self.store.save(item)

        logging.info(
            "[ItemExchange] Completed handler for BidShareUpdated",
            extra={"item": item.id},
        )

    def create_transfer(
        self, event: ChainEvent, item: Item, from_user: User, to_user: User
    ) -> Transfer:
        key = EventPositionKey.create(
            int(item.token_id), event.transaction_hash, event.log_index
        )
        return self.store.save(
            Transfer(
                token_id=key.token_id,
                transaction_hash=key.transaction_hash,
                log_index=key.log_index,
                item_id=item.id,
                from_address=from_user.id,
                to_address=to_user.id,
                created_at_timestamp=event.block_timestamp,
                created_at_block_number=event.block_number,
            )
        )

    def create_uri_update(
        self,
        event: TokenURIUpdatedEvent | TokenMetadataURIUpdatedEvent,
        item: Item,
        update_type: URIUpdateType,
        from_uri: Optional[str],
    ) -> URIUpdate:
        updater = self.users.find_or_create_user(event.owner)
        key = EventPositionKey.create(
            int(item.token_id), event.transaction_hash, event.log_index
        )
        return self.store.save(
            URIUpdate(
                token_id=key.token_id,
                transaction_hash=key.transaction_hash,
                log_index=key.log_index,
                item_id=item.id,
                type=update_type.value,
                from_uri=from_uri,
                to_uri=event.uri,
                updater=updater.id,
                owner=item.owner,
                created_at_timestamp=event.block_timestamp,
                created_at_block_number=event.block_number,
            )
        )

    @staticmethod
    def read(fetch: Callable[..., T], *args) -> Optional[T]:
        try:
            return fetch(*args)
        except CallReverted:
            logging.warning(
                "[ItemExchange] Contract read reverted",
                extra={"read": fetch.__name__, "call_args": [str(arg) for arg in args]},
            )
            return None
