import logging

from processors.item_exchange.models import User
from utils.general_utils import standardize_address
from utils.store import EntityStore


class IdentityResolver:
    def __init__(self, store: EntityStore):
        self.store = store

    def find_or_create_user(self, address: str) -> User:
        user_id = standardize_address(address)
        user = self.store.load(User, user_id)

        if user is None:
            logging.debug("[ItemExchange] Creating user", extra={"user": user_id})
            user = self.store.save(User(id=user_id))

        return user
