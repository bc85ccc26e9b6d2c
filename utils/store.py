from typing import Any, Optional, Type, TypeVar

from sqlalchemy.orm import Session as SQLAlchemySession

from processors.item_exchange.exceptions import MissingReferentError
from utils.models.general_models import Base

EntityType = TypeVar("EntityType", bound=Base)


class EntityStore:
    """Load, save and remove entities by type and primary key.

    Writes are flushed immediately so the next load within the same
    transaction sees them.
    """

    def __init__(self, session: SQLAlchemySession):
        self.session = session

    def load(self, entity_type: Type[EntityType], key: Any) -> Optional[EntityType]:
        return self.session.get(entity_type, key)

    def require(
        self, entity_type: Type[EntityType], key: Any, **context: Any
    ) -> EntityType:
        entity = self.load(entity_type, key)
        if entity is None:
            raise MissingReferentError(entity_type.__name__, key, context)
        return entity

    def save(self, entity: EntityType) -> EntityType:
        self.session.add(entity)
        self.session.flush()
        return entity

    def remove(self, entity_type: Type[EntityType], key: Any) -> Optional[EntityType]:
        entity = self.load(entity_type, key)
        if entity is not None:
            self.session.delete(entity)
            self.session.flush()
        return entity
