from sqlalchemy.orm import DeclarativeBase
from utils.models.annotated_types import (
    StringPrimaryKeyType,
    BigIntegerType,
    UpdatedAtType,
)


class Base(DeclarativeBase):
    pass


class NextEventToProcess(Base):
    __tablename__ = "next_events_to_process"
    __table_args__ = {"schema": "per_schema"}

    indexer_name: StringPrimaryKeyType
    next_event_index: BigIntegerType
    updated_at: UpdatedAtType
