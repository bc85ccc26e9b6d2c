from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence

from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert as postgres_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session as SQLAlchemySession

from processors.item_exchange.event_types import ChainEvent
from utils.models.general_models import NextEventToProcess
from utils.session import Session


@dataclass
class ProcessingResult:
    start_event_index: int
    end_event_index: int
    processed_events: int
    skipped_events: int
    failed_events: int
    processing_duration_in_secs: float


class EventsProcessor(ABC):
    # Name of the processor for status logging
    # This will get stored in the database together with the next event to process
    @abstractmethod
    def name(self) -> str:
        pass

    # Name of the DB schema this processor writes to
    @abstractmethod
    def schema(self) -> str:
        pass

    # Process a batch of events in order.
    # `start_event_index` is the position of the first event in the source.
    @abstractmethod
    def process_events(
        self,
        events: Sequence[ChainEvent],
        start_event_index: int,
    ) -> ProcessingResult:
        pass

    def update_last_processed_event(self, last_processed_event_index: int) -> None:
        with Session() as session, session.begin():
            self.write_checkpoint(session, last_processed_event_index)

    # Upserts the checkpoint inside the caller's transaction so it commits
    # together with the writes of the event it covers
    def write_checkpoint(
        self, session: SQLAlchemySession, last_processed_event_index: int
    ) -> None:
        insert = (
            postgres_insert
            if session.get_bind().dialect.name == "postgresql"
            else sqlite_insert
        )
        insert_stmt = insert(NextEventToProcess).values(
            indexer_name=self.name(),
            next_event_index=last_processed_event_index + 1,
        )
        on_conflict_do_update_stmt = insert_stmt.on_conflict_do_update(
            index_elements=["indexer_name"],
            set_=dict(
                next_event_index=insert_stmt.excluded.next_event_index,
                updated_at=func.now(),
            ),
            where=(
                insert_stmt.excluded.next_event_index
                > NextEventToProcess.next_event_index
            ),
        )
        session.execute(on_conflict_do_update_stmt)
