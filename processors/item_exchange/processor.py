import logging

from time import perf_counter
from typing import Sequence

from processors.item_exchange.event_types import ChainEvent, get_event_name
from processors.item_exchange.exceptions import MissingReferentError
from processors.item_exchange.router import EventRouter
from utils.events_processor import EventsProcessor, ProcessingResult
from utils.metrics import (
    MISSING_REFERENT_COUNTER,
    PROCESSED_EVENTS_COUNTER,
    SKIPPED_EVENTS_COUNTER,
)
from utils.models.schema_names import ITEM_EXCHANGE_SCHEMA_NAME
from utils.processor_name import ProcessorName
from utils.session import Session
from utils.store import EntityStore


class ItemExchangeProcessor(EventsProcessor):
    def __init__(self, router: EventRouter):
        self.router = router

    def name(self) -> str:
        return ProcessorName.ITEM_EXCHANGE_PROCESSOR.value

    def schema(self) -> str:
        return ITEM_EXCHANGE_SCHEMA_NAME

    def process_events(
        self,
        events: Sequence[ChainEvent],
        start_event_index: int,
    ) -> ProcessingResult:
        start_time = perf_counter()
        processed_events = 0
        skipped_events = 0
        failed_events = 0

        for event_index, event in enumerate(events, start=start_event_index):
            event_type = get_event_name(event)
            try:
                # One database transaction per event: an event either applies
                # completely or leaves no trace, and the checkpoint moves with it
                with Session() as session, session.begin():
                    routed = self.router.route(event, EntityStore(session))
                    self.write_checkpoint(session, event_index)
            except MissingReferentError as e:
                failed_events += 1
                MISSING_REFERENT_COUNTER.labels(
                    processor_name=self.name(), event_type=event_type
                ).inc()
                logging.error(
                    "[ItemExchange] Missing referent, event not applied",
                    extra={
                        "event_index": event_index,
                        "event_type": event_type,
                        "entity_type": e.entity_type,
                        "entity_key": str(e.key),
                        "transaction_hash": event.transaction_hash,
                        "log_index": event.log_index,
                        "block_number": event.block_number,
                        **{key: str(value) for key, value in e.context.items()},
                    },
                )
                # The rejected event is not retried
                self.update_last_processed_event(event_index)
                continue

            if routed:
                processed_events += 1
                PROCESSED_EVENTS_COUNTER.labels(
                    processor_name=self.name(), event_type=event_type
                ).inc()
            else:
                skipped_events += 1
                SKIPPED_EVENTS_COUNTER.labels(
                    processor_name=self.name(), event_type=event_type
                ).inc()

        return ProcessingResult(
            start_event_index=start_event_index,
            end_event_index=start_event_index + len(events) - 1,
            processed_events=processed_events,
            skipped_events=skipped_events,
            failed_events=failed_events,
            processing_duration_in_secs=perf_counter() - start_time,
        )
