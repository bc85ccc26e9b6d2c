from utils.config import Config
from utils.models.general_models import Base
from utils.session import Session
from utils.metrics import LATEST_PROCESSED_EVENT_INDEX
from sqlalchemy import DDL, create_engine
from sqlalchemy import event
from typing import List, Optional
from prometheus_client.twisted import MetricsResource
from twisted.web.server import Site
from twisted.web.resource import Resource
from twisted.internet import reactor
import threading
from utils.events_processor import EventsProcessor, ProcessingResult
from time import perf_counter
from utils.processor_name import ProcessorName
from processors.item_exchange.chain_reader import create_chain_reader
from processors.item_exchange.event_source import EventSource, JsonLinesEventSource
from processors.item_exchange.event_types import ChainEvent
from processors.item_exchange.processor import ItemExchangeProcessor
from processors.item_exchange.router import EventRouter
import logging
import queue
import os

# How large the fetcher queue should be
FETCHER_QUEUE_SIZE = 50

PROCESSOR_SERVICE_TYPE = "processor"

# Marks the end of the event source in the queue
END_OF_STREAM = None


# Reads events from the source in order and sends them to the channel in batches.
# If an ending index is set we stop there; the consumer drains what is left.
def producer(
    q: queue.Queue,
    event_source: EventSource,
    starting_event_index: int,
    ending_event_index: Optional[int],
    batch_size: int,
    processor_name: str,
):
    last_insertion_time = perf_counter()
    batch_start_event_index = starting_event_index
    batch: List[ChainEvent] = []

    def send(batch: List[ChainEvent]) -> None:
        nonlocal last_insertion_time
        logging.info(
            "[Parser] Read events from source. Sending events to channel.",
            extra={
                "processor_name": processor_name,
                "start_event_index": batch_start_event_index,
                "end_event_index": batch_start_event_index + len(batch) - 1,
                "channel_size": q.qsize(),
                "channel_recv_latency_in_secs": str(
                    format(perf_counter() - last_insertion_time, ".8f")
                ),
                "step": "1",
                "service_type": PROCESSOR_SERVICE_TYPE,
            },
        )
        q.put((batch_start_event_index, batch))
        last_insertion_time = perf_counter()

    try:
        for chain_event in event_source.events(starting_event_index, ending_event_index):
            batch.append(chain_event)
            if len(batch) >= batch_size:
                send(batch)
                batch_start_event_index += len(batch)
                batch = []
        if batch:
            send(batch)
    except Exception:
        logging.exception(
            "[Parser] Error reading from event source",
            extra={
                "processor_name": processor_name,
                "next_event_index": batch_start_event_index,
                "service_type": PROCESSOR_SERVICE_TYPE,
            },
        )
        os._exit(1)

    logging.info(
        "[Parser] The stream is ended",
        extra={
            "processor_name": processor_name,
            "ending_event_index": ending_event_index,
            "service_type": PROCESSOR_SERVICE_TYPE,
        },
    )
    q.put(END_OF_STREAM)


# This is the consumer side of the channel. Entity state depends on event order,
# so batches are processed one at a time. The processor checkpoints each event
# with its writes; an unexpected error stops the server and a restart resumes
# at the event that failed.
def consumer(
    q: queue.Queue,
    processor: EventsProcessor,
    processor_name: str,
):
    while True:
        start_time = perf_counter()
        item = q.get()
        if item is END_OF_STREAM:
            logging.info(
                "[Parser] Channel closed; stream ended.",
                extra={
                    "processor_name": processor_name,
                    "service_type": PROCESSOR_SERVICE_TYPE,
                },
            )
            return

        batch_start_event_index, events = item
        try:
            result: ProcessingResult = processor.process_events(
                events, batch_start_event_index
            )
        except Exception:
            logging.exception(
                "[Parser] Error processing event batch",
                extra={
                    "processor_name": processor_name,
                    "start_event_index": batch_start_event_index,
                    "service_type": PROCESSOR_SERVICE_TYPE,
                },
            )
            os._exit(1)

        LATEST_PROCESSED_EVENT_INDEX.labels(processor_name=processor_name).set(
            result.end_event_index
        )

        logging.info(
            "[Parser] Processor finished processing one batch of events",
            extra={
                "processor_name": processor_name,
                "start_event_index": result.start_event_index,
                "end_event_index": result.end_event_index,
                "num_of_events": result.end_event_index
                + 1
                - result.start_event_index,
                "processed_events": result.processed_events,
                "skipped_events": result.skipped_events,
                "failed_events": result.failed_events,
                "processing_duration_in_secs": str(
                    format(result.processing_duration_in_secs, ".8f")
                ),
                "duration_in_secs": str(format(perf_counter() - start_time, ".8f")),
                "step": "2",
                "service_type": PROCESSOR_SERVICE_TYPE,
            },
        )


class IndexerProcessorServer:
    config: Config
    processor: EventsProcessor

    def __init__(self, config: Config):
        self.config = config

        logging.info(
            "[Parser] Kicking off",
            extra={
                "processor_name": self.config.server_config.processor_config.type,
                "service_type": PROCESSOR_SERVICE_TYPE,
            },
        )

        # Instantiate the correct processor based on config
        processor_config = self.config.server_config.processor_config
        match processor_config.type:
            case ProcessorName.ITEM_EXCHANGE_PROCESSOR.value:
                router = EventRouter(
                    allow_list=processor_config.allow_list(),
                    chain_reader=create_chain_reader(processor_config.rpc_url),
                    native_currency=processor_config.native_currency,
                    default_currency_decimals=processor_config.default_currency_decimals,
                )
                self.processor = ItemExchangeProcessor(router)
            case _:
                raise Exception(
                    "Invalid processor name"
                    "\n[ERROR]: The specified processor name was invalid or not found.\n"
                    "         - If you are using a custom processor, make sure to add it to the ProcessorName enum in utils/processor_name.py.\n"
                    "         - Ensure the IndexerProcessorServer constructor in utils/worker.py uses the new enum value.\n"
                )

        self.event_source = JsonLinesEventSource(
            self.config.server_config.event_source_path
        )

    def run(self):
        processor_name = self.processor.name()

        # Run DB migrations
        logging.info(
            "[Parser] Initializing DB tables",
            extra={
                "processor_name": processor_name,
                "service_type": PROCESSOR_SERVICE_TYPE,
            },
        )
        self.init_db_tables(self.processor.schema())
        logging.info(
            "[Parser] DB tables initialized",
            extra={
                "processor_name": processor_name,
                "service_type": PROCESSOR_SERVICE_TYPE,
            },
        )

        self.start_health_and_monitoring_ports()

        # Get starting event index from DB
        starting_event_index = self.config.get_starting_event_index(processor_name)
        ending_event_index = self.config.server_config.ending_event_index

        logging.info(
            "[Parser] Starting fetcher task",
            extra={
                "processor_name": processor_name,
                "event_source_path": self.config.server_config.event_source_path,
                "start_event_index": starting_event_index,
                "service_type": PROCESSOR_SERVICE_TYPE,
            },
        )

        q = queue.Queue(FETCHER_QUEUE_SIZE)
        producer_thread = threading.Thread(
            target=producer,
            daemon=True,
            args=(
                q,
                self.event_source,
                starting_event_index,
                ending_event_index,
                self.config.server_config.batch_size,
                processor_name,
            ),
        )
        producer_thread.start()

        consumer_thread = threading.Thread(
            target=consumer,
            daemon=True,
            args=(q, self.processor, processor_name),
        )
        consumer_thread.start()

        producer_thread.join()
        consumer_thread.join()

    def init_db_tables(self, schema_name: str) -> None:
        engine = create_engine(self.config.server_config.postgres_connection_string)
        engine = engine.execution_options(
            schema_translate_map={"per_schema": schema_name}
        )
        Session.configure(bind=engine)
        Base.metadata.create_all(engine, checkfirst=True)

    def start_health_and_monitoring_ports(self) -> None:
        # Start the health + metrics server.
        def start_health_server() -> None:
            # The kubelet uses liveness probes to know when to restart a container. In cases where the
            # container is crashing or unresponsive, the kubelet receives timeout or error responses, and then
            # restarts the container. It polls every 10 seconds by default.
            root = Resource()
            root.putChild(b"metrics", MetricsResource())  # type: ignore

            class ServerOk(Resource):
                isLeaf = True

                def render_GET(self, request):
                    return b"ok"

            root.putChild(b"", ServerOk())  # type: ignore
            factory = Site(root)
            reactor.listenTCP(self.config.health_check_port, factory)  # type: ignore
            reactor.run(installSignalHandlers=False)  # type: ignore

        t = threading.Thread(target=start_health_server, daemon=True)
        t.start()


def _schema_names(target, connection):
    schemas = set()
    schema_translate_map = connection.get_execution_options().get(
        "schema_translate_map", {}
    )
    for table in target.tables.values():
        if table.schema is not None:
            schemas.add(schema_translate_map.get(table.schema, table.schema))
    schemas.discard(None)
    return schemas


@event.listens_for(Base.metadata, "before_create")
def create_schemas(target, connection, **kw):
    # Only PostgreSQL has schemas to create
    if connection.dialect.name != "postgresql":
        return
    for schema in _schema_names(target, connection):
        connection.execute(DDL("CREATE SCHEMA IF NOT EXISTS %s" % schema))


@event.listens_for(Base.metadata, "after_drop")
def drop_schemas(target, connection, **kw):
    if connection.dialect.name != "postgresql":
        return
    for schema in _schema_names(target, connection):
        connection.execute(DDL("DROP SCHEMA IF EXISTS %s" % schema))
