from prometheus_client import Counter, Gauge

PROCESSED_EVENTS_COUNTER = Counter(
    "indexer_processor_processed_events",
    "Number of events processed",
    ["processor_name", "event_type"],
)

SKIPPED_EVENTS_COUNTER = Counter(
    "indexer_processor_skipped_events",
    "Number of events emitted by contracts outside the allow list",
    ["processor_name", "event_type"],
)

MISSING_REFERENT_COUNTER = Counter(
    "indexer_processor_missing_referent_errors",
    "Number of events rejected because an entity they depend on was missing",
    ["processor_name", "event_type"],
)

LATEST_PROCESSED_EVENT_INDEX = Gauge(
    "indexer_processor_latest_event_index",
    "Latest processed event index",
    ["processor_name"],
)
