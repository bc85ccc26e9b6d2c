"""Tests for per event transactions, batch results and the checkpoint."""

import json

import pytest
from prometheus_client import REGISTRY

from factories import (
    ALICE,
    BOB,
    EXCHANGE_CONTRACT,
    ITEM_CONTRACT,
    UNLISTED_CONTRACT,
    WETH,
    ask_created,
    bid_created,
    mint,
    position,
    transfer,
)
from processors.item_exchange.event_source import JsonLinesEventSource
from processors.item_exchange.event_types import ChainEvent
from processors.item_exchange.exceptions import UnknownEventError
from processors.item_exchange.models import Ask, Bid, Currency, Item, User
from utils.config import Config
from utils.general_utils import ZERO_ADDRESS, standardize_address
from utils.models.general_models import NextEventToProcess
from utils.processor_name import ProcessorName
from utils.token_utils import ItemKey

ITEM_ID = ItemKey.create(ITEM_CONTRACT, 1).to_id()


def missing_referent_count(event_type: str) -> float:
    value = REGISTRY.get_sample_value(
        "indexer_processor_missing_referent_errors_total",
        {
            "processor_name": ProcessorName.ITEM_EXCHANGE_PROCESSOR.value,
            "event_type": event_type,
        },
    )
    return value or 0.0


class TestProcessEvents:
    def test_batch_result_counts(self, processor) -> None:
        result = processor.process_events(
            [
                mint(ALICE, tx="0x01"),
                mint(ALICE, address=UNLISTED_CONTRACT, tx="0x02"),
                transfer(ALICE, BOB, token_id=5, tx="0x03"),
            ],
            10,
        )

        assert result.start_event_index == 10
        assert result.end_event_index == 12
        assert result.processed_events == 1
        assert result.skipped_events == 1
        assert result.failed_events == 1
        assert result.processing_duration_in_secs >= 0

    def test_failed_event_leaves_no_partial_writes(self, apply, load, load_all) -> None:
        before = missing_referent_count("Transfer")

        # Both users are created before the item lookup fails
        result = apply(transfer(ALICE, BOB, tx="0x01"))

        assert result.failed_events == 1
        assert load_all(User) == []
        assert load_all(Currency) == []
        assert load_all(Bid) == []
        assert missing_referent_count("Transfer") == before + 1

    def test_processing_continues_after_failure(self, apply, load) -> None:
        result = apply(
            transfer(ALICE, BOB, tx="0x01"),
            mint(ALICE, tx="0x02"),
            bid_created(BOB, 40, tx="0x03"),
        )

        assert result.failed_events == 1
        assert result.processed_events == 2
        assert load(Item, ITEM_ID).owner == standardize_address(ALICE)
        assert load(Bid, (ITEM_ID, standardize_address(BOB))).amount == 40


class TestCheckpoint:
    def test_checkpoint_stores_next_event_index(self, processor, load) -> None:
        processor.update_last_processed_event(9)

        checkpoint = load(NextEventToProcess, processor.name())
        assert checkpoint.next_event_index == 10

    def test_checkpoint_only_moves_forward(self, processor, load) -> None:
        processor.update_last_processed_event(20)
        processor.update_last_processed_event(5)

        assert load(NextEventToProcess, processor.name()).next_event_index == 21
        processor.update_last_processed_event(30)
        assert load(NextEventToProcess, processor.name()).next_event_index == 31

    def test_checkpoint_moves_with_each_event(self, apply, load) -> None:
        apply(mint(ALICE, tx="0x01"), transfer(ALICE, BOB, token_id=5, tx="0x02"))

        # A rejected event is checkpointed too, so it is not retried
        assert load(NextEventToProcess, ProcessorName.ITEM_EXCHANGE_PROCESSOR.value).next_event_index == 2


class TestRestart:
    def test_committed_events_are_not_replayed_after_crash(
        self, processor, load, tmp_path
    ) -> None:
        events = [
            {
                "event": "Transfer",
                "address": ITEM_CONTRACT,
                "from_address": ZERO_ADDRESS,
                "to_address": ALICE,
                "token_id": 1,
                **position(tx="0x01"),
            },
            {
                "event": "AskCreated",
                "address": EXCHANGE_CONTRACT,
                "token_id": 1,
                "ask": {"amount": 100, "currency": WETH},
                **position(tx="0x02"),
            },
        ]
        path = tmp_path / "events.jsonl"
        path.write_text("\n".join(json.dumps(event) for event in events))
        source = JsonLinesEventSource(str(path))
        config = Config(
            health_check_port=8080,
            server_config={
                "processor_config": {
                    "type": processor.name(),
                    "item_contract_addresses": [ITEM_CONTRACT],
                    "exchange_contracts": {},
                },
                "postgres_connection_string": "sqlite://",
                "event_source_path": str(path),
            },
        )

        # The batch fails on its last event, before any batch level bookkeeping
        batch = list(source.events(0)) + [ChainEvent(address=ITEM_CONTRACT, **position(tx="0x03"))]
        with pytest.raises(UnknownEventError):
            processor.process_events(batch, 0)

        starting_event_index = config.get_starting_event_index(processor.name())
        assert starting_event_index == 2
        assert list(source.events(starting_event_index)) == []

        result = processor.process_events([ask_created(150, tx="0x04")], 2)
        assert result.failed_events == 0
        assert load(Ask, (ITEM_ID, standardize_address(ALICE))).amount == 150
