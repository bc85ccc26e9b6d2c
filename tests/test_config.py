"""Tests for loading the YAML config and resolving the starting event index."""

import pytest
import yaml

from factories import EXCHANGE_CONTRACT, ITEM_CONTRACT, RESERVE_LISTING_CONTRACT
from utils.config import Config
from utils.processor_name import ProcessorName

CONFIG = {
    "health_check_port": 8080,
    "server_config": {
        "processor_config": {
            "type": "item_exchange_processor",
            "item_contract_addresses": [ITEM_CONTRACT.upper().replace("0X", "0x")],
            "exchange_contracts": {
                EXCHANGE_CONTRACT: {
                    "item_contract": ITEM_CONTRACT,
                    "finalize_transfer_log_offset": 3,
                }
            },
            "reserve_listing_contract_addresses": [RESERVE_LISTING_CONTRACT],
        },
        "postgres_connection_string": "sqlite://",
        "event_source_path": "events.jsonl",
    },
}


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(CONFIG))
    return str(path)


class TestConfigLoading:
    def test_defaults(self, config_path) -> None:
        config = Config.from_yaml_file(config_path)
        server_config = config.server_config
        processor_config = server_config.processor_config

        assert config.health_check_port == 8080
        assert server_config.batch_size == 100
        assert server_config.starting_event_index is None
        assert processor_config.rpc_url is None
        assert processor_config.default_currency_decimals is None
        assert processor_config.native_currency.symbol == "ETH"
        assert processor_config.native_currency.decimals == 18

    def test_allow_list_from_config(self, config_path) -> None:
        allow_list = Config.from_yaml_file(config_path).server_config.processor_config.allow_list()

        assert allow_list.is_item_contract(ITEM_CONTRACT)
        assert allow_list.is_reserve_listing_contract(RESERVE_LISTING_CONTRACT)
        exchange = allow_list.get_exchange_contract(EXCHANGE_CONTRACT)
        assert exchange.item_contract == ITEM_CONTRACT
        assert exchange.finalize_transfer_log_offset == 3

    def test_environment_overrides_file(self, config_path, monkeypatch) -> None:
        monkeypatch.setenv("HEALTH_CHECK_PORT", "9090")

        assert Config.from_yaml_file(config_path).health_check_port == 9090


class TestStartingEventIndex:
    def test_starts_at_zero_without_checkpoint(self, config_path) -> None:
        config = Config.from_yaml_file(config_path)
        assert config.get_starting_event_index(ProcessorName.ITEM_EXCHANGE_PROCESSOR.value) == 0

    def test_resumes_from_checkpoint(self, config_path, processor) -> None:
        processor.update_last_processed_event(41)

        config = Config.from_yaml_file(config_path)
        assert config.get_starting_event_index(processor.name()) == 42

    def test_config_value_wins_over_checkpoint(self, config_path, processor) -> None:
        processor.update_last_processed_event(41)

        config = Config.from_yaml_file(config_path)
        config.server_config.starting_event_index = 7
        assert config.get_starting_event_index(processor.name()) == 7
