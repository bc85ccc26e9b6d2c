import yaml
from utils.models.general_models import NextEventToProcess
from utils.session import Session
from processors.item_exchange.allow_list import AllowList
from pydantic import BaseModel
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)
from sqlalchemy.exc import SQLAlchemyError
from typing import Dict, List, Optional
import logging


class ProcessorConfig(BaseModel):
    type: str


class ExchangeContractConfig(BaseModel):
    # Item contract whose tokens this exchange trades
    item_contract: str
    # Number of log positions between the Transfer and the BidFinalized an exchange emits
    finalize_transfer_log_offset: int = 2


class NativeCurrencyConfig(BaseModel):
    name: str = "Ethereum"
    symbol: str = "ETH"
    decimals: int = 18


class ItemExchangeConfig(ProcessorConfig):
    item_contract_addresses: List[str]
    exchange_contracts: Dict[str, ExchangeContractConfig]
    reserve_listing_contract_addresses: List[str] = []
    rpc_url: Optional[str] = None
    native_currency: NativeCurrencyConfig = NativeCurrencyConfig()
    # Used when an ERC-20 does not answer decimals(); None keeps the column empty
    default_currency_decimals: Optional[int] = None

    def allow_list(self) -> AllowList:
        return AllowList.build(
            item_contracts=self.item_contract_addresses,
            exchange_contracts={
                address: (
                    exchange.item_contract,
                    exchange.finalize_transfer_log_offset,
                )
                for address, exchange in self.exchange_contracts.items()
            },
            reserve_listing_contracts=self.reserve_listing_contract_addresses,
        )


class ServerConfig(BaseModel):
    processor_config: ItemExchangeConfig
    postgres_connection_string: str
    # JSON lines file of decoded events, in chain order
    event_source_path: str
    starting_event_index: Optional[int] = None
    ending_event_index: Optional[int] = None
    batch_size: int = 100


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_nested_delimiter="__")

    health_check_port: int
    server_config: ServerConfig

    # change order of priority of settings sources such that environment variables take precedence over config file settings
    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return env_settings, init_settings, file_secret_settings

    @classmethod
    def from_yaml_file(cls, path: str):
        with open(path, "r") as file:
            config = yaml.safe_load(file)

        return cls(**config)

    def get_starting_event_index(self, processor_name: str) -> int:
        next_event_index = None

        if self.server_config.postgres_connection_string is not None:
            try:
                with Session() as session, session.begin():
                    next_event_to_process_from_db = session.get(
                        NextEventToProcess, processor_name
                    )
                    if next_event_to_process_from_db is not None:
                        next_event_index = (
                            next_event_to_process_from_db.next_event_index
                        )
            except SQLAlchemyError:
                logging.warning(
                    "[Config] Database error when getting NextEventToProcess. Skipping..."
                )

        # By default, if nothing is set, start from 0
        starting_event_index = 0
        if self.server_config.starting_event_index is not None:
            logging.info("[Config] Starting from config starting_event_index")
            starting_event_index = self.server_config.starting_event_index
        elif next_event_index is not None:
            logging.info("[Config] Starting from event index from db")
            starting_event_index = next_event_index
        else:
            logging.info("[Config] Starting from event index 0")

        return starting_event_index
