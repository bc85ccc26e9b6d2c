import argparse

from utils.config import Config
from utils.models.schema_names import ITEM_EXCHANGE_SCHEMA_NAME
from utils.worker import IndexerProcessorServer

# Registers the item exchange tables on the shared metadata
from processors.item_exchange import models  # noqa: F401

if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("-c", "--config", help="Path to config file", required=True)
    args = parser.parse_args()

    config = Config.from_yaml_file(args.config)

    IndexerProcessorServer(config).init_db_tables(ITEM_EXCHANGE_SCHEMA_NAME)
