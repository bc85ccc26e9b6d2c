ITEM_EXCHANGE_SCHEMA_NAME = "item_exchange"
