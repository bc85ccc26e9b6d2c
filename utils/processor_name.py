from enum import Enum


class ProcessorName(Enum):
    ITEM_EXCHANGE_PROCESSOR = "item_exchange_processor"
