"""Contract reads needed while indexing: token URIs and hashes, bid shares and
ERC-20 metadata.

Every read either returns a value or raises CallReverted; callers decide what
to substitute.
"""

import copy

from abc import ABC, abstractmethod
from typing import Optional

from web3 import Web3
from web3.exceptions import BadFunctionCallOutput, ContractLogicError, Web3Exception

from processors.item_exchange.event_types import BidShares, DecimalValue
from processors.item_exchange.exceptions import CallReverted
from utils.general_utils import standardize_address

ITEM_ABI = [
    {
        "name": "tokenURI",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "tokenId", "type": "uint256"}],
        "outputs": [{"name": "", "type": "string"}],
    },
    {
        "name": "tokenMetadataURI",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "tokenId", "type": "uint256"}],
        "outputs": [{"name": "", "type": "string"}],
    },
    {
        "name": "tokenContentHashes",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "", "type": "uint256"}],
        "outputs": [{"name": "", "type": "bytes32"}],
    },
    {
        "name": "tokenMetadataHashes",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "", "type": "uint256"}],
        "outputs": [{"name": "", "type": "bytes32"}],
    },
    {
        "name": "itemExchangeContract",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "address"}],
    },
]

ITEM_EXCHANGE_ABI = [
    {
        "name": "bidSharesForToken",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "tokenId", "type": "uint256"}],
        "outputs": [
            {
                "name": "",
                "type": "tuple",
                "components": [
                    {
                        "name": "prevOwner",
                        "type": "tuple",
                        "components": [{"name": "value", "type": "uint256"}],
                    },
                    {
                        "name": "creator",
                        "type": "tuple",
                        "components": [{"name": "value", "type": "uint256"}],
                    },
                    {
                        "name": "owner",
                        "type": "tuple",
                        "components": [{"name": "value", "type": "uint256"}],
                    },
                ],
            }
        ],
    },
]


def _erc20_abi(output_type: str):
    return [
        {
            "name": name,
            "type": "function",
            "stateMutability": "view",
            "inputs": [],
            "outputs": [{"name": "", "type": output_type}],
        }
        for name in ("name", "symbol")
    ]


ERC20_ABI = _erc20_abi("string") + [
    {
        "name": "decimals",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint8"}],
    }
]
# Some early tokens return bytes32 from name() and symbol()
ERC20_BYTES32_ABI = _erc20_abi("bytes32")


class ChainReader(ABC):
    # Reads through the returned reader see contract state as of `block_number`
    @abstractmethod
    def at_block(self, block_number: int) -> "ChainReader":
        pass

    @abstractmethod
    def token_uri(self, item_contract: str, token_id: int) -> str:
        pass

    @abstractmethod
    def token_metadata_uri(self, item_contract: str, token_id: int) -> str:
        pass

    @abstractmethod
    def token_content_hash(self, item_contract: str, token_id: int) -> bytes:
        pass

    @abstractmethod
    def token_metadata_hash(self, item_contract: str, token_id: int) -> bytes:
        pass

    @abstractmethod
    def exchange_contract(self, item_contract: str) -> str:
        pass

    @abstractmethod
    def bid_shares(self, exchange_contract: str, token_id: int) -> BidShares:
        pass

    @abstractmethod
    def erc20_name(self, currency: str) -> str:
        pass

    @abstractmethod
    def erc20_name_bytes32(self, currency: str) -> bytes:
        pass

    @abstractmethod
    def erc20_symbol(self, currency: str) -> str:
        pass

    @abstractmethod
    def erc20_symbol_bytes32(self, currency: str) -> bytes:
        pass

    @abstractmethod
    def erc20_decimals(self, currency: str) -> int:
        pass


class Web3ChainReader(ChainReader):
    def __init__(self, rpc_url: str, block_identifier: Optional[int] = None):
        self.w3 = Web3(Web3.HTTPProvider(rpc_url))
        self.block_identifier = block_identifier or "latest"

    def at_block(self, block_number: int) -> "Web3ChainReader":
        reader = copy.copy(self)
        reader.block_identifier = block_number
        return reader

    def _contract(self, address: str, abi):
        return self.w3.eth.contract(
            address=Web3.to_checksum_address(standardize_address(address)), abi=abi
        )

    def _call(self, function):
        try:
            return function.call(block_identifier=self.block_identifier)
        # OSError covers an unreachable node
        except (ContractLogicError, BadFunctionCallOutput, Web3Exception, ValueError, OSError) as e:
            raise CallReverted(str(e)) from e

    def token_uri(self, item_contract: str, token_id: int) -> str:
        contract = self._contract(item_contract, ITEM_ABI)
        return self._call(contract.functions.tokenURI(token_id))

    def token_metadata_uri(self, item_contract: str, token_id: int) -> str:
        contract = self._contract(item_contract, ITEM_ABI)
        return self._call(contract.functions.tokenMetadataURI(token_id))

    def token_content_hash(self, item_contract: str, token_id: int) -> bytes:
        contract = self._contract(item_contract, ITEM_ABI)
        return self._call(contract.functions.tokenContentHashes(token_id))

    def token_metadata_hash(self, item_contract: str, token_id: int) -> bytes:
        contract = self._contract(item_contract, ITEM_ABI)
        return self._call(contract.functions.tokenMetadataHashes(token_id))

    def exchange_contract(self, item_contract: str) -> str:
        contract = self._contract(item_contract, ITEM_ABI)
        return standardize_address(self._call(contract.functions.itemExchangeContract()))

    def bid_shares(self, exchange_contract: str, token_id: int) -> BidShares:
        contract = self._contract(exchange_contract, ITEM_EXCHANGE_ABI)
        prev_owner, creator, owner = self._call(
            contract.functions.bidSharesForToken(token_id)
        )
        return BidShares(
            creator=DecimalValue(value=creator[0]),
            owner=DecimalValue(value=owner[0]),
            prev_owner=DecimalValue(value=prev_owner[0]),
        )

    def erc20_name(self, currency: str) -> str:
        return self._call(self._contract(currency, ERC20_ABI).functions.name())

    def erc20_name_bytes32(self, currency: str) -> bytes:
        return self._call(self._contract(currency, ERC20_BYTES32_ABI).functions.name())

    def erc20_symbol(self, currency: str) -> str:
        return self._call(self._contract(currency, ERC20_ABI).functions.symbol())

    def erc20_symbol_bytes32(self, currency: str) -> bytes:
        return self._call(
            self._contract(currency, ERC20_BYTES32_ABI).functions.symbol()
        )

    def erc20_decimals(self, currency: str) -> int:
        return self._call(self._contract(currency, ERC20_ABI).functions.decimals())


class UnavailableChainReader(ChainReader):
    """Used when no rpc_url is configured: every read fails and callers fall
    back to their defaults."""

    def at_block(self, block_number: int) -> "UnavailableChainReader":
        return self

    def _unavailable(self, *args):
        raise CallReverted("No rpc_url configured")

    token_uri = _unavailable
    token_metadata_uri = _unavailable
    token_content_hash = _unavailable
    token_metadata_hash = _unavailable
    exchange_contract = _unavailable
    bid_shares = _unavailable
    erc20_name = _unavailable
    erc20_name_bytes32 = _unavailable
    erc20_symbol = _unavailable
    erc20_symbol_bytes32 = _unavailable
    erc20_decimals = _unavailable


def create_chain_reader(rpc_url: Optional[str]) -> ChainReader:
    if rpc_url is None:
        return UnavailableChainReader()
    return Web3ChainReader(rpc_url)
