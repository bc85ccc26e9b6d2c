from typing import Optional

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def standardize_address(address: str) -> str:
    address = address.lower().removeprefix("0x")
    return "0x" + address.zfill(40)


def is_zero_address(address: str) -> bool:
    return standardize_address(address) == ZERO_ADDRESS


def bytes_to_hex(value: Optional[bytes]) -> Optional[str]:
    if value is None:
        return None
    return "0x" + value.hex()


def bytes32_to_str(value: bytes) -> str:
    return value.rstrip(b"\x00").decode("utf-8", errors="replace")
