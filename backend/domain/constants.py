"""
Domain constants used across services/routers.
"""
from algosdk import encoding

# Identifier 0 never names a real token; it is burnt from construction.
SENTINEL_TOKEN_ID = 0
FIRST_TOKEN_ID = 1

# Algorand encoding of 32 zero bytes ("AAAA...Y5HFKQ")
ZERO_ADDRESS = encoding.encode_address(bytes(32))


def is_null_address(address: str | None) -> bool:
    """True for None, empty/blank strings and the zero address."""
    return not address or not address.strip() or address == ZERO_ADDRESS
