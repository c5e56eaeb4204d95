"""
Input validation for wallet addresses and token identifiers.

Wallets are Algorand addresses: 58 characters, base32 with checksum.
"""
from fastapi import HTTPException, Path
from algosdk import encoding


def validate_wallet_address(address: str, field: str = "wallet") -> str:
    """
    Validate an Algorand address format and checksum.

    Returns:
        The validated address (unchanged)

    Raises:
        HTTPException(400) if the address is invalid
    """
    if not address:
        raise HTTPException(status_code=400, detail=f"{field} address is required")

    if len(address) != 58:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid {field} address: expected 58 characters, got {len(address)}"
        )

    if not encoding.is_valid_address(address):
        raise HTTPException(
            status_code=400,
            detail=f"Invalid {field} address checksum: {address[:12]}..."
        )

    return address


def validated_wallet(wallet: str = Path(..., description="Algorand wallet address")) -> str:
    """FastAPI dependency for validating wallet path parameters."""
    return validate_wallet_address(wallet)


def validated_token_id(token_id: int = Path(..., ge=0, description="Token identifier")) -> int:
    """FastAPI dependency for token id path parameters (0 is the burnt sentinel)."""
    return token_id
