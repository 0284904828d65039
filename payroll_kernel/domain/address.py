"""Address helpers -- normalization and null-identity detection."""

NULL_ADDRESS = "0x" + "0" * 40


def normalize_address(address: str | None) -> str:
    """Canonical form used as the ledger key: stripped, lower-case."""
    if address is None:
        return ""
    return address.strip().lower()


def is_null_address(address: str | None) -> bool:
    """True for the zero address or an empty identity."""
    normalized = normalize_address(address)
    return normalized in ("", NULL_ADDRESS)
