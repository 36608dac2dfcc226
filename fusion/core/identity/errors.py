"""
Typed failures of the KYC token registry.

Every failure aborts the whole operation; no state is changed.
"""

from typing import Any, Optional


class KycTokenError(Exception):
    """Base exception for all KYC token errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class TokenAlreadyExists(KycTokenError):
    """Mint targeted a token id that is live or retired."""

    def __init__(self, token_id: int, retired: bool = False):
        state = "retired" if retired else "already minted"
        super().__init__(f"Token {token_id} {state}", {"token_id": token_id, "retired": retired})
        self.token_id = token_id
        self.retired = retired


class TokenNotFound(KycTokenError):
    """Operation referenced a token id that does not exist."""

    def __init__(self, token_id: int):
        super().__init__(f"Token {token_id} does not exist", {"token_id": token_id})
        self.token_id = token_id


class IncorrectOwner(KycTokenError):
    """`from` is not the current holder of the token."""

    def __init__(self, token_id: int, sender: str, owner: str):
        super().__init__(
            f"Token {token_id} is owned by {owner}, not {sender}",
            {"token_id": token_id, "sender": sender, "owner": owner},
        )
        self.token_id = token_id


class OnlyOneTokenPerAddress(KycTokenError):
    """Recipient already holds a token."""

    def __init__(self, account: str):
        super().__init__(f"Account {account} already holds a token", {"account": account})
        self.account = account


class UnauthorizedAccount(KycTokenError):
    """Direct call from an account that is not the controller."""

    def __init__(self, account: str):
        super().__init__(f"Account {account} is not the controller", {"account": account})
        self.account = account


class BadSignature(KycTokenError):
    """Delegated signature does not recover to the required authority."""
    pass


class InvalidRecipient(KycTokenError, ValueError):
    """Recipient is the zero address or malformed."""
    pass
