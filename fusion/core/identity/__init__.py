"""
fusion KYC identity token.

One token per address, administered by a single controller, with
signature-delegated mint / transfer / burn.
"""

from fusion.core.identity.authorization import (
    Authorization,
    DirectCaller,
    DelegatedSignature,
    SignatureAuthority,
)
from fusion.core.identity.errors import (
    KycTokenError,
    TokenAlreadyExists,
    TokenNotFound,
    IncorrectOwner,
    OnlyOneTokenPerAddress,
    UnauthorizedAccount,
    BadSignature,
    InvalidRecipient,
)
from fusion.core.identity.kyc_nft import KycNFT, pack_token_message, sign_token_id

__all__ = [
    "Authorization",
    "DirectCaller",
    "DelegatedSignature",
    "SignatureAuthority",
    "KycTokenError",
    "TokenAlreadyExists",
    "TokenNotFound",
    "IncorrectOwner",
    "OnlyOneTokenPerAddress",
    "UnauthorizedAccount",
    "BadSignature",
    "InvalidRecipient",
    "KycNFT",
    "pack_token_message",
    "sign_token_id",
]
