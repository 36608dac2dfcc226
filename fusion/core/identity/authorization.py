"""
Authorization proofs for KYC token operations.

A state-changing call carries one of two proofs:

- DirectCaller: the caller itself must be the controller
- DelegatedSignature: any caller, with a signature from the required
  authority over (contract, chain id, nonce, token id)
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Union


class SignatureAuthority(IntEnum):
    """Who must sign delegated transfers and burns."""
    CONTROLLER = 0    # The controller signs every delegated operation
    HOLDER = 1        # The current token holder signs transfers and burns


@dataclass(frozen=True)
class DirectCaller:
    """Proof by being the controller."""
    pass


@dataclass(frozen=True)
class DelegatedSignature:
    """Proof by presenting a 65-byte recoverable signature."""
    signature: bytes

    def __repr__(self) -> str:
        if not isinstance(self.signature, (bytes, bytearray)):
            return f"DelegatedSignature(<{type(self.signature).__name__}>)"
        return f"DelegatedSignature({self.signature[:4].hex()}..)"


Authorization = Union[DirectCaller, DelegatedSignature]
