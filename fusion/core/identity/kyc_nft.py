"""
KYC NFT - one-token-per-address identity credential.

Conceptual Background:
---------------------
A KYC token is proof that an address passed verification. An address may
hold at most one. A single controller account administers the registry:
it mints, moves (e.g. to recover a lost key) and burns tokens directly.

Delegated Authorization:
-----------------------
Any account may submit a state change if it carries a signature from the
required authority over

    solidityPacked(address contract, uint256 chainId, uint256 nonce, uint256 tokenId)

signed as a personal message. The nonce is per token id and advances on
every successful signature-authorized operation, so a captured signature
cannot be replayed; contract address and chain id stop cross-deployment
and cross-chain replay.

Token Lifecycle:
---------------
    NonExistent --mint--> Owned(A) --transfer--> Owned(B) --burn--> Retired

Burned ids are retired and cannot be minted again.

Atomicity:
---------
Every operation runs all its checks before touching state, so a failure
leaves the registry exactly as it was.
"""

import secrets
from typing import Dict, Optional, Set

from fusion.core.config import DEFAULT_CHAIN_ID
from fusion.core.identity.authorization import (
    Authorization,
    DelegatedSignature,
    DirectCaller,
    SignatureAuthority,
)
from fusion.core.identity.errors import (
    BadSignature,
    IncorrectOwner,
    InvalidRecipient,
    OnlyOneTokenPerAddress,
    TokenAlreadyExists,
    TokenNotFound,
    UnauthorizedAccount,
)
from fusion.crypto import (
    ZERO_ADDRESS,
    bytes_to_hex,
    recover_message_signer,
    sign_message,
    solidity_packed,
)
from fusion.utils.logger import get_logger
from fusion.utils.validation import (
    require,
    validate_address,
    validate_signature,
    validate_token_id,
)

logger = get_logger("identity")


# =============================================================================
# Signed Message
# =============================================================================


def pack_token_message(contract: bytes, chain_id: int, nonce: int, token_id: int) -> bytes:
    """Raw message a signature over `token_id` must cover."""
    return solidity_packed(
        ["address", "uint256", "uint256", "uint256"],
        [contract, chain_id, nonce, token_id],
    )


def sign_token_id(
    contract: bytes,
    chain_id: int,
    nonce: int,
    token_id: int,
    private_key: bytes,
) -> bytes:
    """
    Produce a delegated-operation signature off-chain.

    Args:
        contract: Registry address
        chain_id: Chain the registry lives on
        nonce: Current nonce of the token id
        token_id: Token the operation targets
        private_key: Signer's 32-byte key

    Returns:
        65-byte signature
    """
    return sign_message(pack_token_message(contract, chain_id, nonce, token_id), private_key)


# =============================================================================
# Registry
# =============================================================================


class KycNFT:
    """
    Registry of KYC tokens.

    Attributes:
        name: Collection name
        symbol: Collection symbol
        address: 20-byte registry address bound into signatures
        chain_id: Chain id bound into signatures
        controller: 20-byte administrative account
        signature_authority: Who signs delegated transfers and burns
    """

    def __init__(
        self,
        name: str,
        symbol: str,
        controller: bytes,
        address: Optional[bytes] = None,
        chain_id: int = DEFAULT_CHAIN_ID,
        signature_authority: SignatureAuthority = SignatureAuthority.CONTROLLER,
    ):
        """
        Initialize the registry.

        Args:
            name: Collection name
            symbol: Collection symbol
            controller: Initial controller address
            address: Registry address; random when omitted
            chain_id: Chain id bound into signed messages
            signature_authority: Signer policy for transfers and burns
        """
        require(validate_address(controller, "controller"))
        if address is None:
            address = secrets.token_bytes(20)
        require(validate_address(address))
        if chain_id <= 0:
            raise ValueError(f"chain_id must be positive, got {chain_id}")

        self.name = name
        self.symbol = symbol
        self.address = bytes(address)
        self.chain_id = chain_id
        self.controller = bytes(controller)
        self.signature_authority = SignatureAuthority(signature_authority)

        # Token ID -> holder
        self.owners: Dict[int, bytes] = {}

        # Holder -> token ID (at most one per holder)
        self.holder_tokens: Dict[bytes, int] = {}

        # Token ID -> replay nonce
        self._nonces: Dict[int, int] = {}

        # Burned token IDs, never minted again
        self.retired: Set[int] = set()

        logger.info(
            f"KycNFT {symbol} deployed at {bytes_to_hex(self.address)} "
            f"(chain {chain_id}, controller {bytes_to_hex(self.controller)})"
        )

    # =========================================================================
    # Views
    # =========================================================================

    def owner_of(self, token_id: int) -> bytes:
        """Holder of `token_id`; raises TokenNotFound."""
        owner = self.owners.get(token_id)
        if owner is None:
            raise TokenNotFound(token_id)
        return owner

    def balance_of(self, account: bytes) -> int:
        """Number of tokens held by `account` (0 or 1)."""
        return 1 if bytes(account) in self.holder_tokens else 0

    def token_of(self, account: bytes) -> Optional[int]:
        """Token held by `account`, if any."""
        return self.holder_tokens.get(bytes(account))

    def exists(self, token_id: int) -> bool:
        """Check if token is live."""
        return token_id in self.owners

    def is_retired(self, token_id: int) -> bool:
        """Check if token was burned."""
        return token_id in self.retired

    def nonces(self, token_id: int) -> int:
        """Nonce the next signature over `token_id` must cover."""
        return self._nonces.get(token_id, 0)

    @property
    def total_supply(self) -> int:
        return len(self.owners)

    def build_message(self, token_id: int) -> bytes:
        """Raw message for the next delegated operation on `token_id`."""
        return pack_token_message(self.address, self.chain_id, self.nonces(token_id), token_id)

    # =========================================================================
    # Authorization
    # =========================================================================

    def _check_controller(self, caller: bytes) -> None:
        if caller != self.controller:
            raise UnauthorizedAccount(bytes_to_hex(caller))

    def _authorize(self, caller: bytes, token_id: int, proof: Authorization, signer: bytes) -> None:
        """
        Check a proof without consuming anything.

        Args:
            caller: Account submitting the call
            token_id: Token whose nonce the signature must cover
            proof: DirectCaller or DelegatedSignature
            signer: Authority a delegated signature must recover to
        """
        if isinstance(proof, DirectCaller):
            self._check_controller(caller)
            return

        if not isinstance(proof, DelegatedSignature):
            raise TypeError(f"Unknown authorization proof: {type(proof).__name__}")

        valid, err = validate_signature(proof.signature)
        if not valid:
            logger.warning(f"Rejected malformed signature for token {token_id}: {err}")
            raise BadSignature(err, {"token_id": token_id, "nonce": self.nonces(token_id)})

        recovered = recover_message_signer(self.build_message(token_id), bytes(proof.signature))
        if recovered is None or recovered != signer:
            logger.warning(
                f"Rejected signature for token {token_id} "
                f"(nonce {self.nonces(token_id)}, caller {bytes_to_hex(caller)})"
            )
            raise BadSignature(
                f"Signature for token {token_id} is not from {bytes_to_hex(signer)}",
                {"token_id": token_id, "nonce": self.nonces(token_id)},
            )

    def _delegated_signer(self, token_id: int) -> bytes:
        """Authority for delegated transfers and burns of `token_id`."""
        if self.signature_authority == SignatureAuthority.HOLDER:
            return self.owner_of(token_id)
        return self.controller

    def _consume(self, token_id: int, proof: Authorization) -> None:
        if isinstance(proof, DelegatedSignature):
            self._nonces[token_id] = self.nonces(token_id) + 1

    # =========================================================================
    # Checks
    # =========================================================================

    @staticmethod
    def _check_recipient(to: bytes) -> None:
        valid, err = validate_address(to, "recipient")
        if not valid:
            raise InvalidRecipient(err)
        if to == ZERO_ADDRESS:
            raise InvalidRecipient("Recipient is the zero address")

    def _check_can_receive(self, to: bytes, token_id: int) -> None:
        held = self.holder_tokens.get(to)
        if held is not None and held != token_id:
            raise OnlyOneTokenPerAddress(bytes_to_hex(to))

    # =========================================================================
    # Mint
    # =========================================================================

    def mint(self, to: bytes, token_id: int, caller: bytes) -> None:
        """Controller mints `token_id` to `to`."""
        self._mint(to, token_id, caller, DirectCaller())

    def mint_with_signature(self, to: bytes, token_id: int, signature: bytes, caller: bytes) -> None:
        """Any caller mints with a controller signature."""
        self._mint(to, token_id, caller, DelegatedSignature(signature))

    def _mint(self, to: bytes, token_id: int, caller: bytes, proof: Authorization) -> None:
        require(validate_token_id(token_id))
        self._authorize(caller, token_id, proof, self.controller)
        self._check_recipient(to)
        to = bytes(to)

        if token_id in self.owners:
            raise TokenAlreadyExists(token_id)
        if token_id in self.retired:
            raise TokenAlreadyExists(token_id, retired=True)
        self._check_can_receive(to, token_id)

        self._consume(token_id, proof)
        self.owners[token_id] = bytes(to)
        self.holder_tokens[bytes(to)] = token_id

        logger.info(f"Minted token {token_id} to {bytes_to_hex(to)}")

    # =========================================================================
    # Transfer
    # =========================================================================

    def transfer_from(
        self,
        from_: bytes,
        to: bytes,
        token_id: int,
        caller: bytes,
        signature: Optional[bytes] = None,
    ) -> None:
        """
        Move `token_id` from `from_` to `to`.

        Without a signature the caller must be the controller, which may
        move any holder's token. With a signature any caller may submit.
        """
        proof: Authorization = DirectCaller() if signature is None else DelegatedSignature(signature)

        require(validate_token_id(token_id))

        if isinstance(proof, DelegatedSignature):
            self._authorize(caller, token_id, proof, self._delegated_signer(token_id))
        else:
            self._authorize(caller, token_id, proof, self.controller)
        self._check_recipient(to)
        to = bytes(to)

        owner = self.owner_of(token_id)
        if owner != from_:
            raise IncorrectOwner(token_id, bytes_to_hex(from_), bytes_to_hex(owner))
        self._check_can_receive(to, token_id)

        self._consume(token_id, proof)
        del self.holder_tokens[owner]
        self.owners[token_id] = bytes(to)
        self.holder_tokens[bytes(to)] = token_id

        logger.info(f"Transferred token {token_id}: {bytes_to_hex(from_)} -> {bytes_to_hex(to)}")

    # =========================================================================
    # Burn
    # =========================================================================

    def burn(self, token_id: int, caller: bytes) -> None:
        """Controller burns any token."""
        self._burn(token_id, caller, DirectCaller())

    def burn_with_signature(self, token_id: int, signature: bytes, caller: bytes) -> None:
        """Any caller burns with a signature from the delegated authority."""
        self._burn(token_id, caller, DelegatedSignature(signature))

    def _burn(self, token_id: int, caller: bytes, proof: Authorization) -> None:
        require(validate_token_id(token_id))

        if isinstance(proof, DelegatedSignature):
            self._authorize(caller, token_id, proof, self._delegated_signer(token_id))
        else:
            self._authorize(caller, token_id, proof, self.controller)

        owner = self.owner_of(token_id)

        self._consume(token_id, proof)
        del self.owners[token_id]
        del self.holder_tokens[owner]
        self.retired.add(token_id)

        logger.info(f"Burned token {token_id} held by {bytes_to_hex(owner)}")

    # =========================================================================
    # Administration
    # =========================================================================

    def transfer_ownership(self, new_controller: bytes, caller: bytes) -> None:
        """Hand the controller role to another account."""
        self._check_controller(caller)
        valid, err = validate_address(new_controller, "new_controller")
        if not valid or new_controller == ZERO_ADDRESS:
            raise InvalidRecipient(err or "New controller is the zero address")

        previous = self.controller
        self.controller = bytes(new_controller)
        logger.info(f"Controller changed: {bytes_to_hex(previous)} -> {bytes_to_hex(new_controller)}")

    # =========================================================================
    # Statistics
    # =========================================================================

    def stats(self) -> dict:
        """Get registry statistics."""
        return {
            "name": self.name,
            "symbol": self.symbol,
            "total_supply": self.total_supply,
            "retired": len(self.retired),
            "signed_operations": sum(self._nonces.values()),
            "controller": bytes_to_hex(self.controller),
        }


# =============================================================================
# Module Exports
# =============================================================================

__all__ = [
    "KycNFT",
    "pack_token_message",
    "sign_token_id",
]
