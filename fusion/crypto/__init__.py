"""
Cryptographic primitives for fusion.

This module provides:
- Hashing (Keccak-256)
- Key generation and address derivation
- Recoverable ECDSA signatures on secp256k1 (65-byte r || s || v)
- EIP-191 personal-message hashing and signer recovery
- Solidity-style tight packing for signed payloads

Design Notes:
-------------
Signatures follow the EVM conventions so that payloads signed here verify
against the same rules a contract would apply:

- s must be in the lower half of the curve order (EIP-2)
- v is 27 or 28 (0 and 1 are normalized)
- the signed digest of a raw message is
  keccak256("\\x19Ethereum Signed Message:\\n" || len(message) || message)
"""

import secrets
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from Crypto.Hash import keccak
from py_ecc.secp256k1 import secp256k1


# =============================================================================
# Constants
# =============================================================================

# secp256k1 curve order (number of points on the curve)
SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

SIGNATURE_LENGTH = 65
ADDRESS_LENGTH = 20
ZERO_ADDRESS = bytes(ADDRESS_LENGTH)

PERSONAL_MESSAGE_PREFIX = b"\x19Ethereum Signed Message:\n"


# =============================================================================
# Hashing
# =============================================================================


def keccak256(data: bytes) -> bytes:
    """
    Compute Keccak-256 hash (Ethereum-style).

    Used for: address derivation, signed message digests.
    """
    k = keccak.new(digest_bits=256)
    k.update(data)
    return k.digest()


def hash_personal_message(message: bytes) -> bytes:
    """
    Digest of a raw message under the EIP-191 personal-sign convention.

    The length prefix is the decimal byte length of the message.
    """
    prefix = PERSONAL_MESSAGE_PREFIX + str(len(message)).encode("ascii")
    return keccak256(prefix + message)


# =============================================================================
# Packing
# =============================================================================


def pack_address(address: bytes) -> bytes:
    """Pack a 20-byte address (abi.encodePacked semantics)."""
    if len(address) != ADDRESS_LENGTH:
        raise ValueError(f"Address must be {ADDRESS_LENGTH} bytes, got {len(address)}")
    return bytes(address)


def pack_uint(value: int, bits: int = 256) -> bytes:
    """Pack an unsigned integer big-endian into bits // 8 bytes."""
    if bits % 8 != 0 or not 8 <= bits <= 256:
        raise ValueError(f"Invalid uint width: {bits}")
    if value < 0 or value >= 1 << bits:
        raise ValueError(f"Value {value} does not fit in uint{bits}")
    return value.to_bytes(bits // 8, byteorder="big")


def solidity_packed(types: Iterable[str], values: Iterable) -> bytes:
    """
    Tightly pack values the way Solidity's abi.encodePacked does.

    Supports 'address' and 'uintN' types, which is all the signed
    payloads in this package use.

    Args:
        types: Type names, e.g. ['address', 'uint256']
        values: Matching values (bytes for addresses, ints for uints)

    Returns:
        Packed bytes
    """
    types = list(types)
    values = list(values)
    if len(types) != len(values):
        raise ValueError(f"Got {len(types)} types for {len(values)} values")

    out = b""
    for type_name, value in zip(types, values):
        if type_name == "address":
            out += pack_address(value)
        elif type_name.startswith("uint"):
            bits = int(type_name[4:] or 256)
            out += pack_uint(value, bits)
        else:
            raise ValueError(f"Unsupported packed type: {type_name}")
    return out


# =============================================================================
# Key Generation
# =============================================================================


@dataclass
class KeyPair:
    """
    An ECDSA keypair on secp256k1.

    Attributes:
        private_key: 32-byte secret key (integer in [1, order-1])
        public_key: 64-byte uncompressed public key (x || y coordinates)
    """
    private_key: bytes  # 32 bytes
    public_key: bytes   # 64 bytes (uncompressed, no 0x04 prefix)

    @property
    def address(self) -> bytes:
        """20-byte account address derived from the public key."""
        return address_from_public_key(self.public_key)

    @property
    def address_hex(self) -> str:
        """Return address as 0x-prefixed hex string."""
        return bytes_to_hex(self.address)

    @property
    def private_key_hex(self) -> str:
        """Return private key as hex string."""
        return self.private_key.hex()


def generate_keypair() -> KeyPair:
    """
    Generate a new random keypair.

    Uses cryptographically secure random number generator.
    """
    private_key_int = secrets.randbelow(SECP256K1_ORDER - 1) + 1
    private_key = private_key_int.to_bytes(32, byteorder="big")
    return KeyPair(private_key=private_key, public_key=private_key_to_public_key(private_key))


def keypair_from_private_key(private_key: bytes) -> KeyPair:
    """Rebuild a keypair from an existing 32-byte private key."""
    return KeyPair(private_key=private_key, public_key=private_key_to_public_key(private_key))


def private_key_to_public_key(private_key: bytes) -> bytes:
    """
    Derive public key from private key.

    Args:
        private_key: 32-byte private key

    Returns:
        64-byte uncompressed public key
    """
    if len(private_key) != 32:
        raise ValueError("Private key must be 32 bytes")

    public_key_point = secp256k1.privtopub(private_key)
    x_bytes = public_key_point[0].to_bytes(32, byteorder="big")
    y_bytes = public_key_point[1].to_bytes(32, byteorder="big")
    return x_bytes + y_bytes


def address_from_public_key(public_key: bytes) -> bytes:
    """
    Derive address from public key (Ethereum-style).

    Address = last 20 bytes of keccak256(public_key).
    """
    if len(public_key) != 64:
        raise ValueError("Public key must be 64 bytes")
    return keccak256(public_key)[-ADDRESS_LENGTH:]


# =============================================================================
# Digital Signatures (ECDSA)
# =============================================================================


def sign_hash(message_hash: bytes, private_key: bytes) -> bytes:
    """
    Sign a 32-byte digest, producing a recoverable signature.

    Args:
        message_hash: 32-byte digest
        private_key: 32-byte private key

    Returns:
        65-byte signature (r || s || v), v in {27, 28}
    """
    if len(message_hash) != 32:
        raise ValueError("Message hash must be 32 bytes")
    if len(private_key) != 32:
        raise ValueError("Private key must be 32 bytes")

    # py_ecc already returns low-s with a matching v
    v, r, s = secp256k1.ecdsa_raw_sign(message_hash, private_key)

    return r.to_bytes(32, byteorder="big") + s.to_bytes(32, byteorder="big") + bytes([v])


def sign_message(message: bytes, private_key: bytes) -> bytes:
    """Sign a raw message under the personal-message convention."""
    return sign_hash(hash_personal_message(message), private_key)


def split_signature(signature: bytes) -> Optional[Tuple[int, int, int]]:
    """
    Split a 65-byte signature into (v, r, s).

    Returns None when the signature is malformed: wrong length,
    v outside {0, 1, 27, 28}, r/s out of range, or high s.
    """
    if len(signature) != SIGNATURE_LENGTH:
        return None

    r = int.from_bytes(signature[:32], byteorder="big")
    s = int.from_bytes(signature[32:64], byteorder="big")
    v = signature[64]
    if v < 27:
        v += 27

    if v not in (27, 28):
        return None
    if r < 1 or r >= SECP256K1_ORDER:
        return None
    if s < 1 or s > SECP256K1_ORDER // 2:
        return None

    return v, r, s


def recover_public_key(message_hash: bytes, signature: bytes) -> Optional[bytes]:
    """
    Recover the signer's public key from a recoverable signature.

    Args:
        message_hash: 32-byte digest
        signature: 65-byte signature (r || s || v)

    Returns:
        64-byte public key, or None if recovery fails
    """
    if len(message_hash) != 32:
        return None

    vrs = split_signature(signature)
    if vrs is None:
        return None

    recovered = secp256k1.ecdsa_raw_recover(message_hash, vrs)
    # r that is not an x coordinate on the curve
    if not recovered:
        return None

    x_bytes = recovered[0].to_bytes(32, byteorder="big")
    y_bytes = recovered[1].to_bytes(32, byteorder="big")
    return x_bytes + y_bytes


def recover_address(message_hash: bytes, signature: bytes) -> Optional[bytes]:
    """Recover the signer's 20-byte address, or None."""
    public_key = recover_public_key(message_hash, signature)
    if public_key is None:
        return None
    return address_from_public_key(public_key)


def recover_message_signer(message: bytes, signature: bytes) -> Optional[bytes]:
    """Recover the address that personal-signed a raw message, or None."""
    return recover_address(hash_personal_message(message), signature)


# =============================================================================
# Utility Functions
# =============================================================================


def bytes_to_hex(data: bytes) -> str:
    """Convert bytes to hex string with 0x prefix."""
    return "0x" + data.hex()


def hex_to_bytes(hex_str: str) -> bytes:
    """Convert hex string (with or without 0x prefix) to bytes."""
    if hex_str.startswith("0x") or hex_str.startswith("0X"):
        hex_str = hex_str[2:]
    return bytes.fromhex(hex_str)
