"""
Order - the limit order an auction prices.

Only the fields the pricing math reads are modeled; custody and matching
belong to the settlement substrate.
"""

from dataclasses import dataclass

from fusion.crypto import bytes_to_hex
from fusion.utils.validation import require, validate_address, validate_amount


@dataclass(frozen=True)
class Order:
    """
    A maker's order.

    Attributes:
        maker: 20-byte maker address
        maker_asset: 20-byte address of the asset the maker gives
        taker_asset: 20-byte address of the asset the maker wants
        making_amount: Amount of maker_asset offered
        taking_amount: Base (undiscounted) amount of taker_asset requested
    """
    maker: bytes
    maker_asset: bytes
    taker_asset: bytes
    making_amount: int
    taking_amount: int

    def __post_init__(self):
        require(validate_address(self.maker, "maker"))
        require(validate_address(self.maker_asset, "maker_asset"))
        require(validate_address(self.taker_asset, "taker_asset"))
        require(validate_amount(self.making_amount, "making_amount"))
        require(validate_amount(self.taking_amount, "taking_amount"))

    def __repr__(self) -> str:
        return (
            f"Order(maker={bytes_to_hex(self.maker)[:10]}, "
            f"making={self.making_amount}, taking={self.taking_amount})"
        )
