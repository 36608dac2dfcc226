"""
Settlement Extension - fill-time pricing entry point.

The settlement substrate calls into the extension with the order, the fill
size, the packed auction details carried in the order's extension data and
the current block context. The extension decodes the details and prices the
fill through the gas bump calculator.
"""

from dataclasses import dataclass
from typing import Union

from fusion.core.auction.details import AuctionDetails
from fusion.core.auction.gas_bump import (
    compute_making_amount,
    compute_taking_amount,
    get_auction_bump,
    get_gas_bump,
    get_rate_bump,
)
from fusion.core.auction.order import Order
from fusion.utils.logger import get_logger

logger = get_logger("settlement")


@dataclass(frozen=True)
class BlockContext:
    """
    Chain data visible to a fill.

    Attributes:
        timestamp: Block timestamp (seconds)
        gas_price: Fee price of the filling transaction (wei)
    """
    timestamp: int
    gas_price: int

    def __post_init__(self):
        if self.timestamp < 0:
            raise ValueError(f"timestamp must be >= 0, got {self.timestamp}")
        if self.gas_price < 0:
            raise ValueError(f"gas_price must be >= 0, got {self.gas_price}")


@dataclass(frozen=True)
class Quote:
    """Breakdown of a priced fill."""
    auction_bump: int
    gas_bump: int
    rate_bump: int
    making_amount: int
    taking_amount: int

    def to_dict(self) -> dict:
        return {
            "auction_bump": self.auction_bump,
            "gas_bump": self.gas_bump,
            "rate_bump": self.rate_bump,
            "making_amount": self.making_amount,
            "taking_amount": self.taking_amount,
        }


def _as_details(auction_details: Union[bytes, AuctionDetails]) -> AuctionDetails:
    if isinstance(auction_details, AuctionDetails):
        return auction_details
    return AuctionDetails.decode(bytes(auction_details))


class SettlementExtension:
    """
    Prices order fills for the settlement substrate.

    Stateless apart from counting served quotes.
    """

    def __init__(self):
        self.quotes_served: int = 0

    def get_taking_amount(
        self,
        order: Order,
        making_amount: int,
        auction_details: Union[bytes, AuctionDetails],
        block: BlockContext,
    ) -> int:
        """
        Taking amount for a fill of `making_amount`.

        Args:
            order: Order being filled
            making_amount: Fill size in maker asset
            auction_details: Packed or decoded auction details
            block: Current block context

        Returns:
            Amount of taker asset owed
        """
        details = _as_details(auction_details)
        amount = compute_taking_amount(
            order, details, block.timestamp, block.gas_price, making_amount=making_amount
        )
        self.quotes_served += 1
        return amount

    def get_making_amount(
        self,
        order: Order,
        taking_amount: int,
        auction_details: Union[bytes, AuctionDetails],
        block: BlockContext,
    ) -> int:
        """Making amount released for a fill of `taking_amount`."""
        details = _as_details(auction_details)
        amount = compute_making_amount(
            order, details, block.timestamp, block.gas_price, taking_amount=taking_amount
        )
        self.quotes_served += 1
        return amount

    def quote(
        self,
        order: Order,
        auction_details: Union[bytes, AuctionDetails],
        block: BlockContext,
    ) -> Quote:
        """Full-fill quote with the bump breakdown."""
        details = _as_details(auction_details)
        rate_bump = get_rate_bump(details, block.timestamp, block.gas_price)
        quote = Quote(
            auction_bump=get_auction_bump(details, block.timestamp),
            gas_bump=get_gas_bump(details, block.gas_price),
            rate_bump=rate_bump,
            making_amount=order.making_amount,
            taking_amount=compute_taking_amount(order, details, block.timestamp, block.gas_price),
        )
        self.quotes_served += 1

        logger.info(
            f"Quote {order!r}: bump={quote.rate_bump} "
            f"(auction={quote.auction_bump}, gas={quote.gas_bump}), "
            f"taking={quote.taking_amount}"
        )
        return quote
