"""
Gas Bump - time and fee-price adjusted pricing for Dutch auction orders.

The taker of an order owes the base taking amount plus a rate bump that
decays over the auction. Part of that bump is given back to the taker as
gas compensation, proportional to the live fee price:

    auction_bump = curve(elapsed)
    gas_bump     = gas_bump_estimate * fee_price / gas_price_estimate / 1e6
    rate_bump    = max(auction_bump - gas_bump, 0)
    taking       = base_taking * (1e7 + rate_bump) / 1e7

Because rate_bump never goes negative, however high the fee price gets
the taker never pays less than the base taking amount.

All functions here are pure: the caller supplies time and fee price.
"""

from typing import Optional

from fusion.core.auction.details import (
    AuctionDetails,
    BASE_POINTS,
    GAS_PRICE_ESTIMATE_SCALE,
)
from fusion.core.auction.order import Order
from fusion.utils.logger import get_logger

logger = get_logger("auction")


def _check_inputs(current_time: int, fee_price: int) -> None:
    if current_time < 0:
        raise ValueError(f"current_time must be >= 0, got {current_time}")
    if fee_price < 0:
        raise ValueError(f"fee_price must be >= 0, got {fee_price}")


# =============================================================================
# Rate Bump
# =============================================================================


def get_auction_bump(details: AuctionDetails, current_time: int) -> int:
    """
    Rate bump of the decay curve at `current_time`.

    Linear between consecutive anchors, flat after the last one.
    Before start_time the auction is treated as just opened.
    """
    elapsed = max(0, current_time - details.start_time)

    anchors = details.anchors
    t0, r0 = anchors[0]
    for t1, r1 in anchors[1:]:
        if elapsed < t1:
            return ((elapsed - t0) * r1 + (t1 - elapsed) * r0) // (t1 - t0)
        t0, r0 = t1, r1

    return r0


def get_gas_bump(details: AuctionDetails, fee_price: int) -> int:
    """
    Share of the rate bump returned to the taker as gas compensation.

    Zero when either estimate is zero: the order did not opt in.
    """
    if details.gas_bump_estimate == 0 or details.gas_price_estimate == 0:
        return 0
    return (
        details.gas_bump_estimate * fee_price
        // details.gas_price_estimate
        // GAS_PRICE_ESTIMATE_SCALE
    )


def get_rate_bump(details: AuctionDetails, current_time: int, fee_price: int) -> int:
    """Net rate bump after gas compensation, never below zero."""
    _check_inputs(current_time, fee_price)

    auction_bump = get_auction_bump(details, current_time)
    gas_bump = get_gas_bump(details, fee_price)
    return auction_bump - gas_bump if auction_bump > gas_bump else 0


# =============================================================================
# Amounts
# =============================================================================


def compute_taking_amount(
    order: Order,
    details: AuctionDetails,
    current_time: int,
    fee_price: int,
    making_amount: Optional[int] = None,
) -> int:
    """
    Amount the taker must deliver at `current_time` and `fee_price`.

    Args:
        order: The order being filled
        details: Its auction schedule
        current_time: Substrate timestamp (seconds)
        fee_price: Live fee price in wei
        making_amount: Partial fill size; defaults to the whole order

    Returns:
        Taking amount, never below the (pro-rata) base taking amount
    """
    rate_bump = get_rate_bump(details, current_time, fee_price)

    if making_amount is None or making_amount == order.making_amount:
        amount = order.taking_amount * (BASE_POINTS + rate_bump) // BASE_POINTS
    else:
        if making_amount <= 0:
            raise ValueError(f"making_amount must be positive, got {making_amount}")
        if making_amount > order.making_amount:
            raise ValueError(
                f"making_amount {making_amount} exceeds order making amount {order.making_amount}"
            )
        amount = (
            order.taking_amount * making_amount * (BASE_POINTS + rate_bump)
            // (order.making_amount * BASE_POINTS)
        )

    logger.debug(
        f"Taking amount: base={order.taking_amount}, bump={rate_bump}, "
        f"fee_price={fee_price}, amount={amount}"
    )
    return amount


def compute_making_amount(
    order: Order,
    details: AuctionDetails,
    current_time: int,
    fee_price: int,
    taking_amount: Optional[int] = None,
) -> int:
    """
    Amount the maker gives for `taking_amount` at the current bump.

    The inverse of compute_taking_amount: the bump shrinks what the
    maker releases per unit taken.

    Args:
        taking_amount: Amount the taker delivers; defaults to the base
            taking amount of the order
    """
    rate_bump = get_rate_bump(details, current_time, fee_price)

    if taking_amount is None:
        taking_amount = order.taking_amount
    if taking_amount <= 0:
        raise ValueError(f"taking_amount must be positive, got {taking_amount}")

    amount = (
        order.making_amount * taking_amount * BASE_POINTS
        // (order.taking_amount * (BASE_POINTS + rate_bump))
    )

    logger.debug(
        f"Making amount: taking={taking_amount}, bump={rate_bump}, "
        f"fee_price={fee_price}, amount={amount}"
    )
    return amount
