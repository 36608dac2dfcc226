"""Gas-adjusted Dutch auction pricing"""
from fusion.core.auction.order import Order
from fusion.core.auction.details import (
    AuctionDetails,
    build_auction_details,
    BASE_POINTS,
    GAS_PRICE_ESTIMATE_SCALE,
)
from fusion.core.auction.gas_bump import (
    get_auction_bump,
    get_gas_bump,
    get_rate_bump,
    compute_taking_amount,
    compute_making_amount,
)
from fusion.core.auction.settlement import BlockContext, Quote, SettlementExtension

__all__ = [
    "Order",
    "AuctionDetails",
    "build_auction_details",
    "BASE_POINTS",
    "GAS_PRICE_ESTIMATE_SCALE",
    "get_auction_bump",
    "get_gas_bump",
    "get_rate_bump",
    "compute_taking_amount",
    "compute_making_amount",
    "BlockContext",
    "Quote",
    "SettlementExtension",
]
