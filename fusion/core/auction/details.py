"""
Auction Details - the Dutch auction schedule attached to an order.

Rate Bump Curve:
---------------
The rate bump is an extra share of the base taking amount, in units of
1 / 10,000,000 (so 1,000,000 is +10%). It starts at `initial_rate_bump`
when the auction opens and moves linearly between the decay points:

    rate
     ^
     |*                      initial_rate_bump at elapsed 0
     |  *
     |    *  (t1, r1)
     |      *------*  (t2, r2)
     |              *--------------------  flat tail after the last point
     +-----------------------------------> elapsed

Gas Compensation:
----------------
`gas_bump_estimate` is the bump (same units) that pays for execution at
the reference fee price `gas_price_estimate`. The reference is expressed
in units of 1e6 wei, so 1000 means 1 gwei.

Wire Format:
-----------
Details travel as packed bytes in the order's extension data:

    uint24 gasBumpEstimate
    uint32 gasPriceEstimate
    uint32 startTime
    uint24 duration
    uint24 initialRateBump
    (uint24 rateBump, uint16 delay) * N

Point delays on the wire are relative to the previous point; in memory
points carry elapsed time since start_time.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from fusion.crypto import bytes_to_hex
from fusion.utils.validation import (
    require,
    validate_points,
    validate_uint,
    MAX_UINT16,
)

# =============================================================================
# Constants
# =============================================================================

# Rate bumps are parts of BASE_POINTS
BASE_POINTS = 10_000_000

# gas_price_estimate is quoted in units of this many wei
GAS_PRICE_ESTIMATE_SCALE = 1_000_000

HEADER_SIZE = 3 + 4 + 4 + 3 + 3
POINT_SIZE = 3 + 2


# =============================================================================
# Auction Details
# =============================================================================


@dataclass(frozen=True)
class AuctionDetails:
    """
    Dutch auction schedule plus gas compensation parameters.

    Attributes:
        start_time: Auction start timestamp (seconds)
        initial_rate_bump: Rate bump at elapsed 0
        points: (elapsed_seconds, rate_bump) pairs, strictly ascending
        gas_bump_estimate: Bump that compensates gas at the reference price
        gas_price_estimate: Reference fee price (units of 1e6 wei)
        duration: Auction length in seconds; defaults to the last point
    """
    start_time: int
    initial_rate_bump: int
    points: Tuple[Tuple[int, int], ...] = ()
    gas_bump_estimate: int = 0
    gas_price_estimate: int = 0
    duration: Optional[int] = field(default=None)

    def __post_init__(self):
        points = tuple(tuple(p) for p in self.points)
        object.__setattr__(self, "points", points)

        require(validate_uint(self.start_time, "start_time", 32))
        require(validate_uint(self.initial_rate_bump, "initial_rate_bump", 24))
        require(validate_points(points))
        require(validate_uint(self.gas_bump_estimate, "gas_bump_estimate", 24))
        require(validate_uint(self.gas_price_estimate, "gas_price_estimate", 32))

        if self.duration is None:
            object.__setattr__(self, "duration", points[-1][0] if points else 0)
        require(validate_uint(self.duration, "duration", 24))

    @property
    def finish_time(self) -> int:
        """Timestamp at which the auction nominally ends."""
        return self.start_time + self.duration

    @property
    def anchors(self) -> Tuple[Tuple[int, int], ...]:
        """Curve anchors including the implicit (0, initial_rate_bump)."""
        return ((0, self.initial_rate_bump),) + self.points

    # =========================================================================
    # Serialization
    # =========================================================================

    def encode(self) -> bytes:
        """
        Pack into the wire format.

        Raises:
            ValueError: if a point delay does not fit in uint16
        """
        out = b""
        out += self.gas_bump_estimate.to_bytes(3, "big")
        out += self.gas_price_estimate.to_bytes(4, "big")
        out += self.start_time.to_bytes(4, "big")
        out += self.duration.to_bytes(3, "big")
        out += self.initial_rate_bump.to_bytes(3, "big")

        previous = 0
        for elapsed, rate_bump in self.points:
            delay = elapsed - previous
            if delay > MAX_UINT16:
                raise ValueError(f"Point delay {delay} does not fit in uint16")
            out += rate_bump.to_bytes(3, "big")
            out += delay.to_bytes(2, "big")
            previous = elapsed

        return out

    @classmethod
    def decode(cls, data: bytes) -> "AuctionDetails":
        """
        Parse the wire format.

        Raises:
            ValueError: on truncated data or an invalid schedule
        """
        if len(data) < HEADER_SIZE:
            raise ValueError(f"Auction details too short: {len(data)} < {HEADER_SIZE}")
        if (len(data) - HEADER_SIZE) % POINT_SIZE != 0:
            raise ValueError(f"Trailing bytes in auction points: {len(data) - HEADER_SIZE}")

        gas_bump_estimate = int.from_bytes(data[0:3], "big")
        gas_price_estimate = int.from_bytes(data[3:7], "big")
        start_time = int.from_bytes(data[7:11], "big")
        duration = int.from_bytes(data[11:14], "big")
        initial_rate_bump = int.from_bytes(data[14:17], "big")

        points = []
        elapsed = 0
        for offset in range(HEADER_SIZE, len(data), POINT_SIZE):
            rate_bump = int.from_bytes(data[offset:offset + 3], "big")
            elapsed += int.from_bytes(data[offset + 3:offset + 5], "big")
            points.append((elapsed, rate_bump))

        return cls(
            start_time=start_time,
            initial_rate_bump=initial_rate_bump,
            points=tuple(points),
            gas_bump_estimate=gas_bump_estimate,
            gas_price_estimate=gas_price_estimate,
            duration=duration,
        )

    def to_dict(self) -> dict:
        """Convert to JSON-friendly dictionary."""
        return {
            "start_time": self.start_time,
            "duration": self.duration,
            "initial_rate_bump": self.initial_rate_bump,
            "points": [list(p) for p in self.points],
            "gas_bump_estimate": self.gas_bump_estimate,
            "gas_price_estimate": self.gas_price_estimate,
            "encoded": bytes_to_hex(self.encode()),
        }


def build_auction_details(
    start_time: int,
    initial_rate_bump: int,
    points=(),
    gas_bump_estimate: int = 0,
    gas_price_estimate: int = 0,
    duration: Optional[int] = None,
    relative_delays: bool = False,
) -> AuctionDetails:
    """
    Convenience constructor.

    Args:
        points: (elapsed, rate_bump) pairs, or (rate_bump, delay) pairs
            with relative delays when `relative_delays` is set
        relative_delays: Interpret points the way the wire format does
    """
    if relative_delays:
        converted = []
        elapsed = 0
        for rate_bump, delay in points:
            elapsed += delay
            converted.append((elapsed, rate_bump))
        points = converted

    return AuctionDetails(
        start_time=start_time,
        initial_rate_bump=initial_rate_bump,
        points=tuple(points),
        gas_bump_estimate=gas_bump_estimate,
        gas_price_estimate=gas_price_estimate,
        duration=duration,
    )
