"""
Tests for auction details: schedule validation and wire format.
"""

import pytest

from fusion.core.auction import AuctionDetails, build_auction_details


def reference_details():
    return AuctionDetails(
        start_time=1000,
        initial_rate_bump=1_000_000,
        points=((60, 500_000),),
        gas_bump_estimate=10_000,
        gas_price_estimate=1_000,
    )


class TestValidation:
    """Tests for schedule validation."""

    def test_duration_defaults_to_last_point(self):
        """Duration falls back to the last point's elapsed time."""
        d = reference_details()
        assert d.duration == 60
        assert d.finish_time == 1060

    def test_points_must_increase(self):
        """Elapsed times must be strictly ascending."""
        with pytest.raises(ValueError):
            AuctionDetails(start_time=0, initial_rate_bump=0, points=((60, 1), (60, 2)))
        with pytest.raises(ValueError):
            AuctionDetails(start_time=0, initial_rate_bump=0, points=((60, 1), (30, 2)))

    def test_first_point_after_anchor(self):
        """A point at elapsed 0 would clash with the initial bump."""
        with pytest.raises(ValueError):
            AuctionDetails(start_time=0, initial_rate_bump=5, points=((0, 1),))

    def test_field_ranges(self):
        """Packed field widths are enforced."""
        with pytest.raises(ValueError):
            AuctionDetails(start_time=0, initial_rate_bump=2**24)
        with pytest.raises(ValueError):
            AuctionDetails(start_time=2**32, initial_rate_bump=0)
        with pytest.raises(ValueError):
            AuctionDetails(start_time=0, initial_rate_bump=0, gas_price_estimate=2**32)
        with pytest.raises(ValueError):
            AuctionDetails(start_time=-1, initial_rate_bump=0)

    def test_points_normalized_to_tuples(self):
        """Lists are accepted and stored as tuples."""
        d = AuctionDetails(start_time=0, initial_rate_bump=0, points=[[10, 5], [20, 1]])
        assert d.points == ((10, 5), (20, 1))


class TestWireFormat:
    """Tests for encode / decode."""

    def test_encode_layout(self):
        """Fields are packed big-endian in the documented order."""
        encoded = reference_details().encode()
        assert encoded.hex() == (
            "002710"      # gasBumpEstimate
            "000003e8"    # gasPriceEstimate
            "000003e8"    # startTime
            "00003c"      # duration
            "0f4240"      # initialRateBump
            "07a120003c"  # (500000, +60s)
        )

    def test_decode_restores_details(self):
        """Decoding the packed form gives back the same schedule."""
        d = AuctionDetails(
            start_time=1_700_000_000,
            initial_rate_bump=2_000_000,
            points=((30, 1_000_000), (90, 250_000)),
            gas_bump_estimate=5_000,
            gas_price_estimate=3_000,
            duration=180,
        )
        assert AuctionDetails.decode(d.encode()) == d

    def test_delays_are_relative(self):
        """Second point delay is measured from the first point."""
        d = AuctionDetails(start_time=0, initial_rate_bump=0, points=((30, 2), (90, 1)))
        encoded = d.encode()
        assert int.from_bytes(encoded[20:22], "big") == 30
        assert int.from_bytes(encoded[25:27], "big") == 60

    def test_delay_overflow(self):
        """A gap wider than uint16 cannot be encoded."""
        d = AuctionDetails(start_time=0, initial_rate_bump=0, points=((70_000, 1),))
        with pytest.raises(ValueError):
            d.encode()

    def test_truncated_input(self):
        """Short or ragged input is rejected."""
        encoded = reference_details().encode()
        with pytest.raises(ValueError):
            AuctionDetails.decode(encoded[:10])
        with pytest.raises(ValueError):
            AuctionDetails.decode(encoded[:-2])

    def test_to_dict(self):
        """Dictionary form includes the encoded hex."""
        d = reference_details()
        data = d.to_dict()
        assert data["points"] == [[60, 500_000]]
        assert data["encoded"] == "0x" + d.encode().hex()


class TestBuilder:
    """Tests for build_auction_details."""

    def test_relative_delays(self):
        """(rate, delay) pairs accumulate into elapsed times."""
        d = build_auction_details(
            start_time=0,
            initial_rate_bump=1_000_000,
            points=[(500_000, 60), (100_000, 40)],
            relative_delays=True,
        )
        assert d.points == ((60, 500_000), (100, 100_000))

    def test_absolute_points(self):
        """Default interpretation is (elapsed, rate)."""
        d = build_auction_details(start_time=0, initial_rate_bump=0, points=[(60, 5)])
        assert d.points == ((60, 5),)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
