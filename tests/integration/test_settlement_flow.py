"""
Integration Tests - KYC-gated resolvers filling auction orders.

Tests verify:
1. Only KYC holders are admitted as resolvers
2. Fill prices follow the auction as time and gas price move
3. Key recovery through a controller transfer keeps replay protection
"""

import pytest

from fusion.crypto import generate_keypair
from fusion.core.auction import (
    Order,
    BlockContext,
    SettlementExtension,
    build_auction_details,
)
from fusion.core.identity import (
    KycNFT,
    KycTokenError,
    BadSignature,
    TokenAlreadyExists,
    sign_token_id,
)

ETHER = 10**18
GWEI = 10**9
START = 1_700_000_000


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def controller():
    return generate_keypair()


@pytest.fixture
def nft(controller):
    return KycNFT("Resolver KYC", "RKYC", controller.address, chain_id=1)


@pytest.fixture
def packed_details():
    """Packed the way an order extension carries it."""
    return build_auction_details(
        start_time=START,
        initial_rate_bump=1_000_000,
        points=[(500_000, 60), (100_000, 120)],
        gas_bump_estimate=10_000,
        gas_price_estimate=1_000,
        duration=600,
        relative_delays=True,
    ).encode()


@pytest.fixture
def order():
    maker = generate_keypair()
    return Order(
        maker=maker.address,
        maker_asset=bytes([0xDA]) * 20,
        taker_asset=bytes([0xEE]) * 20,
        making_amount=10 * ETHER,
        taking_amount=ETHER,
    )


def fill(extension, nft, resolver, order, packed_details, block):
    """Resolver fill: KYC check then pricing."""
    if nft.balance_of(resolver) == 0:
        raise PermissionError("resolver is not KYC verified")
    return extension.get_taking_amount(order, order.making_amount, packed_details, block)


# =============================================================================
# Tests
# =============================================================================


class TestResolverFills:
    """KYC-gated fills across the auction."""

    def test_unverified_resolver_rejected(self, nft, order, packed_details):
        extension = SettlementExtension()
        stranger = generate_keypair().address
        with pytest.raises(PermissionError):
            fill(extension, nft, stranger, order, packed_details, BlockContext(START, 0))

    def test_price_decays_and_gas_discounts(self, controller, nft, order, packed_details):
        extension = SettlementExtension()
        resolver = generate_keypair()

        signature = sign_token_id(nft.address, nft.chain_id, nft.nonces(1), 1, controller.private_key)
        nft.mint_with_signature(resolver.address, 1, signature, caller=resolver.address)

        at_start = fill(extension, nft, resolver.address, order, packed_details, BlockContext(START, 0))
        at_minute = fill(extension, nft, resolver.address, order, packed_details, BlockContext(START + 60, 0))
        at_end = fill(extension, nft, resolver.address, order, packed_details, BlockContext(START + 180, 0))
        late = fill(extension, nft, resolver.address, order, packed_details, BlockContext(START + 10_000, 0))

        assert at_start == 1_100_000_000_000_000_000
        assert at_minute == 1_050_000_000_000_000_000
        assert at_end == 1_010_000_000_000_000_000
        assert late == at_end

        expensive = fill(extension, nft, resolver.address, order, packed_details, BlockContext(START + 60, 15 * GWEI))
        assert expensive == 1_035_000_000_000_000_000

        floored = fill(extension, nft, resolver.address, order, packed_details, BlockContext(START + 180, 50 * GWEI))
        assert floored == order.taking_amount
        assert extension.quotes_served == 6

    def test_quote_breakdown(self, order, packed_details):
        quote = SettlementExtension().quote(order, packed_details, BlockContext(START + 60, 15 * GWEI))
        assert quote.auction_bump == 500_000
        assert quote.gas_bump == 150_000
        assert quote.rate_bump == 350_000
        assert quote.taking_amount == 1_035_000_000_000_000_000

    def test_making_side(self, order, packed_details):
        extension = SettlementExtension()
        block = BlockContext(START + 60, 0)
        taking = extension.get_taking_amount(order, 4 * ETHER, packed_details, block)
        making = extension.get_making_amount(order, taking, packed_details, block)
        assert taking == 420_000_000_000_000_000
        assert making == 4 * ETHER


class TestKeyRecovery:
    """Controller moves a token off a lost key."""

    def test_recovery_keeps_replay_protection(self, controller, nft):
        lost, fresh = generate_keypair(), generate_keypair()
        nft.mint(lost.address, 5, caller=controller.address)

        # Signature captured before recovery
        captured = sign_token_id(nft.address, nft.chain_id, nft.nonces(5), 5, controller.private_key)
        nft.transfer_from(lost.address, fresh.address, 5, caller=fresh.address, signature=captured)
        assert nft.owner_of(5) == fresh.address

        nft.transfer_from(fresh.address, lost.address, 5, caller=controller.address)
        with pytest.raises(BadSignature):
            nft.transfer_from(lost.address, fresh.address, 5, caller=lost.address, signature=captured)

        assert nft.owner_of(5) == lost.address
        assert nft.nonces(5) == 1

    def test_lifecycle(self, controller, nft):
        a, b = generate_keypair(), generate_keypair()
        nft.mint(a.address, 9, caller=controller.address)

        with pytest.raises(TokenAlreadyExists):
            nft.mint(b.address, 9, caller=controller.address)

        nft.transfer_from(a.address, b.address, 9, caller=controller.address)
        burn_sig = sign_token_id(nft.address, nft.chain_id, nft.nonces(9), 9, controller.private_key)
        nft.burn_with_signature(9, burn_sig, caller=b.address)

        assert not nft.exists(9)
        with pytest.raises(KycTokenError):
            nft.mint(b.address, 9, caller=controller.address)
        assert nft.stats()["total_supply"] == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
