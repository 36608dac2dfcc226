"""
fusion CLI - Command Line Interface

Main entry point for pricing and KYC token commands.
"""

import json
import logging
from typing import Optional

import click

from fusion.core.config import load_config
from fusion.utils.logger import setup_logging
from fusion.utils.validation import validate_hex_string


def _hex_bytes(expected: Optional[int] = None):
    """Click callback turning a 0x hex option into bytes."""
    def convert(ctx, param, value):
        if value is None:
            return None
        valid, err = validate_hex_string(value, param.name, expected)
        if not valid:
            raise click.BadParameter(err)
        from fusion.crypto import hex_to_bytes
        return hex_to_bytes(value)
    return convert


def _parse_point(ctx, param, values):
    points = []
    for value in values:
        try:
            elapsed, rate_bump = value.split(":")
            points.append((int(elapsed), int(rate_bump)))
        except ValueError:
            raise click.BadParameter(f"expected ELAPSED:RATE_BUMP, got {value!r}")
    return tuple(points)


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--env-file", default=None, help="Path to .env file")
@click.version_option(version="0.1.0")
@click.pass_context
def cli(ctx, debug, env_file):
    """fusion - auction pricing and KYC identity tooling"""
    config = load_config(env_file)
    level = logging.DEBUG if debug else config.log_level
    setup_logging(level=level, log_dir=str(config.log_dir), log_to_file=config.log_to_file)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


# =============================================================================
# Key Commands
# =============================================================================


@cli.group()
def keys():
    """Key management commands"""
    pass


@keys.command("new")
def keys_new():
    """Generate a new secp256k1 keypair"""
    from fusion.crypto import generate_keypair

    kp = generate_keypair()
    click.echo(f"Address:     {kp.address_hex}")
    click.echo(f"Private key: 0x{kp.private_key_hex}")


# =============================================================================
# Auction Details Commands
# =============================================================================


@cli.group()
def details():
    """Auction details encoding"""
    pass


@details.command("encode")
@click.option("--start-time", required=True, type=int, help="Auction start timestamp")
@click.option("--initial-rate-bump", required=True, type=int, help="Rate bump at start (1e7 = 100%)")
@click.option("--point", "points", multiple=True, callback=_parse_point, help="ELAPSED:RATE_BUMP decay point")
@click.option("--duration", default=None, type=int, help="Auction duration in seconds")
@click.option("--gas-bump-estimate", default=0, type=int, help="Gas compensation bump")
@click.option("--gas-price-estimate", default=0, type=int, help="Reference gas price (1000 = 1 gwei)")
def details_encode(start_time, initial_rate_bump, points, duration, gas_bump_estimate, gas_price_estimate):
    """Pack auction details into hex"""
    from fusion.core.auction import AuctionDetails
    from fusion.crypto import bytes_to_hex

    try:
        auction_details = AuctionDetails(
            start_time=start_time,
            initial_rate_bump=initial_rate_bump,
            points=points,
            gas_bump_estimate=gas_bump_estimate,
            gas_price_estimate=gas_price_estimate,
            duration=duration,
        )
        click.echo(bytes_to_hex(auction_details.encode()))
    except ValueError as e:
        raise click.ClickException(str(e))


@details.command("decode")
@click.argument("data", callback=_hex_bytes())
def details_decode(data):
    """Unpack hex auction details into JSON"""
    from fusion.core.auction import AuctionDetails

    try:
        auction_details = AuctionDetails.decode(data)
    except ValueError as e:
        raise click.ClickException(str(e))
    click.echo(json.dumps(auction_details.to_dict(), indent=2))


# =============================================================================
# Pricing Commands
# =============================================================================


@cli.command("quote")
@click.option("--details", "details_data", required=True, callback=_hex_bytes(), help="Packed auction details (hex)")
@click.option("--making-amount", required=True, type=int, help="Order making amount")
@click.option("--taking-amount", required=True, type=int, help="Order base taking amount")
@click.option("--time", "timestamp", required=True, type=int, help="Current timestamp")
@click.option("--gas-price", default=0, type=int, help="Current gas price in wei")
@click.option("--json", "as_json", is_flag=True, help="Print JSON")
def quote(details_data, making_amount, taking_amount, timestamp, gas_price, as_json):
    """Price a full fill of an order"""
    from fusion.core.auction import Order, BlockContext, SettlementExtension
    from fusion.crypto import ZERO_ADDRESS

    try:
        order = Order(
            maker=ZERO_ADDRESS,
            maker_asset=ZERO_ADDRESS,
            taker_asset=ZERO_ADDRESS,
            making_amount=making_amount,
            taking_amount=taking_amount,
        )
        result = SettlementExtension().quote(
            order, details_data, BlockContext(timestamp=timestamp, gas_price=gas_price)
        )
    except ValueError as e:
        raise click.ClickException(str(e))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    click.echo(f"Auction bump: {result.auction_bump}")
    click.echo(f"Gas bump:     {result.gas_bump}")
    click.echo(f"Rate bump:    {result.rate_bump}")
    click.echo(f"Taking:       {result.taking_amount}")


# =============================================================================
# KYC Token Commands
# =============================================================================


@cli.group()
def kyc():
    """KYC token signature commands"""
    pass


@kyc.command("sign")
@click.option("--private-key", required=True, callback=_hex_bytes(32), help="Signer private key (hex)")
@click.option("--contract", required=True, callback=_hex_bytes(20), help="Registry address")
@click.option("--token-id", required=True, type=int, help="Token id")
@click.option("--nonce", default=0, type=int, help="Current nonce of the token id")
@click.option("--chain-id", default=None, type=int, help="Chain id (defaults to config)")
@click.pass_context
def kyc_sign(ctx, private_key, contract, token_id, nonce, chain_id):
    """Sign a delegated mint / transfer / burn"""
    from fusion.core.identity import sign_token_id
    from fusion.crypto import bytes_to_hex

    chain_id = chain_id or ctx.obj["config"].chain_id
    signature = sign_token_id(contract, chain_id, nonce, token_id, private_key)
    click.echo(bytes_to_hex(signature))


@kyc.command("recover")
@click.option("--signature", required=True, callback=_hex_bytes(), help="Signature (hex)")
@click.option("--contract", required=True, callback=_hex_bytes(20), help="Registry address")
@click.option("--token-id", required=True, type=int, help="Token id")
@click.option("--nonce", default=0, type=int, help="Nonce the signature covers")
@click.option("--chain-id", default=None, type=int, help="Chain id (defaults to config)")
@click.pass_context
def kyc_recover(ctx, signature, contract, token_id, nonce, chain_id):
    """Recover the signer of a delegated-operation signature"""
    from fusion.core.identity import pack_token_message
    from fusion.crypto import bytes_to_hex, recover_message_signer

    chain_id = chain_id or ctx.obj["config"].chain_id
    signer = recover_message_signer(pack_token_message(contract, chain_id, nonce, token_id), signature)
    if signer is None:
        raise click.ClickException("Invalid signature")
    click.echo(bytes_to_hex(signer))


# =============================================================================
# Demo Command
# =============================================================================


@cli.command("demo")
@click.pass_context
def demo(ctx):
    """Run a walkthrough of pricing and KYC flows"""
    from fusion.core.auction import Order, BlockContext, SettlementExtension, build_auction_details
    from fusion.core.identity import KycNFT, KycTokenError, sign_token_id
    from fusion.crypto import generate_keypair, ZERO_ADDRESS

    ether = 10**18
    click.echo("=" * 60)
    click.echo("  FUSION - DEMO")
    click.echo("=" * 60)
    click.echo()

    click.echo("Pricing a fill one minute into the auction...")
    auction_details = build_auction_details(
        start_time=1_700_000_000,
        initial_rate_bump=1_000_000,
        points=[(60, 500_000)],
        gas_bump_estimate=10_000,
        gas_price_estimate=1_000,
    )
    order = Order(ZERO_ADDRESS, ZERO_ADDRESS, ZERO_ADDRESS, 10 * ether, ether)
    extension = SettlementExtension()
    for gwei in (0, 15, 100):
        block = BlockContext(timestamp=1_700_000_060, gas_price=gwei * 10**9)
        result = extension.quote(order, auction_details, block)
        click.echo(f"  {gwei:>3} gwei -> taking {result.taking_amount / ether} (bump {result.rate_bump})")
    click.echo()

    click.echo("KYC token flow...")
    controller = generate_keypair()
    alice = generate_keypair()
    bob = generate_keypair()
    nft = KycNFT("KycNFT", "KYC", controller.address, chain_id=ctx.obj["config"].chain_id)

    nft.mint(alice.address, 1, caller=controller.address)
    click.echo("  Controller minted token 1 to alice")

    signature = sign_token_id(nft.address, nft.chain_id, nft.nonces(2), 2, controller.private_key)
    nft.mint_with_signature(bob.address, 2, signature, caller=bob.address)
    click.echo("  Bob minted token 2 with a controller signature")

    try:
        nft.mint_with_signature(bob.address, 2, signature, caller=bob.address)
    except KycTokenError as e:
        click.echo(f"  Replay rejected: {type(e).__name__}")

    click.echo(f"  Stats: {nft.stats()}")
    click.echo()
    click.echo("Demo complete!")


if __name__ == "__main__":
    cli()
