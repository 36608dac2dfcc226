"""
Tests for the command line interface.
"""

import re

import pytest
from click.testing import CliRunner

# Bind log handlers before the runner swaps stdout
import fusion.core.auction  # noqa: F401
import fusion.core.identity  # noqa: F401
from fusion.cli.main import cli
from fusion.crypto import keypair_from_private_key

REFERENCE_DETAILS = "0x002710000003e8000003e800003c0f424007a120003c"


@pytest.fixture
def runner(monkeypatch):
    for name in ("FUSION_CHAIN_ID", "FUSION_LOG_LEVEL", "FUSION_LOG_DIR", "FUSION_LOG_TO_FILE"):
        monkeypatch.delenv(name, raising=False)
    return CliRunner()


class TestDetailsCommands:
    """Tests for details encode / decode."""

    def test_encode(self, runner):
        result = runner.invoke(cli, [
            "details", "encode",
            "--start-time", "1000",
            "--initial-rate-bump", "1000000",
            "--point", "60:500000",
            "--gas-bump-estimate", "10000",
            "--gas-price-estimate", "1000",
        ])
        assert result.exit_code == 0, result.output
        assert REFERENCE_DETAILS in result.output

    def test_encode_bad_point(self, runner):
        result = runner.invoke(cli, [
            "details", "encode",
            "--start-time", "1000",
            "--initial-rate-bump", "1000000",
            "--point", "sixty",
        ])
        assert result.exit_code != 0

    def test_decode(self, runner):
        result = runner.invoke(cli, ["details", "decode", REFERENCE_DETAILS])
        assert result.exit_code == 0, result.output
        assert '"initial_rate_bump": 1000000' in result.output
        assert '"gas_price_estimate": 1000' in result.output

    def test_decode_truncated(self, runner):
        result = runner.invoke(cli, ["details", "decode", "0x0027"])
        assert result.exit_code != 0


class TestQuoteCommand:
    """Tests for quote."""

    def test_quote(self, runner):
        result = runner.invoke(cli, [
            "quote",
            "--details", REFERENCE_DETAILS,
            "--making-amount", str(10 * 10**18),
            "--taking-amount", str(10**18),
            "--time", "1060",
            "--gas-price", str(15 * 10**9),
        ])
        assert result.exit_code == 0, result.output
        assert "1035000000000000000" in result.output

    def test_quote_bad_hex(self, runner):
        result = runner.invoke(cli, [
            "quote",
            "--details", "0xzz",
            "--making-amount", "1",
            "--taking-amount", "1",
            "--time", "0",
        ])
        assert result.exit_code != 0


class TestKycCommands:
    """Tests for kyc sign / recover."""

    def test_sign_then_recover(self, runner):
        private_key = "0x" + "11" * 32
        contract = "0x" + "22" * 20
        signed = runner.invoke(cli, [
            "kyc", "sign",
            "--private-key", private_key,
            "--contract", contract,
            "--token-id", "7",
            "--nonce", "3",
        ])
        assert signed.exit_code == 0, signed.output
        signature = re.search(r"0x[0-9a-f]{130}", signed.output).group(0)

        recovered = runner.invoke(cli, [
            "kyc", "recover",
            "--signature", signature,
            "--contract", contract,
            "--token-id", "7",
            "--nonce", "3",
        ])
        assert recovered.exit_code == 0, recovered.output
        expected = keypair_from_private_key(bytes.fromhex("11" * 32)).address_hex
        assert expected in recovered.output

    def test_recover_invalid(self, runner):
        result = runner.invoke(cli, [
            "kyc", "recover",
            "--signature", "0x" + "00" * 65,
            "--contract", "0x" + "22" * 20,
            "--token-id", "7",
        ])
        assert result.exit_code != 0


class TestMisc:
    """Tests for keys and demo."""

    def test_keys_new(self, runner):
        result = runner.invoke(cli, ["keys", "new"])
        assert result.exit_code == 0
        assert re.search(r"Address:\s+0x[0-9a-f]{40}", result.output)

    def test_demo(self, runner):
        result = runner.invoke(cli, ["demo"])
        assert result.exit_code == 0, result.output
        assert "Replay rejected: BadSignature" in result.output
        assert "Demo complete!" in result.output


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
