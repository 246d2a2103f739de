"""
CLI Tests.
"""

import json

import pytest

from price_input.cli import async_main, build_config, create_parser, main, validate_args


@pytest.fixture
def clean_env(monkeypatch):
    """Remove PRICE_INPUT_* settings from the environment."""
    for name in ("BASE_ASSET", "QUOTE_ASSET", "TIMEOUT", "BASE_URL"):
        monkeypatch.delenv(f"PRICE_INPUT_{name}", raising=False)


class TestArguments:
    """Tests for argument parsing and config building."""

    def test_sample_config(self, capsys):
        """Test printing the sample configuration."""
        assert main(["--sample-config"]) == 0

        out = capsys.readouterr().out
        assert "base_asset" in out
        assert "quote_asset" in out

    def test_invalid_interval(self, capsys):
        """Test that a non-positive interval is rejected."""
        assert main(["--interval", "0"]) == 1
        assert "--interval" in capsys.readouterr().err

    def test_validate_args(self):
        """Test argument validation errors."""
        args = create_parser().parse_args(["--cycles", "-1"])

        assert validate_args(args) == ["--cycles cannot be negative"]

    def test_flags_override_yaml(self, tmp_path, clean_env):
        """Test that flags win over the config file."""
        path = tmp_path / "binance.yaml"
        path.write_text("binance:\n  base_asset: BTC\n  quote_asset: USDT\n  timeout: 3s\n")
        args = create_parser().parse_args([
            "--config", str(path),
            "--quote-asset", "EUR",
            "--timeout", "0",
        ])

        config = build_config(args)

        assert config.symbol == "BTCEUR"
        assert config.timeout == 0.0

    def test_missing_assets_exit_code(self, clean_env):
        """Test that missing assets fail before any network call."""
        assert main(["--once", "--log-level", "ERROR"]) == 1

    def test_bad_timeout_exit_code(self, clean_env):
        """Test that an unparsable timeout flag is a configuration failure."""
        assert main(["--base-asset", "BTC", "--quote-asset", "USDT", "--timeout", "soon", "--once"]) == 1


class TestRun:
    """Tests for the once and interval runners against the stub."""

    @pytest.mark.asyncio
    async def test_once(self, binance_stub, clean_env, capsys):
        """Test a single cycle printing one metric."""
        args = create_parser().parse_args([
            "--base-asset", "BTC",
            "--quote-asset", "USDT",
            "--base-url", binance_stub.base_url,
            "--once",
        ])

        assert await async_main(args) == 0

        metric = json.loads(capsys.readouterr().out.strip())
        assert metric["name"] == "binance"
        assert metric["fields"] == {"price": 50000.12}
        assert metric["tags"] == {"base": "BTC", "quote": "USDT"}

    @pytest.mark.asyncio
    async def test_once_with_errors(self, binance_stub, clean_env, capsys):
        """Test that a cycle with errors exits 1 and still prints the metric."""
        binance_stub.price_response = (200, {"symbol": "BTCUSDT", "price": "N/A"})
        args = create_parser().parse_args([
            "--base-asset", "BTC",
            "--quote-asset", "USDT",
            "--base-url", binance_stub.base_url,
            "--once",
        ])

        assert await async_main(args) == 1

        captured = capsys.readouterr()
        assert json.loads(captured.out.strip())["fields"] == {}
        assert "cannot parse price" in captured.err

    @pytest.mark.asyncio
    async def test_unknown_symbol(self, binance_stub, clean_env):
        """Test that a rejected symbol exits 1 without gathering."""
        binance_stub.exchange_info_response = (400, {"code": -1121, "msg": "Invalid symbol."})
        args = create_parser().parse_args([
            "--base-asset", "BTC",
            "--quote-asset", "NOPE",
            "--base-url", binance_stub.base_url,
            "--once",
        ])

        assert await async_main(args) == 1
        assert binance_stub.requests_to("/ticker/price") == []

    @pytest.mark.asyncio
    async def test_interval_cycles(self, binance_stub, clean_env):
        """Test that the interval runner stops after the requested cycles."""
        args = create_parser().parse_args([
            "--base-asset", "BTC",
            "--quote-asset", "USDT",
            "--base-url", binance_stub.base_url,
            "--interval", "0.01",
            "--cycles", "3",
        ])

        assert await async_main(args) == 0
        assert len(binance_stub.requests_to("/ticker/price")) == 3
