"""Tests for the command-line interface (mock mode, in-memory database)."""

import json
import logging

import pytest

from intentswap.cli import build_parser, main
from intentswap.ledger.database import close_db, get_engine

ZEC_T1 = "t1VpYecBW4UudbGcy4ufh61eWxQCoFaUrPs"
BTC_REFUND = "bc1qar0srrr7xfkvy5l643lydnw9re59gtzzwf5mdq"


class TestParser:
    """Tests for argument parsing."""

    def test_quote_arguments(self):
        args = build_parser().parse_args(
            ["quote", "inbound", "BTC", "0.5", "--recipient", ZEC_T1, "--refund", BTC_REFUND]
        )

        assert args.command == "quote"
        assert args.direction == "inbound"
        assert args.asset == "BTC"
        assert args.amount == "0.5"
        assert args.refund == BTC_REFUND

    def test_execute_watch_flag(self):
        args = build_parser().parse_args(
            ["execute", "outbound", "ETH.ETH", "1", "--recipient", "0xabc", "--watch"]
        )

        assert args.watch is True
        assert args.refund is None

    def test_recipient_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["quote", "inbound", "BTC", "0.5"])

    def test_bad_direction(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["quote", "sideways", "BTC", "0.5", "--recipient", ZEC_T1])


class TestMain:
    """Tests for main() output and exit codes."""

    def test_assets(self, capsys):
        assert main(["assets"]) == 0

        assets = json.loads(capsys.readouterr().out)
        assert "BTC.BTC" in [a["identifier"] for a in assets]

    def test_debug_keeps_stdout_json(self, capsys):
        """Test --debug leaves stdout parseable and sends SQL logging elsewhere."""
        assert main(["--debug", "assets"]) == 0

        captured = capsys.readouterr()
        assets = json.loads(captured.out)
        assert "BTC.BTC" in [a["identifier"] for a in assets]
        assert "SELECT" not in captured.out
        assert logging.getLogger("sqlalchemy.engine").level == logging.INFO

    @pytest.mark.asyncio
    async def test_engine_does_not_echo(self):
        try:
            assert get_engine().echo is False
        finally:
            await close_db()

    def test_quote(self, capsys):
        code = main(
            ["quote", "inbound", "BTC", "1.0", "--recipient", ZEC_T1, "--refund", BTC_REFUND]
        )

        assert code == 0
        quotes = json.loads(capsys.readouterr().out)
        assert quotes[0]["to_amount"] == "1680.00000000"
        assert quotes[0]["provider"] == "simulated"

    def test_execute(self, capsys):
        code = main(
            ["execute", "inbound", "BTC", "1.0", "--recipient", ZEC_T1, "--refund", BTC_REFUND]
        )

        assert code == 0
        swap = json.loads(capsys.readouterr().out)
        assert swap["status"] == "awaiting_deposit"
        assert swap["deposit_address"].startswith("t1")

    def test_missing_refund_fails(self, capsys):
        """Test inbound quotes without a refund address exit with an error."""
        code = main(["quote", "inbound", "BTC", "1.0", "--recipient", ZEC_T1])

        assert code == 1
        assert "Error:" in capsys.readouterr().err

    def test_unknown_swap(self, capsys):
        assert main(["status", "no-such-swap"]) == 1
        assert "no-such-swap" in capsys.readouterr().err
