"""Tests for the command line entry point."""

import json

import pytest

from payment_initiation.cli import build_parser, main
from payment_initiation.engine.orchestrator import PaymentResult


class TestArguments:
    def test_payment_name_required(self):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args([])
        assert exc_info.value.code == 2

    def test_options(self):
        args = build_parser().parse_args(["domestic-private", "--state", "MyState", "--callback-server"])
        assert args.payment_name == "domestic-private"
        assert args.state == "MyState"
        assert args.callback_server is True
        assert args.payments_file is None


class TestFatalInputErrors:
    def test_unknown_payment_exits_before_network(self, tmp_path, capsys):
        catalog = tmp_path / "payments.json"
        catalog.write_text(json.dumps([]), encoding="utf-8")

        assert main(["cross-border", "--payments-file", str(catalog)]) == 1
        assert "Payment not found: cross-border" in capsys.readouterr().err

    def test_missing_catalog(self, tmp_path, capsys):
        assert main(["domestic-private", "--payments-file", str(tmp_path / "missing.json")]) == 1
        assert "Payment catalog not found" in capsys.readouterr().err


class TestOutcomes:
    @pytest.fixture
    def run_returning(self, monkeypatch, authorised_payment):
        def _patch(sca_success, transaction_status=None):
            async def fake_run(args, cfg):
                return PaymentResult(
                    payment=authorised_payment,
                    sca_success=sca_success,
                    transaction_status=transaction_status,
                )

            monkeypatch.setattr("payment_initiation.cli.run", fake_run)

        return _patch

    def test_sca_failed_exits_one(self, run_returning, capsys):
        run_returning(sca_success=False)

        assert main(["domestic-private"]) == 1
        assert "SCA failed" in capsys.readouterr().out

    def test_success_prints_transaction_status(self, run_returning, capsys):
        run_returning(sca_success=True, transaction_status="ACSC")

        assert main(["domestic-private"]) == 0
        out = capsys.readouterr().out
        assert "SCA completed successfully" in out
        assert "transactionStatus: ACSC" in out
