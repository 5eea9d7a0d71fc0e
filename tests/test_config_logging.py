"""
Tests for configuration and structured logging
"""

import io
import json
import logging
import pytest

from bank_ledger.config import LedgerConfig, get_config, reload_config
from bank_ledger.logging_config import JSONFormatter, setup_logging, get_logger, log_action
from bank_ledger.currency import Currency
from bank_ledger.errors import InvalidArgumentError
from bank_ledger.identity import CallerIdentity
from bank_ledger.storage import InMemoryStorage
from bank_ledger.system import LedgerSystem


class TestLedgerConfig:
    """Test environment-based configuration"""

    def test_defaults(self):
        """Test default settings"""
        config = LedgerConfig()
        assert config.jwt_algorithm == "HS256"
        assert config.required_role == "customer"
        assert config.jwt_audience is None
        assert config.default_currency == "EUR"

    def test_environment_overrides(self, monkeypatch):
        """Test BANK_LEDGER_* variables override defaults"""
        monkeypatch.setenv("BANK_LEDGER_DATABASE_URL", "memory://")
        monkeypatch.setenv("BANK_LEDGER_API_PORT", "9999")
        monkeypatch.setenv("BANK_LEDGER_SEED_DEMO_DATA", "true")

        config = reload_config()
        try:
            assert config.database_url == "memory://"
            assert config.api_port == 9999
            assert config.seed_demo_data is True
            assert get_config() is config
        finally:
            monkeypatch.undo()
            reload_config()


class TestStructuredLogging:
    """Test JSON log output"""

    def setup_method(self):
        self.stream = io.StringIO()
        self.logger = setup_logging(level="DEBUG", logger_name="bank_ledger.test_logging")
        self.logger.handlers[0].stream = self.stream

    def test_log_action_fields(self):
        """Test structured fields end up in the JSON line"""
        log_action(
            self.logger, "info", "deposit posted",
            performed_by="jane", action="deposit", resource="account:ACC1",
            correlation_id="req-1", extra={"amount": "EUR 10.00"}
        )

        entry = json.loads(self.stream.getvalue().strip())
        assert entry["message"] == "deposit posted"
        assert entry["level"] == "INFO"
        assert entry["performed_by"] == "jane"
        assert entry["action"] == "deposit"
        assert entry["resource"] == "account:ACC1"
        assert entry["correlation_id"] == "req-1"
        assert entry["extra"] == {"amount": "EUR 10.00"}

    def test_none_fields_omitted(self):
        """Test absent fields are dropped from the JSON line"""
        get_logger("bank_ledger.test_logging").warning("plain message")

        entry = json.loads(self.stream.getvalue().strip())
        assert entry["message"] == "plain message"
        assert "performed_by" not in entry
        assert "extra" not in entry

    def test_level_filtering(self):
        """Test records below the logger level are skipped"""
        self.logger.setLevel(logging.WARNING)
        log_action(self.logger, "info", "ignored")
        assert self.stream.getvalue() == ""

    def test_text_format(self):
        """Test the plain text formatter option"""
        logger = setup_logging(level="INFO", logger_name="bank_ledger.test_text", fmt="text")
        assert not isinstance(logger.handlers[0].formatter, JSONFormatter)


class TestLedgerAuditLogging:
    """Test the ledger logs postings and rejections"""

    def setup_method(self):
        self.stream = io.StringIO()
        self.logger = setup_logging(level="INFO", logger_name="bank_ledger.ledger")
        self.logger.handlers[0].stream = self.stream

        self.system = LedgerSystem(storage=InMemoryStorage())
        customer = self.system.customer_manager.create_customer("kc-jane", "Jane Smith", "jane@example.com")
        self.account = self.system.account_manager.open_account(customer.id, Currency.EUR, opening_balance="10")
        self.caller = CallerIdentity(subject="kc-jane", username="jane")

    def teardown_method(self):
        self.logger.handlers.clear()
        self.logger.propagate = True
        self.logger.setLevel(logging.NOTSET)

    def _entries(self):
        return [json.loads(line) for line in self.stream.getvalue().splitlines()]

    def test_posting_logged(self):
        """Test committed postings are logged at INFO"""
        transaction = self.system.ledger.deposit(self.caller, self.account.id, 5)

        entry = self._entries()[-1]
        assert entry["level"] == "INFO"
        assert entry["action"] == "deposit"
        assert entry["performed_by"] == "jane"
        assert entry["extra"]["transaction_id"] == transaction.id

    def test_rejection_logged(self):
        """Test rejected operations are logged at WARNING with the error kind"""
        with pytest.raises(InvalidArgumentError):
            self.system.ledger.withdraw(self.caller, self.account.id, 50)

        entry = self._entries()[-1]
        assert entry["level"] == "WARNING"
        assert entry["action"] == "withdraw"
        assert entry["extra"]["error"] == "invalid_argument"
