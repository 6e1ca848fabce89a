"""Tests for engine initialization and the transactional scope."""

from decimal import Decimal

import pytest
from sqlalchemy import func, inspect, select

from billing_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    reset_engine,
    session_scope,
)
from billing_modules._document_models import DocumentLineInput
from billing_modules.invoices.orm import InvoiceModel
from billing_modules.invoices.service import InvoiceService


@pytest.fixture
def database():
    init_engine_from_url("sqlite://")
    create_tables()
    yield
    drop_tables()
    reset_engine()


def _invoice_count() -> int:
    db = get_session()
    try:
        return db.scalar(select(func.count()).select_from(InvoiceModel))
    finally:
        db.close()


def _create(db, auth, catalog, directory, config):
    InvoiceService(db, auth, catalog, directory, config).create(
        client_id="client-1",
        lines=[DocumentLineInput("p-widget", Decimal("1"), Decimal("1000"), tax_code="B")],
    )


class TestEngineLifecycle:

    def test_get_engine_before_init_raises(self):
        reset_engine()
        with pytest.raises(RuntimeError, match="not initialized"):
            get_engine()

    def test_get_session_before_init_raises(self):
        reset_engine()
        with pytest.raises(RuntimeError):
            get_session()

    def test_create_tables_registers_every_document_table(self, database):
        tables = set(inspect(get_engine()).get_table_names())
        assert {
            "invoices", "invoice_lines", "invoice_payments",
            "purchases", "purchase_lines", "purchase_payments",
            "quotations", "quotation_lines",
        } <= tables


class TestSessionScope:

    def test_commits_on_normal_exit(
        self, database, sales_auth, catalog, directory, billing_config,
    ):
        with session_scope() as db:
            _create(db, sales_auth, catalog, directory, billing_config)

        assert _invoice_count() == 1

    def test_rolls_back_and_reraises(
        self, database, sales_auth, catalog, directory, billing_config,
    ):
        with pytest.raises(RuntimeError, match="abort"):
            with session_scope() as db:
                _create(db, sales_auth, catalog, directory, billing_config)
                raise RuntimeError("abort")

        assert _invoice_count() == 0

    def test_rollback_is_logged(
        self, database, sales_auth, catalog, directory, billing_config, captured_logs,
    ):
        with pytest.raises(RuntimeError):
            with session_scope() as db:
                _create(db, sales_auth, catalog, directory, billing_config)
                raise RuntimeError("abort")

        messages = [r["message"] for r in captured_logs()]
        assert "transaction_rolled_back" in messages
