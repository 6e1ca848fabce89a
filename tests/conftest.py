"""
Pytest fixtures for the billing test suite.

Provides:
- An in-memory SQLite database with every document table, fresh per test
- Authenticated contexts for each role
- An in-memory catalog and party directory
- The packaged billing configuration
"""

import json
import logging
from decimal import Decimal
from io import StringIO

import pytest

from billing_config import DEFAULT_CONFIG_PATH, load_config, reset_active_config
from billing_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from billing_kernel.logging_config import LogContext, StructuredFormatter
from billing_modules.directory.models import (
    Client,
    InMemoryCatalog,
    InMemoryPartyDirectory,
    Product,
    Supplier,
)
from billing_services.permissions import Role
from billing_services.session import AuthContext, User


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture billing_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, invoice_service):
            invoice_service.create(...)
            logs = captured_logs()
            assert any(r["message"] == "invoice_created" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("billing_kernel")
    previous_level = root.level
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Configuration
# =============================================================================


@pytest.fixture(scope="session")
def billing_config():
    """The packaged default configuration (A 0 %, B 18 %, FRW, half-up)."""
    return load_config(DEFAULT_CONFIG_PATH)


@pytest.fixture
def _reset_config_cache():
    reset_active_config()
    yield
    reset_active_config()


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def session():
    """A session on a fresh in-memory database."""
    init_engine_from_url("sqlite://")
    create_tables()
    db = get_session()
    yield db
    db.close()
    drop_tables()
    reset_engine()


# =============================================================================
# Parties and catalog
# =============================================================================

CLIENT_ID = "client-1"
SUPPLIER_ID = "supplier-1"


@pytest.fixture
def catalog():
    return InMemoryCatalog([
        Product(
            id="p-widget",
            name="Widget",
            sku="WID-001",
            unit="pcs",
            unit_price=Decimal("1000"),
            unit_cost=Decimal("700"),
            current_stock=Decimal("50"),
        ),
        Product(
            id="p-gadget",
            name="Gadget",
            sku="GAD-001",
            unit="pcs",
            unit_price=Decimal("500"),
            unit_cost=Decimal("300"),
            current_stock=Decimal("5"),
        ),
        Product(
            id="p-cable",
            name="Cable",
            sku="",
            unit="m",
            unit_price=Decimal("250"),
            unit_cost=Decimal("100"),
            current_stock=Decimal("0"),
        ),
    ])


@pytest.fixture
def directory():
    return InMemoryPartyDirectory(
        clients=[
            Client(
                id=CLIENT_ID,
                name="Kigali Traders",
                tax_id="101234567",
                address="KN 5 Rd, Kigali",
                payment_terms="credit_30",
            ),
            Client(id="client-cash", name="Walk-in Customer"),
        ],
        suppliers=[
            Supplier(
                id=SUPPLIER_ID,
                name="East Africa Wholesale",
                tax_id="109876543",
                address="Industrial Zone, Kigali",
                payment_terms="credit_15",
            ),
        ],
    )


# =============================================================================
# Authentication
# =============================================================================


def _auth(role: Role) -> AuthContext:
    return AuthContext.for_user(User(
        id=f"user-{role.value}",
        name=role.value.replace("_", " ").title(),
        email=f"{role.value}@example.com",
        role=role,
    ))


@pytest.fixture
def admin_auth():
    return _auth(Role.ADMIN)


@pytest.fixture
def sales_auth():
    return _auth(Role.SALES)


@pytest.fixture
def viewer_auth():
    return _auth(Role.VIEWER)


@pytest.fixture
def stock_manager_auth():
    return _auth(Role.STOCK_MANAGER)
