"""
Directory Models (``billing_modules.directory.models``).

Responsibility
--------------
Frozen data contracts for the records the billing modules consume but do
not own: catalog products and the party directory (clients, suppliers).
The records themselves live with the external backend; the modules see
them through the ``Catalog`` and ``PartyDirectory`` protocols.

Invariants enforced
-------------------
* All models are ``frozen=True``.
* Prices, costs and stock are ``Decimal`` -- NEVER ``float``.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Protocol


@dataclass(frozen=True)
class Product:
    """A catalog product as offered on document lines."""
    id: str
    name: str
    sku: str = ""
    unit: str = "pcs"
    unit_price: Decimal = Decimal("0")
    unit_cost: Decimal = Decimal("0")
    current_stock: Decimal = Decimal("0")


@dataclass(frozen=True)
class Client:
    """A customer invoiced and quoted by the business."""
    id: str
    name: str
    tax_id: str | None = None
    address: str | None = None
    payment_terms: str = "cash"


@dataclass(frozen=True)
class Supplier:
    """A vendor purchases are placed with."""
    id: str
    name: str
    tax_id: str | None = None
    address: str | None = None
    payment_terms: str = "cash"


class Catalog(Protocol):
    def get_product(self, product_id: str) -> Product | None: ...


class PartyDirectory(Protocol):
    def get_client(self, client_id: str) -> Client | None: ...

    def get_supplier(self, supplier_id: str) -> Supplier | None: ...


class InMemoryCatalog:
    """Catalog backed by a dict; used by tools and tests."""

    def __init__(self, products: Iterable[Product] = ()):
        self._products = {p.id: p for p in products}

    def add(self, product: Product) -> None:
        self._products[product.id] = product

    def get_product(self, product_id: str) -> Product | None:
        return self._products.get(product_id)


class InMemoryPartyDirectory:
    """Party directory backed by dicts; used by tools and tests."""

    def __init__(
        self,
        clients: Iterable[Client] = (),
        suppliers: Iterable[Supplier] = (),
    ):
        self._clients = {c.id: c for c in clients}
        self._suppliers = {s.id: s for s in suppliers}

    def get_client(self, client_id: str) -> Client | None:
        return self._clients.get(client_id)

    def get_supplier(self, supplier_id: str) -> Supplier | None:
        return self._suppliers.get(supplier_id)
