"""Catalog and party directory contracts consumed by the document modules."""

from billing_modules.directory.models import (
    Catalog,
    Client,
    InMemoryCatalog,
    InMemoryPartyDirectory,
    PartyDirectory,
    Product,
    Supplier,
)

__all__ = [
    "Catalog",
    "Client",
    "InMemoryCatalog",
    "InMemoryPartyDirectory",
    "PartyDirectory",
    "Product",
    "Supplier",
]
