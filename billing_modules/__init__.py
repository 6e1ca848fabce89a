"""
Billing Modules - the document kinds of the inventory and invoicing app.

Each module follows the same layout:

    models.py     frozen DTOs and status enums
    workflows.py  status state machine
    orm.py        SQLAlchemy persistence models
    service.py    permission-checked operations over a Session

Totals are never computed here; every figure comes from
``billing_engines.totals``.
"""

from billing_modules._document_models import DocumentLine, DocumentLineInput, Payment

__all__ = [
    "DocumentLine",
    "DocumentLineInput",
    "Payment",
]
