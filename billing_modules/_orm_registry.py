"""
Module ORM Registry (``billing_modules._orm_registry``).

Responsibility
--------------
Ensure every document ORM model is imported so that ``Base.metadata``
holds their table definitions before ``create_tables()`` runs.

Architecture position
---------------------
**Modules layer** -- utility.  Called lazily by
``billing_kernel.db.engine.create_tables`` so the kernel never imports
module code at import time.
"""


def import_all_orm_models() -> None:
    """Import every ``billing_modules.*.orm`` module.  Idempotent."""
    # fmt: off
    import billing_modules.invoices.orm  # noqa: F401
    import billing_modules.purchases.orm  # noqa: F401
    import billing_modules.quotations.orm  # noqa: F401
    # fmt: on
