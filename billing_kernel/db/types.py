"""
Module: billing_kernel.db.types
Responsibility: Annotated type aliases for financial-grade column types, so
    that every ORM model declares money, rates and codes identically.
Architecture position: Kernel > DB.  May be imported by modules' ORM files.

Invariants enforced:
    CRITICAL: No floats anywhere.  Monetary columns are Numeric(38, 9);
    tax rates are Numeric(9, 4).
"""

from decimal import Decimal
from typing import Annotated

from sqlalchemy import Numeric, String


# Monetary amount: 38 digits total, 9 decimal places
Money = Annotated[Decimal, Numeric(38, 9)]

# Line quantity: fractional units (kg, m) allowed
Quantity = Annotated[Decimal, Numeric(20, 6)]

# Tax rate as a percentage, e.g. 18.0000
Rate = Annotated[Decimal, Numeric(9, 4)]

# Currency code (e.g., "FRW", "USD")
Currency = Annotated[str, String(3)]

# Short identifier strings: document numbers, statuses, codes
ShortCode = Annotated[str, String(50)]

# Reference to a record owned by an external service (product, client, ...)
ExternalRef = Annotated[str, String(64)]

# Names and addresses
Label = Annotated[str, String(255)]

# Long text for terms and notes
LongText = Annotated[str, String(4000)]
