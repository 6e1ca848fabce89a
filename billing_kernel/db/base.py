"""
Module: billing_kernel.db.base
Responsibility: Declarative base for the document tables.  Fixes the
    primary key convention (uuid4 stored as text), the column type behind
    each Python annotation, and the audit columns every document row has.
Architecture position: Kernel > DB.  Imported by every module's orm.py.
    MUST NOT import from domain/ or outer layers.

Invariants enforced:
    - Amounts map to Numeric, never Float.
    - Every tracked row names the actor that created it.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID, uuid4

from sqlalchemy import BigInteger, Date, DateTime, Numeric, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from billing_kernel.db import types as coltypes


class UUIDString(TypeDecorator):
    """UUID held as its 36-character text form, so SQLite and PostgreSQL agree."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else UUID(value)


class Base(DeclarativeBase):
    """Declarative base: uuid4 ``id`` and the shared annotation-to-column map."""

    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(38, 9),
        datetime: DateTime(timezone=True),
        date: Date,
        UUID: UUIDString(),
        int: BigInteger,
        coltypes.Money: Numeric(38, 9),
        coltypes.Quantity: Numeric(20, 6),
        coltypes.Rate: Numeric(9, 4),
        coltypes.Currency: String(3),
        coltypes.ShortCode: String(50),
        coltypes.ExternalRef: String(64),
        coltypes.Label: String(255),
        coltypes.LongText: String(4000),
    }

    id: Mapped[UUID] = mapped_column(UUIDString(), primary_key=True, default=uuid4)


class TrackedBase(Base):
    """
    Abstract base for document rows.

    ``created_by_id`` is required; ``updated_by_id`` is set by the service
    that changes a row.  Timestamps are filled by the database.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now()
    )
    created_by_id: Mapped[str] = mapped_column(String(64))
    updated_by_id: Mapped[str | None] = mapped_column(String(64))
