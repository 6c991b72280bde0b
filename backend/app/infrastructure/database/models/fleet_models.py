"""Minimal ORM models for the fleet tables that reference clients."""

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.database.base import Base


class InvoiceModel(Base):
    """ORM model — maps to the 'invoices' table (only the columns clients touch)."""

    __tablename__ = "invoices"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    client_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("clients.id"), nullable=True
    )
    status: Mapped[str] = mapped_column(String(30), nullable=False, default="draft")


class TripModel(Base):
    """ORM model — maps to the 'trips' table (only the columns clients touch)."""

    __tablename__ = "trips"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    client_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("clients.id"), nullable=True
    )
    invoice_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("invoices.id"), nullable=True
    )
    status: Mapped[str] = mapped_column(String(30), nullable=False, default="scheduled")
