from __future__ import annotations
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, String, Text, Float, DateTime, ForeignKey, JSON, func
from labtrack.models.base import Base
from labtrack.constants.statuses import RepairStatus


class RepairTicket(Base):
    __tablename__ = 'repair_tickets'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    asset_id: Mapped[int] = mapped_column(ForeignKey('assets.id', ondelete='CASCADE'), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=RepairStatus.QUOTE_PENDING.value, index=True)
    problem_desc: Mapped[str] = mapped_column(Text, nullable=False, default='')
    vendor_name: Mapped[Optional[str]] = mapped_column(String(120))
    quote_amount: Mapped[Optional[float]] = mapped_column(Float)
    quote_at: Mapped[Optional[str]] = mapped_column(String(40))
    expected_return_at: Mapped[Optional[str]] = mapped_column(String(40))
    completed_at: Mapped[Optional[str]] = mapped_column(String(40))
    created_at: Mapped[Optional[str]] = mapped_column(String(40))
    updated_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    # Append-only audit trail of {at, from, to, note} entries.
    timeline: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, default=list)

# Status flow: quote-pending -> repair-pending -> completed (quote-pending -> completed also allowed).
# completed is terminal; deleting a ticket re-derives the asset status.
