from __future__ import annotations
from typing import List, Optional
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, String, Text, DateTime, ForeignKey, JSON, func
from labtrack.models.base import Base
from labtrack.constants.statuses import UsageStatus


class UsageLog(Base):
    __tablename__ = 'usage_logs'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    asset_id: Mapped[int] = mapped_column(ForeignKey('assets.id', ondelete='CASCADE'), nullable=False, index=True)
    user: Mapped[str] = mapped_column(String(80), nullable=False, default='')
    project_id: Mapped[Optional[str]] = mapped_column(String(64))
    test_project_id: Mapped[Optional[str]] = mapped_column(String(64))
    # Local ISO instants kept as text: legacy rows may hold formats we only parse fail-soft.
    start_time: Mapped[str] = mapped_column(String(40), nullable=False)
    end_time: Mapped[Optional[str]] = mapped_column(String(40))
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=UsageStatus.NOT_STARTED.value, index=True)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    selected_config_ids: Mapped[List[str]] = mapped_column(JSON, default=list)
    selected_waterfall: Mapped[Optional[str]] = mapped_column(String(64))
    created_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=func.now())
