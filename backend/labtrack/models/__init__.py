from labtrack.models.base import Base
from labtrack.models.asset import Asset
from labtrack.models.usage_log import UsageLog
from labtrack.models.repair_ticket import RepairTicket

__all__ = ['Base', 'Asset', 'UsageLog', 'RepairTicket']
