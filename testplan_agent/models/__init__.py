"""Database models"""

from .setting import Setting
from .template import Template
from .test_plan import TestPlan
from .ticket_cache_entry import TicketCacheEntry

__all__ = ["Setting", "TicketCacheEntry", "Template", "TestPlan"]
