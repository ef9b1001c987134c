"""Cached ticket model"""

from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from ..database import Base


class TicketCacheEntry(Base):
    """One fetched snapshot of a JIRA ticket (append-only)"""

    __tablename__ = "tickets"

    id = Column(Integer, primary_key=True, index=True)
    ticket_id = Column(String(50), nullable=False, index=True)  # "PROJ-123"
    summary = Column(Text)
    data_json = Column(Text, nullable=False)  # Whole normalized ticket
    fetched_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    def __repr__(self):
        return f"<TicketCacheEntry {self.ticket_id} @ {self.fetched_at}>"
