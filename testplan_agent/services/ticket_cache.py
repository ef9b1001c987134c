"""Append-only cache of fetched tickets"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.ticket_cache_entry import TicketCacheEntry
from ..schemas.ticket import RecentTicket, Ticket


class TicketCache:
    """Every fetch is stored as a new row; reads pick the latest snapshot"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def record_fetch(self, ticket: Ticket) -> TicketCacheEntry:
        """Append a snapshot of the ticket"""
        entry = TicketCacheEntry(
            ticket_id=ticket.ticket_id,
            summary=ticket.summary,
            data_json=ticket.model_dump_json(by_alias=True),
        )
        self.db.add(entry)
        await self.db.commit()
        await self.db.refresh(entry)
        return entry

    async def most_recent(self, ticket_id: str) -> Optional[Ticket]:
        """Latest cached snapshot of the ticket, if it was ever fetched"""
        result = await self.db.execute(
            select(TicketCacheEntry)
            .where(TicketCacheEntry.ticket_id == ticket_id)
            .order_by(TicketCacheEntry.fetched_at.desc(), TicketCacheEntry.id.desc())
            .limit(1)
        )
        entry = result.scalar_one_or_none()
        if entry is None:
            return None
        return Ticket.model_validate_json(entry.data_json)

    async def recently_fetched(self, limit: int = 5) -> List[RecentTicket]:
        """Fetch activity across all tickets, newest first"""
        result = await self.db.execute(
            select(TicketCacheEntry)
            .order_by(TicketCacheEntry.fetched_at.desc(), TicketCacheEntry.id.desc())
            .limit(limit)
        )
        return [RecentTicket.model_validate(entry) for entry in result.scalars()]
