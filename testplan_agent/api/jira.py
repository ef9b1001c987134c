"""JIRA ticket API routes"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings as app_settings
from ..database import get_db
from ..schemas.ticket import RecentTicketsResponse, TicketFetchRequest, TicketResponse
from ..services.jira_client import JiraClient
from ..services.settings_store import SettingsStore, TrackerConfig
from ..services.ticket_cache import TicketCache

router = APIRouter(prefix="/api/jira", tags=["jira"])


async def get_jira_client(db: AsyncSession) -> JiraClient:
    """Get JIRA client configured from stored settings"""
    config = await TrackerConfig.load(SettingsStore(db))
    return JiraClient(config, TicketCache(db), timeout=app_settings.HTTP_TIMEOUT)


@router.post("/fetch", response_model=TicketResponse)
async def fetch_ticket(data: TicketFetchRequest, db: AsyncSession = Depends(get_db)):
    """Fetch a ticket from JIRA and cache it"""
    jira = await get_jira_client(db)
    try:
        ticket = await jira.fetch(data.ticket_id)
    finally:
        await jira.close()

    return TicketResponse(ticket=ticket)


@router.get("/recent", response_model=RecentTicketsResponse)
async def recent_tickets(
    limit: int = Query(5, ge=1, le=100), db: AsyncSession = Depends(get_db)
):
    """Recently fetched tickets, newest first"""
    tickets = await TicketCache(db).recently_fetched(limit)
    return RecentTicketsResponse(tickets=tickets)
