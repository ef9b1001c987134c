"""Ticket schemas"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class Attachment(CamelModel):
    """Ticket attachment reference"""

    filename: str
    url: Optional[str] = None


class Ticket(CamelModel):
    """Normalized JIRA ticket"""

    ticket_id: str
    summary: str = ""
    priority: str = "None"
    status: str = "Unknown"
    assignee: str = "Unassigned"
    labels: List[str] = Field(default_factory=list)
    description: str = ""
    acceptance_criteria: str = ""
    attachments: List[Attachment] = Field(default_factory=list)


class TicketFetchRequest(CamelModel):
    """Fetch a ticket by key"""

    ticket_id: Optional[str] = None


class TicketResponse(CamelModel):
    success: bool = True
    ticket: Ticket


class RecentTicket(CamelModel):
    """Entry in the recently-fetched list"""

    ticket_id: str
    summary: Optional[str] = None
    fetched_at: Optional[datetime] = None


class RecentTicketsResponse(CamelModel):
    success: bool = True
    tickets: List[RecentTicket]
