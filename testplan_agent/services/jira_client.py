"""JIRA REST API service"""

import re
from typing import Any, Dict, Optional

import httpx

from ..schemas.settings import ConnectionStatus
from ..schemas.ticket import Attachment, Ticket
from ..utils.validators import validate_ticket_id
from .errors import (
    PAYLOAD_ERRORS,
    InvalidInputError,
    NotConfiguredError,
    NotFoundError,
    UpstreamAPIError,
    UpstreamAuthError,
)
from .log_service import log_service
from .settings_store import TrackerConfig
from .ticket_cache import TicketCache

# Custom fields commonly used for acceptance criteria, checked in order
ACCEPTANCE_CRITERIA_FIELDS = (
    "customfield_10028",
    "customfield_10029",
    "customfield_10100",
)

# "Acceptance Criteria:" or "AC:" followed by text up to a blank line, a
# capitalized heading line ending in a colon, a --- rule, or end of text
AC_PATTERN = re.compile(
    r"(?:acceptance criteria|\bAC\b)[:\s]*\n?(.*?)"
    r"(?:\n[ \t]*\n|\n(?-i:[A-Z])[^\n]*:[ \t]*(?=\n|\Z)|\n---|\Z)",
    re.IGNORECASE | re.DOTALL,
)


def extract_description(field: Any) -> str:
    """Flatten an Atlassian Document Format tree (or plain string) to text"""
    if not field:
        return ""
    if isinstance(field, str):
        return field.replace("\r\n", "\n").replace("\r", "\n")

    def extract_text(node: Any) -> str:
        if not isinstance(node, dict):
            return ""
        if node.get("type") == "text":
            return node.get("text") or ""
        if node.get("content"):
            return "\n".join(extract_text(child) for child in node["content"])
        return ""

    return extract_text(field)


def extract_acceptance_criteria(fields: Dict[str, Any]) -> str:
    """Custom fields first, then a labelled block inside the description"""
    for field_name in ACCEPTANCE_CRITERIA_FIELDS:
        value = fields.get(field_name)
        if not value:
            continue
        if isinstance(value, str):
            return value
        if isinstance(value, dict) and value.get("content"):
            return extract_description(value)

    description = extract_description(fields.get("description"))
    match = AC_PATTERN.search(description)
    if match:
        return match.group(1).strip()

    return ""


def parse_issue(data: Dict[str, Any]) -> Ticket:
    """Map a JIRA issue payload onto the ticket shape"""
    fields = data.get("fields") or {}

    return Ticket(
        ticket_id=data.get("key", ""),
        summary=fields.get("summary") or "",
        description=extract_description(fields.get("description")),
        priority=(fields.get("priority") or {}).get("name") or "None",
        status=(fields.get("status") or {}).get("name") or "Unknown",
        assignee=(fields.get("assignee") or {}).get("displayName") or "Unassigned",
        labels=fields.get("labels") or [],
        acceptance_criteria=extract_acceptance_criteria(fields),
        attachments=[
            Attachment(filename=a.get("filename", ""), url=a.get("content"))
            for a in fields.get("attachment") or []
        ],
    )


class JiraClient:
    """Reads issues from JIRA Cloud and writes them through to the cache"""

    def __init__(
        self,
        config: Optional[TrackerConfig],
        cache: TicketCache,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        self.config = config
        self.cache = cache
        self.client = client or httpx.AsyncClient(timeout=timeout)

    def _auth(self) -> httpx.BasicAuth:
        return httpx.BasicAuth(self.config.username, self.config.api_token)

    async def fetch(self, ticket_id: str) -> Ticket:
        """Fetch one issue, normalize it and cache it"""
        if not validate_ticket_id(ticket_id):
            raise InvalidInputError(
                "Invalid ticket ID format. Expected format: PROJECT-123"
            )
        ticket_id = ticket_id.strip()

        if self.config is None:
            raise NotConfiguredError(
                "JIRA is not configured. Please set up JIRA credentials in Settings."
            )

        url = f"{self.config.base_url}/rest/api/3/issue/{ticket_id}"
        try:
            response = await self.client.get(
                url, auth=self._auth(), headers={"Accept": "application/json"}
            )
        except httpx.HTTPError as e:
            log_service.error(f"JIRA request for {ticket_id} failed: {e}")
            raise UpstreamAPIError(
                f"Cannot reach JIRA at {self.config.base_url}: {e}"
            ) from e

        if response.status_code == 401:
            raise UpstreamAuthError(
                "JIRA authentication failed. Please check your credentials."
            )
        if response.status_code == 404:
            raise NotFoundError(f"Ticket {ticket_id} not found.")
        if response.is_error:
            log_service.error(f"JIRA API error for {ticket_id}: {response.status_code}")
            raise UpstreamAPIError(
                f"JIRA API error ({response.status_code}): {response.text}",
                upstream_status=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamAPIError(f"JIRA returned invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise UpstreamAPIError("JIRA returned an unexpected issue payload")

        try:
            ticket = parse_issue(data)
        except (ValueError, *PAYLOAD_ERRORS) as e:
            raise UpstreamAPIError(f"JIRA returned an invalid issue payload: {e}") from e

        await self.cache.record_fetch(ticket)
        log_service.info(f"Fetched ticket {ticket.ticket_id}")
        return ticket

    async def test_connection(self) -> ConnectionStatus:
        """Call /myself with the stored credentials; never raises"""
        if self.config is None:
            return ConnectionStatus(
                connected=False, message="JIRA credentials not configured"
            )

        try:
            response = await self.client.get(
                f"{self.config.base_url}/rest/api/3/myself",
                auth=self._auth(),
                headers={"Accept": "application/json"},
            )
            if response.is_success:
                user = response.json()
                return ConnectionStatus(
                    connected=True, message=f"Connected as {user.get('displayName')}"
                )
            return ConnectionStatus(
                connected=False,
                message=f"Authentication failed ({response.status_code})",
            )
        except Exception as e:
            return ConnectionStatus(connected=False, message=f"Connection error: {e}")

    async def close(self):
        """Close HTTP client"""
        await self.client.aclose()
