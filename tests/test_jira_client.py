"""
JIRA client tests (HTTP mocked with httpx.MockTransport)
"""
import base64
import json

import httpx
import pytest
from sqlalchemy import func, select

from testplan_agent.models.ticket_cache_entry import TicketCacheEntry
from testplan_agent.services.errors import (
    InvalidInputError,
    NotConfiguredError,
    NotFoundError,
    UpstreamAPIError,
    UpstreamAuthError,
)
from testplan_agent.services.jira_client import (
    JiraClient,
    extract_acceptance_criteria,
    extract_description,
)
from testplan_agent.services.settings_store import TrackerConfig
from testplan_agent.services.ticket_cache import TicketCache

CONFIG = TrackerConfig(base_url="https://acme.atlassian.net", username="u", api_token="t")


def make_client(db_session, handler, config=CONFIG):
    transport = httpx.MockTransport(handler)
    return JiraClient(
        config, TicketCache(db_session), client=httpx.AsyncClient(transport=transport)
    )


def adf(*paragraphs):
    return {
        "type": "doc",
        "version": 1,
        "content": [
            {"type": "paragraph", "content": [{"type": "text", "text": p}]}
            for p in paragraphs
        ],
    }


class TestFetch:
    @pytest.mark.asyncio
    async def test_fetch_normalizes_and_caches(self, db_session, jira_settings, make_issue):
        seen = []

        def handler(request: httpx.Request):
            seen.append(request)
            return httpx.Response(200, json=make_issue("PROJ-7"))

        config = await TrackerConfig.load(jira_settings)
        jira = make_client(db_session, handler, config)
        ticket = await jira.fetch("PROJ-7")

        assert str(seen[0].url) == "https://acme.atlassian.net/rest/api/3/issue/PROJ-7"
        expected = "Basic " + base64.b64encode(b"u:t").decode()
        assert seen[0].headers["Authorization"] == expected

        assert ticket.ticket_id == "PROJ-7"
        assert ticket.summary == "Login fails"
        assert ticket.priority == "High"
        assert ticket.status == "Open"
        assert ticket.assignee == "Dana"
        assert ticket.labels == ["auth"]

        count = await db_session.scalar(
            select(func.count()).select_from(TicketCacheEntry)
        )
        assert count == 1
        cached = await TicketCache(db_session).most_recent("PROJ-7")
        assert cached == ticket

    @pytest.mark.asyncio
    async def test_missing_fields_use_defaults(self, db_session):
        def handler(request):
            return httpx.Response(200, json={"key": "PROJ-9", "fields": {"summary": "S"}})

        ticket = await make_client(db_session, handler).fetch("PROJ-9")
        assert ticket.priority == "None"
        assert ticket.status == "Unknown"
        assert ticket.assignee == "Unassigned"
        assert ticket.labels == []
        assert ticket.description == ""
        assert ticket.attachments == []

    @pytest.mark.asyncio
    async def test_attachments(self, db_session, make_issue):
        payload = make_issue(
            attachment=[{"filename": "requirements.pdf", "content": "https://acme/att/1"}]
        )

        def handler(request):
            return httpx.Response(200, json=payload)

        ticket = await make_client(db_session, handler).fetch("PROJ-7")
        assert ticket.attachments[0].filename == "requirements.pdf"
        assert ticket.attachments[0].url == "https://acme/att/1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("ticket_id", ["proj-7", "PROJ7", "", None])
    async def test_invalid_id_makes_no_request(self, db_session, ticket_id):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={})

        with pytest.raises(InvalidInputError, match="PROJECT-123"):
            await make_client(db_session, handler).fetch(ticket_id)
        assert calls == []

    @pytest.mark.asyncio
    async def test_not_configured(self, db_session):
        def handler(request):
            raise AssertionError("no request expected")

        with pytest.raises(NotConfiguredError):
            await make_client(db_session, handler, config=None).fetch("PROJ-7")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status,error",
        [(401, UpstreamAuthError), (404, NotFoundError), (500, UpstreamAPIError)],
    )
    async def test_upstream_errors(self, db_session, status, error):
        def handler(request):
            return httpx.Response(status, text="nope")

        with pytest.raises(error):
            await make_client(db_session, handler).fetch("PROJ-7")

        count = await db_session.scalar(
            select(func.count()).select_from(TicketCacheEntry)
        )
        assert count == 0

    @pytest.mark.asyncio
    async def test_not_found_message(self, db_session):
        def handler(request):
            return httpx.Response(404)

        with pytest.raises(NotFoundError, match="Ticket PROJ-7 not found"):
            await make_client(db_session, handler).fetch("PROJ-7")

    @pytest.mark.asyncio
    async def test_generic_error_keeps_upstream_body(self, db_session):
        def handler(request):
            return httpx.Response(503, text="maintenance")

        with pytest.raises(UpstreamAPIError) as exc_info:
            await make_client(db_session, handler).fetch("PROJ-7")
        assert exc_info.value.upstream_status == 503
        assert exc_info.value.body == "maintenance"

    @pytest.mark.asyncio
    async def test_unreachable_host(self, db_session):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(UpstreamAPIError, match="Cannot reach JIRA"):
            await make_client(db_session, handler).fetch("PROJ-7")


class TestTestConnection:
    @pytest.mark.asyncio
    async def test_connected(self, db_session):
        def handler(request):
            assert request.url.path == "/rest/api/3/myself"
            return httpx.Response(200, json={"displayName": "Dana"})

        status = await make_client(db_session, handler).test_connection()
        assert status.connected is True
        assert "Dana" in status.message

    @pytest.mark.asyncio
    async def test_rejected(self, db_session):
        def handler(request):
            return httpx.Response(401)

        status = await make_client(db_session, handler).test_connection()
        assert status.connected is False

    @pytest.mark.asyncio
    async def test_unreachable_never_raises(self, db_session):
        def handler(request):
            raise httpx.ConnectError("down", request=request)

        status = await make_client(db_session, handler).test_connection()
        assert status.connected is False

    @pytest.mark.asyncio
    async def test_not_configured(self, db_session):
        status = await make_client(db_session, lambda r: None, config=None).test_connection()
        assert status.connected is False
        assert "not configured" in status.message


class TestDescription:
    def test_plain_string(self):
        assert extract_description("hello") == "hello"

    def test_empty(self):
        assert extract_description(None) == ""
        assert extract_description({}) == ""

    def test_adf_paragraphs_joined_by_newline(self):
        assert extract_description(adf("Line one", "Line two")) == "Line one\nLine two"

    def test_nested_adf(self):
        doc = {
            "type": "doc",
            "content": [
                {
                    "type": "bulletList",
                    "content": [
                        {
                            "type": "listItem",
                            "content": [
                                {
                                    "type": "paragraph",
                                    "content": [{"type": "text", "text": "item"}],
                                }
                            ],
                        }
                    ],
                },
                {"type": "rule"},
            ],
        }
        assert extract_description(doc) == "item\n"


class TestAcceptanceCriteria:
    def test_custom_field_string(self):
        fields = {"customfield_10029": "Given X then Y", "description": "AC: ignored"}
        assert extract_acceptance_criteria(fields) == "Given X then Y"

    def test_custom_field_order(self):
        fields = {"customfield_10028": "first", "customfield_10100": "third"}
        assert extract_acceptance_criteria(fields) == "first"

    def test_custom_field_adf(self):
        fields = {"customfield_10100": adf("Must log in")}
        assert extract_acceptance_criteria(fields) == "Must log in"

    def test_labelled_block_in_description(self):
        fields = {
            "description": "Intro\n\nAcceptance Criteria:\nStep one\nStep two\n\nNext section"
        }
        assert extract_acceptance_criteria(fields) == "Step one\nStep two"

    def test_short_label(self):
        fields = {"description": "Context\nAC: user sees dashboard"}
        assert extract_acceptance_criteria(fields) == "user sees dashboard"

    def test_block_ends_at_heading(self):
        fields = {"description": "Acceptance criteria:\n- works\nNotes:\nlater"}
        assert extract_acceptance_criteria(fields) == "- works"

    def test_block_ends_at_rule(self):
        fields = {"description": "Acceptance Criteria:\n- works\n---\nfooter"}
        assert extract_acceptance_criteria(fields) == "- works"

    def test_description_from_adf(self):
        fields = {"description": adf("Acceptance Criteria:", "Saves the form")}
        assert extract_acceptance_criteria(fields) == "Saves the form"

    def test_none_found(self):
        assert extract_acceptance_criteria({"description": "Nothing here"}) == ""
        assert extract_acceptance_criteria({}) == ""


def test_cached_snapshot_uses_camel_case(make_issue):
    from testplan_agent.services.jira_client import parse_issue

    data = json.loads(parse_issue(make_issue()).model_dump_json(by_alias=True))
    assert data["ticketId"] == "PROJ-7"
    assert "acceptanceCriteria" in data


class TestUnexpectedIssuePayload:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            [],
            "PROJ-7",
            {"key": "PROJ-7", "fields": ["summary"]},
            {"key": "PROJ-7", "fields": {"priority": "High"}},
        ],
    )
    async def test_maps_to_upstream_error(self, db_session, body):
        def handler(request):
            return httpx.Response(200, json=body)

        with pytest.raises(UpstreamAPIError):
            await make_client(db_session, handler).fetch("PROJ-7")

        count = await db_session.scalar(
            select(func.count()).select_from(TicketCacheEntry)
        )
        assert count == 0

    @pytest.mark.asyncio
    async def test_invalid_json(self, db_session):
        def handler(request):
            return httpx.Response(200, text="<html>login</html>")

        with pytest.raises(UpstreamAPIError, match="invalid JSON"):
            await make_client(db_session, handler).fetch("PROJ-7")


class TestLineEndings:
    def test_crlf_description_is_normalized(self):
        assert extract_description("a\r\nb\rc") == "a\nb\nc"

    def test_crlf_blank_line_ends_block(self):
        fields = {"description": "Acceptance Criteria:\r\n- a\r\n\r\nNext"}
        assert extract_acceptance_criteria(fields) == "- a"
