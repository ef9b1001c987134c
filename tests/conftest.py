"""
TestPlan Agent - Test Configuration and Fixtures
"""
import os
import tempfile
from pathlib import Path
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

# Keep data, logs and uploads out of the source tree
_TEST_ROOT = Path(tempfile.mkdtemp(prefix="testplan-agent-"))
os.environ["DATA_DIR"] = str(_TEST_ROOT / "data")
os.environ["LOGS_DIR"] = str(_TEST_ROOT / "logs")
os.environ["UPLOAD_DIR"] = str(_TEST_ROOT / "uploads")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT / 'default.db'}"
os.environ["ENCRYPTION_KEY"] = "test-encryption-passphrase"

from testplan_agent.config import settings  # noqa: E402
from testplan_agent.database import Database  # noqa: E402
from testplan_agent.main import create_app  # noqa: E402
from testplan_agent.services import settings_store as keys  # noqa: E402
from testplan_agent.services.settings_store import SettingsStore  # noqa: E402


@pytest.fixture
async def database(tmp_path: Path) -> AsyncGenerator[Database, None]:
    """Fresh SQLite database file per test"""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await db.init()
    yield db
    await db.dispose()


@pytest.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    async with database.session() as session:
        yield session


@pytest.fixture
async def client(database: Database) -> AsyncGenerator[AsyncClient, None]:
    """API client bound to the per-test database"""
    app = create_app(database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def upload_dir() -> Path:
    return settings.UPLOAD_DIR


@pytest.fixture
async def jira_settings(db_session: AsyncSession) -> SettingsStore:
    """Store with working JIRA credentials saved"""
    store = SettingsStore(db_session)
    await store.batch_upsert(
        [
            (keys.JIRA_BASE_URL, "https://acme.atlassian.net"),
            (keys.JIRA_USERNAME, "u"),
            (keys.JIRA_API_TOKEN, store.seal("t")),
        ]
    )
    return store


@pytest.fixture
def make_issue():
    """Builder for minimal JIRA issue bodies"""

    def issue_payload(key: str = "PROJ-7", **fields) -> dict:
        base = {
            "summary": "Login fails",
            "description": "Users cannot log in.",
            "priority": {"name": "High"},
            "status": {"name": "Open"},
            "assignee": {"displayName": "Dana"},
            "labels": ["auth"],
            "attachment": [],
        }
        base.update(fields)
        return {"key": key, "fields": base}

    return issue_payload


@pytest.fixture
def make_pdf():
    """Builder for small text PDFs, one list of lines per page"""

    def escape(line: str) -> str:
        return line.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")

    def build(pages) -> bytes:
        page_ids = [4 + 2 * i for i in range(len(pages))]
        kids = " ".join(f"{pid} 0 R" for pid in page_ids)
        objects = [
            "<< /Type /Catalog /Pages 2 0 R >>",
            f"<< /Type /Pages /Kids [{kids}] /Count {len(pages)} >>",
            "<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
        ]
        for pid, lines in zip(page_ids, pages):
            stream = "".join(
                f"BT /F1 12 Tf 72 {720 - 20 * n} Td ({escape(line)}) Tj ET\n"
                for n, line in enumerate(lines)
            )
            objects.append(
                "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
                f"/Resources << /Font << /F1 3 0 R >> >> /Contents {pid + 1} 0 R >>"
            )
            objects.append(
                f"<< /Length {len(stream)} >>\nstream\n{stream}endstream"
            )

        out = b"%PDF-1.4\n"
        offsets = []
        for number, body in enumerate(objects, start=1):
            offsets.append(len(out))
            out += f"{number} 0 obj\n{body}\nendobj\n".encode("latin-1")

        xref_at = len(out)
        xref = f"xref\n0 {len(objects) + 1}\n0000000000 65535 f \n"
        xref += "".join(f"{offset:010d} 00000 n \n" for offset in offsets)
        xref += (
            f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\n"
            f"startxref\n{xref_at}\n%%EOF\n"
        )
        return out + xref.encode("latin-1")

    return build
