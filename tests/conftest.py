import os
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from src.db.memory import TicketStore
from src.main import app

FIXTURES_DIR = os.path.join(os.path.dirname(__file__), "fixtures")


@pytest.fixture
def read_fixture():
    def _read(name: str) -> str:
        with open(os.path.join(FIXTURES_DIR, name), "r", encoding="utf-8") as f:
            return f.read()
    return _read


@pytest.fixture
def store() -> TicketStore:
    return TicketStore()


@pytest.fixture
def ticket_payload() -> dict:
    return {
        "customer_id": "A1",
        "customer_email": "a1@example.com",
        "customer_name": "Alice",
        "subject": "Valid subject",
        "description": "Valid description long enough",
        "category": "other",
        "priority": "medium",
        "status": "new",
        "tags": ["test"],
        "metadata": {"source": "api", "browser": "Chrome", "device_type": "desktop"},
    }


@pytest_asyncio.fixture
async def client(store: TicketStore):
    app.state.store = store
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
