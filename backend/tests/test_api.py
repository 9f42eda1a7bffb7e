from collections.abc import AsyncGenerator, Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel import Session, SQLModel

from billing.api.v1.dependencies import get_allocator, get_sequence_store
from billing.db import get_session
from billing.main import app
from billing.models import Organization
from billing.services.numbering import (
    InMemorySequenceStore,
    ReserveResult,
    SequenceAllocator,
    StoreUnavailable,
    fiscal_year_label,
)
from billing.utils import business_today

ORG_ID = "01J9ZQ3V7K8M2N4P6R8T0V2X4Z"
SERIES = "org_01:invoice:24-25"


class AlwaysTakenStore(InMemorySequenceStore):
    async def try_reserve(self, series_key: str, number: int, document_ref: str | None = None) -> ReserveResult:
        return ReserveResult.ALREADY_RESERVED


class DownStore(InMemorySequenceStore):
    async def list_reserved(self, series_key: str) -> set[int]:
        raise StoreUnavailable("connection refused")


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    """SQLite file with tables and one organization, prepared synchronously."""
    path = tmp_path / "api.db"
    sync_engine = create_engine(f"sqlite:///{path}")
    SQLModel.metadata.create_all(sync_engine)
    with Session(sync_engine) as session:
        session.add(Organization(id=ORG_ID, name="Acme Traders", invoice_prefix="ACM", fiscal_year_start=4))
        session.commit()
    sync_engine.dispose()
    return f"sqlite+aiosqlite:///{path}"


@pytest.fixture
def client(memory_store: InMemorySequenceStore, database_url: str) -> Generator[TestClient]:
    engine = create_async_engine(database_url, poolclass=NullPool)
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_session() -> AsyncGenerator[AsyncSession]:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_sequence_store] = lambda: memory_store
    app.dependency_overrides[get_session] = override_session
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _current_invoice_number(number: int) -> str:
    return f"ACM-{fiscal_year_label(business_today(), 4)}-{number:05d}"


def test_health(client: TestClient) -> None:
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_allocate_preview_list_release(client: TestClient) -> None:
    for expected in (1, 2, 3):
        response = client.post("/api/v1/sequences/allocate", json={"series_key": SERIES, "document_ref": "doc"})
        assert response.status_code == 201
        assert response.json() == {"series_key": SERIES, "number": expected}

    response = client.delete(f"/api/v1/sequences/{SERIES}/reservations/2")
    assert response.status_code == 204

    # Second release of the same number is a no-op
    response = client.delete(f"/api/v1/sequences/{SERIES}/reservations/2")
    assert response.status_code == 204

    response = client.get(f"/api/v1/sequences/{SERIES}/reserved")
    assert response.json() == {"series_key": SERIES, "numbers": [1, 3]}

    response = client.get(f"/api/v1/sequences/{SERIES}/next")
    assert response.json() == {"series_key": SERIES, "number": 2}


def test_blank_series_key_is_rejected(client: TestClient) -> None:
    response = client.post("/api/v1/sequences/allocate", json={"series_key": "   "})
    assert response.status_code == 422


def test_release_of_non_positive_number_is_rejected(client: TestClient) -> None:
    response = client.delete(f"/api/v1/sequences/{SERIES}/reservations/0")
    assert response.status_code == 422


def test_contended_series_returns_retryable_conflict(client: TestClient) -> None:
    app.dependency_overrides[get_allocator] = lambda: SequenceAllocator(
        AlwaysTakenStore(), max_attempts=2, retry_jitter=0
    )

    response = client.post("/api/v1/sequences/allocate", json={"series_key": SERIES})

    assert response.status_code == 409
    assert response.headers["retry-after"] == "1"


def test_store_outage_returns_service_unavailable(client: TestClient) -> None:
    app.dependency_overrides[get_sequence_store] = DownStore

    response = client.post("/api/v1/sequences/allocate", json={"series_key": SERIES})

    assert response.status_code == 503


def test_document_numbers_for_organization(client: TestClient) -> None:
    base = f"/api/v1/organizations/{ORG_ID}/documents/invoice"

    response = client.get(f"{base}/next-number")
    assert response.status_code == 200
    assert response.json() == {"document_number": _current_invoice_number(1)}

    first = client.post(f"{base}/numbers", json={"document_ref": "inv_a"})
    second = client.post(f"{base}/numbers", json={})
    assert first.status_code == 201
    assert first.json()["document_number"] == _current_invoice_number(1)
    assert second.json()["document_number"] == _current_invoice_number(2)

    response = client.delete(f"{base}/numbers/{_current_invoice_number(1)}")
    assert response.status_code == 204

    third = client.post(f"{base}/numbers", json={})
    assert third.json()["document_number"] == _current_invoice_number(1)


def test_unknown_organization_returns_404(client: TestClient) -> None:
    response = client.post("/api/v1/organizations/01JAAAAAAAAAAAAAAAAAAAAAAA/documents/invoice/numbers", json={})
    assert response.status_code == 404


def test_unknown_document_type_returns_422(client: TestClient) -> None:
    response = client.get(f"/api/v1/organizations/{ORG_ID}/documents/receipt/next-number")
    assert response.status_code == 422


def test_series_key_with_slash_is_reachable(client: TestClient) -> None:
    series_key = "org_01/branch_2:invoice:24-25"

    response = client.post("/api/v1/sequences/allocate", json={"series_key": series_key, "document_ref": "inv_a"})
    assert response.json() == {"series_key": series_key, "number": 1}

    response = client.get(f"/api/v1/sequences/{series_key}/next")
    assert response.json() == {"series_key": series_key, "number": 2}

    response = client.get(f"/api/v1/sequences/{series_key}/reservations/1")
    assert response.json() == {"series_key": series_key, "number": 1, "document_ref": "inv_a"}

    response = client.delete(f"/api/v1/sequences/{series_key}/reservations/1")
    assert response.status_code == 204

    response = client.get(f"/api/v1/sequences/{series_key}/reserved")
    assert response.json() == {"series_key": series_key, "numbers": []}


def test_claim_sequence_number(client: TestClient) -> None:
    response = client.post("/api/v1/sequences/claim", json={"series_key": SERIES, "number": 2, "document_ref": "imp"})
    assert response.status_code == 201
    assert response.json() == {"series_key": SERIES, "number": 2}

    response = client.post("/api/v1/sequences/claim", json={"series_key": SERIES, "number": 2})
    assert response.status_code == 409
    assert "retry-after" not in response.headers

    response = client.post("/api/v1/sequences/allocate", json={"series_key": SERIES})
    assert response.json()["number"] == 1
    response = client.post("/api/v1/sequences/allocate", json={"series_key": SERIES})
    assert response.json()["number"] == 3


def test_claim_document_number(client: TestClient) -> None:
    base = f"/api/v1/organizations/{ORG_ID}/documents/invoice"
    label = fiscal_year_label(business_today(), 4)

    response = client.post(f"{base}/numbers/claim", json={"document_number": f"ACM-{label}-1", "document_ref": "imp"})
    assert response.status_code == 201
    assert response.json() == {"document_number": _current_invoice_number(1)}

    response = client.post(f"{base}/numbers/claim", json={"document_number": _current_invoice_number(1)})
    assert response.status_code == 409

    response = client.post(f"{base}/numbers/claim", json={"document_number": f"XYZ-{label}-00003"})
    assert response.status_code == 422

    response = client.post(f"{base}/numbers", json={})
    assert response.json()["document_number"] == _current_invoice_number(2)
