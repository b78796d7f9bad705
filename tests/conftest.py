# tests/conftest.py
import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DB_HOST", "localhost")
os.environ.setdefault("DB_PORT", "5432")
os.environ.setdefault("DB_NAME", "mocards_test")
os.environ.setdefault("DB_USER", "mocards")
os.environ.setdefault("DB_PASS", "mocards")

import random  # noqa: E402

import pytest  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402

from mocards.api.v1 import deps  # noqa: E402
from mocards.core.security import create_access_token, ROLE_ADMIN, ROLE_CLINIC  # noqa: E402
from mocards.db.session import get_db_connection  # noqa: E402
from mocards.main import app  # noqa: E402
from mocards.services.batch_service import BatchService  # noqa: E402
from mocards.services.card_service import CardService  # noqa: E402
from mocards.services.code_generator import CodeGenerator  # noqa: E402
from tests.fakes import (  # noqa: E402
    Store,
    FakeConnection,
    FakeCardRepository,
    FakePerkRepository,
    FakeBatchRepository,
    FakeClinicRepository,
    FakeLocationCodeRepository,
    FakeCardTransactionRepository,
    FakeAppointmentRepository,
    FakeAdminRepository,
)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def store():
    store = Store()
    store.add_location("MNL")
    store.add_location("CAV")
    store.add_location("OLD", is_active=False)
    return store


@pytest.fixture
def clinic_a(store):
    return store.add_clinic("CLN001", "Santos Dental Clinic")


@pytest.fixture
def clinic_b(store):
    return store.add_clinic("CLN002", "Reyes Dental Clinic")


@pytest.fixture
def make_card_service(store):
    """Build a CardService over the shared store, with optional repo replacements."""
    def _make(card_repo=None, perk_repo=None):
        card_repo = card_repo or FakeCardRepository(store)
        batch_repo = FakeBatchRepository(store)
        generator = CodeGenerator(card_repo, batch_repo, prefix="PHL", rng=random.Random(2024))
        return CardService(
            FakeConnection(store),
            card_repo,
            perk_repo or FakePerkRepository(store),
            batch_repo,
            FakeClinicRepository(store),
            FakeLocationCodeRepository(store),
            FakeCardTransactionRepository(store),
            generator=generator,
        )
    return _make


@pytest.fixture
def card_service(make_card_service):
    return make_card_service()


@pytest.fixture
def make_batch_service():
    def _make(card_service):
        return BatchService(
            card_service.conn,
            card_service.batch_repo,
            card_service.card_repo,
            card_service.clinic_repo,
            card_service,
        )
    return _make


@pytest.fixture
def batch_service(make_batch_service, card_service):
    return make_batch_service(card_service)


# ------------------ HTTP ------------------ #

@pytest.fixture
async def client(store):
    async def override_db_connection():
        yield FakeConnection(store)

    app.dependency_overrides[get_db_connection] = override_db_connection
    app.dependency_overrides[deps.get_card_repo] = lambda: FakeCardRepository(store)
    app.dependency_overrides[deps.get_perk_repo] = lambda: FakePerkRepository(store)
    app.dependency_overrides[deps.get_batch_repo] = lambda: FakeBatchRepository(store)
    app.dependency_overrides[deps.get_clinic_repo] = lambda: FakeClinicRepository(store)
    app.dependency_overrides[deps.get_location_repo] = lambda: FakeLocationCodeRepository(store)
    app.dependency_overrides[deps.get_card_transaction_repo] = lambda: FakeCardTransactionRepository(store)
    app.dependency_overrides[deps.get_appointment_repo] = lambda: FakeAppointmentRepository(store)
    app.dependency_overrides[deps.get_admin_repo] = lambda: FakeAdminRepository(store)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def admin(store):
    return store.add_admin("admin")


@pytest.fixture
def admin_headers(admin):
    token = create_access_token(str(admin["id"]), ROLE_ADMIN)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def clinic_a_headers(clinic_a):
    token = create_access_token(str(clinic_a["id"]), ROLE_CLINIC)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def clinic_b_headers(clinic_b):
    token = create_access_token(str(clinic_b["id"]), ROLE_CLINIC)
    return {"Authorization": f"Bearer {token}"}
