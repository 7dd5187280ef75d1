# This project was developed with assistance from AI tools.
"""Integration test fixtures -- real PostgreSQL, no mocks.

A session-scoped container provides PostgreSQL with the Alembic schema
applied once. Function-scoped fixtures give each test an isolated session
whose commits land in a savepoint that is rolled back afterwards, so the
services' own ``commit()`` calls behave normally without leaking state.
"""

import os
from collections import namedtuple
from decimal import Decimal

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool
from testcontainers.postgres import PostgresContainer

pytestmark = pytest.mark.integration

DB_PACKAGE = os.path.join(os.path.dirname(__file__), "..", "..", "..", "db")


# ---------------------------------------------------------------------------
# Session-scoped: container + migrations + engine
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def pg_container():
    with PostgresContainer(image="postgres:16-alpine", username="test", password="test", dbname="test") as pg:
        yield pg


@pytest.fixture(scope="session")
def db_url(pg_container):
    """Async DB URL for asyncpg."""
    host = pg_container.get_container_host_ip()
    port = pg_container.get_exposed_port(5432)
    return f"postgresql+asyncpg://test:test@{host}:{port}/test"


@pytest.fixture(scope="session")
def sync_db_url(pg_container):
    """Sync DB URL for Alembic (psycopg2)."""
    host = pg_container.get_container_host_ip()
    port = pg_container.get_exposed_port(5432)
    return f"postgresql://test:test@{host}:{port}/test"


@pytest.fixture(scope="session", autouse=True)
def _run_migrations(sync_db_url):
    """alembic upgrade head against the container."""
    from alembic import command
    from alembic.config import Config

    alembic_cfg = Config(os.path.join(DB_PACKAGE, "alembic.ini"))
    alembic_cfg.set_main_option("script_location", os.path.join(DB_PACKAGE, "alembic"))
    alembic_cfg.set_main_option("sqlalchemy.url", sync_db_url)
    # Ignore any DATABASE_URL from the developer's environment.
    alembic_cfg.attributes["url_locked"] = True
    command.upgrade(alembic_cfg, "head")


@pytest.fixture(scope="session")
def async_engine(db_url, _run_migrations):
    engine = create_async_engine(db_url, echo=False, poolclass=NullPool)
    yield engine


# ---------------------------------------------------------------------------
# Function-scoped: per-test session with savepoint rollback
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def db_session(async_engine):
    """Per-test DB session with savepoint rollback."""
    conn = await async_engine.connect()
    txn = await conn.begin()
    session = AsyncSession(bind=conn, join_transaction_mode="create_savepoint", expire_on_commit=False)
    yield session
    await session.close()
    await txn.rollback()
    await conn.close()


@pytest.fixture
def client_factory(db_session):
    """Factory returning an async httpx client bound to the test session."""
    from db import get_db

    from src.main import app
    from src.middleware.auth import get_current_user

    async def _make(user):
        async def _get_db():
            yield db_session

        async def _get_current_user(request=None):
            return user

        app.dependency_overrides[get_db] = _get_db
        if user is not None:
            app.dependency_overrides[get_current_user] = _get_current_user
        transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
        return httpx.AsyncClient(transport=transport, base_url="http://test")

    yield _make

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Seed data helper
# ---------------------------------------------------------------------------

SeedData = namedtuple("SeedData", ["policy_id", "tenant_id", "landlord_id", "joint_obligor_id", "document_ids"])


def _address(**overrides):
    from db import Address

    fields = dict(street="Av. Reforma", exterior_number="222", postal_code="06600", city="CDMX", state="CDMX")
    fields.update(overrides)
    return Address(**fields)


@pytest_asyncio.fixture
async def seed_policy(db_session):
    """An UNDER_INVESTIGATION policy whose tenant has documents, references and payments."""
    from db import (
        ActorDocument,
        DocumentValidation,
        Investigation,
        JointObligor,
        Landlord,
        Payment,
        PersonalReference,
        Policy,
        Tenant,
    )
    from db.enums import (
        DocumentCategory,
        GuaranteeMethod,
        GuarantorType,
        PayerType,
        PaymentStatus,
        PaymentType,
        PolicyStatus,
        ValidationStatus,
    )

    policy = Policy(
        policy_number="POL-20261018-INT01",
        status=PolicyStatus.UNDER_INVESTIGATION,
        guarantor_type=GuarantorType.JOINT_OBLIGOR,
        rent_amount=Decimal("18000"),
        contract_length=12,
        created_by="broker-1",
        managed_by="broker-1",
    )
    policy.investigation = Investigation()
    policy.tenant = Tenant(
        email="ana@example.com",
        first_name="Ana",
        paternal_last_name="López",
        maternal_last_name="García",
        occupation="Ingeniera",
        employer_name="Acme SA de CV",
        monthly_income=Decimal("30000"),
        information_complete=True,
        address=_address(),
        personal_references=[
            PersonalReference(first_name="Luis", paternal_last_name="Pérez", phone="5511112222", relationship_type="amigo"),
        ],
    )
    policy.landlords = [Landlord(email="owner@example.com", first_name="Jorge", is_primary=True, information_complete=True)]
    policy.joint_obligors = [
        JointObligor(
            email="jo@example.com",
            first_name="María",
            guarantee_method=GuaranteeMethod.INCOME,
            monthly_income=Decimal("12000"),
            information_complete=True,
        ),
    ]
    policy.payments = [
        Payment(amount=Decimal("1500"), type=PaymentType.TENANT_PORTION, status=PaymentStatus.COMPLETED, paid_by=PayerType.TENANT),
        Payment(amount=Decimal("1500"), type=PaymentType.TENANT_PORTION, status=PaymentStatus.PENDING, paid_by=PayerType.TENANT),
    ]
    db_session.add(policy)
    await db_session.flush()

    documents = [
        ActorDocument(
            policy_id=policy.id,
            tenant_id=policy.tenant.id,
            category=DocumentCategory.IDENTIFICATION,
            file_name="ine.pdf",
            validation=DocumentValidation(status=ValidationStatus.APPROVED, validated_by="laura-staff"),
        ),
        ActorDocument(
            policy_id=policy.id,
            tenant_id=policy.tenant.id,
            category=DocumentCategory.INCOME_PROOF,
            file_name="nomina.pdf",
        ),
    ]
    db_session.add_all(documents)
    await db_session.commit()

    return SeedData(
        policy_id=policy.id,
        tenant_id=policy.tenant.id,
        landlord_id=policy.landlords[0].id,
        joint_obligor_id=policy.joint_obligors[0].id,
        document_ids=[d.id for d in documents],
    )
