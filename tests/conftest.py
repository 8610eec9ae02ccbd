from __future__ import annotations

import os
import sys
from collections.abc import Callable, Iterator
from datetime import timedelta
from io import BytesIO
from pathlib import Path
from types import SimpleNamespace

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("ENABLE_TRACING", "false")

import bcrypt
import pytest
from botocore.exceptions import ClientError
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from transformation_os.api.deps import get_db_session
from transformation_os.api.routes.auth import refresh_token_store
from transformation_os.core.config import get_settings
from transformation_os.core.permissions import SystemRole
from transformation_os.core.security import AuthenticatedUser
from transformation_os.core.tokens import create_token, load_signing_key
from transformation_os.main import app
from transformation_os.models import (
    Agency,
    Base,
    Enrollment,
    EnrollmentRole,
    EnrollmentStatus,
    MentoringRelationship,
    Program,
    ProgramStatus,
    Tenant,
    User,
)
from transformation_os.obs import AuditMiddleware

TEST_PASSWORD = "changeme"
# Low work factor keeps fixture setup fast.
TEST_PASSWORD_HASH = bcrypt.hashpw(TEST_PASSWORD.encode("utf-8"), bcrypt.gensalt(rounds=4)).decode("utf-8")


class InMemoryS3Client:
    """Simple in-memory S3 stub used by the audit archive during tests."""

    exceptions = SimpleNamespace(NoSuchKey=type("NoSuchKey", (Exception,), {}))

    def __init__(self) -> None:
        self._buckets: dict[str, dict[str, bytes]] = {}

    def head_bucket(self, *, Bucket: str) -> None:
        if Bucket not in self._buckets:
            raise ClientError({"Error": {"Code": "404", "Message": "Not Found"}}, "HeadBucket")

    def create_bucket(self, *, Bucket: str, **_: object) -> None:
        self._buckets.setdefault(Bucket, {})

    def get_object(self, *, Bucket: str, Key: str) -> dict[str, BytesIO]:
        bucket = self._buckets.get(Bucket)
        if bucket is None:
            raise ClientError({"Error": {"Code": "NoSuchBucket"}}, "GetObject")
        if Key not in bucket:
            raise self.exceptions.NoSuchKey()
        return {"Body": BytesIO(bucket[Key])}

    def put_object(self, *, Bucket: str, Key: str, Body: bytes, **_: object) -> dict[str, str]:
        self._buckets.setdefault(Bucket, {})[Key] = Body.encode("utf-8") if isinstance(Body, str) else Body
        return {"ETag": "in-memory"}

    @property
    def buckets(self) -> dict[str, dict[str, bytes]]:
        return self._buckets


engine = create_engine(
    "sqlite+pysqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def _audit_middlewares() -> Iterator[AuditMiddleware]:
    middleware = getattr(app, "middleware_stack", None)
    while middleware is not None:
        if isinstance(middleware, AuditMiddleware):
            yield middleware
        middleware = getattr(middleware, "app", None)


@pytest.fixture(autouse=True)
def audit_s3_client(monkeypatch: pytest.MonkeyPatch) -> Iterator[InMemoryS3Client]:
    client = InMemoryS3Client()

    def _client_factory(*args: object, **kwargs: object) -> InMemoryS3Client:
        return client

    monkeypatch.setattr("transformation_os.obs.audit.boto3.client", _client_factory)
    for middleware in _audit_middlewares():
        middleware.archive.reset()
    yield client


@pytest.fixture(autouse=True)
def _reset_refresh_tokens() -> Iterator[None]:
    refresh_token_store.reset()
    yield
    refresh_token_store.reset()


@pytest.fixture()
def db_session() -> Iterator[Session]:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()


def make_user(
    session: Session,
    *,
    email: str,
    role: SystemRole,
    tenant: Tenant | None = None,
    agency: Agency | None = None,
    first_name: str = "Test",
    last_name: str = "User",
) -> User:
    user = User(
        email=email,
        hashed_password=TEST_PASSWORD_HASH,
        first_name=first_name,
        last_name=last_name,
        role=role,
        tenant_id=tenant.id if tenant is not None else None,
        agency_id=agency.id if agency is not None else None,
    )
    session.add(user)
    session.flush()
    return user


def make_relationship(session: Session, *, tenant: Tenant, mentor: User, mentee: User) -> MentoringRelationship:
    relationship = MentoringRelationship(tenant_id=tenant.id, mentor_id=mentor.id, mentee_id=mentee.id)
    session.add(relationship)
    session.flush()
    return relationship


def enroll(
    session: Session,
    *,
    program: Program,
    user: User,
    role: EnrollmentRole,
    status: EnrollmentStatus = EnrollmentStatus.ACTIVE,
) -> Enrollment:
    enrollment = Enrollment(
        program_id=program.id, user_id=user.id, tenant_id=user.tenant_id, role=role, status=status
    )
    session.add(enrollment)
    session.flush()
    return enrollment


def principal(user: User) -> AuthenticatedUser:
    return AuthenticatedUser.from_user(user)


@pytest.fixture()
def world(db_session: Session) -> SimpleNamespace:
    """Agency with two client tenants, a program and three mentoring pairs in the first tenant.

    The facilitator facilitates ``program``; ``mentor_one`` and ``mentor_two``
    are enrolled in it as mentors while ``mentor_three`` is not.
    """

    agency = Agency(name="Northwind Partners", slug="northwind")
    rival_agency = Agency(name="Contoso Advisory", slug="contoso")
    db_session.add_all([agency, rival_agency])
    db_session.flush()

    tenant = Tenant(agency_id=agency.id, name="Acme Corp", slug="acme")
    sister_tenant = Tenant(agency_id=agency.id, name="Globex", slug="globex")
    rival_tenant = Tenant(agency_id=rival_agency.id, name="Initech", slug="initech")
    db_session.add_all([tenant, sister_tenant, rival_tenant])
    db_session.flush()

    ns = SimpleNamespace(
        agency=agency,
        rival_agency=rival_agency,
        tenant=tenant,
        sister_tenant=sister_tenant,
        rival_tenant=rival_tenant,
    )
    ns.admin = make_user(db_session, email="admin@acme.test", role=SystemRole.TENANT_ADMIN, tenant=tenant)
    ns.facilitator = make_user(
        db_session, email="facilitator@acme.test", role=SystemRole.FACILITATOR, tenant=tenant
    )
    ns.mentor_one = make_user(db_session, email="mentor1@acme.test", role=SystemRole.MENTOR, tenant=tenant)
    ns.mentor_two = make_user(db_session, email="mentor2@acme.test", role=SystemRole.MENTOR, tenant=tenant)
    ns.mentor_three = make_user(db_session, email="mentor3@acme.test", role=SystemRole.MENTOR, tenant=tenant)
    ns.mentee_one = make_user(db_session, email="mentee1@acme.test", role=SystemRole.LEARNER, tenant=tenant)
    ns.mentee_two = make_user(db_session, email="mentee2@acme.test", role=SystemRole.LEARNER, tenant=tenant)
    ns.mentee_three = make_user(db_session, email="mentee3@acme.test", role=SystemRole.LEARNER, tenant=tenant)
    ns.bystander = make_user(db_session, email="bystander@acme.test", role=SystemRole.LEARNER, tenant=tenant)
    ns.sister_learner = make_user(
        db_session, email="learner@globex.test", role=SystemRole.LEARNER, tenant=sister_tenant
    )
    ns.rival_learner = make_user(
        db_session, email="learner@initech.test", role=SystemRole.LEARNER, tenant=rival_tenant
    )
    ns.agency_admin = make_user(
        db_session, email="ops@northwind.test", role=SystemRole.AGENCY_ADMIN, agency=agency
    )
    ns.agency_owner = make_user(
        db_session, email="owner@northwind.test", role=SystemRole.AGENCY_OWNER, agency=agency
    )

    ns.program = Program(agency_id=agency.id, tenant_id=tenant.id, name="Leadership Lab", status=ProgramStatus.ACTIVE)
    db_session.add(ns.program)
    db_session.flush()
    enroll(db_session, program=ns.program, user=ns.facilitator, role=EnrollmentRole.FACILITATOR)
    enroll(db_session, program=ns.program, user=ns.mentor_one, role=EnrollmentRole.MENTOR)
    enroll(db_session, program=ns.program, user=ns.mentor_two, role=EnrollmentRole.MENTOR)
    enroll(db_session, program=ns.program, user=ns.mentee_one, role=EnrollmentRole.LEARNER)

    ns.rel_one = make_relationship(db_session, tenant=tenant, mentor=ns.mentor_one, mentee=ns.mentee_one)
    ns.rel_two = make_relationship(db_session, tenant=tenant, mentor=ns.mentor_two, mentee=ns.mentee_two)
    ns.rel_three = make_relationship(db_session, tenant=tenant, mentor=ns.mentor_three, mentee=ns.mentee_three)
    db_session.commit()
    return ns


@pytest.fixture()
def client(db_session: Session, audit_s3_client: InMemoryS3Client) -> Iterator[TestClient]:
    def override_get_db() -> Iterator[Session]:
        try:
            yield db_session
        finally:
            db_session.rollback()

    app.dependency_overrides[get_db_session] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.pop(get_db_session, None)


@pytest.fixture()
def auth_headers_for() -> Callable[[User], dict[str, str]]:
    settings = get_settings()
    signing_key = load_signing_key(settings)

    def _headers(user: User) -> dict[str, str]:
        token, _ = create_token(
            subject=user.id,
            tenant_id=user.tenant_id,
            agency_id=user.agency_id,
            role_level=user.role_level,
            token_type="access",
            expires_delta=timedelta(minutes=5),
            settings=settings,
            signing_key=signing_key,
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers
