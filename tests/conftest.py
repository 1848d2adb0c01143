import pytest
from decimal import Decimal
from unittest.mock import Mock, MagicMock
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from app.config import settings
from app.database import enable_sqlite_savepoints, get_db
from app.auth.dependencies import get_current_admin
from app.integrations.mpesa import ChargeResult, get_gateway
from app.models import Base
from app.models.admin import Admin
from app.models.template import Template


class ForcedGateway:
    """Charge gateway whose outcome is decided by the test"""

    def __init__(self, success=True, receipt="MPE123456789"):
        self.success = success
        self.receipt = receipt
        self.calls = []

    def charge(self, phone, amount, transaction_id):
        self.calls.append((phone, amount, transaction_id))
        if self.success:
            return ChargeResult(success=True, receipt=self.receipt)
        return ChargeResult(success=False, error_message="Payment cancelled by user")


@pytest.fixture
def mock_db():
    """Mock database session"""
    db = MagicMock()
    db.query.return_value = db
    db.filter.return_value = db
    db.order_by.return_value = db
    db.outerjoin.return_value = db
    db.limit.return_value = db
    db.first.return_value = None
    db.all.return_value = []
    return db


@pytest.fixture
def mock_admin():
    """Mock back-office admin"""
    admin = Mock(spec=Admin)
    admin.id = 1
    admin.username = "admin"
    admin.email = "admin@test.com"
    admin.password_hash = "$2b$12$test_hash"
    return admin


@pytest.fixture
def client_with_admin(mock_db, mock_admin):
    """TestClient with admin auth and mocked DB"""
    app.dependency_overrides[get_db] = lambda: mock_db
    app.dependency_overrides[get_current_admin] = lambda: mock_admin
    client = TestClient(app)
    yield client, mock_db, mock_admin
    app.dependency_overrides.clear()


@pytest.fixture
def unauthenticated_client(mock_db):
    """TestClient with mocked DB but no auth"""
    app.dependency_overrides[get_db] = lambda: mock_db
    client = TestClient(app)
    yield client, mock_db
    app.dependency_overrides.clear()


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    """Point UPLOAD_BASE_DIR at a temporary directory"""
    monkeypatch.setattr(settings, "upload_base_dir", tmp_path)
    return tmp_path


@pytest.fixture
def db_session():
    """Real session on an in-memory SQLite database"""
    engine = enable_sqlite_savepoints(create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    ))
    Base.metadata.create_all(engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    yield session
    session.close()
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def gateway():
    return ForcedGateway()


@pytest.fixture
def sqlite_client(db_session, gateway, mock_admin):
    """TestClient on the SQLite session with an admin and a forced gateway"""
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_gateway] = lambda: gateway
    app.dependency_overrides[get_current_admin] = lambda: mock_admin
    client = TestClient(app)
    yield client, db_session, gateway
    app.dependency_overrides.clear()


@pytest.fixture
def make_template(db_session, upload_dir):
    """Insert an active template whose archive exists on disk"""
    def _make(name="Landing Page", price="500.00", content=b"PK\x03\x04 archive", **kwargs):
        templates_dir = upload_dir / "templates"
        templates_dir.mkdir(parents=True, exist_ok=True)
        filename = f"{name.lower().replace(' ', '-')}.zip"
        (templates_dir / filename).write_bytes(content)

        template = Template(
            name=name,
            description=f"{name} description",
            price=Decimal(price),
            zip_file_path=f"templates/{filename}",
            **kwargs,
        )
        db_session.add(template)
        db_session.commit()
        db_session.refresh(template)
        return template
    return _make
