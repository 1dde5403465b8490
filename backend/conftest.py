import io

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from PIL import Image
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from campaign_ledger.main import app
from campaign_ledger.core.config import settings
from campaign_ledger.core.rate_limiting import limiter
from campaign_ledger.db.session import Base, build_engine, get_db
from campaign_ledger.schemas.campaign import CampaignCreate
from campaign_ledger.services.ledger import CampaignLedger
from campaign_ledger.services.storage import LocalImageStorage, get_image_storage
from campaign_ledger.services.template_validator import validate_bundle
from tests.factories import CelebrityFactory, TemplateInputFactory

TEST_ADMIN_KEY = "test-admin-key"

# In-memory database shared by every session of a test
engine = build_engine("sqlite://", poolclass=StaticPool)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database session for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def storage(tmp_path):
    """Local image storage rooted in a temporary directory."""
    return LocalImageStorage(root=str(tmp_path / "media"), base_url="/media")


@pytest.fixture(scope="function")
def override_dependencies(db_session, storage):
    """Point the API at the test database and storage."""
    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_image_storage] = lambda: storage
    yield
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    """Configure an admin key and switch rate limiting off."""
    monkeypatch.setattr(settings, "ADMIN_API_KEY", TEST_ADMIN_KEY)
    monkeypatch.setattr(settings, "REQUIRE_CELEBRITY_PLACEHOLDER", False)
    monkeypatch.setattr(limiter, "enabled", False)


@pytest_asyncio.fixture
async def async_client(override_dependencies):
    """Create an async HTTP client for testing."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def admin_headers():
    return {"X-Admin-Key": TEST_ADMIN_KEY}


@pytest.fixture
def celebrity(db_session):
    """The celebrity referenced by the sample campaigns."""
    celebrity = CelebrityFactory.build(id="celeb-1", name="Narendra Modi", slug="narendra-modi")
    db_session.add(celebrity)
    db_session.commit()
    db_session.refresh(celebrity)
    return celebrity


@pytest.fixture
def ledger(db_session, storage):
    return CampaignLedger(db_session, storage)


@pytest.fixture
def make_campaign(ledger, celebrity):
    """Create campaigns through the ledger with sensible defaults."""
    def _make_campaign(name="Modi 2024 Campaign", tokens=100, templates=None, **meta):
        templates = templates or [TemplateInputFactory.build(name="Diwali Celebration")]
        campaign_meta = CampaignCreate(name=name, celebrityId=celebrity.id, tokens=tokens, **meta)
        return ledger.create_campaign(campaign_meta, validate_bundle(templates), tokens)

    return _make_campaign


@pytest.fixture
def png_bytes():
    """A small valid PNG image."""
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), color=(200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()
