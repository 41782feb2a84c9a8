"""Shared pytest fixtures for the bookgen test suite."""

import httpx
import pytest
from unittest.mock import MagicMock, AsyncMock


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_db_url(tmp_path):
    """Return a URL for a temporary SQLite database file."""
    return f"sqlite+aiosqlite:///{tmp_path / 'test_bookgen.db'}"


@pytest.fixture
async def db_engine(tmp_db_url):
    """Return an async engine with the schema created."""
    from bookgen.database import create_engine_for, init_db
    engine = create_engine_for(tmp_db_url)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    from bookgen.database import make_session_factory
    return make_session_factory(db_engine)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(session):
    from bookgen.services.record_store import RecordStore
    return RecordStore(session)


@pytest.fixture
def lifecycle(store):
    from bookgen.services.lifecycle import LifecycleEngine
    return LifecycleEngine(store)


# ---------------------------------------------------------------------------
# Sample data fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
async def owner(store):
    """Insert and return the id of a sample user."""
    await store.create_user("alice")
    await store.commit()
    return "alice"


@pytest.fixture
async def sample_book(lifecycle, owner):
    """A fresh book with a 50,000-word target."""
    from bookgen.schemas.book import BookCreate
    return await lifecycle.create_book(owner, BookCreate(
        title="The Focused Founder",
        genre="Business",
        target_word_count=50000,
        description="Deep work habits for early-stage founders.",
        target_audience="First-time founders",
        key_points=["Attention", "Rituals"],
    ))


@pytest.fixture
def outline_data():
    from bookgen.schemas.outline import OutlineCreate, OutlineChapterPlan
    return OutlineCreate(
        title="The Focused Founder",
        chapters=[
            OutlineChapterPlan(id="chapter-1", title="Why Focus Wins", description="The case for focus.",
                               key_points=["Cost of switching"], estimated_word_count=4000),
            OutlineChapterPlan(id="chapter-2", title="Designing Your Day", description="Daily structure.",
                               key_points=["Time blocks"], estimated_word_count=6000),
        ],
    )


@pytest.fixture
async def sample_outline(lifecycle, owner, sample_book, outline_data):
    return await lifecycle.create_outline(owner, sample_book.id, outline_data)


@pytest.fixture
async def sample_chapter(lifecycle, owner, sample_book, sample_outline):
    from bookgen.schemas.chapter import ChapterCreate
    return await lifecycle.create_chapter(owner, sample_book.id, ChapterCreate(
        chapter_number=1,
        title="Why Focus Wins",
    ))


# ---------------------------------------------------------------------------
# AI mocks
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_ai_service():
    """Return a MagicMock standing in for AIService."""
    ai = MagicMock()
    ai.generate_text = AsyncMock(return_value={
        "content": "  Focus is a skill.\n\nIt can be trained.  ",
        "model": "openai/gpt-4o-mini",
        "usage": {"total_tokens": 42},
    })
    ai.generate_json = AsyncMock(return_value=[])
    return ai


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------

class StubPdfRenderer:
    """Records the HTML it is asked to render and returns fixed bytes."""

    def __init__(self):
        self.calls = []

    async def render(self, html_content: str, page_format: str) -> bytes:
        self.calls.append((html_content, page_format))
        return b"%PDF-1.4 stub"


@pytest.fixture
def pdf_renderer():
    return StubPdfRenderer()


@pytest.fixture
async def client(session_factory, mock_ai_service, pdf_renderer):
    """httpx client bound to the app, with the database and AI swapped out."""
    from bookgen.main import app
    from bookgen.database import get_db
    from bookgen.api.settings import get_user_ai_service
    from bookgen.api.books import get_pdf_renderer

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_user_ai_service] = lambda: mock_ai_service
    app.dependency_overrides[get_pdf_renderer] = lambda: pdf_renderer

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={"X-User-Id": "alice"},
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
