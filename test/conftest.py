"""
Shared fixtures and fakes for the Travel Companion test suite.

External services (Gemini, embeddings, Chroma, Supabase) are replaced by
in-memory fakes so the suite runs without API keys.
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from config import Config  # noqa: E402
from travel_companion.models import CityRecord  # noqa: E402
from travel_companion.rag.retriever import SemanticRetriever  # noqa: E402
from travel_companion.streaming import ResponseStreamer  # noqa: E402


CITY_DATA = [
    {
        "city": "Jaipur",
        "state": "Rajasthan",
        "avgHotelPerNight": 2500,
        "avgFoodPerDay": 800,
        "petrolPerKm": 7,
        "topSpots": [
            {"name": "Hawa Mahal", "type": "monument", "rating": 4.6},
            {"name": "Amber Fort", "type": "fort", "rating": 4.8},
        ],
        "reviews": [{"user": "asha", "text": "Pink city magic", "rating": 5}],
    },
    {
        "city": "Udaipur",
        "state": "Rajasthan",
        "avgHotelPerNight": 3000,
        "avgFoodPerDay": 900,
        "petrolPerKm": 7,
        "topSpots": [{"name": "Lake Pichola", "type": "lake", "rating": 4.7}],
        "reviews": [],
    },
    {
        "city": "Goa",
        "state": "Goa",
        "avgHotelPerNight": 3500,
        "avgFoodPerDay": 1200,
        "petrolPerKm": 8,
        "topSpots": [{"name": "Baga Beach", "type": "beach", "rating": 4.4}],
        "reviews": [{"user": "rohan", "text": "Beaches!", "rating": 4}],
    },
    {
        "city": "Manali",
        "state": "Himachal Pradesh",
        "avgHotelPerNight": 2000,
        "avgFoodPerDay": 700,
        "petrolPerKm": 9,
        "topSpots": [],
        "reviews": [],
    },
]

SNIPPET_ROWS = [
    {
        "content": "Start at Amber Fort early to beat the crowds.",
        "metadata": {"source": "jaipur_tips.txt"},
        "similarity": 0.91,
    },
    {
        "content": "Street food at Masala Chowk is cheap and tasty.",
        "metadata": {"source": "rajasthan_food.txt"},
        "similarity": 0.84,
    },
]


# ============================================================================
# FAKES
# ============================================================================


class FakeEmbeddings:
    """Embedding provider that returns a fixed vector or raises."""

    def __init__(self, vector: Optional[List[float]] = None, error: Optional[Exception] = None):
        self.vector = vector if vector is not None else [0.1, 0.2, 0.3]
        self.error = error
        self.queries: List[str] = []

    async def aembed_query(self, text: str) -> List[float]:
        self.queries.append(text)
        if self.error is not None:
            raise self.error
        return self.vector


class FakeVectorIndex:
    """Vector index returning canned rows or raising."""

    def __init__(self, rows: Optional[Sequence[Any]] = None, error: Optional[Exception] = None):
        self.rows = list(rows) if rows is not None else []
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def search(self, vector, k):
        self.calls.append({"vector": list(vector), "k": k})
        if self.error is not None:
            raise self.error
        return self.rows[:k]


class FakeChunk:
    def __init__(self, content):
        self.content = content


class FakeChatModel:
    """
    Chat model fake.

    ``chunks`` are streamed in order; if ``fail_after`` is set, the stream
    raises ``stream_error`` after that many chunks.
    """

    def __init__(
        self,
        chunks: Sequence[str] = ("Namaste! ", "Jaipur is ", "lovely."),
        reply: str = "Jaipur in 3 days? Easy peasy!",
        fail_after: Optional[int] = None,
        stream_error: Optional[Exception] = None,
        invoke_error: Optional[Exception] = None,
    ):
        self.chunks = list(chunks)
        self.reply = reply
        self.fail_after = fail_after
        self.stream_error = stream_error or RuntimeError("model stream broke")
        self.invoke_error = invoke_error
        self.received: List[Any] = []
        self.stream_closed = False
        self.chunks_sent = 0

    async def ainvoke(self, messages):
        self.received.append(messages)
        if self.invoke_error is not None:
            raise self.invoke_error
        return FakeChunk(self.reply)

    async def astream(self, messages):
        self.received.append(messages)
        try:
            for index, chunk in enumerate(self.chunks):
                if self.fail_after is not None and index >= self.fail_after:
                    raise self.stream_error
                self.chunks_sent += 1
                yield FakeChunk(chunk)
            if self.fail_after is not None and self.fail_after >= len(self.chunks):
                raise self.stream_error
        finally:
            self.stream_closed = True


class FakeIdentityVerifier:
    def __init__(self, users: Optional[Dict[str, Dict[str, Any]]] = None, error: Optional[Exception] = None):
        self.users = users or {}
        self.error = error

    def verify(self, token):
        if self.error is not None:
            raise self.error
        return self.users.get(token)


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def cities() -> List[CityRecord]:
    return [CityRecord.model_validate(item) for item in CITY_DATA]


@pytest.fixture
def jaipur(cities) -> CityRecord:
    return cities[0]


@pytest.fixture
def embeddings():
    return FakeEmbeddings()


@pytest.fixture
def vector_index():
    return FakeVectorIndex(SNIPPET_ROWS)


@pytest.fixture
def chat_model():
    return FakeChatModel()


@pytest.fixture
def retriever(embeddings, vector_index):
    return SemanticRetriever(embeddings, vector_index, top_k=3)


@pytest.fixture
def streamer(cities, retriever, chat_model):
    return ResponseStreamer(cities, retriever, chat_model, top_k=3)


@pytest.fixture
def test_config():
    return Config(
        google_api_key="test-key",
        auth_enabled=False,
        rate_limit_max_requests=1000,
    )


@pytest.fixture
def make_app(test_config):
    """Factory building an app around a given streamer; loops are stopped on teardown."""
    from app import create_app

    apps = []

    def _make(streamer=None, config=None, identity_verifier=None):
        app = create_app(
            config=config or test_config,
            streamer=streamer,
            identity_verifier=identity_verifier,
        )
        app.config["TESTING"] = True
        apps.append(app)
        return app

    yield _make

    for app in apps:
        loop = app.extensions.get("event_loop")
        if loop is not None:
            loop.stop()


@pytest.fixture
def client(make_app, streamer):
    return make_app(streamer).test_client()
