import pytest

from backend.app.config import Settings
from backend.app.services.store import InMemoryStore
from backend.app.services.youtube_client import FallbackPolicy, YouTubeClient
from backend.main import build_services
from backend.tests.fakes import ExplodingHttp


@pytest.fixture
def settings():
    return Settings(youtube_api_key=None, fallback_policy=FallbackPolicy.SYNTHETIC)


@pytest.fixture
def services(settings):
    youtube = YouTubeClient(api_key=None, http=ExplodingHttp())
    return build_services(settings, store=InMemoryStore(), youtube=youtube)
