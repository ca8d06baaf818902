import pytest
import json
import tempfile
import shutil

from lzstring import LZString

from taby.config import GistCredentials
from taby.models import SyncData


def compress(records) -> str:
    """Compress records the way the browser extension stores them."""
    return LZString().compressToUTF16(json.dumps(records, ensure_ascii=False))


@pytest.fixture
def sample_records():
    """Flat snapshot records as stored in the gist (camelCase, uncompressed)."""
    return {
        "spaces": [
            {"id": 2, "title": "Work", "order": 1, "icon": "briefcase"},
            {"id": 1, "title": "Personal", "order": 0},
        ],
        "collections": [
            {"id": 10, "title": "Reading", "spaceId": 1, "order": 1, "labelIds": [100, 999]},
            {"id": 11, "title": "Search Engines", "spaceId": 1, "order": 0, "labelIds": []},
            {"id": 20, "title": "Tools", "spaceId": 2, "order": 0, "labelIds": [101]},
        ],
        "labels": [
            {"id": 100, "title": "later", "color": "#ff0000"},
            {"id": 101, "title": "dev", "color": "#00ff00"},
        ],
        "cards": [
            {
                "id": 1000, "title": "Python Documentation", "url": "https://docs.python.org",
                "description": "Official Python documentation", "collectionId": 10, "order": 2,
            },
            {
                "id": 1001, "title": "百度", "url": "https://www.baidu.com",
                "description": "", "collectionId": 11, "order": 0, "faviconId": 5,
            },
            {
                "id": 1002, "title": "GitHub", "url": "https://github.com",
                "description": "Code hosting platform", "collectionId": 20, "order": 0,
                "favicon": "https://github.githubassets.com/favicon.ico",
            },
            {
                "id": 1003, "title": "Extensions", "url": "chrome://extensions",
                "description": "", "collectionId": 10, "order": 1,
            },
        ],
        "favicons": [
            {"id": 5, "url": "https://www.baidu.com/favicon.ico"},
        ],
    }


@pytest.fixture
def sample_snapshot(sample_records):
    """The sample records as a SyncData snapshot."""
    return SyncData.from_dict(sample_records)


@pytest.fixture
def gist_files(sample_records):
    """The gist API ``files`` object for the sample records."""
    return {name: {"filename": name, "content": compress(records)}
            for name, records in sample_records.items()}


@pytest.fixture
def credentials():
    return GistCredentials(provider="github", gist_id="abc123", access_token="ghp_secret")


@pytest.fixture
def temp_data_dir():
    """Create a temporary data directory for storage and cache."""
    temp_dir = tempfile.mkdtemp(prefix="taby_test_")
    yield temp_dir
    shutil.rmtree(temp_dir)


class FakeClock:
    """Controllable replacement for time.time."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
