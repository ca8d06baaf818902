"""
Snapshot synchronization for Taby.

Fetches the compressed snapshot from a gist, decodes it, resolves card
favicons, and serves it through the snapshot cache. The orchestrator keeps no
state of its own between calls; the cache is the only shared state.
"""
import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp

from taby.cache import SnapshotCache
from taby.config import GistCredentials
from taby.constants import DEFAULT_REQUEST_TIMEOUT, GITHUB_API_VERSION, SNAPSHOT_FILES
from taby.decompress import parse_gist_files
from taby.favicons import enrich_cards_with_favicons
from taby.models import SyncData

logger = logging.getLogger(__name__)


class SyncFetchError(Exception):
    """The gist could not be fetched (network, auth, or bad response)."""

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


class SyncOrchestrator:
    """
    Fetch-or-cache access to the current snapshot.

    Within one ``get_snapshot`` call the cache read happens before the fetch
    and the fetch before the cache write. Failures are not retried.
    """

    def __init__(self, cache: SnapshotCache, timeout: float = DEFAULT_REQUEST_TIMEOUT,
                 user_agent: str = "Taby/0.1",
                 session: Optional[aiohttp.ClientSession] = None):
        """
        Initialize the orchestrator.

        Args:
            cache: Snapshot cache
            timeout: Request timeout in seconds
            user_agent: User-Agent header for gist requests
            session: Shared aiohttp session; a fresh one is opened per fetch
                when omitted
        """
        self.cache = cache
        self.timeout = timeout
        self.user_agent = user_agent
        self.session = session

    def _headers(self, credentials: GistCredentials) -> Dict[str, str]:
        return {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {credentials.access_token}",
            "Content-Type": "application/json",
            "User-Agent": self.user_agent,
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }

    async def get_snapshot(self, credentials: GistCredentials) -> SyncData:
        """
        Return the current snapshot, from cache when fresh.

        Raises:
            SyncFetchError: on a cache miss followed by a failed fetch
            MalformedSnapshotError: if the fetched blobs cannot be decoded
        """
        cached = await self.cache.read(credentials)
        if cached is not None:
            return cached

        return await self._fetch_and_store(credentials)

    async def refresh(self, credentials: GistCredentials) -> SyncData:
        """Drop the cached snapshot and fetch a new one."""
        await self.cache.invalidate(credentials)
        return await self._fetch_and_store(credentials)

    async def _fetch_and_store(self, credentials: GistCredentials) -> SyncData:
        data = await self.fetch_remote(credentials)
        await self.cache.write(credentials, data)
        return data

    async def fetch_remote(self, credentials: GistCredentials) -> SyncData:
        """
        Fetch, decode and enrich the snapshot, bypassing the cache.

        Raises:
            SyncFetchError: on network, auth or response errors
            MalformedSnapshotError: if a blob cannot be decoded
        """
        logger.info(f"Fetching snapshot from {credentials.gist_url}")
        if self.session is not None:
            files = await self._fetch_files(self.session, credentials)
        else:
            async with aiohttp.ClientSession() as session:
                files = await self._fetch_files(session, credentials)

        data = parse_gist_files(files)
        enrich_cards_with_favicons(data)
        logger.info(
            f"Fetched {len(data.spaces)} spaces, {len(data.collections)} collections, "
            f"{len(data.cards)} cards"
        )
        return data

    async def _fetch_files(self, session: aiohttp.ClientSession,
                           credentials: GistCredentials) -> Dict[str, Any]:
        gist = await self._get(session, credentials.gist_url, credentials, as_json=True)
        if not isinstance(gist, dict) or not isinstance(gist.get("files"), dict):
            raise SyncFetchError("Gist response has no 'files' object")

        files = {}
        for name in SNAPSHOT_FILES:
            file = gist["files"].get(name)
            if not isinstance(file, dict):
                continue
            # Large gist files are truncated in the API response
            if file.get("truncated") and file.get("raw_url"):
                logger.debug(f"Fetching truncated blob '{name}' from raw_url")
                file = {"content": await self._get(session, file["raw_url"], credentials)}
            files[name] = file
        return files

    async def _get(self, session: aiohttp.ClientSession, url: str,
                   credentials: GistCredentials, as_json: bool = False):
        try:
            async with session.get(
                url,
                headers=self._headers(credentials),
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                if not 200 <= response.status < 300:
                    raise SyncFetchError(
                        f"GET {url} failed with HTTP {response.status}",
                        status=response.status,
                    )
                if as_json:
                    return await response.json(content_type=None)
                return await response.text()
        except asyncio.TimeoutError as e:
            raise SyncFetchError(f"GET {url} timed out") from e
        except aiohttp.ClientError as e:
            raise SyncFetchError(f"GET {url} failed: {e}") from e
        except ValueError as e:
            raise SyncFetchError(f"GET {url} returned invalid JSON: {e}") from e
