"""
Job description document store.

Serves job-description text by identifier from a local directory or an HTTP
endpoint (e.g. a blob container URL). ``JobDescriptionProvider`` wraps a
store and substitutes a generic description when the document cannot be
fetched, so a session never aborts on a storage failure.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path

import httpx

logger = logging.getLogger(__name__)

FALLBACK_JD_TEMPLATE = (
    "JD Fetch Failed for {jd_id}. Default Role: Senior Consultant. "
    "Key Skills: Leadership, Project Management, Azure."
)


class JobDescriptionNotFound(LookupError):
    """Raised when the store has no document for an identifier."""


class JobDescriptionStoreError(Exception):
    """Raised when the store cannot be reached or read."""


def _read_docx(file_path: Path) -> str:
    """
    Read text content from a .docx file.

    Args:
        file_path: Path to the .docx file.

    Returns:
        Extracted text content.
    """
    from docx import Document
    from docx.opc.exceptions import PackageNotFoundError

    try:
        doc = Document(str(file_path))
    except PackageNotFoundError as e:
        raise ValueError(f"Not a valid .docx file: {file_path.name}") from e
    paragraphs = [para.text for para in doc.paragraphs if para.text.strip()]
    return "\n".join(paragraphs)


class JobDescriptionStoreBase(ABC):
    """Abstract base class for job description stores."""

    @abstractmethod
    async def fetch(self, jd_id: str) -> str:
        """
        Fetch the full text of a job description.

        Args:
            jd_id: Document identifier (file name).

        Returns:
            The document text.

        Raises:
            JobDescriptionNotFound: If no such document exists.
            JobDescriptionStoreError: If the store cannot be read.
        """
        ...

    async def close(self) -> None:
        """Release any held resources."""


class FileJobDescriptionStore(JobDescriptionStoreBase):
    """Job descriptions stored as files in a local directory."""

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory).expanduser().resolve()

    def _resolve(self, jd_id: str) -> Path:
        path = (self._directory / jd_id).resolve()
        if self._directory not in path.parents:
            raise JobDescriptionNotFound(f"Job description outside store: {jd_id}")
        if not path.is_file():
            raise JobDescriptionNotFound(f"Job description file not found: {jd_id}")
        return path

    def _read_sync(self, jd_id: str) -> str:
        path = self._resolve(jd_id)
        try:
            if path.suffix.lower() == ".docx":
                return _read_docx(path)
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError, ValueError) as e:
            raise JobDescriptionStoreError(f"Failed to read {jd_id}: {e}") from e

    async def fetch(self, jd_id: str) -> str:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._read_sync, jd_id)


class HttpJobDescriptionStore(JobDescriptionStoreBase):
    """Job descriptions served over HTTP at ``{base_url}/{jd_id}``."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the store.

        Args:
            base_url: URL of the container or directory listing the documents.
            timeout: Request timeout in seconds.
            headers: Extra request headers (e.g. a SAS or auth header).
            transport: Optional httpx transport, mainly for tests.
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._headers = headers or {}
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers=self._headers,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def fetch(self, jd_id: str) -> str:
        client = await self._get_client()
        url = f"{self._base_url}/{jd_id}"
        try:
            response = await client.get(url)
        except httpx.HTTPError as e:
            raise JobDescriptionStoreError(f"Failed to fetch {jd_id}: {e}") from e

        if response.status_code == 404:
            raise JobDescriptionNotFound(f"Job description file not found: {jd_id}")
        if response.status_code >= 400:
            raise JobDescriptionStoreError(
                f"Store returned HTTP {response.status_code} for {jd_id}"
            )
        return response.text


class JobDescriptionProvider:
    """
    Loads job-description text for a session.

    Falls back to a generic description when the store reports the document
    missing or fails.
    """

    def __init__(self, store: JobDescriptionStoreBase) -> None:
        self._store = store

    @staticmethod
    def fallback_text(jd_id: str) -> str:
        return FALLBACK_JD_TEMPLATE.format(jd_id=jd_id)

    async def load(self, jd_id: str) -> str:
        """
        Load a job description, never raising.

        Args:
            jd_id: Document identifier.

        Returns:
            Document text, or the generic fallback description.
        """
        try:
            text = await self._store.fetch(jd_id)
        except JobDescriptionNotFound as e:
            logger.warning(f"{e}; using fallback job description")
            return self.fallback_text(jd_id)
        except JobDescriptionStoreError as e:
            logger.error(f"Error fetching JD ({jd_id}): {e}; using fallback job description")
            return self.fallback_text(jd_id)

        if not text.strip():
            logger.warning(f"Job description {jd_id} is empty; using fallback job description")
            return self.fallback_text(jd_id)
        return text

    async def close(self) -> None:
        await self._store.close()
