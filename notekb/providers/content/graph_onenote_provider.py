"""Microsoft Graph OneNote content source.

Implements :class:`IContentSource` over the Graph v1.0 REST API with an
``httpx.AsyncClient``:

    GET /me/onenote/notebooks
    GET /me/onenote/notebooks/{id}/sections
    GET /me/onenote/sections/{id}/pages
    GET /me/onenote/pages/{id}/content

List responses are paged; the ``@odata.nextLink`` URL of each page is
followed until it is absent.  Every transport or HTTP failure becomes a
:class:`~notekb.utils.errors.SourceFetchError`.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from notekb.interfaces.auth_provider import IAuthProvider
from notekb.interfaces.content_source import IContentSource
from notekb.models.onenote import Notebook, PageInfo, Section
from notekb.utils.errors import SourceFetchError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_ENDPOINT = "https://graph.microsoft.com/v1.0"
_DEFAULT_TIMEOUT = 30.0


class GraphOneNoteProvider(IContentSource):
    """OneNote content source backed by Microsoft Graph.

    Authorization headers come from the injected :class:`IAuthProvider`
    on every request.  An externally supplied *http_client* is used as is
    and never closed by this provider.
    """

    def __init__(
        self,
        auth_provider: IAuthProvider,
        endpoint: str = _DEFAULT_ENDPOINT,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        self._auth = auth_provider
        self._endpoint = endpoint.rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
        )

    # ------------------------------------------------------------------
    # IContentSource implementation
    # ------------------------------------------------------------------

    async def list_notebooks(self) -> list[Notebook]:
        items = await self._get_paged(f"{self._endpoint}/me/onenote/notebooks")
        return [self._parse(Notebook, item) for item in items]

    async def list_sections(self, notebook_id: str) -> list[Section]:
        items = await self._get_paged(
            f"{self._endpoint}/me/onenote/notebooks/{notebook_id}/sections"
        )
        return [self._parse(Section, item) for item in items]

    async def list_pages(self, section_id: str) -> list[PageInfo]:
        items = await self._get_paged(
            f"{self._endpoint}/me/onenote/sections/{section_id}/pages"
        )
        return [self._parse(PageInfo, item) for item in items]

    async def get_page_content(self, page_id: str) -> str:
        response = await self._request(f"{self._endpoint}/me/onenote/pages/{page_id}/content")
        return response.text

    def get_provider_name(self) -> str:
        return "graph_onenote"

    async def close(self) -> None:
        """Close the underlying HTTP client if this provider created it."""
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    async def _request(self, url: str) -> httpx.Response:
        headers = await self._auth.get_headers()
        try:
            response = await self._client.get(url, headers=headers)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise SourceFetchError(
                message=f"Timeout fetching {url}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise SourceFetchError(
                message=f"HTTP {exc.response.status_code} for {url}",
                provider_name=self.get_provider_name(),
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise SourceFetchError(
                message=f"HTTP error fetching {url}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return response

    async def _get_paged(self, url: str) -> list[dict[str, Any]]:
        """Collect the ``value`` arrays of every page of a Graph list response."""
        items: list[dict[str, Any]] = []
        next_url: str | None = url
        while next_url:
            response = await self._request(next_url)
            try:
                payload = response.json()
            except ValueError as exc:
                raise SourceFetchError(
                    message=f"Invalid JSON from {next_url}: {exc}",
                    provider_name=self.get_provider_name(),
                    status_code=response.status_code,
                ) from exc
            items.extend(payload.get("value") or [])
            next_url = payload.get("@odata.nextLink")
        logger.debug("graph_list_fetched", url=url, count=len(items))
        return items

    def _parse(self, model: type, item: dict[str, Any]) -> Any:
        try:
            return model.model_validate(item)
        except ValidationError as exc:
            raise SourceFetchError(
                message=f"Unexpected {model.__name__} record from Graph: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
