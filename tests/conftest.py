"""Shared pytest fixtures for the notekb test suite."""

from __future__ import annotations

import hashlib
import math
import re
from typing import Any

import pytest

from notekb.interfaces.content_source import IContentSource
from notekb.interfaces.embedding_provider import IEmbeddingProvider
from notekb.interfaces.vector_store_provider import IVectorStoreProvider
from notekb.models.onenote import Notebook, PageInfo, Section
from notekb.models.rag import CollectionStats, DocumentChunk, RetrievedChunk
from notekb.utils.errors import NotInitializedError, SourceFetchError

_WORD = re.compile(r"\w+")


# ---------------------------------------------------------------------------
# Mocks
# ---------------------------------------------------------------------------


class MockEmbeddingProvider(IEmbeddingProvider):
    """Deterministic bag-of-words hashing embedder.

    Texts sharing words get nearby vectors, which is enough for real
    ChromaDB searches to rank meaningfully.  Every ``embed`` call is
    recorded in :attr:`batch_sizes`.
    """

    def __init__(self, dimension: int = 64) -> None:
        self._dimension = dimension
        self.batch_sizes: list[int] = []
        self.query_count = 0

    def _vector(self, text: str) -> list[float]:
        vector = [0.0] * self._dimension
        for word in _WORD.findall(text.lower()):
            digest = hashlib.md5(word.encode("utf-8")).digest()
            vector[digest[0] % self._dimension] += 1.0
        norm = math.sqrt(sum(v * v for v in vector))
        if norm == 0:
            vector[0] = 1.0
            return vector
        return [v / norm for v in vector]

    async def embed(self, texts: list[str]) -> list[list[float]]:
        self.batch_sizes.append(len(texts))
        return [self._vector(t) for t in texts]

    async def embed_single(self, text: str) -> list[float]:
        self.query_count += 1
        return self._vector(text)

    def get_dimension(self) -> int:
        return self._dimension

    def get_provider_name(self) -> str:
        return "mock_embedding"

    def is_available(self) -> bool:
        return True


class MockContentSource(IContentSource):
    """In-memory OneNote hierarchy.

    *tree* maps notebook name -> section name -> list of page dicts with
    ``id``, ``title`` and ``html`` keys (plus any Graph page fields).
    Page ids listed in *failing_pages* raise ``SourceFetchError`` on fetch.
    """

    def __init__(
        self,
        tree: dict[str, dict[str, list[dict[str, Any]]]],
        failing_pages: set[str] | None = None,
    ) -> None:
        self._failing = failing_pages or set()
        self._notebooks: list[Notebook] = []
        self._sections: dict[str, list[Section]] = {}
        self._pages: dict[str, list[PageInfo]] = {}
        self._html: dict[str, str] = {}
        self.fetched: list[str] = []

        for nb_index, (nb_name, sections) in enumerate(tree.items()):
            nb_id = f"nb-{nb_index}"
            self._notebooks.append(Notebook(id=nb_id, display_name=nb_name))
            self._sections[nb_id] = []
            for sec_index, (sec_name, pages) in enumerate(sections.items()):
                sec_id = f"{nb_id}-sec-{sec_index}"
                self._sections[nb_id].append(Section(id=sec_id, display_name=sec_name))
                self._pages[sec_id] = []
                for page in pages:
                    fields = {k: v for k, v in page.items() if k != "html"}
                    self._pages[sec_id].append(PageInfo.model_validate(fields))
                    self._html[page["id"]] = page.get("html", "")

    async def list_notebooks(self) -> list[Notebook]:
        return list(self._notebooks)

    async def list_sections(self, notebook_id: str) -> list[Section]:
        return list(self._sections[notebook_id])

    async def list_pages(self, section_id: str) -> list[PageInfo]:
        return list(self._pages[section_id])

    async def get_page_content(self, page_id: str) -> str:
        self.fetched.append(page_id)
        if page_id in self._failing:
            raise SourceFetchError(
                message=f"HTTP 500 for page {page_id}",
                provider_name="mock_source",
                status_code=500,
            )
        return self._html[page_id]

    def get_provider_name(self) -> str:
        return "mock_source"


class MockVectorStore(IVectorStoreProvider):
    """In-memory vector store that records every add_documents call.

    Search ranks by dot product of the mock embedding vectors.
    """

    def __init__(self, embedding: MockEmbeddingProvider | None = None) -> None:
        self._embedding = embedding or MockEmbeddingProvider()
        self._rows: dict[str, tuple[DocumentChunk, list[float]]] = {}
        self._ready = False
        self.add_calls: list[int] = []

    async def initialize(self) -> None:
        self._ready = bool(self._rows)

    async def add_documents(self, chunks, batch_size=50, stop_event=None) -> int:  # noqa: ANN001
        self.add_calls.append(len(chunks))
        if not chunks:
            return 0
        vectors = await self._embedding.embed([c.text for c in chunks])
        for chunk, vector in zip(chunks, vectors, strict=True):
            chunk_id = chunk.chunk_id or f"row-{len(self._rows)}"
            self._rows[chunk_id] = (chunk.model_copy(update={"chunk_id": chunk_id}), vector)
        self._ready = True
        return len(chunks)

    async def search(self, query: str, k: int | None = None) -> list[DocumentChunk]:
        return [hit.chunk for hit in await self.search_with_scores(query, k)]

    async def search_with_scores(self, query: str, k: int | None = None) -> list[RetrievedChunk]:
        if not self._ready:
            raise NotInitializedError(provider_name="mock_store")
        query_vec = await self._embedding.embed_single(query)
        hits = [
            RetrievedChunk(chunk=chunk, distance=1.0 - sum(a * b for a, b in zip(query_vec, vec)))
            for chunk, vec in self._rows.values()
        ]
        hits.sort(key=lambda h: h.distance)
        return hits[: k or 4]

    async def describe(self) -> CollectionStats:
        return CollectionStats(
            collection_name="mock",
            document_count=len(self._rows),
            persist_directory="memory",
        )

    async def delete_collection(self) -> None:
        self._rows.clear()
        self._ready = False

    def is_ready(self) -> bool:
        return self._ready

    def get_provider_name(self) -> str:
        return "mock_store"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def make_chunk(text: str = "test text", **metadata: Any) -> DocumentChunk:
    meta = {"source": "onenote", "page_id": "p1", "title": "Page"}
    meta.update(metadata)
    return DocumentChunk(text=text, metadata=meta)


def page_html(body: str, title: str = "Page") -> str:
    return (
        "<html><head>"
        f"<title>{title}</title>"
        '<meta name="created" content="2024-01-01T00:00:00.0000000" />'
        "</head>"
        f"<body>{body}</body></html>"
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_embedding() -> MockEmbeddingProvider:
    return MockEmbeddingProvider()


@pytest.fixture
def mock_vector_store(mock_embedding) -> MockVectorStore:
    return MockVectorStore(mock_embedding)


@pytest.fixture
def persist_dir(tmp_path) -> str:
    return str(tmp_path / "chroma")


@pytest.fixture
def sample_tree() -> dict[str, dict[str, list[dict[str, Any]]]]:
    """Two notebooks, three sections, four pages."""
    return {
        "Work": {
            "Meetings": [
                {
                    "id": "p-standup",
                    "title": "Standup",
                    "createdDateTime": "2024-03-01T09:00:00Z",
                    "lastModifiedDateTime": "2024-03-02T10:30:00Z",
                    "links": {"oneNoteWebUrl": {"href": "https://onenote.example/standup"}},
                    "html": page_html("<p>The release is planned for Friday.</p>"),
                },
                {
                    "id": "p-retro",
                    "title": "Retro",
                    "html": page_html("<p>Deploys were too slow.</p><p>Add caching.</p>"),
                },
            ],
            "Projects": [
                {
                    "id": "p-empty",
                    "title": None,
                    "html": page_html(""),
                },
            ],
        },
        "Personal": {
            "Recipes": [
                {
                    "id": "p-bread",
                    "title": "Bread",
                    "html": page_html("<p>Flour, water, salt and yeast.</p>"),
                },
            ],
        },
    }


@pytest.fixture
def mock_source(sample_tree) -> MockContentSource:
    return MockContentSource(sample_tree)
