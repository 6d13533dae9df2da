"""Retrieval-augmented question answering over the indexed notes.

Data flow of :meth:`QAService.ask`:

  1. RETRIEVE -- the retriever embeds the question and fetches the top-k
                 chunks from the vector store.
  2. CONTEXT  -- chunk texts are joined, in retrieval order, with blank
                 lines between them.
  3. PROMPT   -- the template's ``{context}`` and ``{question}`` fields are
                 filled in.
  4. COMPLETE -- the LLM is called exactly once with the rendered prompt.
  5. SOURCES  -- optionally, each retrieved chunk is returned as a short
                 preview with its provenance metadata.

The service starts *uninitialized* (no LLM bound).  :meth:`setup` binds an
LLM, either the one passed in or one built by the injected factory; the
first :meth:`ask` calls it implicitly.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import TYPE_CHECKING

import structlog

from notekb.interfaces.llm_provider import ILLMProvider
from notekb.models.rag import DocumentChunk, QAResult, SourceExcerpt
from notekb.utils.errors import ConfigurationError, NotConfiguredError

if TYPE_CHECKING:
    from notekb.interfaces.vector_store_provider import IVectorStoreProvider

logger = structlog.get_logger(logger_name=__name__)

# The "answer only from the notes, otherwise say so" instruction keeps
# answers grounded; custom templates should carry an equivalent one.
DEFAULT_QA_TEMPLATE = (
    "You are an assistant answering questions from the user's OneNote notes.\n"
    "Answer the question using only the notes below.\n\n"
    "If the notes do not contain the answer, say honestly: "
    '"I could not find this information in my notes." '
    "Do not make anything up.\n\n"
    "Notes:\n"
    "{context}\n\n"
    "Question: {question}\n\n"
    "Answer:"
)

SOURCE_PREVIEW_LENGTH = 200

_PLACEHOLDER = re.compile(r"\{(context|question)\}")


class QAService:
    """Answers questions with retrieved note chunks and an LLM.

    Parameters
    ----------
    vector_store:
        Store searched for context.
    llm_factory:
        Zero-argument callable building the default LLM on first use.  It
        may raise :class:`ConfigurationError` (e.g. a missing API key).
    k:
        Number of chunks retrieved per question (``None`` uses the store's
        default width).
    prompt_template:
        Template with ``{context}`` and ``{question}`` placeholders.
    temperature, max_tokens:
        Passed to every LLM call.
    """

    def __init__(
        self,
        vector_store: IVectorStoreProvider,
        llm_factory: Callable[[], ILLMProvider] | None = None,
        k: int | None = None,
        prompt_template: str | None = None,
        temperature: float = 0.0,
        max_tokens: int = 1024,
    ) -> None:
        template = prompt_template or DEFAULT_QA_TEMPLATE
        missing = [p for p in ("{context}", "{question}") if p not in template]
        if missing:
            raise ConfigurationError(
                message=f"prompt template is missing placeholder(s): {', '.join(missing)}"
            )
        self._vector_store = vector_store
        self._retriever = vector_store.as_retriever(k)
        self._llm_factory = llm_factory
        self._template = template
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._llm: ILLMProvider | None = None

    @property
    def is_ready(self) -> bool:
        return self._llm is not None

    def setup(self, llm: ILLMProvider | None = None) -> None:
        """Bind *llm*, or the factory's default LLM.  Replaces any earlier binding."""
        if llm is None:
            if self._llm_factory is None:
                raise NotConfiguredError(message="No language model given and no default available")
            try:
                llm = self._llm_factory()
            except ConfigurationError as exc:
                raise NotConfiguredError(
                    message=f"Default language model could not be built: {exc.message}",
                    provider_name=exc.provider_name,
                ) from exc
        self._llm = llm
        logger.info("qa_llm_bound", provider=llm.get_provider_name())

    async def ask(self, question: str, include_sources: bool = False) -> QAResult:
        """Answer *question* from the indexed notes.

        Raises
        ------
        NotConfiguredError
            If no LLM is bound and none can be built.
        NotInitializedError
            If the vector store has no collection yet.
        """
        if self._llm is None:
            self.setup()

        chunks = await self._retriever.get_relevant(question)
        prompt = self.render_prompt(self._build_context(chunks), question)
        answer = await self._llm.complete(
            prompt,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
        )
        logger.info(
            "question_answered",
            provider=self._llm.get_provider_name(),
            question_length=len(question),
            context_chunks=len(chunks),
            answer_length=len(answer),
        )

        sources = [self._to_excerpt(c) for c in chunks] if include_sources else None
        return QAResult(question=question, answer=answer, sources=sources)

    async def chat(self, question: str) -> str:
        """Return only the answer text for *question*."""
        result = await self.ask(question)
        return result.answer

    async def search_similar(self, query: str, k: int = 5) -> list[DocumentChunk]:
        """Retrieve the *k* nearest chunks without generating an answer."""
        return await self._vector_store.search(query, k)

    def render_prompt(self, context: str, question: str) -> str:
        values = {"context": context, "question": question}
        return _PLACEHOLDER.sub(lambda m: values[m.group(1)], self._template)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _build_context(chunks: list[DocumentChunk]) -> str:
        return "\n\n".join(chunk.text for chunk in chunks)

    @staticmethod
    def _to_excerpt(chunk: DocumentChunk) -> SourceExcerpt:
        content = chunk.text
        if len(content) > SOURCE_PREVIEW_LENGTH:
            content = content[:SOURCE_PREVIEW_LENGTH] + "..."
        return SourceExcerpt(content=content, metadata=dict(chunk.metadata))
