"""Application services: ingestion, retrieval and question answering."""

from notekb.services.qa_service import DEFAULT_QA_TEMPLATE, QAService
from notekb.services.retriever import VectorStoreRetriever

__all__ = ["DEFAULT_QA_TEMPLATE", "QAService", "VectorStoreRetriever"]
