"""Vector store provider implementations.

ChromaDB is the sole vector store implementation. It stores chunk
embeddings on disk and supports cosine-distance search. Data persists at
VECTORSTORE_PERSIST_DIR (default: ./data/chromadb).

To swap ChromaDB for another vector database, create a new class
implementing IVectorStoreProvider and build it in notekb/main.py.
"""

from notekb.providers.vector_store.chromadb_provider import ChromaDBProvider

__all__ = ["ChromaDBProvider"]
