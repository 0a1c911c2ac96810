import logging

from google import genai

from ragvec.core.exceptions import QueryError
from ragvec.schemas.document import Document
from ragvec.services.embedding_service import generate_embedding
from ragvec.storage.vector_store import VectorStore

logger = logging.getLogger(__name__)


async def search_documents(
    store: VectorStore,
    client: genai.Client,
    query: str,
    embedding_model: str,
    dimensions: int,
    top_k: int = 4,
    include_embeddings: bool = False,
) -> list[Document]:
    """Embed the query text and return the top_k nearest documents."""
    if not query.strip():
        raise QueryError("Query text must not be empty")
    if top_k < 1:
        raise QueryError(f"top_k must be at least 1, got {top_k}")

    try:
        query_embedding = await generate_embedding(
            client, query, embedding_model, task_type="RETRIEVAL_QUERY", dimensions=dimensions
        )
    except Exception as e:
        logger.error("Query embedding failed: %s", e)
        raise QueryError(f"Query embedding failed: {e}") from e

    documents = await store.search(
        query_embedding, top_k=top_k, include_embeddings=include_embeddings
    )
    logger.debug("Search returned %d of top %d documents", len(documents), top_k)
    return documents
