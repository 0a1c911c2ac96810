import logging
from typing import Any

from google import genai

from ragvec.core.exceptions import EmbeddingDimensionError, IngestionError
from ragvec.schemas.document import BatchResult, DocumentCreate
from ragvec.services.embedding_service import generate_embeddings
from ragvec.storage.vector_store import VectorStore

logger = logging.getLogger(__name__)


def _to_str(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def coerce_metadata(metadata: dict[str, Any] | None) -> dict[str, str]:
    """Stored metadata is a flat bag of strings; value types are not kept."""
    return {str(key): _to_str(value) for key, value in (metadata or {}).items()}


async def add_documents(
    store: VectorStore,
    client: genai.Client,
    documents: list[DocumentCreate],
    embedding_model: str,
    dimensions: int,
) -> BatchResult:
    """Embed the documents that carry no vector yet and insert the whole batch."""
    if not documents:
        return BatchResult(requested=0, applied=0)

    embeddings: list[list[float] | None] = [doc.embedding for doc in documents]
    for i, embedding in enumerate(embeddings):
        if embedding is not None and len(embedding) != dimensions:
            raise EmbeddingDimensionError(
                f"Document at position {i} has a {len(embedding)}-dimension embedding, "
                f"expected {dimensions}"
            )
    pending = [i for i, embedding in enumerate(embeddings) if embedding is None]

    if pending:
        try:
            generated = await generate_embeddings(
                client,
                [documents[i].text for i in pending],
                embedding_model,
                dimensions=dimensions,
            )
        except Exception as e:
            logger.error("Embedding %d documents failed: %s", len(pending), e)
            raise IngestionError(f"Embedding failed: {e}") from e
        for i, embedding in zip(pending, generated, strict=True):
            embeddings[i] = embedding

    vectors: list[list[float]] = []
    for i, embedding in enumerate(embeddings):
        if embedding is None or len(embedding) != dimensions:
            size = 0 if embedding is None else len(embedding)
            raise IngestionError(
                f"Embedding provider returned {size} dimensions for document {i}, "
                f"expected {dimensions}"
            )
        vectors.append(embedding)

    result = await store.add(
        texts=[doc.text for doc in documents],
        embeddings=vectors,
        metadatas=[coerce_metadata(doc.metadata) for doc in documents],
    )
    logger.info(
        "Ingested %d documents (%d embedded here)", result.applied, len(pending)
    )
    return result
