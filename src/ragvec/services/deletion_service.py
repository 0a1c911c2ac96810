import logging

from ragvec.schemas.document import BatchResult
from ragvec.storage.vector_store import VectorStore

logger = logging.getLogger(__name__)


async def delete_documents(store: VectorStore, ids: list[int]) -> BatchResult:
    """Delete documents by id. An empty list is a no-op that reports success."""
    if not ids:
        return BatchResult(requested=0, applied=0)

    result = await store.delete(ids)
    if not result.complete:
        logger.warning(
            "Deleted %d of %d requested documents; unmatched ids: %s",
            result.applied,
            result.requested,
            result.missing,
        )
    return result
