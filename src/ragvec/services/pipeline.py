import logging
from pathlib import Path

from google import genai

from ragvec.schemas.document import BatchResult, DocumentCreate
from ragvec.services.ingestion_service import add_documents
from ragvec.services.splitter import split_text
from ragvec.services.text_extraction import extract_pages_async
from ragvec.storage.vector_store import VectorStore

logger = logging.getLogger(__name__)


def build_chunk_documents(
    pages: list[str],
    source: str,
    chunk_size: int,
    chunk_overlap: int,
) -> list[DocumentCreate]:
    documents: list[DocumentCreate] = []
    for page_number, page_text in enumerate(pages, start=1):
        for chunk_index, chunk in enumerate(split_text(page_text, chunk_size, chunk_overlap)):
            documents.append(
                DocumentCreate(
                    text=chunk,
                    metadata={"source": source, "page": page_number, "chunk": chunk_index},
                )
            )
    return documents


async def process_file_pipeline(
    store: VectorStore,
    client: genai.Client,
    file_path: Path,
    source: str,
    embedding_model: str,
    dimensions: int,
    chunk_size: int,
    chunk_overlap: int,
) -> BatchResult:
    """Full pipeline: extract pages -> split into chunks -> embed -> insert."""
    pages = await extract_pages_async(file_path)
    documents = build_chunk_documents(pages, source, chunk_size, chunk_overlap)
    if not documents:
        logger.warning("No text extracted from %s", source)
        return BatchResult(requested=0, applied=0)

    result = await add_documents(store, client, documents, embedding_model, dimensions)
    logger.info("Stored %s as %d chunks from %d pages", source, result.applied, len(pages))
    return result
