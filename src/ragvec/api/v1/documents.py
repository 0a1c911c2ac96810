import logging

from fastapi import APIRouter, Depends, status
from google import genai

from ragvec.api.deps import get_llm_client, get_vector_store
from ragvec.core.config import get_settings
from ragvec.core.exceptions import (
    DeletionError,
    DocumentValidationError,
    EmbeddingDimensionError,
    IngestionError,
    QueryError,
    SearchFailedError,
    StoreOperationError,
)
from ragvec.schemas.document import (
    BatchResult,
    DeleteRequest,
    DocumentBatch,
    SearchRequest,
    SearchResponse,
)
from ragvec.services import deletion_service, ingestion_service, search_service
from ragvec.storage.vector_store import VectorStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post("", response_model=BatchResult, status_code=status.HTTP_201_CREATED)
async def add_documents(
    data: DocumentBatch,
    llm_client: genai.Client = Depends(get_llm_client),
    vector_store: VectorStore = Depends(get_vector_store),
) -> BatchResult:
    settings = get_settings()
    try:
        return await ingestion_service.add_documents(
            vector_store,
            llm_client,
            data.documents,
            settings.gemini_embedding_model,
            vector_store.dimensions,
        )
    except EmbeddingDimensionError as e:
        raise DocumentValidationError(str(e)) from e
    except IngestionError as e:
        raise StoreOperationError("Ingestion", str(e)) from e


@router.post("/search", response_model=SearchResponse)
async def search_documents(
    data: SearchRequest,
    llm_client: genai.Client = Depends(get_llm_client),
    vector_store: VectorStore = Depends(get_vector_store),
) -> SearchResponse:
    settings = get_settings()
    try:
        documents = await search_service.search_documents(
            vector_store,
            llm_client,
            data.query,
            settings.gemini_embedding_model,
            vector_store.dimensions,
            top_k=data.top_k,
            include_embeddings=data.include_embeddings,
        )
    except QueryError as e:
        raise SearchFailedError(str(e)) from e
    return SearchResponse(documents=documents, total=len(documents))


@router.delete("", response_model=BatchResult)
async def delete_documents(
    data: DeleteRequest,
    vector_store: VectorStore = Depends(get_vector_store),
) -> BatchResult:
    try:
        return await deletion_service.delete_documents(vector_store, data.ids)
    except DeletionError as e:
        raise StoreOperationError("Deletion", str(e)) from e
