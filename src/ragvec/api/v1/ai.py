"""Chat, RAG, embedding and file store endpoints under ``/ai``."""

import logging
import uuid
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Depends, Query, UploadFile
from fastapi.responses import PlainTextResponse
from google import genai

from ragvec.api.deps import get_file_storage, get_llm_client, get_vector_store
from ragvec.core.config import get_settings
from ragvec.core.exceptions import (
    AIServiceError,
    DeletionError,
    ExtractionError,
    FileValidationError,
    IngestionError,
    QueryError,
    SearchFailedError,
    StoreOperationError,
)
from ragvec.schemas.document import BatchResult, MessageRequest
from ragvec.services import deletion_service, pipeline, rag_service, search_service
from ragvec.services.embedding_service import generate_embedding
from ragvec.storage.base import FileStorage
from ragvec.storage.vector_store import VectorStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai", tags=["ai"])

DEFAULT_MESSAGE = "Give me a trading strategy"


def _validate_upload(file: UploadFile) -> None:
    settings = get_settings()
    if not file.filename:
        raise FileValidationError("Filename is required")

    ext = Path(file.filename).suffix.lower()
    if ext not in settings.allowed_extensions:
        raise FileValidationError(
            f"File type '{ext}' not allowed. Allowed: {', '.join(sorted(settings.allowed_extensions))}"
        )


async def _generate(llm_client: genai.Client, message: str) -> dict[str, str]:
    settings = get_settings()
    try:
        answer = await rag_service.generate_answer(llm_client, message, settings.gemini_model)
    except Exception as e:
        raise AIServiceError(str(e)) from e
    return {"generation": answer}


async def _rag(
    llm_client: genai.Client, vector_store: VectorStore, message: str
) -> dict[str, str]:
    settings = get_settings()
    template = await rag_service.load_prompt_template_async(settings.prompt_template_path)
    try:
        answer = await rag_service.answer_question(
            vector_store,
            llm_client,
            message,
            model=settings.gemini_model,
            embedding_model=settings.gemini_embedding_model,
            dimensions=vector_store.dimensions,
            top_k=settings.rag_top_k,
            template=template,
        )
    except QueryError as e:
        raise SearchFailedError(str(e)) from e
    except Exception as e:
        raise AIServiceError(str(e)) from e
    return {"generation": answer}


async def _embed(
    llm_client: genai.Client, vector_store: VectorStore, message: str
) -> dict[str, list[float]]:
    settings = get_settings()
    try:
        embedding = await generate_embedding(
            llm_client,
            message,
            settings.gemini_embedding_model,
            dimensions=vector_store.dimensions,
        )
    except Exception as e:
        raise AIServiceError(str(e)) from e
    return {"embedding": embedding}


@router.get("/ping", response_class=PlainTextResponse)
async def ping(message: str = Query("ping success")) -> str:
    return f"Hello: {message}"


@router.get("/generate")
async def generate_get(
    message: str = Query(DEFAULT_MESSAGE),
    llm_client: genai.Client = Depends(get_llm_client),
) -> dict[str, str]:
    return await _generate(llm_client, message)


@router.post("/generate")
async def generate_post(
    data: MessageRequest,
    llm_client: genai.Client = Depends(get_llm_client),
) -> dict[str, str]:
    return await _generate(llm_client, data.message)


@router.get("/rag")
async def rag_get(
    message: str = Query(DEFAULT_MESSAGE),
    llm_client: genai.Client = Depends(get_llm_client),
    vector_store: VectorStore = Depends(get_vector_store),
) -> dict[str, str]:
    return await _rag(llm_client, vector_store, message)


@router.post("/rag")
async def rag_post(
    data: MessageRequest,
    llm_client: genai.Client = Depends(get_llm_client),
    vector_store: VectorStore = Depends(get_vector_store),
) -> dict[str, str]:
    return await _rag(llm_client, vector_store, data.message)


@router.get("/embedding")
async def embedding_get(
    message: str = Query(DEFAULT_MESSAGE),
    llm_client: genai.Client = Depends(get_llm_client),
    vector_store: VectorStore = Depends(get_vector_store),
) -> dict[str, list[float]]:
    return await _embed(llm_client, vector_store, message)


@router.post("/embedding")
async def embedding_post(
    data: MessageRequest,
    llm_client: genai.Client = Depends(get_llm_client),
    vector_store: VectorStore = Depends(get_vector_store),
) -> dict[str, list[float]]:
    return await _embed(llm_client, vector_store, data.message)


@router.post("/store")
async def store_file(
    file: UploadFile,
    storage: FileStorage = Depends(get_file_storage),
    llm_client: genai.Client = Depends(get_llm_client),
    vector_store: VectorStore = Depends(get_vector_store),
) -> dict[str, Any]:
    """Store a PDF, DOCX or TXT file as embedded chunks."""
    _validate_upload(file)

    settings = get_settings()
    content = await file.read()
    if not content:
        raise FileValidationError("Failed to upload empty file.")
    max_bytes = settings.max_upload_size_mb * 1024 * 1024
    if len(content) > max_bytes:
        raise FileValidationError(f"File size exceeds maximum of {settings.max_upload_size_mb}MB")

    original_filename = Path(file.filename or "unknown").name
    file_path = await storage.save(content, original_filename, subdir=f"uploads_{uuid.uuid4().hex}")

    try:
        abs_path = await storage.retrieve(file_path)
        result: BatchResult = await pipeline.process_file_pipeline(
            vector_store,
            llm_client,
            abs_path,
            source=original_filename,
            embedding_model=settings.gemini_embedding_model,
            dimensions=vector_store.dimensions,
            chunk_size=settings.chunk_size,
            chunk_overlap=settings.chunk_overlap,
        )
    except ExtractionError as e:
        raise FileValidationError(str(e)) from e
    except IngestionError as e:
        raise StoreOperationError("Ingestion", str(e)) from e
    finally:
        await storage.delete(file_path)

    return {"detail": f"File stored successfully {original_filename}", "result": result}


@router.get("/delete")
async def delete_by_query(
    ids: list[int] | None = Query(None, alias="id"),
    vector_store: VectorStore = Depends(get_vector_store),
) -> dict[str, str]:
    if not ids:
        return {"return": "No IDs provided"}
    try:
        result = await deletion_service.delete_documents(vector_store, ids)
    except DeletionError as e:
        raise StoreOperationError("Deletion", str(e)) from e
    return {"return": "true" if result.complete else "false"}


@router.post("/search-similar")
async def search_similar(
    data: MessageRequest,
    llm_client: genai.Client = Depends(get_llm_client),
    vector_store: VectorStore = Depends(get_vector_store),
) -> list[dict[str, Any]]:
    settings = get_settings()
    try:
        documents = await search_service.search_documents(
            vector_store,
            llm_client,
            data.message,
            settings.gemini_embedding_model,
            vector_store.dimensions,
            top_k=settings.rag_top_k,
        )
    except QueryError as e:
        raise SearchFailedError(str(e)) from e
    return [{"id": doc.id, "text": doc.text, "metadata": doc.metadata} for doc in documents]
