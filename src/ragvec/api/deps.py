from fastapi import Request
from google import genai

from ragvec.core.config import get_settings
from ragvec.core.database import get_db
from ragvec.core.llm import get_gemini_client
from ragvec.storage.base import FileStorage
from ragvec.storage.local import LocalFileStorage
from ragvec.storage.vector_store import VectorStore

__all__ = ["get_db", "get_file_storage", "get_llm_client", "get_vector_store"]


def get_file_storage() -> FileStorage:
    settings = get_settings()
    return LocalFileStorage(settings.upload_dir)


def get_llm_client() -> genai.Client:
    return get_gemini_client()


def get_vector_store(request: Request) -> VectorStore:
    # Built once by the lifespan handler after the table has been checked.
    return request.app.state.vector_store
