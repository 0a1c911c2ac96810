from fastapi import HTTPException, status


class VectorStoreError(Exception):
    """Base class for vector store failures."""


class ConfigurationError(VectorStoreError):
    """Raised when the store configuration is invalid. Aborts startup."""


class SchemaError(VectorStoreError):
    """Raised when the documents table cannot be created, dropped or verified."""


class IngestionError(VectorStoreError):
    """Raised when a batch of documents cannot be embedded or inserted."""


class EmbeddingDimensionError(IngestionError):
    """Raised when a caller-supplied embedding does not have the store's width."""


class QueryError(VectorStoreError):
    """Raised when a similarity search cannot be completed."""


class DeletionError(VectorStoreError):
    """Raised when a batch delete fails to execute."""


class ExtractionError(Exception):
    """Raised when text extraction from a file fails."""


class FileValidationError(HTTPException):
    def __init__(self, detail: str) -> None:
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
        )


class DocumentValidationError(HTTPException):
    def __init__(self, detail: str) -> None:
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
        )


class AIServiceError(HTTPException):
    def __init__(self, detail: str) -> None:
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"AI service error: {detail}",
        )


class StoreOperationError(HTTPException):
    def __init__(self, operation: str, detail: str) -> None:
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"{operation} failed: {detail}",
        )


class SearchFailedError(HTTPException):
    """Search failure: the body carries the error next to an empty result."""

    def __init__(self, detail: str) -> None:
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"error": detail, "documents": []},
        )
