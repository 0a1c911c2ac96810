from typing import Annotated, Any

from pydantic import BaseModel, Field, computed_field, field_validator


class DocumentCreate(BaseModel):
    text: str = Field(..., min_length=1)
    metadata: dict[str, Any] = Field(default_factory=dict)
    embedding: list[float] | None = None

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("text must not be blank")
        return value


class Document(BaseModel):
    id: int
    text: str
    metadata: dict[str, str] = Field(default_factory=dict)
    embedding: list[float] | None = None


class DocumentBatch(BaseModel):
    documents: list[DocumentCreate]


class BatchResult(BaseModel):
    """Outcome of a batch mutation: how many items were applied out of those requested."""

    requested: int
    applied: int
    ids: list[int] = Field(default_factory=list)
    missing: list[int] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def complete(self) -> bool:
        return self.applied == self.requested


class SearchRequest(BaseModel):
    query: str = Field(..., min_length=1)
    top_k: int = Field(4, ge=1, le=100)
    include_embeddings: bool = False


class SearchResponse(BaseModel):
    documents: list[Document]
    total: int


# Identity values are positive BIGINTs.
DocumentId = Annotated[int, Field(ge=1, le=2**63 - 1)]


class DeleteRequest(BaseModel):
    ids: list[DocumentId]


class MessageRequest(BaseModel):
    message: str = Field(..., min_length=1)
