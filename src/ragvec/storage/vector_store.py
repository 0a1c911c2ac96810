from abc import ABC, abstractmethod

from ragvec.schemas.document import BatchResult, Document


class VectorStore(ABC):
    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Width every stored and queried embedding must have."""
        ...

    @abstractmethod
    async def add(
        self,
        texts: list[str],
        embeddings: list[list[float]],
        metadatas: list[dict[str, str]],
    ) -> BatchResult:
        """Insert one row per text. The whole batch is committed or nothing is."""
        ...

    @abstractmethod
    async def search(
        self,
        query_embedding: list[float],
        top_k: int = 4,
        include_embeddings: bool = False,
    ) -> list[Document]:
        """Return at most top_k documents, most similar first."""
        ...

    @abstractmethod
    async def delete(self, ids: list[int]) -> BatchResult:
        """Delete documents by id. Ids that match nothing are reported as missing."""
        ...

    @abstractmethod
    async def count(self) -> int:
        """Number of stored documents."""
        ...
