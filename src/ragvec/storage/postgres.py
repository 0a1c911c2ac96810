import logging
from collections.abc import Iterator, Mapping, Sequence
from typing import Any, TypeVar

from sqlalchemy import Select, delete, func, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from ragvec.core.config import StoreConfig
from ragvec.core.exceptions import DeletionError, IngestionError, QueryError
from ragvec.models.document import document_table
from ragvec.schemas.document import BatchResult, Document
from ragvec.storage.vector_store import VectorStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

# BIGINT identity column bounds.
MIN_ID = -(2**63)
MAX_ID = 2**63 - 1


def _batches(items: Sequence[T], size: int) -> Iterator[list[T]]:
    for start in range(0, len(items), size):
        yield list(items[start : start + size])


def row_to_document(row: Mapping[str, Any]) -> Document:
    """Map a result row to a Document. ``embedding`` is only read when selected."""
    metadata = row["metadata"] or {}
    embedding = row.get("embedding")
    return Document(
        id=row["id"],
        text=row["text"],
        metadata={str(k): str(v) for k, v in metadata.items()},
        embedding=[float(x) for x in embedding] if embedding is not None else None,
    )


class PgVectorStore(VectorStore):
    """Exact nearest-neighbour store on a single PostgreSQL table with a pgvector column."""

    def __init__(self, engine: AsyncEngine, config: StoreConfig) -> None:
        self._engine = engine
        self._config = config
        self.table = document_table(config.table_name, config.dimensions)

    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def dimensions(self) -> int:
        return self._config.dimensions

    def build_search_query(
        self,
        query_embedding: list[float],
        top_k: int,
        include_embeddings: bool = False,
    ) -> Select:
        """Rank every row by the configured distance; ties are broken by id."""
        c = self.table.c
        columns = [c["id"], c["text"], c["metadata"]]
        if include_embeddings:
            columns.append(c["embedding"])

        distance = getattr(c["embedding"], self._config.ranking_function)(query_embedding)
        return select(*columns).order_by(distance.asc(), c["id"].asc()).limit(top_k)

    async def add(
        self,
        texts: list[str],
        embeddings: list[list[float]],
        metadatas: list[dict[str, str]],
    ) -> BatchResult:
        if not len(texts) == len(embeddings) == len(metadatas):
            raise IngestionError("texts, embeddings and metadatas must have the same length")
        if not texts:
            return BatchResult(requested=0, applied=0)

        rows = [
            {"text": text, "embedding": embedding, "metadata": metadata}
            for text, embedding, metadata in zip(texts, embeddings, metadatas, strict=True)
        ]

        ids: list[int] = []
        try:
            # One transaction for every chunk: the batch lands whole or not at all.
            async with self._engine.begin() as conn:
                for chunk in _batches(rows, self._config.batch_size):
                    result = await conn.execute(
                        insert(self.table).values(chunk).returning(self.table.c["id"])
                    )
                    ids.extend(result.scalars().all())
        except SQLAlchemyError as e:
            raise IngestionError(
                f"Insert of {len(rows)} documents into '{self.table.name}' failed: {e}"
            ) from e

        logger.info("Inserted %d documents into %s", len(ids), self.table.name)
        return BatchResult(requested=len(rows), applied=len(ids), ids=ids)

    async def search(
        self,
        query_embedding: list[float],
        top_k: int = 4,
        include_embeddings: bool = False,
    ) -> list[Document]:
        if top_k < 1:
            raise QueryError(f"top_k must be at least 1, got {top_k}")
        if len(query_embedding) != self._config.dimensions:
            raise QueryError(
                f"Query embedding has {len(query_embedding)} dimensions, "
                f"expected {self._config.dimensions}"
            )

        stmt = self.build_search_query(query_embedding, top_k, include_embeddings)
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(stmt)
                rows = result.mappings().all()
            return [row_to_document(row) for row in rows]
        except (SQLAlchemyError, ValueError, TypeError) as e:
            raise QueryError(f"Similarity search on '{self.table.name}' failed: {e}") from e

    async def delete(self, ids: list[int]) -> BatchResult:
        if not ids:
            return BatchResult(requested=0, applied=0)

        # Ids outside BIGINT cannot match a row and would fail the whole statement.
        candidates = [doc_id for doc_id in ids if MIN_ID <= doc_id <= MAX_ID]

        deleted: list[int] = []
        try:
            # Each chunk commits on its own; a failure keeps earlier chunks deleted.
            for chunk in _batches(candidates, self._config.batch_size):
                async with self._engine.begin() as conn:
                    result = await conn.execute(
                        delete(self.table)
                        .where(self.table.c["id"].in_(chunk))
                        .returning(self.table.c["id"])
                    )
                    deleted.extend(result.scalars().all())
        except SQLAlchemyError as e:
            raise DeletionError(
                f"Delete from '{self.table.name}' failed after removing "
                f"{len(deleted)} of {len(ids)} documents: {e}"
            ) from e

        removed = set(deleted)
        missing = [doc_id for doc_id in dict.fromkeys(ids) if doc_id not in removed]
        logger.info(
            "Deleted %d of %d requested documents from %s",
            len(deleted),
            len(ids),
            self.table.name,
        )
        return BatchResult(requested=len(ids), applied=len(deleted), ids=deleted, missing=missing)

    async def count(self) -> int:
        async with self._engine.connect() as conn:
            result = await conn.execute(select(func.count()).select_from(self.table))
            return result.scalar_one()
