"""Unit tests for SQL generated by PgVectorStore and the documents table."""

import re
from unittest.mock import MagicMock

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.schema import CreateTable

from ragvec.core.config import Settings, StoreConfig
from ragvec.models.document import document_table
from ragvec.storage.postgres import PgVectorStore


def _store(metric: str = "COSINE", table: str = "vectortab") -> PgVectorStore:
    config = StoreConfig.from_settings(
        Settings(_env_file=None, distance_metric=metric, vector_table=table, embedding_dimensions=3)
    )
    return PgVectorStore(MagicMock(), config)


def _compile(stmt):
    return stmt.compile(dialect=postgresql.dialect())


@pytest.mark.unit
class TestBuildSearchQuery:
    @pytest.mark.parametrize(
        ("metric", "operator"),
        [
            ("MANHATTAN", "<+>"),
            ("EUCLIDEAN", "<->"),
            ("DOT", "<#>"),
            ("COSINE", "<=>"),
        ],
    )
    def test_orders_by_metric_operator(self, metric: str, operator: str) -> None:
        sql = str(_compile(_store(metric).build_search_query([0.1, 0.2, 0.3], top_k=4)))
        # Newer SQLAlchemy releases parenthesize the operator expression.
        assert re.search(rf"ORDER BY \(?vectortab\.embedding {re.escape(operator)} ", sql)

    def test_ascending_with_id_tie_break_and_limit(self) -> None:
        sql = str(_compile(_store().build_search_query([0.1, 0.2, 0.3], top_k=4)))
        assert "ASC, vectortab.id ASC" in sql
        assert "LIMIT" in sql

    def test_binds_query_vector_and_top_k(self) -> None:
        compiled = _compile(_store().build_search_query([0.1, 0.2, 0.3], top_k=7))
        values = list(compiled.params.values())
        assert [0.1, 0.2, 0.3] in values
        assert 7 in values

    def test_embedding_not_selected_by_default(self) -> None:
        sql = str(_compile(_store().build_search_query([0.1, 0.2, 0.3], top_k=4)))
        select_list = sql.split("FROM")[0]
        assert "vectortab.id" in select_list
        assert "vectortab.text" in select_list
        assert "vectortab.metadata" in select_list
        assert "vectortab.embedding" not in select_list

    def test_embedding_selected_on_request(self) -> None:
        stmt = _store().build_search_query([0.1, 0.2, 0.3], top_k=4, include_embeddings=True)
        select_list = str(_compile(stmt)).split("FROM")[0]
        assert "vectortab.embedding" in select_list

    def test_uses_configured_table_name(self) -> None:
        sql = str(_compile(_store(table="chunks").build_search_query([0.1, 0.2, 0.3], top_k=1)))
        assert "FROM chunks" in sql


@pytest.mark.unit
class TestDocumentTable:
    def test_create_table_ddl(self) -> None:
        ddl = str(CreateTable(document_table("vectortab", 3)).compile(dialect=postgresql.dialect()))
        assert "CREATE TABLE vectortab" in ddl
        assert "GENERATED ALWAYS AS IDENTITY" in ddl
        assert "text TEXT NOT NULL" in ddl
        assert "VECTOR(3)" in ddl
        assert "JSONB" in ddl
        assert "'{}'::jsonb" in ddl
        assert "PRIMARY KEY (id)" in ddl
