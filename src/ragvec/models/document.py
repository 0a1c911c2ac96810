from pgvector.sqlalchemy import Vector
from sqlalchemy import BigInteger, Column, Identity, MetaData, Table, Text, text
from sqlalchemy.dialects.postgresql import JSONB

REQUIRED_COLUMNS = ("id", "text", "embedding", "metadata")


def document_table(name: str, dimensions: int, metadata: MetaData | None = None) -> Table:
    """Build the documents table. The name and vector width come from configuration."""
    return Table(
        name,
        metadata if metadata is not None else MetaData(),
        Column("id", BigInteger, Identity(always=True), primary_key=True),
        Column("text", Text, nullable=False),
        Column("embedding", Vector(dimensions), nullable=False),
        Column("metadata", JSONB, nullable=False, server_default=text("'{}'::jsonb")),
    )
