"""
Vector store implementations and factory.

Final step of the indexing pipeline and first step of retrieval:

    Loader → Chunker → EmbeddingAdapter → VectorStore (this file) → Retriever

Two backends:
    InMemoryVectorStore: numpy cosine search over a Python list. No
                         server, nothing persisted. Default, and what
                         the tests use.
    PgVectorStore:       PostgreSQL with the pgvector extension. Rows
                         persist; similarity ordering is done in SQL
                         with the `<=>` cosine-distance operator.

Both order hits by ascending cosine distance and break ties by
insertion order, and both refuse vectors of the wrong dimensionality.

Usage:
    from pdf_rag.indexing.vectorstore import create_vector_store
    from pdf_rag.config import VectorStoreConfig

    store = create_vector_store(VectorStoreConfig(), dimensions=1536)
    store.insert(chunk, vector)
    hits = store.query(query_vector, document_id=doc_id, k=5)
"""

import threading
from dataclasses import dataclass
from typing import Optional

import numpy as np
import structlog

from pdf_rag.base.vectorstore import BaseVectorStore
from pdf_rag.config import VectorStoreConfig, VectorStoreType
from pdf_rag.exceptions import DataInvariantViolation
from pdf_rag.models.document import Chunk, EmbeddedChunk, ScoredHit

logger = structlog.get_logger(__name__)


def create_vector_store(config: VectorStoreConfig, dimensions: int) -> BaseVectorStore:
    """
    Create a vector store from config.

    Args:
        config: Which backend and its connection settings.
        dimensions: Vector size every row must have.

    Returns:
        A BaseVectorStore ready for insert() and query().
    """
    if config.store_type == VectorStoreType.MEMORY:
        return InMemoryVectorStore(dimensions=dimensions)

    elif config.store_type == VectorStoreType.PGVECTOR:
        store = PgVectorStore(
            database_url=config.database_url,
            dimensions=dimensions,
            table_name=config.table_name,
        )
        store.ensure_schema()
        return store

    else:
        raise ValueError(
            f"Unknown vector store type: '{config.store_type}'. "
            f"Supported: 'memory', 'pgvector'."
        )


def cosine_distances(query: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """
    Cosine distance between one vector and each row of a matrix.

    Zero vectors have no direction; they get distance 1.0 (orthogonal).
    Results are clipped to [0, 2] to absorb floating point noise.
    """
    query_norm = np.linalg.norm(query)
    row_norms = np.linalg.norm(matrix, axis=1)
    denominators = row_norms * query_norm

    similarities = np.zeros(len(matrix), dtype=np.float64)
    nonzero = denominators > 0
    similarities[nonzero] = (matrix[nonzero] @ query) / denominators[nonzero]

    return np.clip(1.0 - similarities, 0.0, 2.0)


# ---------------------------------------------------------------------------
# In-memory
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class _Row:
    seq: int
    chunk: Chunk
    vector: np.ndarray


class InMemoryVectorStore(BaseVectorStore):
    """
    Process-local store with exact (brute force) cosine search.

    A lock guards the row list. Inserts append a complete row under the
    lock and queries work on a snapshot taken under the lock, so a
    concurrent query never sees half a row.
    """

    def __init__(self, dimensions: Optional[int] = None):
        # None = fixed by the first insert
        self._dimensions = dimensions
        self._rows: list[_Row] = []
        self._next_seq = 0
        self._lock = threading.Lock()

    @property
    def dimensions(self) -> Optional[int]:
        return self._dimensions

    def insert(self, chunk: Chunk, vector: list[float]) -> None:
        array = np.asarray(vector, dtype=np.float64)
        if array.ndim != 1 or array.size == 0:
            raise DataInvariantViolation(
                "Vector must be a non-empty flat list of numbers",
                {"document_id": chunk.document_id, "position": chunk.position},
            )

        with self._lock:
            if self._dimensions is None:
                self._dimensions = array.size
            elif array.size != self._dimensions:
                raise DataInvariantViolation(
                    "Vector dimensionality does not match the store",
                    {"expected": self._dimensions, "actual": array.size},
                )
            self._rows.append(_Row(seq=self._next_seq, chunk=chunk, vector=array))
            self._next_seq += 1

    def query(
        self,
        vector: list[float],
        document_id: Optional[str] = None,
        k: int = 5,
    ) -> list[ScoredHit]:
        if k <= 0:
            return []

        query = np.asarray(vector, dtype=np.float64)
        with self._lock:
            rows = list(self._rows)

        in_scope = [r for r in rows if document_id is None or r.chunk.document_id == document_id]
        candidates = [r for r in in_scope if r.vector.size == query.size]
        if len(candidates) < len(in_scope):
            logger.warning(
                "vector_dimension_mismatch_skipped",
                skipped=len(in_scope) - len(candidates),
                query_dimensions=query.size,
            )
        if not candidates:
            return []

        distances = cosine_distances(query, np.vstack([r.vector for r in candidates]))
        # rows are in insertion order, so a stable sort breaks ties by it
        order = np.argsort(distances, kind="stable")[:k]

        return [
            ScoredHit(chunk=candidates[i].chunk, distance=float(distances[i]), rank=rank)
            for rank, i in enumerate(order)
        ]

    def delete_document(self, document_id: str) -> int:
        with self._lock:
            before = len(self._rows)
            self._rows = [r for r in self._rows if r.chunk.document_id != document_id]
            return before - len(self._rows)

    def count(self, document_id: Optional[str] = None) -> int:
        with self._lock:
            if document_id is None:
                return len(self._rows)
            return sum(1 for r in self._rows if r.chunk.document_id == document_id)


# ---------------------------------------------------------------------------
# PostgreSQL + pgvector
# ---------------------------------------------------------------------------

class PgVectorStore(BaseVectorStore):
    """
    PostgreSQL-backed store using the pgvector extension.

    One row per chunk in `table_name`. Every statement runs in
    autocommit mode, so each inserted row becomes visible on its own
    and an interrupted ingestion leaves the rows written so far.

    The query vector is always sent as a bound parameter (adapted by
    pgvector's psycopg dumper); identifiers go through psycopg.sql.
    No SQL text is ever built from data.
    """

    def __init__(self, database_url: str, dimensions: int, table_name: str = "document_embeddings"):
        from psycopg import sql

        self._database_url = database_url
        self._dimensions = dimensions
        self._table = sql.Identifier(table_name)
        self._index = sql.Identifier(f"{table_name}_document_id_idx")

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def _connect(self):
        import psycopg
        from pgvector.psycopg import register_vector

        conn = psycopg.connect(self._database_url, autocommit=True)
        register_vector(conn)
        return conn

    def ensure_schema(self) -> None:
        """Create the extension, table and scope index if missing."""
        import psycopg
        from psycopg import sql

        with psycopg.connect(self._database_url, autocommit=True) as conn:
            conn.execute("CREATE EXTENSION IF NOT EXISTS vector")
            conn.execute(
                sql.SQL(
                    """
                    CREATE TABLE IF NOT EXISTS {table} (
                        id BIGSERIAL PRIMARY KEY,
                        document_id TEXT NOT NULL,
                        filename TEXT NOT NULL,
                        page INTEGER NOT NULL,
                        position INTEGER NOT NULL,
                        uploaded_at TIMESTAMPTZ NOT NULL DEFAULT now(),
                        chunk TEXT NOT NULL,
                        embedding vector({dims}) NOT NULL
                    )
                    """
                ).format(table=self._table, dims=sql.SQL(str(int(self._dimensions))))
            )
            conn.execute(
                sql.SQL("CREATE INDEX IF NOT EXISTS {index} ON {table} (document_id)").format(
                    index=self._index, table=self._table
                )
            )
        logger.info("pgvector_schema_ready", dimensions=self._dimensions)

    def _check_dimensions(self, vector: list[float]) -> None:
        if len(vector) != self._dimensions:
            raise DataInvariantViolation(
                "Vector dimensionality does not match the store",
                {"expected": self._dimensions, "actual": len(vector)},
            )

    def _insert_statement(self):
        from psycopg import sql

        return sql.SQL(
            "INSERT INTO {table} (document_id, filename, page, position, chunk, embedding) "
            "VALUES (%s, %s, %s, %s, %s, %s)"
        ).format(table=self._table)

    @staticmethod
    def _row_params(chunk: Chunk, vector: list[float]) -> tuple:
        return (
            chunk.document_id,
            chunk.filename,
            chunk.page,
            chunk.position,
            chunk.content,
            np.asarray(vector, dtype=np.float32),
        )

    def insert(self, chunk: Chunk, vector: list[float]) -> None:
        self._check_dimensions(vector)
        with self._connect() as conn:
            conn.execute(self._insert_statement(), self._row_params(chunk, vector))

    def insert_many(self, embedded: list[EmbeddedChunk]) -> int:
        for item in embedded:
            self._check_dimensions(item.vector)

        statement = self._insert_statement()
        with self._connect() as conn:
            for item in embedded:
                conn.execute(statement, self._row_params(item.chunk, item.vector))
        return len(embedded)

    def query(
        self,
        vector: list[float],
        document_id: Optional[str] = None,
        k: int = 5,
    ) -> list[ScoredHit]:
        from psycopg import sql

        if k <= 0:
            return []
        if len(vector) != self._dimensions:
            # The column is vector(N); nothing stored can be compared.
            logger.warning(
                "vector_dimension_mismatch_skipped",
                query_dimensions=len(vector),
                store_dimensions=self._dimensions,
            )
            return []

        # Zero vectors give NaN from <=>. Map it to 1.0 (orthogonal) before
        # ORDER BY so SQL sorts the same value the caller sees.
        statement = sql.SQL(
            """
            SELECT document_id, filename, page, position, chunk,
                   COALESCE(NULLIF(embedding <=> %(query)s, 'NaN'::float8), 1.0) AS distance
            FROM {table}
            WHERE %(document_id)s::text IS NULL OR document_id = %(document_id)s
            ORDER BY distance, id
            LIMIT %(k)s
            """
        ).format(table=self._table)
        params = {
            "query": np.asarray(vector, dtype=np.float32),
            "document_id": document_id,
            "k": k,
        }

        with self._connect() as conn:
            rows = conn.execute(statement, params).fetchall()

        hits = []
        for rank, (doc_id, filename, page, position, text, distance) in enumerate(rows):
            hits.append(ScoredHit(
                chunk=Chunk(
                    document_id=doc_id,
                    filename=filename,
                    page=page,
                    content=text,
                    position=position,
                ),
                distance=float(distance),
                rank=rank,
            ))
        return hits

    def delete_document(self, document_id: str) -> int:
        from psycopg import sql

        with self._connect() as conn:
            cur = conn.execute(
                sql.SQL("DELETE FROM {table} WHERE document_id = %s").format(table=self._table),
                (document_id,),
            )
            return cur.rowcount

    def count(self, document_id: Optional[str] = None) -> int:
        from psycopg import sql

        with self._connect() as conn:
            if document_id is None:
                row = conn.execute(
                    sql.SQL("SELECT COUNT(*) FROM {table}").format(table=self._table)
                ).fetchone()
            else:
                row = conn.execute(
                    sql.SQL("SELECT COUNT(*) FROM {table} WHERE document_id = %s").format(
                        table=self._table
                    ),
                    (document_id,),
                ).fetchone()
            return row[0]
