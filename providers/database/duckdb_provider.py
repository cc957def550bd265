"""DuckDB provider implementation for RagSearch - tenant-scoped vector store using DuckDB."""

import math
import re
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Union
from uuid import UUID

import duckdb
from loguru import logger

from core.codec import decode_metadata, encode_metadata, parse_vector_literal
from core.exceptions import ConfigurationError, DatabaseError, ValidationError
from core.models import Chunk, SimilarityResult
from core.models.chunk import is_finite_vector
from core.observability import MetricsHook, NullMetrics, timed
from core.types import (
    DEFAULT_DIMENSION,
    MAX_TOP_K,
    ChunkId,
    ChunkIndex,
    DocumentId,
    Score,
    TenantId,
    TokenCount,
)

CHUNKS_TABLE = "chunks"
HNSW_INDEX_NAME = "idx_chunks_embedding_hnsw"

_ROW_COLUMNS = "id, document_id, tenant_id, chunk_index, content, token_count, metadata, created_at"


class DuckDBVectorStore:
    """DuckDB implementation of the VectorStore protocol."""

    def __init__(
        self,
        db_path: Union[Path, str] = ":memory:",
        dimension: int = DEFAULT_DIMENSION,
        hnsw_index: bool = True,
        hnsw_m: int = 16,
        hnsw_ef_construction: int = 64,
        metrics: Optional[MetricsHook] = None,
    ):
        """Initialize DuckDB vector store.

        Args:
            db_path: Path to DuckDB database file or ":memory:" for in-memory database
            dimension: Length every stored and queried embedding must have
            hnsw_index: Whether to build an HNSW index through the vss extension
            hnsw_m: HNSW graph degree
            hnsw_ef_construction: HNSW candidate list size during construction
            metrics: Optional metrics hook
        """
        if dimension is None or dimension <= 0:
            raise ConfigurationError("dimension", dimension, "Embedding dimension must be positive")

        self._db_path = db_path
        self._dimension = dimension
        self._hnsw_enabled = hnsw_index
        self._hnsw_m = hnsw_m
        self._hnsw_ef_construction = hnsw_ef_construction
        self._metrics = metrics or NullMetrics()
        self._vss_loaded = False
        self.connection: Optional[Any] = None

    @property
    def db_path(self) -> Union[Path, str]:
        """Database connection path or identifier."""
        return self._db_path

    @property
    def dimension(self) -> int:
        """Configured embedding dimension."""
        return self._dimension

    @property
    def is_connected(self) -> bool:
        """Check if database connection is active."""
        return self.connection is not None

    @property
    def is_memory_database(self) -> bool:
        return str(self._db_path) == ":memory:"

    def connect(self) -> None:
        """Establish database connection and initialize schema."""
        logger.info(f"Connecting to DuckDB database: {self.db_path}")

        if not self.is_memory_database:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        try:
            self.connection = duckdb.connect(str(self.db_path))
            logger.info("DuckDB connection established")

            if self._hnsw_enabled:
                self._load_extensions()

            self.create_schema()
            self.create_indexes()

            logger.info("DuckDB vector store initialization complete")

        except Exception as e:
            logger.error(f"DuckDB connection failed: {e}")
            self.disconnect()
            raise

    def disconnect(self) -> None:
        """Close database connection and cleanup resources."""
        if self.connection is not None:
            self.connection.close()
            self.connection = None
            self._vss_loaded = False
            logger.info("DuckDB connection closed")

    def _require_connection(self, operation: str) -> Any:
        if self.connection is None:
            raise DatabaseError(operation, CHUNKS_TABLE, "No database connection")
        return self.connection

    def _load_extensions(self) -> None:
        """Load the vss extension; without it searches fall back to exact scans."""
        connection = self._require_connection("load_extensions")

        try:
            connection.execute("INSTALL vss")
            connection.execute("LOAD vss")
            self._vss_loaded = True
            logger.info("VSS extension loaded successfully")
        except duckdb.Error as e:
            self._vss_loaded = False
            logger.warning(f"VSS extension unavailable, HNSW index disabled: {e}")
            return

        if not self.is_memory_database:
            connection.execute("SET hnsw_enable_experimental_persistence = true")
            logger.debug("HNSW experimental persistence enabled")

    def create_schema(self) -> None:
        """Create the chunks table, or verify the dimension of an existing one."""
        logger.info("Creating DuckDB schema")
        connection = self._require_connection("create_schema")

        try:
            existing_dims = self._existing_embedding_dimension()
            if existing_dims is not None and existing_dims != self._dimension:
                raise ConfigurationError(
                    "dimension",
                    self._dimension,
                    f"Existing {CHUNKS_TABLE} table stores {existing_dims}-dimensional embeddings",
                )

            connection.execute(f"""
                CREATE TABLE IF NOT EXISTS {CHUNKS_TABLE} (
                    id UUID PRIMARY KEY,
                    document_id UUID NOT NULL,
                    tenant_id UUID NOT NULL,
                    chunk_index INTEGER NOT NULL,
                    content TEXT NOT NULL,
                    token_count INTEGER NOT NULL,
                    embedding FLOAT[{self._dimension}],
                    metadata TEXT NOT NULL DEFAULT '{{}}',
                    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
                    UNIQUE (document_id, chunk_index)
                )
            """)

            logger.info(f"DuckDB schema created with {self._dimension}-dimensional embeddings")

        except Exception as e:
            logger.error(f"Failed to create DuckDB schema: {e}")
            raise

    def create_indexes(self) -> None:
        """Create tenant and document lookup indexes and, if enabled, the HNSW index."""
        connection = self._require_connection("create_indexes")

        try:
            connection.execute(f"CREATE INDEX IF NOT EXISTS idx_chunks_tenant_id ON {CHUNKS_TABLE}(tenant_id)")
            connection.execute(f"CREATE INDEX IF NOT EXISTS idx_chunks_document_id ON {CHUNKS_TABLE}(document_id)")
        except Exception as e:
            logger.error(f"Failed to create indexes: {e}")
            raise

        if not self._vss_loaded:
            return

        try:
            connection.execute(f"""
                CREATE INDEX IF NOT EXISTS {HNSW_INDEX_NAME} ON {CHUNKS_TABLE}
                USING HNSW (embedding)
                WITH (metric = 'cosine', M = {int(self._hnsw_m)}, ef_construction = {int(self._hnsw_ef_construction)})
            """)
            logger.info(f"HNSW index {HNSW_INDEX_NAME} ready (M={self._hnsw_m}, ef_construction={self._hnsw_ef_construction})")
        except Exception as e:
            logger.warning(f"Failed to create HNSW index: {e}")

    def _existing_embedding_dimension(self) -> Optional[int]:
        connection = self._require_connection("create_schema")
        result = connection.execute("""
            SELECT data_type FROM information_schema.columns
            WHERE table_schema = 'main' AND table_name = ? AND column_name = 'embedding'
        """, [CHUNKS_TABLE]).fetchone()
        if not result:
            return None
        match = re.search(r"\[(\d+)\]", str(result[0]))
        return int(match.group(1)) if match else None

    # Writes

    def store(self, chunk: Chunk) -> None:
        """Upsert a single chunk with its embedding."""
        self.store_batch([chunk])

    def store_batch(self, chunks: Sequence[Chunk]) -> None:
        """Upsert chunks keyed by (document_id, chunk_index) in one transaction.

        Every chunk is validated before anything is written. On conflict the
        content, token count, embedding and metadata are replaced while the
        stored id and created_at are kept.
        """
        if not chunks:
            raise ValidationError("chunks", chunks, "Chunk batch cannot be null or empty")

        rows = []
        for i, chunk in enumerate(chunks):
            try:
                rows.append(self._row_for(chunk))
            except ValidationError as e:
                raise ValidationError(
                    f"chunks[{i}]",
                    chunk,
                    f"Chunk at index {i} failed validation: {e.reason}",
                    context={"index": i},
                ) from e

        connection = self._require_connection("store_batch")
        inserted = 0
        updated = 0

        with timed(self._metrics, "vector_store.store_batch"):
            try:
                with self._transaction():
                    for row in rows:
                        if self._update_row(connection, row):
                            updated += 1
                        else:
                            self._insert_row(connection, row)
                            inserted += 1
            except Exception as e:
                logger.error(f"Failed to store chunk batch of {len(rows)}: {e}")
                raise

        self._metrics.increment("vector_store.chunks_stored", len(rows))
        logger.info(f"Stored {len(rows)} chunks ({inserted} inserted, {updated} updated)")

    def _update_row(self, connection: Any, row: Dict[str, Any]) -> bool:
        result = connection.execute(f"""
            UPDATE {CHUNKS_TABLE}
            SET content = ?,
                token_count = ?,
                embedding = CAST(? AS FLOAT[{self._dimension}]),
                metadata = ?
            WHERE document_id = ?::UUID AND chunk_index = ?
            RETURNING id
        """, [
            row["content"],
            row["token_count"],
            row["embedding"],
            row["metadata"],
            row["document_id"],
            row["chunk_index"],
        ]).fetchall()
        return len(result) > 0

    def _insert_row(self, connection: Any, row: Dict[str, Any]) -> None:
        connection.execute(f"""
            INSERT INTO {CHUNKS_TABLE}
                (id, document_id, tenant_id, chunk_index, content, token_count, embedding, metadata, created_at)
            VALUES (?::UUID, ?::UUID, ?::UUID, ?, ?, ?, CAST(? AS FLOAT[{self._dimension}]), ?, ?)
        """, [
            row["id"],
            row["document_id"],
            row["tenant_id"],
            row["chunk_index"],
            row["content"],
            row["token_count"],
            row["embedding"],
            row["metadata"],
            row["created_at"],
        ])

    def _row_for(self, chunk: Optional[Chunk]) -> Dict[str, Any]:
        """Validate a chunk for storage and convert it to bind parameters."""
        if chunk is None:
            raise ValidationError("chunk", None, "Chunk cannot be null")
        if chunk.id is None:
            raise ValidationError("id", None, "Chunk ID cannot be null")
        if chunk.document_id is None:
            raise ValidationError("document_id", None, "Document ID cannot be null")
        if chunk.tenant_id is None:
            raise ValidationError("tenant_id", None, "Tenant ID cannot be null")
        chunk_uuid = _as_uuid("id", chunk.id)
        document_uuid = _as_uuid("document_id", chunk.document_id)
        tenant_uuid = _as_uuid("tenant_id", chunk.tenant_id)
        if chunk.chunk_index is None or chunk.chunk_index < 0:
            raise ValidationError("chunk_index", chunk.chunk_index, "Chunk index must be >= 0")
        if not chunk.content or not chunk.content.strip():
            raise ValidationError("content", chunk.content, "Content cannot be blank")
        if chunk.token_count is None or chunk.token_count < 0:
            raise ValidationError("token_count", chunk.token_count, "Token count must be >= 0")

        embedding = self._validate_vector("embedding", chunk.embedding)

        return {
            "id": str(chunk_uuid),
            "document_id": str(document_uuid),
            "tenant_id": str(tenant_uuid),
            "chunk_index": int(chunk.chunk_index),
            "content": chunk.content,
            "token_count": int(chunk.token_count),
            "embedding": embedding,
            "metadata": encode_metadata(chunk.metadata),
            "created_at": _to_naive_utc(chunk.created_at),
        }

    def _validate_vector(self, field: str, vector: Optional[Union[Sequence[float], str]]) -> List[float]:
        if vector is None:
            raise ValidationError(field, None, "Embedding cannot be null")
        if isinstance(vector, str):
            values = parse_vector_literal(vector)
        else:
            try:
                values = [float(v) for v in vector]
            except (TypeError, ValueError) as e:
                raise ValidationError(field, vector, f"Embedding values must be numeric: {e}")
        if len(values) != self._dimension:
            raise ValidationError(
                field,
                len(values),
                f"Embedding dimension mismatch: expected {self._dimension}, got {len(values)}",
            )
        if not is_finite_vector(values):
            raise ValidationError(field, vector, "Embedding values must be finite")
        return values

    def delete_by_document_id(self, document_id: DocumentId) -> int:
        """Delete every chunk of a document and return the number removed."""
        if document_id is None:
            raise ValidationError("document_id", None, "Document ID cannot be null")
        doc_uuid = _as_uuid("document_id", document_id)
        connection = self._require_connection("delete_by_document_id")

        with timed(self._metrics, "vector_store.delete"):
            try:
                deleted = connection.execute(
                    f"DELETE FROM {CHUNKS_TABLE} WHERE document_id = ?::UUID RETURNING id",
                    [str(doc_uuid)],
                ).fetchall()
            except Exception as e:
                logger.error(f"Failed to delete chunks for document {doc_uuid}: {e}")
                raise

        count = len(deleted)
        self._metrics.increment("vector_store.chunks_deleted", count)
        logger.info(f"Deleted {count} chunks for document {doc_uuid}")
        return count

    # Reads

    def search(
        self,
        tenant_id: TenantId,
        query_embedding: Union[Sequence[float], str],
        top_k: int,
    ) -> List[SimilarityResult]:
        """Return the tenant's nearest chunks by cosine distance, most similar first."""
        if tenant_id is None:
            raise ValidationError("tenant_id", None, "Tenant ID cannot be null")
        tenant_uuid = _as_uuid("tenant_id", tenant_id)
        if isinstance(top_k, bool) or not isinstance(top_k, int) or not 1 <= top_k <= MAX_TOP_K:
            raise ValidationError("top_k", top_k, f"topK must be between 1 and {MAX_TOP_K}")
        query = self._validate_vector("query_embedding", query_embedding)

        connection = self._require_connection("search")

        with timed(self._metrics, "vector_store.search"):
            try:
                rows = connection.execute(f"""
                    SELECT {_ROW_COLUMNS},
                           array_cosine_distance(embedding, CAST(? AS FLOAT[{self._dimension}])) AS distance
                    FROM {CHUNKS_TABLE}
                    WHERE tenant_id = ?::UUID AND embedding IS NOT NULL
                    ORDER BY distance ASC
                    LIMIT ?
                """, [query, str(tenant_uuid), top_k]).fetchall()
            except Exception as e:
                logger.error(f"Failed to perform similarity search: {e}")
                raise

        results = [
            SimilarityResult(chunk=self._chunk_from_row(row), score=similarity_from_distance(row[8]))
            for row in rows
        ]

        self._metrics.increment("vector_store.searches")
        logger.debug(f"Search for tenant {tenant_uuid} returned {len(results)} results (top_k={top_k})")
        return results

    def get_chunks_by_document_id(
        self,
        document_id: DocumentId,
        tenant_id: Optional[TenantId] = None,
    ) -> List[Chunk]:
        """Return a document's chunks with embeddings, ordered by chunk index."""
        if document_id is None:
            raise ValidationError("document_id", None, "Document ID cannot be null")
        doc_uuid = _as_uuid("document_id", document_id)
        connection = self._require_connection("get_chunks_by_document_id")

        query = f"""
            SELECT {_ROW_COLUMNS}, embedding
            FROM {CHUNKS_TABLE}
            WHERE document_id = ?::UUID
        """
        params: List[Any] = [str(doc_uuid)]
        if tenant_id is not None:
            query += " AND tenant_id = ?::UUID"
            params.append(str(_as_uuid("tenant_id", tenant_id)))
        query += " ORDER BY chunk_index ASC"

        try:
            rows = connection.execute(query, params).fetchall()
        except Exception as e:
            logger.error(f"Failed to get chunks for document {doc_uuid}: {e}")
            raise

        return [self._chunk_from_row(row, embedding=row[8]) for row in rows]

    def _chunk_from_row(self, row: Sequence[Any], embedding: Optional[Sequence[float]] = None) -> Chunk:
        created_at = row[7]
        if isinstance(created_at, datetime) and created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)

        return Chunk(
            id=ChunkId(_as_uuid("id", row[0])),
            document_id=DocumentId(_as_uuid("document_id", row[1])),
            tenant_id=TenantId(_as_uuid("tenant_id", row[2])),
            chunk_index=ChunkIndex(row[3]),
            content=row[4],
            token_count=TokenCount(row[5]),
            metadata=decode_metadata(row[6], record_id=row[0]),
            created_at=created_at,
            embedding=embedding,
        )

    # Diagnostics

    def get_stats(self) -> Dict[str, int]:
        """Get row counts for chunks, embedded chunks, documents and tenants."""
        connection = self._require_connection("get_stats")

        try:
            result = connection.execute(f"""
                SELECT COUNT(*),
                       COUNT(embedding),
                       COUNT(DISTINCT document_id),
                       COUNT(DISTINCT tenant_id)
                FROM {CHUNKS_TABLE}
            """).fetchone()
            return {
                "chunks": result[0],
                "embeddings": result[1],
                "documents": result[2],
                "tenants": result[3],
            }

        except Exception as e:
            logger.error(f"Failed to get database stats: {e}")
            return {"chunks": 0, "embeddings": 0, "documents": 0, "tenants": 0}

    def health_check(self) -> Dict[str, Any]:
        """Perform health check and return status information."""
        status: Dict[str, Any] = {
            "provider": "duckdb",
            "connected": self.is_connected,
            "db_path": str(self.db_path),
            "dimension": self._dimension,
            "version": None,
            "hnsw_index": False,
            "tables": [],
            "errors": []
        }

        if self.connection is None:
            status["errors"].append("Not connected to database")
            return status

        try:
            version_result = self.connection.execute("SELECT version()").fetchone()
            status["version"] = version_result[0] if version_result else "unknown"

            tables_result = self.connection.execute("""
                SELECT table_name FROM information_schema.tables
                WHERE table_schema = 'main' AND table_type = 'BASE TABLE'
            """).fetchall()
            status["tables"] = [table[0] for table in tables_result]

            index_result = self.connection.execute(
                "SELECT COUNT(*) FROM duckdb_indexes() WHERE index_name = ?", [HNSW_INDEX_NAME]
            ).fetchone()
            status["hnsw_index"] = bool(index_result and index_result[0])

            if CHUNKS_TABLE not in status["tables"]:
                status["errors"].append(f"Missing table: {CHUNKS_TABLE}")

        except Exception as e:
            status["errors"].append(f"Health check error: {str(e)}")

        return status

    def get_connection_info(self) -> Dict[str, Any]:
        """Get information about the database connection."""
        return {
            "provider": "duckdb",
            "db_path": str(self.db_path),
            "connected": self.is_connected,
            "memory_database": self.is_memory_database,
            "vss_loaded": self._vss_loaded,
            "connection_type": type(self.connection).__name__ if self.connection else None
        }

    # Transactions

    def begin_transaction(self) -> None:
        """Begin a database transaction."""
        self._require_connection("begin_transaction").execute("BEGIN TRANSACTION")

    def commit_transaction(self) -> None:
        """Commit the current transaction."""
        self._require_connection("commit_transaction").execute("COMMIT")

    def rollback_transaction(self) -> None:
        """Rollback the current transaction."""
        self._require_connection("rollback_transaction").execute("ROLLBACK")

    @contextmanager
    def _transaction(self) -> Iterator[None]:
        self.begin_transaction()
        try:
            yield
        except Exception:
            self.rollback_transaction()
            raise
        self.commit_transaction()


def similarity_from_distance(distance: Optional[float]) -> Score:
    """Convert cosine distance to a similarity clamped to [0, 1]; NaN scores 0."""
    if distance is None or math.isnan(distance):
        return Score(0.0)
    return Score(min(1.0, max(0.0, 1.0 - float(distance))))


def _as_uuid(field: str, value: Any) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise ValidationError(field, value, "Must be a valid UUID")


def _to_naive_utc(value: Optional[datetime]) -> datetime:
    if value is None:
        return datetime.now(timezone.utc).replace(tzinfo=None)
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value
