"""
Document/chunk store backed by PostgreSQL + pgvector.
Every statement runs in its own transaction; a failed ingestion is not rolled
back across statements.
"""
import uuid
from contextlib import contextmanager
from time import perf_counter
from typing import List, Optional, Sequence

from pgvector.sqlalchemy import Vector
from sqlalchemy import bindparam, text as sa_text
from sqlalchemy.exc import SQLAlchemyError

from . import config
from .errors import NotFoundError, StoreError
from .logging_config import logger
from .schemas import DocumentInfo, RetrievalResult


@contextmanager
def store_errors(action: str):
    try:
        yield
    except SQLAlchemyError as e:
        logger.error("Store operation failed", action=action, error=str(e))
        raise StoreError(f"Failed to {action}: {e}") from e


def parse_uuid(value: str, label: str = "Document") -> str:
    """Canonical UUID string; anything unparseable cannot exist in the store."""
    try:
        return str(uuid.UUID(str(value)))
    except ValueError:
        raise NotFoundError(f"{label} {value} not found") from None


class PgVectorStore:
    """
    Narrow persistence interface used by ingestion and retrieval.

    Distances use pgvector's cosine operator (<=>): 0 is identical, 2 is opposite.
    """

    def __init__(self, engine, embed_dim: int = config.EMBED_DIM):
        self.engine = engine
        self.embed_dim = embed_dim

    def _vector_param(self, name: str):
        return bindparam(name, type_=Vector(self.embed_dim))

    def _check_dim(self, vector: Sequence[float]):
        if len(vector) != self.embed_dim:
            raise StoreError(
                f"Embedding has {len(vector)} dimensions, store expects {self.embed_dim}"
            )

    def insert_document(self, filename: str, file_type: str, content: str) -> str:
        with store_errors("insert document"), self.engine.begin() as conn:
            doc_id = conn.execute(
                sa_text("""
                    INSERT INTO documents (filename, file_type, content)
                    VALUES (:fn, :ft, :content)
                    RETURNING id
                """),
                {"fn": filename, "ft": file_type, "content": content},
            ).scalar_one()
        return str(doc_id)

    def insert_chunk(self, document_id: str, text: str, vector: Sequence[float], index: int) -> str:
        self._check_dim(vector)
        stmt = sa_text("""
            INSERT INTO embeddings (document_id, chunk_text, embedding, chunk_index)
            VALUES (:doc, :content, :emb, :idx)
            RETURNING id
        """).bindparams(self._vector_param("emb"))

        with store_errors("insert chunk"), self.engine.begin() as conn:
            chunk_id = conn.execute(
                stmt,
                {"doc": document_id, "content": text, "emb": list(vector), "idx": index},
            ).scalar_one()
        return str(chunk_id)

    def nearest_neighbors(
        self,
        query_vector: Sequence[float],
        max_distance: Optional[float] = None,
        limit: int = 10,
    ) -> List[RetrievalResult]:
        """
        Return chunks ordered by ascending cosine distance.

        Args:
            query_vector: Query embedding
            max_distance: If given, only rows with distance strictly below it
            limit: Maximum number of rows

        Returns:
            Ranked retrieval results, closest first
        """
        self._check_dim(query_vector)
        where = "WHERE (e.embedding <=> :qv) < :max_distance" if max_distance is not None else ""
        stmt = sa_text(f"""
            SELECT e.chunk_text,
                   e.document_id,
                   d.filename,
                   e.embedding <=> :qv AS distance,
                   e.chunk_index
            FROM embeddings e
            JOIN documents d ON d.id = e.document_id
            {where}
            ORDER BY e.embedding <=> :qv
            LIMIT :k
        """).bindparams(self._vector_param("qv"))

        params = {"qv": list(query_vector), "k": limit}
        if max_distance is not None:
            params["max_distance"] = max_distance

        t = perf_counter()
        with store_errors("query nearest neighbors"), self.engine.begin() as conn:
            rows = conn.execute(stmt, params).mappings().all()
        logger.info(
            "Nearest neighbor query finished",
            rows=len(rows),
            max_distance=max_distance,
            time_ms=round((perf_counter() - t) * 1000, 2),
        )

        return [
            RetrievalResult(
                chunk_text=r["chunk_text"],
                document_id=str(r["document_id"]),
                filename=r["filename"],
                # float rounding can dip a hair below zero for identical vectors
                distance=max(float(r["distance"]), 0.0),
                chunk_index=r["chunk_index"],
            )
            for r in rows
        ]

    def delete_document(self, doc_id: str) -> str:
        """Delete a document; its chunks go with it (ON DELETE CASCADE)."""
        doc_id = parse_uuid(doc_id)
        with store_errors("delete document"), self.engine.begin() as conn:
            filename = conn.execute(
                sa_text("DELETE FROM documents WHERE id = :id RETURNING filename"),
                {"id": doc_id},
            ).scalar_one_or_none()
        if filename is None:
            raise NotFoundError(f"Document {doc_id} not found")
        return filename

    def list_documents(self) -> List[DocumentInfo]:
        with store_errors("list documents"), self.engine.begin() as conn:
            rows = conn.execute(sa_text("""
                SELECT d.id,
                       d.filename,
                       d.file_type,
                       d.created_at,
                       COUNT(e.id) AS chunk_count
                FROM documents d
                LEFT JOIN embeddings e ON e.document_id = d.id
                GROUP BY d.id
                ORDER BY d.created_at DESC
            """)).mappings().all()
        return [
            DocumentInfo(
                id=str(r["id"]),
                filename=r["filename"],
                file_type=r["file_type"],
                created_at=r["created_at"],
                chunk_count=r["chunk_count"],
            )
            for r in rows
        ]

    def count_documents(self) -> int:
        with store_errors("count documents"), self.engine.begin() as conn:
            return conn.execute(sa_text("SELECT COUNT(*) FROM documents")).scalar()
