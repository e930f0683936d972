"""
Ingestion service.
Turns raw document text into a stored document plus chunk/embedding rows.
"""
from typing import List

from .. import config
from ..errors import InputError
from ..logging_config import logger
from ..schemas import IngestResult
from ..text_extraction import SUPPORTED_TYPES, read_any
from ..text_processing import chunk_text, normalize_text


class IngestionPipeline:
    """
    normalize → chunk (with quality filter) → store document → embed → store chunks.

    Chunk inserts are independent statements. If embedding or a chunk insert
    fails, the error propagates and rows already written stay behind.
    """

    def __init__(self, store, embedder,
                 chunk_size: int = config.CHUNK_SIZE,
                 chunk_overlap: int = config.CHUNK_OVERLAP):
        self.store = store
        self.embedder = embedder
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    def ingest(self, raw_text: str, filename: str, file_type: str) -> IngestResult:
        """
        Ingest one document.

        Args:
            raw_text: Extracted document text (PDF text or rendered CSV)
            filename: Original filename shown to users
            file_type: "pdf" or "csv"

        Returns:
            IngestResult with the new document id and accepted chunk count

        Raises:
            InputError: Missing filename or unsupported file type
            ProviderError: Embedding request failed
            StoreError: A write failed
        """
        if not filename or not filename.strip():
            raise InputError("filename is required")
        if file_type not in SUPPORTED_TYPES:
            raise InputError(f"Unsupported file type: {file_type}")

        cleaned = normalize_text(raw_text or "")
        chunks = chunk_text(cleaned, self.chunk_size, self.chunk_overlap)
        logger.info("Created chunks", filename=filename, chunk_count=len(chunks))

        document_id = self.store.insert_document(filename, file_type, cleaned)
        self._store_chunks(document_id, chunks)

        logger.info("Document ingested", filename=filename, doc_id=document_id, chunks=len(chunks))
        return IngestResult(document_id=document_id, chunk_count=len(chunks))

    def ingest_file(self, file_path: str, filename: str) -> IngestResult:
        """Extract text from a .pdf or .csv file on disk and ingest it."""
        raw_text, kind = read_any(file_path, filename)
        return self.ingest(raw_text, filename, kind)

    def _store_chunks(self, document_id: str, chunks: List[str]):
        if not chunks:
            return

        vectors = self.embedder.embed_batch(chunks)
        for i, (chunk, vector) in enumerate(zip(chunks, vectors)):
            self.store.insert_chunk(document_id, chunk, vector, i)
