"""
Document management API routes.
Handles document upload, listing, and deletion.
"""
import os
import shutil
import tempfile

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from .. import config
from ..dependencies import get_ingestion_pipeline, get_store
from ..logging_config import logger
from ..text_extraction import file_type_for

router = APIRouter(prefix="/api", tags=["documents"])


# ==================== Document Upload ====================

@router.post("/documents/upload")
def upload_document(file: UploadFile = File(...), pipeline=Depends(get_ingestion_pipeline)):
    """
    Upload one PDF or CSV document.
    
    Process:
    1. Save the upload to a temp file
    2. Extract text (PDF pages or CSV rows)
    3. Clean, chunk and filter the text
    4. Embed the accepted chunks and store them
    
    Returns:
        The new document id and its chunk count
    """
    if not file.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    kind = file_type_for(file.filename)
    logger.info("Processing file", filename=file.filename, file_type=kind)

    # Check file size before reading
    file.file.seek(0, os.SEEK_END)
    size_bytes = file.file.tell()
    file.file.seek(0)
    if size_bytes > config.MAX_FILE_SIZE_BYTES:
        raise HTTPException(
            status_code=400,
            detail=(
                f"File '{file.filename}' is too large. "
                f"Max size is {config.MAX_FILE_SIZE_BYTES // (1024*1024)} MB."
            ),
        )

    with tempfile.NamedTemporaryFile(delete=False, suffix="." + kind) as tmp:
        shutil.copyfileobj(file.file, tmp)
        tmp_path = tmp.name

    try:
        result = pipeline.ingest_file(tmp_path, file.filename)
    finally:
        try:
            os.remove(tmp_path)
        except OSError as e:
            logger.warning("Could not remove temp file", path=tmp_path, error=str(e))

    return {
        "ok": True,
        "filename": file.filename,
        "document_id": result.document_id,
        "chunks": result.chunk_count,
    }


# ==================== Document Listing ====================

@router.get("/documents")
def list_documents(store=Depends(get_store)):
    """
    Returns all documents with chunk counts, newest first.
    """
    documents = store.list_documents()
    logger.info("Listed documents", count=len(documents))
    return {"ok": True, "documents": [d.model_dump(mode="json") for d in documents]}


# ==================== Document Deletion ====================

@router.delete("/documents/{doc_id}")
def delete_document(doc_id: str, store=Depends(get_store)):
    """
    Deletes a document and all its chunks (ON DELETE CASCADE).
    """
    filename = store.delete_document(doc_id)
    logger.info("Document deleted", doc_id=doc_id, filename=filename)
    return {"ok": True, "deleted": doc_id, "filename": filename}
