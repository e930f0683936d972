"""
Pydantic schemas for request/response validation and service results.
"""
from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, Field

FileType = Literal["pdf", "csv"]
AnswerType = Literal["answered", "unanswered", "human_intervention", "human_responded"]


class RetrievalResult(BaseModel):
    """One ranked chunk returned by the retrieval engine. Never persisted."""
    chunk_text: str
    document_id: str
    filename: str
    distance: float = Field(..., ge=0.0, description="Cosine distance, lower is closer")
    chunk_index: int


class IngestResult(BaseModel):
    """Outcome of ingesting one document."""
    document_id: str
    chunk_count: int


class DocumentInfo(BaseModel):
    """A stored document as listed to clients."""
    id: str
    filename: str
    file_type: FileType
    created_at: Optional[datetime] = None
    chunk_count: int = 0


class HistoryEntry(BaseModel):
    """One saved question/answer exchange."""
    id: str
    type: Optional[str] = None
    question: str
    answer: str
    context_documents: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class QueryBody(BaseModel):
    """Request body for asking questions."""
    question: str = Field(..., min_length=1, description="The question to ask")


class SearchBody(BaseModel):
    """Request body for a raw similarity search."""
    query: str = Field(..., min_length=1, description="Text to search for")
    limit: int = Field(10, ge=1, le=50, description="Number of chunks to retrieve")


class HumanResponseBody(BaseModel):
    """Request body for answering an escalated question by hand."""
    human_response: str = Field(..., min_length=1)


class AnswerResult(BaseModel):
    """Answer returned by the chat endpoint."""
    question: str
    answer: str
    context: str
    sources: List[str]
    type: AnswerType
