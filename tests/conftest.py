"""Shared pytest configuration and fixtures for the chatbot backend tests."""

import uuid
from datetime import datetime, timezone

import numpy as np
import pytest

from ragbot.errors import NotFoundError, ProviderError, StoreError
from ragbot.schemas import DocumentInfo, RetrievalResult

SENTENCE = "The river runs past the old mill near the village."


class FakeStore:
    """In-memory document/chunk store ranking by cosine distance."""

    def __init__(self, embed_dim: int = 4):
        self.embed_dim = embed_dim
        self.documents = {}
        self.chunks = []
        self.neighbor_calls = []
        self.fail_on_chunk_index = None

    def insert_document(self, filename, file_type, content):
        doc_id = str(uuid.uuid4())
        self.documents[doc_id] = {
            "filename": filename,
            "file_type": file_type,
            "content": content,
            "created_at": datetime.now(timezone.utc),
        }
        return doc_id

    def insert_chunk(self, document_id, text, vector, index):
        if index == self.fail_on_chunk_index:
            raise StoreError("disk full")
        if len(vector) != self.embed_dim:
            raise StoreError("dimension mismatch")
        chunk_id = str(uuid.uuid4())
        self.chunks.append({
            "id": chunk_id,
            "document_id": document_id,
            "text": text,
            "vector": list(vector),
            "index": index,
        })
        return chunk_id

    def nearest_neighbors(self, query_vector, max_distance=None, limit=10):
        self.neighbor_calls.append(max_distance)
        q = np.asarray(query_vector, dtype=float)
        rows = []
        for c in self.chunks:
            v = np.asarray(c["vector"], dtype=float)
            distance = float(1.0 - q.dot(v) / (np.linalg.norm(q) * np.linalg.norm(v)))
            distance = max(distance, 0.0)
            if max_distance is not None and not distance < max_distance:
                continue
            rows.append(RetrievalResult(
                chunk_text=c["text"],
                document_id=c["document_id"],
                filename=self.documents[c["document_id"]]["filename"],
                distance=distance,
                chunk_index=c["index"],
            ))
        rows.sort(key=lambda r: r.distance)
        return rows[:limit]

    def delete_document(self, doc_id):
        if doc_id not in self.documents:
            raise NotFoundError(f"Document {doc_id} not found")
        self.chunks = [c for c in self.chunks if c["document_id"] != doc_id]
        return self.documents.pop(doc_id)["filename"]

    def list_documents(self):
        return [
            DocumentInfo(
                id=doc_id,
                filename=d["filename"],
                file_type=d["file_type"],
                created_at=d["created_at"],
                chunk_count=sum(1 for c in self.chunks if c["document_id"] == doc_id),
            )
            for doc_id, d in self.documents.items()
        ]

    def count_documents(self):
        return len(self.documents)


class FakeEmbedder:
    """
    Deterministic embedder. Known texts map to fixed vectors; anything else
    gets a vector derived from its letters.
    """

    def __init__(self, dim: int = 4, vectors=None, fail: bool = False):
        self.dim = dim
        self.vectors = dict(vectors or {})
        self.fail = fail
        self.embed_calls = []
        self.batch_calls = []

    def _vector(self, text):
        if text in self.vectors:
            return list(self.vectors[text])
        counts = [0.0] * self.dim
        for ch in text.lower():
            if ch.isalpha():
                counts[ord(ch) % self.dim] += 1.0
        counts[0] += 1.0
        return counts

    def embed(self, text):
        if self.fail:
            raise ProviderError("embedding service unavailable")
        self.embed_calls.append(text)
        return self._vector(text)

    def embed_batch(self, texts):
        if self.fail:
            raise ProviderError("embedding service unavailable")
        self.batch_calls.append(list(texts))
        return [self._vector(t) for t in texts]


class FakeCompletion:
    def __init__(self, answer: str = "The mill was built in 1820."):
        self.answer = answer
        self.calls = []

    def complete(self, system_prompt, user_message):
        self.calls.append((system_prompt, user_message))
        return self.answer


class FakeHistory:
    def __init__(self, entries=None):
        self.entries = list(entries or [])
        self.saved = []

    def save(self, question, answer, context_documents, type=None):
        self.saved.append((question, answer, list(context_documents), type))

    def recent(self, limit=3):
        return self.entries[-limit:]


def make_result(distance, text="chunk", filename="a.pdf", index=0, document_id="doc-1"):
    return RetrievalResult(
        chunk_text=text,
        document_id=document_id,
        filename=filename,
        distance=distance,
        chunk_index=index,
    )


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def fake_embedder():
    return FakeEmbedder()


@pytest.fixture
def fake_completion():
    return FakeCompletion()


@pytest.fixture
def fake_history():
    return FakeHistory()


@pytest.fixture
def plain_passage() -> str:
    """26 identical 50-character sentences: 1325 characters, no newlines."""
    return " ".join([SENTENCE] * 26)


@pytest.fixture
def numbers_table() -> str:
    """A table of numbers only; no chunk of it is meaningful."""
    return "\n".join(
        " ".join(str(i * j) for j in range(1, 12)) for i in range(1, 40)
    )
