"""
Collaborator providers for the routes.
Tests swap any of these through app.dependency_overrides.
"""
from functools import lru_cache

from fastapi import Depends

from . import config
from .completion import OpenAICompletionProvider
from .embedding import LocalEmbeddingProvider, OpenAIEmbeddingProvider
from .openai_client import get_openai_client
from .services.answer_service import AnswerComposer
from .services.history_service import HistoryRepository
from .services.ingestion_service import IngestionPipeline
from .services.retrieval_service import RetrievalEngine
from .store import PgVectorStore


@lru_cache(maxsize=1)
def get_store() -> PgVectorStore:
    from .db import engine
    return PgVectorStore(engine)


@lru_cache(maxsize=1)
def get_history_repository() -> HistoryRepository:
    from .db import engine
    return HistoryRepository(engine)


@lru_cache(maxsize=1)
def get_embedder():
    if config.EMBED_PROVIDER == "local":
        return LocalEmbeddingProvider()
    return OpenAIEmbeddingProvider(get_openai_client())


@lru_cache(maxsize=1)
def get_completion_provider() -> OpenAICompletionProvider:
    return OpenAICompletionProvider(get_openai_client())


def get_ingestion_pipeline(store=Depends(get_store), embedder=Depends(get_embedder)) -> IngestionPipeline:
    return IngestionPipeline(store, embedder)


def get_retrieval_engine(store=Depends(get_store), embedder=Depends(get_embedder)) -> RetrievalEngine:
    return RetrievalEngine(store, embedder)


def get_answer_composer(
    retriever=Depends(get_retrieval_engine),
    completion=Depends(get_completion_provider),
    history=Depends(get_history_repository),
) -> AnswerComposer:
    return AnswerComposer(retriever, completion, history)
