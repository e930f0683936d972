"""
Answer service.
Builds a document-grounded prompt from retrieved chunks and asks the model.
"""
from time import perf_counter
from typing import List, Optional

from .. import config
from ..errors import InputError, StoreError
from ..logging_config import logger
from ..schemas import AnswerResult, HistoryEntry, RetrievalResult
from ..utils.helpers import group_chunks_by_document

NO_CONTEXT_MESSAGE = "No relevant documents found in the knowledge base."

UNCERTAIN_PHRASES = (
    "i don't know",
    "i cannot",
    "i'm not sure",
    "i don't have enough information",
)

SYSTEM_PROMPT_TEMPLATE = """You are a helpful assistant that answers questions based on the provided document context.

IMPORTANT INSTRUCTIONS:
1. Base your answer primarily on the context provided below
2. If the context contains relevant information, use it to provide a detailed and accurate answer
3. If the context doesn't contain enough information to answer the question, clearly state this
4. Cite specific parts of the documents when possible
5. Be concise but comprehensive
6. If you're unsure about something, acknowledge the uncertainty

Context from uploaded documents:
{context}

Previous conversation for continuity:
{history}

Please provide a clear, accurate answer based on the context provided."""


def build_context(chunks: List[RetrievalResult]) -> str:
    """
    Build the context string, one section per source document.

    Returns:
        "From a.pdf:\\n<chunk>\\n\\n<chunk>\\n\\n---\\n\\nFrom b.csv:\\n<chunk>"
    """
    if not chunks:
        return NO_CONTEXT_MESSAGE

    sections = []
    for filename, doc_chunks in group_chunks_by_document(chunks).items():
        body = "\n\n".join(c.chunk_text for c in doc_chunks)
        sections.append(f"From {filename}:\n{body}")
    return "\n\n---\n\n".join(sections)


def format_history(history: List[HistoryEntry]) -> str:
    return "\n".join(f"User: {h.question}\nAssistant: {h.answer}" for h in history)


def classify_answer(answer: str, sources: List[str]) -> str:
    """answered / unanswered / human_intervention"""
    if not sources:
        return "unanswered"
    lowered = answer.lower()
    if any(phrase in lowered for phrase in UNCERTAIN_PHRASES):
        return "human_intervention"
    return "answered"


class AnswerComposer:

    def __init__(self, retriever, completion, history=None,
                 search_limit: int = config.SEARCH_LIMIT,
                 history_turns: int = config.HISTORY_CONTEXT_TURNS):
        self.retriever = retriever
        self.completion = completion
        self.history = history
        self.search_limit = search_limit
        self.history_turns = history_turns

    def _recent_history(self) -> List[HistoryEntry]:
        if self.history is None or self.history_turns < 1:
            return []
        try:
            return self.history.recent(self.history_turns)
        except StoreError as e:
            logger.error("Error loading chat history", exc_info=e)
            return []

    def answer(self, question: str, history: Optional[List[HistoryEntry]] = None) -> AnswerResult:
        """
        Answer a question from the stored documents.

        Args:
            question: The user's question
            history: Earlier exchanges to include; defaults to the most recent
                     HISTORY_CONTEXT_TURNS saved ones

        Returns:
            AnswerResult with the answer, the context used and its source files

        Raises:
            InputError: Empty question
            ProviderError / StoreError: From retrieval or completion
        """
        question = (question or "").strip()
        if not question:
            raise InputError("Question is required")

        t = perf_counter()
        chunks = self.retriever.retrieve(question, self.search_limit)
        context = build_context(chunks)
        sources = list(group_chunks_by_document(chunks))

        if history is None:
            history = self._recent_history()
        system_prompt = SYSTEM_PROMPT_TEMPLATE.format(context=context, history=format_history(history))

        answer = self.completion.complete(system_prompt, question)
        answer_type = classify_answer(answer, sources)

        if self.history is not None:
            self.history.save(question, answer, sources, answer_type)

        logger.info(
            "Query completed",
            question=question[:80],
            sources=sources,
            type=answer_type,
            time_ms=round((perf_counter() - t) * 1000, 2),
        )
        return AnswerResult(
            question=question,
            answer=answer,
            context=context,
            sources=sources,
            type=answer_type,
        )
