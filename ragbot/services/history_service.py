"""
Chat history service.
Handles CRUD operations for saved question/answer exchanges.
"""
from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..errors import NotFoundError
from ..logging_config import logger
from ..schemas import HistoryEntry
from ..store import parse_uuid, store_errors

_COLUMNS = "id, type, question, answer, context_documents, created_at"


def _entry(row) -> HistoryEntry:
    return HistoryEntry(
        id=str(row["id"]),
        type=row["type"],
        question=row["question"],
        answer=row["answer"],
        context_documents=list(row["context_documents"] or []),
        created_at=row["created_at"],
    )


class HistoryRepository:

    def __init__(self, engine):
        self.engine = engine

    def save(self, question: str, answer: str, context_documents: List[str],
             type: Optional[str] = None) -> None:
        """
        Store a question/answer exchange.

        A write failure is logged and ignored so it never blocks returning an
        answer to the user.
        """
        try:
            with self.engine.begin() as conn:
                conn.execute(
                    text("""
                        INSERT INTO message_history (question, answer, context_documents, type)
                        VALUES (:question, :answer, :docs, :type)
                    """),
                    {"question": question, "answer": answer,
                     "docs": list(context_documents), "type": type},
                )
        except SQLAlchemyError as e:
            logger.error("Error saving chat history", exc_info=e)

    def recent(self, limit: int = 3) -> List[HistoryEntry]:
        """Last `limit` exchanges in chronological order."""
        if limit < 1:
            return []
        entries = self.list(limit=limit, offset=0)
        return list(reversed(entries))

    def list(self, limit: int = 50, offset: int = 0) -> List[HistoryEntry]:
        """Saved exchanges, newest first."""
        with store_errors("list chat history"), self.engine.begin() as conn:
            rows = conn.execute(
                text(f"""
                    SELECT {_COLUMNS}
                    FROM message_history
                    ORDER BY created_at DESC
                    LIMIT :limit OFFSET :offset
                """),
                {"limit": limit, "offset": offset},
            ).mappings().all()
        return [_entry(r) for r in rows]

    def delete(self, entry_id: str) -> None:
        entry_id = parse_uuid(entry_id, "Chat entry")
        with store_errors("delete chat entry"), self.engine.begin() as conn:
            deleted = conn.execute(
                text("DELETE FROM message_history WHERE id = :id RETURNING id"),
                {"id": entry_id},
            ).first()
        if not deleted:
            raise NotFoundError("Chat entry not found")
        logger.info("Deleted chat entry", entry_id=entry_id)

    def clear(self) -> None:
        with store_errors("clear chat history"), self.engine.begin() as conn:
            conn.execute(text("DELETE FROM message_history"))
        logger.info("Cleared chat history")

    def respond(self, entry_id: str, human_response: str) -> None:
        """
        Replace the answer of an escalated entry with a human-written one.

        Raises:
            NotFoundError: No entry with that id awaiting human intervention
        """
        entry_id = parse_uuid(entry_id, "Chat entry")
        with store_errors("respond to chat entry"), self.engine.begin() as conn:
            updated = conn.execute(
                text("""
                    UPDATE message_history
                    SET answer = :answer, type = 'human_responded'
                    WHERE id = :id AND type = 'human_intervention'
                    RETURNING id
                """),
                {"answer": human_response, "id": entry_id},
            ).first()
        if not updated:
            raise NotFoundError("Chat entry not found or not eligible for human response")
        logger.info("Human response stored", entry_id=entry_id)

