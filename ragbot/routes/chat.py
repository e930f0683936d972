"""
Chat-related API routes.
Handles question answering and chat history management.
"""
from fastapi import APIRouter, Depends, Query

from ..dependencies import get_answer_composer, get_history_repository, get_retrieval_engine
from ..schemas import HumanResponseBody, QueryBody, SearchBody

router = APIRouter(prefix="/api/chat", tags=["chat"])


@router.post("/query")
def ask_question(payload: QueryBody, composer=Depends(get_answer_composer)):
    """
    Answer a question from the uploaded documents.

    Workflow:
    1. Retrieve the closest chunks
    2. Build context grouped by document
    3. Ask the completion model
    4. Save the exchange to history
    """
    result = composer.answer(payload.question)
    return {"success": True, **result.model_dump()}


@router.post("/search")
def search_chunks(payload: SearchBody, retriever=Depends(get_retrieval_engine)):
    """Raw similarity search; returns ranked chunks without calling the model."""
    results = retriever.retrieve(payload.query, payload.limit)
    return {"success": True, "results": [r.model_dump() for r in results]}


@router.get("/history")
def get_history(
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    history=Depends(get_history_repository),
):
    entries = history.list(limit=limit, offset=offset)
    return {
        "success": True,
        "chatHistory": [e.model_dump(mode="json") for e in entries],
        "total": len(entries),
    }


@router.delete("/history/{entry_id}")
def delete_history_entry(entry_id: str, history=Depends(get_history_repository)):
    history.delete(entry_id)
    return {"success": True, "message": "Chat entry deleted successfully"}


@router.delete("/history")
def clear_history(history=Depends(get_history_repository)):
    history.clear()
    return {"success": True, "message": "All chat history cleared successfully"}


@router.put("/history/{entry_id}/respond")
def respond_to_entry(entry_id: str, payload: HumanResponseBody,
                     history=Depends(get_history_repository)):
    """Answer an escalated (human_intervention) question by hand."""
    history.respond(entry_id, payload.human_response)
    return {"success": True, "message": "Human response added successfully"}
