"""
FastAPI endpoints for the chat service.

Provides the API to send a message to a thread, inspect the receipts of
the last answer, and clear a thread.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field, field_validator

from voyant.graph.turn import ChatResult, handle_chat
from voyant.memory import clear_thread_slots, get_last_receipts, get_store
from voyant.shared.contracts import Receipts


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chat", tags=["chat"])


# ============================================================================
# Request/Response Models
# ============================================================================


class ChatRequest(BaseModel):
    """A message for the travel assistant."""

    message: str = Field(min_length=1, max_length=4000, description="User message")
    thread_id: Optional[str] = Field(
        default=None, max_length=128, description="Existing thread id; omit to start a new thread"
    )
    receipts: bool = Field(default=False, description="Include facts and decisions in the response")

    @field_validator("message")
    @classmethod
    def message_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("message must not be blank")
        return value


class ReceiptsResponse(BaseModel):
    thread_id: str
    explanation: str
    sources: List[str] = Field(default_factory=list)
    receipts: Receipts


class ClearResponse(BaseModel):
    thread_id: str
    cleared: bool


# ============================================================================
# Endpoints
# ============================================================================


@router.post("", response_model=ChatResult)
def chat(request: ChatRequest):
    """Send a message and get the assistant's reply."""
    _log = f"[thread={request.thread_id or 'new'}] [graph=turn] [api=chat] "
    logger.info(f"{_log}Chat request | chars={len(request.message)}, receipts={request.receipts}")

    try:
        return handle_chat(request.message, request.thread_id, request.receipts)
    except Exception as e:
        logger.exception(f"{_log}Chat turn failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Chat turn failed: {str(e)}",
        )


@router.get("/{thread_id}/receipts", response_model=ReceiptsResponse)
def receipts(thread_id: str):
    """Facts and decisions behind the thread's last answer."""
    last = get_last_receipts(thread_id) or Receipts()
    return ReceiptsResponse(
        thread_id=thread_id,
        explanation=last.format(),
        sources=last.sources,
        receipts=last,
    )


@router.delete("/{thread_id}", response_model=ClearResponse)
def clear_thread(thread_id: str):
    """Forget everything remembered for a thread."""
    existed = get_store().has_thread(thread_id)
    clear_thread_slots(thread_id)
    logger.info(f"[thread={thread_id}] [graph=turn] [api=clear] Thread cleared | existed={existed}")
    return ClearResponse(thread_id=thread_id, cleared=existed)
