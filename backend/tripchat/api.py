import asyncio
import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from tripchat.integrations.exceptions import UpstreamAPIError
from tripchat.main import format_trip, summarize_itinerary
from tripchat.session import (
    ConversationNotFoundError,
    SessionController,
    TurnInProgressError,
    build_default_controller,
)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="TripChat Backend API",
    description="Conversational trip planning: slot filling, itinerary generation and enrichment",
    version="1.0.0",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure this properly for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_controller: Optional[SessionController] = None


def get_controller() -> SessionController:
    """Lazily build the process-wide controller; tests override this dependency."""
    global _controller
    if _controller is None:
        _controller = build_default_controller()
    return _controller


class ChatRequest(BaseModel):
    message: str
    conversation_id: Optional[str] = None


class ChatResponse(BaseModel):
    success: bool = True
    conversation_id: str
    messages: List[dict] = []
    phase: str
    collected_info: dict = {}
    itinerary: Optional[dict] = None
    summary: Optional[dict] = None
    price_estimate: Optional[dict] = None
    warnings: List[str] = []
    error: Optional[str] = None
    stale: bool = False
    logs: List[dict] = []


def _not_found(conversation_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Conversation {conversation_id} not found")


@app.get("/")
def root():
    return {
        "message": "TripChat Backend API",
        "version": "1.0.0",
        "endpoints": {
            "health": "/health",
            "chat": "/api/chat",
            "chats": "/api/chats",
            "docs": "/docs",
        },
    }


@app.get("/health")
def health():
    return {"status": "healthy", "service": "TripChat Backend"}


@app.post("/api/chat", response_model=ChatResponse)
async def chat(request: ChatRequest, controller: SessionController = Depends(get_controller)):
    """
    Send one user message and get back the assistant messages of the turn.

    - **message**: what the traveler typed
    - **conversation_id**: conversation to continue; a new one is started when omitted
    """
    if not request.message.strip():
        raise HTTPException(status_code=400, detail="Message must not be empty")

    try:
        # the pipeline is synchronous (LLM + places calls); keep the event loop free
        turn = await asyncio.to_thread(controller.send_message, request.message, request.conversation_id)
    except TurnInProgressError:
        raise HTTPException(status_code=409, detail="A message is already being processed for this conversation")
    except ConversationNotFoundError:
        raise _not_found(request.conversation_id)
    except Exception as e:
        logger.error(f"Error processing chat turn: {e}")
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")

    logger.info(f"Turn done for {turn.conversation_id}: phase={turn.phase.value}, messages={len(turn.messages)}")
    return ChatResponse(
        conversation_id=turn.conversation_id,
        messages=turn.messages,
        phase=turn.phase.value,
        collected_info=turn.slots.filled(),
        itinerary=turn.itinerary.model_dump(mode="json", by_alias=True) if turn.itinerary else None,
        summary=summarize_itinerary(turn.itinerary),
        price_estimate=turn.price_estimate.model_dump(mode="json") if turn.price_estimate else None,
        warnings=turn.warnings,
        error=turn.error,
        stale=turn.stale,
        logs=turn.logs,
    )


@app.post("/api/chats")
def create_chat(previous_id: Optional[str] = None, controller: SessionController = Depends(get_controller)):
    """Start a conversation; a turn still running for previous_id is dropped."""
    session = controller.start_new_conversation(previous_id=previous_id)
    return {"conversation_id": session.conversation_id, "messages": session.messages, "phase": session.phase.value}


@app.get("/api/chats")
def list_chats(limit: int = 50, controller: SessionController = Depends(get_controller)):
    try:
        return {"chats": controller.refresh_history(limit)}
    except UpstreamAPIError as e:
        logger.error(f"Error listing chats: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/api/chats/{conversation_id}")
def get_chat(conversation_id: str, leaving: Optional[str] = None, controller: SessionController = Depends(get_controller)):
    try:
        session = controller.load_conversation(conversation_id, leaving=leaving)
    except ConversationNotFoundError:
        raise _not_found(conversation_id)
    except UpstreamAPIError as e:
        logger.error(f"Error loading chat {conversation_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    return {
        **session.summary(),
        "messages": session.messages,
        "collected_info": session.slots.filled(),
    }


@app.delete("/api/chats/{conversation_id}")
def delete_chat(conversation_id: str, controller: SessionController = Depends(get_controller)):
    try:
        controller.delete_conversation(conversation_id)
    except ConversationNotFoundError:
        raise _not_found(conversation_id)
    except UpstreamAPIError as e:
        logger.error(f"Error deleting chat {conversation_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    return {"success": True, "conversation_id": conversation_id}


@app.get("/api/chats/{conversation_id}/itinerary")
def get_itinerary(conversation_id: str, controller: SessionController = Depends(get_controller)):
    try:
        itinerary = controller.get_itinerary(conversation_id)
    except ConversationNotFoundError:
        raise _not_found(conversation_id)
    if itinerary is None:
        raise HTTPException(status_code=404, detail="No itinerary has been generated for this conversation yet")
    session = controller.load_conversation(conversation_id)
    return {
        "conversation_id": conversation_id,
        "trip": format_trip(itinerary),
        "itinerary": itinerary.model_dump(mode="json", by_alias=True),
        "summary": summarize_itinerary(itinerary),
        "price_estimate": session.price_estimate.model_dump(mode="json") if session.price_estimate else None,
    }
