"""
Conversation sessions and the controller that drives them.

A SessionController owns every ChatSession of the process and runs one turn
at a time per conversation through the compiled turn graph. It is handed to
whoever needs it (the API, the CLI demo, tests) instead of living in a global.
"""

import logging
import threading
import time
import uuid
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from tripchat.config import Settings, get_settings
from tripchat.graph.build_graph import build_graph
from tripchat.graph.state import Phase, TurnState
from tripchat.integrations.chat_backend import (
    ChatBackend,
    ItineraryGenerator,
    OpenAIChatBackend,
    OpenAIItineraryGenerator,
)
from tripchat.integrations.exceptions import UpstreamAPIError
from tripchat.integrations.google_places_client import GooglePlacesClient
from tripchat.integrations.mongo_client import ConversationRepository
from tripchat.main import generate_chat_title
from tripchat.models.entities import ItineraryDocument, PriceEstimate, TravelData
from tripchat.models.trip_slots import TripSlots

logger = logging.getLogger(__name__)

GREETING = "Hey there, Arya here! Excited to help you with anything travel related."
DEFAULT_TITLE = "New chat"


class TurnInProgressError(RuntimeError):
    """A turn is already running for this conversation."""


class ConversationNotFoundError(KeyError):
    """No conversation with this id in memory or in storage."""


def _message(role: str, content: str, kind: str = "reply") -> Dict[str, Any]:
    return {"role": role, "content": content, "kind": kind, "timestamp": int(time.time())}


class ChatSession(BaseModel):
    conversation_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    title: str = DEFAULT_TITLE
    messages: List[Dict[str, Any]] = Field(default_factory=list)
    slots: TripSlots = Field(default_factory=TripSlots)
    phase: Phase = Phase.COLLECTING_INFO
    travel_data: TravelData = Field(default_factory=TravelData)
    itinerary: Optional[ItineraryDocument] = None
    price_estimate: Optional[PriceEstimate] = None
    # bumped whenever the session is abandoned or reset; results of older turns are dropped
    epoch: int = 0
    in_flight: bool = False

    @classmethod
    def new(cls) -> "ChatSession":
        return cls(messages=[_message("assistant", GREETING, "greeting")])

    def reset(self) -> None:
        self.title = DEFAULT_TITLE
        self.messages = [_message("assistant", GREETING, "greeting")]
        self.slots = TripSlots()
        self.phase = Phase.COLLECTING_INFO
        self.travel_data = TravelData()
        self.itinerary = None
        self.price_estimate = None
        self.epoch += 1

    def history(self) -> List[Dict[str, str]]:
        return [{"role": m["role"], "content": m["content"]} for m in self.messages]

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude={"epoch", "in_flight", "conversation_id"})

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "ChatSession":
        data = {k: v for k, v in record.items() if k in cls.model_fields}
        return cls.model_validate(data)

    def summary(self) -> Dict[str, Any]:
        return {
            "conversation_id": self.conversation_id,
            "title": self.title,
            "phase": self.phase.value,
            "has_itinerary": self.itinerary is not None,
        }


class TurnResult(BaseModel):
    conversation_id: str
    messages: List[Dict[str, Any]] = Field(default_factory=list)
    phase: Phase
    slots: TripSlots
    itinerary: Optional[ItineraryDocument] = None
    price_estimate: Optional[PriceEstimate] = None
    warnings: List[str] = Field(default_factory=list)
    error: Optional[str] = None
    logs: List[dict] = Field(default_factory=list)
    # the conversation was reset or left while this turn ran; nothing was applied
    stale: bool = False


class SessionController:
    def __init__(
        self,
        chat_backend: ChatBackend,
        generator: ItineraryGenerator,
        repository: Optional[ConversationRepository] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.repository = repository or ConversationRepository()
        self.graph = build_graph(chat_backend, generator, self.settings)
        self._sessions: Dict[str, ChatSession] = {}
        self._lock = threading.Lock()

    # -- conversation commands --

    def _abandon(self, conversation_id: Optional[str]) -> None:
        left = self._sessions.get(conversation_id) if conversation_id else None
        if left is not None:
            left.epoch += 1
            logger.info("Left conversation %s", conversation_id)

    def start_new_conversation(self, previous_id: Optional[str] = None) -> ChatSession:
        """Start a fresh conversation. A turn still running for previous_id will be dropped."""
        with self._lock:
            self._abandon(previous_id)
            session = ChatSession.new()
            self._sessions[session.conversation_id] = session
        logger.info("Started conversation %s", session.conversation_id)
        self._persist(session)
        return session

    def reset(self, conversation_id: str) -> ChatSession:
        with self._lock:
            session = self._get(conversation_id)
            session.reset()
        logger.info("Reset conversation %s", conversation_id)
        self._persist(session)
        return session

    def load_conversation(self, conversation_id: str, leaving: Optional[str] = None) -> ChatSession:
        """Open a conversation from memory or storage, optionally leaving another one."""
        with self._lock:
            session = self._sessions.get(conversation_id)
        if session is None:
            record = self.repository.load(conversation_id)
            if record is None:
                raise ConversationNotFoundError(conversation_id)
            session = ChatSession.from_record({**record, "conversation_id": conversation_id})
        with self._lock:
            if leaving != conversation_id:
                self._abandon(leaving)
            session = self._sessions.setdefault(conversation_id, session)
        return session

    def refresh_history(self, limit: int = 50) -> List[Dict[str, Any]]:
        """Conversation summaries, most recent first; in-memory sessions override stored ones."""
        with self._lock:
            in_memory = {cid: s.summary() for cid, s in self._sessions.items()}
        stored = []
        for record in self.repository.list_recent(limit):
            cid = record.get("conversation_id")
            if cid and cid not in in_memory:
                stored.append({
                    "conversation_id": cid,
                    "title": record.get("title", DEFAULT_TITLE),
                    "phase": record.get("phase", Phase.COLLECTING_INFO.value),
                    "has_itinerary": None,
                })
        return (list(in_memory.values())[::-1] + stored)[:limit]

    def delete_conversation(self, conversation_id: str) -> None:
        with self._lock:
            session = self._sessions.pop(conversation_id, None)
            if session is not None:
                session.epoch += 1
        deleted = self.repository.delete(conversation_id)
        if session is None and not deleted:
            raise ConversationNotFoundError(conversation_id)
        logger.info("Deleted conversation %s", conversation_id)

    def get_itinerary(self, conversation_id: str) -> Optional[ItineraryDocument]:
        return self.load_conversation(conversation_id).itinerary

    # -- turns --

    def _get(self, conversation_id: str) -> ChatSession:
        session = self._sessions.get(conversation_id)
        if session is None:
            raise ConversationNotFoundError(conversation_id)
        return session

    def send_message(self, text: str, conversation_id: Optional[str] = None) -> TurnResult:
        """
        Run one user turn: extract slots, ask the chat backend and, once it
        says TRIP_READY, generate, repair and enrich the itinerary.

        Without a conversation_id a new conversation is started. Raises
        TurnInProgressError when the conversation already has a turn running.
        A result that comes back after the conversation was reset or left is
        returned with stale=True and not applied.
        """
        if conversation_id is None:
            conversation_id = self.start_new_conversation().conversation_id
        if conversation_id not in self._sessions:
            self.load_conversation(conversation_id)

        with self._lock:
            session = self._get(conversation_id)
            if session.in_flight:
                raise TurnInProgressError(conversation_id)
            session.in_flight = True
            epoch = session.epoch
            state = TurnState(
                conversation_id=conversation_id,
                message=text,
                history=session.history(),
                slots=session.slots,
                phase=session.phase,
                travel_data=session.travel_data,
            )

        try:
            out = self.graph.invoke(state)
            result = out if isinstance(out, TurnState) else TurnState(**out)
        finally:
            with self._lock:
                session.in_flight = False

        with self._lock:
            if session.epoch != epoch:
                logger.warning("Dropping stale turn result for %s (epoch %d != %d)", conversation_id, epoch, session.epoch)
                return TurnResult(
                    conversation_id=conversation_id,
                    phase=session.phase,
                    slots=session.slots,
                    logs=result.logs,
                    stale=True,
                )
            self._apply(session, text, result)

        self._persist(session)
        return TurnResult(
            conversation_id=conversation_id,
            messages=result.emitted,
            phase=session.phase,
            slots=session.slots,
            itinerary=result.itinerary if result.phase == Phase.PRESENTED else None,
            price_estimate=result.price_estimate,
            warnings=result.warnings,
            error=result.error,
            logs=result.logs,
        )

    def _apply(self, session: ChatSession, text: str, result: TurnState) -> None:
        session.messages.append(_message("user", text, "user"))
        for m in result.emitted:
            session.messages.append(_message(m["role"], m["content"], m.get("kind", "reply")))
        session.slots = result.slots
        session.phase = result.phase
        session.travel_data = result.travel_data
        # a failed generation never replaces an itinerary that is already being shown
        if result.phase == Phase.PRESENTED and result.itinerary is not None:
            session.itinerary = result.itinerary
            session.price_estimate = result.price_estimate

        if result.request is not None and result.confirmed:
            session.title = generate_chat_title(text, result.request.destination, result.request.duration)
        elif session.title == DEFAULT_TITLE:
            session.title = generate_chat_title(text, session.slots.destination, session.slots.duration)

    def _persist(self, session: ChatSession) -> None:
        try:
            self.repository.save(session.conversation_id, session.to_record())
        except UpstreamAPIError:
            logger.exception("Failed to save conversation %s", session.conversation_id)


def build_default_controller(settings: Optional[Settings] = None) -> SessionController:
    """Controller wired to OpenAI, Google Places and MongoDB from the environment."""
    settings = settings or get_settings()
    places = GooglePlacesClient(api_key=settings.google_places_api_key, limit=settings.places_limit)
    return SessionController(
        chat_backend=OpenAIChatBackend(places=places, model=settings.openai_model),
        generator=OpenAIItineraryGenerator(model=settings.openai_model),
        settings=settings,
    )
