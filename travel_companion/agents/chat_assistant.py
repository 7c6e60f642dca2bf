"""Conversational trip assistant."""
from __future__ import annotations

import json
import time
from collections import OrderedDict, deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple

from travel_companion.errors import UpstreamError
from travel_companion.llm import ChatCompleter
from travel_companion.log import get_logger

logger = get_logger(__name__)

MAX_CONTEXT_MESSAGES = 10
MAX_SESSIONS = 1000
SESSION_TTL_SECONDS = 24 * 60 * 60

SYSTEM_PROMPT = """You are a friendly AI travel assistant. Help users plan their trips by providing helpful information and suggestions.

Always respond in this JSON format:
{
  "message": "Your response message here"
}

When a user asks about specific travel details or is ready to create a trip, include trip details like this:
{
  "message": "Your response message here",
  "tripDetails": {
    "destination": "City name",
    "startDate": "YYYY-MM-DD",
    "endDate": "YYYY-MM-DD",
    "createTrip": true
  }
}"""

EMPTY_REPLY = "I'm sorry, I couldn't generate a response. Please try again."
UNPARSEABLE_REPLY = "I'm sorry, I had trouble processing that. Could you try again?"
MALFORMED_REPLY = "I'm sorry, I couldn't understand that. Could you rephrase your question?"


class ChatContext:
    """Rolling window of the latest exchanges; oldest entries fall off first."""

    def __init__(self, maxlen: int = MAX_CONTEXT_MESSAGES) -> None:
        self._messages: Deque[Dict[str, str]] = deque(maxlen=maxlen)

    def append(self, role: str, content: str) -> None:
        self._messages.append({"role": role, "content": content})

    def messages(self) -> List[Dict[str, str]]:
        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)


class ChatSessionStore:
    """Chat contexts keyed by session id.

    Entries idle for longer than ``ttl_seconds`` are dropped, and once
    ``max_sessions`` are held the least recently used one is evicted.
    """

    def __init__(
        self,
        maxlen: int = MAX_CONTEXT_MESSAGES,
        max_sessions: int = MAX_SESSIONS,
        ttl_seconds: float = SESSION_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.maxlen = maxlen
        self.max_sessions = max_sessions
        self.ttl = ttl_seconds
        self._clock = clock
        self._contexts: OrderedDict[str, Tuple[float, ChatContext]] = OrderedDict()

    def _prune(self, now: float) -> None:
        # oldest access first, so stop at the first live entry
        while self._contexts:
            session_id, (last_seen, _) = next(iter(self._contexts.items()))
            if now - last_seen <= self.ttl:
                break
            del self._contexts[session_id]
            logger.debug("Expired chat context %s", session_id)

    def get(self, session_id: str) -> ChatContext:
        now = self._clock()
        self._prune(now)
        entry = self._contexts.pop(session_id, None)
        context = entry[1] if entry is not None else ChatContext(self.maxlen)
        self._contexts[session_id] = (now, context)
        while len(self._contexts) > self.max_sessions:
            self._contexts.popitem(last=False)
        return context

    def discard(self, session_id: Optional[str]) -> None:
        if session_id:
            self._contexts.pop(session_id, None)

    def __contains__(self, session_id: str) -> bool:
        entry = self._contexts.get(session_id)
        return entry is not None and self._clock() - entry[0] <= self.ttl

    def __len__(self) -> int:
        return len(self._contexts)


@dataclass
class ChatReply:
    message: str
    destination: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"message": self.message}
        if self.destination is not None:
            payload["destination"] = self.destination
        if self.start_date is not None:
            payload["startDate"] = self.start_date
        if self.end_date is not None:
            payload["endDate"] = self.end_date
        return payload


def parse_reply(raw: Optional[str]) -> ChatReply:
    """Turn the model's JSON envelope into a reply, never raising on bad input."""
    if not raw:
        logger.error("Empty response from chat model")
        return ChatReply(EMPTY_REPLY)

    try:
        envelope = json.loads(raw)
    except ValueError:
        logger.warning("Chat model returned non-JSON content: %.200s", raw)
        return ChatReply(UNPARSEABLE_REPLY)

    if not isinstance(envelope, dict) or not isinstance(envelope.get("message"), str) or not envelope["message"]:
        logger.warning("Chat reply lacked a message string: %.200s", raw)
        return ChatReply(MALFORMED_REPLY)

    details = envelope.get("tripDetails")
    if isinstance(details, dict) and details.get("createTrip") is True:
        return ChatReply(
            message=envelope["message"],
            destination=details.get("destination"),
            start_date=details.get("startDate"),
            end_date=details.get("endDate"),
        )
    return ChatReply(envelope["message"])


async def handle_chat_message(
    message: str,
    context: ChatContext,
    completer: ChatCompleter,
) -> ChatReply:
    messages = [{"role": "system", "content": SYSTEM_PROMPT}]
    messages.extend(context.messages())
    messages.append({"role": "user", "content": message})

    try:
        raw = await completer.complete(messages)
    except Exception as exc:
        logger.exception("Chat completion failed: %s", exc)
        raise UpstreamError("Failed to process your message. Please try again.") from exc

    reply = parse_reply(raw)
    context.append("user", message)
    context.append("assistant", reply.message)
    return reply
