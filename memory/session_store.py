"""Per-conversation outfit history with undo/redo, and the store that holds it."""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from models.clarification import ClarificationContext
from models.outfit import OutfitSnapshot
from models.outfit_item import OutfitItem

logger = logging.getLogger(__name__)


@dataclass
class SessionState:
    """Linear outfit history for one conversation.

    ``cursor`` points at the current snapshot (``-1`` when the history is
    empty). Pushing while the cursor is behind the end drops every snapshot
    after it, so redo is only possible until the next push.
    """

    conversation_id: str
    history: List[OutfitSnapshot] = field(default_factory=list)
    cursor: int = -1
    pending_clarification: Optional[ClarificationContext] = None
    user_preferences: Dict[str, Any] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def current_snapshot(self) -> Optional[OutfitSnapshot]:
        if self.cursor < 0:
            return None
        return self.history[self.cursor]

    def current_outfit(self) -> List[OutfitItem]:
        snapshot = self.current_snapshot()
        return list(snapshot.items) if snapshot else []

    def push_snapshot(
        self,
        items: Sequence[OutfitItem],
        image_ref: Optional[str] = None,
        message_id: Optional[str] = None,
    ) -> OutfitSnapshot:
        snapshot = OutfitSnapshot.create(
            self.conversation_id, items, image_ref=image_ref, message_id=message_id
        )
        del self.history[self.cursor + 1 :]
        self.history.append(snapshot)
        self.cursor = len(self.history) - 1
        logger.debug("pushed %s at cursor %s", snapshot.id, self.cursor)
        return snapshot

    def can_undo(self) -> bool:
        return self.cursor > 0

    def can_redo(self) -> bool:
        return self.cursor < len(self.history) - 1

    def undo(self) -> Optional[OutfitSnapshot]:
        """Step back one snapshot; ``None`` when there is nothing to undo."""

        if not self.can_undo():
            return None
        self.cursor -= 1
        return self.history[self.cursor]

    def redo(self) -> Optional[OutfitSnapshot]:
        """Step forward one snapshot; ``None`` when there is nothing to redo."""

        if not self.can_redo():
            return None
        self.cursor += 1
        return self.history[self.cursor]

    def clear_history(self) -> None:
        self.history = []
        self.cursor = -1

    def set_pending_clarification(self, clarification: ClarificationContext) -> None:
        self.pending_clarification = clarification

    def clear_pending_clarification(self) -> None:
        self.pending_clarification = None

    def update_user_preferences(self, partial: Dict[str, Any]) -> None:
        self.user_preferences = {**self.user_preferences, **partial}

    def get_metadata(self, key: str, default: Any = None) -> Any:
        return self.metadata.get(key, default)

    def set_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = value

    def export(self) -> Dict[str, Any]:
        """Plain structured copy of the session, suitable for JSON."""

        return {
            "conversation_id": self.conversation_id,
            "history": [snapshot.to_dict() for snapshot in self.history],
            "cursor": self.cursor,
            "pending_clarification": (
                self.pending_clarification.to_dict() if self.pending_clarification else None
            ),
            "user_preferences": dict(self.user_preferences),
            "metadata": dict(self.metadata),
        }

    @classmethod
    def import_state(cls, data: Dict[str, Any]) -> "SessionState":
        history = [OutfitSnapshot.from_dict(entry) for entry in data.get("history", [])]
        cursor = int(data.get("cursor", len(history) - 1))
        if not -1 <= cursor < len(history):
            raise ValueError(f"cursor {cursor} out of range for {len(history)} snapshots")
        pending = data.get("pending_clarification")
        return cls(
            conversation_id=str(data["conversation_id"]),
            history=history,
            cursor=cursor,
            pending_clarification=ClarificationContext.from_dict(pending) if pending else None,
            user_preferences=dict(data.get("user_preferences") or {}),
            metadata=dict(data.get("metadata") or {}),
        )


class SessionStore:
    """Interface for conversation session registries."""

    def get_or_create(self, conversation_id: str, preferences: Dict[str, Any] | None = None) -> SessionState:
        raise NotImplementedError

    def get(self, conversation_id: str) -> Optional[SessionState]:
        raise NotImplementedError

    def save(self, session: SessionState) -> None:
        raise NotImplementedError

    def exists(self, conversation_id: str) -> bool:
        raise NotImplementedError

    def delete(self, conversation_id: str) -> bool:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError


class InMemorySessionStore(SessionStore):
    """Process-local registry; sessions live until deleted.

    The lock guards the registry itself. Callers still need to serialise turns
    on the same conversation, since a ``SessionState`` is mutated in place.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, SessionState] = {}
        self._lock = threading.Lock()

    def get_or_create(self, conversation_id: str, preferences: Dict[str, Any] | None = None) -> SessionState:
        with self._lock:
            session = self._sessions.get(conversation_id)
            if session is None:
                session = SessionState(conversation_id=conversation_id, user_preferences=dict(preferences or {}))
                self._sessions[conversation_id] = session
                logger.debug("created session %s", conversation_id)
            return session

    def get(self, conversation_id: str) -> Optional[SessionState]:
        with self._lock:
            return self._sessions.get(conversation_id)

    def save(self, session: SessionState) -> None:
        with self._lock:
            self._sessions[session.conversation_id] = session

    def exists(self, conversation_id: str) -> bool:
        with self._lock:
            return conversation_id in self._sessions

    def delete(self, conversation_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(conversation_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


__all__ = ["InMemorySessionStore", "SessionState", "SessionStore"]
