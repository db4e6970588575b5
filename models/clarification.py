"""Clarification and edge-case schemas shared by the resolver and the session."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

ClarificationType = Literal["missing_info", "ambiguous", "conflict", "confirmation"]
ResolutionAction = Literal["clarify", "error", "proceed"]

EDGE_CASE_TYPES = (
    "incomplete_outfit",
    "impossible_combination",
    "ambiguous_name",
    "conflicting_instructions",
    "multiple_interpretations",
    "unknown_term",
)


@dataclass(frozen=True)
class ClarificationOption:
    """One answer the user can pick; ``value`` is echoed back to resume the flow."""

    id: str
    label: str
    value: Any
    description: Optional[str] = None
    image_url: Optional[str] = None


@dataclass
class ClarificationContext:
    question: str
    original_message: str
    conversation_id: str
    type: ClarificationType = "ambiguous"
    options: List[ClarificationOption] = field(default_factory=list)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["timestamp"] = self.timestamp.isoformat()
        return payload

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ClarificationContext":
        timestamp = payload.get("timestamp")
        return cls(
            question=str(payload.get("question", "")),
            original_message=str(payload.get("original_message", "")),
            conversation_id=str(payload.get("conversation_id", "")),
            type=payload.get("type", "ambiguous"),
            options=[ClarificationOption(**option) for option in payload.get("options", [])],
            timestamp=datetime.fromisoformat(timestamp) if timestamp else datetime.now(timezone.utc),
        )


@dataclass
class EdgeCaseScenario:
    type: str
    message: str
    context: Dict[str, Any] = field(default_factory=dict)


@dataclass
class EdgeCaseResolution:
    resolved: bool
    action: ResolutionAction
    response: str
    options: Optional[List[ClarificationOption]] = None


__all__ = [
    "EDGE_CASE_TYPES",
    "ClarificationContext",
    "ClarificationOption",
    "EdgeCaseResolution",
    "EdgeCaseScenario",
]
