"""
Data model for MemorySeed.

Conversations come from an external export parser; candidates go to an
external review UI. Both sides speak camelCase JSON, so every type here
converts to and from that shape.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from memoryseed.constants import STATUS_PENDING


@dataclass(frozen=True)
class ParsedMessage:
    """A single flattened chat message"""
    role: str  # user, assistant
    text: str
    timestamp: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParsedMessage":
        return cls(
            role=data.get("role", ""),
            text=data.get("text") or "",
            timestamp=data.get("timestamp"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"role": self.role, "text": self.text, "timestamp": self.timestamp}


@dataclass(frozen=True)
class ParsedConversation:
    """One conversation from the export, messages in chronological order"""
    id: str
    title: str
    created_at: int
    model: Optional[str] = None
    gizmo_id: Optional[str] = None
    messages: Tuple[ParsedMessage, ...] = ()

    @property
    def user_messages(self) -> Tuple[ParsedMessage, ...]:
        """Messages authored by the user; assistant text is never a memory source."""
        return tuple(m for m in self.messages if m.role == "user")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParsedConversation":
        """
        Build a conversation from the collaborator's JSON shape.

        Messages with roles other than user/assistant (system, tool) are skipped.
        """
        messages = tuple(
            ParsedMessage.from_dict(m)
            for m in data.get("messages", [])
            if isinstance(m, dict) and m.get("role") in ("user", "assistant")
        )
        return cls(
            id=str(data.get("id", "")),
            title=data.get("title") or "",
            created_at=int(data.get("createdAt") or 0),
            model=data.get("model"),
            gizmo_id=data.get("gizmoId"),
            messages=messages,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "model": self.model,
            "createdAt": self.created_at,
            "gizmoId": self.gizmo_id,
            "messages": [m.to_dict() for m in self.messages],
        }


@dataclass
class MemoryCandidate:
    """An extracted, unreviewed memory statement"""
    id: str
    text: str
    category: str  # preference, technical, project, identity, theme
    confidence: str  # high, medium, low
    source_title: str
    source_timestamp: Optional[int] = None
    status: str = field(default=STATUS_PENDING)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MemoryCandidate":
        return cls(
            id=data["id"],
            text=data["text"],
            category=data["category"],
            confidence=data["confidence"],
            source_title=data.get("sourceTitle", ""),
            source_timestamp=data.get("sourceTimestamp"),
            status=data.get("status", STATUS_PENDING),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "category": self.category,
            "confidence": self.confidence,
            "sourceTitle": self.source_title,
            "sourceTimestamp": self.source_timestamp,
            "status": self.status,
        }
