"""
Conversation history shared by every backend adapter during one generate() call.
Order matters: it is the context the model sees on every stateless turn.
"""

from dataclasses import dataclass
from typing import Iterator

VALID_ROLES = ("user", "assistant")


@dataclass(frozen=True)
class ConversationMessage:
    role: str
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


class ConversationHistory:
    """Append-only log of turns. One history per generate() call; not thread-safe."""

    def __init__(self, system_prompt: str | None = None):
        self._messages: list[ConversationMessage] = []
        # Backends differ on system-role support, so the system prompt is sent as the first user message.
        if system_prompt:
            self.append("user", system_prompt)

    def append(self, role: str, content: str) -> ConversationMessage:
        if not role:
            raise ValueError("Message role must not be empty")
        if role not in VALID_ROLES:
            raise ValueError(f"Message role must be one of {VALID_ROLES}. Got: {role}")
        message = ConversationMessage(role=role, content=content)
        self._messages.append(message)
        return message

    def as_ordered_list(self) -> list[dict[str, str]]:
        """Full history in OpenAI message shape: [{"role": ..., "content": ...}, ...]."""
        return [m.to_dict() for m in self._messages]

    @property
    def last(self) -> ConversationMessage | None:
        return self._messages[-1] if self._messages else None

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[ConversationMessage]:
        return iter(list(self._messages))
