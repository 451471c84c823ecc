# src/dealfindr/domain/ports.py
from __future__ import annotations

from typing import Literal, Protocol, Sequence, TypedDict


# ----------------------------
# Text generation (narrative insights)
# ----------------------------

class ChatMessage(TypedDict):
    role: Literal["system", "user", "assistant"]
    content: str


class TextGenerator(Protocol):
    """
    Anything that turns a role-tagged message list into text.

    Implementations may raise on transport/provider errors; callers in the
    service layer are responsible for falling back.
    """

    def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        temperature: float,
        max_tokens: int,
    ) -> str:
        ...
