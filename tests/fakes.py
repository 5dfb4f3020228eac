from __future__ import annotations

from collections.abc import Sequence

from contract_explainer.models import ChatTurn


class FakeProvider:
    """Completion provider returning scripted replies and recording calls."""

    def __init__(self, replies: Sequence[str | Exception] | None = None) -> None:
        self.replies = list(replies or [])
        self.calls: list[list[ChatTurn]] = []

    async def complete(self, messages: Sequence[ChatTurn]) -> str:
        self.calls.append(list(messages))
        if not self.replies:
            return f"reply {len(self.calls)}"
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply
