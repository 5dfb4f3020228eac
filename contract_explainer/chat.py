"""Multi-turn chat over a bounded sequence of role-tagged turns.

The first turn of a session seeds the sequence with the system prompt. Every
request sends the whole retained sequence, so once the window slides past the
system turn later requests go out without it.
"""

from __future__ import annotations

import asyncio
import logging

from .completion import CompletionError, CompletionProvider
from .ledger import ConversationLedger
from .models import ChatRole, ChatTurn
from .settings import DEFAULT_CHAT_MAX_TURNS

logger = logging.getLogger(__name__)


class ChatSession:
    """Owns the chat turn sequence and serializes access to it."""

    def __init__(
        self,
        provider: CompletionProvider,
        system_prompt: str,
        max_turns: int = DEFAULT_CHAT_MAX_TURNS,
    ) -> None:
        self._provider = provider
        self._system_prompt = system_prompt
        self._turns: ConversationLedger[ChatTurn] = ConversationLedger(
            max_entries=max_turns
        )
        self._lock = asyncio.Lock()

    @property
    def turns(self) -> tuple[ChatTurn, ...]:
        return self._turns.snapshot()

    def turn_count(self) -> int:
        return len(self._turns)

    def clear(self) -> None:
        self._turns.clear()

    async def multi_turn_chat(self, message: str) -> list[ChatTurn]:
        """Record the user turn, ask the provider, return the updated turns.

        The returned list ends with the assistant reply; the reply itself is
        not stored (see ``send_chat_message``).
        """

        async with self._lock:
            return await self._exchange(message)

    async def send_chat_message(self, message: str) -> str:
        """Run one chat exchange and store the assistant reply.

        Returns:
            The reply text; "" when the provider failed or returned nothing.
        """

        async with self._lock:
            turns = await self._exchange(message)
            reply = turns[-1]
            self._turns.append(reply)
            return reply.content

    async def _exchange(self, message: str) -> list[ChatTurn]:
        if not self._turns:
            self._turns.append(
                ChatTurn(role=ChatRole.SYSTEM, content=self._system_prompt)
            )
        self._turns.append(ChatTurn(role=ChatRole.USER, content=message or ""))
        history = self._turns.snapshot()
        try:
            reply_text = await self._provider.complete(history)
        except CompletionError:
            logger.warning(
                "chat.completion.degraded", extra={"turns": len(history)}
            )
            reply_text = ""
        return [*history, ChatTurn(role=ChatRole.ASSISTANT, content=reply_text or "")]
