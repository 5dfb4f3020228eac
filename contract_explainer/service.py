"""Explainer service coordinating prompts, completions and history.

This module owns every piece of mutable state the endpoints touch: the
exchange ledger, the chat session and the counter. Handlers call its public
methods; nothing else mutates that state.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from .chat import ChatSession
from .classifier import ContractClassifier, SubstringContractClassifier
from .completion import (
    BedrockCompletionClient,
    CompletionError,
    CompletionProvider,
)
from .counter import Counter
from .ledger import ConversationLedger
from .models import ChatRole, ChatTurn, ExchangeRecord
from .prompts import (
    EXPLAIN_CONCEPT,
    EXPLAIN_CONTRACT,
    FREE_FORM_QUESTION,
    SECURITY_ANALYSIS,
    TemplateRegistry,
)
from .settings import Settings, get_settings

HISTORY_CLEARED_MESSAGE = "Conversation history cleared successfully."
CHAT_CLEARED_MESSAGE = "Chat history cleared successfully."

logger = logging.getLogger(__name__)


class ContractExplainerService:
    """Coordinates prompt building, provider calls and history recording."""

    def __init__(
        self,
        provider: CompletionProvider | None = None,
        settings: Settings | None = None,
        templates: TemplateRegistry | None = None,
        classifier: ContractClassifier | None = None,
        clock: Callable[[], int] = time.time_ns,
    ) -> None:
        self.settings = settings or get_settings()
        self.provider = provider or BedrockCompletionClient(self.settings)
        self.templates = templates or TemplateRegistry(
            templates_path=self.settings.prompt_templates_path or ""
        )
        self.classifier = classifier or SubstringContractClassifier()
        self.history: ConversationLedger[ExchangeRecord] = ConversationLedger(
            max_entries=self.settings.history_max_entries
        )
        self.chat = ChatSession(
            self.provider,
            system_prompt=self.templates.system_prompt,
            max_turns=self.settings.chat_max_turns,
        )
        self.counter = Counter()
        self._clock = clock

    # --- one-shot endpoints ---

    async def explain_smart_contract(
        self, contract_code: str, question: str | None = None
    ) -> str:
        prompt = self.templates.render(
            EXPLAIN_CONTRACT, contract_code=contract_code, question=question
        )
        return await self._complete_and_record(
            prompt, category=self.classifier.classify(contract_code)
        )

    async def ask_question(self, question: str) -> str:
        prompt = self.templates.render(FREE_FORM_QUESTION, question=question)
        return await self._complete_and_record(prompt)

    async def analyze_contract_security(self, contract_code: str) -> str:
        prompt = self.templates.render(
            SECURITY_ANALYSIS, contract_code=contract_code
        )
        return await self._complete_and_record(
            prompt, category=self.classifier.classify(contract_code)
        )

    async def explain_concept(self, concept: str) -> str:
        prompt = self.templates.render(EXPLAIN_CONCEPT, concept=concept)
        return await self._complete_and_record(prompt)

    async def prompt(self, text: str) -> str:
        """Send ``text`` as a lone user message; nothing is recorded."""

        return await self._complete_safely(
            [ChatTurn(role=ChatRole.USER, content=text or "")]
        )

    @staticmethod
    def greet(name: str | None = None) -> str:
        return f"Hello, {name or 'World'}!"

    # --- exchange history ---

    def get_history(self) -> list[ExchangeRecord]:
        return list(self.history.snapshot())

    def get_recent_history(self, limit: int) -> list[ExchangeRecord]:
        return list(self.history.recent(limit))

    def clear_history(self) -> str:
        self.history.clear()
        logger.info("history.cleared")
        return HISTORY_CLEARED_MESSAGE

    # --- chat ---

    async def multi_turn_chat(self, message: str) -> list[ChatTurn]:
        return await self.chat.multi_turn_chat(message)

    async def send_chat_message(self, message: str) -> str:
        return await self.chat.send_chat_message(message)

    def chat_turn_count(self) -> int:
        return self.chat.turn_count()

    def clear_chat(self) -> str:
        self.chat.clear()
        logger.info("chat.cleared")
        return CHAT_CLEARED_MESSAGE

    # --- internals ---

    async def _complete_safely(self, messages: list[ChatTurn]) -> str:
        """Call the provider, degrading failures to an empty reply."""

        try:
            reply = await self.provider.complete(messages)
        except CompletionError as exc:
            logger.warning("completion.degraded", extra={"error": str(exc)})
            return ""
        if not reply:
            logger.warning("completion.empty_reply")
        return reply or ""

    async def _complete_and_record(
        self, prompt: str, category: str | None = None
    ) -> str:
        messages = [
            ChatTurn(role=ChatRole.SYSTEM, content=self.templates.system_prompt),
            ChatTurn(role=ChatRole.USER, content=prompt),
        ]
        reply = await self._complete_safely(messages)

        def build(newest: ExchangeRecord | None) -> ExchangeRecord:
            # Never earlier than the newest record, even if the clock steps back.
            now = self._clock()
            if newest is not None and newest.timestamp > now:
                now = newest.timestamp
            return ExchangeRecord(
                timestamp=now,
                request_text=prompt,
                response_text=reply,
                category=category,
            )

        self.history.append_with(build)
        logger.info(
            "history.recorded",
            extra={"category": category, "entries": len(self.history)},
        )
        return reply
