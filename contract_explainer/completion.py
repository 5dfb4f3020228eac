"""Chat-completion provider backed by Claude on Amazon Bedrock.

The service only depends on the CompletionProvider protocol: an ordered list
of role-tagged turns goes in, reply text comes out. BedrockCompletionClient
is the production implementation; tests substitute their own.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Sequence
from typing import Any, Protocol

import boto3
from botocore import exceptions as botocore_exceptions
from botocore.config import Config as BotoConfig

from .models import ChatRole, ChatTurn
from .settings import Settings, get_settings

ANTHROPIC_VERSION = "bedrock-2023-05-31"

logger = logging.getLogger(__name__)


class CompletionError(RuntimeError):
    """Raised when the completion provider call fails."""


class CompletionProvider(Protocol):
    """Messages in, text out; may raise CompletionError."""

    async def complete(self, messages: Sequence[ChatTurn]) -> str: ...


def build_request_body(
    messages: Sequence[ChatTurn], max_tokens: int
) -> dict[str, Any]:
    """Translate chat turns into an Anthropic Messages request body.

    System turns are joined into the top-level ``system`` field. The Messages
    API rejects empty text blocks and must start with a user turn, so turns
    with empty content are skipped, leading assistant turns are dropped and
    consecutive turns of the same role are merged into one message.

    Args:
        messages: Turns in chronological order.
        max_tokens: Upper bound on generated tokens.

    Returns:
        JSON-serializable request body for ``invoke_model``.
    """

    system_parts: list[str] = []
    conversation: list[dict[str, Any]] = []
    for turn in messages:
        if not turn.content:
            continue
        if turn.role == ChatRole.SYSTEM:
            system_parts.append(turn.content)
            continue
        if not conversation and turn.role == ChatRole.ASSISTANT:
            continue
        block = {"type": "text", "text": turn.content}
        if conversation and conversation[-1]["role"] == turn.role.value:
            conversation[-1]["content"].append(block)
        else:
            conversation.append({"role": turn.role.value, "content": [block]})

    body: dict[str, Any] = {
        "anthropic_version": ANTHROPIC_VERSION,
        "max_tokens": max_tokens,
        "messages": conversation,
    }
    if system_parts:
        body["system"] = "\n\n".join(system_parts)
    return body


def extract_text(response_body: dict[str, Any]) -> str:
    """Concatenate the text blocks of a Messages response; "" if none."""

    parts = [
        block.get("text", "")
        for block in response_body.get("content") or []
        if isinstance(block, dict) and block.get("type") == "text"
    ]
    return "".join(parts)


class BedrockCompletionClient:
    """Completion provider calling Claude through Bedrock ``invoke_model``."""

    def __init__(
        self, settings: Settings | None = None, bedrock: Any | None = None
    ) -> None:
        """Initialize the Bedrock runtime client.

        Args:
            settings: Service settings; defaults to the environment.
            bedrock: Pre-built ``bedrock-runtime`` client, mainly for tests.
        """
        self.settings = settings or get_settings()
        if bedrock is None:
            # Transient errors are retried by botocore itself
            boto_config = BotoConfig(
                retries={
                    "max_attempts": self.settings.bedrock_max_attempts,
                    "mode": "adaptive",
                },
                max_pool_connections=50,
                connect_timeout=5,
                read_timeout=self.settings.bedrock_read_timeout,
            )
            bedrock = boto3.client(
                "bedrock-runtime",
                region_name=self.settings.aws_region,
                config=boto_config,
            )
        self.bedrock = bedrock

    def _invoke(self, body: dict[str, Any]) -> dict[str, Any]:
        model_id = self.settings.bedrock_model_id
        try:
            response = self.bedrock.invoke_model(
                modelId=model_id, body=json.dumps(body)
            )
            return json.loads(response["body"].read())
        except (
            botocore_exceptions.ClientError,
            botocore_exceptions.BotoCoreError,
        ) as exc:
            logger.error(
                "completion.invoke.failed",
                extra={"model_id": model_id, "error": str(exc)},
            )
            raise CompletionError(str(exc)) from exc
        except (KeyError, ValueError) as exc:
            logger.error(
                "completion.invoke.bad_payload",
                extra={"model_id": model_id, "error": str(exc)},
            )
            raise CompletionError(f"malformed response: {exc}") from exc

    def complete_sync(self, messages: Sequence[ChatTurn]) -> str:
        """Send ``messages`` and return the reply text (blocking).

        Returns "" without calling Bedrock when no user text is left to
        answer, e.g. the newest user turn was empty.
        """

        body = build_request_body(messages, self.settings.bedrock_max_tokens)
        conversation = body["messages"]
        if not conversation or conversation[-1]["role"] != ChatRole.USER.value:
            logger.warning(
                "completion.skipped.no_user_text",
                extra={"turns": len(messages)},
            )
            return ""
        logger.info(
            "completion.invoke",
            extra={
                "model_id": self.settings.bedrock_model_id,
                "message_count": len(body["messages"]),
            },
        )
        return extract_text(self._invoke(body))

    async def complete(self, messages: Sequence[ChatTurn]) -> str:
        """Send ``messages`` without blocking the event loop."""

        return await asyncio.to_thread(self.complete_sync, list(messages))
