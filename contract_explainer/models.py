"""Pydantic models shared by the service, the HTTP layer and the CLI.

This module defines:
- ExchangeRecord: one logged request/response pair with metadata
- ChatRole / ChatTurn: role-tagged messages of the multi-turn chat
- Request and response payloads for the HTTP endpoints
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ChatRole(str, Enum):
    """Roles understood by the completion provider."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ChatTurn(BaseModel):
    """One role-tagged message in a chat sequence."""

    model_config = ConfigDict(frozen=True)

    role: ChatRole
    content: str = ""


class ExchangeRecord(BaseModel):
    """A logged exchange with the completion provider."""

    model_config = ConfigDict(frozen=True)

    timestamp: int = Field(
        ..., ge=0, description="Wall-clock nanoseconds since the epoch"
    )
    request_text: str = Field(
        ..., description="Fully formatted text sent to the provider"
    )
    response_text: str = Field(default="", description="Provider reply")
    category: str | None = Field(
        default=None, description="Contract platform label, when detected"
    )


# --- HTTP payloads ---


class ExplainContractRequest(BaseModel):
    contract_code: str
    question: str | None = None


class SecurityAnalysisRequest(BaseModel):
    contract_code: str


class QuestionRequest(BaseModel):
    question: str


class ConceptRequest(BaseModel):
    concept: str


class PromptRequest(BaseModel):
    prompt: str


class ChatMessageRequest(BaseModel):
    message: str


class CounterSetRequest(BaseModel):
    value: int = Field(..., ge=0)


class TextResponse(BaseModel):
    response: str


class MessageResponse(BaseModel):
    message: str


class CountResponse(BaseModel):
    count: int


class ChatClearedResponse(BaseModel):
    message: str
    count: int = 0
