"""FastAPI app exposing the explainer endpoints.

The service instance is provided through the ``get_service`` dependency so
tests can swap in one backed by a fake completion provider.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache

from fastapi import Depends, FastAPI, Query

from .models import (
    ChatClearedResponse,
    ChatMessageRequest,
    ChatTurn,
    ConceptRequest,
    CountResponse,
    CounterSetRequest,
    ExchangeRecord,
    ExplainContractRequest,
    MessageResponse,
    PromptRequest,
    QuestionRequest,
    SecurityAnalysisRequest,
    TextResponse,
)
from .service import ContractExplainerService
from .settings import get_settings

logging.basicConfig(
    level=get_settings().log_level,
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Smart Contract Explainer API")


@lru_cache(maxsize=1)
def get_service() -> ContractExplainerService:
    """Return the process-wide service, built on first use."""
    return ContractExplainerService()


# --- Completions ---


@app.post("/contracts/explain", response_model=TextResponse)
async def explain_smart_contract(
    payload: ExplainContractRequest,
    service: ContractExplainerService = Depends(get_service),
) -> TextResponse:
    reply = await service.explain_smart_contract(
        payload.contract_code, payload.question
    )
    return TextResponse(response=reply)


@app.post("/contracts/security", response_model=TextResponse)
async def analyze_contract_security(
    payload: SecurityAnalysisRequest,
    service: ContractExplainerService = Depends(get_service),
) -> TextResponse:
    reply = await service.analyze_contract_security(payload.contract_code)
    return TextResponse(response=reply)


@app.post("/questions", response_model=TextResponse)
async def ask_question(
    payload: QuestionRequest,
    service: ContractExplainerService = Depends(get_service),
) -> TextResponse:
    return TextResponse(response=await service.ask_question(payload.question))


@app.post("/concepts/explain", response_model=TextResponse)
async def explain_concept(
    payload: ConceptRequest,
    service: ContractExplainerService = Depends(get_service),
) -> TextResponse:
    return TextResponse(response=await service.explain_concept(payload.concept))


@app.post("/prompt", response_model=TextResponse)
async def prompt(
    payload: PromptRequest,
    service: ContractExplainerService = Depends(get_service),
) -> TextResponse:
    return TextResponse(response=await service.prompt(payload.prompt))


@app.get("/greet", response_model=MessageResponse)
async def greet(name: str | None = None) -> MessageResponse:
    return MessageResponse(message=ContractExplainerService.greet(name))


# --- Exchange history ---


@app.get("/history", response_model=list[ExchangeRecord])
async def get_conversation_history(
    service: ContractExplainerService = Depends(get_service),
) -> list[ExchangeRecord]:
    return service.get_history()


@app.get("/history/recent", response_model=list[ExchangeRecord])
async def get_recent_conversations(
    limit: int = Query(10, ge=0),
    service: ContractExplainerService = Depends(get_service),
) -> list[ExchangeRecord]:
    return service.get_recent_history(limit)


@app.delete("/history", response_model=MessageResponse)
async def clear_conversation_history(
    service: ContractExplainerService = Depends(get_service),
) -> MessageResponse:
    return MessageResponse(message=service.clear_history())


# --- Multi-turn chat ---


@app.post("/chat/turns", response_model=list[ChatTurn])
async def multi_turn_chat(
    payload: ChatMessageRequest,
    service: ContractExplainerService = Depends(get_service),
) -> list[ChatTurn]:
    return await service.multi_turn_chat(payload.message)


@app.post("/chat/messages", response_model=TextResponse)
async def send_chat_message(
    payload: ChatMessageRequest,
    service: ContractExplainerService = Depends(get_service),
) -> TextResponse:
    return TextResponse(response=await service.send_chat_message(payload.message))


@app.get("/chat/length", response_model=CountResponse)
async def get_chat_history_length(
    service: ContractExplainerService = Depends(get_service),
) -> CountResponse:
    return CountResponse(count=service.chat_turn_count())


@app.delete("/chat", response_model=ChatClearedResponse)
async def clear_chat_history(
    service: ContractExplainerService = Depends(get_service),
) -> ChatClearedResponse:
    message = service.clear_chat()
    return ChatClearedResponse(message=message, count=service.chat_turn_count())


# --- Counter ---


@app.get("/counter", response_model=CountResponse)
async def get_count(
    service: ContractExplainerService = Depends(get_service),
) -> CountResponse:
    return CountResponse(count=service.counter.get())


@app.post("/counter/increment", response_model=CountResponse)
async def increment(
    service: ContractExplainerService = Depends(get_service),
) -> CountResponse:
    return CountResponse(count=service.counter.increment())


@app.put("/counter", response_model=CountResponse)
async def set_count(
    payload: CounterSetRequest,
    service: ContractExplainerService = Depends(get_service),
) -> CountResponse:
    return CountResponse(count=service.counter.set(payload.value))


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok", "env": os.getenv("ENVIRONMENT", "dev")}


# Lambda handler (via Mangum) when running inside AWS Lambda
if os.getenv("AWS_LAMBDA_FUNCTION_NAME"):
    # Lazy import to avoid hard dependency outside Lambda runtime
    from mangum import Mangum  # type: ignore

    handler = Mangum(app)
