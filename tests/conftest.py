from __future__ import annotations

import os
import sys

import pytest

PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# Minimal environment for module imports during tests
os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("ENVIRONMENT", "dev")
os.environ.pop("PROMPT_TEMPLATES_PATH", None)

from contract_explainer.service import ContractExplainerService  # noqa: E402
from contract_explainer.settings import Settings  # noqa: E402
from fakes import FakeProvider  # noqa: E402


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        environment="test",
        aws_region="us-east-1",
        history_max_entries=100,
        chat_max_turns=20,
        prompt_templates_path=None,
    )


@pytest.fixture
def service(provider: FakeProvider, settings: Settings) -> ContractExplainerService:
    return ContractExplainerService(provider=provider, settings=settings)
