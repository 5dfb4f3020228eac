"""
Smart Contract Explainer service package.

This package wraps a chat-completion model behind a small set of endpoints
that explain smart contract code, review it for security issues and answer
blockchain questions, keeping a bounded in-memory log of prior exchanges.
"""

from __future__ import annotations

from dotenv import load_dotenv

# Load local env vars when present. Keep imports lightweight to avoid side-effects
# during package import in environments like AWS Lambda or unit tests.
load_dotenv()

__version__ = "0.1.0"
__all__: list[str] = []
