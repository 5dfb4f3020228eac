"""Prompt templates and the registry that renders them.

This module defines:
- PromptTemplate: a named template with optional per-field defaults
- TemplateRegistry: templates keyed by operation name, overridable from JSON

Rendering is total: a missing or ``None`` field renders as its declared
default, or as an empty string when it has none.
"""

from __future__ import annotations

import json
import os
import string
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, Field, field_validator

EXPLAIN_CONTRACT = "explain_contract"
SECURITY_ANALYSIS = "security_analysis"
EXPLAIN_CONCEPT = "explain_concept"
FREE_FORM_QUESTION = "free_form_question"

SYSTEM_PROMPT = """
You are a smart contract expert and educator. Your role is to:

1. Explain smart contracts in simple, understandable terms
2. Analyze smart contract code and identify key components
3. Highlight security considerations and best practices
4. Help users understand different blockchain platforms (Ethereum, Internet Computer, Solana, etc.)
5. Explain concepts like gas fees, consensus mechanisms, and DeFi protocols
6. Provide educational content about blockchain technology

Always be helpful, accurate, and educational. Break down complex concepts into digestible explanations.
When analyzing code, focus on:
- What the contract does
- Key functions and their purposes
- Potential security risks
- Gas optimization opportunities
- Best practices being followed or missed

Keep responses concise but comprehensive. Use examples when helpful.
"""


class _BlankFields(dict):
    """Mapping that renders unknown placeholders as empty strings."""

    def __missing__(self, key: str) -> str:
        return ""


_FORMATTER = string.Formatter()


class PromptTemplate(BaseModel):
    """A named prompt template using ``str.format`` placeholders."""

    name: str = Field(..., min_length=1)
    text: str
    defaults: dict[str, str] = Field(default_factory=dict)

    @field_validator("text")
    @classmethod
    def _check_placeholders(cls, text: str) -> str:
        """Reject texts that ``render`` could not format.

        Only named placeholders are allowed: no positional, attribute or
        index fields, and no conversions other than ``!r``, ``!s``, ``!a``.
        """

        try:
            parsed = list(_FORMATTER.parse(text))
        except ValueError as exc:
            raise ValueError(f"malformed template text: {exc}") from None
        for _, field_name, _, conversion in parsed:
            if field_name is None:
                continue
            if not field_name.isidentifier():
                raise ValueError(
                    f"placeholder {{{field_name}}} must be a plain name"
                )
            if conversion not in (None, "r", "s", "a"):
                raise ValueError(f"unknown conversion !{conversion}")
        try:
            text.format_map(_BlankFields())
        except (ValueError, TypeError) as exc:
            raise ValueError(f"malformed template text: {exc}") from None
        return text

    def render(self, fields: Mapping[str, Any] | None = None) -> str:
        """Substitute ``fields`` into the template text.

        Args:
            fields: Placeholder values. ``None`` values fall back to the
                template default, then to an empty string.

        Returns:
            The formatted prompt.
        """

        values = _BlankFields(self.defaults)
        for key, value in (fields or {}).items():
            if value is None:
                continue
            values[key] = str(value)
        return self.text.format_map(values)


DEFAULT_TEMPLATES: list[PromptTemplate] = [
    PromptTemplate(
        name=EXPLAIN_CONTRACT,
        text=(
            "Here's a smart contract code:\n\n```\n{contract_code}\n```\n\n"
            "User question: {question}\n\n"
            "Please provide a comprehensive explanation covering:\n"
            "1. What this contract does\n"
            "2. Key functions and their purposes\n"
            "3. Any security considerations\n"
            "4. Best practices used or missing"
        ),
        defaults={"question": "Please explain this smart contract code."},
    ),
    PromptTemplate(
        name=SECURITY_ANALYSIS,
        text=(
            "Perform a security analysis of this smart contract:\n\n"
            "```\n{contract_code}\n```\n\n"
            "Please identify:\n"
            "1. Potential security vulnerabilities\n"
            "2. Common attack vectors that could be exploited\n"
            "3. Best practices that are missing\n"
            "4. Recommendations for improvement\n"
            "5. Gas optimization opportunities"
        ),
    ),
    PromptTemplate(
        name=EXPLAIN_CONCEPT,
        text=(
            "Please explain the blockchain/smart contract concept: '{concept}'\n\n"
            "Provide:\n"
            "1. A clear definition\n"
            "2. How it works\n"
            "3. Why it's important\n"
            "4. Real-world examples or use cases\n"
            "5. Any related concepts I should know about"
        ),
    ),
    PromptTemplate(name=FREE_FORM_QUESTION, text="{question}"),
]


class TemplateRegistry:
    """Prompt templates keyed by operation name.

    Starts from DEFAULT_TEMPLATES and SYSTEM_PROMPT; entries from the JSON file
    at PROMPT_TEMPLATES_PATH (or ``templates_path``) replace or extend them.
    Expected file shape::

        {"system_prompt": "...", "templates": [{"name": ..., "text": ...}]}
    """

    def __init__(
        self,
        templates: Iterable[PromptTemplate] | None = None,
        system_prompt: str | None = None,
        templates_path: str | None = None,
    ) -> None:
        self._templates: dict[str, PromptTemplate] = {
            t.name: t for t in (templates or DEFAULT_TEMPLATES)
        }
        self.system_prompt = SYSTEM_PROMPT if system_prompt is None else system_prompt
        path = (
            os.getenv("PROMPT_TEMPLATES_PATH")
            if templates_path is None
            else templates_path
        )
        if path:
            self._load_file(path)

    def _load_file(self, path: str) -> None:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Template file {path} must contain a JSON object")
        if "system_prompt" in data:
            self.system_prompt = str(data["system_prompt"])
        for raw in data.get("templates", []):
            template = PromptTemplate(**raw)
            self._templates[template.name] = template

    def get(self, name: str) -> PromptTemplate:
        """Return the template registered under ``name``.

        Raises:
            KeyError: If no template has that name.
        """

        try:
            return self._templates[name]
        except KeyError:
            raise KeyError(f"Unknown prompt template: {name}") from None

    def render(self, name: str, **fields: Any) -> str:
        """Render the named template with ``fields``."""

        return self.get(name).render(fields)

