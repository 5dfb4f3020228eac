"""Heuristic contract-platform detection.

Source text is lower-cased and checked for marker substrings in priority
order; the first rule with a matching marker names the platform. This is a
substring matcher, not a parser: markers inside comments or strings still
match, and unfamiliar code matches nothing.
"""

from __future__ import annotations

from typing import Protocol

from pydantic import BaseModel, Field


class ContractClassifier(Protocol):
    """Anything that can label source text with a contract platform."""

    def classify(self, text: str) -> str | None: ...


class MarkerRule(BaseModel):
    """A platform label and the lower-case markers that identify it."""

    label: str = Field(..., min_length=1)
    markers: list[str] = Field(default_factory=list)

    def matches(self, lowered: str) -> bool:
        """Return True if any marker occurs in already lower-cased text."""

        return any(marker in lowered for marker in self.markers)


DEFAULT_MARKER_RULES: list[MarkerRule] = [
    MarkerRule(
        label="Solidity",
        markers=["pragma solidity", "contract ", "interface "],
    ),
    MarkerRule(
        label="Anchor (Solana)",
        markers=["use anchor_lang", "anchor_program", "#[program]"],
    ),
    MarkerRule(label="NEAR", markers=["use near_sdk", "#[near_bindgen]"]),
    MarkerRule(
        label="Internet Computer", markers=["use ic_cdk", "#[ic_cdk::"]
    ),
    MarkerRule(label="CosmWasm", markers=["use cosmwasm", "#[entry_point]"]),
]


class SubstringContractClassifier:
    """Classifier evaluating MarkerRule entries in priority order."""

    def __init__(self, rules: list[MarkerRule] | None = None) -> None:
        self._rules = list(DEFAULT_MARKER_RULES if rules is None else rules)

    def classify(self, text: str) -> str | None:
        """Return the label of the first matching rule, or None."""

        lowered = (text or "").lower()
        for rule in self._rules:
            if rule.matches(lowered):
                return rule.label
        return None
