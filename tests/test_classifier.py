from __future__ import annotations

import pytest

from contract_explainer.classifier import MarkerRule, SubstringContractClassifier


@pytest.fixture
def classifier() -> SubstringContractClassifier:
    return SubstringContractClassifier()


@pytest.mark.parametrize(
    "code, expected",
    [
        ("pragma solidity ^0.8.0;\ncontract Token {}", "Solidity"),
        ("use anchor_lang::prelude::*;\n#[program]\nmod vault {}", "Anchor (Solana)"),
        ("use near_sdk::near_bindgen;", "NEAR"),
        ("#[ic_cdk::query]\nfn greet() {}", "Internet Computer"),
        ("use cosmwasm_std::Response;", "CosmWasm"),
        ("fn main() { println!(\"hi\"); }", None),
        ("", None),
    ],
)
def test_classify_platform(
    classifier: SubstringContractClassifier, code: str, expected: str | None
) -> None:
    assert classifier.classify(code) == expected


def test_detection_is_case_insensitive(
    classifier: SubstringContractClassifier,
) -> None:
    assert classifier.classify("PRAGMA SOLIDITY 0.8.20;") == "Solidity"


def test_higher_priority_marker_wins(
    classifier: SubstringContractClassifier,
) -> None:
    # NEAR code that mentions a Solidity-style "contract " in a comment
    code = "// this contract stores greetings\nuse near_sdk::env;"
    assert classifier.classify(code) == "Solidity"


def test_lower_priority_when_no_higher_marker(
    classifier: SubstringContractClassifier,
) -> None:
    assert classifier.classify("#[entry_point]\npub fn execute() {}") == "CosmWasm"


def test_custom_rules_are_pluggable() -> None:
    classifier = SubstringContractClassifier(
        rules=[MarkerRule(label="Move", markers=["module 0x"])]
    )
    assert classifier.classify("module 0x1::coin {}") == "Move"
    assert classifier.classify("pragma solidity ^0.8.0;") is None
