"""
Unit tests for the CLI interface.
"""

import json
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

from contract_explainer.cli import cli
from contract_explainer.service import ContractExplainerService
from contract_explainer.settings import Settings

from fakes import FakeProvider


class TestCLI:
    """Test cases for the CLI commands."""

    def setup_method(self) -> None:
        """Set up test fixtures."""
        self.runner = CliRunner()
        self.provider = FakeProvider(replies=["It is a token."] * 5)
        self.service = ContractExplainerService(
            provider=self.provider,
            settings=Settings(prompt_templates_path=None),
        )

    def _invoke(self, args: list[str], **kwargs):  # type: ignore[no-untyped-def]
        with patch("contract_explainer.cli._build_service", return_value=self.service):
            return self.runner.invoke(cli, args, **kwargs)

    def test_cli_help(self) -> None:
        result = self.runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Smart Contract Explainer CLI" in result.output

    def test_explain_with_code(self) -> None:
        result = self._invoke(
            ["explain", "--code", "pragma solidity ^0.8.0;", "--question", "What?"]
        )
        assert result.exit_code == 0
        assert "It is a token." in result.output
        assert self.service.get_history()[0].category == "Solidity"

    def test_explain_from_file_json(self, tmp_path: Path) -> None:
        source = tmp_path / "Vault.sol"
        source.write_text("use near_sdk::env;", encoding="utf-8")
        result = self._invoke(["security", "--file", str(source), "--json"])
        assert result.exit_code == 0
        assert json.loads(result.output) == {"response": "It is a token."}

    def test_explain_requires_code(self) -> None:
        result = self._invoke(["explain"])
        assert result.exit_code != 0
        assert "--code or --file" in result.output

    def test_ask_and_concept(self) -> None:
        assert self._invoke(["ask", "What is gas?"]).exit_code == 0
        assert self._invoke(["concept", "staking"]).exit_code == 0
        assert len(self.service.get_history()) == 2

    def test_empty_reply_warns(self) -> None:
        self.provider.replies = [""]
        result = self._invoke(["ask", "anything"])
        assert result.exit_code == 0
        assert "empty response" in result.output

    def test_chat_loop(self) -> None:
        result = self._invoke(["chat"], input="hello\nquit\n")
        assert result.exit_code == 0
        assert "Assistant> It is a token." in result.output
        assert "Chat ended after 3 turn(s)." in result.output


def test_serve_invokes_uvicorn() -> None:
    runner = CliRunner()
    with patch("uvicorn.run") as mock_run:
        result = runner.invoke(cli, ["serve", "--port", "9000", "--reload"])
    assert result.exit_code == 0
    mock_run.assert_called_once_with(
        "contract_explainer.api:app", host="127.0.0.1", port=9000, reload=True
    )
