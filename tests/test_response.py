"""Tests for AI reply cleaning and parsing."""

import pytest

from smart_commands.ai.response import (
    clean_command_text,
    extract_base_command,
    extract_subcommand,
    parse_validation_response,
    strip_code_fences,
)


class TestCleaning:
    """Test markdown and prefix removal."""

    @pytest.mark.parametrize("reply,expected", [
        ("ls -la", "ls -la"),
        ("```bash\nls -la\n```", "ls -la"),
        ("```sh ls -la```", "ls -la"),
        ("`ls -la`", "ls -la"),
        ("**ls -la**", "ls -la"),
        ("Command: `ls -la`", "ls -la"),
        ("Run: find . -size +100M", "find . -size +100M"),
        ("  du -sh\n  *  ", "du -sh *"),
    ])
    def test_clean_command_text(self, reply: str, expected: str) -> None:
        """Test replies are reduced to a single command line."""
        assert clean_command_text(reply) == expected

    def test_clean_empty(self) -> None:
        """Test empty replies."""
        assert clean_command_text(None) == ""
        assert clean_command_text("") == ""

    def test_strip_code_fences_keeps_json(self) -> None:
        """Test fenced JSON is unwrapped intact."""
        reply = '```json\n{"type": "VALID"}\n```'

        assert strip_code_fences(reply) == '{"type": "VALID"}'


class TestTokenReplies:
    """Test bare-token replies."""

    def test_extract_base_command(self) -> None:
        """Test the first word is taken."""
        assert extract_base_command("git") == "git"
        assert extract_base_command("`git`") == "git"
        assert extract_base_command("git status") == "git"
        assert extract_base_command("") is None

    def test_extract_subcommand(self) -> None:
        """Test repeated base commands are tolerated."""
        assert extract_subcommand("ps", "docker") == "ps"
        assert extract_subcommand("docker ps", "docker") == "ps"
        assert extract_subcommand("'status'", "git") == "status"

    def test_extract_subcommand_rejects_base(self) -> None:
        """Test a reply naming only the base command."""
        assert extract_subcommand("docker", "docker") is None
        assert extract_subcommand(None, "docker") is None


class TestValidationResponse:
    """Test JSON validation replies."""

    def test_valid(self) -> None:
        """Test a VALID verdict."""
        suggestion = parse_validation_response(
            "ls -la", '{"type":"VALID","message":"Command is correct"}'
        )

        assert suggestion.is_valid
        assert suggestion.original == "ls -la"

    def test_correction(self) -> None:
        """Test a CORRECTION verdict."""
        suggestion = parse_validation_response(
            "ls -la /tmpp",
            '{"type": "CORRECTION", "suggestion": "ls -la /tmp", "message": "Typo in path"}',
        )

        assert suggestion.is_correction
        assert suggestion.suggestion == "ls -la /tmp"
        assert suggestion.message == "Typo in path"

    def test_suggestion_without_message(self) -> None:
        """Test a SUGGESTION verdict gets a default message."""
        suggestion = parse_validation_response(
            "tar xf a.tgz", '{"type": "suggestion", "suggestion": "tar -xzf a.tgz"}'
        )

        assert suggestion.is_correction
        assert suggestion.message == "Did you mean: tar -xzf a.tgz?"

    def test_fenced_json(self) -> None:
        """Test JSON wrapped in a code fence."""
        reply = '```json\n{"type": "CORRECTION", "suggestion": "git push"}\n```'

        assert parse_validation_response("git psuh", reply).suggestion == "git push"

    def test_json_with_surrounding_text(self) -> None:
        """Test JSON embedded in chatter."""
        reply = 'Sure! {"type": "CORRECTION", "suggestion": "git push"} Hope this helps.'

        assert parse_validation_response("git psuh", reply).suggestion == "git push"

    def test_malformed_json_fields(self) -> None:
        """Test fields are recovered from broken JSON."""
        reply = '{"type": "CORRECTION", "suggestion": "git push", "message": "typo",}'

        assert parse_validation_response("git psuh", reply).suggestion == "git push"

    def test_same_suggestion_is_valid(self) -> None:
        """Test a correction equal to the input is not a correction."""
        reply = '{"type": "CORRECTION", "suggestion": "git push"}'

        assert parse_validation_response("git push", reply).is_valid

    @pytest.mark.parametrize("reply", [
        None,
        "",
        "I am not sure what you mean.",
        '{"type": "MAYBE"}',
        '{"type": 3}',
        "[1, 2, 3]",
    ])
    def test_unusable_replies_are_valid(self, reply: str | None) -> None:
        """Test anything unparseable falls back to valid."""
        assert parse_validation_response("ls", reply).is_valid
