"""Tests for the Ollama client."""

import json

import httpx
import pytest

from smart_commands.ai.client import AITimeout, AIUnavailable, OllamaClient
from smart_commands.config import AIConfig


def make_client(handler, **overrides) -> OllamaClient:
    """Client talking to a mock transport, without backoff delays."""
    config = AIConfig(backoff_base=0.0, **overrides)
    return OllamaClient(config, transport=httpx.MockTransport(handler))


class TestGenerate:
    """Test the generate call."""

    @pytest.mark.asyncio
    async def test_returns_reply(self) -> None:
        """Test a successful reply and the request payload."""
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"response": "  git status \n"})

        async with make_client(handler) as client:
            reply = await client.generate("git stauts", "Fix the subcommand.")

        assert reply == "git status"
        assert len(requests) == 1
        assert requests[0].url.path == "/api/generate"

        payload = json.loads(requests[0].content)
        assert payload["model"] == "qwen2.5-coder:3b"
        assert payload["stream"] is False
        assert payload["options"] == {"temperature": 0.7, "top_p": 0.9, "num_predict": 500}
        assert "User input: git stauts" in payload["prompt"]
        assert "Fix the subcommand." in payload["prompt"]

    @pytest.mark.asyncio
    async def test_empty_reply(self) -> None:
        """Test an empty reply is None."""
        async with make_client(lambda request: httpx.Response(200, json={"response": ""})) as client:
            assert await client.generate("ls", "prompt") is None

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self) -> None:
        """Test transient failures are retried."""
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request)
            if len(attempts) < 3:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, json={"response": "ls"})

        async with make_client(handler) as client:
            assert await client.generate("lss", "prompt") == "ls"
        assert len(attempts) == 3

    @pytest.mark.asyncio
    async def test_exhausted_retries(self) -> None:
        """Test one AIUnavailable after every attempt fails."""
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request)
            return httpx.Response(500, text="internal error")

        async with make_client(handler, max_retries=2) as client:
            with pytest.raises(AIUnavailable):
                await client.generate("ls", "prompt")
        assert len(attempts) == 3

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        """Test a timed out final attempt raises AITimeout."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async with make_client(handler, max_retries=1) as client:
            with pytest.raises(AITimeout):
                await client.generate("ls", "prompt")

    @pytest.mark.asyncio
    async def test_malformed_payload(self) -> None:
        """Test a non-JSON body counts as unavailable."""
        async with make_client(lambda request: httpx.Response(200, text="<html>"), max_retries=0) as client:
            with pytest.raises(AIUnavailable):
                await client.generate("ls", "prompt")


class TestServiceHelpers:
    """Test availability and convenience calls."""

    @pytest.mark.asyncio
    async def test_is_available(self) -> None:
        """Test the tags endpoint probe."""

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/tags"
            return httpx.Response(200, json={"models": [{"name": "qwen2.5-coder:3b"}]})

        async with make_client(handler) as client:
            assert await client.is_available()
            assert await client.list_models() == ["qwen2.5-coder:3b"]

    @pytest.mark.asyncio
    async def test_not_available(self) -> None:
        """Test connection failures mean unavailable."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(handler) as client:
            assert not await client.is_available()
            assert await client.list_models() == []

    @pytest.mark.asyncio
    async def test_suggest_commands_for_task(self) -> None:
        """Test task replies are cleaned."""
        reply = {"response": "```bash\nfind . -size +100M\n```"}

        async with make_client(lambda request: httpx.Response(200, json=reply)) as client:
            command = await client.suggest_commands_for_task("find big files")

        assert command == "find . -size +100M"

    @pytest.mark.asyncio
    async def test_suggest_correct_command(self) -> None:
        """Test whole-command corrections are cleaned."""
        reply = {"response": "Command: `colima start`"}

        async with make_client(lambda request: httpx.Response(200, json=reply)) as client:
            assert await client.suggest_correct_command("colma start") == "colima start"
