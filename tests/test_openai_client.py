"""
test_openai_client.py — Tests for app/utils/openai_client.py

Covers: JSON parsing of fenced/prefixed replies, array extraction,
chat_json and vision_text request bodies and failure handling.
The shared httpx client is mocked; no network calls.

Called by: pytest
Depends on: app/utils/openai_client.py
"""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from app.utils.openai_client import chat_json, extract_json_array, safe_json_parse, vision_text


def _reply(content, status=200):
    resp = MagicMock(status_code=status, text="upstream said no")
    resp.json.return_value = {"choices": [{"message": {"content": content}}]}
    return resp


# ── Parsing ──────────────────────────────────────────────────────────


class TestSafeJsonParse:
    def test_plain(self):
        assert safe_json_parse('{"records": []}') == {"records": []}

    def test_fenced(self):
        assert safe_json_parse('```json\n{"a": 1}\n```') == {"a": 1}

    def test_preamble(self):
        assert safe_json_parse('Here you go: {"a": 1} hope that helps') == {"a": 1}

    def test_garbage(self):
        assert safe_json_parse("no json here") is None
        assert safe_json_parse("") is None


class TestExtractJsonArray:
    def test_array_in_prose(self):
        assert extract_json_array('Found these:\n[{"event_name": "A"}]\nDone.') == [{"event_name": "A"}]

    def test_empty_array(self):
        assert extract_json_array("[]") == []

    def test_object_is_not_array(self):
        assert extract_json_array('{"a": 1}') is None

    def test_none(self):
        assert extract_json_array(None) is None


# ── HTTP calls ───────────────────────────────────────────────────────


class TestChatJson:
    @pytest.mark.asyncio
    async def test_returns_parsed_object(self):
        with patch("app.utils.openai_client.http") as mock_http:
            mock_http.post = AsyncMock(return_value=_reply('{"records": [{"name": "Gym"}]}'))
            result = await chat_json("sk-org", system="sys", prompt="text")

        assert result == {"records": [{"name": "Gym"}]}
        call = mock_http.post.await_args
        assert call.kwargs["headers"]["Authorization"] == "Bearer sk-org"
        body = call.kwargs["json"]
        assert body["response_format"] == {"type": "json_object"}
        assert body["messages"][0] == {"role": "system", "content": "sys"}
        assert body["model"] == "gpt-4o-mini"

    @pytest.mark.asyncio
    async def test_non_200(self):
        with patch("app.utils.openai_client.http") as mock_http:
            mock_http.post = AsyncMock(return_value=_reply("{}", status=401))
            assert await chat_json("sk-bad", system="s", prompt="p") is None

    @pytest.mark.asyncio
    async def test_transport_error(self):
        with patch("app.utils.openai_client.http") as mock_http:
            mock_http.post = AsyncMock(side_effect=httpx.ReadTimeout("slow"))
            assert await chat_json("sk-org", system="s", prompt="p") is None

    @pytest.mark.asyncio
    async def test_array_reply_rejected(self):
        with patch("app.utils.openai_client.http") as mock_http:
            mock_http.post = AsyncMock(return_value=_reply("[1, 2]"))
            assert await chat_json("sk-org", system="s", prompt="p") is None

    @pytest.mark.asyncio
    async def test_no_choices(self):
        resp = MagicMock(status_code=200)
        resp.json.return_value = {"choices": []}
        with patch("app.utils.openai_client.http") as mock_http:
            mock_http.post = AsyncMock(return_value=resp)
            assert await chat_json("sk-org", system="s", prompt="p") is None


class TestVisionText:
    @pytest.mark.asyncio
    async def test_sends_data_url(self):
        with patch("app.utils.openai_client.http") as mock_http:
            mock_http.post = AsyncMock(return_value=_reply("[]"))
            reply = await vision_text("sk-org", prompt="read this", image_b64="QUJD", image_format="png")

        assert reply == "[]"
        content = mock_http.post.await_args.kwargs["json"]["messages"][0]["content"]
        assert content[0] == {"type": "text", "text": "read this"}
        assert content[1]["image_url"]["url"] == "data:image/png;base64,QUJD"
