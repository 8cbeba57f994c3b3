"""Unit tests for the OpenAI answer engine adapter."""

from unittest.mock import MagicMock

import openai
import pytest

from analyzer.engine import AnswerEngine
from analyzer.errors import AnalysisError, ErrorKind
from fakes import message, web_search_call


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def engine(client, fast_settings):
    return AnswerEngine(client, fast_settings)


def completion(content):
    choice = MagicMock()
    choice.message.content = content
    result = MagicMock()
    result.choices = [choice]
    return result


def sdk_item(data: dict):
    item = MagicMock()
    item.model_dump.return_value = data
    return item


class TestGenerate:

    def test_json_mode(self, engine, client):
        client.chat.completions.create.return_value = completion('{"faqs": []}')

        assert engine.generate("system", "prompt") == '{"faqs": []}'

        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["model"] == "gpt-4.1-mini"
        assert kwargs["messages"][0] == {"role": "system", "content": "system"}

    def test_empty_content_is_transient(self, engine, client):
        client.chat.completions.create.return_value = completion(None)

        with pytest.raises(AnalysisError) as exc:
            engine.generate("s", "p")
        assert exc.value.kind == ErrorKind.TRANSIENT

    def test_sdk_error_is_transient(self, engine, client):
        client.chat.completions.create.side_effect = openai.OpenAIError("boom")

        with pytest.raises(AnalysisError) as exc:
            engine.generate("s", "p")
        assert exc.value.kind == ErrorKind.TRANSIENT
        assert "boom" in exc.value.message


class TestSearch:

    def test_web_search_required(self, engine, client):
        response = MagicMock()
        response.output = [sdk_item(web_search_call("https://a.com")), sdk_item(message("Hi", "https://a.com"))]
        response.output_text = "Hi"
        response.model = "gpt-5-2025"
        client.responses.create.return_value = response

        result = engine.search("What is it?")

        assert result.answer_text == "Hi"
        assert result.model == "gpt-5-2025"
        assert result.output[0]["type"] == "web_search_call"
        kwargs = client.responses.create.call_args.kwargs
        assert kwargs["tools"] == [{"type": "web_search"}]
        assert kwargs["tool_choice"] == "required"
        assert kwargs["include"] == ["web_search_call.action.sources"]
        assert kwargs["reasoning"] == {"effort": "low"}
        assert kwargs["input"] == "What is it?"

    def test_plain_dict_items_pass_through(self, engine, client):
        response = MagicMock()
        response.output = [web_search_call("https://a.com")]
        response.output_text = ""
        client.responses.create.return_value = response

        assert engine.search("Q").output == [web_search_call("https://a.com")]

    def test_empty_output_is_transient(self, engine, client):
        response = MagicMock()
        response.output = []
        client.responses.create.return_value = response

        with pytest.raises(AnalysisError) as exc:
            engine.search("Q")
        assert exc.value.kind == ErrorKind.TRANSIENT

    def test_sdk_error_is_transient(self, engine, client):
        client.responses.create.side_effect = openai.OpenAIError("down")

        with pytest.raises(AnalysisError, match="Search request failed"):
            engine.search("Q")
