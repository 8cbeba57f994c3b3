"""
Answer engine adapter - the only module that talks to the OpenAI SDK.

Both calls go through one client handle built by config.make_client() and
passed in; nothing here caches a client.
"""

from dataclasses import dataclass, field
from typing import Any

import openai
from openai import OpenAI

from config import Settings
from .errors import transient

WEB_SEARCH_TOOL = {"type": "web_search"}
INCLUDE_SOURCES = ["web_search_call.action.sources"]


@dataclass
class SearchResponse:
    """Structured answer: text plus raw output items (tool calls and messages)."""
    answer_text: str
    output: list[dict] = field(default_factory=list)
    model: str = ""


def _as_dict(item: Any) -> Any:
    if hasattr(item, "model_dump"):
        return item.model_dump()
    return item


class AnswerEngine:
    """
    JSON generation and web-search answering over one OpenAI client.

    SDK and transport failures surface as transient AnalysisErrors so the
    callers' retry policies can handle them.
    """

    def __init__(self, client: OpenAI, settings: Settings = None):
        self.client = client
        self.settings = settings or Settings()

    def generate(self, system: str, prompt: str) -> str:
        """Chat completion in JSON mode. Returns the raw JSON text."""
        try:
            completion = self.client.chat.completions.create(
                model=self.settings.generation_model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": prompt},
                ],
                temperature=self.settings.generation_temperature,
                response_format={"type": "json_object"},
            )
        except openai.OpenAIError as e:
            raise transient(f"Generation request failed: {e}")

        content = completion.choices[0].message.content if completion.choices else None
        if not content:
            raise transient("Empty response from generation model")
        return content

    def search(self, question: str) -> SearchResponse:
        """
        Answer a question with the web search tool forced on.

        tool_choice="required" keeps results comparable across probes: the
        engine may not skip searching.
        """
        try:
            response = self.client.responses.create(
                model=self.settings.search_model,
                reasoning={"effort": self.settings.search_reasoning_effort},
                tools=[WEB_SEARCH_TOOL],
                tool_choice="required",
                include=INCLUDE_SOURCES,
                input=question,
            )
        except openai.OpenAIError as e:
            raise transient(f"Search request failed: {e}")

        output = [_as_dict(item) for item in (response.output or [])]
        if not output:
            raise transient("Empty response from answer engine")

        return SearchResponse(
            answer_text=response.output_text or "",
            output=output,
            model=getattr(response, "model", None) or self.settings.search_model,
        )
