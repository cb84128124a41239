"""Anthropic-backed generation provider used by the recon and synthesis stages."""

import json
import logging

import anthropic

from .config import SYNTHESIS_TEMPERATURE, Settings
from .models import plan_json_schema

logger = logging.getLogger(__name__)

# Server tool: the API runs the searches and returns results inline.
WEB_SEARCH_TOOL = {
    "type": "web_search_20250305",
    "name": "web_search",
    "max_uses": 5,
}

PLAN_TOOL_NAME = "emit_business_plan"


def plan_tool() -> dict:
    """Client tool whose input schema is the plan schema."""
    return {
        "name": PLAN_TOOL_NAME,
        "description": "Return the complete business plan and site bundle.",
        "input_schema": plan_json_schema(),
    }


class AnthropicProvider:
    """
    Thin wrapper over the Messages API exposing the two calls the pipeline makes.

    research(): free-text answer with the web search tool enabled.
    synthesize(): system + user turn at a fixed temperature; the model is forced
    to answer through the plan tool and its input comes back as JSON text.
    """

    def __init__(self, settings: Settings, client: anthropic.Anthropic | None = None):
        self.settings = settings
        self.client = client or anthropic.Anthropic(api_key=settings.require_api_key())

    def research(self, prompt: str) -> str:
        logger.debug("Recon request to %s", self.settings.recon_model)
        response = self.client.messages.create(
            model=self.settings.recon_model,
            max_tokens=2048,
            tools=[WEB_SEARCH_TOOL],
            messages=[{"role": "user", "content": prompt}],
        )
        return _response_text(response)

    def synthesize(self, system: str, user: str, temperature: float = SYNTHESIS_TEMPERATURE) -> str:
        logger.debug("Synthesis request to %s", self.settings.synthesis_model)
        response = self.client.messages.create(
            model=self.settings.synthesis_model,
            max_tokens=self.settings.synthesis_max_tokens,
            temperature=temperature,
            system=system,
            tools=[plan_tool()],
            tool_choice={"type": "tool", "name": PLAN_TOOL_NAME},
            messages=[{"role": "user", "content": user}],
        )
        if getattr(response, "stop_reason", None) == "max_tokens":
            logger.warning("Synthesis response hit max_tokens; payload is likely truncated")

        for block in response.content:
            if getattr(block, "type", None) == "tool_use" and block.name == PLAN_TOOL_NAME:
                return json.dumps(block.input)
        return _response_text(response)


def _response_text(response) -> str:
    """Join the text blocks of a response, skipping tool-use and search-result blocks."""
    parts = [block.text for block in response.content if getattr(block, "type", None) == "text"]
    return "".join(parts).strip()
