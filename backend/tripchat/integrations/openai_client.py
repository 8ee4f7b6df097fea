import logging
from typing import Dict, List, Optional, Union

from openai import OpenAI, OpenAIError

from tripchat.config import get_settings
from tripchat.integrations.exceptions import IntegrationError, UpstreamAPIError

logger = logging.getLogger(__name__)

_client: Optional[OpenAI] = None


def get_client() -> OpenAI:
    """Create the OpenAI client on first use so importing the app needs no key."""
    global _client
    if _client is not None:
        return _client
    api_key = get_settings().openai_api_key
    if not api_key:
        raise IntegrationError("OPENAI_API_KEY is not set")
    _client = OpenAI(api_key=api_key)
    return _client


def call_gpt(
    prompt: Union[str, List[Dict[str, str]]],
    model: Optional[str] = None,
    response_format=None,
    temperature: float = 0.2,
) -> str:
    """Call GPT with a prompt or a full message list; optional response format for structured output"""
    messages = [{"role": "user", "content": prompt}] if isinstance(prompt, str) else prompt
    kwargs = {
        "model": model or get_settings().openai_model,
        "messages": messages,
        "temperature": temperature,
    }

    # Add response_format if specified
    if response_format:
        kwargs["response_format"] = response_format

    try:
        resp = get_client().chat.completions.create(**kwargs)
    except OpenAIError as e:
        logger.error("OpenAI call failed: %s", e)
        raise UpstreamAPIError(str(e)) from e

    content = resp.choices[0].message.content if resp.choices else None
    if not content:
        raise UpstreamAPIError("OpenAI returned an empty completion")
    return content
