"""Centralized utility for chat-completion LLM calls.

This module provides a single async entry point for the chat-style completion
service used by the story test agent. Model selection is driven by
llm_config.yml via the `task_name` parameter; explicit arguments still win.

Usage:
    text = await call_chat_completion_async(
        api_key,
        system_message="You are an expert TypeScript test generator",
        user_message="Generate tests for ...",
        task_name="story_test_generation",
    )
"""

from typing import Dict, Any, Optional, List

import httpx

from core.logging import log_debug
from utils.exceptions import GenerationError

DEFAULT_API_BASE = "https://api.openai.com/v1"


def _resolve_task_config(task_name: Optional[str] = None):
    """Resolve model/temperature/max_tokens from llm_config.yml for a task."""
    if not task_name:
        return None
    from core.llm_config import get_llm_config
    return get_llm_config().get(task_name)


def build_messages(system_message: str, user_message: str) -> List[Dict[str, str]]:
    """Build the chat message list for a system + user exchange."""
    return [
        {"role": "system", "content": system_message},
        {"role": "user", "content": user_message},
    ]


def _build_request_body(
    messages: List[Dict[str, str]],
    model: str,
    temperature: float,
    max_tokens: int,
) -> Dict[str, Any]:
    """Build the request body for the chat completions endpoint."""
    return {
        "model": model,
        "messages": messages,
        "temperature": temperature,
        "max_tokens": max_tokens,
    }


def _build_headers(api_key: str) -> Dict[str, str]:
    """Build headers for the chat completions request."""
    return {
        "accept": "application/json",
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }


def _extract_text_from_response(result: Dict[str, Any]) -> str:
    """Extract the first candidate's text content from the API response."""
    choices = result.get("choices") if isinstance(result, dict) else None
    if choices:
        choice = choices[0]
        if "message" in choice:
            return choice["message"].get("content") or ""
        if "text" in choice:
            return choice["text"] or ""

    raise GenerationError("Unexpected response format from completion service", details=result)


async def call_chat_completion_async(
    api_key: str,
    system_message: str,
    user_message: str,
    model: Optional[str] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    timeout: Optional[int] = None,
    task_name: Optional[str] = None,
    api_base: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> str:
    """
    Make an async chat-completion call.

    Args:
        api_key: Key for the completion service
        system_message: System instruction
        user_message: User instruction
        model: Model to use. None = resolved from llm_config.yml
        temperature: Sampling temperature. None = use config/defaults
        max_tokens: Maximum tokens in response. None = use config/defaults
        timeout: Request timeout in seconds. None = use config/defaults
        task_name: Key in llm_config.yml to auto-resolve model/temp/tokens
        api_base: Base URL of the OpenAI-compatible API
        transport: Optional httpx transport (used by tests)

    Returns:
        str: The first candidate's text

    Raises:
        GenerationError: If the key is missing, the call fails or the
            response has an unexpected shape
    """
    if not api_key:
        raise GenerationError("Completion service API key not configured. Please provide OPENAI_API_KEY.")

    task_cfg = _resolve_task_config(task_name)
    if task_cfg:
        model = model or task_cfg.model
        temperature = temperature if temperature is not None else task_cfg.temperature
        max_tokens = max_tokens if max_tokens is not None else task_cfg.max_tokens
        timeout = timeout if timeout is not None else task_cfg.timeout

    model = model or "gpt-4-turbo"
    temperature = temperature if temperature is not None else 0.3
    max_tokens = max_tokens if max_tokens is not None else 2000
    timeout_value = timeout or 180
    log_debug(
        f"[async] task={task_name or 'adhoc'} model={model} "
        f"temp={temperature} max_tokens={max_tokens}",
        "llm",
    )

    url = f"{(api_base or DEFAULT_API_BASE).rstrip('/')}/chat/completions"
    request_body = _build_request_body(build_messages(system_message, user_message), model, temperature, max_tokens)

    try:
        async with httpx.AsyncClient(timeout=timeout_value, transport=transport) as client:
            response = await client.post(url, json=request_body, headers=_build_headers(api_key))
    except httpx.TimeoutException as e:
        raise GenerationError(f"Completion service timed out after {timeout_value}s") from e
    except httpx.HTTPError as e:
        raise GenerationError(f"Completion service request failed: {e}") from e

    if response.status_code != 200:
        raise GenerationError(
            f"Completion service error: {response.status_code} - {response.text}"
        )

    try:
        result = response.json()
    except ValueError as e:
        raise GenerationError("Completion service returned invalid JSON") from e

    return _extract_text_from_response(result)


__all__ = [
    'call_chat_completion_async',
    'build_messages',
]
