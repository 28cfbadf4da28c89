"""
OpenAI API Client - Forced function-call completions for track selection
"""
import json
import logging
from typing import Any, Dict

import openai
from openai import OpenAI

from ..errors import MalformedResponseError, ProviderUnavailableError
from ..logging_utils import redact

logger = logging.getLogger(__name__)


class OpenAIClient:
    """
    Client for structured track selection using the OpenAI API.

    The SDK's own retries are disabled; a failed call surfaces immediately
    and the pipeline decides whether to retry.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        timeout: float = 30.0,
        temperature: float = 0.7,
        client: Any = None,
    ):
        self.client = client or OpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        self.model = model
        self.timeout = timeout
        self.temperature = temperature

    def complete(self, system_instruction: str, user_payload: str, tool_schema: Dict[str, Any]) -> Dict[str, Any]:
        """
        Run one completion that must answer through ``tool_schema``.

        Args:
            system_instruction: System message
            user_payload: User message (request context + catalog)
            tool_schema: Function definition ({name, description, parameters})

        Returns:
            Parsed JSON arguments of the forced function call

        Raises:
            ProviderUnavailableError: transport failure, timeout or error status
            MalformedResponseError: no function call or unparsable arguments
        """
        tool_name = tool_schema["name"]
        logger.info(f"Requesting '{tool_name}' from {self.model} ({len(user_payload):,} chars payload)")

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_instruction},
                    {"role": "user", "content": user_payload},
                ],
                tools=[{"type": "function", "function": tool_schema}],
                tool_choice={"type": "function", "function": {"name": tool_name}},
                temperature=self.temperature,
            )
        except openai.APIError as e:
            logger.error(f"OpenAI request failed: {redact(e)}")
            raise ProviderUnavailableError(f"LLM provider error: {redact(e)}") from e

        if not response.choices:
            raise MalformedResponseError("LLM response contained no choices")

        message = response.choices[0].message
        tool_calls = getattr(message, "tool_calls", None) or []
        call = next((c for c in tool_calls if c.function.name == tool_name), None)
        if call is None:
            raise MalformedResponseError(f"LLM response did not call '{tool_name}'")

        try:
            arguments = json.loads(call.function.arguments or "")
        except ValueError as e:
            raise MalformedResponseError(f"Unparsable '{tool_name}' arguments: {e}") from e

        if not isinstance(arguments, dict):
            raise MalformedResponseError(f"'{tool_name}' arguments are not a JSON object")

        usage = getattr(response, "usage", None)
        if usage is not None:
            logger.debug(f"Token usage: prompt={usage.prompt_tokens} completion={usage.completion_tokens}")
        return arguments
