"""Google Gemini client for generating performance summaries."""

import asyncio
import time
from typing import Any, Dict, Optional

import google.generativeai as genai

from ..utils.exceptions import (
    AuthenticationError,
    GeminiIntegrationError,
    RateLimitError,
)
from ..utils.logging_config import get_logger, get_security_logger
from ..utils.validators import InputValidator

DEFAULT_MODEL = "gemini-3-flash-preview"

FinishReason = genai.protos.Candidate.FinishReason

_POLICY_BLOCK_MESSAGE = (
    "Content was blocked by Gemini's content policy. "
    "Try removing sensitive material from the uploaded documents."
)

# Finish reasons that mean the text was withheld; MAX_TOKENS keeps its text
BLOCKED_FINISH_REASONS = {
    FinishReason.SAFETY: (
        "Content was blocked by Gemini's safety filters. "
        "Try removing sensitive material from the uploaded documents."
    ),
    FinishReason.RECITATION: (
        "Content was blocked due to recitation concerns. "
        "The model detected potential copyright or citation issues."
    ),
    FinishReason.OTHER: (
        "Content generation was blocked for other reasons. Please try again."
    ),
    FinishReason.BLOCKLIST: _POLICY_BLOCK_MESSAGE,
    FinishReason.PROHIBITED_CONTENT: _POLICY_BLOCK_MESSAGE,
    FinishReason.SPII: _POLICY_BLOCK_MESSAGE,
}


class GeminiClient:
    """Single-shot Gemini text generation.

    One prompt in, one completion out: no streaming, no chat history and no
    automatic retry.
    """

    def __init__(
        self,
        api_key: str,
        model_name: str = DEFAULT_MODEL,
        timeout: int = 120,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ):
        self.logger = get_logger(__name__)
        self.security_logger = get_security_logger()

        InputValidator.validate_api_key(api_key)

        self.api_key = api_key
        self.model_name = model_name
        self.timeout = timeout
        self.temperature = temperature
        self.max_tokens = max_tokens

        self._initialize_client()

    def _initialize_client(self) -> None:
        try:
            genai.configure(api_key=self.api_key)
            self.model = genai.GenerativeModel(model_name=self.model_name)
        except Exception as e:
            self.security_logger.log_authentication_attempt(
                service="gemini", success=False, error=str(e)
            )
            raise AuthenticationError(f"Gemini client setup failed: {e}") from e

        self.logger.info(f"Gemini client initialized for model {self.model_name}")

    def _generation_config(self) -> Any:
        options: Dict[str, Any] = {"candidate_count": 1}
        if self.temperature is not None:
            options["temperature"] = self.temperature
        if self.max_tokens is not None:
            options["max_output_tokens"] = self.max_tokens
        return genai.types.GenerationConfig(**options)

    async def _generate_content(self, prompt: str) -> Any:
        """Run the blocking SDK call in the default executor."""
        loop = asyncio.get_running_loop()
        generation_config = self._generation_config()

        try:
            return await asyncio.wait_for(
                loop.run_in_executor(
                    None,
                    lambda: self.model.generate_content(
                        prompt, generation_config=generation_config
                    ),
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise GeminiIntegrationError(
                f"Gemini did not respond within {self.timeout}s"
            ) from e
        except Exception as e:
            message = str(e)
            if "quota" in message.lower() or "429" in message:
                raise RateLimitError(f"Gemini rate limit exceeded: {e}") from e
            if "api key" in message.lower() or "permission" in message.lower():
                raise AuthenticationError(f"Gemini rejected the API key: {e}") from e
            raise GeminiIntegrationError(f"Content generation failed: {e}") from e

    async def generate_summary(self, prompt: str) -> Dict[str, Any]:
        """Send ``prompt`` and return the completion with its metadata.

        Raises:
            GeminiIntegrationError: On transport failure, a blocked prompt or
                candidate, or an empty completion.
        """
        self.logger.info(f"Requesting summary from {self.model_name}")

        response = await self._generate_content(prompt)
        summary = self._process_response(response)

        self.security_logger.log_api_request(
            service="gemini",
            endpoint="generate_content",
            method="POST",
            status_code=200,
            input_words=len(prompt.split()),
            output_words=len(summary["content"].split()),
        )
        return summary

    def _check_prompt_feedback(self, response: Any) -> None:
        feedback = getattr(response, "prompt_feedback", None)
        block_reason = getattr(feedback, "block_reason", None) if feedback else None
        if block_reason:
            name = getattr(block_reason, "name", str(block_reason))
            raise GeminiIntegrationError(f"Prompt was blocked by Gemini: {name}")

    def _check_finish_reason(self, candidate: Any) -> None:
        finish_reason = getattr(candidate, "finish_reason", None)
        if finish_reason in BLOCKED_FINISH_REASONS:
            raise GeminiIntegrationError(BLOCKED_FINISH_REASONS[finish_reason])

    def _extract_content(self, response: Any) -> str:
        try:
            return response.text or ""
        except ValueError:
            # .text raises when the candidate has no parts
            content = ""
            for candidate in getattr(response, "candidates", None) or []:
                parts = getattr(getattr(candidate, "content", None), "parts", None)
                for part in parts or []:
                    content += getattr(part, "text", "")
            return content

    def _extract_usage_metadata(self, response: Any) -> Dict[str, Any]:
        usage = getattr(response, "usage_metadata", None)
        if usage is None:
            return {}

        return {
            "prompt_token_count": getattr(usage, "prompt_token_count", 0),
            "candidates_token_count": getattr(usage, "candidates_token_count", 0),
            "total_token_count": getattr(usage, "total_token_count", 0),
        }

    def _process_response(self, response: Any) -> Dict[str, Any]:
        self._check_prompt_feedback(response)

        candidates = getattr(response, "candidates", None)
        if candidates:
            self._check_finish_reason(candidates[0])

        content = self._extract_content(response)
        if not content.strip():
            raise GeminiIntegrationError("Empty response from Gemini")

        return {
            "content": content,
            "model": self.model_name,
            "usage": self._extract_usage_metadata(response),
            "generated_at": time.time(),
        }

    async def validate_api_key(self) -> bool:
        """Check the key with a minimal generation request."""
        try:
            await self._generate_content("What is 2 + 2? Reply with the number.")
        except Exception as e:
            self.security_logger.log_authentication_attempt(
                service="gemini", success=False, error=str(e)
            )
            self.logger.error(f"Gemini API key validation failed: {e}")
            return False

        self.security_logger.log_authentication_attempt(service="gemini", success=True)
        return True

    async def close(self) -> None:
        # The SDK holds no per-client connections
        self.model = None
        self.logger.info("Gemini client closed")
