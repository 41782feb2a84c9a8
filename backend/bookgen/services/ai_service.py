"""Text generation client for the OpenRouter chat-completions API"""
import json
import re
import time
from typing import Any, Dict, Optional, Union

import httpx

from bookgen.config import settings as app_settings
from bookgen.exceptions import AuthError, UpstreamError, ParseError
from bookgen.logger import get_logger

logger = get_logger(__name__)

_FENCE_START = re.compile(r"^```(?:json)?\s*\n?", re.IGNORECASE)
_FENCE_END = re.compile(r"\n?```\s*$")


def extract_json(text: str) -> Union[dict, list]:
    """Return the first well-formed JSON array or object found in ``text``.

    Models often wrap JSON in prose or Markdown code fences; fences are
    stripped, then every ``[`` / ``{`` position is tried in order until one
    decodes. Nothing beyond fence stripping is done to repair bad JSON.

    Raises:
        ParseError: no JSON array or object could be decoded.
    """
    if not text:
        raise ParseError("AI response was empty")

    cleaned = _FENCE_START.sub("", text.strip())
    cleaned = _FENCE_END.sub("", cleaned)

    decoder = json.JSONDecoder()
    for match in re.finditer(r"[\[{]", cleaned):
        try:
            value, _ = decoder.raw_decode(cleaned, match.start())
        except json.JSONDecodeError:
            continue
        return value

    logger.error(f"❌ No JSON found in AI response (first 500 chars): {text[:500]}")
    raise ParseError(raw_response=text)


class AIService:
    """One chat-completions round trip per call.

    The credential check happens before any network I/O. A 401 for a
    non-default model is retried exactly once with the default model.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        default_model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.default_model = default_model or app_settings.default_model
        self.model = model or self.default_model
        self.base_url = (base_url or app_settings.openrouter_base_url).rstrip("/")
        self.temperature = temperature if temperature is not None else app_settings.generation_temperature
        self.max_tokens = max_tokens or app_settings.generation_max_tokens
        self.timeout = timeout or app_settings.generation_timeout_seconds
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": app_settings.http_referer,
            "X-Title": app_settings.app_title,
        }

    async def _post(self, payload: Dict[str, Any]) -> httpx.Response:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                return await client.post(
                    f"{self.base_url}/chat/completions",
                    headers=self._headers(),
                    json=payload,
                )
        except httpx.TimeoutException as e:
            logger.error(f"❌ Generation timed out after {self.timeout}s (model={payload['model']})")
            raise UpstreamError(f"Text generation failed: timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            logger.error(f"❌ Generation request failed: {e}")
            raise UpstreamError(f"Text generation failed: {e}") from e

    async def generate_text(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Generate text for a prompt.

        Returns:
            ``{"content": str, "model": str, "usage": dict}``
        """
        if not self.api_key:
            raise AuthError("OpenRouter API key not configured. Please set it in Settings.")

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        model = self.model
        fallback_used = False
        while True:
            payload = {
                "model": model,
                "messages": messages,
                "temperature": temperature if temperature is not None else self.temperature,
                "max_tokens": max_tokens or self.max_tokens,
            }
            started = time.monotonic()
            response = await self._post(payload)
            elapsed = time.monotonic() - started

            if response.status_code == 401:
                if model != self.default_model and not fallback_used:
                    logger.warning(f"⚠️ Model {model} rejected with 401, retrying once with {self.default_model}")
                    model = self.default_model
                    fallback_used = True
                    continue
                logger.error(f"❌ OpenRouter authentication failed (model={model})")
                raise AuthError(
                    "OpenRouter authentication failed. Please verify your API key "
                    "and try a different model in Settings.",
                    {"model": model},
                )

            if response.status_code >= 400:
                logger.error(f"❌ OpenRouter error {response.status_code} (model={model}): {response.text[:500]}")
                raise UpstreamError(
                    f"OpenRouter API error ({response.status_code})",
                    status=response.status_code,
                    details={"body": response.text[:500]},
                )

            try:
                data = response.json()
                content = data["choices"][0]["message"]["content"]
            except (ValueError, KeyError, IndexError, TypeError) as e:
                logger.error(f"❌ Invalid response from OpenRouter: {response.text[:500]}")
                raise UpstreamError("Invalid response from OpenRouter API") from e
            if content is None:
                raise UpstreamError("OpenRouter returned an empty message")

            logger.info(f"✅ Generated {len(content)} chars with {model} in {elapsed:.1f}s")
            return {
                "content": content,
                "model": data.get("model", model),
                "usage": data.get("usage") or {},
            }

    async def generate_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> Union[dict, list]:
        """Generate and extract a JSON value from the response."""
        response = await self.generate_text(
            prompt=prompt,
            system_prompt=system_prompt,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        return extract_json(response["content"])
