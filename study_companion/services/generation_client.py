"""Gemini generation client with typed failure classification."""

from __future__ import annotations

import time
from dataclasses import dataclass

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from study_companion.services.prompt_registry import PROMPT_CONNECTIVITY_TEST


class GenerationError(Exception):
    status_code = None

    def __init__(self, message='', status_code=None):
        super().__init__(message or self.__class__.__name__)
        if status_code is not None:
            self.status_code = status_code


class GenerationRateLimited(GenerationError):
    status_code = 429


class GenerationAuthError(GenerationError):
    status_code = 403


class GenerationTimeout(GenerationError):
    pass


class GenerationEmptyResponse(GenerationError):
    pass


class GenerationUnavailable(GenerationError):
    status_code = 503


class GenerationUpstreamError(GenerationError):
    pass


@dataclass(frozen=True)
class GenerationOptions:
    temperature: float = 0.7
    max_output_tokens: int = 8192
    top_p: float = 0.9
    top_k: int = 40
    timeout_ms: int = 120000

    @classmethod
    def from_config(cls, config, timeout_ms=None):
        return cls(
            temperature=config.gemini_temperature,
            max_output_tokens=config.gemini_max_output_tokens,
            top_p=config.gemini_top_p,
            top_k=config.gemini_top_k,
            timeout_ms=timeout_ms or config.gemini_timeout_ms,
        )


def classify_api_error(exc):
    code = int(getattr(exc, 'code', 0) or 0)
    message = str(getattr(exc, 'message', '') or exc)[:300]
    if code == 429:
        return GenerationRateLimited(message, code)
    if code in (401, 403):
        return GenerationAuthError(message, code)
    if code in (408, 504):
        return GenerationTimeout(message, code)
    if code == 503:
        return GenerationUnavailable(message, code)
    return GenerationUpstreamError(message, code or None)


class GeminiGenerationClient:
    """Single-attempt wrapper around ``client.models.generate_content``.

    Only 503 overload responses are retried, and only when ``max_retries`` is
    above zero; rate limits and auth failures are always surfaced to the caller.
    """

    def __init__(self, client, model, *, max_retries=0, backoff_seconds=1.0, logger=None, sleep_fn=time.sleep):
        self.client = client
        self.model = model
        self.max_retries = max(0, int(max_retries or 0))
        self.backoff_seconds = backoff_seconds
        self.logger = logger
        self.sleep_fn = sleep_fn

    def _build_config(self, options):
        return types.GenerateContentConfig(
            temperature=options.temperature,
            top_p=options.top_p,
            top_k=options.top_k,
            max_output_tokens=options.max_output_tokens,
            http_options=types.HttpOptions(timeout=int(options.timeout_ms)),
        )

    def _call_once(self, prompt, options):
        try:
            response = self.client.models.generate_content(
                model=self.model,
                contents=[types.Content(role='user', parts=[types.Part.from_text(text=prompt)])],
                config=self._build_config(options),
            )
        except genai_errors.APIError as exc:
            raise classify_api_error(exc) from exc
        except (httpx.TimeoutException, TimeoutError) as exc:
            raise GenerationTimeout(f'Generation call exceeded {options.timeout_ms}ms') from exc
        text = (getattr(response, 'text', None) or '').strip()
        if not text:
            raise GenerationEmptyResponse('Generation API returned no text')
        return text

    def generate(self, prompt: str, options: GenerationOptions) -> str:
        attempt = 0
        while True:
            try:
                return self._call_once(prompt, options)
            except GenerationUnavailable:
                if attempt >= self.max_retries:
                    raise
                delay = self.backoff_seconds * (2 ** attempt)
                if self.logger is not None:
                    self.logger.warning(f"Gemini overloaded, retrying in {delay:.1f}s (attempt {attempt + 1}/{self.max_retries})")
                self.sleep_fn(delay)
                attempt += 1

    def ping(self, timeout_ms=10000) -> str:
        options = GenerationOptions(temperature=0.1, max_output_tokens=256, timeout_ms=timeout_ms)
        return self._call_once(PROMPT_CONNECTIVITY_TEST, options)


def build_generation_client(config, logger=None):
    if not config.gemini_api_key:
        if logger is not None:
            logger.info("GEMINI_API_KEY not set; study pack generation is disabled.")
        return None
    try:
        client = genai.Client(api_key=config.gemini_api_key)
    except Exception as e:
        if logger is not None:
            logger.info(f"Gemini client disabled: {e}")
        return None
    return GeminiGenerationClient(
        client,
        config.gemini_model,
        max_retries=config.gemini_max_retries,
        logger=logger,
    )
