"""Request orchestration: input resolution, length policy and the generation pipeline."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional

from study_companion.errors import (
    API_KEY_HELP,
    ConfigurationError,
    ExtractionError,
    InputError,
    UpstreamAuthOrConfig,
    UpstreamError,
    UpstreamMalformed,
    UpstreamRateLimited,
    UpstreamTimeout,
    UpstreamUnavailable,
)
from study_companion.logging_config import log_event
from study_companion.services import text_extraction_service
from study_companion.services.content_analyzer import analyze
from study_companion.services.generation_client import (
    GenerationAuthError,
    GenerationEmptyResponse,
    GenerationOptions,
    GenerationRateLimited,
    GenerationTimeout,
    GenerationUnavailable,
    GenerationUpstreamError,
)
from study_companion.services.prompt_registry import build_study_prompt
from study_companion.services.remote_file_service import fetch_remote_file
from study_companion.services.response_normalizer import StudyPackValidationError, normalize

RETRY_AFTER_SECONDS = 60
TRUNCATION_KEEP_RATIO = 0.7
TRUNCATION_NOTE = '\n\n[Note: this content was truncated because it exceeded the maximum supported length.]'

EXTRACTION_MESSAGES = {
    text_extraction_service.UNSUPPORTED_TYPE: 'This file type is not supported for text extraction.',
    text_extraction_service.EMPTY_CONTENT: 'The uploaded file appears to be empty.',
    text_extraction_service.PASSWORD_PROTECTED: 'Password-protected documents are not supported. Please remove the password and try again.',
    text_extraction_service.CORRUPTED: 'The uploaded file could not be read. It may be corrupted.',
}


@dataclass(frozen=True)
class RawInput:
    text: Optional[str] = None
    file_reference: Optional[str] = None
    mime_type: Optional[str] = None

    def __post_init__(self):
        if (self.text is None) == (self.file_reference is None):
            raise ValueError('RawInput needs exactly one of text or file_reference')

    @property
    def is_file(self) -> bool:
        return self.file_reference is not None


def to_user_facing_extraction_error(exc):
    message = exc.detail or EXTRACTION_MESSAGES.get(exc.category) or ExtractionError.default_message
    return ExtractionError(exc.category, message)


class StudyPackService:
    def __init__(
        self,
        config,
        generation_client,
        *,
        file_fetcher=fetch_remote_file,
        text_extractor=text_extraction_service.extract_text,
        http_session=None,
        logger=None,
    ):
        self.config = config
        self.generation_client = generation_client
        self.file_fetcher = file_fetcher
        self.text_extractor = text_extractor
        self.http_session = http_session
        self.logger = logger or logging.getLogger('study_companion')

    def extract_from_reference(self, file_reference, mime_type=None):
        remote = self.file_fetcher(
            file_reference,
            timeout_seconds=self.config.remote_fetch_timeout_seconds,
            max_bytes=self.config.max_request_bytes,
            session=self.http_session,
            logger=self.logger,
        )
        effective_mime = mime_type or remote.content_type
        try:
            return self.text_extractor(
                remote.content,
                effective_mime,
                rich_documents=self.config.rich_document_extraction,
            )
        except ExtractionError as exc:
            self.logger.warning(f"Text extraction failed ({exc.category}) for {effective_mime}")
            raise to_user_facing_extraction_error(exc) from exc

    def resolve_content(self, raw_input):
        if raw_input.is_file:
            return self.extract_from_reference(raw_input.file_reference, raw_input.mime_type)
        return raw_input.text

    def validate_length(self, text, minimum=None):
        minimum = self.config.min_content_chars if minimum is None else minimum
        trimmed = (text or '').strip()
        if not trimmed:
            raise InputError('No content found in the provided input.')
        if len(trimmed) < minimum:
            raise InputError('Content is too short. Please provide more detailed study material for better results.')
        maximum = self.config.max_content_chars
        if len(trimmed) > maximum:
            if not self.config.truncate_oversized_content:
                raise InputError(f'Content is too long. Please limit your input to {maximum:,} characters.')
            keep = int(maximum * TRUNCATION_KEEP_RATIO)
            self.logger.info(f"Content truncated from {len(trimmed)} to {keep} chars")
            trimmed = trimmed[:keep].rstrip() + TRUNCATION_NOTE
        return trimmed

    def generate(self, prompt):
        options = GenerationOptions.from_config(self.config)
        try:
            return self.generation_client.generate(prompt, options)
        except GenerationRateLimited as exc:
            self.logger.warning(f"Gemini rate limited: {exc}")
            raise UpstreamRateLimited(retry_after=RETRY_AFTER_SECONDS) from exc
        except GenerationAuthError as exc:
            self.logger.error(f"Gemini rejected credentials: {exc}")
            raise UpstreamAuthOrConfig() from exc
        except GenerationTimeout as exc:
            self.logger.warning(f"Gemini call timed out: {exc}")
            raise UpstreamTimeout() from exc
        except GenerationUnavailable as exc:
            self.logger.warning(f"Gemini overloaded: {exc}")
            raise UpstreamUnavailable(retry_after=RETRY_AFTER_SECONDS) from exc
        except GenerationEmptyResponse as exc:
            self.logger.error("Gemini returned an empty response")
            raise UpstreamMalformed('No response from Gemini AI. Please try again.') from exc
        except GenerationUpstreamError as exc:
            self.logger.error(f"Gemini API error ({exc.status_code}): {exc}")
            status_suffix = f': {exc.status_code}' if exc.status_code else ''
            raise UpstreamError(f'AI service error{status_suffix}. Please try again.') from exc

    def handle(self, raw_input, request_id=''):
        started = time.time()
        if self.generation_client is None:
            raise ConfigurationError(help=API_KEY_HELP)
        text = self.validate_length(self.resolve_content(raw_input))

        analysis = analyze(text, self.config.sizing_policy)
        log_event(
            logging.INFO,
            'content_analyzed',
            request_id=request_id,
            source='file' if raw_input.is_file else 'text',
            chars=len(text),
            words=analysis.word_count,
            keyword_hits=analysis.keyword_hits,
            flashcards=analysis.target_flashcard_count,
            quiz=analysis.target_quiz_count,
            content_type=analysis.content_type,
            complexity=analysis.complexity,
        )
        raw_response = self.generate(build_study_prompt(text, analysis))

        try:
            study_pack = normalize(raw_response)
        except StudyPackValidationError as exc:
            self.logger.error(f"Study pack validation failed ({exc.kind}): {exc.detail} | raw: {raw_response[:500]}")
            raise UpstreamMalformed() from exc

        log_event(
            logging.INFO,
            'study_pack_generated',
            request_id=request_id,
            flashcards=len(study_pack['flashcards']),
            quiz=len(study_pack['quiz']),
            duration_ms=int((time.time() - started) * 1000),
        )
        return study_pack
