"""Per-app collaborators handed to the API service functions as ``app_ctx``."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from flask import current_app, g, jsonify

from study_companion.config import AppConfig
from study_companion.logging_config import logger as default_logger
from study_companion.services.text_extraction_service import extract_text

EXTENSION_KEY = 'study_companion'


@dataclass
class AppRuntime:
    config: AppConfig
    study_pack_service: Any
    generation_client: Optional[Any] = None
    storage: Optional[Any] = None
    text_extractor: Callable = extract_text
    logger: Any = field(default=default_logger)

    jsonify = staticmethod(jsonify)

    @staticmethod
    def request_id():
        return str(getattr(g, 'request_id', '') or '')

    @staticmethod
    def utc_timestamp():
        return datetime.now(timezone.utc).isoformat()

    def error_response(self, exc):
        response = self.jsonify(exc.to_payload(self.request_id()))
        if exc.retry_after:
            response.headers['Retry-After'] = str(int(exc.retry_after))
        return response, exc.status_code


def get_runtime(app=None) -> AppRuntime:
    return (app or current_app).extensions[EXTENSION_KEY]
