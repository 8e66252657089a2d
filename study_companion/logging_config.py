import json
import logging

logger = logging.getLogger('study_companion')


def configure_logging(level: str = 'INFO') -> None:
    """Idempotent logging setup; the package logger always follows ``level``."""
    numeric_level = getattr(logging, str(level or 'INFO').upper(), logging.INFO)
    logger.setLevel(numeric_level)
    if logging.getLogger().handlers:
        return
    logging.basicConfig(
        level=numeric_level,
        format='%(asctime)s %(levelname)s %(name)s %(message)s',
    )


def log_event(level, event, **fields):
    """Emit one JSON line so request-scoped fields stay machine-parseable."""
    payload = {'event': event}
    for key, value in fields.items():
        payload[str(key)] = value
    logger.log(level, json.dumps(payload, ensure_ascii=True, default=str))
