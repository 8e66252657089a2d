import os
from dataclasses import dataclass

DEV_ENV_NAMES = {'development', 'dev', 'local', 'test'}
TRUTHY_VALUES = {'1', 'true', 'yes', 'on'}
SIZING_POLICY_NAMES = {'content_density', 'word_volume'}


def safe_int_env(name, default=0, minimum=1, maximum=100000, *, env=None):
    env = os.environ if env is None else env
    raw = str(env.get(name, str(default)) or '').strip()
    try:
        value = int(raw)
    except Exception:
        value = int(default)
    return min(max(value, minimum), maximum)


def safe_float_env(name, default=0.0, minimum=0.0, maximum=1.0, *, env=None):
    env = os.environ if env is None else env
    raw = str(env.get(name, str(default)) or '').strip()
    try:
        value = float(raw)
    except Exception:
        return default
    return min(max(value, minimum), maximum)


def bool_env(name, default=False, *, env=None):
    env = os.environ if env is None else env
    raw = env.get(name)
    if raw is None:
        return default
    return str(raw).strip().lower() in TRUTHY_VALUES


@dataclass(frozen=True)
class AppConfig:
    """Central config object handed to the app factory and every service."""

    environment: str = 'development'
    port: int = 3001
    log_level: str = 'INFO'
    flask_secret_key: str = ''
    version: str = '2.0.0'

    gemini_api_key: str = ''
    gemini_model: str = 'gemini-2.5-flash-lite'
    gemini_timeout_ms: int = 120000
    gemini_test_timeout_ms: int = 10000
    gemini_max_retries: int = 0
    gemini_temperature: float = 0.7
    gemini_top_p: float = 0.9
    gemini_top_k: int = 40
    gemini_max_output_tokens: int = 8192

    sizing_policy: str = 'content_density'
    min_content_chars: int = 20
    min_extracted_chars: int = 50
    max_content_chars: int = 200000
    truncate_oversized_content: bool = False

    max_upload_bytes: int = 10 * 1024 * 1024
    max_request_bytes: int = 50 * 1024 * 1024
    remote_fetch_timeout_seconds: int = 60
    rich_document_extraction: bool = True

    firebase_credentials_json: str = ''
    firebase_credentials_path: str = 'firebase-credentials.json'
    firebase_storage_bucket: str = ''

    sentry_dsn: str = ''
    sentry_traces_sample_rate: float = 0.0

    @property
    def is_dev_like(self) -> bool:
        return self.environment in DEV_ENV_NAMES

    @property
    def gemini_configured(self) -> bool:
        return bool(self.gemini_api_key)

    @property
    def storage_configured(self) -> bool:
        if not self.firebase_storage_bucket:
            return False
        return bool(self.firebase_credentials_json) or os.path.exists(self.firebase_credentials_path)


def resolve_environment(env=None):
    env = os.environ if env is None else env
    return (
        env.get('APP_ENV')
        or env.get('FLASK_ENV')
        or env.get('ENV')
        or 'development'
    ).strip().lower()


def load_config(env=None) -> AppConfig:
    env = os.environ if env is None else env
    environment = resolve_environment(env)
    config = AppConfig(
        environment=environment,
        port=safe_int_env('PORT', 3001, minimum=1, maximum=65535, env=env),
        log_level=(env.get('LOG_LEVEL', 'INFO') or 'INFO').strip().upper(),
        flask_secret_key=(env.get('FLASK_SECRET_KEY', '') or '').strip(),
        gemini_api_key=(env.get('GEMINI_API_KEY', '') or '').strip(),
        gemini_model=(env.get('GEMINI_MODEL', '') or 'gemini-2.5-flash-lite').strip(),
        gemini_timeout_ms=safe_int_env('GEMINI_TIMEOUT_MS', 120000, minimum=1000, maximum=600000, env=env),
        gemini_test_timeout_ms=safe_int_env('GEMINI_TEST_TIMEOUT_MS', 10000, minimum=1000, maximum=120000, env=env),
        gemini_max_retries=safe_int_env('GEMINI_MAX_RETRIES', 0, minimum=0, maximum=5, env=env),
        gemini_temperature=safe_float_env('GEMINI_TEMPERATURE', 0.7, maximum=2.0, env=env),
        gemini_top_p=safe_float_env('GEMINI_TOP_P', 0.9, env=env),
        gemini_top_k=safe_int_env('GEMINI_TOP_K', 40, minimum=1, maximum=100, env=env),
        gemini_max_output_tokens=safe_int_env('GEMINI_MAX_OUTPUT_TOKENS', 8192, minimum=256, maximum=65536, env=env),
        sizing_policy=(env.get('STUDY_SIZING_POLICY', '') or 'content_density').strip().lower(),
        min_content_chars=safe_int_env('MIN_CONTENT_CHARS', 20, minimum=1, maximum=10000, env=env),
        min_extracted_chars=safe_int_env('MIN_EXTRACTED_CHARS', 50, minimum=1, maximum=10000, env=env),
        max_content_chars=safe_int_env('MAX_CONTENT_CHARS', 200000, minimum=1000, maximum=2000000, env=env),
        truncate_oversized_content=bool_env('TRUNCATE_OVERSIZED_CONTENT', False, env=env),
        max_upload_bytes=safe_int_env('MAX_UPLOAD_BYTES', 10 * 1024 * 1024, minimum=1024, maximum=50 * 1024 * 1024, env=env),
        remote_fetch_timeout_seconds=safe_int_env('REMOTE_FETCH_TIMEOUT_SECONDS', 60, minimum=1, maximum=600, env=env),
        rich_document_extraction=bool_env('RICH_DOCUMENT_EXTRACTION', True, env=env),
        firebase_credentials_json=(env.get('FIREBASE_CREDENTIALS', '') or '').strip(),
        firebase_credentials_path=(env.get('FIREBASE_CREDENTIALS_PATH', '') or 'firebase-credentials.json').strip(),
        firebase_storage_bucket=(env.get('FIREBASE_STORAGE_BUCKET', '') or '').strip(),
        sentry_dsn=(env.get('SENTRY_DSN_BACKEND', '') or '').strip(),
        sentry_traces_sample_rate=safe_float_env('SENTRY_TRACES_SAMPLE_RATE', 0.0, env=env),
    )
    if not config.is_dev_like and not config.flask_secret_key:
        raise RuntimeError('FLASK_SECRET_KEY must be set in non-development environments.')
    if config.sizing_policy not in SIZING_POLICY_NAMES:
        raise RuntimeError(f"STUDY_SIZING_POLICY must be one of: {', '.join(sorted(SIZING_POLICY_NAMES))}.")
    return config
