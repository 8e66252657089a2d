"""Business logic handlers for the health and connectivity-test APIs."""

from study_companion.errors import API_KEY_HELP
from study_companion.services.generation_client import GenerationError
from study_companion.services.prompt_registry import get_prompt_metadata

API_KEY_PREFIX = 'AIza'


def health(app_ctx):
    config = app_ctx.config
    return app_ctx.jsonify({
        'status': 'OK',
        'timestamp': app_ctx.utc_timestamp(),
        'environment': config.environment,
        'version': config.version,
        'services': {
            'gemini': 'configured' if app_ctx.generation_client is not None else 'missing',
            'storage': 'configured' if app_ctx.storage is not None else 'missing',
        },
        'prompts': get_prompt_metadata(),
    })


def api_test(app_ctx):
    api_key = app_ctx.config.gemini_api_key
    if not api_key:
        return app_ctx.jsonify({
            'error': 'GEMINI_API_KEY not found in environment variables.',
            'help': API_KEY_HELP,
        }), 500
    if not api_key.startswith(API_KEY_PREFIX):
        return app_ctx.jsonify({
            'error': f'Invalid Gemini API key format. Key should start with "{API_KEY_PREFIX}".',
            'help': 'Check your API key at: https://makersuite.google.com/app/apikey',
        }), 500
    if app_ctx.generation_client is None:
        return app_ctx.jsonify({'error': 'Gemini client could not be initialized.', 'help': API_KEY_HELP}), 500

    try:
        test_response = app_ctx.generation_client.ping(timeout_ms=app_ctx.config.gemini_test_timeout_ms)
    except GenerationError as exc:
        app_ctx.logger.warning(f"Gemini connectivity test failed ({exc.status_code}): {exc}")
        return app_ctx.jsonify({
            'success': False,
            'error': 'Gemini API test failed.',
            'details': str(exc),
            'status': exc.status_code,
            'help': API_KEY_HELP,
        }), 500

    return app_ctx.jsonify({
        'success': True,
        'apiConfigured': True,
        'testResponse': test_response,
        'timestamp': app_ctx.utc_timestamp(),
    })
