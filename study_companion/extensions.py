import uuid

import sentry_sdk
from flask import g, jsonify, request
from sentry_sdk.integrations.flask import FlaskIntegration
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from study_companion.errors import StudyPackError
from study_companion.runtime import EXTENSION_KEY

CORS_ALLOW_HEADERS = 'Content-Type, X-Filename, X-Request-ID'
CORS_ALLOW_METHODS = 'GET, POST, OPTIONS'


def init_sentry(config) -> bool:
    if not config.sentry_dsn:
        return False
    sentry_sdk.init(
        dsn=config.sentry_dsn,
        integrations=[FlaskIntegration()],
        traces_sample_rate=config.sentry_traces_sample_rate,
        send_default_pii=False,
        environment=config.environment,
        release=f"study-companion@{config.version}",
    )
    return True


def apply_cors_headers(response):
    if not request.path.startswith('/api/'):
        return response
    response.headers['Access-Control-Allow-Origin'] = '*'
    response.headers['Access-Control-Allow-Headers'] = CORS_ALLOW_HEADERS
    response.headers['Access-Control-Allow-Methods'] = CORS_ALLOW_METHODS
    return response


def init_extensions(app, runtime) -> None:
    """Attach the runtime, request hooks and JSON error handlers to ``app``."""
    app.extensions[EXTENSION_KEY] = runtime
    sentry_enabled = init_sentry(runtime.config)
    logger = runtime.logger

    @app.before_request
    def handle_api_options_preflight():
        if request.method == 'OPTIONS' and request.path.startswith('/api/'):
            response = app.response_class(status=200)
            return apply_cors_headers(response)

    @app.before_request
    def attach_request_context():
        request_id = str(request.headers.get('X-Request-ID', '') or '').strip()[:120] or uuid.uuid4().hex
        g.request_id = request_id
        if sentry_enabled:
            sentry_sdk.set_tag('request.id', request_id)
            sentry_sdk.set_tag('route.path', request.path)
            sentry_sdk.set_tag('route.method', request.method)

    @app.after_request
    def attach_response_context(response):
        request_id = str(getattr(g, 'request_id', '') or '').strip()
        if request_id:
            response.headers['X-Request-ID'] = request_id
        return apply_cors_headers(response)

    @app.errorhandler(StudyPackError)
    def handle_study_pack_error(error):
        return runtime.error_response(error)

    @app.errorhandler(404)
    def handle_not_found(_error):
        return jsonify({'error': 'API endpoint not found'}), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(_error):
        return jsonify({'error': 'Method not allowed'}), 405

    @app.errorhandler(RequestEntityTooLarge)
    def handle_request_entity_too_large(_error):
        limit_mb = runtime.config.max_request_bytes // (1024 * 1024)
        return jsonify({'error': f'Request too large. Maximum request size is {limit_mb}MB.'}), 413

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        if isinstance(error, HTTPException):
            return jsonify({'error': error.description}), error.code
        logger.exception(f"Unhandled error on {request.method} {request.path}: {error}")
        return jsonify({
            'error': 'Internal server error. Please try again.',
            'timestamp': runtime.utc_timestamp(),
            'requestId': runtime.request_id(),
        }), 500
