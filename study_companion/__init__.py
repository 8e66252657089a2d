import os

from dotenv import load_dotenv
from flask import Flask

from .config import load_config
from .extensions import init_extensions
from .logging_config import configure_logging, logger
from .runtime import AppRuntime


def create_app(config=None, *, generation_client=None, storage=None, file_fetcher=None, http_session=None):
    """App factory entrypoint.

    Collaborators left as ``None`` are built from ``config``; tests pass fakes.
    """
    from .blueprints import files_bp, generate_bp, health_bp
    from .services.generation_client import build_generation_client
    from .services.remote_file_service import fetch_remote_file
    from .services.storage_service import build_storage
    from .services.study_pack_service import StudyPackService

    load_dotenv()
    config = config or load_config()
    configure_logging(config.log_level)

    if generation_client is None:
        generation_client = build_generation_client(config, logger)
    if storage is None:
        storage = build_storage(config, logger)

    study_pack_service = StudyPackService(
        config,
        generation_client,
        file_fetcher=file_fetcher or fetch_remote_file,
        http_session=http_session,
        logger=logger,
    )
    runtime = AppRuntime(
        config=config,
        study_pack_service=study_pack_service,
        generation_client=generation_client,
        storage=storage,
        logger=logger,
    )

    app = Flask(__name__)
    app.secret_key = config.flask_secret_key or os.urandom(32).hex()
    app.config['MAX_CONTENT_LENGTH'] = config.max_request_bytes
    init_extensions(app, runtime)

    app.register_blueprint(generate_bp)
    app.register_blueprint(files_bp)
    app.register_blueprint(health_bp)

    logger.info(
        f"Study companion ready (env={config.environment}, model={config.gemini_model}, "
        f"gemini={'on' if generation_client is not None else 'off'}, "
        f"storage={'on' if storage is not None else 'off'})"
    )
    return app
