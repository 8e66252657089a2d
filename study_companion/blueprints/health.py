from flask import Blueprint

from study_companion.runtime import get_runtime
from study_companion.services import health_api_service

health_bp = Blueprint('health_api', __name__)


@health_bp.route('/api/health', methods=['GET'])
def health():
    return health_api_service.health(get_runtime())


@health_bp.route('/api/test', methods=['GET'])
def api_test():
    return health_api_service.api_test(get_runtime())
