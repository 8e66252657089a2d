from flask import Blueprint, request

from study_companion.runtime import get_runtime
from study_companion.services import generate_api_service

generate_bp = Blueprint('generate_api', __name__)


@generate_bp.route('/api/generate', methods=['POST'])
def generate_study_pack():
    return generate_api_service.generate_study_pack(get_runtime(), request)
