from flask import Blueprint, request

from study_companion.runtime import get_runtime
from study_companion.services import file_api_service

files_bp = Blueprint('files_api', __name__)


@files_bp.route('/api/file-upload', methods=['POST'])
def file_upload():
    return file_api_service.upload_file(get_runtime(), request)


@files_bp.route('/api/upload', methods=['POST'])
def upload_and_extract():
    return file_api_service.upload_and_extract(get_runtime(), request)


@files_bp.route('/api/process-file', methods=['POST'])
def process_file():
    return file_api_service.process_file(get_runtime(), request)
