"""Business logic handler for the study pack generation API."""

from study_companion.errors import InputError, StudyPackError
from study_companion.services.study_pack_service import RawInput

TEXT_FIELDS = ('notes', 'extractedText', 'text')
FILE_REFERENCE_FIELDS = ('fileURL', 'fileUrl')
NO_CONTENT_MESSAGE = 'No content provided. Please provide fileURL or notes in the request body.'


def _first_present(payload, field_names):
    for name in field_names:
        value = payload.get(name)
        if value is None:
            continue
        if not isinstance(value, str):
            raise InputError(f'{name} must be a string.')
        if value.strip():
            return value
    return None


def parse_raw_input(payload):
    if not isinstance(payload, dict):
        raise InputError('Request body must be a JSON object.')
    file_reference = _first_present(payload, FILE_REFERENCE_FIELDS)
    if file_reference:
        mime_type = payload.get('mimeType')
        if mime_type is not None and not isinstance(mime_type, str):
            raise InputError('mimeType must be a string.')
        return RawInput(file_reference=file_reference.strip(), mime_type=mime_type or None)
    text = _first_present(payload, TEXT_FIELDS)
    if text is None:
        raise InputError(NO_CONTENT_MESSAGE)
    return RawInput(text=text)


def generate_study_pack(app_ctx, request):
    content_type = str(request.content_type or '').lower()
    if content_type.startswith('multipart/form-data'):
        return app_ctx.error_response(InputError(
            'File uploads must use /api/file-upload first, then send the returned URL as fileURL.'
        ))
    if not content_type.startswith('application/json'):
        return app_ctx.error_response(InputError('Content-Type must be application/json.'))

    payload = request.get_json(silent=True)
    if payload is None:
        return app_ctx.error_response(InputError('Invalid JSON body.'))

    try:
        raw_input = parse_raw_input(payload)
        study_pack = app_ctx.study_pack_service.handle(raw_input, request_id=app_ctx.request_id())
    except StudyPackError as exc:
        return app_ctx.error_response(exc)
    return app_ctx.jsonify(study_pack)
