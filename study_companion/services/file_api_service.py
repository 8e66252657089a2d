"""Business logic handlers for file upload and text extraction APIs."""

from urllib.parse import unquote

from study_companion.errors import ExtractionError, InputError, StorageUnavailableError, StudyPackError
from study_companion.services.study_pack_service import to_user_facing_extraction_error
from study_companion.services.text_extraction_service import (
    DOCX_MIME,
    PDF_MIME,
    allowed_file,
    buffer_has_docx_signature,
    buffer_has_pdf_signature,
    get_mime_type,
    is_allowed_upload_mime_type,
    normalize_mime_type,
)

DEFAULT_UPLOAD_NAME = 'document'
INVALID_TYPE_MESSAGE = 'Invalid file type. Only PDF, Word documents, and text files are allowed.'
UPLOAD_FAILED_MESSAGE = 'Failed to upload file. Please try again.'


def _upload_filename(request):
    raw_name = str(request.headers.get('X-Filename', '') or '').strip()
    return unquote(raw_name)[:255] or DEFAULT_UPLOAD_NAME


def _too_large_message(max_bytes):
    return f'File too large. Maximum size is {max_bytes // (1024 * 1024)}MB.'


def read_upload(app_ctx, request):
    """Validate the raw upload body before anything touches storage."""
    filename = _upload_filename(request)
    mime_type = normalize_mime_type(request.content_type)
    if mime_type in ('', 'application/octet-stream') and allowed_file(filename):
        mime_type = get_mime_type(filename)
    if not is_allowed_upload_mime_type(mime_type):
        raise InputError(INVALID_TYPE_MESSAGE)

    max_bytes = app_ctx.config.max_upload_bytes
    if request.content_length is not None and request.content_length > max_bytes:
        raise InputError(_too_large_message(max_bytes))
    buffer = request.get_data(cache=False)
    if not buffer:
        raise InputError('No file data received.')
    if len(buffer) > max_bytes:
        raise InputError(_too_large_message(max_bytes))

    if mime_type == PDF_MIME and not buffer_has_pdf_signature(buffer):
        raise InputError('Uploaded PDF file is invalid.')
    if mime_type == DOCX_MIME and not buffer_has_docx_signature(buffer):
        raise InputError('Uploaded Word document is invalid.')
    return buffer, filename, mime_type


def _store(app_ctx, buffer, filename, mime_type):
    if app_ctx.storage is None:
        raise StorageUnavailableError()
    try:
        return app_ctx.storage.upload(buffer, filename, mime_type)
    except Exception as e:
        app_ctx.logger.error(f"Storage upload failed for {filename}: {e}")
        return None


def upload_file(app_ctx, request):
    try:
        buffer, filename, mime_type = read_upload(app_ctx, request)
        stored = _store(app_ctx, buffer, filename, mime_type)
    except StudyPackError as exc:
        return app_ctx.error_response(exc)
    if stored is None:
        return app_ctx.jsonify({'error': UPLOAD_FAILED_MESSAGE, 'requestId': app_ctx.request_id()}), 500

    app_ctx.logger.info(f"Stored upload {stored.name} ({stored.size} bytes)")
    return app_ctx.jsonify({
        'success': True,
        'downloadURL': stored.url,
        'fileName': filename,
        'fileSize': stored.size,
    })


def upload_and_extract(app_ctx, request):
    try:
        buffer, filename, mime_type = read_upload(app_ctx, request)
        stored = _store(app_ctx, buffer, filename, mime_type)
    except StudyPackError as exc:
        return app_ctx.error_response(exc)
    if stored is None:
        return app_ctx.jsonify({'error': UPLOAD_FAILED_MESSAGE, 'requestId': app_ctx.request_id()}), 500

    try:
        extracted_text = app_ctx.text_extractor(
            buffer,
            mime_type,
            rich_documents=app_ctx.config.rich_document_extraction,
        )
    except ExtractionError as exc:
        app_ctx.logger.warning(f"Extraction failed for uploaded {filename} ({exc.category})")
        error = to_user_facing_extraction_error(exc)
        payload = error.to_payload(app_ctx.request_id())
        payload['blobUrl'] = stored.url
        return app_ctx.jsonify(payload), error.status_code

    extracted_text = extracted_text.strip()
    minimum = app_ctx.config.min_extracted_chars
    if len(extracted_text) < minimum:
        return app_ctx.jsonify({
            'error': f'Extracted text is too short (minimum {minimum} characters). Please check the file content.',
            'blobUrl': stored.url,
            'requestId': app_ctx.request_id(),
        }), 400

    return app_ctx.jsonify({
        'success': True,
        'blobUrl': stored.url,
        'filename': filename,
        'extractedText': extracted_text,
        'contentLength': len(extracted_text),
    })


def process_file(app_ctx, request):
    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        return app_ctx.error_response(InputError('Request body must be a JSON object.'))
    blob_url = str(payload.get('blobUrl', '') or '').strip()
    if not blob_url:
        return app_ctx.error_response(InputError('Missing blob URL.'))
    mime_type = payload.get('mimeType')
    if mime_type is not None and not isinstance(mime_type, str):
        return app_ctx.error_response(InputError('mimeType must be a string.'))

    try:
        extracted_text = app_ctx.study_pack_service.extract_from_reference(blob_url, mime_type or None)
    except StudyPackError as exc:
        return app_ctx.error_response(exc)

    extracted_text = extracted_text.strip()
    minimum = app_ctx.config.min_extracted_chars
    if len(extracted_text) < minimum:
        return app_ctx.error_response(InputError(
            f'Extracted text is too short (minimum {minimum} characters). Please check the file content.'
        ))

    return app_ctx.jsonify({
        'success': True,
        'extractedText': extracted_text,
        'contentLength': len(extracted_text),
    })
