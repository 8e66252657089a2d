"""File validation and text extraction helpers."""

import io
import zipfile

import docx
from docx.opc.exceptions import PackageNotFoundError
from PyPDF2 import PdfReader
from PyPDF2.errors import DependencyError, FileNotDecryptedError, PdfReadError

from study_companion.errors import ExtractionError

PDF_MIME = 'application/pdf'
DOCX_MIME = 'application/vnd.openxmlformats-officedocument.wordprocessingml.document'
DOC_MIME = 'application/msword'
TEXT_MIME = 'text/plain'

ALLOWED_UPLOAD_MIME_TYPES = {PDF_MIME, DOCX_MIME, DOC_MIME, TEXT_MIME}
ALLOWED_UPLOAD_EXTENSIONS = {'pdf', 'docx', 'doc', 'txt'}

UNSUPPORTED_TYPE = 'unsupported-type'
EMPTY_CONTENT = 'empty-content'
PASSWORD_PROTECTED = 'password-protected'
CORRUPTED = 'corrupted'

PASTE_TEXT_HINT = 'Please copy and paste the text content directly for best results.'


def normalize_mime_type(raw_value):
    return str(raw_value or '').split(';', 1)[0].strip().lower()


def allowed_file(filename, allowed_extensions=ALLOWED_UPLOAD_EXTENSIONS):
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in allowed_extensions


def is_allowed_upload_mime_type(raw_value):
    return normalize_mime_type(raw_value) in ALLOWED_UPLOAD_MIME_TYPES


def buffer_has_pdf_signature(buffer):
    return bytes(buffer[:5]) == b'%PDF-'


def buffer_has_docx_signature(buffer):
    if bytes(buffer[:4]) != b'PK\x03\x04':
        return False
    try:
        with zipfile.ZipFile(io.BytesIO(buffer), 'r') as archive:
            members = set(archive.namelist())
    except zipfile.BadZipFile:
        return False
    return '[Content_Types].xml' in members and 'word/document.xml' in members


def get_mime_type(filename):
    parts = filename.rsplit('.', 1)
    ext = parts[1].lower() if len(parts) > 1 else ''
    mime_types = {
        'pdf': PDF_MIME,
        'docx': DOCX_MIME,
        'doc': DOC_MIME,
        'txt': TEXT_MIME,
    }
    return mime_types.get(ext, 'application/octet-stream')


def extract_pdf_text(buffer):
    if not buffer:
        raise ExtractionError(CORRUPTED, 'PDF file is empty or corrupted.')
    try:
        reader = PdfReader(io.BytesIO(buffer))
        if reader.is_encrypted and not reader.decrypt(''):
            raise ExtractionError(PASSWORD_PROTECTED)
        pages = [page.extract_text() or '' for page in reader.pages]
    except ExtractionError:
        raise
    except (FileNotDecryptedError, DependencyError) as exc:
        raise ExtractionError(PASSWORD_PROTECTED) from exc
    except (PdfReadError, ValueError, KeyError) as exc:
        raise ExtractionError(CORRUPTED, 'PDF file is empty or corrupted.') from exc
    text = '\n'.join(pages)
    if not text.strip():
        raise ExtractionError(
            EMPTY_CONTENT,
            'No text content could be extracted from the PDF. The document may be image-based or encrypted.',
        )
    return text


def extract_docx_text(buffer):
    try:
        document = docx.Document(io.BytesIO(buffer))
    except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError) as exc:
        raise ExtractionError(CORRUPTED, 'The Word document appears to be corrupted.') from exc
    lines = [paragraph.text for paragraph in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            lines.append('\t'.join(cell.text for cell in row.cells))
    text = '\n'.join(lines)
    if not text.strip():
        raise ExtractionError(EMPTY_CONTENT, 'No text content could be extracted from the Word document.')
    return text


def extract_plain_text(buffer):
    text = bytes(buffer or b'').decode('utf-8', errors='replace')
    if not text.strip():
        raise ExtractionError(EMPTY_CONTENT, 'Text file is empty.')
    return text


def extract_text(buffer, mime_type, *, rich_documents=True):
    mime = normalize_mime_type(mime_type)
    if mime in (PDF_MIME, DOCX_MIME, DOC_MIME) and not rich_documents:
        kind = 'PDF' if mime == PDF_MIME else 'Word'
        raise ExtractionError(
            UNSUPPORTED_TYPE,
            f'{kind} files require specialized processing on this server. {PASTE_TEXT_HINT}',
        )
    if mime == PDF_MIME:
        return extract_pdf_text(buffer)
    if mime == DOCX_MIME:
        return extract_docx_text(buffer)
    if mime == DOC_MIME:
        raise ExtractionError(
            UNSUPPORTED_TYPE,
            'Cannot process older .doc files. Please convert to .docx format or save as PDF.',
        )
    if mime.startswith('text/'):
        return extract_plain_text(buffer)
    raise ExtractionError(UNSUPPORTED_TYPE)
