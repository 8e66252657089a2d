"""Download helpers for files referenced by public storage URLs."""

import ipaddress
from dataclasses import dataclass
from urllib.parse import urlparse

import requests

from study_companion.errors import InputError

MAX_FILE_URL_LENGTH = 2048
USER_AGENT = 'SmartWay-AI/2.0'
DOWNLOAD_CHUNK_BYTES = 64 * 1024
FILE_ACCESS_ERROR = 'Unable to access the uploaded file. Please check if the file is publicly accessible and try uploading again.'


@dataclass(frozen=True)
class RemoteFile:
    content: bytes
    content_type: str


def is_blocked_hostname(hostname):
    host = str(hostname or '').strip().lower()
    if not host:
        return True
    if host in {'localhost', 'localhost.localdomain'}:
        return True
    if host.endswith('.local') or host.endswith('.internal'):
        return True
    try:
        ip = ipaddress.ip_address(host)
        if ip.is_private or ip.is_loopback or ip.is_link_local or ip.is_multicast or ip.is_reserved:
            return True
    except ValueError:
        pass
    return False


def validate_file_url(raw_url):
    url = str(raw_url or '').strip()
    if not url:
        return '', 'Missing file URL.'
    if len(url) > MAX_FILE_URL_LENGTH:
        return '', 'File URL is too long.'
    try:
        parsed = urlparse(url)
    except Exception:
        return '', 'Invalid file URL format.'
    if parsed.scheme.lower() not in {'http', 'https'}:
        return '', 'Invalid file URL format.'
    if parsed.username or parsed.password:
        return '', 'File URL credentials are not allowed.'
    if is_blocked_hostname(parsed.hostname):
        return '', 'This file host is not allowed.'
    return url, ''


def fetch_remote_file(raw_url, *, timeout_seconds=60, max_bytes=50 * 1024 * 1024, session=None, logger=None):
    url, error_message = validate_file_url(raw_url)
    if not url:
        raise InputError(error_message)
    http = session or requests
    try:
        response = http.get(url, timeout=timeout_seconds, stream=True, headers={'User-Agent': USER_AGENT})
    except requests.RequestException as exc:
        if logger is not None:
            logger.warning(f"File download failed for {url[:100]}: {exc}")
        raise InputError(FILE_ACCESS_ERROR) from exc
    try:
        if response.status_code >= 400:
            if logger is not None:
                logger.warning(f"File download returned HTTP {response.status_code} for {url[:100]}")
            raise InputError(FILE_ACCESS_ERROR)
        chunks = []
        received = 0
        for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_BYTES):
            received += len(chunk)
            if received > max_bytes:
                raise InputError('File too large. Please use a smaller file or paste the text content directly.')
            chunks.append(chunk)
    except requests.RequestException as exc:
        raise InputError(FILE_ACCESS_ERROR) from exc
    finally:
        response.close()
    content_type = response.headers.get('Content-Type') or 'application/octet-stream'
    return RemoteFile(content=b''.join(chunks), content_type=content_type)
