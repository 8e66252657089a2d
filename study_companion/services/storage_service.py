"""Blob storage backed by Firebase Cloud Storage."""

import json
import os
import uuid
from dataclasses import dataclass

import firebase_admin
from firebase_admin import credentials, storage
from werkzeug.utils import secure_filename

UPLOAD_PREFIX = 'uploads'


@dataclass(frozen=True)
class StoredBlob:
    url: str
    name: str
    size: int


class FirebaseBlobStorage:
    def __init__(self, bucket, *, prefix=UPLOAD_PREFIX):
        self.bucket = bucket
        self.prefix = prefix

    def build_object_name(self, filename):
        safe_name = secure_filename(filename or '') or 'document'
        return f"{self.prefix}/{uuid.uuid4().hex[:12]}-{safe_name}"

    def upload(self, buffer, filename, content_type) -> StoredBlob:
        object_name = self.build_object_name(filename)
        blob = self.bucket.blob(object_name)
        blob.upload_from_string(buffer, content_type=content_type)
        blob.make_public()
        return StoredBlob(url=blob.public_url, name=object_name, size=len(buffer))


def load_firebase_credentials(config):
    if os.path.exists(config.firebase_credentials_path):
        return credentials.Certificate(config.firebase_credentials_path)
    if not config.firebase_credentials_json:
        raise ValueError('FIREBASE_CREDENTIALS is not set and no credentials file was found.')
    return credentials.Certificate(json.loads(config.firebase_credentials_json))


def build_storage(config, logger=None):
    if not config.firebase_storage_bucket:
        if logger is not None:
            logger.info("FIREBASE_STORAGE_BUCKET not set; file uploads are disabled.")
        return None
    try:
        cred = load_firebase_credentials(config)
        if not firebase_admin._apps:
            firebase_admin.initialize_app(cred, {'storageBucket': config.firebase_storage_bucket})
        bucket = storage.bucket(config.firebase_storage_bucket)
    except Exception as e:
        if logger is not None:
            logger.info(f"Firebase storage initialization skipped: {e}")
        return None
    return FirebaseBlobStorage(bucket)
