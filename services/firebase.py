# services/firebase.py
import json
import logging
import os

import firebase_admin
from firebase_admin import credentials, firestore

from config import Config

logger = logging.getLogger(__name__)

_db = None


def _resolve_cred():
    """Certificate from FIREBASE_SERVICE_ACCOUNT_JSON, else from the resolved credential file."""
    json_blob = os.getenv("FIREBASE_SERVICE_ACCOUNT_JSON")
    if json_blob:
        return credentials.Certificate(json.loads(json_blob))
    return credentials.Certificate(Config._resolve_firebase_cred_path())


def init_firebase_admin():
    """Initialize the default Firebase app once per process."""
    if firebase_admin._apps:
        return firebase_admin.get_app()
    try:
        cred = _resolve_cred()
        logger.info("[firebase] initializing with service account credentials")
        return firebase_admin.initialize_app(cred)
    except FileNotFoundError:
        # On Cloud Run, default credentials (attached service account) will work
        logger.info("[firebase] no credential file, using application default credentials")
        return firebase_admin.initialize_app()


def get_db():
    global _db
    if _db is not None:
        return _db
    init_firebase_admin()
    _db = firestore.client()
    return _db
