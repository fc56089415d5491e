"""
Firebase Firestore initialization.
Single-source-of-truth Firestore client for Fintrack.
"""

from typing import Optional
import json
import logging
import os

import firebase_admin
from firebase_admin import credentials, firestore, initialize_app

from fintrack.core.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)

db: Optional[firestore.Client] = None

REQUIRED_CREDENTIAL_FIELDS = ["type", "project_id", "private_key", "client_email"]


def _validate_credentials_file(cred_path: str) -> None:
    """Fail early with a readable message instead of an opaque SDK error."""
    if not os.path.exists(cred_path):
        raise FileNotFoundError(
            f"Firebase credentials file not found: {cred_path}\n"
            f"Please check your .env file and ensure FIREBASE_CREDENTIALS_PATH is correct."
        )

    try:
        with open(cred_path, "r") as f:
            cred_data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Firebase credentials file is not valid JSON: {e}") from e

    missing_fields = [field for field in REQUIRED_CREDENTIAL_FIELDS if field not in cred_data]
    if missing_fields:
        raise ValueError(
            f"Firebase credentials file is missing required fields: {missing_fields}\n"
            f"Please download a fresh service account key from Firebase Console."
        )

    logger.info(f"[FIRESTORE] Credentials file validated for project {cred_data.get('project_id', 'N/A')}")


def initialize_firestore(config: Optional[Settings] = None) -> firestore.Client:
    """
    Initialize the Firebase Admin SDK and the Firestore client (once).

    Uses the service account file from FIREBASE_CREDENTIALS_PATH when set,
    Application Default Credentials otherwise.

    Raises:
        RuntimeError: credentials missing/invalid or client creation failed
    """
    global db

    if db is not None:
        return db

    config = config or default_settings

    try:
        if not firebase_admin._apps:
            options = {"projectId": config.FIREBASE_PROJECT_ID} if config.FIREBASE_PROJECT_ID else None
            if config.FIREBASE_CREDENTIALS_PATH:
                _validate_credentials_file(config.FIREBASE_CREDENTIALS_PATH)
                initialize_app(credentials.Certificate(config.FIREBASE_CREDENTIALS_PATH), options)
                logger.info("[FIRESTORE] Firebase Admin SDK initialized with service account")
            else:
                logger.info("[FIRESTORE] No credentials path set, using Application Default Credentials")
                initialize_app(options=options)

        db = firestore.client()
        logger.info(f"[FIRESTORE] Connected, project: {config.FIREBASE_PROJECT_ID or 'default'}")
        return db

    except FileNotFoundError as e:
        raise RuntimeError(
            f"Firestore initialization FAILED - Credentials file not found.\n{e}"
        ) from e
    except ValueError as e:
        raise RuntimeError(
            f"Firestore initialization FAILED - Invalid credentials file.\n{e}\n"
            f"SOLUTION: Firebase Console > Project Settings > Service Accounts > Generate New Private Key"
        ) from e
    except Exception as e:
        raise RuntimeError(
            f"Firestore initialization FAILED. Error: {e}\n"
            f"Please check your Firebase credentials and configuration."
        ) from e


def get_db() -> firestore.Client:
    """
    Get the initialized Firestore client.

    Raises RuntimeError if Firestore has not been initialized and cannot be.
    """
    if db is None:
        initialize_firestore()
    return db
