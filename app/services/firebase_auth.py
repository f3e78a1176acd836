import logging
import os
from typing import Optional

import firebase_admin
from firebase_admin import credentials, auth
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from app.core import config


def init_firebase() -> firebase_admin.App:
    """
    Initializes the default Firebase Admin app once per process.
    Uses the service account file when present, otherwise Application Default Credentials.
    """
    # Singleton pattern: Check if the app is already initialized
    if firebase_admin._apps:
        return firebase_admin.get_app()

    options = {"projectId": config.FIREBASE_PROJECT_ID} if config.FIREBASE_PROJECT_ID else None
    if os.path.exists(config.FIREBASE_CREDENTIALS_PATH):
        cred = credentials.Certificate(config.FIREBASE_CREDENTIALS_PATH)
        logging.info(f"Initializing Firebase Admin SDK from {config.FIREBASE_CREDENTIALS_PATH}")
    else:
        cred = credentials.ApplicationDefault()
        logging.info("Service account file not found, using Application Default Credentials.")
    return firebase_admin.initialize_app(cred, options)


# Scheme to extract the Firebase ID token from the Authorization header.
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword", auto_error=False)


async def get_current_uid(token: Optional[str] = Depends(oauth2_scheme)) -> str:
    """
    Required dependency: Verifies the Firebase ID token and returns the caller's uid.
    Raises HTTPException if the token is missing or invalid.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if not token:
        raise credentials_exception

    try:
        decoded_token = auth.verify_id_token(token)
    except auth.ExpiredIdTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except auth.InvalidIdTokenError:
        raise credentials_exception
    except Exception as e:
        logging.warning(f"Could not verify Firebase ID token: {e}")
        raise credentials_exception
    return decoded_token["uid"]
