# file: services/profile_store.py

import logging
from typing import Optional

from firebase_admin import firestore

from app.core import config
from app.models.notification import UserProfile


class FirestoreProfileStore:
    """Read-only access to users/{userId} profile documents."""

    def __init__(self, db=None, collection: str = config.USERS_COLLECTION):
        self.db = db if db is not None else firestore.client()
        self.users_ref = self.db.collection(collection)

    def get(self, user_id: str) -> Optional[UserProfile]:
        user_doc = self.users_ref.document(user_id).get()
        if not user_doc.exists:
            return None
        user_data = user_doc.to_dict() or {}
        logging.debug(f"Loaded profile for user {user_id}")
        return UserProfile.model_validate(user_data)
