# file: services/notification_listener.py

import logging
import threading
from typing import Dict

from firebase_admin import firestore

from app.core import config
from app.services.dispatcher import NotificationDispatcher


class NotificationListener:
    """
    Watches every user's notifications sub-collection and dispatches new records.

    Snapshot callbacks arrive on Firestore background threads; `_watches` and
    `_stopped` are the only shared state and are guarded by `_lock`.
    """

    def __init__(self, dispatcher: NotificationDispatcher, db=None,
                 users_collection: str = config.USERS_COLLECTION,
                 notifications_subcollection: str = config.NOTIFICATIONS_SUBCOLLECTION,
                 recent_limit: int = config.LISTENER_RECENT_LIMIT,
                 skip_existing: bool = config.LISTENER_SKIP_EXISTING):
        self.dispatcher = dispatcher
        self.db = db if db is not None else firestore.client()
        self.users_collection = users_collection
        self.notifications_subcollection = notifications_subcollection
        self.recent_limit = recent_limit
        self.skip_existing = skip_existing
        self._users_watch = None
        self._watches: Dict[str, object] = {}
        self._stopped = False
        self._lock = threading.Lock()

    @property
    def watched_users(self):
        with self._lock:
            return set(self._watches)

    def start(self):
        with self._lock:
            self._stopped = False
        logging.info("Setting up Firestore notification listeners...")
        self._users_watch = self.db.collection(self.users_collection).on_snapshot(self._on_users_snapshot)

    def stop(self):
        if self._users_watch is not None:
            self._users_watch.unsubscribe()
            self._users_watch = None
        with self._lock:
            self._stopped = True
            watches = list(self._watches.values())
            self._watches.clear()
        for watch in watches:
            watch.unsubscribe()
        logging.info("Firestore notification listeners stopped.")

    def _on_users_snapshot(self, docs, changes, read_time):
        for change in changes:
            user_id = change.document.id
            try:
                if change.type.name in ("ADDED", "MODIFIED"):
                    self.watch_user(user_id)
                elif change.type.name == "REMOVED":
                    self.unwatch_user(user_id)
            except Exception as e:
                logging.error(f"Error listening to users collection for {user_id}: {e}", exc_info=True)

    def watch_user(self, user_id: str):
        with self._lock:
            if self._stopped or user_id in self._watches:
                return
            logging.info(f"Setting up notifications listener for user: {user_id}")
            query = (
                self.db.collection(self.users_collection)
                .document(user_id)
                .collection(self.notifications_subcollection)
                .order_by("createdAt", direction=firestore.Query.DESCENDING)
                .limit(self.recent_limit)
            )
            self._watches[user_id] = query.on_snapshot(self._make_user_callback(user_id))

    def unwatch_user(self, user_id: str):
        with self._lock:
            watch = self._watches.pop(user_id, None)
        if watch is not None:
            watch.unsubscribe()
            logging.info(f"Stopped notifications listener for user: {user_id}")

    def _make_user_callback(self, user_id: str):
        state = {"initial": True}

        def on_notifications_snapshot(docs, changes, read_time):
            if state["initial"]:
                state["initial"] = False
                if self.skip_existing:
                    logging.debug(f"Skipping {len(changes)} existing notifications for user {user_id}")
                    return
            for change in changes:
                # Only process new notifications
                if change.type.name != "ADDED":
                    continue
                notification_id = change.document.id
                try:
                    data = change.document.to_dict()
                    logging.info(f"New notification for user {user_id}: {notification_id}")
                    self.dispatcher.handle_created(data, user_id, notification_id)
                except Exception as e:
                    logging.error(f"Error listening to notifications for user {user_id}: {e}", exc_info=True)

        return on_notifications_snapshot
