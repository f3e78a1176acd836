# file: services/dispatcher.py

import logging
from functools import lru_cache
from typing import Optional, Protocol

from app.models.notification import (
    NotificationEvent,
    NotificationRecord,
    PushMessage,
    UserProfile,
    get_notification_title,
)
from app.services.profile_store import FirestoreProfileStore
from app.services.push_gateway import FCMPushGateway


class ProfileStore(Protocol):
    def get(self, user_id: str) -> Optional[UserProfile]: ...


class PushGateway(Protocol):
    def send(self, push: PushMessage) -> str: ...


class NotificationDispatchError(Exception):
    """Base class for every reason a push is not delivered."""

    def __init__(self, user_id: str, detail: str):
        super().__init__(detail)
        self.user_id = user_id
        self.detail = detail


class MissingProfileError(NotificationDispatchError):
    def __init__(self, user_id: str):
        super().__init__(user_id, f"User {user_id} not found")


class MissingTokenError(NotificationDispatchError):
    def __init__(self, user_id: str):
        super().__init__(user_id, f"No FCM token found for user {user_id}")


class DeliveryFailureError(NotificationDispatchError):
    def __init__(self, user_id: str, cause: Exception):
        super().__init__(user_id, str(cause))
        self.cause = cause


class NotificationDispatcher:
    """
    Turns a newly created notification record into a single FCM push.

    Delivery is best effort: `dispatch` logs every failure and returns None,
    the record itself stays the source of truth in the app. Nothing is written
    back to Firestore and nothing is retried, so a redelivered event sends a
    second push.
    """

    def __init__(self, profile_store: ProfileStore, push_gateway: PushGateway):
        self.profile_store = profile_store
        self.push_gateway = push_gateway

    def resolve_token(self, user_id: str) -> str:
        profile = self.profile_store.get(user_id)
        if profile is None:
            raise MissingProfileError(user_id)
        if not profile.fcmToken:
            raise MissingTokenError(user_id)
        return profile.fcmToken

    @staticmethod
    def build_message(record: NotificationRecord, notification_id: str, token: str) -> PushMessage:
        return PushMessage(
            token=token,
            title=get_notification_title(record.type),
            body=record.message,
            data={
                # FCM only accepts string data values.
                "type": record.type or "",
                "notificationId": notification_id,
            },
        )

    def send(self, user_id: str, push: PushMessage) -> str:
        try:
            return self.push_gateway.send(push)
        except Exception as e:
            raise DeliveryFailureError(user_id, e) from e

    def dispatch(self, event: NotificationEvent) -> Optional[str]:
        """Returns the FCM message id, or None when nothing was delivered."""
        user_id = event.userId
        record = event.data

        if record.silent is True:
            logging.info(f"Silent notification, skipping push for {user_id}")
            return None

        try:
            token = self.resolve_token(user_id)
            push = self.build_message(record, event.notificationId, token)
            logging.info(f"Sending push notification to user {user_id}")
            response = self.send(user_id, push)
        except (MissingProfileError, MissingTokenError) as e:
            logging.warning(e.detail)
            return None
        except DeliveryFailureError as e:
            logging.error(f"Error sending notification to user {user_id}: {e.detail}", exc_info=e.cause)
            return None
        except Exception as e:
            logging.error(f"Error processing notification {event.notificationId} for user {user_id}: {e}",
                          exc_info=True)
            return None

        logging.info(f"Successfully sent notification: {response}")
        return response

    def handle_created(self, data: Optional[dict], user_id: str, notification_id: str) -> Optional[str]:
        """Entry point shaped like a document-created trigger: raw fields plus path params."""
        try:
            event = NotificationEvent(
                userId=user_id,
                notificationId=notification_id,
                data=NotificationRecord.model_validate(data or {}),
            )
        except ValueError as e:
            logging.error(f"Malformed notification {notification_id} for user {user_id}: {e}")
            return None
        return self.dispatch(event)


@lru_cache(maxsize=1)
def get_dispatcher() -> NotificationDispatcher:
    """FastAPI dependency: the process-wide dispatcher wired to Firestore and FCM."""
    return NotificationDispatcher(FirestoreProfileStore(), FCMPushGateway())
