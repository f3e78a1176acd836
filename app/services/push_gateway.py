# file: services/push_gateway.py

import logging

from firebase_admin import messaging

from app.models.notification import PushMessage


def to_fcm_message(push: PushMessage) -> messaging.Message:
    return messaging.Message(
        token=push.token,
        notification=messaging.Notification(
            title=push.title,
            body=push.body
        ),
        data=push.data
    )


class FCMPushGateway:
    """Sends push messages through Firebase Cloud Messaging."""

    def __init__(self, app=None, dry_run: bool = False):
        self.app = app
        self.dry_run = dry_run

    def send(self, push: PushMessage) -> str:
        """Returns the FCM message id. Errors from the SDK propagate to the caller."""
        response = messaging.send(to_fcm_message(push), dry_run=self.dry_run, app=self.app)
        logging.info(f"Notification sent: {response}")
        return response
