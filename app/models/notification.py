# file: models/notification.py

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class NotificationType(str, Enum):
    SESSION_FAILURE = "session_failure"
    COMMENT = "comment"
    FRIEND_REQUEST = "friend_request"
    SESSION_INVITATION = "session_invitation"


NOTIFICATION_TITLES: Dict[str, str] = {
    NotificationType.SESSION_FAILURE.value: "Session Failed",
    NotificationType.COMMENT.value: "New Comment",
    NotificationType.FRIEND_REQUEST.value: "Friend Request",
    NotificationType.SESSION_INVITATION.value: "Session Invitation",
}

DEFAULT_NOTIFICATION_TITLE = "Flip Notification"


def get_notification_title(notification_type: Optional[str]) -> str:
    """Maps a notification type code to the title shown on the device."""
    if not isinstance(notification_type, str):
        return DEFAULT_NOTIFICATION_TITLE
    return NOTIFICATION_TITLES.get(notification_type, DEFAULT_NOTIFICATION_TITLE)


class NotificationRecord(BaseModel):
    """
    A document under users/{userId}/notifications/{notificationId}.
    Written by the app backend; only read here.
    """
    type: Optional[str] = None
    message: Optional[str] = None
    # Only a real boolean True suppresses the push; other values are kept as written.
    silent: Any = False

    model_config = ConfigDict(extra="ignore", frozen=True)


class UserProfile(BaseModel):
    fcmToken: Optional[str] = None

    model_config = ConfigDict(extra="ignore", frozen=True)


class NotificationEvent(BaseModel):
    """Document-created trigger: path parameters plus the new document's fields."""
    userId: str = Field(min_length=1)
    notificationId: str = Field(min_length=1)
    data: NotificationRecord = Field(default_factory=NotificationRecord)


class PushMessage(BaseModel):
    token: str
    title: str
    body: Optional[str] = None
    data: Dict[str, str] = Field(default_factory=dict)


class DispatchResponse(BaseModel):
    dispatched: bool
    message_id: Optional[str] = None


class SendNotificationRequest(BaseModel):
    # Checked by the handler so missing fields answer 400 instead of 422.
    userId: Optional[str] = None
    message: Optional[str] = None
    type: Optional[str] = None
