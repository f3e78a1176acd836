# file: controllers/notification.py

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.models.notification import (
    DispatchResponse,
    NotificationEvent,
    NotificationRecord,
    SendNotificationRequest,
)
from app.services.dispatcher import (
    DeliveryFailureError,
    MissingProfileError,
    MissingTokenError,
    NotificationDispatcher,
    get_dispatcher,
)
from app.services.firebase_auth import get_current_uid

router = APIRouter()
manual_router = APIRouter()

MANUAL_NOTIFICATION_ID = "manual-test"


@router.post("/events", response_model=DispatchResponse)
def notification_created(
        event: NotificationEvent,
        dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """
    Document-created trigger for users/{userId}/notifications/{notificationId}.
    Always answers 200: delivery is best effort and never retried.
    """
    message_id = dispatcher.dispatch(event)
    return DispatchResponse(dispatched=message_id is not None, message_id=message_id)


@manual_router.post("/send-notification")
def send_notification(
        payload: SendNotificationRequest,
        caller_uid: str = Depends(get_current_uid),
        dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """
    Manually pushes a notification to a user, for testing delivery.
    Unlike the event trigger, failures are reported to the caller.
    """
    if not payload.userId or not payload.message or not payload.type:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing required fields")

    logging.info(f"Manual notification requested by {caller_uid} for user {payload.userId}")
    record = NotificationRecord(type=payload.type, message=payload.message)
    try:
        token = dispatcher.resolve_token(payload.userId)
        push = dispatcher.build_message(record, MANUAL_NOTIFICATION_ID, token)
        response = dispatcher.send(payload.userId, push)
    except MissingProfileError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.detail)
    except MissingTokenError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.detail)
    except DeliveryFailureError as e:
        logging.error(f"Error: {e.detail}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Error: {e.detail}")
    except Exception as e:
        logging.error(f"Error: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Error: {e}")

    return {"success": True, "response": response}
