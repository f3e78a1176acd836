# file: main.py

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core import config
from app.controllers.notification import router as notification_router, manual_router
from app.services.dispatcher import get_dispatcher
from app.services.firebase_auth import init_firebase
from app.services.notification_listener import NotificationListener

logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(title="Flip Notifications")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(notification_router, prefix="/api/notifications", tags=["notifications"])
app.include_router(manual_router, tags=["notifications"])


@app.get("/")
async def root():
    return {"message": "Push notification service is running"}


@app.on_event("startup")
def startup_event():
    init_firebase()
    if config.ENABLE_FIRESTORE_LISTENER:
        listener = NotificationListener(get_dispatcher())
        listener.start()
        app.state.listener = listener


@app.on_event("shutdown")
def shutdown_event():
    listener = getattr(app.state, "listener", None)
    if listener is not None:
        listener.stop()


if __name__ == "__main__":
    import uvicorn

    logging.info(f"Notification server running on port {config.PORT}")
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
