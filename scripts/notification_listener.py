# file: scripts/notification_listener.py

import logging
import os
import sys
import threading

# Add the project root to the Python path to allow absolute imports from the 'app' package
# This is necessary because we are running this file as a standalone script.
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from app.core import config
from app.services.dispatcher import get_dispatcher
from app.services.firebase_auth import init_firebase
from app.services.notification_listener import NotificationListener


def main():
    logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    init_firebase()
    listener = NotificationListener(get_dispatcher())
    listener.start()
    try:
        # Snapshot callbacks run on Firestore threads; keep the main thread alive.
        threading.Event().wait()
    except KeyboardInterrupt:
        logging.info("Shutting down notification listener...")
    finally:
        listener.stop()


if __name__ == "__main__":
    main()
