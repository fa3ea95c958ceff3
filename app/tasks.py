import logging

import httpx

from app.core.celery_config import celery_app
from app.core.config import NOTIFICATION_TIMEOUT, NOTIFICATION_URL

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=3, default_retry_delay=30)
def send_notification_task(self, payload: dict) -> bool:
    """POST a notification payload to the email endpoint."""
    if not NOTIFICATION_URL:
        logger.info("NOTIFICATION_URL is not set, dropping %s to %s", payload.get("type"), payload.get("to"))
        return False

    try:
        response = httpx.post(NOTIFICATION_URL, json=payload, timeout=NOTIFICATION_TIMEOUT)
        response.raise_for_status()
    except httpx.TransportError as exc:
        logger.warning("Notification endpoint unreachable: %s", exc)
        raise self.retry(exc=exc)
    except httpx.HTTPStatusError as exc:
        logger.error(
            "Notification endpoint rejected %s: %s", payload.get("type"), exc.response.status_code
        )
        return False

    return True
