"""Process-wide Firestore client, created in the app lifespan.

Credentials come from FIREBASE_SERVICE_ACCOUNT_KEY (the JSON itself) or
FIREBASE_SERVICE_ACCOUNT_PATH (a file). With neither, the store stays
disabled: health answers, readiness reports not_ready, and data endpoints
answer STORE_UNAVAILABLE.
"""

import json
from pathlib import Path

from fieldops.core.config import Settings, get_settings
from fieldops.infrastructure.firebase._rest_client import (
    FirestoreRESTClient,
    _get_credentials,
)
from fieldops.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_firestore_client: FirestoreRESTClient | None = None


def _service_account_info(settings: Settings) -> dict | None:
    """Parse the configured service account JSON; None when none is configured.

    Raises:
        ValueError: The key is not JSON or lacks ``project_id``.
    """
    raw: str | None = None
    if settings.firebase_service_account_key:
        raw = settings.firebase_service_account_key.get_secret_value()
    elif settings.firebase_service_account_path:
        path = Path(settings.firebase_service_account_path).expanduser()
        if not path.is_file():
            logger.warning("FIREBASE_SERVICE_ACCOUNT_PATH does not exist: %s", path)
            return None
        raw = path.read_text(encoding="utf-8")
    if not raw:
        return None
    try:
        info = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError("Firebase service account is not valid JSON") from e
    if not info.get("project_id"):
        raise ValueError("Firebase service account JSON has no project_id")
    return info


def init_firebase() -> bool:
    """Create the client if credentials are configured. Idempotent; never raises."""
    global _firestore_client
    if _firestore_client is not None:
        return True
    settings = get_settings()
    try:
        info = _service_account_info(settings)
        if info is None:
            logger.warning("Firestore credentials not configured; store disabled")
            return False
        _firestore_client = FirestoreRESTClient(
            info["project_id"],
            _get_credentials(info),
            timeout=settings.firestore_timeout_seconds,
        )
    except Exception:
        logger.exception("Firestore client could not be created")
        return False
    logger.info("Firestore client ready for project %s", info["project_id"])
    return True


def get_firestore_client() -> FirestoreRESTClient | None:
    return _firestore_client


async def close_firebase() -> None:
    """Release the client's connection pool (app shutdown)."""
    global _firestore_client
    if _firestore_client is not None:
        await _firestore_client.aclose()
        _firestore_client = None
        logger.info("Firestore client closed")
