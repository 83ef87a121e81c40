"""Health check: verify configured tokens against each backend."""

import logging
import sys

from .config import Settings
from .constants import BACKEND_LABELS, Backend
from .exceptions import TrackingError
from .sync_service import build_coordinator, load_tokens
from .tracking import resolve_primary_backend

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def check(settings: Settings) -> bool:
    """Return True when every backend that must be linked answers for its token."""
    tokens = load_tokens(settings)
    coordinator = build_coordinator(settings)

    required = [resolve_primary_backend(settings.policy)]
    if settings.dual_tracking:
        required = list(Backend)

    healthy = True
    for backend in Backend:
        name = BACKEND_LABELS[backend]
        token = tokens.for_backend(backend)
        if not token:
            if backend in required:
                logger.error(f"[ERROR] UNHEALTHY: {name} access token missing")
                healthy = False
            continue
        try:
            user_id, user_name = coordinator.clients[backend].get_user_identity(token)
        except TrackingError as e:
            logger.error(f"[ERROR] UNHEALTHY: {name} token check failed: {e}")
            if backend in required:
                healthy = False
            continue
        logger.info(f"[OK] {name}: authenticated as {user_name} (ID {user_id})")
    return healthy


def main():
    """Exit 0 when healthy, 1 otherwise."""
    try:
        settings = Settings()
    except TrackingError as e:
        logger.error(f"[ERROR] UNHEALTHY: Failed to load configuration: {e}")
        sys.exit(1)

    if check(settings):
        logger.info("[OK] HEALTHY")
        sys.exit(0)
    sys.exit(1)


if __name__ == "__main__":
    main()
