import logging
from redis import Redis
from rq import Queue

from .config import settings

logger = logging.getLogger(__name__)

# Redis connection
redis_conn = Redis(
    host=settings.REDIS_HOST,
    port=settings.REDIS_PORT,
    db=settings.REDIS_DB,
    decode_responses=False,
)

# Dedicated queue for activity feed fan-out
notification_queue = Queue("notifications", connection=redis_conn)


def get_notification_queue() -> Queue:
    """Get the queue used for post-commit notification fan-out."""
    return notification_queue


def test_redis_connection() -> bool:
    """Test Redis connection."""
    try:
        redis_conn.ping()
        logger.info("Redis connection successful")
        return True
    except Exception as e:
        logger.error(f"Redis connection failed: {e}")
        return False
