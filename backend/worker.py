#!/usr/bin/env python3
"""
RQ Worker for background notification tasks.

This worker delivers activity feed fan-out queued by committed joins:
1. Reads the recipient list captured inside the join transaction
2. Appends one MEMBER_JOINED item to each recipient's feed

Usage:
    python -m backend.worker
"""

import os
import sys
import logging

from rq import Worker

from backend.app.core.queues import redis_conn, test_redis_connection

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout),
    ],
)

logger = logging.getLogger("worker")


def main():
    """Main worker function."""
    logger.info("Starting RQ worker...")

    if not test_redis_connection():
        logger.error("Failed to connect to Redis. Exiting.")
        sys.exit(1)

    listen = ["notifications"]

    logger.info(f"Worker listening to queues: {listen}")

    try:
        worker = Worker(listen, connection=redis_conn, name=f"worker-{os.getpid()}")
        logger.info(f"Worker {worker.name} started")
        worker.work(with_scheduler=False)
    except KeyboardInterrupt:
        logger.info("Worker interrupted by user")
    except Exception as e:
        logger.error(f"Worker error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
