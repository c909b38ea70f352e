#!/usr/bin/env python3
"""
RQ worker that delivers the emails EmailDispatcher queues when
notifications.use_async_queue is on.

Usage:
    seatswap worker
    seatswap worker --burst
    python -m notification.worker --config config.yaml
"""

import argparse
import logging
from typing import List, Optional

from redis import Redis
from rq import Worker

from core.config_loader import AppConfig, load_config
from notification.service import EmailDispatcher

logger = logging.getLogger(__name__)

DEFAULT_REDIS_URL = 'redis://localhost:6379/0'


def resolve_redis_url(config: AppConfig) -> str:
    return config.notifications.redis_url or DEFAULT_REDIS_URL


def run_worker(redis_url: str, queues: Optional[List[str]] = None, burst: bool = False) -> bool:
    """
    Consume the email queues until stopped (or until empty with burst).

    Raises redis.exceptions.ConnectionError when Redis is unreachable.
    """
    queues = queues or [EmailDispatcher.QUEUE_NAME]
    redis_conn = Redis.from_url(redis_url)
    redis_conn.ping()

    logger.info(f"Email worker listening on {', '.join(queues)} (burst={burst})")
    worker = Worker(queues, connection=redis_conn)
    return worker.work(burst=burst)


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description='SeatSwap email worker')
    parser.add_argument('--config', default='config.yaml', help='Path to config.yaml')
    parser.add_argument('--burst', action='store_true', help='Drain the queue and exit')
    parser.add_argument('--queues', nargs='+', default=[EmailDispatcher.QUEUE_NAME])
    parser.add_argument('--verbose', action='store_true')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        run_worker(resolve_redis_url(load_config(args.config)), queues=args.queues, burst=args.burst)
    except KeyboardInterrupt:
        logger.info("Worker stopped")


if __name__ == '__main__':
    main()
