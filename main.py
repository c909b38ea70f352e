import os
import logging
import argparse

from core.config_loader import load_config
from database.database import create_db_engine
from database.init_db import init_db

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def run_init_db(config_path: str) -> None:
    config = load_config(config_path)
    init_db(create_db_engine(config.database.url))


def run_server(config_path: str) -> None:
    import uvicorn

    # The app process reads its configuration through web.backend.config
    os.environ['CONFIG_PATH'] = os.path.abspath(config_path)
    config = load_config(config_path)
    logger.info(f"Starting SeatSwap API on {config.web.host}:{config.web.port}")
    uvicorn.run(
        "web.backend.app:app",
        host=config.web.host,
        port=config.web.port,
        reload=False,
        log_level="info"
    )


def run_email_worker(config_path: str, burst: bool) -> None:
    from notification.worker import resolve_redis_url, run_worker

    try:
        run_worker(resolve_redis_url(load_config(config_path)), burst=burst)
    except KeyboardInterrupt:
        logger.info("Worker stopped")


def main():
    parser = argparse.ArgumentParser(description='SeatSwap service')
    parser.add_argument('--config', default='config.yaml', help='Path to config.yaml')
    subparsers = parser.add_subparsers(dest='command', required=True)
    subparsers.add_parser('init-db', help='Create database tables')
    subparsers.add_parser('serve', help='Run the API server')
    worker_parser = subparsers.add_parser('worker', help='Run the queued email worker')
    worker_parser.add_argument('--burst', action='store_true', help='Drain the queue and exit')

    args = parser.parse_args()

    if args.command == 'init-db':
        run_init_db(args.config)
    elif args.command == 'serve':
        run_server(args.config)
    elif args.command == 'worker':
        run_email_worker(args.config, args.burst)


if __name__ == "__main__":
    main()
