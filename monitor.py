"""
Volume Disk Monitor Service
Scans the volumes under containers_directory on a fixed interval and posts a
webhook alert for every volume using more than 95 GiB.

Usage:
    python monitor.py [--once]

Environment Variables:
    MONITOR_CONFIG    - Path to config file (default: config/config.json)
    MONITOR_LOG_DIR   - Log directory (default: ./logs)
    MONITOR_LOG_LEVEL - Logging level (default: INFO)
    MONITOR_LOG_SIZE  - Max log file size in MB (default: 10)
    MONITOR_LOG_COUNT - Number of backup log files (default: 5)
    MONITOR_SAMPLER   - Disk usage sampler, 'du' or 'walk' (default: du)
"""
import schedule
import time
import logging
from logging.handlers import RotatingFileHandler
import os
import sys
import atexit

from monitor_config import ConfigError, load_config
from monitor_core import (
    PID_FILE, LOGS_DIR, LOG_FILE, CONFIG_FILE, SAMPLER_NAME,
    scan_volumes, write_scan_status,
)
from disk_usage import get_sampler
from notifier import send_notification

LOG_LEVEL = os.environ.get("MONITOR_LOG_LEVEL", "INFO").upper()
LOG_MAX_SIZE_MB = int(os.environ.get("MONITOR_LOG_SIZE", "10"))
LOG_BACKUP_COUNT = int(os.environ.get("MONITOR_LOG_COUNT", "5"))

logger = logging.getLogger(__name__)


def setup_logging():
    """Configure rotating file logging plus [HH:MM:SS]-prefixed console output."""
    LOGS_DIR.mkdir(parents=True, exist_ok=True)

    file_formatter = logging.Formatter(
        '%(asctime)s.%(msecs)03d - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    console_formatter = logging.Formatter(
        '[%(asctime)s] %(message)s',
        datefmt='%H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))

    file_handler = RotatingFileHandler(
        LOG_FILE,
        maxBytes=LOG_MAX_SIZE_MB * 1024 * 1024,
        backupCount=LOG_BACKUP_COUNT,
        encoding='utf-8'
    )
    file_handler.setFormatter(file_formatter)
    root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)


def write_pid_file():
    """Write the current process ID to a file."""
    try:
        PID_FILE.write_text(str(os.getpid()))
        logger.info(f"PID file created: {PID_FILE} (PID: {os.getpid()})")
    except OSError as e:
        logger.error(f"Failed to write PID file: {e}")


def remove_pid_file():
    """Remove the PID file on shutdown."""
    try:
        if PID_FILE.exists():
            PID_FILE.unlink()
            logger.info("PID file removed")
    except OSError as e:
        logger.error(f"Failed to remove PID file: {e}")


def run_scan(config, sampler):
    """Scheduled job: one scan cycle over all volumes."""
    results = scan_volumes(config, sampler, send_notification)
    write_scan_status(results)
    return results


def main(argv=None):
    if argv is None:
        argv = sys.argv[1:]
    once = "--once" in argv

    setup_logging()

    try:
        config = load_config(CONFIG_FILE)
    except ConfigError as e:
        logger.critical(str(e))
        return 1

    try:
        sampler = get_sampler(SAMPLER_NAME)
    except ValueError as e:
        logger.critical(str(e))
        return 1

    logger.info("Starting disk monitor...")
    logger.info(f"Checking directory: {config.containers_directory}")
    logger.debug(f"Panel URL: {config.panel_url}")
    logger.debug(f"Sampler: {SAMPLER_NAME}")

    if once:
        run_scan(config, sampler)
        return 0

    interval = config.check_interval_in_seconds
    if interval <= 0:
        logger.critical(f"Invalid check interval: {interval}s (must be positive)")
        return 1

    write_pid_file()
    atexit.register(remove_pid_file)

    # schedule never queues missed runs, so an overrunning scan drops ticks
    schedule.every(interval).seconds.do(run_scan, config, sampler)
    logger.info(f"Scanning every {interval}s")

    try:
        while True:
            schedule.run_pending()
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Monitor stopped by user")
    return 0


if __name__ == "__main__":
    sys.exit(main())
