"""
Monitor Core Module (monitor_core.py)

Shared functionality for the monitor service and its control script:
volume scanning plus the PID and scan-status files of the running service.
"""
import os
import json
import logging
from datetime import datetime
from pathlib import Path

import psutil

from disk_usage import DiskUsageError
from notifier import NotificationError

logger = logging.getLogger(__name__)

# Directory paths
BASE_DIR = Path(__file__).parent
PID_FILE = BASE_DIR / "monitor.pid"
STATUS_FILE = BASE_DIR / "monitor.status.json"
MONITOR_SCRIPT = BASE_DIR / "monitor.py"
CONFIG_FILE = os.environ.get("MONITOR_CONFIG", str(Path("config") / "config.json"))
LOGS_DIR = Path(os.environ.get("MONITOR_LOG_DIR", BASE_DIR / "logs"))
LOG_FILE = LOGS_DIR / "monitor.log"
SAMPLER_NAME = os.environ.get("MONITOR_SAMPLER", "du")

# Volumes above this many GiB trigger an alert
THRESHOLD_GIB = 95
GIB = 1024 ** 3
SFTP_DIR_NAME = ".sftp"


# =============================================================================
# Volume Scanning
# =============================================================================

def bytes_to_gib(usage):
    return usage / GIB


def exceeds_threshold(usage):
    """Return True when usage (bytes) is strictly above THRESHOLD_GIB."""
    return bytes_to_gib(usage) > THRESHOLD_GIB


def list_volumes(root):
    """
    List volume names under the monitored root.

    Only directories count, and the .sftp entry is always excluded.

    Raises:
        OSError: If the root cannot be listed
    """
    volumes = []
    with os.scandir(root) as entries:
        for entry in entries:
            if entry.name == SFTP_DIR_NAME:
                continue
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError:
                is_dir = False
            if is_dir:
                volumes.append(entry.name)
    return sorted(volumes)


def scan_volumes(config, sampler, notify):
    """
    Run one scan cycle over every volume under config.containers_directory.

    Args:
        config: MonitorConfig
        sampler: Callable returning the size of a path in bytes
        notify: Callable (webhook_url, volume, reason, details) used for alerts

    Returns:
        list: (volume name, bytes) for every volume sampled successfully
    """
    root = config.containers_directory
    try:
        volumes = list_volumes(root)
    except OSError as e:
        logger.error(f"Error reading directory: {e}")
        return []

    results = []
    for name in volumes:
        volume_path = os.path.join(root, name)
        try:
            usage = sampler(volume_path)
        except DiskUsageError as e:
            logger.error(f"Error getting disk usage for {name}: {e}")
            continue

        results.append((name, usage))
        usage_gib = bytes_to_gib(usage)
        logger.info(f"Volume {name}: {usage_gib:.2f} GB")

        if exceeds_threshold(usage):
            try:
                notify(
                    config.discord_webhook_url,
                    name,
                    "High disk usage",
                    f"Current usage: {usage_gib:.2f} GB",
                )
            except NotificationError as e:
                logger.error(f"Error sending notification: {e}")

    return results


# =============================================================================
# Service State
# =============================================================================

def write_scan_status(results, path=None, now=None):
    """
    Record the outcome of the last scan cycle for monitor_ctl status.

    Args:
        results: (volume name, bytes) pairs returned by scan_volumes
        path: Status file (uses STATUS_FILE if None)
        now: Scan time (uses the current time if None)
    """
    if path is None:
        path = STATUS_FILE
    if now is None:
        now = datetime.now()

    payload = {
        "last_scan": now.isoformat(timespec="seconds"),
        "volumes": len(results),
        "over_threshold": [name for name, usage in results if exceeds_threshold(usage)],
        "largest": max(results, key=lambda r: r[1], default=None),
    }
    try:
        Path(path).write_text(json.dumps(payload, indent=2))
    except OSError as e:
        logger.warning(f"Could not write scan status {path}: {e}")


def read_scan_status(path=None):
    """Return the last recorded scan status, or None if nothing was recorded."""
    if path is None:
        path = STATUS_FILE
    try:
        return json.loads(Path(path).read_text())
    except FileNotFoundError:
        return None
    except (OSError, ValueError) as e:
        logger.warning(f"Could not read scan status {path}: {e}")
        return None


def get_pid():
    """Read the monitor PID from PID_FILE."""
    try:
        return int(PID_FILE.read_text().strip())
    except (ValueError, OSError):
        return None


def is_running(pid):
    """True if pid is a live monitor.py process."""
    try:
        cmdline = psutil.Process(pid).cmdline()
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        return False
    return any(Path(arg).name == MONITOR_SCRIPT.name for arg in cmdline)


def stop_monitor(timeout=10):
    """
    Terminate the running monitor and remove its PID file.

    Returns:
        tuple: (success: bool, message: str)
    """
    pid = get_pid()
    if pid is None:
        return (True, "Monitor is not running (no PID file)")

    if is_running(pid):
        try:
            proc = psutil.Process(pid)
            proc.terminate()
            try:
                proc.wait(timeout=timeout)
            except psutil.TimeoutExpired:
                proc.kill()
        except psutil.NoSuchProcess:
            pass
        except psutil.Error as e:
            return (False, f"Failed to stop PID {pid}: {e}")
        message = f"Monitor stopped (PID: {pid})"
    else:
        message = f"Monitor is not running (stale PID: {pid})"

    try:
        PID_FILE.unlink()
    except FileNotFoundError:
        pass
    return (True, message)
