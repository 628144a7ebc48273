#!/usr/bin/env python3
"""
Monitor Control Script (monitor_ctl.py)

Utility to inspect and control the disk monitor service.

Usage:
    python monitor_ctl.py status    # Service state and the outcome of the last scan
    python monitor_ctl.py stop      # Stop the running monitor
    python monitor_ctl.py check     # Validate the configuration file
    python monitor_ctl.py scan      # Run one scan cycle and print usage

Start the service with `python monitor.py`.
"""
import sys

from monitor_core import (
    CONFIG_FILE, SAMPLER_NAME,
    get_pid, is_running, stop_monitor, read_scan_status,
    scan_volumes, bytes_to_gib, exceeds_threshold,
)
from monitor_config import validate_and_print
from disk_usage import get_sampler


def _print_last_scan():
    scan_status = read_scan_status()
    if scan_status is None:
        print("  Last scan: none recorded")
        return

    print(f"  Last scan: {scan_status['last_scan']} ({scan_status['volumes']} volume(s))")
    largest = scan_status.get("largest")
    if largest:
        name, usage = largest
        print(f"  Largest:   {name} ({bytes_to_gib(usage):.2f} GB)")
    over = scan_status.get("over_threshold") or []
    if over:
        print(f"  Over threshold: {', '.join(over)}")


def status():
    """Report whether the monitor runs and what its last scan found."""
    pid = get_pid()

    if pid is not None and is_running(pid):
        print(f"[RUNNING] Monitor is running (PID: {pid})")
        code = 0
    elif pid is not None:
        print(f"[STOPPED] Monitor is not running (stale PID: {pid})")
        code = 1
    else:
        print("[STOPPED] Monitor is not running (no PID file)")
        code = 1

    _print_last_scan()
    return code


def stop():
    """Stop the monitor."""
    success, msg = stop_monitor()
    print(f"[OK] {msg}" if success else f"[ERROR] {msg}")
    return 0 if success else 1


def check():
    """Validate the configuration file."""
    return 0 if validate_and_print(CONFIG_FILE) else 1


def _print_only(webhook_url, volume, reason, details):
    print(f"  ! {volume}: {reason} ({details})")


def scan():
    """Run a single scan cycle in the foreground without sending alerts."""
    config = validate_and_print(CONFIG_FILE)
    if config is None:
        return 1

    try:
        sampler = get_sampler(SAMPLER_NAME)
    except ValueError as e:
        print(f"[ERROR] {e}")
        return 1

    results = scan_volumes(config, sampler, _print_only)
    for name, usage in results:
        marker = "!!" if exceeds_threshold(usage) else "  "
        print(f"{marker} {name:<40} {bytes_to_gib(usage):>10.2f} GB")
    print(f"[OK] Scanned {len(results)} volume(s)")
    return 0


def usage():
    """Print usage information."""
    print(__doc__)


COMMANDS = {
    'status': status,
    'stop': stop,
    'check': check,
    'scan': scan,
}


def main(argv=None):
    if argv is None:
        argv = sys.argv[1:]
    if not argv:
        usage()
        return 1

    command = argv[0].lower()
    if command in COMMANDS:
        return COMMANDS[command]()
    if command in ('-h', '--help', 'help'):
        usage()
        return 0

    print(f"Unknown command: {command}")
    usage()
    return 1


if __name__ == "__main__":
    sys.exit(main())
