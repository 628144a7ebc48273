"""
Disk Usage Sampling

A sampler is any callable taking a path and returning its recursive size in
bytes. Two are provided: one shelling out to `du -sb`, and a native walk for
hosts without GNU du.
"""
import os
import stat
import subprocess


class DiskUsageError(Exception):
    """Raised when the size of a path cannot be measured."""


def parse_du_output(output):
    """Parse the byte count from the first whitespace-delimited token of du output."""
    parts = output.split()
    if not parts:
        raise DiskUsageError("unexpected du output format")

    try:
        return int(parts[0], 10)
    except ValueError:
        raise DiskUsageError(f"invalid size in du output: {parts[0]!r}")


def du_usage(path):
    """
    Measure a path with `du -sb`.

    Args:
        path: Directory to measure

    Returns:
        int: Apparent size in bytes

    Raises:
        DiskUsageError: If du cannot run, fails, or prints something unexpected
    """
    try:
        proc_result = subprocess.run(
            ["du", "-sb", str(path)],
            check=True,
            capture_output=True,
            text=True,
        )
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or "").strip()
        raise DiskUsageError(f"du exited with code {e.returncode}: {stderr}") from e
    except OSError as e:
        raise DiskUsageError(f"could not run du: {e}") from e

    return parse_du_output(proc_result.stdout)


def walk_usage(path):
    """
    Measure a path by walking it, summing lstat sizes like `du -sb` does.

    Symlinks are not followed and hard-linked files are counted once.
    Entries that vanish or cannot be read during the walk are skipped.
    """
    try:
        root_stat = os.lstat(path)
    except OSError as e:
        raise DiskUsageError(f"cannot stat {path}: {e}") from e

    total = root_stat.st_size
    if not stat.S_ISDIR(root_stat.st_mode):
        return total

    seen = set()
    for dirpath, dirnames, filenames in os.walk(path):
        for name in dirnames + filenames:
            try:
                st = os.lstat(os.path.join(dirpath, name))
            except OSError:
                continue
            if st.st_nlink > 1 and not stat.S_ISDIR(st.st_mode):
                key = (st.st_dev, st.st_ino)
                if key in seen:
                    continue
                seen.add(key)
            total += st.st_size
    return total


SAMPLERS = {
    "du": du_usage,
    "walk": walk_usage,
}


def get_sampler(name="du"):
    """Return the sampler registered under name ('du' or 'walk')."""
    try:
        return SAMPLERS[name]
    except KeyError:
        raise ValueError(f"Unknown sampler '{name}' (expected one of: {', '.join(SAMPLERS)})")
