import os
import subprocess

import pytest

from disk_usage import (
    DiskUsageError, du_usage, get_sampler, parse_du_output, walk_usage,
)


def test_parse_du_output():
    assert parse_du_output("123456\t/volumes/a\n") == 123456


@pytest.mark.parametrize("output", ["", "   \n", "12K\t/volumes/a", "abc /x"])
def test_parse_du_output_rejects_garbage(output):
    with pytest.raises(DiskUsageError):
        parse_du_output(output)


def test_du_usage_runs_du(monkeypatch):
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append(cmd)
        return subprocess.CompletedProcess(cmd, 0, stdout="4096\t/volumes/a\n", stderr="")

    monkeypatch.setattr(subprocess, "run", fake_run)

    assert du_usage("/volumes/a") == 4096
    assert calls == [["du", "-sb", "/volumes/a"]]


def test_du_usage_failure(monkeypatch):
    def fake_run(cmd, **kwargs):
        raise subprocess.CalledProcessError(1, cmd, output="", stderr="du: cannot access")

    monkeypatch.setattr(subprocess, "run", fake_run)

    with pytest.raises(DiskUsageError, match="cannot access"):
        du_usage("/volumes/missing")


def test_du_usage_missing_executable(monkeypatch):
    def fake_run(cmd, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", "du")

    monkeypatch.setattr(subprocess, "run", fake_run)

    with pytest.raises(DiskUsageError, match="could not run du"):
        du_usage("/volumes/a")


def test_walk_usage_counts_files_and_dirs(tmp_path):
    vol = tmp_path / "vol"
    (vol / "sub").mkdir(parents=True)
    (vol / "a.bin").write_bytes(b"x" * 1000)
    (vol / "sub" / "b.bin").write_bytes(b"y" * 2500)

    expected = sum(os.lstat(p).st_size for p in (vol, vol / "sub", vol / "a.bin", vol / "sub" / "b.bin"))

    assert walk_usage(vol) == expected


def test_walk_usage_counts_hard_links_once(tmp_path):
    vol = tmp_path / "vol"
    vol.mkdir()
    (vol / "a.bin").write_bytes(b"x" * 5000)
    os.link(vol / "a.bin", vol / "b.bin")

    assert walk_usage(vol) == os.lstat(vol).st_size + 5000


def test_walk_usage_missing_path(tmp_path):
    with pytest.raises(DiskUsageError):
        walk_usage(tmp_path / "missing")


def test_get_sampler():
    assert get_sampler("du") is du_usage
    assert get_sampler("walk") is walk_usage
    with pytest.raises(ValueError):
        get_sampler("ncdu")
