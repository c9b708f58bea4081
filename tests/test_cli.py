import sys
from unittest import mock

import pytest

from mp3_info import cli
from tests.helpers import mp3_bytes


def run(*args):
    with mock.patch.object(sys, "argv", ["mp3_info", *args]):
        cli.main()


def test_prints_metadata(tmp_path, capsys):
    path = tmp_path / "cbr.mp3"
    path.write_bytes(mp3_bytes(size=128000))
    run(str(path))
    out = capsys.readouterr().out.splitlines()
    assert "duration: 8.0" in out
    assert "bitrate: 128" in out
    assert "frequency: 44100" in out
    assert "layer: Layer III" in out
    assert "version: MPEG 1" in out


def test_hms(tmp_path, capsys):
    path = tmp_path / "cbr.mp3"
    path.write_bytes(mp3_bytes(size=128000))
    run("--hms", str(path))
    assert "duration: 00:00:08" in capsys.readouterr().out.splitlines()


def test_invalid_file(tmp_path):
    path = tmp_path / "bad.mp3"
    path.write_bytes(b"\x00" * 64)
    with pytest.raises(SystemExit) as excinfo:
        run(str(path))
    assert "frame not found" in str(excinfo.value.code)


def test_missing_file(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        run(str(tmp_path / "missing.mp3"))
    assert excinfo.value.code
