"""Tests for audit.py — AuditLogger and get_logger()."""
import json
from datetime import datetime
from pathlib import Path

import pytest

from parrec_split.audit import AuditLogger, get_logger
from parrec_split.config import SplitterConfig


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def log_file(tmp_path):
    return tmp_path / "audit.jsonl"


@pytest.fixture
def audit(log_file):
    return AuditLogger(log_file)


# ---------------------------------------------------------------------------
# AuditLogger — file creation
# ---------------------------------------------------------------------------


def test_log_creates_file(audit, log_file):
    audit.log("split", acquisition="bold.nii.gz", kind="DUAL", ratio=2)
    assert log_file.exists()


def test_log_creates_parent_dirs(tmp_path):
    deep = tmp_path / "a" / "b" / "c" / "audit.jsonl"
    AuditLogger(deep).log("no_split", acquisition="t1.nii.gz")
    assert deep.exists()


# ---------------------------------------------------------------------------
# AuditLogger — JSONL structure
# ---------------------------------------------------------------------------


def test_log_entry_has_required_fields(audit, log_file):
    audit.log("split", acquisition="bold.nii.gz", kind="DUAL", ratio=2)
    entry = json.loads(log_file.read_text())
    for field in ("ts", "event", "acquisition", "kind", "ratio", "outputs", "detail"):
        assert field in entry, f"Missing field: {field}"


def test_log_entry_values(audit, log_file):
    audit.log(
        "split",
        acquisition="mp2rage.nii.gz",
        kind="QUAD",
        ratio=4,
        outputs=["mp2rage_inv-1_part-mag.nii.gz"],
    )
    entry = json.loads(log_file.read_text())
    assert entry["event"] == "split"
    assert entry["kind"] == "QUAD"
    assert entry["ratio"] == 4
    assert entry["outputs"] == ["mp2rage_inv-1_part-mag.nii.gz"]


def test_log_entry_defaults(audit, log_file):
    audit.log("error", acquisition="bold.nii.gz", detail="boom")
    entry = json.loads(log_file.read_text())
    assert entry["ratio"] is None
    assert entry["outputs"] == []
    assert entry["detail"] == "boom"


def test_log_entry_extra_kwargs(audit, log_file):
    audit.log("error", acquisition="bold.nii.gz", error_type="WriteError")
    entry = json.loads(log_file.read_text())
    assert entry["error_type"] == "WriteError"


def test_log_unknown_event_raises(audit, log_file):
    with pytest.raises(ValueError, match="submitted"):
        audit.log("submitted", acquisition="bold.nii.gz")
    assert not log_file.exists()


def test_log_appends_one_line_per_entry(audit, log_file):
    audit.log("split", acquisition="a.nii.gz")
    audit.log("no_split", acquisition="b.nii.gz")
    lines = log_file.read_text().splitlines()
    assert [json.loads(l)["acquisition"] for l in lines] == ["a.nii.gz", "b.nii.gz"]
    assert log_file.read_text().count("\n") == 2


def test_log_timestamp_is_iso_format(audit, log_file):
    audit.log("split", acquisition="a.nii.gz")
    entry = json.loads(log_file.read_text())
    # Should parse without raising
    datetime.fromisoformat(entry["ts"])


# ---------------------------------------------------------------------------
# get_logger
# ---------------------------------------------------------------------------


def test_get_logger_uses_log_file_when_set(tmp_path):
    log_path = tmp_path / "custom_audit.jsonl"
    al = get_logger(SplitterConfig(log_file=log_path))
    assert isinstance(al, AuditLogger)
    assert al.log_file == log_path


def test_get_logger_defaults_to_output_dir(tmp_path):
    al = get_logger(SplitterConfig(output_dir=tmp_path / "out"))
    assert al.log_file == tmp_path / "out" / "parrec_split_audit.jsonl"


def test_get_logger_defaults_to_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    al = get_logger(SplitterConfig())
    assert al.log_file == Path.cwd() / "parrec_split_audit.jsonl"
