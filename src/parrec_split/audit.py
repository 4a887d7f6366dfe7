"""audit.py — per-acquisition outcome log for parrec_split.

One JSON object per line records what happened to each converted image:
split into which files, left alone, previewed with ``--dry-run``, or failed
and why.  Useful for answering "which runs of this batch have phase data?"
after the fact without re-reading every header.

Typical usage::

    from parrec_split.audit import get_logger

    audit = get_logger(config)
    audit.log("split", acquisition="sub-01_bold.nii.gz", kind="DUAL",
              ratio=2, outputs=["sub-01_bold.nii.gz", "sub-01_bold_ph.nii.gz"])
"""
from __future__ import annotations

__all__ = ["AUDIT_EVENTS", "AuditLogger", "get_logger"]

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from parrec_split.config import SplitterConfig

logger = logging.getLogger(__name__)

AUDIT_EVENTS = frozenset({"split", "no_split", "dry_run", "error"})

_DEFAULT_NAME = "parrec_split_audit.jsonl"


class AuditLogger:
    """Record acquisition outcomes in the JSONL file *log_file*."""

    def __init__(self, log_file: Path) -> None:
        self.log_file = log_file

    def log(
        self,
        event: str,
        *,
        acquisition: str = "",
        kind: str = "",
        ratio: int | None = None,
        outputs: list[str] | None = None,
        detail: str = "",
        **extra: Any,
    ) -> None:
        """Record *event* for *acquisition*.

        ``kind`` and ``ratio`` come from the classification when it got that
        far; ``outputs`` are bare file names; ``detail`` carries the error
        text for ``error`` events.  Keyword arguments beyond these (e.g.
        ``interleaved``, ``error_type``) are stored as-is.

        Raises
        ------
        ValueError
            If *event* is not in :data:`AUDIT_EVENTS`.
        """
        if event not in AUDIT_EVENTS:
            raise ValueError(f"Unknown audit event {event!r}; expected one of {sorted(AUDIT_EVENTS)}")

        record = dict(
            ts=datetime.now(tz=timezone.utc).isoformat(),
            event=event,
            acquisition=acquisition,
            kind=kind,
            ratio=ratio,
            outputs=list(outputs or ()),
            detail=detail,
            **extra,
        )
        self._append(json.dumps(record))
        logger.debug("audit %s: %s", event, acquisition)

    def _append(self, line: str) -> None:
        self.log_file.parent.mkdir(parents=True, exist_ok=True)
        with self.log_file.open("a") as fh:
            print(line, file=fh)


def get_logger(config: SplitterConfig) -> AuditLogger:
    """Return the :class:`AuditLogger` configured for *config*.

    Falls back to ``parrec_split_audit.jsonl`` in the output directory, or in
    the current directory when outputs are written beside their sources.
    """
    if config.log_file is not None:
        return AuditLogger(config.log_file)
    return AuditLogger((config.output_dir or Path.cwd()) / _DEFAULT_NAME)
