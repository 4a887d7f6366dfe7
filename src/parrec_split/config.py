from __future__ import annotations

__all__ = ["SplitterConfig"]

from dataclasses import dataclass
from pathlib import Path

import yaml


@dataclass
class SplitterConfig:
    """Output locations and settings for splitting converted acquisitions."""

    # Where split images are written; None writes beside the source image.
    output_dir: Path | None = None

    # JSONL audit log path. Defaults to <output_dir or cwd>/parrec_split_audit.jsonl at runtime.
    log_file: Path | None = None

    # CSV of batch results written by the CLI; omitted when None.
    results_file: Path | None = None

    # Delete the combined source image once all split outputs are written.
    remove_source: bool = False

    def output_base(self, base: Path) -> Path:
        """Return where outputs for the extension-less source path *base* go."""
        if self.output_dir is None:
            return base
        return self.output_dir / base.name

    @classmethod
    def from_yaml(cls, path: str | Path) -> "SplitterConfig":
        """Load config from a YAML file, overriding defaults.

        Raises
        ------
        ValueError
            If the file contains invalid YAML syntax.
        FileNotFoundError
            If *path* does not exist.
        """
        with open(path) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ValueError(f"Invalid YAML in {path}: {exc}") from exc

        for key in ("output_dir", "log_file", "results_file"):
            if data.get(key) is not None:
                data[key] = Path(data[key])

        return cls(**data)
