from __future__ import annotations

__all__ = [
    "ACQUISITION_ERRORS",
    "RESULT_COLUMNS",
    "split_acquisition",
    "split_batch",
    "load_pairs",
]

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import nibabel as nib
import pandas as pd
from nibabel.filebasedimages import ImageFileError

from parrec_split.classify import AcquisitionKind, classify, detect_interleave
from parrec_split.config import SplitterConfig
from parrec_split.errors import SplitError
from parrec_split.header import read_par_header
from parrec_split.materialize import materialize, n_volumes
from parrec_split.naming import find_converted_image, output_path, split_nifti_ext
from parrec_split.plan import build_split_plan

if TYPE_CHECKING:
    from parrec_split.audit import AuditLogger

logger = logging.getLogger(__name__)

RESULT_COLUMNS = ["acquisition", "ratio", "kind", "interleaved", "outputs", "status", "error"]

#: Failures that abort one acquisition but not its siblings.
ACQUISITION_ERRORS = (SplitError, OSError, ImageFileError)

# Columns of a batch pairs CSV (used by load_pairs); "nifti" may be absent or empty
_PAIR_COLUMNS = ("nifti", "par")


def split_acquisition(
    nifti: str | Path,
    par: str | Path,
    config: SplitterConfig,
    dry_run: bool = False,
    audit: AuditLogger | None = None,
) -> dict[str, Any]:
    """Classify one converted acquisition and write its split outputs.

    Parameters
    ----------
    nifti:
        The converted 4-D image (``.nii`` or ``.nii.gz``).
    par:
        The .PAR header it was converted from.
    config:
        Supplies the output directory and the ``remove_source`` policy.
    dry_run:
        When *True*, computes the plan and reports the outputs without
        writing anything.

    Returns
    -------
    dict
        A result record with the keys in :data:`RESULT_COLUMNS`.  ``status``
        is ``split``, ``no_split`` or ``dry_run``.

    Raises
    ------
    SplitError
        Any classification, header or write failure; see
        :mod:`parrec_split.errors`.
    """
    nifti = Path(nifti)
    base, ext = split_nifti_ext(nifti)
    header = read_par_header(par)
    volumes = n_volumes(nib.load(nifti))

    ratio, kind = classify(header.declared_dynamics, volumes)
    interleaved = detect_interleave(header.image_types, kind)
    plan = build_split_plan(kind, interleaved, header.declared_dynamics, volumes)
    logger.info(
        "%s: %d volume(s) / %d dynamic(s) -> %s%s",
        nifti.name,
        volumes,
        header.declared_dynamics,
        kind.name,
        " (interleaved)" if interleaved else "",
    )

    record: dict[str, Any] = {
        "acquisition": str(nifti),
        "ratio": ratio,
        "kind": kind.name,
        "interleaved": interleaved,
        "outputs": [],
        "status": "no_split",
        "error": "",
    }

    if kind is AcquisitionKind.SINGLE:
        if audit is not None:
            audit.log("no_split", acquisition=nifti.name, kind=kind.name, ratio=ratio)
        return record

    out_base = config.output_base(base)

    if dry_run:
        outputs = [str(output_path(out_base, suffix, ext)) for suffix in plan.suffixes]
        logger.info("[DRY RUN] Would write: %s", ", ".join(outputs))
        record.update(outputs=outputs, status="dry_run")
        if audit is not None:
            audit.log(
                "dry_run",
                acquisition=nifti.name,
                kind=kind.name,
                ratio=ratio,
                outputs=[Path(o).name for o in outputs],
            )
        return record

    written = materialize(nifti, plan, output_base=out_base)
    if config.remove_source and nifti.resolve() not in {p.resolve() for p in written}:
        logger.info("Removing combined source %s", nifti)
        nifti.unlink()

    record.update(outputs=[str(p) for p in written], status="split")
    if audit is not None:
        audit.log(
            "split",
            acquisition=nifti.name,
            kind=kind.name,
            ratio=ratio,
            outputs=[p.name for p in written],
            interleaved=interleaved,
        )
    return record


def split_batch(
    pairs: pd.DataFrame,
    config: SplitterConfig,
    dry_run: bool = False,
    audit: AuditLogger | None = None,
) -> pd.DataFrame:
    """Split every ``(nifti, par)`` row of *pairs* independently.

    Rows with an empty ``nifti`` use the image converted beside the .PAR
    file (see :func:`~parrec_split.naming.find_converted_image`).  A failure
    on one acquisition is logged, audited and recorded with
    ``status="failed"``; the remaining rows are still processed.

    Returns a DataFrame with columns :data:`RESULT_COLUMNS`, one row per pair.
    """
    rows = []
    for _, pair in pairs.iterrows():
        nifti = pair.get("nifti")
        if not isinstance(nifti, str) or not nifti:
            nifti = None
        try:
            if nifti is None:
                nifti = find_converted_image(pair["par"])
            record = split_acquisition(nifti, pair["par"], config, dry_run=dry_run, audit=audit)
        except ACQUISITION_ERRORS as exc:
            acquisition = Path(nifti if nifti is not None else pair["par"])
            logger.error("Failed to split %s: %s", acquisition, exc)
            if audit is not None:
                audit.log(
                    "error",
                    acquisition=acquisition.name,
                    detail=str(exc),
                    error_type=type(exc).__name__,
                )
            record = {
                "acquisition": str(acquisition),
                "ratio": getattr(exc, "ratio", None),
                "kind": "",
                "interleaved": None,
                "outputs": [],
                "status": "failed",
                "error": f"{type(exc).__name__}: {exc}",
            }
        rows.append(record)

    if not rows:
        return pd.DataFrame(columns=RESULT_COLUMNS)
    return pd.DataFrame(rows, columns=RESULT_COLUMNS)


def load_pairs(csv_path: str | Path) -> pd.DataFrame:
    """Load a CSV listing .PAR headers and, optionally, their converted images.

    Expects a ``par`` column and an optional ``nifti`` column; an empty
    ``nifti`` cell means "find it beside the .PAR file".  Relative paths are
    resolved against the CSV's directory, and rows without a ``par`` path
    are dropped.

    Raises
    ------
    ValueError
        If the CSV lacks a ``par`` column.
    """
    csv_path = Path(csv_path)
    df = pd.read_csv(csv_path, dtype=str)
    if "par" not in df.columns:
        raise ValueError(f"{csv_path} is missing required column(s): ['par']")
    if "nifti" not in df.columns:
        df["nifti"] = ""

    df = df.dropna(subset=["par"]).fillna({"nifti": ""}).reset_index(drop=True)
    for col in _PAIR_COLUMNS:
        df[col] = df[col].map(lambda p: _resolve(p, csv_path.parent))
    return df[list(_PAIR_COLUMNS)]


def _resolve(path: str, root: Path) -> str:
    if not path or Path(path).is_absolute():
        return path
    return str(root / path)
