from __future__ import annotations

__all__ = ["n_volumes", "materialize"]

import logging
from pathlib import Path

import nibabel as nib
import numpy as np

from parrec_split.errors import WriteError
from parrec_split.naming import output_path, split_nifti_ext
from parrec_split.plan import SplitPlan

logger = logging.getLogger(__name__)


def n_volumes(img: nib.spatialimages.SpatialImage) -> int:
    """Return the size of the 4th dimension (1 for a 3-D image)."""
    return img.shape[3] if len(img.shape) >= 4 else 1


def materialize(
    source: str | Path,
    plan: SplitPlan,
    output_base: str | Path | None = None,
) -> list[Path]:
    """Write one image per entry in *plan* and return the written paths.

    Each output holds the selected volumes of *source* along the 4th
    dimension with the source affine, header, stored data type and scaling,
    and is named ``<base><suffix><ext>`` where *ext* is the source's extension.
    *output_base* defaults to the source path without its extension.
    Existing outputs are overwritten.

    Raises
    ------
    ValueError
        If a selection does not fit the source's volume count.
    WriteError
        If an output cannot be written.  Outputs written before the failure
        are left in place.
    """
    source = Path(source)
    base, ext = split_nifti_ext(source)
    if output_base is not None:
        base = Path(output_base)

    if not len(plan):
        return []

    # Read fully into memory: the first output may overwrite the source file.
    img = nib.load(source, mmap=False)
    # Stored values, not scaled ones: outputs reuse the source slope/intercept.
    data = np.asarray(img.dataobj.get_unscaled())
    slope, inter = img.header.get_slope_inter()
    if data.ndim == 3:
        data = data[..., np.newaxis]
    total = data.shape[3]

    written: list[Path] = []
    for suffix, selection in plan:
        indices = selection.indices(total)
        out_file = output_path(base, suffix, ext)
        out_img = img.__class__(data[..., indices], img.affine, img.header)
        out_img.header.set_slope_inter(slope, inter)
        try:
            out_file.parent.mkdir(parents=True, exist_ok=True)
            nib.save(out_img, out_file)
        except OSError as exc:
            raise WriteError(f"Failed to write {out_file}: {exc}") from exc
        logger.info("Wrote %s (%d volume(s))", out_file.name, len(indices))
        written.append(out_file)
    return written
