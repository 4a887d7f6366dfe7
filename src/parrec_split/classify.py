"""classify.py — decide whether a converted acquisition needs splitting.

A converted PAR/REC image may hold more volumes than the header declares
dynamics.  The ratio between the two tells us what the extra volumes are:

* ``1`` — nothing extra, the image is final as-is (:attr:`AcquisitionKind.SINGLE`)
* ``2`` — magnitude + phase, e.g. BOLD + phase (:attr:`AcquisitionKind.DUAL`)
* ``4`` — two inversions, each with magnitude + phase, e.g. MP2RAGE
  (:attr:`AcquisitionKind.QUAD`)

The per-row ``image_type_mr`` header column then tells us whether the
channel types alternate volume by volume (interleaved) or come in
contiguous blocks.
"""
from __future__ import annotations

__all__ = ["AcquisitionKind", "classify", "detect_interleave"]

from collections.abc import Sequence
from enum import Enum

from parrec_split.errors import (
    HeaderColumnTooShort,
    InvalidVolumeCount,
    UnsupportedAcquisitionRatio,
)


class AcquisitionKind(Enum):
    """Image-type multiplicity of a converted acquisition."""

    SINGLE = 1
    DUAL = 2
    QUAD = 4

    @property
    def ratio(self) -> int:
        return self.value

    @property
    def second_index(self) -> int:
        """Header row holding the first volume of the second channel type, if interleaved."""
        return {AcquisitionKind.SINGLE: 0, AcquisitionKind.DUAL: 1, AcquisitionKind.QUAD: 2}[self]


def classify(declared_dynamics: int, actual_volumes: int) -> tuple[int, AcquisitionKind]:
    """Return ``(ratio, kind)`` for a converted acquisition.

    Parameters
    ----------
    declared_dynamics:
        ``Max. number of dynamics`` from the PAR header.
    actual_volumes:
        Size of the converted image's 4th dimension.

    Raises
    ------
    InvalidVolumeCount
        If either count is non-positive or *actual_volumes* is not a
        multiple of *declared_dynamics*.
    UnsupportedAcquisitionRatio
        If the ratio is not 1, 2 or 4.
    """
    if declared_dynamics <= 0 or actual_volumes <= 0:
        raise InvalidVolumeCount(declared_dynamics, actual_volumes)
    if actual_volumes % declared_dynamics:
        raise InvalidVolumeCount(declared_dynamics, actual_volumes)

    ratio = actual_volumes // declared_dynamics
    try:
        kind = AcquisitionKind(ratio)
    except ValueError:
        raise UnsupportedAcquisitionRatio(ratio) from None
    return ratio, kind


def detect_interleave(image_types: Sequence[int], kind: AcquisitionKind) -> bool:
    """Return True when the channel types alternate volume by volume.

    Row 0 is compared with the row where the second channel type would start
    if the data were interleaved (1 for DUAL, 2 for QUAD).  Equal values mean
    the rows are grouped in blocks.

    Raises
    ------
    HeaderColumnTooShort
        If *image_types* does not reach that row.
    """
    if kind is AcquisitionKind.SINGLE:
        return False
    second = kind.second_index
    if len(image_types) < second + 1:
        raise HeaderColumnTooShort(len(image_types), second + 1)
    return image_types[0] != image_types[second]
