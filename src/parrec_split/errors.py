"""errors.py — exception taxonomy for parrec_split.

Every error is fatal for a single acquisition only; batch callers catch
:class:`SplitError` (and :class:`OSError`) per file and carry on with the
remaining acquisitions.
"""
from __future__ import annotations

__all__ = [
    "SplitError",
    "InvalidVolumeCount",
    "UnsupportedAcquisitionRatio",
    "HeaderColumnTooShort",
    "ParHeaderError",
    "NotNiftiFileName",
    "WriteError",
]


class SplitError(Exception):
    """Base class for all parrec_split failures."""


class InvalidVolumeCount(SplitError, ValueError):
    """Declared dynamics / actual volume counts are non-positive or non-divisible."""

    def __init__(self, declared_dynamics: int, actual_volumes: int) -> None:
        self.declared_dynamics = declared_dynamics
        self.actual_volumes = actual_volumes
        super().__init__(
            f"Cannot split {actual_volumes} volume(s) over {declared_dynamics} "
            "declared dynamic(s): counts must be positive and evenly divisible"
        )


class UnsupportedAcquisitionRatio(SplitError, ValueError):
    """Volume/dynamics ratio is not one of 1, 2 or 4."""

    def __init__(self, ratio: int) -> None:
        self.ratio = ratio
        super().__init__(
            f"Unknown image-type multiplicity: found {ratio} volume(s) per "
            "dynamic, expected 1, 2 or 4"
        )


class HeaderColumnTooShort(SplitError, ValueError):
    """The header's image-type column is too short to determine interleaving."""

    def __init__(self, length: int, required: int) -> None:
        self.length = length
        self.required = required
        super().__init__(
            f"Image-type column has {length} entr{'y' if length == 1 else 'ies'}; "
            f"need at least {required}"
        )


class ParHeaderError(SplitError, ValueError):
    """A .PAR file could not be parsed."""


class NotNiftiFileName(SplitError, ValueError):
    """An image path lacks a .nii or .nii.gz extension, so outputs cannot be named."""


class WriteError(SplitError, OSError):
    """A split output could not be written."""
