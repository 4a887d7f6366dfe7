from __future__ import annotations

__all__ = [
    "StrideSelection",
    "RangeSelection",
    "Selection",
    "SplitPlan",
    "build_split_plan",
    "plan_frame",
    "DUAL_SUFFIXES",
    "QUAD_SUFFIXES",
]

import logging
from dataclasses import dataclass, field
from typing import Union

import pandas as pd

from parrec_split.classify import AcquisitionKind

logger = logging.getLogger(__name__)

#: Output suffixes in write order.  The magnitude of a DUAL acquisition keeps
#: the source name; the phase gets ``_ph``.
DUAL_SUFFIXES = ("", "_ph")
QUAD_SUFFIXES = (
    "_inv-1_part-mag",
    "_inv-1_part-phase",
    "_inv-2_part-mag",
    "_inv-2_part-phase",
)

# Position of each QUAD channel within the repeating 4-volume unit:
# inv-1 mag, inv-2 mag, inv-1 phase, inv-2 phase.
_QUAD_OFFSETS = {
    "_inv-1_part-mag": 0,
    "_inv-1_part-phase": 2,
    "_inv-2_part-mag": 1,
    "_inv-2_part-phase": 3,
}


@dataclass(frozen=True)
class StrideSelection:
    """Every *stride*-th volume starting at *start* (interleaved data)."""

    start: int
    stride: int

    def to_slice(self) -> slice:
        return slice(self.start, None, self.stride)

    def indices(self, n_volumes: int) -> list[int]:
        """Return the selected volume indices for an image of *n_volumes*.

        Raises
        ------
        ValueError
            If the selection is empty.
        """
        selected = list(range(n_volumes))[self.to_slice()]
        if not selected:
            raise ValueError(f"{self} selects no volumes out of {n_volumes}")
        return selected


@dataclass(frozen=True)
class RangeSelection:
    """*count* contiguous volumes starting at *start* (block-ordered data)."""

    start: int
    count: int

    def to_slice(self) -> slice:
        return slice(self.start, self.start + self.count)

    def indices(self, n_volumes: int) -> list[int]:
        """Return the selected volume indices for an image of *n_volumes*.

        Raises
        ------
        ValueError
            If the range is empty or runs past the last volume.
        """
        if self.count <= 0 or self.start < 0 or self.start + self.count > n_volumes:
            raise ValueError(f"{self} does not fit in {n_volumes} volume(s)")
        return list(range(self.start, self.start + self.count))


Selection = Union[StrideSelection, RangeSelection]


@dataclass
class SplitPlan:
    """Ordered mapping of output suffix to volume selection."""

    kind: AcquisitionKind
    interleaved: bool
    selections: dict[str, Selection] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.selections)

    def __iter__(self):
        return iter(self.selections.items())

    @property
    def suffixes(self) -> list[str]:
        return list(self.selections)


def build_split_plan(
    kind: AcquisitionKind,
    interleaved: bool,
    declared_dynamics: int,
    actual_volumes: int,
) -> SplitPlan:
    """Return the :class:`SplitPlan` for a classified acquisition.

    SINGLE acquisitions get an empty plan: the converted image is already
    the final output.
    """
    plan = SplitPlan(kind=kind, interleaved=interleaved)

    if kind is AcquisitionKind.DUAL:
        mag, phase = DUAL_SUFFIXES
        if interleaved:
            plan.selections[mag] = StrideSelection(0, 2)
            plan.selections[phase] = StrideSelection(1, 2)
        else:
            plan.selections[mag] = RangeSelection(0, declared_dynamics)
            plan.selections[phase] = RangeSelection(
                declared_dynamics, actual_volumes - declared_dynamics
            )

    elif kind is AcquisitionKind.QUAD:
        if interleaved:
            for suffix in QUAD_SUFFIXES:
                plan.selections[suffix] = StrideSelection(_QUAD_OFFSETS[suffix], 4)
        else:
            if actual_volumes != 4:
                logger.warning(
                    "Block-ordered QUAD acquisition with %d volumes (expected 4); "
                    "taking volumes 3..%d as inv-2 phase, check the output",
                    actual_volumes,
                    actual_volumes - 1,
                )
            for suffix in QUAD_SUFFIXES[:-1]:
                plan.selections[suffix] = RangeSelection(_QUAD_OFFSETS[suffix], 1)
            plan.selections[QUAD_SUFFIXES[-1]] = RangeSelection(3, actual_volumes - 3)

    return plan


def plan_frame(plan: SplitPlan, n_volumes: int) -> pd.DataFrame:
    """Tabulate *plan* against an image of *n_volumes* (one row per output)."""
    rows = []
    for suffix, selection in plan:
        indices = selection.indices(n_volumes)
        rows.append({
            "suffix": suffix or "(none)",
            "rule": type(selection).__name__.replace("Selection", "").lower(),
            "start": selection.start,
            "step": selection.stride if isinstance(selection, StrideSelection) else 1,
            "n_volumes": len(indices),
            "volumes": " ".join(str(i) for i in indices),
        })
    if not rows:
        return pd.DataFrame(columns=["suffix", "rule", "start", "step", "n_volumes", "volumes"])
    return pd.DataFrame(rows)
