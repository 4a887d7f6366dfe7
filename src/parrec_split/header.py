"""header.py — the bits of a Philips .PAR header needed to split a conversion.

Only two things are read:

* ``Max. number of dynamics`` from the general-information block, and
* the ``image_type_mr`` column (5th field: ``sl ec dyn ph ty ...``) of every
  row in the image-information block, in file order.

Typical usage::

    from parrec_split.header import read_par_header

    hdr = read_par_header("sub-01_bold.PAR")
    hdr.declared_dynamics   # 200
    hdr.image_types[:4]     # [0, 0, 0, 0]
"""
from __future__ import annotations

__all__ = ["ParHeader", "parse_par_header", "read_par_header"]

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from parrec_split.errors import ParHeaderError

logger = logging.getLogger(__name__)

_DYNAMICS_RE = re.compile(r"Max\.\s+number\s+of\s+dynamics\s*:\s*(\S+)")
_IMAGE_SECTION = "# === IMAGE INFORMATION ="
_END_SECTION = "# === END OF DATA DESCRIPTION FILE"
_IMAGE_TYPE_FIELD = 4


@dataclass
class ParHeader:
    """Declared dynamics and image-type column of one acquisition."""

    declared_dynamics: int
    image_types: list[int] = field(default_factory=list)
    source: Path | None = None


def parse_par_header(text: str, source: Path | None = None) -> ParHeader:
    """Parse the content of a .PAR file.

    Raises
    ------
    ParHeaderError
        If the dynamics field is missing or not an integer, or an image row
        has a non-integer type field.
    """
    match = _DYNAMICS_RE.search(text)
    if match is None:
        raise ParHeaderError(f"No 'Max. number of dynamics' field in {source or 'PAR header'}")
    try:
        dynamics = int(match.group(1))
    except ValueError:
        raise ParHeaderError(
            f"Invalid number of dynamics {match.group(1)!r} in {source or 'PAR header'}"
        ) from None

    image_types: list[int] = []
    in_images = False
    for lineno, line in enumerate(text.splitlines(), start=1):
        if line.startswith(_IMAGE_SECTION):
            in_images = True
            continue
        if line.startswith(_END_SECTION):
            break
        stripped = line.strip()
        if not in_images or not stripped or stripped.startswith("#"):
            continue
        parts = stripped.split()
        if len(parts) <= _IMAGE_TYPE_FIELD:
            raise ParHeaderError(f"Truncated image row at line {lineno} of {source or 'PAR header'}")
        try:
            image_types.append(int(parts[_IMAGE_TYPE_FIELD]))
        except ValueError:
            raise ParHeaderError(
                f"Invalid image type {parts[_IMAGE_TYPE_FIELD]!r} at line {lineno} "
                f"of {source or 'PAR header'}"
            ) from None

    if not image_types:
        logger.warning("No image rows found in %s", source or "PAR header")
    return ParHeader(declared_dynamics=dynamics, image_types=image_types, source=source)


def read_par_header(path: str | Path) -> ParHeader:
    """Read and parse the .PAR file at *path*."""
    path = Path(path)
    text = path.read_text(encoding="latin-1")
    return parse_par_header(text, source=path)
