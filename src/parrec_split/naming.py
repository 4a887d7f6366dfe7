from __future__ import annotations

__all__ = ["NIFTI_EXTENSIONS", "split_nifti_ext", "output_path", "find_converted_image"]

from pathlib import Path

from parrec_split.errors import NotNiftiFileName

# Longest first so ".nii.gz" wins over ".nii"
NIFTI_EXTENSIONS = (".nii.gz", ".nii")


def split_nifti_ext(path: str | Path) -> tuple[Path, str]:
    """Split *path* into ``(base, ext)`` where *ext* is ``.nii.gz`` or ``.nii``.

    Raises
    ------
    NotNiftiFileName
        If *path* does not carry a NIfTI extension.
    """
    path = Path(path)
    for ext in NIFTI_EXTENSIONS:
        if path.name.endswith(ext) and len(path.name) > len(ext):
            return path.with_name(path.name[: -len(ext)]), ext
    raise NotNiftiFileName(f"Not a NIfTI file name: {path.name!r}")


def output_path(base: str | Path, suffix: str, ext: str) -> Path:
    """Return ``<base><suffix><ext>``."""
    base = Path(base)
    return base.with_name(f"{base.name}{suffix}{ext}")


def find_converted_image(par_path: str | Path, search_dir: str | Path | None = None) -> Path:
    """Locate the NIfTI converted from *par_path*.

    Looks for ``<stem>.nii.gz`` then ``<stem>.nii`` in *search_dir*
    (the PAR file's directory when omitted).

    Raises
    ------
    FileNotFoundError
        If neither file exists.
    """
    par_path = Path(par_path)
    search_dir = Path(search_dir) if search_dir is not None else par_path.parent
    for ext in NIFTI_EXTENSIONS:
        candidate = search_dir / f"{par_path.stem}{ext}"
        if candidate.exists():
            return candidate
    raise FileNotFoundError(
        f"No converted image for {par_path.name} in {search_dir} "
        f"(looked for {par_path.stem}.nii.gz / {par_path.stem}.nii)"
    )
