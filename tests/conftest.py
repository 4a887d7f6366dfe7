import nibabel as nib
import numpy as np
import pytest

from parrec_split.config import SplitterConfig


# ---------------------------------------------------------------------------
# Synthetic image / header helpers
# ---------------------------------------------------------------------------

AFFINE = np.diag([2.0, 2.0, 3.0, 1.0])


def write_nifti(path, n_volumes: int):
    """Write a small 4-D image whose volume *i* is filled with the value *i*."""
    data = np.zeros((3, 4, 2, n_volumes), dtype=np.int16)
    for i in range(n_volumes):
        data[..., i] = i
    img = nib.Nifti1Image(data, AFFINE)
    img.header.set_zooms((2.0, 2.0, 3.0, 1.5))
    nib.save(img, path)
    return path


def volume_ids(path) -> list[int]:
    """Return the fill value of each volume in the image at *path*."""
    data = np.asarray(nib.load(path).dataobj)
    if data.ndim == 3:
        data = data[..., np.newaxis]
    return [int(data[0, 0, 0, i]) for i in range(data.shape[3])]


def par_text(dynamics: int, image_types: list[int]) -> str:
    """Return a minimal .PAR header with one image row per entry in *image_types*."""
    rows = "\n".join(
        f"  1   1  {i + 1:3d}  1 {t} 2  {i:4d}  16  100  80 80"
        for i, t in enumerate(image_types)
    )
    return (
        "# === DATA DESCRIPTION FILE ======================================================\n"
        "# === GENERAL INFORMATION ========================================================\n"
        ".    Patient name                       :   test\n"
        ".    Protocol name                      :   WIP bold\n"
        f".    Max. number of dynamics            :   {dynamics}\n"
        ".    Repetition time [ms]               :   2000.000\n"
        "# === IMAGE INFORMATION DEFINITION ===============================================\n"
        "#  slice number                             (integer)\n"
        "#  image_type_mr                            (integer)\n"
        "# === IMAGE INFORMATION ==========================================================\n"
        "#  sl ec  dyn ph ty    idx pix scan% rec size\n"
        "\n"
        f"{rows}\n"
        "\n"
        "# === END OF DATA DESCRIPTION FILE ===============================================\n"
    )


def write_par(path, dynamics: int, image_types: list[int]):
    path.write_text(par_text(dynamics, image_types))
    return path


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def cfg(tmp_path):
    """SplitterConfig writing beside the source, auditing into tmp_path."""
    return SplitterConfig(log_file=tmp_path / "audit.jsonl")


@pytest.fixture
def dual_interleaved(tmp_path):
    """10-volume image, 5 dynamics, magnitude/phase alternating."""
    nii = write_nifti(tmp_path / "sub-01_task-rest_bold.nii.gz", 10)
    par = write_par(tmp_path / "sub-01_task-rest_bold.PAR", 5, [0, 3] * 5)
    return nii, par


@pytest.fixture
def dual_block(tmp_path):
    """10-volume image, 5 dynamics, all magnitude then all phase."""
    nii = write_nifti(tmp_path / "sub-01_task-rest_bold.nii.gz", 10)
    par = write_par(tmp_path / "sub-01_task-rest_bold.PAR", 5, [0] * 5 + [3] * 5)
    return nii, par


@pytest.fixture
def quad_interleaved(tmp_path):
    """4-volume MP2RAGE-like image: inv-1 mag, inv-2 mag, inv-1 phase, inv-2 phase."""
    nii = write_nifti(tmp_path / "sub-01_MP2RAGE.nii.gz", 4)
    par = write_par(tmp_path / "sub-01_MP2RAGE.PAR", 1, [0, 0, 3, 3])
    return nii, par


@pytest.fixture
def single(tmp_path):
    nii = write_nifti(tmp_path / "sub-01_T1w.nii.gz", 3)
    par = write_par(tmp_path / "sub-01_T1w.PAR", 3, [0, 0, 0])
    return nii, par
