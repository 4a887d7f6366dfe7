"""parrec_split — split converted PAR/REC acquisitions into per-channel images.

A PAR/REC acquisition converted to NIfTI can carry magnitude and phase
volumes in one 4-D image (functional + phase), or magnitude and phase for
two inversions (MP2RAGE).  This package compares the image's volume count
with the header's declared dynamics, works out whether the channel types are
interleaved or block-ordered, and writes one image per channel with a
BIDS-style suffix.

Typical usage::

    from parrec_split.config import SplitterConfig
    from parrec_split.pipeline import load_pairs, split_batch

    cfg     = SplitterConfig.from_yaml("/etc/parrec_split/config.yaml")
    pairs   = load_pairs("acquisitions.csv")
    results = split_batch(pairs, cfg)
"""

__version__ = "0.1.0"
