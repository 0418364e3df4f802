# fitts_engine/io/pose_stream.py
from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Union

import pandas as pd

from ..config.constants import ValidationMessages
from ..domain.samples import PoseSample
from ..errors import ConfigurationError

POSITION_COLUMNS = ["pos_x", "pos_y", "pos_z"]
ROTATION_COLUMNS = ["rot_x", "rot_y", "rot_z", "rot_w"]
REQUIRED_COLUMNS = ["timestamp"] + POSITION_COLUMNS


def read_pose_table(path: Union[str, Path], sep: Optional[str] = None) -> pd.DataFrame:
    """
    Read a recorded pose stream (TSV or CSV).

    The separator is taken from the file suffix unless ``sep`` is given:
    tab for ``.tsv``/``.txt``, comma otherwise.
    """
    path = Path(path)
    if sep is None:
        sep = "\t" if path.suffix.lower() in (".tsv", ".txt") else ","
    return pd.read_csv(path, sep=sep, low_memory=False)


def frame_to_samples(df: pd.DataFrame) -> List[PoseSample]:
    """
    Convert a pose table into ``PoseSample`` objects ordered by timestamp.

    Required columns: ``timestamp``, ``pos_x``, ``pos_y``, ``pos_z``.
    Optional: ``rot_x..rot_w`` (identity if absent), ``trigger`` and
    ``ready`` (0/1, false if absent).
    """
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ConfigurationError(ValidationMessages.MISSING_POSE_COLUMNS.format(columns=", ".join(missing)))

    df = df.sort_values("timestamp", kind="stable").reset_index(drop=True)
    positions = df[POSITION_COLUMNS].to_numpy(dtype=float)
    timestamps = df["timestamp"].to_numpy(dtype=float)

    if all(c in df.columns for c in ROTATION_COLUMNS):
        rotations = df[ROTATION_COLUMNS].to_numpy(dtype=float)
    else:
        rotations = None

    # Missing flags count as "not pressed"
    trigger = df["trigger"].fillna(0).astype(bool).to_numpy() if "trigger" in df.columns else None
    ready = df["ready"].fillna(0).astype(bool).to_numpy() if "ready" in df.columns else None

    samples = []
    for i in range(len(df)):
        kwargs = {}
        if rotations is not None:
            kwargs["rotation"] = rotations[i]
        samples.append(
            PoseSample(
                position=positions[i],
                timestamp=timestamps[i],
                trigger_pressed=bool(trigger[i]) if trigger is not None else False,
                ready_pressed=bool(ready[i]) if ready is not None else False,
                **kwargs,
            )
        )
    return samples


def read_pose_stream(path: Union[str, Path], sep: Optional[str] = None) -> List[PoseSample]:
    """Read a pose stream file straight into samples."""
    return frame_to_samples(read_pose_table(path, sep=sep))


def samples_to_frame(samples: List[PoseSample]) -> pd.DataFrame:
    """Inverse of ``frame_to_samples``; used to write synthetic streams."""
    rows = []
    for s in samples:
        rows.append({
            "timestamp": s.timestamp,
            "pos_x": s.position[0],
            "pos_y": s.position[1],
            "pos_z": s.position[2],
            "rot_x": s.rotation[0],
            "rot_y": s.rotation[1],
            "rot_z": s.rotation[2],
            "rot_w": s.rotation[3],
            "trigger": int(s.trigger_pressed),
            "ready": int(s.ready_pressed),
        })
    return pd.DataFrame(rows, columns=["timestamp"] + POSITION_COLUMNS + ROTATION_COLUMNS + ["trigger", "ready"])
