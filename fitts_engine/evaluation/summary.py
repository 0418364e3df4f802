# fitts_engine/evaluation/summary.py
from __future__ import annotations

import logging
from typing import Dict, List

import numpy as np
import pandas as pd

from ..io.trial_table import (
    COL_BLOCK,
    COL_EFFECTIVE_THROUGHPUT,
    COL_EFFECTIVE_THROUGHPUT_BLOCK,
    COL_HIT,
    COL_ID,
    COL_MOVEMENT_TIME,
    COL_OVERSHOT,
    COL_PARTICIPANT,
    COL_PHASE,
    COL_SET,
    COL_THROUGHPUT,
    COL_THROUGHPUT_BLOCK,
    COL_THROUGHPUT_SET,
    COL_UNDERSHOT,
)

logger = logging.getLogger(__name__)

SET_KEYS = [COL_PARTICIPANT, COL_BLOCK, COL_SET, COL_PHASE]
BLOCK_KEYS = [COL_PARTICIPANT, COL_BLOCK]


def _last_nonzero(series: pd.Series) -> float:
    """Set and block measures are only filled on the closing trial."""
    values = series[series != 0]
    return float(values.iloc[-1]) if len(values) else 0.0


def _require(df: pd.DataFrame, columns: List[str]) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValueError(f"Trial table is missing columns: {missing}")


def _valid(df: pd.DataFrame) -> pd.DataFrame:
    # Skipped trials carry MT = 0
    return df[df[COL_MOVEMENT_TIME] > 0]


def summarize_sets(df: pd.DataFrame) -> pd.DataFrame:
    """
    One row per set.

    Columns: trial count, mean movement time, mean per-trial throughput,
    the set throughput and effective throughput from the closing trial,
    hit rate and mean overshoot/undershoot counts.
    """
    _require(df, SET_KEYS + [COL_MOVEMENT_TIME, COL_THROUGHPUT, COL_HIT])
    rows = []
    for keys, group in df.groupby(SET_KEYS, sort=True):
        valid = _valid(group)
        rows.append({
            "participant": keys[0],
            "block": keys[1],
            "set": keys[2],
            "phase": keys[3],
            "n_trials": len(group),
            "n_valid": len(valid),
            "mean_movement_time_ms": float(valid[COL_MOVEMENT_TIME].mean()) if len(valid) else np.nan,
            "mean_throughput": float(valid[COL_THROUGHPUT].mean()) if len(valid) else np.nan,
            "throughput_for_set": _last_nonzero(group[COL_THROUGHPUT_SET]),
            "effective_throughput": _last_nonzero(group[COL_EFFECTIVE_THROUGHPUT]),
            "hit_rate": float(group[COL_HIT].mean()),
            "mean_overshot_count": float(group[COL_OVERSHOT].mean()),
            "mean_undershot_count": float(group[COL_UNDERSHOT].mean()),
        })
    return pd.DataFrame(rows)


def summarize_blocks(df: pd.DataFrame) -> pd.DataFrame:
    """
    One row per participant block, testing trials only when any exist.
    """
    _require(df, BLOCK_KEYS + [COL_PHASE, COL_MOVEMENT_TIME, COL_THROUGHPUT, COL_HIT])
    rows = []
    for keys, group in df.groupby(BLOCK_KEYS, sort=True):
        testing = group[group[COL_PHASE] == 1]
        scored = testing if len(testing) else group
        valid = _valid(scored)
        rows.append({
            "participant": keys[0],
            "block": keys[1],
            "n_trials": len(scored),
            "n_sets": scored[COL_SET].nunique(),
            "mean_movement_time_ms": float(valid[COL_MOVEMENT_TIME].mean()) if len(valid) else np.nan,
            "mean_throughput": float(valid[COL_THROUGHPUT].mean()) if len(valid) else np.nan,
            "throughput_for_block": _last_nonzero(group[COL_THROUGHPUT_BLOCK]),
            "effective_throughput_for_block": _last_nonzero(group[COL_EFFECTIVE_THROUGHPUT_BLOCK]),
            "hit_rate": float(scored[COL_HIT].mean()),
            "mean_overshot_count": float(scored[COL_OVERSHOT].mean()),
            "mean_undershot_count": float(scored[COL_UNDERSHOT].mean()),
        })
    return pd.DataFrame(rows)


def fitts_regression(df: pd.DataFrame, testing_only: bool = True) -> Dict[str, float]:
    """
    Least-squares fit of MT = a + b * ID over valid trials.

    Returns ``intercept_ms``, ``slope_ms_per_bit``, Pearson ``r`` and the
    number of trials used. Raises ``ValueError`` with fewer than two
    distinct IDs.
    """
    _require(df, [COL_ID, COL_MOVEMENT_TIME, COL_PHASE])
    data = _valid(df)
    if testing_only:
        data = data[data[COL_PHASE] == 1]
    data = data[data[COL_ID] > 0]

    ids = data[COL_ID].to_numpy(dtype=float)
    mts = data[COL_MOVEMENT_TIME].to_numpy(dtype=float)
    if np.unique(ids).size < 2:
        raise ValueError("Need at least two distinct IDs for a Fitts regression")

    slope, intercept = np.polyfit(ids, mts, 1)
    r = float(np.corrcoef(ids, mts)[0, 1])
    logger.debug("Fitts regression over %d trial(s): a=%.1f b=%.1f r=%.3f", len(ids), intercept, slope, r)
    return {
        "intercept_ms": float(intercept),
        "slope_ms_per_bit": float(slope),
        "r": r,
        "n": int(len(ids)),
    }
