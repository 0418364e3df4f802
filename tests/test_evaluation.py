import pandas as pd
import pytest

from conftest import Driver, make_controller

from fitts_engine.evaluation import fitts_regression, summarize_blocks, summarize_sets
from fitts_engine.io.trial_table import (
    COL_ID,
    COL_MOVEMENT_TIME,
    COL_PHASE,
    trials_to_frame,
)


@pytest.fixture
def session_frame(small_session_config):
    trials = Driver(make_controller(small_session_config)).run_to_end()
    return trials_to_frame(trials)


def test_summarize_sets(session_frame):
    sets = summarize_sets(session_frame)

    assert len(sets) == 3
    assert sets["phase"].tolist() == [0, 1, 1]
    assert sets["n_trials"].tolist() == [2, 3, 3]
    assert (sets["hit_rate"] == 1.0).all()
    assert sets["mean_movement_time_ms"].tolist() == pytest.approx([1000.0] * 3)
    assert (sets["throughput_for_set"] > 0).all()


def test_summarize_blocks_uses_testing_trials(session_frame):
    blocks = summarize_blocks(session_frame)

    assert len(blocks) == 1
    row = blocks.iloc[0]
    assert row["n_trials"] == 6
    assert row["n_sets"] == 2
    assert row["hit_rate"] == 1.0


def test_summarize_requires_columns():
    with pytest.raises(ValueError):
        summarize_sets(pd.DataFrame({"x": [1]}))


def regression_frame(ids, mts, phase=1):
    return pd.DataFrame({
        COL_ID: ids,
        COL_MOVEMENT_TIME: mts,
        COL_PHASE: [phase] * len(ids),
    })


def test_fitts_regression():
    fit = fitts_regression(regression_frame([1.0, 2.0, 3.0], [300.0, 400.0, 500.0]))

    assert fit["slope_ms_per_bit"] == pytest.approx(100.0)
    assert fit["intercept_ms"] == pytest.approx(200.0)
    assert fit["r"] == pytest.approx(1.0)
    assert fit["n"] == 3


def test_fitts_regression_ignores_training_and_skipped_trials():
    df = pd.concat([
        regression_frame([1.0, 2.0, 3.0], [300.0, 400.0, 500.0]),
        regression_frame([2.0], [0.0]),
        regression_frame([1.0], [5000.0], phase=0),
    ])
    fit = fitts_regression(df)

    assert fit["n"] == 3
    assert fit["slope_ms_per_bit"] == pytest.approx(100.0)


def test_fitts_regression_needs_two_ids():
    with pytest.raises(ValueError):
        fitts_regression(regression_frame([2.0, 2.0], [400.0, 420.0]))


def test_throughput_plot(tmp_path, session_frame):
    pytest.importorskip("matplotlib")
    from fitts_engine.evaluation.plotting import PlotConfig, ThroughputPlotter

    path = ThroughputPlotter(PlotConfig(title="P01")).save(session_frame, tmp_path / "plots" / "tp.png")
    assert path.exists()
