import json

import pandas as pd
import pytest

from conftest import Driver, make_controller

from fitts_engine.cli import build_arg_parser, main
from fitts_engine.io.pose_stream import samples_to_frame
from fitts_engine.io.trial_table import TRIAL_HEADERS


@pytest.fixture
def recorded_session(tmp_path, training_only_config):
    """Pose stream of a two-trial training session plus its session file."""
    driver = Driver(make_controller(training_only_config))
    driver.run_to_end()
    poses = tmp_path / "poses.tsv"
    samples_to_frame(driver.samples).to_csv(poses, sep="\t", index=False)
    config = tmp_path / "session.json"
    config.write_text(json.dumps({"training_trials": 2, "trials_in_block": 2}), encoding="utf-8")
    return poses, config


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_arg_parser().parse_args([])


def test_id_command(capsys):
    assert main(["id", "0.3", "0.1", "--mt-ms", "500"]) == 0
    out = capsys.readouterr().out
    assert "ID = 2.000 bits (precision level 4)" in out
    assert "TP = 4.000 bits/s" in out


def test_replay_then_summarize(tmp_path, recorded_session, capsys):
    poses, config = recorded_session
    trials_csv = tmp_path / "out" / "trials.csv"

    code = main([
        "replay", str(poses), str(trials_csv),
        "--config", str(config),
        "--skip-testing",
        "--input-delay", "0",
        "--seed", "1234",
    ])
    assert code == 0
    df = pd.read_csv(trials_csv)
    assert list(df.columns) == TRIAL_HEADERS
    assert len(df) == 2

    summary = tmp_path / "out" / "summary.csv"
    assert main(["summarize", str(trials_csv), "--output", str(summary)]) == 0
    assert summary.exists()
    assert (tmp_path / "out" / "summary_blocks.csv").exists()
    assert "2 trial(s) written" in capsys.readouterr().out


def test_replay_with_bad_config_returns_error(tmp_path, recorded_session):
    poses, _ = recorded_session
    config = tmp_path / "bad.json"
    config.write_text(json.dumps({"no_such_setting": 1}), encoding="utf-8")

    assert main(["replay", str(poses), str(tmp_path / "trials.csv"), "--config", str(config)]) == 2
