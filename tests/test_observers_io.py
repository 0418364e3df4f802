import pandas as pd
import pytest

from conftest import Driver, make_controller

from fitts_engine.errors import ConfigurationError
from fitts_engine.io.observers import ConsoleReporter, TrialCollector, TrialCsvLogger
from fitts_engine.io.pose_stream import read_pose_stream, samples_to_frame, frame_to_samples
from fitts_engine.io.trial_table import (
    COL_MOVEMENT_TIME,
    COL_PARTICIPANT,
    TRIAL_HEADERS,
    trial_to_row,
    trials_to_frame,
)


def test_trial_headers():
    assert len(TRIAL_HEADERS) == 131
    assert len(set(TRIAL_HEADERS)) == len(TRIAL_HEADERS)
    assert TRIAL_HEADERS[0] == "Date_and_time"
    assert TRIAL_HEADERS[-1] == "Target_corner8_Z"


def test_trial_row_matches_headers(training_only_config):
    trials = Driver(make_controller(training_only_config)).run_to_end()
    row = trial_to_row(trials[0])

    assert len(row) == len(TRIAL_HEADERS)
    df = trials_to_frame(trials)
    assert list(df.columns) == TRIAL_HEADERS
    assert df[COL_MOVEMENT_TIME].tolist() == pytest.approx([1000.0, 1000.0])


def test_csv_logger_appends_rows(tmp_path, training_only_config):
    log_file = tmp_path / "logs" / "P01.csv"
    csv_logger = TrialCsvLogger(log_file)
    Driver(make_controller(training_only_config, observers=[csv_logger])).run_to_end()

    assert csv_logger.rows_written == 2
    df = pd.read_csv(log_file)
    assert list(df.columns) == TRIAL_HEADERS
    assert len(df) == 2
    assert df[COL_PARTICIPANT].tolist() == [1, 1]


def test_csv_logger_keeps_existing_header(tmp_path, training_only_config):
    log_file = tmp_path / "P01.csv"
    Driver(make_controller(training_only_config, observers=[TrialCsvLogger(log_file)])).run_to_end()
    Driver(make_controller(training_only_config, observers=[TrialCsvLogger(log_file)])).run_to_end()

    df = pd.read_csv(log_file)
    assert len(df) == 4


def test_collector_and_reporter(training_only_config, caplog):
    collector = TrialCollector()
    with caplog.at_level("INFO", logger="fitts_engine.io.observers"):
        Driver(make_controller(training_only_config, observers=[collector, ConsoleReporter(verbose=True)])).run_to_end()

    assert collector.started
    assert collector.ended
    assert len(collector.trials) == 2
    assert len(collector.to_frame()) == 2
    assert "Session complete: 2 trial(s), 2 hit(s), 0 skipped" in caplog.text


def test_pose_stream_round_trip(tmp_path, training_only_config):
    driver = Driver(make_controller(training_only_config))
    driver.run_to_end()
    path = tmp_path / "poses.tsv"
    samples_to_frame(driver.samples).to_csv(path, sep="\t", index=False)

    samples = read_pose_stream(path)
    assert len(samples) == len(driver.samples)
    assert samples[0].ready_pressed
    assert [s.trigger_pressed for s in samples] == [s.trigger_pressed for s in driver.samples]
    assert samples[2].position == pytest.approx(driver.samples[2].position)


def test_pose_stream_optional_columns():
    df = pd.DataFrame({
        "timestamp": [1.0, 0.0],
        "pos_x": [0.1, 0.0],
        "pos_y": [0.0, 0.0],
        "pos_z": [0.0, 0.0],
    })
    samples = frame_to_samples(df)

    assert [s.timestamp for s in samples] == [0.0, 1.0]
    assert not samples[0].trigger_pressed
    assert not samples[0].ready_pressed
    assert samples[1].position[0] == pytest.approx(0.1)


def test_pose_stream_missing_columns():
    with pytest.raises(ConfigurationError, match="pos_z"):
        frame_to_samples(pd.DataFrame({"timestamp": [0.0], "pos_x": [0.0], "pos_y": [0.0]}))
