import json
import logging

from iotorus.__main__ import main


def test_headless_run_logs_summary(caplog):
    with caplog.at_level(logging.INFO, logger='iotorus'):
        assert main(['--ticks', '40', '--seed', '5', '--log-every', '20']) == 0
    assert 'frame 20' in caplog.text
    assert 'Finished 40 frames' in caplog.text


def test_custom_config_is_used(tmp_path, caplog):
    path = tmp_path / 'small.json'
    path.write_text(json.dumps({'capacity': 8}), encoding='utf-8')
    with caplog.at_level(logging.INFO, logger='iotorus'):
        assert main(['--config', str(path), '--ticks', '10', '--log-every', '0']) == 0
    assert 'capacity 8' in caplog.text


def test_missing_config_fails(tmp_path):
    assert main(['--config', str(tmp_path / 'missing.json'), '--ticks', '1']) == 1


def test_negative_ticks_fail():
    assert main(['--ticks', '-3']) == 1
