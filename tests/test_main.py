"""
Tests for the command line entry point.
"""

import socket

import pytest

from sensor_metrics.__main__ import build_parser, main


def test_validate_prints_summary(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--validate", "--connect", "sensors.lan:2000", "--connect-timeout", "10s"]) == 0

    out = capsys.readouterr().out
    assert "Sensor source: sensors.lan:2000" in out
    assert "Connect timeout: 10.0s" in out
    assert "Metrics endpoint: http://0.0.0.0:9456/metrics" in out
    assert "Configuration is valid!" in out


def test_validate_reports_warnings(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--validate", "--reconnect-interval", "0"]) == 0

    assert "Configuration warnings (1):" in capsys.readouterr().out


def test_invalid_configuration(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--connect-timeout", "whenever"]) == 1

    assert "Configuration error" in capsys.readouterr().err


def test_log_flags_map_to_levels() -> None:
    parser = build_parser()

    assert parser.parse_args(["-v"]).log_level == "info"
    assert parser.parse_args(["-d"]).log_level == "debug"
    assert parser.parse_args(["-q"]).log_level == "error"
    assert parser.parse_args([]).log_level is None
    assert parser.parse_args(["--no-color"]).log_colors == "off"


def test_version(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--version"])

    assert excinfo.value.code == 0
    assert "sensor-metrics 0.1.0" in capsys.readouterr().out


def test_listener_bind_failure_exits_nonzero(unused_port: int) -> None:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        sock.listen()
        port = sock.getsockname()[1]

        code = main(["--listen", f"127.0.0.1:{port}", "--connect", f"127.0.0.1:{unused_port}", "-q"])

    assert code == 1
