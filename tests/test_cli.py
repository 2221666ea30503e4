"""Tests for CLI functionality."""

from __future__ import annotations

import json
from importlib import resources
from pathlib import Path

import pytest

from carbon_curves.cli import main


def _write_rows(tmp_path: Path, rows: object) -> str:
    path = tmp_path / "rows.json"
    path.write_text(json.dumps(rows), encoding="utf-8")
    return str(path)


def test_cli_main_no_input(capsys: pytest.CaptureFixture[str]) -> None:
    """The model is required and rows must be provided."""

    assert main(["--model", "ccf"]) == 1

    captured = capsys.readouterr()
    assert "No input provided" in captured.err


def test_cli_main_help(capsys: pytest.CaptureFixture[str]) -> None:
    """Test CLI help output."""

    assert main(["--help"]) == 0

    captured = capsys.readouterr()
    assert "usage:" in captured.out.lower()
    assert "teads-curve" in captured.out


def test_cli_rejects_unknown_model() -> None:
    assert main(["--model", "boavizta"]) == 1


def test_cli_tdp_run(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = _write_rows(
        tmp_path,
        [
            {"timestamp": "2023-07-06T00:00", "duration": 3600, "cpu-util": 50},
            {
                "timestamp": "2023-07-06T01:00",
                "duration": 3600,
                "cpu-util": 50,
                "vcpus-allocated": 1,
                "vcpus-total": 64,
            },
        ],
    )

    exit_code = main(
        [
            "--model",
            "teads-curve",
            "--config",
            '{"thermal-design-power": 200}',
            "--input",
            path,
        ]
    )

    assert exit_code == 0
    outputs = json.loads(capsys.readouterr().out)
    assert [row["energy-cpu"] for row in outputs] == pytest.approx([0.15, 0.00234375])
    assert outputs[0]["timestamp"] == "2023-07-06T00:00"


def test_cli_catalog_run(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = _write_rows(tmp_path, [{"duration": 3600, "cpu-util": 10}])

    exit_code = main(
        [
            "-m",
            "ccf",
            "-c",
            '{"vendor": "aws", "instance-type": "m5n.large"}',
            "-i",
            path,
        ]
    )

    assert exit_code == 0
    outputs = json.loads(capsys.readouterr().out)
    assert outputs[0]["energy"] == pytest.approx(0.0019435697915529846)
    assert outputs[0]["embodied-carbon"] == pytest.approx(0.9577090468036529)


def test_cli_reports_estimation_errors(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    path = _write_rows(tmp_path, [{"duration": 3600, "cpu-util": 10}])

    exit_code = main(
        ["-m", "teads-aws", "-c", '{"instance-type": "m5n.mega"}', "-i", path]
    )

    assert exit_code == 1
    assert "Instance type m5n.mega is not supported" in capsys.readouterr().err


@pytest.mark.parametrize(
    ("config", "rows"),
    [("[1, 2]", []), ("{}", {"duration": 3600}), ("{}", [1, 2])],
)
def test_cli_rejects_malformed_json_shapes(
    tmp_path: Path, config: str, rows: object
) -> None:
    path = _write_rows(tmp_path, rows)

    assert main(["-m", "teads-curve", "-c", config, "-i", path]) == 1


def test_cli_missing_input_file(tmp_path: Path) -> None:
    assert main(["-m", "teads-curve", "-i", str(tmp_path / "absent.json")]) == 1


def _log_lines(stderr: str) -> list[dict[str, object]]:
    return [json.loads(line) for line in stderr.splitlines() if line.startswith("{")]


def test_cli_logs_carry_the_run_id(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setenv("CARBON_CURVES_LOG_LEVEL", "INFO")
    path = _write_rows(
        tmp_path,
        [{"duration": 3600, "cpu-util": 10}, {"duration": 3600, "cpu-util": 90}],
    )

    exit_code = main(
        ["-m", "teads-curve", "-c", '{"thermal-design-power": 200}', "-i", path]
    )

    assert exit_code == 0
    (batch,) = [
        line
        for line in _log_lines(capsys.readouterr().err)
        if line["message"] == "Batch estimated"
    ]
    assert str(batch["run_id"]).startswith("teads-curve-")
    assert batch["context"]["model"] == "teads-curve"  # type: ignore[index]
    assert batch["context"]["rows"] == 2  # type: ignore[index]


def test_cli_logs_failures_at_default_level(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    path = _write_rows(tmp_path, [{"duration": 3600, "cpu-util": 10}])

    assert main(["-m", "teads-aws", "-c", '{"instance-type": "x"}', "-i", path]) == 1

    lines = _log_lines(capsys.readouterr().err)
    assert [line["message"] for line in lines] == ["Estimation failed"]
    assert str(lines[0]["run_id"]).startswith("teads-aws-")
    context = lines[0]["context"]
    assert context["error"] == "UnsupportedValueError"  # type: ignore[index]


def test_cli_reports_malformed_reference_tables(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    for name in (
        "aws-instances.json",
        "aws-embodied.json",
        "aws-architectures.json",
    ):
        text = resources.files("carbon_curves.data").joinpath(name).read_text(
            encoding="utf-8"
        )
        (data_dir / name).write_text(text, encoding="utf-8")
    (data_dir / "aws-use.json").write_text("{not json", encoding="utf-8")
    monkeypatch.setenv("CARBON_CURVES_DATA_DIR", str(data_dir))
    path = _write_rows(tmp_path, [{"duration": 3600, "cpu-util": 10}])
    config = '{"vendor": "aws", "instance-type": "m5n.large"}'

    exit_code = main(["-m", "ccf", "-c", config, "-i", path])

    assert exit_code == 1
    assert "Failed to parse reference table aws-use.json" in capsys.readouterr().err
