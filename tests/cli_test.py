import pytest

from autoleveler import cli


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    monkeypatch.setenv("AUTOLEVELER_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.setattr(cli, "setup_logging", lambda *args, **kwargs: None)


def test_plan_to_stdout(capsys):
    code = cli.main(
        ["plan", "--end-x", "10", "--step-x", "10", "--feedrate", "500", "--start-z", "5", "--end-z", "-5"]
    )
    assert code == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[:6] == [
        "(Auto Leveling: probing point 0)",
        "G90",
        "G0 Z5",
        "G0 X0 Y0 F500",
        "G38.2 Z-5 F10",
        "G0 Z5",
    ]
    assert lines[8:] == ["G0 X10 Y0 F500", "G38.2 Z-5 F20", "G0 Z5"]


def test_plan_to_file(tmp_path):
    out = tmp_path / "probe.nc"
    assert cli.main(["plan", "--end-x", "20", "--end-y", "10", "-o", str(out)]) == 0
    text = out.read_text(encoding="utf-8")
    assert text.count("G38.2") == 6


def test_plan_uses_settings_file(tmp_path, capsys):
    config = tmp_path / "custom.json"
    config.write_text('{"probe": {"probe_feedrate": 50, "feedrate": 250}}', encoding="utf-8")
    assert cli.main(["--config", str(config), "plan"]) == 0
    out = capsys.readouterr().out
    assert "G38.2 Z0 F25" in out
    assert "G0 X0 Y0 F250" in out


def test_plan_rejects_bad_step():
    assert cli.main(["plan", "--end-x", "10", "--step-x", "0"]) == 2


def test_plan_with_empty_grid():
    assert cli.main(["plan", "--start-x", "10", "--end-x", "0"]) == 1


def test_bad_settings_file(tmp_path):
    config = tmp_path / "broken.json"
    config.write_text("{", encoding="utf-8")
    assert cli.main(["--config", str(config), "plan"]) == 2


def test_info(tmp_path, capsys):
    path = tmp_path / "map.txt"
    path.write_text("0 0 -0.5 0 0 0 0 0 0\n10 0 0.25 0 0 0 0 0 0\n", encoding="utf-8")
    assert cli.main(["info", str(path)]) == 0
    out = capsys.readouterr().out
    assert "Points: 2" in out
    assert "Min Z: -0.5" in out
    assert "Max Z: 0.25" in out
    assert "Span: 0.7500" in out


def test_info_missing_file(tmp_path):
    assert cli.main(["info", str(tmp_path / "missing.txt")]) == 1
