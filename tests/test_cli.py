import logging
from pathlib import Path

import pytest

from ingress_errors import cli


@pytest.fixture()
def fake_run(monkeypatch):
    calls = []
    monkeypatch.setattr(cli.uvicorn, "run", lambda app, **kw: calls.append((app, kw)))
    return calls


def test_parse_args_short_flags():
    args = cli.parse_args(["-l", "127.0.0.1:8080", "-p", "files"])
    assert args.listen_address == "127.0.0.1:8080"
    assert args.templates_dir == "files"
    assert args.log_level is None


def test_main_runs_server(fake_run, tmp_path: Path, monkeypatch):
    monkeypatch.delenv("LISTEN_ADDRESS", raising=False)
    cli.main(["-p", str(tmp_path), "-l", "127.0.0.1:8080"])
    app, kw = fake_run[0]
    assert app.state.settings.templates_dir == tmp_path
    assert kw["host"] == "127.0.0.1"
    assert kw["port"] == 8080


def test_main_default_listen_address(fake_run, tmp_path: Path, monkeypatch):
    monkeypatch.delenv("LISTEN_ADDRESS", raising=False)
    cli.main(["--templates-dir", str(tmp_path)])
    _, kw = fake_run[0]
    assert (kw["host"], kw["port"]) == ("0.0.0.0", 3000)


def test_main_exits_on_missing_templates_dir(fake_run, tmp_path: Path, caplog):
    with caplog.at_level(logging.ERROR), pytest.raises(SystemExit) as exc:
        cli.main(["-p", str(tmp_path / "missing")])
    assert exc.value.code == 1
    assert not fake_run
    assert any(getattr(r, "event", None) == "config_invalid" for r in caplog.records)


def test_main_exits_when_templates_path_is_a_file(fake_run, tmp_path: Path):
    f = tmp_path / "404.html"
    f.write_text("x")
    with pytest.raises(SystemExit) as exc:
        cli.main(["-p", str(f)])
    assert exc.value.code == 1


def test_main_exits_on_bad_listen_address(fake_run, tmp_path: Path):
    with pytest.raises(SystemExit) as exc:
        cli.main(["-p", str(tmp_path), "-l", "nowhere"])
    assert exc.value.code == 1


def test_main_requires_templates_dir(fake_run, monkeypatch):
    monkeypatch.delenv("TEMPLATES_DIR", raising=False)
    with pytest.raises(SystemExit) as exc:
        cli.main([])
    assert exc.value.code == 1
