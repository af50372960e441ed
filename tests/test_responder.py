import logging
from pathlib import Path

import pytest

from ingress_errors.service.responder import NOT_FOUND, Outcome, candidate_path, read_template, respond


@pytest.fixture()
def templates(tmp_path: Path) -> Path:
    base = tmp_path / "templates"
    base.mkdir()
    (base / "404.html").write_bytes(b"<p>not found</p>")
    (base / "500.json").write_bytes(b'{"error":500}\n')
    (tmp_path / "secret.html").write_bytes(b"outside")
    return base


def test_candidate_path_stays_in_base(templates: Path):
    assert candidate_path(templates, "404.html") == templates / "404.html"
    assert candidate_path(Path("."), "404.html") == Path("404.html")
    for bad in ("../secret.html", "sub/404.html", "/etc/passwd", "..", "."):
        assert candidate_path(templates, bad) is None


def test_read_template_returns_exact_bytes(templates: Path):
    assert read_template(templates, "500.json") == Outcome(200, b'{"error":500}\n')


def test_read_template_missing_file_logs(templates: Path, caplog):
    with caplog.at_level(logging.WARNING):
        assert read_template(templates, "403.html") == NOT_FOUND
    rec = next(r for r in caplog.records if getattr(r, "event", None) == "template_read_error")
    assert rec.path == str(templates / "403.html")
    assert rec.error


def test_read_template_directory_is_not_served(templates: Path):
    (templates / "410.html").mkdir()
    assert read_template(templates, "410.html") == NOT_FOUND


def test_read_template_refuses_escape(templates: Path, caplog):
    with caplog.at_level(logging.WARNING):
        assert read_template(templates, "../secret.html") == NOT_FOUND
    assert any(getattr(r, "event", None) == "template_outside_base" for r in caplog.records)


def test_respond_non_root_path(templates: Path, caplog):
    with caplog.at_level(logging.INFO):
        out = respond(templates_dir=templates, path="/404.html", code_header="404", format_header=None)
    assert out == NOT_FOUND
    assert any(getattr(r, "event", None) == "path_not_root" for r in caplog.records)


def test_respond_serves_selected_template_with_200(templates: Path):
    out = respond(
        templates_dir=templates, path="/", code_header="500", format_header="application/json"
    )
    assert out == Outcome(200, b'{"error":500}\n')


def test_respond_logs_header_fallbacks(templates: Path, caplog):
    with caplog.at_level(logging.WARNING):
        out = respond(templates_dir=templates, path="/", code_header="x500", format_header="bogus")
    assert out == Outcome(200, b"<p>not found</p>")
    events = {getattr(r, "event", None) for r in caplog.records}
    assert {"code_invalid", "format_invalid"} <= events


def test_respond_traversal_format_matches_invalid_format(templates: Path):
    traversal = respond(
        templates_dir=templates, path="/", code_header="404", format_header="text/../secret.html"
    )
    dotted = respond(templates_dir=templates, path="/", code_header="404", format_header="text/..")
    invalid = respond(templates_dir=templates, path="/", code_header="404", format_header="garbage")
    assert traversal == dotted == invalid == Outcome(200, b"<p>not found</p>")


def test_respond_very_long_code_is_not_found(templates: Path, caplog):
    with caplog.at_level(logging.WARNING):
        out = respond(templates_dir=templates, path="/", code_header="9" * 5000, format_header=None)
    assert out == NOT_FOUND
    assert any(getattr(r, "event", None) == "template_read_error" for r in caplog.records)
