import logging

from sqlalchemy import create_engine, inspect
from sqlalchemy.pool import StaticPool

from gradetrack.logging_config import LOG_FORMAT, setup_logging


def test_startup_creates_tables(monkeypatch) -> None:
    from gradetrack import main

    engine = create_engine("sqlite:///:memory:", poolclass=StaticPool)
    monkeypatch.setattr(main, "engine", engine)

    app = main.create_app()
    startup = app.router.on_startup[0]
    startup()

    tables = set(inspect(engine).get_table_names())
    assert {"semesters", "subjects", "categories", "activities", "drafts"} <= tables


def test_setup_logging_is_idempotent() -> None:
    root = logging.getLogger()
    before = len(root.handlers)

    setup_logging("debug")
    setup_logging("warning")

    added = [h for h in root.handlers if getattr(h, "_gradetrack", False)]
    assert len(added) == 1
    assert added[0].formatter._fmt == LOG_FORMAT
    assert root.level == logging.WARNING
    assert len(root.handlers) <= before + 1
