"""CLI tests: config-driven defaults, review prompts, and error exits."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path

import pytest
from typer.testing import CliRunner

from conflux import cli
from conflux.database import Database
from conflux.extraction.schemas import ExtractionResult
from conflux.models import Organization, Person, Roster
from conflux.services.capture import CaptureService

from conftest import make_entity

runner = CliRunner()


@pytest.fixture
def workspace_db(tmp_path: Path) -> tuple[Path, str]:
    """File database with one workspace; returns (path, workspace id)."""
    path = tmp_path / "cli.db"
    with Database(path) as db:
        ws = db.create_workspace("Work")
    return path, ws


def _write_config(tmp_path: Path, **values) -> Path:
    path = tmp_path / "capture_config.json"
    path.write_text(json.dumps(values))
    return path


class FakeExtractor:
    """Stands in for MistralClient; records how it was built."""

    instances: list[FakeExtractor] = []

    def __init__(self, api_key: str, model: str = "", temperature: float = 0.0) -> None:
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        FakeExtractor.instances.append(self)

    async def extract_entities(self, text, known_people=(), known_orgs=()):
        return ExtractionResult(
            entities=[make_entity("Priya Patel", confidence=0.9)],
            summary="Met Priya about the launch.",
        )


@pytest.fixture
def fake_extractor(monkeypatch):
    FakeExtractor.instances = []
    monkeypatch.setattr("conflux.extraction.client.MistralClient", FakeExtractor)
    monkeypatch.setattr("conflux.config.get_api_key", lambda: "test-key")
    return FakeExtractor


class TestConfigDefaults:
    def test_workspace_and_db_from_config(self, tmp_path, workspace_db):
        db_path, ws = workspace_db
        cfg = _write_config(tmp_path, db_path=str(db_path), workspace_id=ws)

        result = runner.invoke(cli.app, ["--config", str(cfg), "people", "add", "Jane Doe"])

        assert result.exit_code == 0, result.output
        with Database(db_path) as db:
            assert [p.full_name for p in db.list_people(ws)] == ["Jane Doe"]

    def test_db_option_overrides_config(self, tmp_path, workspace_db):
        db_path, ws = workspace_db
        cfg = _write_config(tmp_path, db_path=str(tmp_path / "other.db"), workspace_id=ws)

        result = runner.invoke(
            cli.app, ["--config", str(cfg), "--db", str(db_path), "orgs", "add", "Acme Corp"]
        )

        assert result.exit_code == 0, result.output
        with Database(db_path) as db:
            assert [o.name for o in db.list_organizations(ws)] == ["Acme Corp"]

    def test_missing_workspace_exits(self, tmp_path, workspace_db):
        db_path, _ = workspace_db
        cfg = _write_config(tmp_path, db_path=str(db_path))

        result = runner.invoke(cli.app, ["--config", str(cfg), "people", "list"])

        assert result.exit_code == 1
        assert "No workspace given" in result.output

    def test_capture_uses_config_settings(self, tmp_path, workspace_db, fake_extractor):
        db_path, ws = workspace_db
        cfg = _write_config(
            tmp_path,
            db_path=str(db_path),
            workspace_id=ws,
            model="mistral-large-latest",
            temperature=0.1,
            created_by="alice",
        )
        notes = tmp_path / "notes.txt"
        notes.write_text("Met Priya Patel about the launch.")

        result = runner.invoke(cli.app, ["--config", str(cfg), "capture", str(notes), "--yes"])

        assert result.exit_code == 0, result.output
        extractor = fake_extractor.instances[0]
        assert extractor.model == "mistral-large-latest"
        assert extractor.temperature == 0.1
        with Database(db_path) as db:
            row = db.conn.execute("SELECT created_by FROM interactions").fetchone()
            assert row["created_by"] == "alice"
            assert [p.full_name for p in db.list_people(ws)] == ["Priya Patel"]

    def test_model_option_overrides_config(self, tmp_path, workspace_db, fake_extractor):
        db_path, ws = workspace_db
        cfg = _write_config(tmp_path, db_path=str(db_path), model="mistral-large-latest")
        notes = tmp_path / "notes.txt"
        notes.write_text("Met Priya Patel.")

        result = runner.invoke(
            cli.app,
            ["--config", str(cfg), "capture", str(notes), "-w", ws, "-m", "open-mistral-nemo", "--yes"],
        )

        assert result.exit_code == 0, result.output
        assert fake_extractor.instances[0].model == "open-mistral-nemo"


class TestCommitErrors:
    def test_interaction_write_failure_exits_cleanly(
        self, tmp_path, workspace_db, fake_extractor, monkeypatch
    ):
        db_path, ws = workspace_db
        notes = tmp_path / "notes.txt"
        notes.write_text("Met Priya Patel.")

        def _boom(self, *args, **kwargs):
            raise sqlite3.OperationalError("database is locked")

        monkeypatch.setattr(Database, "create_interaction", _boom)
        result = runner.invoke(
            cli.app, ["--db", str(db_path), "capture", str(notes), "-w", ws, "--yes"]
        )

        assert result.exit_code == 1
        assert "Commit failed" in result.output
        assert "database is locked" in result.output
        assert not isinstance(result.exception, sqlite3.Error)


class TestPromptDecisions:
    @pytest.fixture
    def session(self):
        roster = Roster(
            workspace_id="ws",
            people=[Person(id="p1", workspace_id="ws", full_name="John Smith", title="CTO")],
            organizations=[Organization(id="o1", workspace_id="ws", name="Acme Corp")],
        )
        extraction = ExtractionResult(
            entities=[make_entity("John Smith", title="VP Engineering", organization="Acme Corp")],
            summary="",
        )
        return CaptureService.review("notes", extraction, roster)

    def _answer(self, monkeypatch, prompt_answers, confirm_answers):
        prompts = iter(prompt_answers)
        confirms = iter(confirm_answers)
        asked: list[str] = []

        def _prompt(text, default=None, **kwargs):
            asked.append(text)
            return next(prompts)

        def _confirm(text, default=False, **kwargs):
            asked.append(text)
            return next(confirms)

        monkeypatch.setattr(cli.typer, "prompt", _prompt)
        monkeypatch.setattr(cli.typer, "confirm", _confirm)
        return asked

    def test_reviewer_can_decline_title_update(self, monkeypatch, session):
        decision = session.editor[0]
        assert decision.update_title is True
        assert decision.create_affiliation is True

        asked = self._answer(monkeypatch, ["link"], [False, True])
        cli._prompt_decisions(session)

        decision = session.editor[0]
        assert decision.linked_id == "p1"
        assert decision.update_title is False
        assert decision.create_affiliation is True
        assert any("VP Engineering" in q for q in asked)
        assert any("Acme Corp" in q for q in asked)

    def test_reviewer_can_decline_affiliation(self, monkeypatch, session):
        self._answer(monkeypatch, ["link"], [True, False])
        cli._prompt_decisions(session)

        assert session.editor[0].update_title is True
        assert session.editor[0].create_affiliation is False

    def test_skip_asks_nothing_more(self, monkeypatch, session):
        asked = self._answer(monkeypatch, ["skip"], [])
        cli._prompt_decisions(session)

        assert session.editor[0].action.value == "skip"
        assert len(asked) == 1
