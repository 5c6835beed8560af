"""Tests for the CLI commands using typer.testing."""

from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner, Result

from pdir.cli import app

runner = CliRunner()


def _invoke(*args: str, db: Path | None = None, input: str | None = None) -> Result:
    """Helper to invoke the CLI with a temp DB."""
    cmd = list(args)
    if db:
        cmd += ["--db", str(db)]
    return runner.invoke(app, cmd, input=input)


def _submit(db: Path, title: str, category: str = "worship", author: str = "user_1") -> str:
    result = _invoke(
        "prompt", "submit", "-t", title, "--category", category, "-c", f"{title} body",
        "--as", author, db=db,
    )
    assert result.exit_code == 0, result.output
    listed = json.loads(_invoke("prompt", "by-author", author, db=db).stdout)
    return next(p["id"] for p in listed if p["title"] == title)


class TestInit:
    def test_init_creates_db(self, tmp_path: Path) -> None:
        db = tmp_path / "test.db"
        result = _invoke("init", db=db)
        assert result.exit_code == 0
        assert "initialized" in result.output.lower() or "✓" in result.output

    def test_init_creates_alembic_version(self, tmp_path: Path) -> None:
        import sqlite3

        db = tmp_path / "test.db"
        _invoke("init", db=db)
        conn = sqlite3.connect(str(db))
        tables = [r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")]
        assert "alembic_version" in tables
        assert {"prompts", "blogs", "categories", "users", "favorites"} <= set(tables)
        conn.close()

    def test_init_idempotent(self, tmp_path: Path) -> None:
        db = tmp_path / "test.db"
        assert _invoke("init", db=db).exit_code == 0
        assert _invoke("init", db=db).exit_code == 0


class TestVersion:
    def test_version_flag(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "pdir" in result.output
        assert "0.1.0" in result.output


class TestPromptWorkflow:
    def test_submit_requires_identity(self, tmp_path: Path) -> None:
        db = tmp_path / "test.db"
        result = _invoke("prompt", "submit", "-t", "T", "--category", "c", "-c", "x", db=db)
        assert result.exit_code == 1
        assert "Not authenticated" in result.output

    def test_submit_without_content_fails(self, tmp_path: Path) -> None:
        db = tmp_path / "test.db"
        result = _invoke("prompt", "submit", "-t", "T", "--category", "c", "--as", "u", db=db)
        assert result.exit_code == 1

    def test_submit_approve_list(self, tmp_path: Path) -> None:
        db = tmp_path / "test.db"
        prompt_id = _submit(db, "Sermon Outline")
        _submit(db, "Newsletter", category="outreach")

        listed = json.loads(_invoke("prompt", "list", "--json", db=db).stdout)
        assert listed == []

        result = _invoke("prompt", "status", prompt_id, "approved", "--as", "admin", db=db)
        assert result.exit_code == 0

        listed = json.loads(_invoke("prompt", "list", "--search", "SERMON", "--json", db=db).stdout)
        assert [p["id"] for p in listed] == [prompt_id]
        assert set(listed[0]) == {
            "id", "title", "excerpt", "category", "authorName", "usageCount",
            "executionCount", "tags", "createdAt", "featured",
        }

    def test_pending_queue(self, tmp_path: Path) -> None:
        db = tmp_path / "test.db"
        prompt_id = _submit(db, "Queued")
        pending = json.loads(_invoke("prompt", "pending", "--json", db=db).stdout)
        assert [p["id"] for p in pending] == [prompt_id]
        assert pending[0]["status"] == "pending"

    def test_bad_status(self, tmp_path: Path) -> None:
        db = tmp_path / "test.db"
        prompt_id = _submit(db, "T")
        result = _invoke("prompt", "status", prompt_id, "archived", "--as", "admin", db=db)
        assert result.exit_code == 1

    def test_counters(self, tmp_path: Path) -> None:
        db = tmp_path / "test.db"
        prompt_id = _submit(db, "Counted")
        assert _invoke("prompt", "use", prompt_id, db=db).exit_code == 0
        result = _invoke("prompt", "use", prompt_id, "--delta", "2", db=db)
        assert "3" in result.output
        assert _invoke("prompt", "run", prompt_id, db=db).exit_code == 0

        bad = _invoke("prompt", "use", prompt_id, "--delta", "-1", db=db)
        assert bad.exit_code == 1
        assert "positive" in bad.output

        shown = json.loads(_invoke("prompt", "show", prompt_id, "--json", db=db).stdout)
        assert shown["usageCount"] == 3
        assert shown["executionCount"] == 1

    def test_counters_json(self, tmp_path: Path) -> None:
        db = tmp_path / "test.db"
        prompt_id = _submit(db, "Counted")
        used = json.loads(_invoke("prompt", "use", prompt_id, "--json", db=db).stdout)
        assert used == {"id": prompt_id, "usageCount": 1}
        ran = _invoke("prompt", "run", prompt_id, "--delta", "4", "--json", db=db)
        assert json.loads(ran.stdout) == {"id": prompt_id, "executionCount": 4}

    def test_counter_missing_prompt(self, tmp_path: Path) -> None:
        db = tmp_path / "test.db"
        result = _invoke("prompt", "run", "nope", db=db)
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_update_and_show(self, tmp_path: Path) -> None:
        db = tmp_path / "test.db"
        prompt_id = _submit(db, "Editable")
        result = _invoke(
            "prompt", "update", prompt_id, "--title", "Edited", "--featured", "--as", "admin",
            db=db,
        )
        assert result.exit_code == 0
        shown = _invoke("prompt", "show", prompt_id, db=db)
        assert shown.exit_code == 0
        assert "Edited" in shown.output
        assert "Editable body" in shown.output

    def test_delete(self, tmp_path: Path) -> None:
        db = tmp_path / "test.db"
        prompt_id = _submit(db, "Doomed")
        result = _invoke("prompt", "delete", prompt_id, "--yes", "--as", "admin", db=db)
        assert result.exit_code == 0
        assert _invoke("prompt", "show", prompt_id, db=db).exit_code == 1


class TestSeedAndBoot:
    def test_seed_then_boot(self, tmp_path: Path) -> None:
        db = tmp_path / "test.db"
        seed_file = tmp_path / "seed.json"
        seed_file.write_text(
            json.dumps(
                {
                    "categories": [{"id": "worship", "name": "Worship"}],
                    "prompts": [
                        {
                            "title": "Worship Set",
                            "content": "Plan a set",
                            "category": "worship",
                            "authorId": "u",
                            "authorName": "U",
                            "status": "approved",
                        }
                    ],
                }
            ),
            encoding="utf-8",
        )
        result = _invoke("seed", str(seed_file), db=db)
        assert result.exit_code == 0, result.output

        boot = json.loads(_invoke("boot", db=db).stdout)
        assert [c["categoryId"] for c in boot["categories"]] == ["worship"]
        assert [p["title"] for p in boot["recentPrompts"]] == ["Worship Set"]

        categories = json.loads(_invoke("category", "list", "--json", db=db).stdout)
        assert categories[0]["name"] == "Worship"

    def test_seed_missing_file(self, tmp_path: Path) -> None:
        result = _invoke("seed", str(tmp_path / "nope.json"), db=tmp_path / "test.db")
        assert result.exit_code == 1


class TestBlogs:
    def test_slug_command(self) -> None:
        result = runner.invoke(app, ["blog", "slug", "  Leading & Trailing Spaces  "])
        assert result.exit_code == 0
        assert result.stdout.strip() == "leading-trailing-spaces"

    def test_create_publish_show(self, tmp_path: Path) -> None:
        db = tmp_path / "test.db"
        result = _invoke(
            "blog", "create", "-t", "10 Tips for Better AI Prompts", "-c", "Post body",
            "--as", "admin", db=db,
        )
        assert result.exit_code == 0
        assert "10-tips-for-better-ai-prompts" in result.output

        assert _invoke("blog", "show", "10-tips-for-better-ai-prompts", db=db).exit_code == 1

        drafts = json.loads(_invoke("blog", "list", "--all", "--json", db=db).stdout)
        blog_id = drafts[0]["id"]
        assert drafts[0]["publishedAt"] is None
        _invoke("blog", "update", blog_id, "--status", "published", "--as", "admin", db=db)

        shown = json.loads(
            _invoke("blog", "show", "10-tips-for-better-ai-prompts", "--json", db=db).stdout
        )
        assert shown["publishedAt"] is not None

    def test_duplicate_slug(self, tmp_path: Path) -> None:
        db = tmp_path / "test.db"
        _invoke("blog", "create", "-t", "Same", "-c", "x", "--as", "admin", db=db)
        result = _invoke("blog", "create", "-t", "Same", "-c", "y", "--as", "admin", db=db)
        assert result.exit_code == 1
        assert "already exists" in result.output


class TestFavoritesAndUsers:
    def test_toggle_and_list(self, tmp_path: Path) -> None:
        db = tmp_path / "test.db"
        prompt_id = _submit(db, "Favorite me")
        assert _invoke("favorite", "toggle", prompt_id, "--as", "fan", db=db).exit_code == 0
        listed = json.loads(_invoke("favorite", "list", "--as", "fan", "--json", db=db).stdout)
        assert [p["id"] for p in listed] == [prompt_id]
        _invoke("favorite", "toggle", prompt_id, "--as", "fan", db=db)
        listed = json.loads(_invoke("favorite", "list", "--as", "fan", "--json", db=db).stdout)
        assert listed == []

    def test_webhook_and_role(self, tmp_path: Path) -> None:
        db = tmp_path / "test.db"
        event = tmp_path / "event.json"
        event.write_text(
            json.dumps({"type": "user.created", "data": {"id": "user_9", "first_name": "Jo"}}),
            encoding="utf-8",
        )
        assert _invoke("user", "webhook", str(event), db=db).exit_code == 0
        assert _invoke("user", "role", "user_9", "admin", db=db).exit_code == 0
        me = json.loads(_invoke("user", "me", "--as", "user_9", db=db).stdout)
        assert me["name"] == "Jo"
        assert me["role"] == "admin"

    def test_ensure(self, tmp_path: Path) -> None:
        db = tmp_path / "test.db"
        result = _invoke("user", "ensure", "--name", "Lee", "--as", "user_7", db=db)
        assert result.exit_code == 0
        me = json.loads(_invoke("user", "me", "--as", "user_7", db=db).stdout)
        assert me["externalId"] == "user_7"
