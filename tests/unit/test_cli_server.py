"""Unit tests for the API server launcher."""

from unittest.mock import MagicMock, patch

import pytest

from cli import server


@pytest.fixture(autouse=True)
def store_env(monkeypatch, tmp_path):
    """Pin the store variables so the launcher's exports are undone after each test."""
    monkeypatch.setenv("MTG_RULES_STORE", "sqlite")
    monkeypatch.setenv("MTG_RULES_DB_PATH", str(tmp_path / "rules.db"))


class TestStoreOptions:
    def test_exports_store_and_db(self, tmp_path):
        import os

        args = server.build_parser().parse_args(["--store", "memory", "--db", str(tmp_path / "other.db")])
        server.apply_store_options(args)
        assert os.environ["MTG_RULES_STORE"] == "memory"
        assert os.environ["MTG_RULES_DB_PATH"] == str(tmp_path / "other.db")

    def test_memory_store_rejects_preload(self):
        args = server.build_parser().parse_args(["--preload"])
        assert "--preload" in server.check_options(args, "memory")
        assert server.check_options(args, "sqlite") is None

    def test_memory_store_rejects_workers(self):
        args = server.build_parser().parse_args(["--workers", "4"])
        assert "worker" in server.check_options(args, "memory")
        assert server.check_options(args, "sqlite") is None


class TestMain:
    """Tests for main() with uvicorn patched out."""

    def test_runs_app(self):
        with patch("uvicorn.run") as mock_run:
            server.main(["--port", "9000", "--workers", "3"])
        mock_run.assert_called_once_with(
            server.APP_PATH, host="127.0.0.1", port=9000, reload=False, workers=3
        )

    def test_reload_forces_one_worker(self):
        with patch("uvicorn.run") as mock_run:
            server.main(["--reload", "--workers", "3"])
        assert mock_run.call_args.kwargs["workers"] == 1

    def test_preload_builds_index_first(self):
        with patch.object(server, "build_index", return_value=MagicMock(message="Loaded")) as mock_build, \
                patch("uvicorn.run") as mock_run:
            server.main(["--preload"])
        mock_build.assert_called_once()
        mock_run.assert_called_once()

    def test_invalid_combination_exits(self):
        with patch("uvicorn.run") as mock_run, pytest.raises(SystemExit) as exc:
            server.main(["--store", "memory", "--workers", "2"])
        assert exc.value.code == 2
        mock_run.assert_not_called()
