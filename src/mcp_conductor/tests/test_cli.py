"""
Tests for the command-line interface.
"""

import json
import pytest

from mcp_conductor.cli import create_parser, parse_args
from mcp_conductor.main import main

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Run the CLI from an empty directory so no project config is picked up."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CONDUCTOR_ENV", raising=False)
    return tmp_path


@pytest.fixture
def history_config(tmp_path):
    path = tmp_path / "conductor.yaml"
    path.write_text(
        "history:\n"
        f"  history_file: {tmp_path / 'history.json'}\n"
        f"  settings_file: {tmp_path / 'settings.json'}\n",
        encoding="utf-8",
    )
    return str(path)


class TestParser:
    """Test argument parsing."""

    def test_request_text(self):
        args = parse_args(["/quick", "--session", "s1", "--json"])

        assert args.text == "/quick"
        assert args.session == "s1"
        assert args.json is True

    def test_files_and_project_type(self):
        args = parse_args(["build it", "--files", "package.json", "src/App.tsx", "--project-type", "react"])

        assert args.files == ["package.json", "src/App.tsx"]
        assert args.project_type == "react"

    def test_feedback(self):
        args = parse_args(["--feedback", "req_1", "4"])
        assert args.feedback == ["req_1", "4"]

    def test_info_options_are_exclusive(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["--stats", "--list-providers"])

    def test_defaults(self):
        args = parse_args([])

        assert args.text is None
        assert args.config is None
        assert args.verbose is False


class TestRequests:
    """Test dispatching requests from the command line."""

    def test_quick_json(self, capsys):
        assert main(["/quick", "--json"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["config"]["providers"] == ["context7"]
        assert data["config"]["flags"] == ["--c7"]

    def test_human_output(self, capsys):
        assert main(["/db"]) == 0

        out = capsys.readouterr().out
        assert "--postgres --seq --c7 --memory --uc" in out
        assert "super-command" in out

    def test_context_options(self, capsys):
        assert main([
            "build the settings page", "--json",
            "--files", "package.json", "src/App.tsx", "public/index.html",
        ]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["config"]["mode"] == "auto-optimized"
        assert data["success"] is True

    def test_unknown_command_exits_zero(self, capsys):
        assert main(["/turbo"]) == 0
        assert "Unknown command: /turbo" in capsys.readouterr().out


class TestInformation:
    """Test catalog, status and statistics output."""

    def test_list_providers(self, capsys):
        assert main(["--list-providers"]) == 0

        out = capsys.readouterr().out
        assert "context7" in out
        assert "(default)" in out

    def test_list_providers_json(self, capsys):
        assert main(["--list-providers", "--json"]) == 0

        providers = json.loads(capsys.readouterr().out)["providers"]
        assert [p["id"] for p in providers][:2] == ["sequential", "context7"]

    def test_list_commands(self, capsys):
        assert main(["--list-commands"]) == 0
        assert "Super-commands:" in capsys.readouterr().out

    def test_stats(self, capsys):
        assert main(["--stats", "--json"]) == 0
        assert json.loads(capsys.readouterr().out)["history"]["total_usages"] == 0

    def test_status(self, capsys):
        assert main([]) == 0
        assert "MCP Conductor" in capsys.readouterr().out


class TestFeedbackCommand:
    """Test rating an earlier request across runs."""

    def test_feedback_round_trip(self, capsys, history_config):
        assert main(["/db", "--json", "--config", history_config]) == 0
        request_id = json.loads(capsys.readouterr().out)["request_id"]

        assert main(["--feedback", request_id, "2", "--config", history_config]) == 0
        assert "counted as failure" in capsys.readouterr().out

        assert main(["--stats", "--json", "--config", history_config]) == 0
        history = json.loads(capsys.readouterr().out)["history"]
        assert history["feedback_count"] == 1
        assert history["success_rate"] == 0.0

    def test_non_integer_rating(self, capsys):
        assert main(["--feedback", "req_1", "great"]) == 1
        assert "Rating must be an integer" in capsys.readouterr().err

    def test_out_of_range_rating(self, capsys):
        assert main(["--feedback", "req_1", "7"]) == 1


class TestStartupErrors:

    def test_missing_config_file(self, capsys):
        assert main(["/quick", "--config", "missing.yaml"]) == 1
        assert "Configuration error" in capsys.readouterr().err

    def test_corrupt_settings_file(self, capsys, tmp_path):
        settings = tmp_path / "settings.json"
        settings.write_text("{broken", encoding="utf-8")
        config = tmp_path / "conductor.yaml"
        config.write_text(f"history:\n  settings_file: {settings}\n", encoding="utf-8")

        assert main(["/quick", "--config", str(config)]) == 1
        assert "Configuration error" in capsys.readouterr().err
