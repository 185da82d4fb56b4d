"""Unit tests for the compile and preview commands."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from filterbar.cli import cli

STATE = {
    "clauses": [
        {"field": "status", "operator": "is", "value": "active"},
        {"field": "type", "operator": "is", "value": "user", "logic": "OR"},
        {"field": "type", "operator": "is", "value": "admin", "logic": "AND"},
    ],
    "groups": [],
}


def _invoke(config: Path, *args: str, stdin: str | None = None):
    runner = CliRunner()
    return runner.invoke(cli, ["--no-color", "--config", str(config), *args], input=stdin)


class TestCompileCommand:
    def test_inline_expression(self, empty_config: Path) -> None:
        result = _invoke(
            empty_config, "compile", "--expr", "status is active", "--compact", "--query-only"
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == {"query": {"match": {"status": "active"}}}

    def test_compact_is_one_line(self, empty_config: Path) -> None:
        result = _invoke(
            empty_config, "compile", "-e", "a is 1 OR b is 2", "--compact", "--query-only"
        )
        assert result.exit_code == 0, result.output
        assert len(result.stdout.strip().splitlines()) == 1

    def test_state_file_with_preview(self, empty_config: Path, temp_dir: Path) -> None:
        state_path = temp_dir / "state.json"
        state_path.write_text(json.dumps(STATE))

        result = _invoke(empty_config, "compile", str(state_path))
        assert result.exit_code == 0, result.output
        lines = result.stdout.strip().splitlines()
        assert lines[-1] == "(status: active OR type: user) AND type: admin"
        query = json.loads("\n".join(lines[:-1]))
        assert query["query"]["bool"]["must"][1] == {"match": {"type": "admin"}}

    def test_reads_stdin(self, empty_config: Path) -> None:
        result = _invoke(
            empty_config, "compile", "-", "--query-only", stdin=json.dumps(STATE)
        )
        assert result.exit_code == 0, result.output
        assert "must" in json.loads(result.stdout)["query"]["bool"]

    def test_quiet_suppresses_preview(self, empty_config: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(
            cli,
            ["--no-color", "--quiet", "--config", str(empty_config), "compile", "-e", "a is x"],
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == {"query": {"match": {"a": "x"}}}

    def test_config_keyword_suffix(self, sample_config: Path) -> None:
        result = _invoke(sample_config, "compile", "-e", "code.raw is 200", "--query-only")
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == {"query": {"term": {"code.raw": "200"}}}

    def test_config_indent(self, sample_config: Path) -> None:
        result = _invoke(sample_config, "compile", "-e", "a is x", "--query-only")
        assert result.exit_code == 0, result.output
        assert result.stdout.startswith('{\n    "query"')

    def test_empty_expression_matches_all(self, empty_config: Path) -> None:
        result = _invoke(empty_config, "compile", "-e", "", "--compact")
        assert result.exit_code == 0, result.output
        lines = result.stdout.strip().splitlines()
        assert json.loads(lines[0]) == {"query": {"match_all": {}}}
        assert lines[1] == "(match all)"

    def test_no_input_is_usage_error(self, empty_config: Path) -> None:
        result = _invoke(empty_config, "compile")
        assert result.exit_code == 2

    def test_parse_error(self, empty_config: Path) -> None:
        result = _invoke(empty_config, "compile", "-e", "status is")
        assert result.exit_code == 1

    def test_malformed_json(self, empty_config: Path, temp_dir: Path) -> None:
        state_path = temp_dir / "broken.json"
        state_path.write_text("{not json")
        result = _invoke(empty_config, "compile", str(state_path))
        assert result.exit_code == 1

    def test_missing_file(self, empty_config: Path, temp_dir: Path) -> None:
        result = _invoke(empty_config, "compile", str(temp_dir / "nope.json"))
        assert result.exit_code == 1

    def test_badly_typed_state(self, empty_config: Path) -> None:
        state = {"clauses": [{"field": 5, "operator": "is", "value": "x"}]}
        result = _invoke(empty_config, "compile", "-", stdin=json.dumps(state))
        assert result.exit_code == 1
        assert "Traceback" not in result.output

    def test_invalid_config(self, temp_dir: Path) -> None:
        config_path = temp_dir / "bad.toml"
        config_path.write_text('[compiler]\ndefault_connector = "XOR"\n')
        result = _invoke(config_path, "compile", "-e", "a is 1")
        assert result.exit_code == 1

    def test_kibana_filters(self, empty_config: Path) -> None:
        result = _invoke(
            empty_config,
            "compile",
            "--kibana",
            "--compact",
            "-e",
            "status is_not 500 OR -env is prod",
        )
        assert result.exit_code == 0, result.output
        negated, disabled = json.loads(result.stdout)["filters"]
        assert negated == {
            "meta": {
                "type": "phrase",
                "field": "status",
                "params": {"query": 500},
                "negate": True,
                "disabled": False,
            },
            "query": {"term": {"status": 500}},
        }
        assert disabled["meta"]["disabled"] is True
        assert disabled["query"] == {"match": {"env": "prod"}}


class TestCompilerOverrides:
    def test_keyword_suffix_option(self, empty_config: Path) -> None:
        result = CliRunner().invoke(
            cli,
            [
                "--no-color",
                "--config",
                str(empty_config),
                "--keyword-suffix",
                ".raw",
                "compile",
                "-e",
                "code.raw is 200",
                "--query-only",
            ],
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == {"query": {"term": {"code.raw": "200"}}}

    def test_option_beats_config_file(self, sample_config: Path) -> None:
        result = CliRunner().invoke(
            cli,
            [
                "--config",
                str(sample_config),
                "--keyword-suffix",
                ".keyword",
                "compile",
                "-e",
                "code.raw is 200",
                "--query-only",
                "--compact",
            ],
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == {"query": {"term": {"code.raw": 200}}}

    def test_connector_option(self, empty_config: Path) -> None:
        state = {
            "clauses": [
                {"field": "a", "operator": "is", "value": "x"},
                {"field": "b", "operator": "is", "value": "y"},
            ]
        }
        result = CliRunner().invoke(
            cli,
            ["--no-color", "--config", str(empty_config), "--connector", "or", "preview", "-"],
            input=json.dumps(state),
        )
        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == "a: x OR b: y"

    def test_bad_connector_rejected(self, empty_config: Path) -> None:
        result = CliRunner().invoke(
            cli, ["--config", str(empty_config), "--connector", "XOR", "preview", "-e", "a is 1"]
        )
        assert result.exit_code == 2


class TestPreviewCommand:
    def test_preview_line(self, empty_config: Path) -> None:
        result = _invoke(empty_config, "preview", "-e", "a is 1 AND b is 2 OR c is 3")
        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == "(a: 1 AND b: 2) OR c: 3"

    def test_group_preview(self, empty_config: Path) -> None:
        result = _invoke(empty_config, "preview", "-e", "a is 1 OR (b is 2 AND c is 3)")
        assert result.stdout.strip() == "a: 1 OR (b: 2 AND c: 3)"

    def test_separators_table(self, empty_config: Path) -> None:
        result = _invoke(
            empty_config, "preview", "--separators", "-e", "a is 1 OR (b is 2 AND c is 3)"
        )
        assert result.exit_code == 0, result.output
        assert "Separators" in result.stdout
        assert "yes" in result.stdout

    def test_no_input(self, empty_config: Path) -> None:
        assert _invoke(empty_config, "preview").exit_code == 2

    def test_single_group(self, empty_config: Path, temp_dir: Path) -> None:
        state_path = temp_dir / "state.json"
        groups = [{"id": "g1", "type": "OR", "filterIndices": [1, 2]}]
        state_path.write_text(json.dumps({**STATE, "groups": groups}))
        result = _invoke(empty_config, "preview", "--group", "g1", str(state_path))
        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == "type: user OR type: admin"

    def test_unknown_group(self, empty_config: Path) -> None:
        result = _invoke(empty_config, "preview", "--group", "nope", "-e", "a is 1")
        assert result.exit_code == 1


class TestHelpCommand:
    def test_lists_commands(self, empty_config: Path) -> None:
        result = _invoke(empty_config, "help")
        assert result.exit_code == 0
        for name in ("compile", "preview", "operators", "init-config"):
            assert name in result.output

    def test_unknown_command(self, empty_config: Path) -> None:
        assert _invoke(empty_config, "help", "frobnicate").exit_code == 1
