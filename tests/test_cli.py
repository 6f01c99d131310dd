"""Tests for the binchotan-filters CLI."""

import json
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from binchotan.cli.main import cli
from binchotan.models.error import ErrorCode


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def populated_repo(make_filter, repo: Path) -> Path:
    make_filter("dropper", script="return nil")
    make_filter("tagger", script='post.tag = "seen"\nreturn post')
    make_filter(
        "no-spam",
        script='if post.user.screen_name == "spam" then return nil end\nreturn post',
    )
    return repo


def _invoke(runner: CliRunner, repo: Path, *args: str, input: str | None = None):
    return runner.invoke(cli, ["--quiet", "-d", str(repo), *args], input=input)


class TestList:
    def test_lists_filters(self, runner: CliRunner, populated_repo: Path) -> None:
        result = _invoke(runner, populated_repo, "list")
        assert result.exit_code == 0, result.output
        listed = json.loads(result.output)
        assert [f["name"] for f in listed] == ["dropper", "no-spam", "tagger"]
        assert listed[0]["entrypoint"] == "main.lua"
        assert listed[0]["path"] == str(populated_repo / "dropper")

    def test_filters_dir_from_environment(self, runner: CliRunner, populated_repo: Path) -> None:
        result = runner.invoke(
            cli,
            ["--quiet", "list"],
            env={"BINCHOTAN_FILTERS_DIR": str(populated_repo)},
        )
        assert result.exit_code == 0, result.output
        assert len(json.loads(result.output)) == 3

    def test_human_format(self, runner: CliRunner, populated_repo: Path) -> None:
        result = _invoke(runner, populated_repo, "--format", "human", "list")
        assert result.exit_code == 0, result.output
        assert "dropper" in result.output
        assert "Total: 3" in result.output

    def test_broken_repository(self, runner: CliRunner, make_filter, repo: Path) -> None:
        make_filter("ghost", script=None)
        result = runner.invoke(cli, ["-d", str(repo), "list"])
        assert result.exit_code == 1
        assert f'"code": "{ErrorCode.IO_ERROR}"' in result.output


class TestRun:
    def test_keeps_and_drops(
        self,
        runner: CliRunner,
        populated_repo: Path,
        post_data: dict[str, Any],
    ) -> None:
        spam = {**post_data, "id": 2, "user": {"id": 7, "screen_name": "spam"}}
        lines = "\n".join(json.dumps(p) for p in (post_data, spam))
        result = _invoke(runner, populated_repo, "run", "no-spam", input=lines)
        assert result.exit_code == 0, result.output
        kept = json.loads(result.output)
        assert [p["id"] for p in kept] == [post_data["id"]]

    def test_json_array_input(
        self,
        runner: CliRunner,
        populated_repo: Path,
        post_data: dict[str, Any],
    ) -> None:
        result = _invoke(
            runner, populated_repo, "--format", "jsonl", "run", "tagger",
            input=json.dumps([post_data, post_data]),
        )
        assert result.exit_code == 0, result.output
        lines = [json.loads(line) for line in result.output.splitlines()]
        assert len(lines) == 2
        assert all(line["tag"] == "seen" for line in lines)

    def test_input_file(
        self,
        runner: CliRunner,
        populated_repo: Path,
        post_data: dict[str, Any],
        tmp_path: Path,
    ) -> None:
        input_file = tmp_path / "timeline.json"
        input_file.write_text(json.dumps(post_data), encoding="utf-8")
        result = _invoke(runner, populated_repo, "run", "dropper", str(input_file))
        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == []

    def test_summary_on_stderr(
        self,
        runner: CliRunner,
        populated_repo: Path,
        post_data: dict[str, Any],
    ) -> None:
        result = runner.invoke(
            cli,
            ["-d", str(populated_repo), "run", "dropper"],
            input=json.dumps(post_data),
        )
        assert result.exit_code == 0
        assert "1 posts (0 kept, 1 dropped, 0 failed)" in result.output

    def test_unknown_filter(
        self,
        runner: CliRunner,
        populated_repo: Path,
        post_data: dict[str, Any],
    ) -> None:
        result = _invoke(runner, populated_repo, "run", "missing", input=json.dumps(post_data))
        assert result.exit_code == 1
        assert ErrorCode.FILTER_NOT_FOUND in result.output

    def test_invalid_input(self, runner: CliRunner, populated_repo: Path) -> None:
        result = _invoke(runner, populated_repo, "run", "dropper", input="{not json")
        assert result.exit_code == 2
        assert ErrorCode.INVALID_INPUT in result.output

    def test_input_that_is_not_a_post(self, runner: CliRunner, populated_repo: Path) -> None:
        result = _invoke(runner, populated_repo, "run", "dropper", input='{"id": 1}')
        assert result.exit_code == 2

    def test_failing_filter_exits_non_zero(
        self,
        runner: CliRunner,
        make_filter,
        repo: Path,
        post_data: dict[str, Any],
    ) -> None:
        make_filter("broken", script="error('nope')")
        result = runner.invoke(
            cli,
            ["-d", str(repo), "run", "broken"],
            input=json.dumps(post_data),
        )
        assert result.exit_code == 1
        assert "nope" in result.output
