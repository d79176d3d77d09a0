"""Tests for the framesaver CLI."""

import json
import logging

import pytest
from click.testing import CliRunner

from framesaver.cli import cli, parse_node_output
from framesaver.graph import NodeOutputRef

from graph_helpers import video_prompt


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.setenv("FRAMESAVER_LOGS_DIR", str(tmp_path / "logs"))
    yield CliRunner()
    logging.getLogger("framesaver").setLevel(logging.NOTSET)


@pytest.fixture
def prompt_file(tmp_path):
    path = tmp_path / "prompt.json"
    path.write_text(json.dumps(video_prompt(post_process=True)))
    return path


def invoke(runner, *args):
    return runner.invoke(cli, ["--no-pretty", "--no-log-file", *args])


class TestParseNodeOutput:
    def test_node_only(self):
        assert parse_node_output("30") == NodeOutputRef(node_id="30", slot=0)

    def test_node_and_slot(self):
        assert parse_node_output("30:1") == NodeOutputRef(node_id="30", slot=1)

    def test_none(self):
        assert parse_node_output(None) is None

    def test_invalid_slot(self):
        import click

        with pytest.raises(click.BadParameter):
            parse_node_output("30:x")


class TestApply:
    def test_no_options_outputs_unchanged_prompt(self, runner, prompt_file):
        result = invoke(runner, "apply", str(prompt_file))
        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == video_prompt(post_process=True)

    def test_save_first_and_range(self, runner, prompt_file):
        result = invoke(
            runner,
            "apply",
            str(prompt_file),
            "--save-first",
            "--range-start",
            "3",
            "--range-end",
            "5",
        )
        assert result.exit_code == 0, result.output
        prompt = json.loads(result.output)
        assert prompt["50000"]["class_type"] == "SwarmSaveImageWS"
        range_slice = prompt[prompt["50002"]["inputs"]["images"][0]]
        assert range_slice["inputs"] == {"batch_index": 3, "length": 3, "image": ["10", 0]}

    def test_save_last_counts_final_out(self, runner, prompt_file):
        result = invoke(runner, "apply", str(prompt_file), "--save-last", "--final-out", "30")
        assert result.exit_code == 0, result.output
        prompt = json.loads(result.output)
        counters = [n for n in prompt.values() if n["class_type"] == "SwarmCountFrames"]
        assert counters == [{"class_type": "SwarmCountFrames", "inputs": {"image": ["30", 0]}}]

    def test_wrapped_prompt_with_final_image_out(self, runner, tmp_path):
        path = tmp_path / "wrapped.json"
        path.write_text(
            json.dumps({"prompt": video_prompt(post_process=True), "final_image_out": ["30", 0]})
        )
        result = invoke(runner, "apply", str(path), "--save-last")
        prompt = json.loads(result.output)
        counter = next(n for n in prompt.values() if n["class_type"] == "SwarmCountFrames")
        assert counter["inputs"]["image"] == ["30", 0]

    def test_output_file(self, runner, prompt_file, tmp_path):
        out = tmp_path / "out.json"
        result = invoke(runner, "apply", str(prompt_file), "--save-first", "-o", str(out))
        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {"output_file": str(out), "nodes": 7}
        assert "50000" in json.loads(out.read_text())

    def test_missing_decode_exits_with_error(self, runner, tmp_path):
        path = tmp_path / "no_decode.json"
        path.write_text(json.dumps({"1": {"class_type": "EmptyImage", "inputs": {}}}))
        out = tmp_path / "out.json"

        result = invoke(runner, "apply", str(path), "--save-first", "-o", str(out))

        assert result.exit_code == 1
        assert "No VAEDecode nodes found" in result.output
        assert not out.exists()


class TestOptions:
    def test_lists_registered_options(self, runner):
        result = invoke(runner, "options")
        assert result.exit_code == 0, result.output
        ids = [o["id"] for o in json.loads(result.output)]
        assert ids == [
            "savefirstframe",
            "savelastframe",
            "saveframerangestart",
            "saveframerangeend",
        ]


class TestInvalidPromptFile:
    def test_non_object_json_is_a_usage_error(self, runner, tmp_path):
        path = tmp_path / "list.json"
        path.write_text(json.dumps([{"class_type": "VAEDecode"}]))

        result = invoke(runner, "apply", str(path), "--save-first")

        assert result.exit_code == 2
        assert "expected a JSON object, got list" in result.output
        assert not isinstance(result.exception, AttributeError)

    def test_missing_final_out_node_exits_with_error(self, runner, prompt_file, tmp_path):
        out = tmp_path / "out.json"
        result = invoke(
            runner,
            "apply",
            str(prompt_file),
            "--save-first",
            "--save-last",
            "--final-out",
            "999",
            "-o",
            str(out),
        )

        assert result.exit_code == 1
        assert "non-existent node '999'" in result.output
        assert not out.exists()
