"""Tests for tool list parsing."""

import logging

from wsbox.core.tools import (
    ToolSpec,
    format_tool_list,
    load_tool_manifest,
    parse_tool_list,
)


class TestParseToolList:
    def test_empty_values(self):
        assert parse_tool_list(None) == []
        assert parse_tool_list("") == []
        assert parse_tool_list(" , ,") == []

    def test_pinned_and_latest(self):
        tools = parse_tool_list("python@3.12.8, nodejs ,jq@1.7")

        assert tools == [
            ToolSpec("python", "3.12.8"),
            ToolSpec("nodejs"),
            ToolSpec("jq", "1.7"),
        ]
        assert tools[0].pinned
        assert not tools[1].pinned

    def test_order_preserved(self):
        names = [tool.name for tool in parse_tool_list("c,a,b")]

        assert names == ["c", "a", "b"]

    def test_malformed_token_passes_through(self, caplog):
        with caplog.at_level(logging.WARNING, logger="wsbox.core.tools"):
            tools = parse_tool_list("python@,@1.0,ok")

        assert [str(tool) for tool in tools] == ["python@", "@1.0", "ok"]
        assert "python@" in caplog.text

    def test_version_keeps_extra_at_signs(self):
        tool = ToolSpec.parse("weird@1.0@beta")

        assert tool.name == "weird"
        assert tool.version == "1.0@beta"


class TestFormatToolList:
    def test_csv(self):
        tools = [ToolSpec("python", "3.12.8"), ToolSpec("nodejs")]

        assert format_tool_list(tools) == "python@3.12.8,nodejs"

    def test_empty(self):
        assert format_tool_list([]) == ""


class TestLoadToolManifest:
    def test_missing_file(self, tmp_path):
        assert load_tool_manifest(tmp_path / ".tool-versions") == []

    def test_reads_first_version(self, tmp_path):
        manifest = tmp_path / ".tool-versions"
        manifest.write_text(
            "# runtimes\n"
            "python 3.12.8 3.11.9\n"
            "\n"
            "nodejs 22.1.0  # lts\n"
            "terraform\n"
        )

        tools = load_tool_manifest(manifest)

        assert tools == [
            ToolSpec("python", "3.12.8"),
            ToolSpec("nodejs", "22.1.0"),
            ToolSpec("terraform"),
        ]
        assert format_tool_list(tools) == "python@3.12.8,nodejs@22.1.0,terraform"
