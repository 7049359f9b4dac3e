"""Tests for the task file parser."""

import textwrap

import pytest

from runorder.core.orchestrator import Orchestrator
from runorder.core.task import CompletionMode
from runorder.errors import ConfigurationError
from runorder.shell import DEFAULT_TIMEOUT
from runorder.taskfile import TaskDef, load_taskfile, parse_taskfile, register

SAMPLE = textwrap.dedent("""\
    defaults:
      timeout: 30
      cwd: build
    tasks:
      fetch: curl -sO https://example.com/data.csv
      unpack:
        run: tar xf data.tar
        deps: fetch
      build:
        run: make all
        deps: [fetch, unpack]
        timeout: 600
        cwd: src
""")


class TestParseTaskfile:
    def test_full_file(self):
        defs = parse_taskfile(SAMPLE)
        assert [d.name for d in defs] == ["fetch", "unpack", "build"]
        assert defs[0] == TaskDef(
            name="fetch",
            command="curl -sO https://example.com/data.csv",
            deps=[],
            timeout=30.0,
            cwd="build",
        )
        assert defs[1].deps == ["fetch"]
        assert defs[2].deps == ["fetch", "unpack"]
        assert defs[2].timeout == 600.0
        assert defs[2].cwd == "src"

    def test_no_defaults(self):
        defs = parse_taskfile("tasks:\n  a: echo a\n")
        assert defs[0].timeout == DEFAULT_TIMEOUT
        assert defs[0].cwd is None

    def test_numeric_names_become_strings(self):
        defs = parse_taskfile("tasks:\n  1: echo one\n  2:\n    run: echo two\n    deps: [1]\n")
        assert [d.name for d in defs] == ["1", "2"]
        assert defs[1].deps == ["1"]

    @pytest.mark.parametrize(
        ("text", "match"),
        [
            ("tasks: [a, b]\n", "top-level 'tasks'"),
            ("just a string\n", "top-level 'tasks'"),
            ("tasks:\n  a: {deps: [b]}\n", "missing 'run'"),
            ("tasks:\n  a: 3\n", "expected a command"),
            ("tasks:\n  a: {run: x, deps: {b: 1}}\n", "'deps' must be"),
            ("tasks:\n  a: {run: x, timeout: soon}\n", "'timeout' must be"),
            ("tasks:\n  a: {run: x, retries: 3}\n", "unknown keys"),
            ("defaults: 3\ntasks:\n  a: x\n", "'defaults' must be"),
            ("tasks: [unclosed\n", "not valid YAML"),
        ],
    )
    def test_invalid(self, text, match):
        with pytest.raises(ConfigurationError, match=match):
            parse_taskfile(text)

    def test_error_names_task(self):
        with pytest.raises(ConfigurationError, match="'broken'"):
            parse_taskfile("tasks:\n  ok: echo\n  broken: {}\n")


class TestLoadAndRegister:
    def test_load_from_path(self, tmp_path):
        path = tmp_path / "tasks.yml"
        path.write_text(SAMPLE)
        assert len(load_taskfile(path)) == 3

    def test_register_adds_future_tasks(self):
        orch = register(Orchestrator(), parse_taskfile(SAMPLE))
        assert orch.tasks.names == ["fetch", "unpack", "build"]
        assert all(t.mode is CompletionMode.FUTURE for t in orch.tasks)
        assert orch.tasks["build"].dependencies == ("fetch", "unpack")
        assert orch.sequence("build") == ["fetch", "unpack", "build"]

    @pytest.mark.asyncio
    async def test_registered_tasks_run(self, tmp_path):
        text = textwrap.dedent(f"""\
            defaults:
              cwd: {tmp_path}
            tasks:
              second:
                run: echo second >> log.txt
                deps: [first]
              first: echo first >> log.txt
        """)
        orch = register(Orchestrator(), parse_taskfile(text))
        await orch.run_async("second")
        assert (tmp_path / "log.txt").read_text().split() == ["first", "second"]
