"""Tests for the generator orchestration and CLI (readme_generator.generator).

Tests cover:
- End-to-end README generation from .verb.md and package.json
- Idempotent reruns
- package.json ``verb`` configuration: views, layout, toc, data, plugins
- Acquisition outcomes: disabled, declined, created (in the cwd and in --dest)
- Raw blocks surviving both engine passes
- Failure reporting (TaskFailedError naming the task)
- CLI exit codes and option parsing
"""

from __future__ import annotations

import json
import textwrap
from pathlib import Path
from unittest.mock import patch

import pytest

from readme_generator.config import Config
from readme_generator.errors import ConfigError, TaskFailedError, UnknownTaskError
from readme_generator.generator import GenerationResult, ReadmeGenerator, load_plugin, main


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in (
        "README_GENERATOR_CWD",
        "README_GENERATOR_DEST",
        "README_GENERATOR_README",
        "README_GENERATOR_VERBMD",
        "README_GENERATOR_PIPELINE",
        "README_GENERATOR_VERBOSE",
    ):
        monkeypatch.delenv(var, raising=False)


def _generator(config: Config, prompts=None) -> ReadmeGenerator:
    if prompts is None:
        return ReadmeGenerator(config)
    return ReadmeGenerator(
        config, confirm=prompts.confirm, resolve_conflict=prompts.resolve_conflict
    )


# ---------------------------------------------------------------------------
# End-to-end
# ---------------------------------------------------------------------------

@pytest.mark.integration
class TestGenerate:
    @pytest.mark.asyncio
    async def test_generates_readme(self, config: Config):
        result = await _generator(config).generate()

        assert isinstance(result, GenerationResult)
        assert result.written == [config.output_path]
        assert result.acquisition == "load_existing"
        assert result.executed[:4] == ["options", "plugins", "middleware", "data"]
        assert result.executed[-2:] == ["readme", "default"]
        assert config.output_path.read_text(encoding="utf-8") == "# demo\n\n> A demo package.\n"

    @pytest.mark.asyncio
    async def test_rerun_is_identical(self, config: Config):
        await _generator(config).generate()
        first = config.output_path.read_bytes()

        await _generator(config).generate()

        assert config.output_path.read_bytes() == first
        readmes = [p for p in config.root.iterdir() if p.name.lower() == "readme.md"]
        assert len(readmes) == 1

    @pytest.mark.asyncio
    async def test_run_data_defaults(self, config: Config):
        generator = _generator(config)
        await generator.generate()
        data = generator.ctx.data
        assert data["prefix"] == "Copyright"
        assert data["verb"] == {}
        assert data["alias"] == "demo"
        assert data["repo"] == "octo/demo"
        assert "getting-started-guide" in data["links"]["generate"]["getting_started"]
        assert "bower" not in data

    @pytest.mark.asyncio
    async def test_bower_flag(self, config: Config):
        (config.root / "bower.json").write_text("{}")
        generator = _generator(config)
        await generator.generate()
        assert generator.ctx.data["bower"] is True

    @pytest.mark.asyncio
    async def test_generator_alias(self, demo_project: Path, write_pkg):
        write_pkg(demo_project, name="generate-foo-bar")
        (demo_project / ".verb.md").write_text("---\nlayout: false\n---\n{{ alias }}")
        await _generator(Config(cwd=demo_project, is_generator=True)).generate()
        assert (demo_project / "README.md").read_text(encoding="utf-8") == "fooBar"

    @pytest.mark.asyncio
    async def test_unknown_task(self, config: Config):
        with pytest.raises(UnknownTaskError):
            await _generator(config).generate("publish")

    @pytest.mark.asyncio
    async def test_layout_warning_reported(self, demo_project: Path):
        (demo_project / ".verb.md").write_text("# {{ name }}\n")
        result = await _generator(Config(cwd=demo_project)).generate()
        assert [w.filename for w in result.warnings] == [".verb.md"]

    @pytest.mark.asyncio
    async def test_raw_block_survives(self, demo_project: Path):
        (demo_project / ".verb.md").write_text(
            "---\nlayout: default\n---\n## Usage\n\n{% raw %}Write {{ name }} in templates.{% endraw %}\n"
        )

        await _generator(Config(cwd=demo_project)).generate()

        text = (demo_project / "README.md").read_text(encoding="utf-8")
        assert text.startswith("# demo")
        assert "Write {{ name }} in templates." in text


# ---------------------------------------------------------------------------
# package.json "verb" configuration
# ---------------------------------------------------------------------------

@pytest.mark.integration
class TestProjectConfiguration:
    @pytest.mark.asyncio
    async def test_views_override_layout(self, demo_project: Path, write_pkg):
        write_pkg(demo_project, verb={"views": {"layouts": {"default": "CUSTOM {{ name }}\n{{ body }}"}}})
        (demo_project / ".verb.md").write_text("---\nlayout: default\n---\nBODY\n")

        await _generator(Config(cwd=demo_project)).generate()

        assert (demo_project / "README.md").read_text(encoding="utf-8") == "CUSTOM demo\nBODY\n"

    @pytest.mark.asyncio
    async def test_project_layout_used_as_fallback(self, demo_project: Path, write_pkg):
        write_pkg(demo_project, verb={"layout": "framed", "views": {"layouts": {"framed": "<{{ body }}>"}}})
        (demo_project / ".verb.md").write_text("inner")

        result = await _generator(Config(cwd=demo_project)).generate()

        assert (demo_project / "README.md").read_text(encoding="utf-8") == "<inner>"
        assert result.warnings == []

    @pytest.mark.asyncio
    async def test_toc_enabled(self, demo_project: Path, write_pkg):
        write_pkg(demo_project, verb={"toc": True})
        (demo_project / ".verb.md").write_text(textwrap.dedent("""\
            ---
            layout: false
            ---
            # {{ name }}

            <!-- toc -->

            ## Install

            ## Usage
        """))

        await _generator(Config(cwd=demo_project)).generate()

        text = (demo_project / "README.md").read_text(encoding="utf-8")
        assert "- [Install](#install)" in text
        assert "- [Usage](#usage)" in text
        assert "TOC generated by" in text

    @pytest.mark.asyncio
    async def test_project_data_merged_last(self, demo_project: Path, write_pkg):
        write_pkg(demo_project, verb={"data": {"description": "Overridden."}})
        await _generator(Config(cwd=demo_project)).generate()
        assert "> Overridden." in (demo_project / "README.md").read_text(encoding="utf-8")

    @pytest.mark.asyncio
    async def test_plugin_loaded(self, demo_project: Path, write_pkg, tmp_path: Path, monkeypatch):
        plugin_dir = tmp_path / "plugins"
        plugin_dir.mkdir()
        (plugin_dir / "demo_readme_plugin.py").write_text(
            "def register(ctx):\n    ctx.data.merge({'extra': 'from plugin'})\n"
        )
        monkeypatch.syspath_prepend(str(plugin_dir))
        write_pkg(demo_project, verb={"plugins": ["demo_readme_plugin:register"]})
        (demo_project / ".verb.md").write_text("---\nlayout: false\n---\n{{ extra }}")

        await _generator(Config(cwd=demo_project)).generate()

        assert (demo_project / "README.md").read_text(encoding="utf-8") == "from plugin"

    @pytest.mark.asyncio
    async def test_invalid_package_json_fails_options(self, demo_project: Path):
        (demo_project / "package.json").write_text("{not json")
        with pytest.raises(TaskFailedError) as exc_info:
            await _generator(Config(cwd=demo_project)).generate()
        assert exc_info.value.task == "options"
        assert isinstance(exc_info.value.cause, ConfigError)
        assert not (demo_project / "README.md").exists()


class TestLoadPlugin:
    @pytest.mark.unit
    @pytest.mark.parametrize("spec", ["no-colon", "json:", "no_such_module_xyz:run", "json:nothing"])
    def test_bad_specs_rejected(self, spec: str):
        with pytest.raises(ConfigError):
            load_plugin(spec)

    @pytest.mark.unit
    def test_resolves_callable(self):
        assert load_plugin("json:dumps") is json.dumps


# ---------------------------------------------------------------------------
# Acquisition outcomes
# ---------------------------------------------------------------------------

@pytest.mark.integration
class TestAcquisition:
    @pytest.mark.asyncio
    async def test_disabled_without_source_is_not_an_error(self, tmp_project_dir: Path, write_pkg):
        write_pkg(tmp_project_dir)
        result = await _generator(Config(cwd=tmp_project_dir, verbmd=False)).generate()
        assert result.acquisition == "disabled"
        assert result.written == []
        assert not (tmp_project_dir / "README.md").exists()

    @pytest.mark.asyncio
    async def test_declined_prompt(self, tmp_project_dir: Path, prompts):
        prompts.answer = False
        result = await _generator(Config(cwd=tmp_project_dir), prompts).generate()
        assert result.acquisition == "declined"
        assert result.written == []
        assert prompts.questions

    @pytest.mark.asyncio
    async def test_accepted_prompt_scaffolds_then_renders(self, tmp_project_dir: Path, write_pkg, prompts):
        write_pkg(tmp_project_dir)

        result = await _generator(Config(cwd=tmp_project_dir), prompts).generate()

        assert result.acquisition == "created"
        assert (tmp_project_dir / ".verb.md").exists()
        text = (tmp_project_dir / "README.md").read_text(encoding="utf-8")
        assert text.startswith("# demo")
        assert "var demo = require('demo');" in text
        assert "## Install" in text

    @pytest.mark.asyncio
    async def test_accepted_prompt_with_dest(self, tmp_project_dir: Path, write_pkg, prompts):
        write_pkg(tmp_project_dir)
        config = Config(cwd=tmp_project_dir, dest=Path("out"))

        result = await _generator(config, prompts).generate()

        out = tmp_project_dir / "out"
        assert result.acquisition == "created"
        assert (out / ".verb.md").is_file()
        assert result.written == [config.output_path]
        assert (out / "README.md").read_text(encoding="utf-8").startswith("# demo")
        assert not (tmp_project_dir / "README.md").exists()

    @pytest.mark.asyncio
    async def test_new_task(self, tmp_project_dir: Path):
        result = await _generator(Config(cwd=tmp_project_dir)).generate("new")
        assert result.executed == ["new"]
        assert (tmp_project_dir / ".verb.md").is_file()
        assert not (tmp_project_dir / "README.md").exists()


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

class TestMain:
    @pytest.mark.integration
    def test_generates_readme(self, demo_project: Path):
        main(["--cwd", str(demo_project)])
        assert (demo_project / "README.md").read_text(encoding="utf-8").startswith("# demo")

    @pytest.mark.integration
    def test_failure_exits_1(self, demo_project: Path):
        (demo_project / "package.json").write_text("{not json")
        with pytest.raises(SystemExit) as exc_info:
            main(["--cwd", str(demo_project)])
        assert exc_info.value.code == 1

    @pytest.mark.integration
    def test_unknown_stage_exits_1(self, demo_project: Path):
        with pytest.raises(SystemExit) as exc_info:
            main(["--cwd", str(demo_project), "--pipeline", "toc,nope"])
        assert exc_info.value.code == 1

    @pytest.mark.unit
    def test_options_mapped_to_config(self, tmp_path: Path):
        captured: list[Config] = []

        class FakeGenerator:
            def __init__(self, config):
                captured.append(config)

            async def generate(self, task):
                return GenerationResult(task=task)

        with patch("readme_generator.generator.ReadmeGenerator", FakeGenerator):
            main([
                "new",
                "--cwd", str(tmp_path),
                "--dest", "out",
                "--no-verbmd",
                "--generator",
                "--pipeline", "toc, trailing-newline",
                "--strict-fragments",
            ])

        config = captured[0]
        assert config.cwd == tmp_path
        assert config.dest == Path("out")
        assert config.verbmd is False
        assert config.is_generator is True
        assert config.pipeline == ["toc", "trailing-newline"]
        assert config.missing_fragments == "strict"

    @pytest.mark.unit
    def test_unknown_task_rejected_by_parser(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["publish"])
        assert exc_info.value.code == 2
