"""
Command pipeline tests

Runs the mdfx pipeline stages over temporary directories, the way the
mdfx command does after argument parsing.
"""

import hashlib
import json
from argparse import Namespace

import pytest

from mdfx.__main__ import (
    config_load,
    env_check,
    outputs_write,
    processor_make,
    results_report,
    sources_process,
)
from mdfx.lib.renderers import PlainTextRenderer
from mdfx.models import ProgramState, pipeline


STAGES = (env_check, config_load, sources_process, outputs_write, results_report)


@pytest.fixture
def project(tmp_path):
    inputdir = tmp_path / "in"
    (inputdir / "docs").mkdir(parents=True)
    (inputdir / "README.md").write_text(
        "# {{mathbold}}Hi{{/mathbold}}\n\n`{{kept}}`\n", encoding="utf-8"
    )
    (inputdir / "docs" / "guide.md").write_text("{{ui:swatch:accent/}}\n", encoding="utf-8")
    return inputdir, tmp_path / "out"


def state_make(inputdir, outputdir, **options) -> ProgramState:
    return ProgramState(inputdir=inputdir, outputdir=outputdir, verbosity=0, **options)


class TestState:
    """ProgramState helpers"""

    def test_from_namespace(self, tmp_path):
        """Only ProgramState fields are taken from the namespace"""
        options = Namespace(pattern="*.md", backend="svg", verbosity=2, unrelated=True)
        state = ProgramState.state_createFromNamespace(options, tmp_path, tmp_path / "out")
        assert state.pattern == "*.md"
        assert state.backend == "svg"
        assert state.inputdir == tmp_path
        assert not hasattr(state, "unrelated")

    def test_copy_is_independent(self, tmp_path):
        state = state_make(tmp_path, tmp_path)
        copied = state.copy()
        copied.backend = "plaintext"
        assert state.backend is None


class TestPipeline:
    """Full runs"""

    def test_all_files(self, project):
        inputdir, outputdir = project
        final = pipeline(state_make(inputdir, outputdir), *STAGES)
        assert final.writeResult["files"] == 2
        readme = (outputdir / "README.md").read_text(encoding="utf-8")
        assert readme == "# \U0001D407\U0001D422\n\n`{{kept}}`\n"
        guide = (outputdir / "docs" / "guide.md").read_text(encoding="utf-8")
        assert guide.startswith("![](https://img.shields.io/badge/")

    def test_single_file_plaintext(self, project):
        inputdir, outputdir = project
        state = state_make(inputdir, outputdir, inputFile="docs/guide.md", backend="plaintext")
        pipeline(state, *STAGES)
        assert (outputdir / "docs" / "guide.md").read_text(encoding="utf-8") == "[#F41C80]\n"
        assert not (outputdir / "README.md").exists()

    def test_svg_assets_written(self, project):
        inputdir, outputdir = project
        final = pipeline(state_make(inputdir, outputdir, backend="svg"), *STAGES)
        assert final.writeResult["assets"] == 1
        asset = final.assets[0]
        assert (outputdir / asset.relative_path).read_bytes() == asset.data

    def test_svg_manifest(self, project):
        """The asset manifest lists every asset with its sha256"""
        inputdir, outputdir = project
        final = pipeline(state_make(inputdir, outputdir, backend="svg"), *STAGES)
        manifest = json.loads((outputdir / "assets" / "manifest.json").read_text(encoding="utf-8"))
        asset = final.assets[0]
        assert manifest["assets"] == [
            {
                "path": asset.relative_path,
                "type": "swatch",
                "bytes": len(asset.data),
                "sha256": hashlib.sha256(asset.data).hexdigest(),
            }
        ]

    def test_no_manifest_without_assets(self, project):
        inputdir, outputdir = project
        pipeline(state_make(inputdir, outputdir), *STAGES)
        assert not (outputdir / "assets").exists()

    def test_outputdir_inside_inputdir(self, project):
        """Outputs written below inputdir are not read back as sources"""
        inputdir, _ = project
        outputdir = inputdir / "out"
        pipeline(state_make(inputdir, outputdir), *STAGES)
        rerun = env_check(state_make(inputdir, outputdir))
        assert sorted(p.relative_to(inputdir).as_posix() for p in rerun.sourceFiles) == [
            "README.md",
            "docs/guide.md",
        ]

    def test_project_config(self, project):
        """A .mdfx.yaml above the inputs supplies palette and backend"""
        inputdir, outputdir = project
        (inputdir / ".mdfx.yaml").write_text(
            "palette:\n  accent: '000000'\nbackend: plaintext\n", encoding="utf-8"
        )
        pipeline(state_make(inputdir, outputdir, inputFile="docs/guide.md"), *STAGES)
        assert (outputdir / "docs" / "guide.md").read_text(encoding="utf-8") == "[#000000]\n"

    def test_cli_backend_wins(self, project):
        inputdir, outputdir = project
        (inputdir / ".mdfx.yaml").write_text("backend: svg\n", encoding="utf-8")
        state = state_make(inputdir, outputdir, backend="plaintext")
        state = config_load(env_check(state))
        assert isinstance(processor_make(state).renderer, PlainTextRenderer)


class TestFailures:
    """Errors exit with status 1 and a diagnostic"""

    def test_missing_inputdir(self, tmp_path):
        with pytest.raises(SystemExit) as excinfo:
            env_check(state_make(tmp_path / "nope", tmp_path / "out"))
        assert excinfo.value.code == 1

    def test_missing_input_file(self, project):
        inputdir, outputdir = project
        with pytest.raises(SystemExit):
            env_check(state_make(inputdir, outputdir, inputFile="missing.md"))

    def test_no_matches(self, project):
        inputdir, outputdir = project
        with pytest.raises(SystemExit):
            env_check(state_make(inputdir, outputdir, pattern="*.txt"))

    def test_template_error(self, project, capsys):
        inputdir, outputdir = project
        (inputdir / "README.md").write_text("ok\n{{mathbold}}open", encoding="utf-8")
        with pytest.raises(SystemExit) as excinfo:
            pipeline(state_make(inputdir, outputdir, inputFile="README.md"), *STAGES)
        assert excinfo.value.code == 1
        stderr = capsys.readouterr().err
        assert "unclosed tag 'mathbold'" in stderr
        assert "Line 2, column 1" in stderr
        assert not (outputdir / "README.md").exists()

    def test_bad_config(self, project):
        inputdir, outputdir = project
        with pytest.raises(SystemExit):
            config_load(state_make(inputdir, outputdir, config=str(inputdir / "none.yaml")))

    def test_report_without_result(self, tmp_path):
        with pytest.raises(SystemExit):
            results_report(state_make(tmp_path, tmp_path))
