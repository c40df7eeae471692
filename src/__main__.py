#!/usr/bin/env python3
"""
mdfx - Template-macro compiler for decorated markdown

Expands {{tag}}...{{/tag}} markup in markdown files into Unicode-styled
text, decorative frames and rendered badges.

As an aside, this codebase leverages the ChRIS "plugin" concept/pattern as
general purpose python app development framework.

Philosophy:
    - Text-first: Sources stay readable markdown before processing
    - Strict by default: The first error aborts with a precise diagnostic
    - Code is sacred: Fenced and inline code pass through untouched
    - Deterministic: Same input and configuration, same bytes out

Usage:
    mdfx inputdir/ outputdir/ [--inputFile README.template.md] [--backend svg]

    Every selected markdown file is processed and written to outputdir/
    under the same relative path. File assets (svg backend) are written
    below outputdir/ as well, with a manifest.json listing their hashes.
    Files already below outputdir/ are never taken as sources.

Examples:
    # Process all markdown files
    mdfx docs/ build/

    # One file, plain text badges
    mdfx . out/ --inputFile README.template.md --backend plaintext

    # Verbose output
    mdfx docs/ build/ -vv
"""

import sys
import json
import hashlib
from pathlib import Path
from typing import List
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

from chris_plugin import chris_plugin
from .lib import Processor, Registry, MdfxError, error_format, renderer_create, __version__, LOG, state_connectToLogger
from .config import appsettings, ProjectConfig
from .models import FileAsset, ProgramState, pipeline


DISPLAY_TITLE = r"""
                 _  __
   _ __ ___   __| |/ _|_  __
  | '_ ` _ \ / _` | |_\ \/ /
  | | | | | | (_| |  _|>  <
  |_| |_| |_|\__,_|_| /_/\_\

  Template-macro compiler for decorated markdown
"""

# Define CLI arguments
parser = ArgumentParser(
    description="mdfx - Template-macro compiler for decorated markdown",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--inputFile",
    default="",
    type=str,
    help="Single markdown file to process (relative to inputdir); overrides --pattern",
)

parser.add_argument(
    "--pattern",
    default="**/*.md",
    type=str,
    help="Glob selecting markdown files within inputdir",
)

parser.add_argument(
    "--backend",
    default=None,
    choices=["shields", "plaintext", "svg"],
    help="Renderer for badges and color blocks (default: MDFX_DEFAULT_BACKEND or shields)",
)

parser.add_argument(
    "--context",
    default=None,
    choices=["inline", "block", "frame_chrome"],
    help="Evaluation context of document text (default: MDFX_DEFAULT_CONTEXT or block)",
)

parser.add_argument(
    "--config",
    default=None,
    type=str,
    help="Project configuration file (default: nearest .mdfx.yaml above inputdir)",
)

parser.add_argument(
    "--highlight",
    action="store_true",
    help="Colorize the source context of error diagnostics",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate environment and resolve the source files.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - sourceFiles: Markdown files to process
            - envOK: True if environment is valid

    Exits:
        1 if the input directory, input file, or any matching source is missing
    """

    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2, stage="env")

    LOG("Checking environment...", level=2, stage="env")

    if not state.inputdir.is_dir():
        print(f"Error: Input directory not found: {state.inputdir}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    if state.inputFile:
        input_file = state.inputdir / state.inputFile
        if not input_file.is_file():
            print(f"Error: Input file not found: {input_file}", file=sys.stderr)
            state.envOK = False
            sys.exit(1)
        state.sourceFiles = [input_file]
    else:
        outputroot = state.outputdir.resolve()
        state.sourceFiles = sorted(
            p
            for p in state.inputdir.glob(state.pattern)
            if p.is_file() and not p.resolve().is_relative_to(outputroot)
        )

    if not state.sourceFiles:
        print(f"Error: No files match '{state.pattern}' in {state.inputdir}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    LOG(f"Sources: {len(state.sourceFiles)} file(s)", level=2, stage="env")

    state.outputdir.mkdir(parents=True, exist_ok=True)
    LOG(f"Output directory: {state.outputdir}", level=2, stage="env")

    state.envOK = True
    return state


def config_load(inputstate: ProgramState) -> ProgramState:
    """
    Load the project configuration.

    Uses --config when given, otherwise the nearest project configuration
    file at or above inputdir (an empty configuration when there is none).

    Returns:
        ProgramState with added field:
            - projectConfig: ProjectConfig

    Exits:
        1 if the configuration file is missing or invalid
    """

    state = inputstate.copy()

    LOG("Loading project configuration...", level=2, stage="config")
    try:
        if state.config:
            state.projectConfig = ProjectConfig.load(Path(state.config))
        else:
            state.projectConfig = ProjectConfig.discover(
                state.inputdir, appsettings.project_config_name
            )
    except MdfxError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    if state.projectConfig.path:
        LOG(f"Configuration: {state.projectConfig.path}", level=2, stage="config")
    return state


def processor_make(state: ProgramState) -> Processor:
    """Build a Processor from settings, project configuration and CLI options"""
    project: ProjectConfig = state.projectConfig or ProjectConfig()
    backend = state.backend or project.backend or appsettings.default_backend
    context = state.context or project.context or appsettings.default_context
    processor = Processor(
        registry=Registry.builtin(partials=project.partials_asTemplates()),
        renderer=renderer_create(backend, appsettings.assets_dir),
        settings=appsettings,
        context=appsettings.context_make(context),
    )
    if project.palette:
        processor.extend_palette(project.palette)
    LOG(f"Backend: {backend}, context: {context}", level=2, stage="process")
    return processor


def sources_process(inputstate: ProgramState) -> ProgramState:
    """
    Expand every source file.

    Returns:
        ProgramState with added fields:
            - outputs: Processed text keyed by path relative to inputdir
            - assets: File assets collected across all sources

    Exits:
        1 on the first read or template error (with a diagnostic)
    """

    state = inputstate.copy()

    LOG("Processing sources...", level=1, stage="process")
    try:
        processor = processor_make(state)
    except MdfxError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    outputs = {}
    assets = []
    seen = set()
    for source_file in state.sourceFiles:
        relative = source_file.relative_to(state.inputdir)
        try:
            source = source_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            print(f"Error reading {source_file}: {e}", file=sys.stderr)
            sys.exit(1)

        try:
            output, file_assets = processor.process_with_assets(source)
        except MdfxError as e:
            print(f"{relative}: {error_format(source, e, color=state.highlight)}", file=sys.stderr)
            sys.exit(1)

        outputs[relative] = output
        for asset in file_assets:
            if asset.relative_path not in seen:
                seen.add(asset.relative_path)
                assets.append(asset)
        LOG(f"Processed {relative} ({len(source)} → {len(output)} chars)", level=2, stage="process")

    state.outputs = outputs
    state.assets = assets
    return state


MANIFEST_NAME = "manifest.json"


def manifest_build(assets: List[FileAsset]) -> str:
    """
    JSON listing of the written assets, in first-use order.

    Each entry carries the asset's path below outputdir, its primitive
    type (the file name up to the first ``_``), its size and sha256.
    """
    entries = [
        {
            "path": asset.relative_path,
            "type": Path(asset.relative_path).stem.split("_", 1)[0],
            "bytes": len(asset.data),
            "sha256": hashlib.sha256(asset.data).hexdigest(),
        }
        for asset in assets
    ]
    return json.dumps({"version": 1, "assets": entries}, indent=2, sort_keys=True) + "\n"


def outputs_write(inputstate: ProgramState) -> ProgramState:
    """
    Write processed files and assets below outputdir.

    Returns:
        ProgramState with added field:
            - writeResult: Dict with files, assets and outputdir

    Exits:
        1 if a file cannot be written
    """

    state = inputstate.copy()

    LOG("Writing outputs...", level=1, stage="write")
    try:
        for relative, text in state.outputs.items():
            target = state.outputdir / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding="utf-8")
            LOG(f"Wrote {target}", level=3, stage="write")
        for asset in state.assets:
            target = state.outputdir / asset.relative_path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(asset.data)
            LOG(f"Wrote {target}", level=3, stage="write")
        if state.assets:
            target = state.outputdir / (appsettings.assets_dir.strip("/") or ".") / MANIFEST_NAME
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(manifest_build(state.assets), encoding="utf-8")
            LOG(f"Wrote {target}", level=2, stage="write")
    except OSError as e:
        print(f"Error writing output: {e}", file=sys.stderr)
        sys.exit(1)

    state.writeResult = {
        "files": len(state.outputs),
        "assets": len(state.assets),
        "outputdir": str(state.outputdir),
    }
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display a summary of what was written.

    Returns:
        ProgramState unchanged (terminal pipeline stage)

    Exits:
        1 if writeResult is None
    """
    state: ProgramState = inputstate.copy()
    if not state.writeResult:
        print("Error: Processing failed", file=sys.stderr)
        sys.exit(1)

    if state.verbosity >= 1:
        LOG("\n✓ Processing successful!", level=1, stage="report")
        LOG(f"  Output: {state.writeResult['outputdir']}", level=1, stage="report")
        LOG(f"  Files:  {state.writeResult['files']}", level=1, stage="report")
        LOG(f"  Assets: {state.writeResult['assets']}", level=1, stage="report")
    return state


@chris_plugin(
    parser=parser,
    title="mdfx - Template-macro compiler for decorated markdown",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - expand mdfx templates in markdown sources.

    Orchestrates the full pipeline:
        1. env_check: Validate paths and select sources
        2. config_load: Read the project configuration
        3. sources_process: Expand templates in every source
        4. outputs_write: Write processed files and assets
        5. results_report: Display results to user

    Args:
        options: CLI arguments from argparse
        inputdir: Directory containing markdown sources
        outputdir: Directory where processed files will be written

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    pipeline(state, env_check, config_load, sources_process, outputs_write, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
