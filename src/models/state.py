"""
Command state and the stage pipeline

The ``mdfx`` command is a chain of stages. Each stage takes a
ProgramState, copies it, fills in the fields it is responsible for and
hands the copy on; no stage mutates the state it was given.
"""

import dataclasses
from argparse import Namespace
from dataclasses import dataclass, field
from functools import reduce
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar


S = TypeVar("S", bound="ProgramState")
Stage = Callable[["ProgramState"], "ProgramState"]


@dataclass
class ProgramState:
    """
    Everything one ``mdfx`` run knows.

    Filled in by stage:
        command line     inputdir, outputdir, verbosity, inputFile, pattern,
                         backend, context, config, highlight
        env_check        sourceFiles, envOK
        config_load      projectConfig
        sources_process  outputs, assets
        outputs_write    writeResult

    Attributes:
        inputdir: Root of the markdown sources
        outputdir: Root receiving processed files and assets
        verbosity: 0 silent, 1 normal, 2 verbose, 3 trace
        inputFile: One source relative to inputdir; empty to use ``pattern``
        pattern: Glob selecting sources below inputdir
        backend: Renderer name; None defers to project config, then settings
        context: Document evaluation context; None defers likewise
        config: Explicit project configuration file
        highlight: Colorize the context line of diagnostics
        envOK: Paths checked and sources found
        sourceFiles: Sources in processing order
        projectConfig: The loaded ProjectConfig
        outputs: Expanded text keyed by path relative to inputdir
        assets: FileAssets collected across all sources, first use order
        writeResult: Counts of what was written
    """

    inputdir: Optional[Path] = None
    outputdir: Optional[Path] = None
    verbosity: int = 1
    inputFile: str = ""
    pattern: str = "**/*.md"
    backend: Optional[str] = None
    context: Optional[str] = None
    config: Optional[str] = None
    highlight: bool = False

    envOK: bool = False
    sourceFiles: List[Path] = field(default_factory=list)
    projectConfig: Optional[Any] = None
    outputs: Dict[Path, str] = field(default_factory=dict)
    assets: List[Any] = field(default_factory=list)
    writeResult: Optional[Dict[str, Any]] = None

    @classmethod
    def state_createFromNamespace(
        cls, options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Seed a state from parsed command-line options.

        Options that are not ProgramState fields (chris_plugin adds a few
        of its own) are dropped.
        """
        known = {f.name for f in dataclasses.fields(cls)}
        seeded = {key: value for key, value in vars(options).items() if key in known}
        seeded.update(inputdir=Path(inputdir), outputdir=Path(outputdir))
        return cls(**seeded)

    def copy(self: S) -> S:
        """Shallow copy; stages replace containers rather than edit them"""
        return dataclasses.replace(self)


def pipeline(initial_state: ProgramState, *stages: Stage) -> ProgramState:
    """
    Thread a state through ``stages`` left to right.

    Example:
        pipeline(state, env_check, config_load, sources_process,
                 outputs_write, results_report)
    """
    return reduce(lambda state, stage: stage(state), stages, initial_state)
