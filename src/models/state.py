"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing transformation stages.
"""

from pathlib import Path
from argparse import Namespace
from typing import Any, Optional, Type, TypeVar, List, Dict, Callable
from dataclasses import dataclass, field


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the rewrite pipeline (state bus pattern).

    This dataclass carries all program state through the functional pipeline,
    with each stage adding new fields as the run progresses.

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, root, outputPath, funcName,
                   pattern, inlineLimit
        - env_check: rootDir, envOK
        - documents_collect: documents
        - documents_rewrite: rewriteResult
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Directory containing the documents to rewrite
        outputdir: Directory receiving rewritten documents and emitted assets
        verbosity: Logging verbosity level (1-3)
        root: Asset root directory (relative to inputdir unless absolute)
        outputPath: Optional prefix for relocated file names
        funcName: Optional directive function name override
        pattern: Optional glob selecting documents under inputdir
        inlineLimit: Optional override of the inline size limit in bytes
        envOK: Environment validation passed
        rootDir: Resolved asset root directory
        documents: Documents selected for rewriting
        rewriteResult: Rewrite summary (rewritten, directives, failures, status)
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    root: str = field(default="")
    outputPath: Optional[str] = field(default=None)
    funcName: Optional[str] = field(default=None)
    pattern: Optional[str] = field(default=None)
    inlineLimit: Optional[int] = field(default=None)

    # Pipeline state
    envOK: bool = field(default=False)
    rootDir: Path = field(default=Path("/"))
    documents: List[Path] = field(default_factory=list)
    rewriteResult: Optional[Dict[str, Any]] = field(default=None)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        Args:
            options: Parsed CLI arguments (root, outputPath, etc.)
            inputdir: Directory containing source documents
            outputdir: Directory for rewritten output

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        options_dict = vars(options)

        import dataclasses
        valid_fields = {f.name for f in dataclasses.fields(cls)}

        # Filter options_dict to only include fields that exist in ProgramState
        filtered_options = {k: v for k, v in options_dict.items() if k in valid_fields}

        merged_args = {**filtered_options, "inputdir": inputdir, "outputdir": outputdir}

        return cls(**merged_args)

    def copy(self: PS) -> PS:
        """
        Creates a shallow copy of the ProgramState instance.

        Returns:
            A new ProgramState instance.
        """
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProgramState) -> ProgramState that receives
    the output of the previous stage and returns a new state.

    Example:
        final_state = pipeline(
            initial_state,
            env_check,
            documents_collect,
            documents_rewrite,
            results_report
        )

    This is equivalent to:
        results_report(documents_rewrite(documents_collect(env_check(initial_state))))
    """
    from functools import reduce
    return reduce(lambda state, stage: stage(state), stages, initial_state)
