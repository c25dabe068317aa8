#!/usr/bin/env python3
"""
assetpal - resource directive rewriter

Rewrites every template under an input directory, replacing pal(path)
directives with references to content-addressed copies of the named assets
(or with data URIs for small images), and writes the results to an output
directory.

As with other ChRIS "plugin" style apps, the CLI takes positional inputdir
and outputdir arguments.

Usage:
    assetpal inputdir/ outputdir/ --root assets

Examples:
    # Rewrite all .pug files, assets live in inputdir/assets
    assetpal templates/ build/ --root assets

    # Point every relocated asset at a fixed public prefix
    assetpal templates/ build/ --root assets --outputPath /static/

    # Custom directive name, html documents, no inlining
    assetpal src/ build/ --root img --funcName asset --pattern "**/*.html" --inlineLimit 0 -vv
"""

import sys
import asyncio
from pathlib import Path
from typing import Any, Dict, List
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

from chris_plugin import chris_plugin
from .config import appsettings
from .lib import AssetLoader, FileSystemResolver, __version__, LOG, state_connectToLogger
from .models import ProgramState, pipeline, LoaderOptions, OptionsError, UnresolvedDirectivesError


DISPLAY_TITLE = r"""
                       _               _
   __ _ ___ ___  ___| |_ _ __   __ _| |
  / _` / __/ __|/ _ \ __| '_ \ / _` | |
 | (_| \__ \__ \  __/ |_| |_) | (_| | |
  \__,_|___/___/\___|\__| .__/ \__,_|_|
                        |_|
  Resource directive rewriter
"""

# Define CLI arguments
parser = ArgumentParser(
    description="assetpal - rewrite pal(path) resource directives into asset references",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--root",
    required=True,
    type=str,
    help="Asset root directory that directive paths are relative to (relative to inputdir unless absolute)",
)

parser.add_argument(
    "--outputPath",
    default=None,
    type=str,
    help="Prefix used for relocated assets instead of the directive's own directory",
)

parser.add_argument(
    "--funcName",
    default=None,
    type=str,
    help=f"Directive function name (default: {appsettings.func_name})",
)

parser.add_argument(
    "--pattern",
    default=None,
    type=str,
    help=f"Glob selecting documents under inputdir (default: {appsettings.document_pattern})",
)

parser.add_argument(
    "--inlineLimit",
    default=None,
    type=int,
    help=f"Largest image size in bytes to inline as a data URI (default: {appsettings.inline_limit})",
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
    Validate the asset root and prepare the output directory.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - rootDir: Resolved asset root directory
            - envOK: True if environment is valid

    Exits:
        1 if the asset root does not exist
    """

    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2)

    LOG("Checking environment...", level=2)

    root = Path(state.root)
    if not root.is_absolute():
        root = state.inputdir / root

    if not root.is_dir():
        print(f"Error: Asset root not found: {root}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    state.rootDir = root.resolve()
    LOG(f"Asset root: {state.rootDir}", level=2)

    state.outputdir.mkdir(parents=True, exist_ok=True)
    LOG(f"Output directory: {state.outputdir}", level=2)

    state.envOK = True
    return state


def documents_collect(inputstate: ProgramState) -> ProgramState:
    """
    Select the documents to rewrite.

    Returns:
        ProgramState with added field:
            - documents: Sorted list of matching files under inputdir
    """

    state = inputstate.copy()

    pattern = state.pattern or appsettings.document_pattern
    state.documents = sorted(path for path in state.inputdir.glob(pattern) if path.is_file())
    LOG(f"Found {len(state.documents)} document(s) matching {pattern}", level=1)
    return state


async def document_rewrite(state: ProgramState, options: LoaderOptions, document: Path) -> Dict[str, Any]:
    """
    Rewrite a single document into outputdir, returning its summary entry

    Relocated assets are emitted next to the rewritten document, under the
    directive's own directory, so default references resolve in the output
    tree. With --outputPath they are emitted flat into outputdir.

    Read, decode and write errors are reported as failures of this document
    and never abort its siblings.
    """
    target = state.outputdir / document.relative_to(state.inputdir)
    if state.outputPath is None:
        resolver = FileSystemResolver(target.parent, inlineLimit=state.inlineLimit)
    else:
        resolver = FileSystemResolver(state.outputdir, inlineLimit=state.inlineLimit, preserveDirs=False)
    loader = AssetLoader(options, resolver, context=document.parent.resolve())

    try:
        source = document.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        LOG(f"Error reading {document}: {e}", level=1, severity="ERROR")
        return {"document": str(document), "status": False, "failures": [e]}

    try:
        output = await loader.process(source)
    except UnresolvedDirectivesError as e:
        return {"document": str(document), "status": False, "failures": e.failures}

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(output, encoding="utf-8")
    except OSError as e:
        LOG(f"Error writing {target}: {e}", level=1, severity="ERROR")
        return {"document": str(document), "status": False, "failures": [e]}

    LOG(f"Wrote {target}", level=2)
    return {"document": str(document), "status": True, "failures": []}


def documents_rewrite(inputstate: ProgramState) -> ProgramState:
    """
    Rewrite every collected document.

    Documents are processed concurrently; each one owns its own buffer and
    its own resolution run.

    Returns:
        ProgramState with added field:
            - rewriteResult: Dict containing:
                - status: bool (every document rewritten)
                - rewritten: int (documents written)
                - failures: List of (document, error) pairs; errors are
                  ResolutionError, or OSError/UnicodeDecodeError for
                  documents that could not be read or written

    Exits:
        1 if the loader options are invalid
    """

    state = inputstate.copy()

    try:
        options = LoaderOptions.options_fromDict(
            {
                "root": state.rootDir,
                "outputPath": state.outputPath,
                "funcName": state.funcName or appsettings.func_name,
            }
        )
    except OptionsError as e:
        print(f"Error: Invalid options: {e}", file=sys.stderr)
        sys.exit(1)

    LOG("Rewriting documents...", level=1)

    async def rewrite_all() -> List[Dict[str, Any]]:
        state_connectToLogger(state)
        return await asyncio.gather(
            *(document_rewrite(state, options, document) for document in state.documents)
        )

    entries = asyncio.run(rewrite_all())

    failures = [(entry["document"], failure) for entry in entries for failure in entry["failures"]]
    state.rewriteResult = {
        "status": not failures,
        "rewritten": sum(1 for entry in entries if entry["status"]),
        "failures": failures,
    }
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display rewrite results to the user.

    Returns:
        ProgramState unchanged (terminal pipeline stage)

    Exits:
        1 if any directive could not be resolved or any document
        could not be read or written
    """
    state: ProgramState = inputstate.copy()
    if state.rewriteResult is None:
        print("Error: Rewrite did not run", file=sys.stderr)
        sys.exit(1)

    LOG(f"Rewritten: {state.rewriteResult['rewritten']}/{len(state.documents)} document(s)", level=1)

    if not state.rewriteResult["status"]:
        for document, failure in state.rewriteResult["failures"]:
            print(f"Error: {document}: {failure}", file=sys.stderr)
        sys.exit(1)

    LOG(f"  Output: {state.outputdir}", level=1)
    return state


@chris_plugin(
    parser=parser,
    title="assetpal - resource directive rewriter",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - rewrite the resource directives of every document.

    Orchestrates the pipeline:
        1. env_check: Validate asset root, create output directory
        2. documents_collect: Select documents under inputdir
        3. documents_rewrite: Scan, resolve and substitute each document
        4. results_report: Summarize and report unresolved directives

    Args:
        options: CLI arguments from argparse
        inputdir: Directory containing the documents
        outputdir: Directory receiving rewritten documents and assets

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    pipeline(state, env_check, documents_collect, documents_rewrite, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
