"""
Directive data models

Structures produced by the scanner and consumed by the orchestrator and
substitution engine.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import List


class ScanState(Enum):
    """
    States of the directive scanner

    IDLE               -> searching for the next "<name>(" token
    MATCHED_NAME       -> name token found, checking its surroundings
    AWAITING_ARGUMENT  -> reading the argument up to the closing ")"
    ARGUMENT_CAPTURED  -> argument verified, directive ready to emit
    """
    IDLE = "idle"
    MATCHED_NAME = "matched_name"
    AWAITING_ARGUMENT = "awaiting_argument"
    ARGUMENT_CAPTURED = "argument_captured"


@dataclass(frozen=True)
class Directive:
    """
    One recognized resource directive, e.g. pal('images/logo.png')

    Attributes:
        rawStatement: Exact source text from the name token through ")"
        resourceLocator: Argument with one leading and one trailing quote removed
        sourceOffset: Index of the name token in the original document
        start: Index of rawStatement in the scanned text (escapes removed)
        end: Index one past the closing ")" in the scanned text

    Example:
        For source "img(src=pal('a/b.png'))":
        Directive(
            rawStatement="pal('a/b.png')",
            resourceLocator="a/b.png",
            sourceOffset=8,
            start=8,
            end=22
        )
    """
    rawStatement: str
    resourceLocator: str
    sourceOffset: int
    start: int
    end: int


@dataclass
class ScanResult:
    """
    Output of Scanner.scan()

    Attributes:
        text: Document text with escape markers removed; directive spans
              index into this text
        directives: Directives in document order
    """
    text: str
    directives: List[Directive] = field(default_factory=list)
