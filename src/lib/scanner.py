r"""
Scanner for name(path) resource directives

Walks document text once, left to right, and extracts every resource
directive together with its exact span.

The scanner is a small state machine carrying its own cursor:

    IDLE --name( found--> MATCHED_NAME --not inside identifier--> AWAITING_ARGUMENT
      ^                        |                                        |
      |                        +-- part of identifier: skip ---------- |
      +---- malformed: skip <------------------------------------------+
      +---- emit / unescape <-- ARGUMENT_CAPTURED <----- ")" found -----+

The source text is never mutated. Output is built as a sequence of copied
spans so that removing an escape marker (\pal(...)) does not disturb the
offsets of anything already recorded.

Example:
    >>> result = Scanner("img(src=pal('a/logo.png'))").scan()
    >>> result.directives[0].resourceLocator
    'a/logo.png'
    >>> result.directives[0].rawStatement
    "pal('a/logo.png')"
"""

import re
from typing import List, Optional

from ..config import appsettings
from ..models.directives import Directive, ScanResult, ScanState
from .log import LOG

ESCAPE_MARKER = "\\"
QUOTES = ("'", '"')
# A name token right after one of these belongs to something else
# (identifier, member access, template variable, hyphenated attribute name),
# not to a directive call.
IDENTIFIER_EXTRAS = ("_", ".", "$", "-")


class Scanner:
    r"""
    Directive scanner for a single document

    Handles:
    - Case-insensitive name matching (pal(, PAL(, Pal()
    - Quoted and unquoted arguments
    - Backslash escaping of whole statements (\pal(x) -> pal(x) literally)
    - Backslash escaping of parentheses inside arguments (pal(a\)b.png))
    - Silent skipping of malformed candidates
    """

    def __init__(self, source: str, funcName: Optional[str] = None):
        """
        Initialize scanner with document text

        Args:
            source: Document text to scan
            funcName: Directive function name (default from settings)

        Attributes:
            source: Original, never modified, document text
            funcName: Directive function name
            position: Cursor into source where the next search starts
            state: Current ScanState
            copied: Index in source up to which text has been emitted
            chunks: Emitted output spans
            emitted: Total length of emitted output
            directives: Directives found so far
        """
        self.source = source
        self.funcName = funcName or appsettings.func_name
        self.namePattern = re.compile(re.escape(self.funcName) + r"\(", re.IGNORECASE)
        self.position = 0
        self.state = ScanState.IDLE
        self.copied = 0
        self.chunks: List[str] = []
        self.emitted = 0
        self.directives: List[Directive] = []

    def scan(self) -> ScanResult:
        """
        Scan the whole document

        Returns:
            ScanResult with the escape-free text and ordered directives.
            A document without directives comes back unchanged.
        """
        self.position = 0
        self.copied = 0
        self.chunks = []
        self.emitted = 0
        self.directives = []
        escapes = 0

        while True:
            self.state = ScanState.IDLE
            name_start = self.name_find()
            if name_start is None:
                break

            self.state = ScanState.MATCHED_NAME
            arg_start = name_start + len(self.funcName) + 1
            if self.identifier_continues(name_start):
                LOG(f"Skipping '{self.funcName}(' inside identifier at {name_start}", level=3)
                self.position = arg_start
                continue

            self.state = ScanState.AWAITING_ARGUMENT
            close = self.argument_verify(arg_start)
            if close is None:
                LOG(f"Skipping malformed '{self.funcName}(' at {name_start}", level=3)
                self.position = arg_start
                continue

            self.state = ScanState.ARGUMENT_CAPTURED
            if name_start > 0 and self.source[name_start - 1] == ESCAPE_MARKER:
                # Drop the marker, keep the statement as literal text
                self.span_copy(name_start - 1)
                self.copied = name_start
                escapes += 1
                LOG(f"Unescaped literal statement at {name_start}", level=3)
            else:
                self.directive_emit(name_start, arg_start, close)
            self.position = close + 1

        self.span_copy(len(self.source))
        LOG(
            f"Scanned {len(self.source)} characters: "
            f"{len(self.directives)} directive(s), {escapes} escaped",
            level=2,
        )
        return ScanResult(text="".join(self.chunks), directives=self.directives)

    def name_find(self) -> Optional[int]:
        """
        Find the next "<funcName>(" token from the cursor

        Returns:
            Index of the token's first character, or None when exhausted
        """
        match = self.namePattern.search(self.source, self.position)
        if match is None:
            return None
        return match.start()

    def identifier_continues(self, name_start: int) -> bool:
        """True if the name token is the tail of a longer identifier (e.g., "mypal(")"""
        if name_start == 0:
            return False
        previous = self.source[name_start - 1]
        return previous.isalnum() or previous in IDENTIFIER_EXTRAS

    def argument_verify(self, arg_start: int) -> Optional[int]:
        r"""
        Verify the argument following "<funcName>(" and find its ")"

        A valid argument is at least one character long, stays on one line,
        contains no unescaped "(" and is closed by an unescaped ")".
        "\(" and "\)" are accepted as literal parentheses. When the line
        ends, or an unescaped "(" follows, without an unescaped ")", the
        last "\)" closes the argument and its backslash stays in the
        locator (pal(dir\) -> "dir\").

        Args:
            arg_start: Index just after the opening parenthesis

        Returns:
            Index of the closing parenthesis, or None if malformed
        """
        pos = arg_start
        fallback = None
        while pos < len(self.source):
            char = self.source[pos]
            if char == "\n":
                return fallback
            if char == ESCAPE_MARKER and self.source[pos + 1:pos + 2] in ("(", ")"):
                if self.source[pos + 1] == ")":
                    fallback = pos + 1
                pos += 2
                continue
            if char == "(":
                return fallback
            if char == ")":
                return pos if pos > arg_start else None
            pos += 1
        return fallback

    def directive_emit(self, name_start: int, arg_start: int, close: int) -> None:
        """Copy pending text, then record and copy the directive statement"""
        self.span_copy(name_start)
        raw_statement = self.source[name_start:close + 1]
        start = self.emitted
        self.chunks.append(raw_statement)
        self.emitted += len(raw_statement)
        self.copied = close + 1

        directive = Directive(
            rawStatement=raw_statement,
            resourceLocator=locator_extract(self.source[arg_start:close]),
            sourceOffset=name_start,
            start=start,
            end=self.emitted,
        )
        self.directives.append(directive)
        LOG(f"Directive {directive.rawStatement} -> '{directive.resourceLocator}'", level=3)

    def span_copy(self, upto: int) -> None:
        """Emit source text between the copy mark and upto"""
        if upto > self.copied:
            chunk = self.source[self.copied:upto]
            self.chunks.append(chunk)
            self.emitted += len(chunk)
        self.copied = max(self.copied, upto)


def locator_extract(raw_argument: str) -> str:
    """
    Turn a raw directive argument into a resource locator

    Unescapes "\\(" and "\\)", then strips one leading and one trailing
    quote, each independently.

    Example:
        >>> locator_extract("'images/logo.png'")
        'images/logo.png'
        >>> locator_extract('"a.png')
        'a.png'
        >>> locator_extract("''")
        ''
    """
    locator = raw_argument.replace("\\(", "(").replace("\\)", ")")
    if locator[:1] in QUOTES:
        locator = locator[1:]
    if locator[-1:] in QUOTES:
        locator = locator[:-1]
    return locator


def document_scan(source: str, funcName: Optional[str] = None) -> ScanResult:
    """Convenience wrapper: scan source with a fresh Scanner"""
    return Scanner(source, funcName).scan()
