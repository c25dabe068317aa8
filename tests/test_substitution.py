"""
Substitution engine tests

Tests replacement text construction (relocated, prefixed, inlined) and
span-based rewriting, including repeated identical statements and failures.
"""

from pathlib import Path

import pytest

from assetpal.lib.scanner import document_scan
from assetpal.lib.substitution import Substitutor
from assetpal.models import (
    Inline,
    RelocatedName,
    Resolution,
    ResolutionError,
    ResolutionRequest,
    UnresolvedDirectivesError,
)


def resolution_make(directive, outcome=None, error=None):
    request = ResolutionRequest(
        directive=directive,
        loadPath="./" + directive.resourceLocator,
        context=Path("."),
    )
    return Resolution(request=request, outcome=outcome, error=error)


def failure_make(directive):
    return resolution_make(
        directive,
        error=ResolutionError(directive.resourceLocator, "./" + directive.resourceLocator, FileNotFoundError()),
    )


class TestReplacementText:
    """Test how each outcome becomes replacement text"""

    def test_relocated_name_keeps_locator_directory(self):
        """images/logo.png relocated as logo.a1b2.png -> images/logo.a1b2.png"""
        scanned = document_scan("img(src=pal('images/logo.png'))")
        text = Substitutor().substitute(
            scanned.text, [resolution_make(scanned.directives[0], RelocatedName("logo.a1b2.png"))]
        )

        assert text == "img(src=images/logo.a1b2.png)"

    def test_output_path_prefix_replaces_directory(self):
        """Configured prefix wins over the locator's own directory"""
        scanned = document_scan("img(src=pal('images/deep/logo.png'))")
        text = Substitutor("dist/assets/").substitute(
            scanned.text, [resolution_make(scanned.directives[0], RelocatedName("logo.a1b2.png"))]
        )

        assert text == "img(src=dist/assets/logo.a1b2.png)"

    def test_locator_without_directory(self):
        """A bare file name is replaced by the bare relocated name"""
        scanned = document_scan("pal(logo.png)")
        text = Substitutor().substitute(
            scanned.text, [resolution_make(scanned.directives[0], RelocatedName("logo.a1b2.png"))]
        )

        assert text == "logo.a1b2.png"

    def test_inline_used_verbatim(self):
        """Inlined representations skip path recombination entirely"""
        scanned = document_scan("img(src=pal('images/dot.png'))")
        data_uri = "data:image/png;base64,iVBORw0KGgo="
        text = Substitutor("dist/assets/").substitute(
            scanned.text, [resolution_make(scanned.directives[0], Inline(data_uri))]
        )

        assert text == f"img(src={data_uri})"


class TestSpanRewriting:
    """Test positional replacement"""

    def test_identical_statements_replaced_in_place(self):
        """Each repeated statement receives its own outcome"""
        scanned = document_scan("a pal(x.png) b pal(x.png) c")
        first, second = scanned.directives
        text = Substitutor().substitute(
            scanned.text,
            [
                resolution_make(first, RelocatedName("x.1.png")),
                resolution_make(second, Inline("data:image/png;base64,AA")),
            ],
        )

        assert text == "a x.1.png b data:image/png;base64,AA c"

    def test_resolution_order_does_not_matter(self):
        """Resolutions may arrive in any order"""
        scanned = document_scan("pal(a.png)-pal(bb.png)")
        first, second = scanned.directives
        text = Substitutor().substitute(
            scanned.text,
            [
                resolution_make(second, RelocatedName("bb.long-hash.png")),
                resolution_make(first, RelocatedName("a.1.png")),
            ],
        )

        assert text == "a.1.png-bb.long-hash.png"

    def test_no_resolutions_leaves_text(self):
        """Nothing to substitute means nothing changes"""
        assert Substitutor().substitute("plain text", []) == "plain text"


class TestFailures:
    """Test aggregated failure reporting"""

    def test_all_failures_reported(self):
        """Every failing locator is listed, in document order"""
        scanned = document_scan("pal(a.png) pal(b.png) pal(c.png)")
        a, b, c = scanned.directives

        with pytest.raises(UnresolvedDirectivesError) as excinfo:
            Substitutor().substitute(
                scanned.text,
                [failure_make(c), resolution_make(b, RelocatedName("b.1.png")), failure_make(a)],
            )

        assert excinfo.value.locators == ["a.png", "c.png"]
        assert "2 directive(s)" in str(excinfo.value)

    def test_successful_siblings_still_substituted(self):
        """A failure does not prevent other replacements from reaching the output"""
        scanned = document_scan("pal(missing.png) pal(ok.png)")
        missing, ok = scanned.directives

        with pytest.raises(UnresolvedDirectivesError) as excinfo:
            Substitutor().substitute(
                scanned.text,
                [failure_make(missing), resolution_make(ok, RelocatedName("ok.1.png"))],
            )

        assert excinfo.value.output == "pal(missing.png) ok.1.png"
