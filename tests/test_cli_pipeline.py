"""
CLI pipeline tests

Runs the ProgramState stages (env_check -> documents_collect ->
documents_rewrite -> results_report) against temporary directories.
"""

import pytest
from pathlib import Path

from assetpal.__main__ import env_check, documents_collect, documents_rewrite, results_report
from assetpal.models import ProgramState, pipeline

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 24


@pytest.fixture
def site(tmp_path):
    """Input tree with one asset and one template"""
    inputdir = tmp_path / "in"
    (inputdir / "assets" / "images").mkdir(parents=True)
    (inputdir / "assets" / "images" / "logo.png").write_bytes(PNG_BYTES)
    (inputdir / "pages").mkdir()
    (inputdir / "pages" / "index.pug").write_text("img(src=pal('images/logo.png'))\n", encoding="utf-8")
    (inputdir / "pages" / "notes.txt").write_text("pal(images/logo.png)", encoding="utf-8")
    return inputdir, tmp_path / "out"


def state_make(inputdir: Path, outputdir: Path, **kwargs) -> ProgramState:
    return ProgramState(inputdir=inputdir, outputdir=outputdir, root="assets", inlineLimit=0, **kwargs)


class TestPipeline:
    """Test the full stage sequence"""

    def test_rewrites_matching_documents(self, site):
        inputdir, outputdir = site

        state = pipeline(
            state_make(inputdir, outputdir), env_check, documents_collect, documents_rewrite, results_report
        )

        assert state.rewriteResult["status"] is True
        assert state.rewriteResult["rewritten"] == 1
        assert [d.name for d in state.documents] == ["index.pug"]

        emitted = list((outputdir / "pages" / "images").iterdir())
        assert len(emitted) == 1
        rewritten = (outputdir / "pages" / "index.pug").read_text(encoding="utf-8")
        assert rewritten == f"img(src=images/{emitted[0].name})\n"
        assert not (outputdir / "pages" / "notes.txt").exists()

    def test_rewritten_reference_resolves(self, site):
        """The reference in a rewritten document names an emitted file"""
        inputdir, outputdir = site

        pipeline(state_make(inputdir, outputdir), env_check, documents_collect, documents_rewrite, results_report)

        rewritten = (outputdir / "pages" / "index.pug").read_text(encoding="utf-8")
        reference = rewritten.strip()[len("img(src="):-1]
        assert (outputdir / "pages" / reference).read_bytes() == PNG_BYTES

    def test_output_path_and_pattern(self, site):
        inputdir, outputdir = site

        state = pipeline(
            state_make(inputdir, outputdir, outputPath="/static", pattern="**/*.txt"),
            env_check,
            documents_collect,
            documents_rewrite,
            results_report,
        )

        assert [d.name for d in state.documents] == ["notes.txt"]
        rewritten = (outputdir / "pages" / "notes.txt").read_text(encoding="utf-8")
        assert rewritten.startswith("/static/logo.")

    def test_unresolved_directive_exits(self, site, capsys):
        inputdir, outputdir = site
        (inputdir / "pages" / "broken.pug").write_text("img(src=pal(missing.png))", encoding="utf-8")

        with pytest.raises(SystemExit) as excinfo:
            pipeline(
                state_make(inputdir, outputdir), env_check, documents_collect, documents_rewrite, results_report
            )

        assert excinfo.value.code == 1
        assert "missing.png" in capsys.readouterr().err
        assert (outputdir / "pages" / "index.pug").exists()
        assert not (outputdir / "pages" / "broken.pug").exists()

    def test_undecodable_document_is_reported(self, site, capsys):
        """A document that is not UTF-8 fails alone and is reported"""
        inputdir, outputdir = site
        (inputdir / "pages" / "bad.pug").write_bytes(b"p \xff\xfe bad\n")

        with pytest.raises(SystemExit) as excinfo:
            pipeline(
                state_make(inputdir, outputdir), env_check, documents_collect, documents_rewrite, results_report
            )

        assert excinfo.value.code == 1
        assert "bad.pug" in capsys.readouterr().err
        assert (outputdir / "pages" / "index.pug").exists()
        assert not (outputdir / "pages" / "bad.pug").exists()

    def test_rewrite_result_counts_unreadable_document(self, site):
        inputdir, outputdir = site
        (inputdir / "pages" / "bad.pug").write_bytes(b"p \xff\xfe bad\n")

        state = documents_rewrite(documents_collect(env_check(state_make(inputdir, outputdir))))

        assert state.rewriteResult["status"] is False
        assert state.rewriteResult["rewritten"] == 1
        [(document, failure)] = state.rewriteResult["failures"]
        assert document.endswith("bad.pug")
        assert isinstance(failure, UnicodeDecodeError)


class TestEnvCheck:
    """Test environment validation"""

    def test_missing_root_exits(self, tmp_path):
        state = ProgramState(inputdir=tmp_path, outputdir=tmp_path / "out", root="nowhere")

        with pytest.raises(SystemExit):
            env_check(state)

    def test_root_resolved_against_inputdir(self, site):
        inputdir, outputdir = site

        state = env_check(state_make(inputdir, outputdir))

        assert state.envOK is True
        assert state.rootDir == (inputdir / "assets").resolve()
        assert outputdir.is_dir()
