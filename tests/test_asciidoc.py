"""Tests for ort/reporter/asciidoc.py"""

import subprocess
import tempfile
from pathlib import Path

import pytest

from ort.reporter.asciidoc import (
    AsciidoctorConverter,
    AsciiDocTemplateOptions,
    AsciiDocTemplateReporter,
)
from ort.reporter.base import (
    ConversionError,
    OutputFileExistsError,
    ReporterInput,
    TemplateError,
    ThemeNotFoundError,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class FakeConverter(AsciidoctorConverter):
    """Records conversions and writes a placeholder target file."""

    def __init__(self, fail_on: str | None = None) -> None:
        super().__init__()
        self.calls: list[tuple[str, str, str, dict]] = []
        self.fail_on = fail_on

    def convert_file(self, source, target, backend, attributes=None):
        self.calls.append((source.name, target.name, backend, dict(attributes or {})))
        assert source.is_file()
        if self.fail_on and self.fail_on in source.name:
            raise ConversionError(f"Unable to convert '{source.name}' to '{target.name}'.")
        target.write_text(f"converted {source.name}", encoding="utf-8")


@pytest.fixture
def temp_root(tmp_path, monkeypatch) -> Path:
    """Redirect temporary directories so that leftovers can be inspected."""
    root = tmp_path / "tmp"
    root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(root))
    return root


@pytest.fixture
def reporter_input(ort_result) -> ReporterInput:
    return ReporterInput(ort_result=ort_result)


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------

def test_default_templates_without_advisor(reporter_input):
    parsed = AsciiDocTemplateOptions.parse({}, reporter_input)
    assert parsed.backend == "pdf"
    assert parsed.template_options == {"template.id": "disclosure_document"}


def test_default_templates_with_advisor(ort_result_with_advisor):
    parsed = AsciiDocTemplateOptions.parse({}, ReporterInput(ort_result=ort_result_with_advisor))
    assert parsed.template_options == {"template.id": "disclosure_document,vulnerability_report"}


def test_explicit_templates_replace_defaults(ort_result_with_advisor):
    parsed = AsciiDocTemplateOptions.parse({"template.path": "/x.j2"}, ReporterInput(ort_result=ort_result_with_advisor))
    assert parsed.template_options == {"template.path": "/x.j2"}


def test_theme_is_passed_as_attribute(reporter_input, tmp_path):
    theme = tmp_path / "theme.yml"
    theme.write_text("base: {}\n", encoding="utf-8")
    parsed = AsciiDocTemplateOptions.parse({"pdf-theme.path": str(theme)}, reporter_input)
    assert parsed.attributes == {"pdf-theme": str(theme.absolute())}


def test_theme_is_ignored_for_other_backends(reporter_input, tmp_path):
    parsed = AsciiDocTemplateOptions.parse(
        {"backend": "html", "pdf-theme.path": str(tmp_path / "missing.yml")}, reporter_input
    )
    assert parsed.attributes == {}


def test_unknown_option_is_logged(reporter_input, caplog):
    AsciiDocTemplateOptions.parse({"bakend": "html"}, reporter_input)
    assert "bakend" in caplog.text


# ---------------------------------------------------------------------------
# Report generation
# ---------------------------------------------------------------------------

def test_pdf_report(reporter_input, tmp_path, temp_root):
    converter = FakeConverter()
    out = tmp_path / "out"

    files = AsciiDocTemplateReporter(converter).generate_report(reporter_input, out, {})

    assert files == [out / "AsciiDoc_disclosure_document.pdf"]
    assert files[0].read_text(encoding="utf-8") == "converted AsciiDoc_disclosure_document.adoc"
    assert converter.calls == [
        ("AsciiDoc_disclosure_document.adoc", "AsciiDoc_disclosure_document.pdf", "pdf", {}),
    ]
    assert list(temp_root.iterdir()) == []


def test_one_output_per_template_with_advisor(ort_result_with_advisor, tmp_path, temp_root):
    converter = FakeConverter()
    files = AsciiDocTemplateReporter(converter).generate_report(
        ReporterInput(ort_result=ort_result_with_advisor), tmp_path, {"backend": "html"}
    )
    assert [f.name for f in files] == ["AsciiDoc_disclosure_document.html", "AsciiDoc_vulnerability_report.html"]
    assert [c[2] for c in converter.calls] == ["html", "html"]


def test_adoc_backend_keeps_rendered_files(reporter_input, tmp_path, temp_root):
    converter = FakeConverter()
    out = tmp_path / "out"

    files = AsciiDocTemplateReporter(converter).generate_report(reporter_input, out, {"backend": "adoc"})

    assert files == [out / "AsciiDoc_disclosure_document.adoc"]
    assert files[0].read_text(encoding="utf-8").startswith("= Disclosure Document")
    assert converter.calls == []
    assert list(temp_root.iterdir()) == []


def test_existing_output_file_is_kept(reporter_input, tmp_path, temp_root):
    converter = FakeConverter()
    out = tmp_path / "out"
    out.mkdir()
    existing = out / "AsciiDoc_disclosure_document.adoc"
    existing.write_text("USER DATA", encoding="utf-8")

    with pytest.raises(OutputFileExistsError, match="AsciiDoc_disclosure_document.adoc"):
        AsciiDocTemplateReporter(converter).generate_report(reporter_input, out, {"backend": "adoc"})

    assert existing.read_text(encoding="utf-8") == "USER DATA"
    assert list(temp_root.iterdir()) == []


def test_existing_converted_file_is_kept(reporter_input, tmp_path, temp_root):
    converter = FakeConverter()
    existing = tmp_path / "AsciiDoc_disclosure_document.html"
    existing.write_text("USER DATA", encoding="utf-8")

    with pytest.raises(OutputFileExistsError):
        AsciiDocTemplateReporter(converter).generate_report(reporter_input, tmp_path, {"backend": "html"})

    assert existing.read_text(encoding="utf-8") == "USER DATA"
    assert converter.calls == []


def test_force_overwrite_replaces_existing_file(ort_result, tmp_path, temp_root):
    existing = tmp_path / "AsciiDoc_disclosure_document.adoc"
    existing.write_text("USER DATA", encoding="utf-8")

    AsciiDocTemplateReporter(FakeConverter()).generate_report(
        ReporterInput(ort_result=ort_result, force_overwrite=True), tmp_path, {"backend": "adoc"}
    )

    assert existing.read_text(encoding="utf-8").startswith("= Disclosure Document")


def test_output_files_match_generated_files(ort_result_with_advisor, tmp_path, temp_root):
    reporter = AsciiDocTemplateReporter(FakeConverter())
    reporter_input = ReporterInput(ort_result=ort_result_with_advisor)

    planned = reporter.output_files(reporter_input, tmp_path, {"backend": "html"})

    assert planned == reporter.generate_report(reporter_input, tmp_path, {"backend": "html"})


def test_missing_theme_fails_before_any_output(reporter_input, tmp_path, temp_root):
    converter = FakeConverter()
    out = tmp_path / "out"
    theme = tmp_path / "missing-theme.yml"

    with pytest.raises(ThemeNotFoundError, match="Could not find pdf-theme file at"):
        AsciiDocTemplateReporter(converter).generate_report(reporter_input, out, {"pdf-theme.path": str(theme)})

    assert not out.exists()
    assert list(temp_root.iterdir()) == []
    assert converter.calls == []


def test_conversion_failure_removes_temp_dir(ort_result_with_advisor, tmp_path, temp_root):
    converter = FakeConverter(fail_on="vulnerability")

    with pytest.raises(ConversionError, match="AsciiDoc_vulnerability_report.adoc"):
        AsciiDocTemplateReporter(converter).generate_report(
            ReporterInput(ort_result=ort_result_with_advisor), tmp_path / "out", {}
        )

    assert list(temp_root.iterdir()) == []


def test_template_failure_removes_temp_dir(reporter_input, tmp_path, temp_root):
    with pytest.raises(TemplateError):
        AsciiDocTemplateReporter(FakeConverter()).generate_report(reporter_input, tmp_path / "out", {"template.id": "x"})

    assert list(temp_root.iterdir()) == []


# ---------------------------------------------------------------------------
# Asciidoctor invocation
# ---------------------------------------------------------------------------

def test_build_command_for_pdf():
    command = AsciidoctorConverter().build_command(
        Path("in.adoc"), Path("out.pdf"), "PDF", {"pdf-theme": "/themes/custom.yml"}
    )
    assert command == [
        "asciidoctor", "-r", "asciidoctor-pdf", "-b", "pdf", "-S", "unsafe", "-o", "out.pdf",
        "-a", "pdf-theme=/themes/custom.yml", "in.adoc",
    ]


def test_build_command_for_html():
    command = AsciidoctorConverter().build_command(Path("in.adoc"), Path("out.html"), "html", {})
    assert command == ["asciidoctor", "-b", "html", "-S", "unsafe", "-o", "out.html", "in.adoc"]


def test_convert_file_runs_asciidoctor(monkeypatch):
    calls = []

    def fake_run(command, **kwargs):
        calls.append((command, kwargs))
        return subprocess.CompletedProcess(command, 0, "", "")

    monkeypatch.setattr(subprocess, "run", fake_run)
    AsciidoctorConverter().convert_file(Path("in.adoc"), Path("out.html"), "html")

    assert calls[0][0][0] == "asciidoctor"
    assert calls[0][1]["check"] is True


def test_convert_file_missing_executable(monkeypatch):
    def fake_run(command, **kwargs):
        raise FileNotFoundError(command[0])

    monkeypatch.setattr(subprocess, "run", fake_run)
    with pytest.raises(ConversionError, match="'asciidoctor' executable was not found"):
        AsciidoctorConverter().convert_file(Path("in.adoc"), Path("out.pdf"), "pdf")


def test_convert_file_failing_executable(monkeypatch):
    def fake_run(command, **kwargs):
        raise subprocess.CalledProcessError(1, command, output="", stderr="asciidoctor: FAILED: bad input")

    monkeypatch.setattr(subprocess, "run", fake_run)
    with pytest.raises(ConversionError, match="in.adoc.*out.pdf.*bad input"):
        AsciidoctorConverter().convert_file(Path("in.adoc"), Path("out.pdf"), "pdf")
