"""Unit tests for the component factory."""

import pytest

from docgen.core.config import Settings
from docgen.core.factory import ComponentFactory
from docgen.interfaces.parser import ParseError
from docgen.strategies.dispatchers import LogDispatcher, SmtpDispatcher
from docgen.strategies.parsers import CsvTableParser, XlsTableParser, XlsxTableParser
from docgen.strategies.renderers import DocxRenderer, PdfRenderer
from docgen.template_engine.models import OutputKind


class TestComponentFactory:
    """Test suite for ComponentFactory."""

    @pytest.mark.parametrize(
        ("file_format", "parser_cls"),
        [("csv", CsvTableParser), (".XLSX", XlsxTableParser), ("xls", XlsTableParser)],
    )
    def test_get_parser(self, factory, file_format, parser_cls):
        assert isinstance(factory.get_parser(file_format), parser_cls)

    def test_unsupported_parser(self, factory):
        with pytest.raises(ParseError, match="Unsupported file format: txt"):
            factory.get_parser("txt")

    def test_get_renderer(self, factory):
        assert isinstance(factory.get_renderer("pdf"), PdfRenderer)
        assert isinstance(factory.get_renderer(OutputKind.DOCX), DocxRenderer)

    def test_default_renderer_from_settings(self, tmp_path):
        settings = Settings(
            upload_dir=tmp_path / "u",
            output_dir=tmp_path / "o",
            log_dir=tmp_path / "l",
            default_output_kind="docx",
        )
        assert isinstance(ComponentFactory(settings).get_renderer(), DocxRenderer)

    def test_unknown_renderer(self, factory):
        with pytest.raises(ValueError, match="Unknown output kind"):
            factory.get_renderer("odt")

    def test_get_dispatcher(self, factory):
        assert isinstance(factory.get_dispatcher(), LogDispatcher)
        assert isinstance(factory.get_dispatcher("smtp"), SmtpDispatcher)

    def test_unknown_dispatcher(self, factory):
        with pytest.raises(ValueError, match="Unknown dispatcher type"):
            factory.get_dispatcher("pigeon")

    def test_instances_are_cached(self, factory):
        """Test that repeated lookups reuse instances until the cache is cleared."""
        parser = factory.get_parser("csv")
        renderer = factory.get_renderer("pdf")

        assert factory.get_parser("CSV") is parser
        assert factory.get_renderer(OutputKind.PDF) is renderer

        factory.clear_cache()

        assert factory.get_parser("csv") is not parser
