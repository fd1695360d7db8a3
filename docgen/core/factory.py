"""Component Factory for strategy instantiation.

The Factory Pattern allows the application to instantiate
different parser, renderer and dispatcher implementations at runtime
based on the upload format, requested output or configuration.
"""

import logging

from docgen.core.config import Settings, get_settings
from docgen.interfaces.dispatcher import BaseDispatcher
from docgen.interfaces.parser import BaseTabularParser, ParseError
from docgen.interfaces.renderer import BaseRenderer
from docgen.strategies.dispatchers import LogDispatcher, SmtpDispatcher
from docgen.strategies.parsers import CsvTableParser, XlsTableParser, XlsxTableParser
from docgen.strategies.renderers import DocxRenderer, PdfRenderer
from docgen.template_engine.models import OutputKind

logger = logging.getLogger(__name__)


class ComponentFactory:
    """Factory for creating component instances based on configuration.

    Instances are cached per type, so repeated lookups during a batch
    reuse the same parser, renderer or dispatcher.

    Example:
        ```python
        factory = ComponentFactory(get_settings())

        parser = factory.get_parser("csv")
        renderer = factory.get_renderer("pdf")
        dispatcher = factory.get_dispatcher()
        ```
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the factory with optional settings.

        Args:
            settings: Application settings. If None, uses global settings.
        """
        self._settings = settings or get_settings()
        self._parser_cache: dict[str, BaseTabularParser] = {}
        self._renderer_cache: dict[OutputKind, BaseRenderer] = {}
        self._dispatcher_cache: dict[str, BaseDispatcher] = {}

    def get_parser(self, file_format: str) -> BaseTabularParser:
        """Get a parser for an upload format.

        Args:
            file_format: "csv", "xlsx" or "xls" (a leading dot is ignored).

        Returns:
            A BaseTabularParser implementation instance.

        Raises:
            ParseError: If the format is not supported.
        """
        file_format = (file_format or "").lower().lstrip(".")

        if file_format not in self._parser_cache:
            logger.info(f"Instantiating parser: {file_format}")

            match file_format:
                case "csv":
                    self._parser_cache[file_format] = CsvTableParser()
                case "xlsx":
                    self._parser_cache[file_format] = XlsxTableParser()
                case "xls":
                    self._parser_cache[file_format] = XlsTableParser()
                case _:
                    raise ParseError(
                        f"Unsupported file format: {file_format or 'unknown'}. "
                        f"Valid options: 'csv', 'xlsx', 'xls'"
                    )

        return self._parser_cache[file_format]

    def get_renderer(self, output_kind: OutputKind | str | None = None) -> BaseRenderer:
        """Get a renderer for an output kind.

        Args:
            output_kind: "pdf" or "docx". If None, uses settings.

        Returns:
            A BaseRenderer implementation instance.

        Raises:
            ValueError: If the output kind is unknown.
        """
        requested = output_kind or self._settings.default_output_kind
        try:
            kind = OutputKind(requested)
        except ValueError as e:
            raise ValueError(
                f"Unknown output kind: {requested}. Valid options: 'pdf', 'docx'"
            ) from e

        if kind not in self._renderer_cache:
            logger.info(f"Instantiating renderer: {kind.value}")

            match kind:
                case OutputKind.PDF:
                    self._renderer_cache[kind] = PdfRenderer()
                case OutputKind.DOCX:
                    self._renderer_cache[kind] = DocxRenderer()

        return self._renderer_cache[kind]

    def get_dispatcher(self, dispatcher_type: str | None = None) -> BaseDispatcher:
        """Get a notification dispatcher.

        Args:
            dispatcher_type: "smtp" or "log". If None, uses settings.

        Returns:
            A BaseDispatcher implementation instance.

        Raises:
            ValueError: If the dispatcher type is unknown.
        """
        dispatcher_type = dispatcher_type or self._settings.dispatcher_type

        if dispatcher_type not in self._dispatcher_cache:
            logger.info(f"Instantiating dispatcher: {dispatcher_type}")

            match dispatcher_type:
                case "smtp":
                    self._dispatcher_cache[dispatcher_type] = SmtpDispatcher(
                        host=self._settings.smtp_host,
                        port=self._settings.smtp_port,
                        username=self._settings.smtp_username,
                        password=self._settings.smtp_password,
                        use_tls=self._settings.smtp_use_tls,
                        mail_from=self._settings.mail_from,
                        timeout=self._settings.smtp_timeout,
                    )
                case "log":
                    self._dispatcher_cache[dispatcher_type] = LogDispatcher()
                case _:
                    raise ValueError(
                        f"Unknown dispatcher type: {dispatcher_type}. "
                        f"Valid options: 'smtp', 'log'"
                    )

        return self._dispatcher_cache[dispatcher_type]

    def clear_cache(self) -> None:
        """Clear all cached component instances.

        This forces new instances to be created on next access.
        Useful for testing or when settings change.
        """
        self._parser_cache.clear()
        self._renderer_cache.clear()
        self._dispatcher_cache.clear()
        logger.debug("Component factory cache cleared")


# Global factory instance
_factory: ComponentFactory | None = None


def get_factory() -> ComponentFactory:
    """Get or create the global ComponentFactory instance.

    Returns:
        The singleton ComponentFactory instance.
    """
    global _factory
    if _factory is None:
        _factory = ComponentFactory()
    return _factory
