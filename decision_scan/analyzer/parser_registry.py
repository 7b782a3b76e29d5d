"""Parser registry for routing source files to a decision-point parser.

Maps file extensions to language identifiers and routes parse requests to
the ``BaseDecisionPointParser`` registered for that language.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Mapping
from pathlib import PurePosixPath
from typing import Any

from decision_scan.analyzer.base_analyzer import BaseDecisionPointParser, DecisionPoint

logger = logging.getLogger(__name__)

_DEFAULT_EXTENSION_MAP: dict[str, str] = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
}

# Modules exposing ``get_parser() -> BaseDecisionPointParser``.
_PARSER_MODULES: tuple[str, ...] = ("decision_scan.analyzer.engine",)


class ParserRegistry:
    """Central registry that maps languages to their decision-point parsers.

    Typical usage::

        registry = ParserRegistry()
        registry.register(HeuristicDecisionPointParser())

        points = registry.parse_file("src/App.tsx", source, boundaries)
    """

    def __init__(self) -> None:
        self._parsers: dict[str, BaseDecisionPointParser] = {}
        self._extension_map: dict[str, str] = dict(_DEFAULT_EXTENSION_MAP)

    def register(self, parser: BaseDecisionPointParser) -> None:
        """Register *parser* for every language its extensions map to.

        Extensions missing from the map become their own language
        (``".vue"`` -> ``"vue"``).
        """
        extensions = parser.get_supported_extensions()
        if not extensions:
            logger.warning(
                "Parser %s reports no supported extensions; skipping.",
                type(parser).__name__,
            )
            return

        languages = set()
        for ext in extensions:
            language = self._extension_map.setdefault(ext, ext.lstrip(".").lower())
            languages.add(language)
        for language in languages:
            self._parsers[language] = parser

        logger.info(
            "Registered %s for languages=%s extensions=%s",
            type(parser).__name__,
            sorted(languages),
            extensions,
        )

    def detect_language(self, file_path: str) -> str | None:
        ext = PurePosixPath(file_path).suffix.lower()
        return self._extension_map.get(ext)

    def get_parser(self, language: str) -> BaseDecisionPointParser | None:
        return self._parsers.get(language)

    def get_parser_for_file(self, file_path: str) -> BaseDecisionPointParser | None:
        """Parser for *file_path*'s extension, or ``None`` if unsupported."""
        language = self.detect_language(file_path)
        if language is None:
            return None
        return self.get_parser(language)

    def get_supported_extensions(self) -> list[str]:
        """Return all file extensions that map to a registered parser."""
        return sorted(
            ext for ext, lang in self._extension_map.items() if lang in self._parsers
        )

    def parse_file(
        self,
        file_path: str,
        source_code: str,
        function_boundaries: Mapping[int, Any],
        functions: list[Any] | None = None,
    ) -> list[DecisionPoint] | None:
        """Detect the language and parse in one call.

        Returns ``None`` if no parser handles the file's extension.
        """
        parser = self.get_parser_for_file(file_path)
        if parser is None:
            return None
        return parser.parse(source_code, function_boundaries, functions)


_default_registry: ParserRegistry | None = None


def get_default_registry() -> ParserRegistry:
    """Return the process-wide ``ParserRegistry``, creating it on first use."""
    global _default_registry
    if _default_registry is None:
        _default_registry = ParserRegistry()
        _auto_register(_default_registry)
    return _default_registry


def _auto_register(registry: ParserRegistry) -> None:
    for module_name in _PARSER_MODULES:
        module = importlib.import_module(module_name)
        parser = module.get_parser()
        if isinstance(parser, BaseDecisionPointParser):
            registry.register(parser)
        else:
            logger.debug("Module %s does not expose a parser; skipping.", module_name)
