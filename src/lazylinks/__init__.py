"""lazylinks: detect unlinked mentions of notes and materialize wikilinks."""

__version__ = "0.1.0"

from .config import ConfigurationError, HeaderLevels, LinkerConfig, load_config, save_config
from .engine import LinkEngine
from .index import LinkIndex, build_index, self_names
from .matcher import resolve
from .materialize import materialize
from .models import (
    Heading,
    LinkSpan,
    LinkSuggestion,
    LinkTarget,
    Materialization,
    MatchResult,
    SourceDocument,
)
from .parser import ParseError, Token, tokenize, word_at
from .vault import load_documents

__all__ = [
    "__version__",
    "ConfigurationError",
    "Heading",
    "HeaderLevels",
    "LinkEngine",
    "LinkIndex",
    "LinkSpan",
    "LinkSuggestion",
    "LinkTarget",
    "LinkerConfig",
    "Materialization",
    "MatchResult",
    "ParseError",
    "SourceDocument",
    "Token",
    "build_index",
    "load_config",
    "load_documents",
    "materialize",
    "resolve",
    "save_config",
    "self_names",
    "tokenize",
    "word_at",
]
