"""Parsing utilities: tokenization and markdown document loading."""

from .document import (
    ParseError,
    extract_headings,
    non_prose_ranges,
    parse_document,
    parse_text,
    split_frontmatter,
)
from .tokenizer import Token, is_inside_reference, iter_words, tokenize, word_at

__all__ = [
    "ParseError",
    "Token",
    "extract_headings",
    "is_inside_reference",
    "iter_words",
    "non_prose_ranges",
    "parse_document",
    "parse_text",
    "split_frontmatter",
    "tokenize",
    "word_at",
]
