"""Text processing helpers: tokenizers for indexing and recommendation."""
from library_catalog.nlp.tokenizer import (
    extract_book_terms,
    tokenize,
    tokenize_ascii,
    utf8_sequence_length,
)

__all__ = [
    "extract_book_terms",
    "tokenize",
    "tokenize_ascii",
    "utf8_sequence_length",
]
