"""Tokenizers for catalog indexing and recommendation vocabularies.

Two deliberately different tokenizers live here:

- tokenize(): used by the recommendation engine. ASCII word runs are
  lower-cased; every non-ASCII codepoint becomes its own single-character
  token, so unsegmented CJK text still yields a usable vocabulary. Output is
  deduplicated in first-occurrence order.
- tokenize_ascii(): used by the catalog inverted indexes. Only ASCII
  alphanumerics and '_' form tokens; everything else, including non-ASCII
  text, separates them. Output keeps duplicates.

Both scan UTF-8 bytes rather than Python characters, so a malformed or
truncated byte sequence still makes forward progress.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Final

# =============================================================================
# Module Constants
# =============================================================================

_ASCII_LIMIT: Final[int] = 0x80
_UNDERSCORE: Final[int] = ord("_")

# (mask, pattern, sequence length) for UTF-8 leading bytes
_UTF8_LEADING_BYTES: Final[tuple[tuple[int, int, int], ...]] = (
    (0xE0, 0xC0, 2),  # 110xxxxx
    (0xF0, 0xE0, 3),  # 1110xxxx
    (0xF8, 0xF0, 4),  # 11110xxx
)


# =============================================================================
# Byte helpers
# =============================================================================


def _as_bytes(text: str | bytes) -> bytes:
    if isinstance(text, bytes):
        return text
    return text.encode("utf-8", errors="surrogatepass")


def _is_word_byte(byte: int) -> bool:
    """ASCII alphanumeric or underscore."""
    return byte == _UNDERSCORE or chr(byte).isalnum()


def utf8_sequence_length(leading_byte: int) -> int:
    """Length of the UTF-8 sequence introduced by a leading byte.

    ASCII and malformed leading bytes (continuation bytes, 0xF8-0xFF)
    report 1 so the caller always advances.
    """
    for mask, pattern, length in _UTF8_LEADING_BYTES:
        if leading_byte & mask == pattern:
            return length
    return 1


# =============================================================================
# Tokenizers
# =============================================================================


def tokenize(text: str | bytes) -> list[str]:
    """Split text into distinct, normalized tokens.

    Args:
        text: Text to tokenize. ``str`` input is UTF-8 encoded first.

    Returns:
        Distinct tokens in first-occurrence order.

    Examples:
        >>> tokenize("Hello, World hello")
        ['hello', 'world']
        >>> tokenize("AI入門")
        ['ai', '入', '門']
    """
    data = _as_bytes(text)
    tokens: list[str] = []
    current = bytearray()

    def flush() -> None:
        if current:
            tokens.append(current.decode("ascii"))
            current.clear()

    pos = 0
    size = len(data)
    while pos < size:
        byte = data[pos]
        if byte < _ASCII_LIMIT:
            if _is_word_byte(byte):
                current.append(ord(chr(byte).lower()))
            else:
                flush()
            pos += 1
            continue

        flush()
        length = utf8_sequence_length(byte)
        if pos + length <= size:
            tokens.append(data[pos : pos + length].decode("utf-8", errors="replace"))
            pos += length
        else:
            # Truncated sequence at end of input: skip one byte, emit nothing
            pos += 1

    flush()
    return list(dict.fromkeys(tokens))


def tokenize_ascii(text: str) -> list[str]:
    """Split text on anything that is not an ASCII alphanumeric or '_'.

    Tokens are lower-cased and duplicates are kept.

    Examples:
        >>> tokenize_ascii("Intro to AI, intro")
        ['intro', 'to', 'ai', 'intro']
    """
    tokens: list[str] = []
    current: list[str] = []
    for char in text:
        if char.isascii() and (char.isalnum() or char == "_"):
            current.append(char.lower())
        elif current:
            tokens.append("".join(current))
            current = []
    if current:
        tokens.append("".join(current))
    return tokens


def extract_book_terms(
    title: str,
    author: str,
    synopsis: str,
    categories: Iterable[str],
) -> set[str]:
    """Union of tokenize() over a book's descriptive fields."""
    terms: set[str] = set()
    for text in (title, author, synopsis, *categories):
        terms.update(tokenize(text))
    return terms
