"""
Per-character tokenization for CJK full-text search.

FTS5's unicode61 tokenizer splits on whitespace and punctuation, which
leaves unsegmented Chinese as one giant token per clause. Spacing out
every character turns each one into its own token. The same transform
must be applied when the index is built and when a keyword is queried;
any difference between the two silently produces zero matches.
"""


def space_cjk(text: str) -> str:
    """
    Separate every non-whitespace character with a single space.

    Args:
        text: Raw text (title, author, body or keyword).

    Returns:
        Spaced text with whitespace runs removed.
    """
    if not text:
        return ""

    return " ".join(char for char in text if not char.isspace())


def build_match_query(keyword: str) -> str:
    """
    Turn a keyword into an FTS5 phrase query over spaced tokens.

    The spaced keyword is wrapped in double quotes so FTS5 treats it as
    an exact sequence of tokens; embedded quotes are doubled, which is
    how FTS5 escapes them inside a string.

    Args:
        keyword: Raw user keyword.

    Returns:
        MATCH expression, or an empty string for a blank keyword.
    """
    spaced = space_cjk(keyword)
    if not spaced:
        return ""

    return '"' + spaced.replace('"', '""') + '"'
