"""Search bar query parser for the propdesk TUI.

Parses the search bar language:
    price>=500000       → filter (operators: = != > >= < <=)
    status:active       → same as status=active
    bedrooms:>2         → operator after ':' is honoured
    square_meter<=120   → columns match by key or by label_with_underscores
    squaremeter=120     → underscores in a key are optional
    sort:price:desc     → sort directive (the last one wins)
    status="for sale"   → quotes keep whitespace inside one atom
    plain text          → free-text search

Atoms are separated by whitespace outside quotes. A quote opens only at
the start of an atom or right after an operator, so an apostrophe inside
a word is literal. Quotes are stripped from values and free text.

Anything that does not resolve to a known column is kept as free text,
so a mistyped filter degrades into a text search instead of an error.
"""

from __future__ import annotations

from typing import Iterable

from propdesk.models.query import Filter, ParsedQuery, SortDirective
from propdesk.models.schema import SearchColumn

SORT_PREFIX = "sort:"
SORT_DIRECTIONS = ("asc", "desc")

# Multi-character operators must be tried before their one-character prefixes
_MULTI_CHAR_OPERATORS = (">=", "<=", "!=")
_SINGLE_CHAR_OPERATORS = (">", "<", "=", ":")
_OPERATOR_CHARS = frozenset("<>=!:")
QUOTE_CHARS = "\"'"


def atom_spans(text: str) -> list[tuple[int, int]]:
    """Return the (start, end) offsets of every atom in ``text``.

    An unterminated quote runs to the end of the text.
    """
    spans: list[tuple[int, int]] = []
    start: int | None = None
    open_quote: str | None = None
    for i, char in enumerate(text):
        if open_quote is not None:
            if char == open_quote:
                open_quote = None
            continue
        if char.isspace():
            if start is not None:
                spans.append((start, i))
                start = None
            continue
        if start is None:
            start = i
        if char in QUOTE_CHARS and (i == start or text[i - 1] in _OPERATOR_CHARS):
            open_quote = char
    if start is not None:
        spans.append((start, len(text)))
    return spans


def tokenize(text: str) -> list[str]:
    """Split raw search text into atoms, keeping quoted runs together."""
    return [text[start:end] for start, end in atom_spans(text)]


def unquote(value: str) -> str:
    """Strip an opening quote and its matching closing quote, if present."""
    if not value or value[0] not in QUOTE_CHARS:
        return value
    inner = value[1:]
    if inner.endswith(value[0]):
        inner = inner[:-1]
    return inner


def quote(value: str) -> str:
    """Quote ``value`` so it reads back as a single atom."""
    mark = "\"" if "\"" not in value else "'"
    return f"{mark}{value}{mark}"


def resolve_column(name: str, columns: Iterable[SearchColumn]) -> SearchColumn | None:
    """Find the column a typed name refers to.

    Tried in order: the key, the label with whitespace replaced by
    underscores, then the key with underscores ignored. Keys win over
    labels, so a column's own key always resolves to it.

    Args:
        name: Column name as typed (case-insensitive).
        columns: Column schema.

    Returns:
        The matching column, or None.
    """
    lowered = name.lower()
    if not lowered:
        return None
    columns = list(columns)
    for column in columns:
        if column.key.lower() == lowered:
            return column
    for column in columns:
        if column.label_token == lowered:
            return column
    squashed = lowered.replace("_", "")
    if squashed:
        for column in columns:
            if column.key.lower().replace("_", "") == squashed:
                return column
    return None


def split_atom(atom: str) -> tuple[str, str, str] | None:
    """Split an atom at its first operator.

    ``:`` is an alias for ``=``; when it is directly followed by another
    operator (``price:>=5``), that operator is used instead.

    Args:
        atom: A single whitespace-free atom.

    Returns:
        (name, operator, value) or None when the atom has no operator.
    """
    for i, char in enumerate(atom):
        if char not in _OPERATOR_CHARS:
            continue
        pair = atom[i:i + 2]
        if pair in _MULTI_CHAR_OPERATORS:
            operator, rest = pair, atom[i + 2:]
        elif char in _SINGLE_CHAR_OPERATORS:
            operator, rest = char, atom[i + 1:]
        else:
            # A lone '!' is part of the name
            continue

        if operator == ":":
            operator = "="
            for candidate in _MULTI_CHAR_OPERATORS + (">", "<"):
                if rest.startswith(candidate):
                    operator, rest = candidate, rest[len(candidate):]
                    break
        return atom[:i], operator, rest
    return None


def parse_sort_atom(atom: str, columns: Iterable[SearchColumn]) -> SortDirective | None:
    """Parse ``sort:<column>[:<direction>]``.

    A missing direction means ``desc``. The column is canonicalised to its
    schema key when it resolves and kept as typed otherwise.
    """
    if not atom.lower().startswith(SORT_PREFIX):
        return None
    parts = atom[len(SORT_PREFIX):].split(":")
    if not parts[0] or len(parts) > 2:
        return None
    direction = parts[1].lower() if len(parts) == 2 else "desc"
    if direction not in SORT_DIRECTIONS:
        return None

    column = resolve_column(parts[0], columns)
    return SortDirective(
        column=column.key if column else parts[0],
        direction=direction,
    )


def parse_filter_atom(atom: str, columns: Iterable[SearchColumn]) -> Filter | None:
    """Parse ``<column><op><value>`` against the schema.

    Returns:
        The filter, or None when there is no operator, the column is
        unknown, or the value is empty.
    """
    parts = split_atom(atom)
    if parts is None:
        return None
    name, operator, value = parts
    value = unquote(value)
    if not value.strip():
        return None
    column = resolve_column(name, columns)
    if column is None:
        return None
    return Filter(column=column.key, operator=operator, value=value)


def parse_query(text: str, columns: Iterable[SearchColumn]) -> ParsedQuery:
    """Parse search bar text into a structured query.

    Never raises: atoms that are neither a sort nor a filter on a known
    column are collected into the free-text term.

    Args:
        text: Raw search bar input.
        columns: Column schema of the screen being searched.

    Returns:
        ParsedQuery with filters, sort and free text.
    """
    if not text or not text.strip():
        return ParsedQuery()

    columns = list(columns)
    filters: list[Filter] = []
    sort: SortDirective | None = None
    remaining: list[str] = []

    for atom in tokenize(text):
        directive = parse_sort_atom(atom, columns)
        if directive is not None:
            sort = directive
            continue

        parsed_filter = parse_filter_atom(atom, columns)
        if parsed_filter is not None:
            filters.append(parsed_filter)
            continue

        # Quoted free text may span several words
        remaining.extend(unquote(atom).split())

    return ParsedQuery(
        filters=filters,
        sort=sort,
        text_search=" ".join(remaining) or None,
    )


def serialize_query(parsed: ParsedQuery) -> str:
    """Render a ParsedQuery back into search bar text.

    Filters come first as ``key<op>value``, then ``sort:key:direction``,
    then the free-text term. Parsing the result gives the same query.
    """
    atoms = [f"{f.column}{f.operator}{_serialize_value(f.value)}" for f in parsed.filters]
    if parsed.sort is not None:
        atoms.append(f"{SORT_PREFIX}{parsed.sort.column}:{parsed.sort.direction}")
    if parsed.text_search:
        atoms.extend(_serialize_word(word) for word in parsed.text_search.split())
    return " ".join(atoms)


def has_incomplete_filter(text: str, columns: Iterable[SearchColumn]) -> bool:
    """Check whether the trailing atom is a known column waiting for a value.

    ``price=`` and ``price:>`` are incomplete; ``price=100``, ``price=100 ``
    and ``foo=`` (unknown column) are not.

    Args:
        text: Raw search bar input.
        columns: Column schema.

    Returns:
        True if the last atom names a known column but has no value yet.
    """
    atoms = tokenize(text)
    if not atoms:
        return False

    parts = split_atom(atoms[-1])
    if parts is None:
        return False
    name, _, value = parts
    if resolve_column(name, columns) is None:
        return False
    return not unquote(value).strip()


def _serialize_value(value: str) -> str:
    if value[0] in QUOTE_CHARS or any(char.isspace() for char in value):
        return quote(value)
    return value


def _serialize_word(word: str) -> str:
    # A free-text word that looks like a filter or sort must not be re-read as one
    if word[0] in QUOTE_CHARS or any(char in _OPERATOR_CHARS for char in word):
        if "\"" in word and "'" in word:
            return word
        return quote(word)
    return word
