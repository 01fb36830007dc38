# aurfetch/modules/pkgbuild.py
"""
pkgbuild.py - reads the dependency arrays out of a PKGBUILD.

Only three single-line bash arrays are understood:

    depends=('foo>=1.0' 'bar')
    makedepends=('baz')
    optdepends=('qux: optional feature')

Two parsing modes exist. "strip" mode truncates every token at the first
version constraint character and is used to decide what has to be fetched.
"raw" mode keeps the constraint text and is used to fill package records.
"""

from __future__ import annotations
import enum
from typing import AbstractSet, Iterator, Optional, Tuple

from aurfetch import AurfetchError
from aurfetch.modules import logger as _logger
from aurfetch.modules.deplist import DepList, insert_unique

QUOTES = "'\""
SEPARATORS = " \n"
# a stripped token ends at the first of these
STRIP_CHARS = "=<>\"'"

LOG = _logger.Logger("pkgbuild")


class RecipeNotFound(AurfetchError):
    pass


class MalformedRecipe(AurfetchError):
    pass


class ArrayKind(enum.Enum):
    DEPENDS = "depends"
    MAKEDEPENDS = "makedepends"
    OPTDEPENDS = "optdepends"
    UNRECOGNIZED = None


_ARRAY_NAMES = {kind.value: kind for kind in ArrayKind if kind.value}
ALL_KINDS = frozenset(_ARRAY_NAMES.values())
FLAT_KINDS = frozenset((ArrayKind.DEPENDS, ArrayKind.MAKEDEPENDS))


def classify_line(line: str) -> ArrayKind:
    """Tell which dependency array (if any) a trimmed line declares."""
    name, sep, rest = line.partition("=")
    if not sep or not rest.startswith("("):
        return ArrayKind.UNRECOGNIZED
    # depends+=(...) appends to the same array
    if name.endswith("+"):
        name = name[:-1]
    return _ARRAY_NAMES.get(name, ArrayKind.UNRECOGNIZED)


def _split_tokens(body: str) -> Iterator[str]:
    """Split on runs of space/newline; a quoted word runs to its closing quote."""
    pos = 0
    end = len(body)
    while pos < end:
        if body[pos] in SEPARATORS:
            pos += 1
            continue
        start = pos
        if body[pos] in QUOTES:
            closing = body.find(body[pos], pos + 1)
            pos = end if closing == -1 else closing + 1
        while pos < end and body[pos] not in SEPARATORS:
            pos += 1
        yield body[start:pos]


def clean_token(token: str, strip: bool) -> str:
    if token[:1] in QUOTES:
        token = token[1:]
    if strip:
        for i, ch in enumerate(token):
            if ch in STRIP_CHARS:
                return token[:i]
        return token
    if token and token[-1] in QUOTES:
        token = token[:-1]
    return token


def parse_bash_array(deps: Optional[DepList], body: str, strip: bool,
                     log: Optional[_logger.Logger] = None) -> DepList:
    """
    Tokenize the interior of one bash array into ``deps``.

    ``body`` is the text between ``(`` and ``)``. Tokens already present
    in ``deps`` are skipped. Returns the (possibly new) list.
    """
    log = log or LOG
    if deps is None:
        deps = DepList()
    for raw in _split_tokens(body):
        token = clean_token(raw, strip)
        if not token:
            continue
        log.debug(f"Adding Depend: {token}")
        deps = insert_unique(deps, token)
    return deps


def iter_arrays(text: str,
                kinds: Optional[AbstractSet[ArrayKind]] = None) -> Iterator[Tuple[ArrayKind, str]]:
    """
    Yield (kind, body) for every dependency array of ``kinds`` in ``text``.

    The buffer is walked newline to newline. Each wanted array must open
    and close on the line that declares it; a declaration without ``)``
    raises MalformedRecipe. Arrays of other kinds are skipped like any
    unrecognised line, so they may span several lines.
    """
    if kinds is None:
        kinds = ALL_KINDS
    line_start = 0
    length = len(text)
    while line_start <= length:
        line_end = text.find("\n", line_start)
        if line_end == -1:
            line_end = length
        raw = text[line_start:line_end]
        kind = classify_line(raw.strip())

        if kind not in kinds:
            line_start = line_end + 1
            continue

        opening = raw.find("(")
        closing = raw.find(")", opening)
        if closing == -1:
            lineno = text.count("\n", 0, line_start) + 1
            raise MalformedRecipe(
                f"line {lineno}: '{kind.value}' array is not closed on the same line"
            )
        yield kind, raw[opening + 1:closing]

        # resume after ')'; the rest of that line is not examined
        next_nl = text.find("\n", line_start + closing + 1)
        if next_nl == -1:
            break
        line_start = next_nl + 1


def extract_flat_dependencies(text: str, log: Optional[_logger.Logger] = None) -> DepList:
    """Names from depends and makedepends, constraints stripped, in one list."""
    deps = DepList()
    for _kind, body in iter_arrays(text, FLAT_KINDS):
        deps = parse_bash_array(deps, body, strip=True, log=log)
    return deps


def populate_typed_dependencies(record, text: str, log: Optional[_logger.Logger] = None):
    """Fill record.depends / makedepends / optdepends with raw tokens."""
    for kind, body in iter_arrays(text):
        if kind is ArrayKind.DEPENDS:
            record.depends = parse_bash_array(record.depends, body, strip=False, log=log)
        elif kind is ArrayKind.MAKEDEPENDS:
            record.makedepends = parse_bash_array(record.makedepends, body, strip=False, log=log)
        elif kind is ArrayKind.OPTDEPENDS:
            record.optdepends = parse_bash_array(record.optdepends, body, strip=False, log=log)
    return record


def read_pkgbuild(path: str) -> str:
    """Read a whole PKGBUILD into memory."""
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as fh:
            return fh.read()
    except OSError as e:
        raise RecipeNotFound(f"Could not open PKGBUILD {path}: {e}") from e
