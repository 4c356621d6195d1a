"""
Search string translation.

Turns the small query language accepted by the `filter` listing parameter
into a SQLAlchemy condition over a configured set of columns:

    physics                     bare terms search every searchable column
    "rigid body"                quoted phrases too
    license:MIT                 equality (`:` or `=`)
    license:MIT,Apache-2.0      any of the listed values
    score>=5                    comparisons (`<`, `<=`, `>`, `>=`)
    tags:2d and not tags:3d     boolean operators, `and` is implicit
    (score>10 or shader)        grouping
    limit:10                    caps the number of rows

Anything that can't be translated raises `InvalidSearchStringException`.
"""

import enum
import operator
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Callable, NoReturn

from sqlalchemy import Select, and_, func, literal, not_, or_

from assetlib.core.exceptions import InvalidSearchStringException


class ColumnKind(str, enum.Enum):
    """How values typed by users are compared with a column."""
    TEXT = "text"
    INTEGER = "integer"
    DATE = "date"
    TAGS = "tags"  # comma-separated list stored in a single column


@dataclass(frozen=True)
class SearchColumn:
    """A column exposed to search strings."""
    column: Any
    kind: ColumnKind = ColumnKind.TEXT
    searchable: bool = False


# Special keywords and the aliases users may type for them
KEYWORDS = {
    "select": ("select", "fields"),
    "order_by": ("order_by", "sort"),
    "offset": ("offset", "from"),
    "limit": ("limit",),
}

_EQUALITY = (":", "=")

# Range of the database INTEGER/BIGINT columns values are compared with
INTEGER_MIN = -(2**63)
INTEGER_MAX = 2**63 - 1

_OPERATORS: dict[str, Callable[[Any, Any], Any]] = {
    ":": operator.eq,
    "=": operator.eq,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}

_TOKEN_PATTERN = re.compile(
    r"""
    \s*(?:
        (?P<lparen>\()
      | (?P<rparen>\))
      | (?P<operator>>=|<=|[:=<>])
      | (?P<comma>,)
      | (?P<quoted>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*')
      | (?P<word>[^\s():=<>,"']+)
    )
    """,
    re.VERBOSE,
)


@dataclass(frozen=True)
class Token:
    kind: str
    value: str


def tokenize(text: str) -> list[Token]:
    """Split a search string into tokens."""
    text = text.strip()
    tokens = []
    position = 0
    while position < len(text):
        match = _TOKEN_PATTERN.match(text, position)
        if match is None:
            raise InvalidSearchStringException(
                f"Unexpected character at position {position}", text
            )
        kind = match.lastgroup
        value = match.group(kind)
        if kind == "quoted":
            value = re.sub(r"\\(.)", r"\1", value[1:-1])
        tokens.append(Token(kind, value))
        position = match.end()
    return tokens


@dataclass
class SearchStringQuery:
    """The translated search string, ready to be applied to a select."""
    condition: Any | None = None
    limit: int | None = None

    def apply(self, query: Select) -> Select:
        if self.condition is not None:
            query = query.where(self.condition)
        if self.limit is not None:
            query = query.limit(self.limit)
        return query


class SearchStringParser:
    """
    Recursive-descent translator for search strings.

    Args:
        columns: Column names users may type, mapped to their definition
        disabled_keywords: Special keywords rejected with an error
    """

    def __init__(
        self,
        columns: dict[str, SearchColumn],
        disabled_keywords: tuple[str, ...] | list[str] = (),
    ):
        self.columns = {name.lower(): column for name, column in columns.items()}
        self.disabled_keywords = set(disabled_keywords)

    def parse(self, text: str) -> SearchStringQuery:
        """
        Translate a search string.

        Raises:
            InvalidSearchStringException: On syntax errors, unknown columns,
                disabled keywords and values of the wrong type
        """
        return _Translation(self, text).run()


def _combine(function, operands: list) -> Any | None:
    operands = [operand for operand in operands if operand is not None]
    if not operands:
        return None
    if len(operands) == 1:
        return operands[0]
    return function(*operands)


class _Translation:
    """State of a single `SearchStringParser.parse` call."""

    def __init__(self, parser: SearchStringParser, text: str):
        self.parser = parser
        self.text = text
        self.tokens = tokenize(text)
        self.position = 0
        self.limit: int | None = None

    def run(self) -> SearchStringQuery:
        if not self.tokens:
            return SearchStringQuery()
        condition = self._or()
        leftover = self._peek()
        if leftover is not None:
            self._fail(f"Unexpected '{leftover.value}'")
        return SearchStringQuery(condition=condition, limit=self.limit)

    def _fail(self, message: str) -> NoReturn:
        raise InvalidSearchStringException(message, self.text)

    # ===================
    # Token helpers
    # ===================
    def _peek(self, offset: int = 0) -> Token | None:
        index = self.position + offset
        return self.tokens[index] if index < len(self.tokens) else None

    def _next(self) -> Token | None:
        token = self._peek()
        if token is not None:
            self.position += 1
        return token

    def _at_word(self, word: str) -> bool:
        """Whether the next token is the bare boolean operator `word`."""
        token = self._peek()
        if token is None or token.kind != "word" or token.value.lower() != word:
            return False
        # `or:value` is a (bad) column query, not an operator
        following = self._peek(1)
        return following is None or following.kind != "operator"

    def _accept_word(self, word: str) -> bool:
        if self._at_word(word):
            self.position += 1
            return True
        return False

    # ===================
    # Grammar
    # ===================
    def _or(self):
        operands = [self._and()]
        while self._accept_word("or"):
            operands.append(self._and())
        return _combine(or_, operands)

    def _and(self):
        operands = [self._not()]
        while True:
            token = self._peek()
            if token is None or token.kind == "rparen" or self._at_word("or"):
                break
            self._accept_word("and")
            operands.append(self._not())
        return _combine(and_, operands)

    def _not(self):
        if self._accept_word("not"):
            operand = self._not()
            if operand is None:
                self._fail("Keywords can't be negated")
            return not_(operand)
        return self._atom()

    def _atom(self):
        token = self._next()
        if token is None:
            self._fail("Unexpected end of search string")

        if token.kind == "lparen":
            condition = self._or()
            closing = self._next()
            if closing is None or closing.kind != "rparen":
                self._fail("Missing closing parenthesis")
            return condition

        if token.kind == "word":
            following = self._peek()
            if following is not None and following.kind == "operator":
                self._next()
                return self._query(token.value, following.value)
            return self._search(token.value)

        if token.kind == "quoted":
            return self._search(token.value)

        self._fail(f"Unexpected '{token.value}'")

    def _values(self) -> list[str]:
        values = [self._value()]
        while True:
            token = self._peek()
            if token is None or token.kind != "comma":
                return values
            self._next()
            values.append(self._value())

    def _value(self) -> str:
        token = self._next()
        if token is None or token.kind not in ("word", "quoted"):
            self._fail("Missing value")
        return token.value

    # ===================
    # Translation
    # ===================
    def _search(self, term: str):
        searchable = [column for column in self.parser.columns.values() if column.searchable]
        if not searchable:
            self._fail("No searchable columns are configured")
        needle = term.lower()
        return or_(
            *(func.lower(column.column).contains(needle, autoescape=True) for column in searchable)
        )

    def _query(self, name: str, op: str):
        key = name.lower()
        values = self._values()

        keyword = next((kw for kw, aliases in KEYWORDS.items() if key in aliases), None)
        if keyword is not None:
            return self._keyword(keyword, op, values)

        column = self.parser.columns.get(key)
        if column is None:
            self._fail(f"Unknown column '{name}'")

        if len(values) > 1:
            if op not in _EQUALITY:
                self._fail("Lists of values can only be compared with ':' or '='")
            return or_(*(self._compare(column, op, value) for value in values))
        return self._compare(column, op, values[0])

    def _keyword(self, keyword: str, op: str, values: list[str]):
        if keyword in self.parser.disabled_keywords:
            self._fail(f"The '{keyword}' keyword is not allowed")
        if keyword != "limit":
            self._fail(f"The '{keyword}' keyword is not supported")
        if op not in _EQUALITY or len(values) != 1:
            self._fail("Usage: limit:<number>")
        try:
            limit = int(values[0])
        except ValueError:
            limit = -1
        if not 0 <= limit <= INTEGER_MAX:
            self._fail(f"Invalid limit '{values[0]}'")
        self.limit = limit
        return None

    def _compare(self, column: SearchColumn, op: str, raw: str):
        if column.kind is ColumnKind.TAGS:
            if op not in _EQUALITY:
                self._fail("Tags can only be compared with ':' or '='")
            # Match whole entries of the comma-separated list
            wrapped = literal(",") + column.column + literal(",")
            return wrapped.contains(f",{raw.lower()},", autoescape=True)

        if column.kind is ColumnKind.INTEGER:
            try:
                value = int(raw)
            except ValueError:
                self._fail(f"Expected a number, got '{raw}'")
            if not INTEGER_MIN <= value <= INTEGER_MAX:
                self._fail(f"Number out of range: '{raw}'")
            return _OPERATORS[op](column.column, value)

        if column.kind is ColumnKind.DATE:
            return self._compare_day(column, op, raw)

        return _OPERATORS[op](column.column, raw)

    def _compare_day(self, column: SearchColumn, op: str, raw: str):
        try:
            day = date.fromisoformat(raw)
        except ValueError:
            self._fail(f"Expected a date (YYYY-MM-DD), got '{raw}'")
        start = datetime.combine(day, time.min, tzinfo=timezone.utc)
        end = start + timedelta(days=1)
        if op in _EQUALITY:
            return and_(column.column >= start, column.column < end)
        if op == "<":
            return column.column < start
        if op == "<=":
            return column.column < end
        if op == ">":
            return column.column >= end
        return column.column >= start
