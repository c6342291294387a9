"""Query-text shape detection backed by the SQLGlot tokenizer.

Only the token stream is used. Nothing here builds a syntax tree, so every
answer is a heuristic about the outermost query level (parenthesis depth 0).
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlglot import tokenize
from sqlglot.errors import TokenError
from sqlglot.tokens import Token, TokenType

# Compared by name so that tokenizer releases that rename a member only
# weaken detection instead of breaking import.
_CLAUSE_END_NAMES = frozenset(
    {
        "GROUP_BY",
        "ORDER_BY",
        "LIMIT",
        "OFFSET",
        "FETCH",
        "HAVING",
        "WINDOW",
        "QUALIFY",
        "UNION",
        "EXCEPT",
        "INTERSECT",
        "SEMICOLON",
    }
)


class SQLTokenizeError(RuntimeError):
    """Raised when query text cannot be tokenized."""


@dataclass(frozen=True)
class QueryShape:
    """Outermost-level facts read from a query's token stream."""

    row_limit: int | None
    count_only: bool
    has_offset: bool
    filter_conjuncts: tuple[str, ...]
    normalized: str

    def covers_filters_of(self, original: QueryShape) -> bool:
        """True when every filter conjunct of ``original`` appears in this query."""
        haystack = f" {self.normalized} "
        return all(f" {conjunct} " in haystack for conjunct in original.filter_conjuncts)


def tokenize_sql(sql: str, dialect: str = "postgres") -> list[Token]:
    """Tokenize query text using the given SQLGlot dialect."""
    normalized = sql.strip()
    if not normalized:
        raise SQLTokenizeError("SQL cannot be empty.")

    try:
        return tokenize(normalized, read=dialect)
    except (TokenError, ValueError) as exc:
        raise SQLTokenizeError(f"Could not tokenize SQL: {exc}") from exc


def _render(token: Token) -> str:
    if token.token_type == TokenType.STRING:
        escaped = token.text.replace("'", "''")
        return f"'{escaped}'"
    if token.token_type == TokenType.IDENTIFIER:
        return f'"{token.text}"'
    return token.text.upper()


def _top_level(tokens: list[Token]) -> list[tuple[int, Token]]:
    """Tokens at parenthesis depth 0, with their positions."""
    depth = 0
    outer: list[tuple[int, Token]] = []
    for index, token in enumerate(tokens):
        if token.token_type == TokenType.L_PAREN:
            if depth == 0:
                outer.append((index, token))
            depth += 1
            continue
        if token.token_type == TokenType.R_PAREN:
            depth = max(depth - 1, 0)
            if depth == 0:
                outer.append((index, token))
            continue
        if depth == 0:
            outer.append((index, token))
    return outer


def _as_int(token: Token) -> int | None:
    if token.token_type != TokenType.NUMBER:
        return None
    try:
        return int(float(token.text))
    except ValueError:
        return None


def _fetch_limit(tokens: list[Token], index: int) -> int | None:
    """Row count of ``FETCH FIRST|NEXT [n] ROW[S] ONLY`` starting at ``index``."""
    if index + 2 >= len(tokens):
        return None
    if tokens[index + 1].text.upper() not in ("FIRST", "NEXT"):
        return None
    count = tokens[index + 2]
    if count.text.upper() in ("ROW", "ROWS"):
        return 1
    if index + 3 < len(tokens) and tokens[index + 3].text.upper() == "PERCENT":
        return None
    return _as_int(count)


def _row_limit(tokens: list[Token], outer: list[tuple[int, Token]]) -> int | None:
    limit: int | None = None
    for index, token in outer:
        if token.token_type.name == "FETCH":
            limit = _fetch_limit(tokens, index)
            continue
        if token.token_type.name != "LIMIT" or index + 1 >= len(tokens):
            continue
        value = _as_int(tokens[index + 1])
        # MySQL form: LIMIT offset, count
        if (
            index + 3 < len(tokens)
            and tokens[index + 2].token_type == TokenType.COMMA
        ):
            value = _as_int(tokens[index + 3])
        limit = value
    return limit


def _has_offset(tokens: list[Token], outer: list[tuple[int, Token]]) -> bool:
    for index, token in outer:
        if token.token_type.name == "OFFSET":
            return True
        if (
            token.token_type.name == "LIMIT"
            and index + 2 < len(tokens)
            and tokens[index + 2].token_type == TokenType.COMMA
        ):
            return True
    return False


def _count_only(tokens: list[Token], outer: list[tuple[int, Token]]) -> bool:
    names = [token.token_type.name for _, token in outer]
    if "SELECT" not in names or "GROUP_BY" in names:
        return False

    select_at = next(index for index, token in outer if token.token_type.name == "SELECT")
    from_at = next(
        (
            index
            for index, token in outer
            if token.token_type.name == "FROM" and index > select_at
        ),
        len(tokens),
    )
    outer_positions = {index for index, _ in outer}
    projection = [
        (index, tokens[index])
        for index in range(select_at + 1, from_at)
    ]
    if any(
        token.token_type == TokenType.COMMA and index in outer_positions
        for index, token in projection
    ):
        return False
    return (
        len(projection) >= 2
        and projection[0][1].text.upper() == "COUNT"
        and projection[1][1].token_type == TokenType.L_PAREN
    )


def _filter_conjuncts(
    tokens: list[Token], outer: list[tuple[int, Token]]
) -> tuple[str, ...]:
    where_at = next(
        (index for index, token in outer if token.token_type.name == "WHERE"), None
    )
    if where_at is None:
        return ()

    conjuncts: list[str] = []
    current: list[str] = []
    depth = 0
    pending_between = False
    for token in tokens[where_at + 1 :]:
        kind = token.token_type
        if kind == TokenType.L_PAREN:
            depth += 1
        elif kind == TokenType.R_PAREN:
            depth -= 1
        elif depth == 0 and kind.name in _CLAUSE_END_NAMES:
            break
        elif depth == 0 and kind.name == "BETWEEN":
            pending_between = True
        elif depth == 0 and kind.name == "AND":
            if pending_between:
                pending_between = False
            else:
                if current:
                    conjuncts.append(" ".join(current))
                current = []
                continue
        current.append(_render(token))
    if current:
        conjuncts.append(" ".join(current))
    return tuple(conjuncts)


def describe_query(sql: str, dialect: str = "postgres") -> QueryShape:
    """Read limit, projection and filter facts from query text."""
    tokens = tokenize_sql(sql, dialect)
    outer = _top_level(tokens)
    return QueryShape(
        row_limit=_row_limit(tokens, outer),
        count_only=_count_only(tokens, outer),
        has_offset=_has_offset(tokens, outer),
        filter_conjuncts=_filter_conjuncts(tokens, outer),
        normalized=" ".join(_render(token) for token in tokens),
    )
