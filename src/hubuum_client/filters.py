"""Filter operators and clauses for resource searches.

A search is an ordered sequence of :class:`FilterClause` values combined
with logical AND. Each clause encodes to exactly one query parameter::

    FilterClause("name", FilterOperator.EQUALS, "router")
        -> ("name__equals", "router")
    FilterClause("name", FilterOperator.CONTAINS, "rout", negated=True)
        -> ("name__not_contains", "rout")

Clause order is preserved all the way to the wire so the same builder
always produces the same request. Field names are never checked here;
an unknown field is reported by the server.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable

from hubuum_client.exceptions import InvalidFilterError


class FilterOperator(str, enum.Enum):
    """Comparison operators understood by the Hubuum search endpoints.

    The ``i``-prefixed variants are case-insensitive.
    """

    EQUALS = "equals"
    IEQUALS = "iequals"
    CONTAINS = "contains"
    ICONTAINS = "icontains"
    STARTSWITH = "startswith"
    ISTARTSWITH = "istartswith"
    ENDSWITH = "endswith"
    IENDSWITH = "iendswith"
    LIKE = "like"
    REGEX = "regex"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    BETWEEN = "between"

    @classmethod
    def parse(cls, text: str) -> tuple[FilterOperator, bool]:
        """Parse an operator suffix such as ``"contains"`` or ``"not_equals"``.

        Returns:
            A ``(operator, negated)`` tuple.

        Raises:
            InvalidFilterError: If *text* names no known operator.
        """
        negated = text.startswith("not_")
        name = text[4:] if negated else text
        try:
            return cls(name), negated
        except ValueError:
            known = ", ".join(op.value for op in cls)
            raise InvalidFilterError(
                f"Unknown filter operator '{text}'. Known operators: {known}"
            ) from None


def encode_value(value: Any) -> str:
    """Encode a filter value for use in a query string.

    Raises:
        InvalidFilterError: If the value is ``None`` or not a scalar,
            date, or sequence of scalars.
    """
    if value is None:
        raise InvalidFilterError("Filter value must not be None")
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, enum.Enum):
        return encode_value(value.value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (str, int, float)):
        return str(value)
    if isinstance(value, (list, tuple)):
        if not value:
            raise InvalidFilterError("Filter value list must not be empty")
        return ",".join(encode_value(item) for item in value)
    raise InvalidFilterError(
        f"Cannot encode filter value of type {type(value).__name__}"
    )


@dataclass(frozen=True)
class FilterClause:
    """One ``field <operator> value`` condition.

    The value is encoded when the clause is built, so an unencodable value
    is rejected at the ``add_filter*`` call rather than at execution time.
    """

    field: str
    operator: FilterOperator
    value: str
    negated: bool = False

    @classmethod
    def build(
        cls,
        field: str,
        operator: FilterOperator,
        value: Any,
        negated: bool = False,
    ) -> FilterClause:
        if not field:
            raise InvalidFilterError("Filter field name must not be empty")
        return cls(field, FilterOperator(operator), encode_value(value), negated)

    @property
    def key(self) -> str:
        prefix = "not_" if self.negated else ""
        return f"{self.field}__{prefix}{self.operator.value}"

    def to_query_param(self) -> tuple[str, str]:
        return (self.key, self.value)


def to_query_params(clauses: Iterable[FilterClause]) -> tuple[tuple[str, str], ...]:
    """Convert clauses into ordered query parameters."""
    return tuple(clause.to_query_param() for clause in clauses)


def parse_filter_expression(expression: str) -> FilterClause:
    """Parse a ``field[__op]=value`` expression as used on the command line.

    Example::

        >>> parse_filter_expression("name__icontains=rout").key
        'name__icontains'
        >>> parse_filter_expression("id=3").key
        'id__equals'
    """
    key, sep, value = expression.partition("=")
    if not sep or not key:
        raise InvalidFilterError(
            f"Filter must look like FIELD=VALUE or FIELD__OP=VALUE, got '{expression}'"
        )
    field, _, op_text = key.partition("__")
    operator, negated = FilterOperator.parse(op_text or "equals")
    return FilterClause.build(field, operator, value, negated)
