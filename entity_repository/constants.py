"""
Library-level constants for hardcoded query behavior.

These values define the closed vocabulary of the query engine (operators,
sort directions, literal spellings) and should NEVER be changed via
environment variables. For configurable values (default page size, logging,
default ordering), see entity_repository/settings.py.
"""

from enum import Enum

# ============================================================================
# Operators
# ============================================================================


class MatchMode(str, Enum):
    """Operator tags understood by the operator catalog."""

    EQUALS = "equals"
    NOT_EQUALS = "not-equals"
    GREATER_THAN = "greater-than"
    GREATER_THAN_OR_EQUAL = "greater-or-equal"
    LESS_THAN = "less-than"
    LESS_THAN_OR_EQUAL = "less-or-equal"
    CONTAINS = "contains"
    STARTS_WITH = "starts-with"
    ENDS_WITH = "ends-with"


# Operators that compare the textual form of a field instead of its value
TEXT_MATCH_MODES = frozenset(
    {MatchMode.CONTAINS, MatchMode.STARTS_WITH, MatchMode.ENDS_WITH}
)

# Operators that accept a null literal (IS NULL / IS NOT NULL)
NULLABLE_MATCH_MODES = frozenset({MatchMode.EQUALS, MatchMode.NOT_EQUALS})

# Symbolic spellings accepted in addition to tags and member names
MATCH_MODE_SYMBOLS = {
    "=": MatchMode.EQUALS,
    "==": MatchMode.EQUALS,
    "!=": MatchMode.NOT_EQUALS,
    "<>": MatchMode.NOT_EQUALS,
    ">": MatchMode.GREATER_THAN,
    ">=": MatchMode.GREATER_THAN_OR_EQUAL,
    "<": MatchMode.LESS_THAN,
    "<=": MatchMode.LESS_THAN_OR_EQUAL,
}


# ============================================================================
# Sorting
# ============================================================================


class SortDirection(str, Enum):
    """Direction of an explicit ordering."""

    ASC = "asc"
    DESC = "desc"


SORT_DIRECTION_ALIASES = {
    "asc": SortDirection.ASC,
    "ascending": SortDirection.ASC,
    "desc": SortDirection.DESC,
    "descending": SortDirection.DESC,
}


# ============================================================================
# Paging
# ============================================================================

# Page numbers are 1-based; anything lower is clamped to this value
FIRST_PAGE_NUMBER = 1

# Smallest page size accepted as-is; lower values fall back to the
# configured DEFAULT_PAGE_SIZE
MIN_PAGE_SIZE = 1


# ============================================================================
# Literal coercion
# ============================================================================

TRUE_LITERALS = frozenset({"1", "true", "yes", "y", "on"})
FALSE_LITERALS = frozenset({"0", "false", "no", "n", "off"})
