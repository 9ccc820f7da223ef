# Shared utilities: formatters, validators
from levelscope.utils.formatters import (
    format_levels,
    format_pct,
    format_price,
    format_reaction,
    format_signal,
    format_timestamp,
)
from levelscope.utils.validators import (
    validate_anchor,
    validate_bar,
    validate_bar_sequence,
    validate_next_bar,
)

__all__ = [
    "format_levels",
    "format_pct",
    "format_price",
    "format_reaction",
    "format_signal",
    "format_timestamp",
    "validate_anchor",
    "validate_bar",
    "validate_bar_sequence",
    "validate_next_bar",
]
