"""Domain model package.

Selector and Patch are the concrete Query and Update types understood by the
adapters shipped in autosource.infrastructure.  Import from this package to
avoid coupling calling code to individual module paths.
"""

from .enums import Operator
from .patches import Patch
from .selectors import Criterion, Selector, field_value

__all__ = [
    "Operator",
    "Criterion",
    "Selector",
    "Patch",
    "field_value",
]
