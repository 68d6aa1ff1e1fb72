__version__ = "0.1.0"

from tidyshape.reshape import (  # noqa: E402
    column_span, count_flags, flag_longer, flag_wider,
    pivot_longer, pivot_wider, replace_na, separate_rows)
from tidyshape.serialization_utils import (  # noqa: E402
    DuplicateColumnsException, NestedColumnsException)
