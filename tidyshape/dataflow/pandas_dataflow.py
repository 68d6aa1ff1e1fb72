import pandas as pd
from typing_extensions import override

from tidyshape import json_flatten
from tidyshape.lesson import solutions_pandas
from tidyshape.serialization_utils import check_and_fix_df, force_to_pandas
from .dataflow import LessonDataflow


class PandasLessonDataflow(LessonDataflow):
    """Concrete pandas implementation of LessonDataflow."""

    solutions = solutions_pandas

    @override
    def _prepare(self, raw_df) -> pd.DataFrame:
        return check_and_fix_df(force_to_pandas(raw_df))

    @override
    def _records_to_frame(self, records) -> pd.DataFrame:
        return json_flatten.records_to_frame(records)
