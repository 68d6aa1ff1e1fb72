import pandas as pd
import polars as pl
from typing_extensions import override

from tidyshape import polars_json_flatten
from tidyshape.lesson import solutions_polars
from .dataflow import LessonDataflow


class PolarsLessonDataflow(LessonDataflow):
    """Concrete polars implementation of LessonDataflow."""

    solutions = solutions_polars

    @override
    def _prepare(self, raw_df) -> pl.DataFrame:
        if isinstance(raw_df, pd.DataFrame):
            return pl.from_pandas(raw_df)
        return raw_df

    @override
    def _records_to_frame(self, records) -> pl.DataFrame:
        return polars_json_flatten.records_to_frame(records)
