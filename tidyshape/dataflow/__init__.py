from .dataflow import LessonDataflow
from .pandas_dataflow import PandasLessonDataflow
from .polars_dataflow import PolarsLessonDataflow

DATAFLOWS = {
    "pandas": PandasLessonDataflow,
    "polars": PolarsLessonDataflow,
}

__all__ = ["LessonDataflow", "PandasLessonDataflow", "PolarsLessonDataflow", "DATAFLOWS"]
