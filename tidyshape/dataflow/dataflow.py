import logging
import os
from typing import Any, Dict as TDict, List, Optional, Tuple

from tidyshape.data_loading import DEFAULT_OUTPUT_DIR, write_csv
from tidyshape.lesson.narratives import NARRATIVES

log = logging.getLogger("tidyshape.dataflow")


class LessonDataflow:
    """Runs every step of the reshaping lesson, in order, on one interviews table.

    Results land in ``steps`` keyed by step name, and their (rows, columns)
    shapes in ``step_shapes``; these are the shapes the lesson prose talks
    about. Subclasses bind a solutions module and know how to build frames
    for their engine.
    """

    solutions: Any = None

    def __init__(self, raw_df, json_records: Optional[List[dict]] = None):
        self.raw_df = self._prepare(raw_df)
        self.json_records = json_records
        self.steps: TDict[str, Any] = {}
        self.step_shapes: TDict[str, Tuple[int, int]] = {}
        self.item_cols: List[str] = []
        self.wall_types: List[str] = []
        self._compute()

    def _prepare(self, raw_df):
        raise NotImplementedError

    def _records_to_frame(self, records):
        raise NotImplementedError

    def _record(self, name: str, df) -> None:
        self.steps[name] = df
        self.step_shapes[name] = tuple(df.shape)
        log.debug("step %s -> %d rows x %d columns", name, *df.shape)

    def _compute(self) -> None:
        s = self.solutions
        interviews = self.raw_df
        self._record("interviews", interviews)

        self.wall_types = s.wall_types(interviews)
        wall_wide = s.wall_type_wide(interviews)
        self._record("wall_type_wide", wall_wide)
        self._record("wall_type_long", s.wall_type_long(wall_wide, self.wall_types))

        items_wide = s.items_owned_wide(interviews)
        self.item_cols = s.added_columns(items_wide, interviews)
        self._record("items_owned_wide", items_wide)
        self._record("items_owned_long", s.items_owned_long(items_wide, self.item_cols))
        with_items = s.number_items(items_wide, self.item_cols)
        self._record("number_items", s.mean_items_by_village(with_items))

        months_wide = s.months_lack_food_wide(interviews)
        self._record("months_lack_food_wide", months_wide)
        with_months = s.number_months_lack_food(months_wide)
        self._record("number_months_lack_food", s.mean_months_by_memb_assoc(with_months))

        self._record("item_counts_by_village", s.item_counts_by_village(items_wide, self.item_cols))
        self._record("interviews_plotting", s.interviews_plotting(interviews))

        if self.json_records is not None:
            json_df = self._records_to_frame(self.json_records)
            self._record("livestock_long", s.livestock_long(json_df))
            self._record("interviews_json", s.json_for_csv(json_df))

    def check_round_trip(self) -> bool:
        """True when wall types went wide and came back long to one row per interview."""
        before = self.steps["interviews"]["instanceID"].to_list()
        after = self.steps["wall_type_long"]["instanceID"].to_list()
        ok = sorted(before) == sorted(after)
        if not ok:
            log.warning("Round trip changed rows: %d before, %d after", len(before), len(after))
        return ok

    def narrate(self):
        """Yield (step, narrative, shape) for each computed step."""
        for name, shape in self.step_shapes.items():
            yield name, NARRATIVES.get(name, "").strip(), shape

    def write_outputs(self, output_dir: str = DEFAULT_OUTPUT_DIR) -> TDict[str, str]:
        written = {"interviews_plotting": write_csv(
            self.steps["interviews_plotting"], os.path.join(output_dir, "interviews_plotting.csv"))}
        for name in ("livestock_long", "interviews_json"):
            if name in self.steps:
                written[name] = write_csv(self.steps[name], os.path.join(output_dir, f"{name}.csv"))
        return written
