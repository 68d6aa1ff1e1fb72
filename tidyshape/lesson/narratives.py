"""
Lesson Narratives

Prose for each step of the reshaping lesson, keyed by the step names used in
solutions_pandas / solutions_polars and LessonDataflow.steps.
"""

NARRATIVES = {

# ---------------------------------------------------------------------------
"interviews": """
THE SAFI INTERVIEWS

Each row of the SAFI table is one household interview. Some columns hold a
single value (village, respondent_wall_type, no_membrs). Two columns,
items_owned and months_lack_food, pack several answers into one cell joined
by semicolons. instanceID happens to be unique per row, which is what lets
us reshape the table and come back to exactly the rows we started with.
""",

# ---------------------------------------------------------------------------
"wall_type_wide": """
LONG TO WIDE: ONE COLUMN PER WALL TYPE

respondent_wall_type holds one of a few categories. pivot_wider takes the
distinct values of that column (names_from) and turns each into a new
column. We add a helper column of TRUE values (values_from) so that every
household gets TRUE under its own wall type, and values_fill puts FALSE
everywhere else. The row count does not change, but the column count grows
by the number of wall types minus the one column we consumed.
""",

# ---------------------------------------------------------------------------
"wall_type_long": """
WIDE BACK TO LONG

pivot_longer is the inverse. The wall-type columns become (name, value)
pairs, so every household now appears once per wall type. Keeping only the
TRUE rows and dropping the flag column brings us back to one row per
interview: the same row count we started with.
""",

# ---------------------------------------------------------------------------
"items_owned_wide": """
SEPARATING MULTI-VALUED CELLS

items_owned lists everything a household owns, separated by ";". Before we
can pivot we need one item per row: separate_rows splits the cell and
repeats the rest of the row for each piece. Households that listed nothing
have a missing value, which would become a column called "NA"; replace_na
labels them "no_listed_items" instead. From there it is the same TRUE-flag
pivot_wider as for wall types.
""",

# ---------------------------------------------------------------------------
"items_owned_long": """
ITEMS BACK TO LONG FORMAT

Gathering the item columns with pivot_longer gives one row per household and
item. Filtering on the flag leaves one row per item actually owned, the same
shape separate_rows produced.
""",

# ---------------------------------------------------------------------------
"number_items": """
COUNTING FLAGS ACROSS COLUMNS

In wide format a row-wise sum over the flag columns counts how many items a
household owns (TRUE counts as 1). "no_listed_items" is not an item, so it
is left out of the sum. Grouping by village and averaging gives the mean
number of items per village.
""",

# ---------------------------------------------------------------------------
"months_lack_food_wide": """
EXERCISE: MONTHS WITHOUT ENOUGH FOOD

months_lack_food has the same structure as items_owned. Separate it, flag
each month, and pivot wider. The month columns come out in the order the
answers first appear, so we reorder them into calendar order. "none" is an
answer, not a month: it gets a column but is not counted.
""",

# ---------------------------------------------------------------------------
"number_months_lack_food": """
EXERCISE: AVERAGE MONTHS WITHOUT FOOD BY ASSOCIATION MEMBERSHIP

Summing the month flags gives number_months_lack_food. Averaging it per
memb_assoc value shows whether association members report fewer hungry
months. Households that did not answer memb_assoc form their own group.
""",

# ---------------------------------------------------------------------------
"item_counts_by_village": """
EXERCISE: HOW MANY HOUSEHOLDS OWN EACH ITEM, PER VILLAGE

Going back to long format makes grouped counts easy: group by village and
item, then sum the flags.
""",

# ---------------------------------------------------------------------------
"interviews_plotting": """
EXPORTING THE PLOTTING TABLE

The plotting episode needs items and months in wide format plus the two
counts. We chain both reshapes and write the result to
data_output/interviews_plotting.csv.
""",

# ---------------------------------------------------------------------------
"livestock_long": """
NESTED JSON: UNNESTING A LIST OF RECORDS

In the JSON export, F_liv is a list of livestock records inside each
interview. Unnesting it gives one row per (household, animal type), with the
record's keys (F_curr_liv, F_liv_count) as ordinary columns.
""",

# ---------------------------------------------------------------------------
"interviews_json": """
WRITING NESTED DATA TO CSV

A CSV cell can only hold text. Writing a table that still has list or object
columns fails, so we either drop those columns or turn each nested cell into
a JSON string before writing. Object columns such as gps can also be spread
into gps.latitude, gps.longitude and gps.altitude.
""",
}
