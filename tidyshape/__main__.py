import argparse
import logging
import os
import sys

LOG_DIR = os.environ.get(
    "TIDYSHAPE_LOG_DIR", os.path.join(os.path.expanduser("~"), ".tidyshape", "logs"))

log = logging.getLogger("tidyshape.cli")


def _engine_modules(engine):
    if engine == "polars":
        from tidyshape import polars_json_flatten as flatten, polars_reshape as reshape
        from tidyshape.data_loading import load_file_pl as load
    else:
        from tidyshape import json_flatten as flatten, reshape
        from tidyshape.data_loading import load_file as load
    return load, reshape, flatten


def _emit(df, out):
    from tidyshape.data_loading import write_csv
    if out:
        path = write_csv(df, out)
        print(f"wrote {path} ({len(df)} rows x {len(df.columns)} columns)")
    else:
        print(df)


def cmd_generate(args):
    from tidyshape.lesson.sample_data import generate_all
    for entry in generate_all(args.output_dir):
        print(f"  {entry['name']}: {entry['rows']} rows -> {entry['path']}")


def cmd_wider(args):
    load, reshape, _flatten = _engine_modules(args.engine)
    df = load(args.input)
    wide = reshape.flag_wider(df, args.column, sep=args.sep, na_label=args.na_label)
    _emit(wide, args.out)


def cmd_longer(args):
    load, reshape, _flatten = _engine_modules(args.engine)
    df = load(args.input)
    if args.span:
        first, sep, last = args.span.partition(":")
        if not sep:
            raise ValueError(f"--span expects FIRST:LAST, got {args.span!r}")
        cols = reshape.column_span(df, first, last)
    else:
        cols = args.cols
    long = reshape.flag_longer(df, cols, names_to=args.names_to, values_to=args.values_to,
                               keep_true_only=not args.keep_all)
    _emit(long, args.out)


def cmd_flatten(args):
    load, _reshape, flatten = _engine_modules(args.engine)
    df = load(args.input)
    if args.unnest:
        df = flatten.unnest(df, args.unnest)
    df = flatten.flatten_objects(df)
    df = flatten.drop_nested(df) if args.drop_nested else flatten.stringify_nested(df)
    _emit(df, args.out)


def cmd_lesson(args):
    from tidyshape.data_loading import load_json_records
    from tidyshape.dataflow import DATAFLOWS

    load, _reshape, _flatten = _engine_modules(args.engine)
    records = load_json_records(args.json) if args.json else None
    flow = DATAFLOWS[args.engine](load(args.input), json_records=records)
    for name, narrative, (rows, cols) in flow.narrate():
        if args.explain and narrative:
            print(narrative)
        print(f"[{name}] {rows} rows x {cols} columns\n")
    print("round trip ok" if flow.check_round_trip() else "round trip FAILED")
    for name, path in flow.write_outputs(args.output_dir).items():
        print(f"wrote {name} -> {path}")


def build_parser():
    from tidyshape.data_loading import DEFAULT_OUTPUT_DIR

    parser = argparse.ArgumentParser(
        prog="tidyshape", description="Reshape tables between long and wide formats")
    parser.add_argument("--engine", choices=["pandas", "polars"], default="pandas",
                        help="Dataframe library to run the reshape with")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("generate", help="Write the SAFI sample data files")
    p.add_argument("output_dir", nargs="?", default="data")
    p.set_defaults(func=cmd_generate)

    p = sub.add_parser("wider", help="Separate a delimited column and spread it into flag columns")
    p.add_argument("input")
    p.add_argument("--column", required=True)
    p.add_argument("--sep", default=";")
    p.add_argument("--na-label", default=None, help="Name given to rows with a missing value")
    p.add_argument("--out", default=None)
    p.set_defaults(func=cmd_wider)

    p = sub.add_parser("longer", help="Gather flag columns back into rows")
    p.add_argument("input")
    cols = p.add_mutually_exclusive_group(required=True)
    cols.add_argument("--cols", nargs="+")
    cols.add_argument("--span", help="Column range FIRST:LAST")
    p.add_argument("--names-to", required=True)
    p.add_argument("--values-to", default=None)
    p.add_argument("--keep-all", action="store_true", help="Keep false flags and the flag column")
    p.add_argument("--out", default=None)
    p.set_defaults(func=cmd_longer)

    p = sub.add_parser("flatten", help="Flatten nested JSON so it can be written to CSV")
    p.add_argument("input")
    p.add_argument("--unnest", default=None, help="List column to expand into rows")
    p.add_argument("--drop-nested", action="store_true",
                   help="Drop remaining nested columns instead of JSON-encoding them")
    p.add_argument("--out", default=None)
    p.set_defaults(func=cmd_flatten)

    p = sub.add_parser("lesson", help="Run every lesson step and write the exports")
    p.add_argument("input")
    p.add_argument("--json", default=None, help="Nested JSON version of the interviews")
    p.add_argument("--output-dir", default=DEFAULT_OUTPUT_DIR)
    p.add_argument("--explain", action="store_true", help="Print the lesson prose for each step")
    p.set_defaults(func=cmd_lesson)
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    os.makedirs(LOG_DIR, exist_ok=True)
    logging.basicConfig(
        filename=os.path.join(LOG_DIR, "tidyshape.log"),
        level=logging.DEBUG,
        format="%(asctime)s pid=%(process)d [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    log.info("Running %s engine=%s pid=%d", args.command, args.engine, os.getpid())

    try:
        args.func(args)
    except (ValueError, TypeError, FileNotFoundError) as e:
        log.exception("%s failed", args.command)
        print(f"tidyshape {args.command}: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
