#!/usr/bin/env python3
import sys
import argparse
import logging

from fieldler.schemaloader import SchemaLoader
from fieldler.ingest import JsonParser
from fieldler import console
from fieldler.generator.creator import create_field_data_and_comparator

log = logging.getLogger("fieldler.verify")


class DifferenceFound(Exception):
    def __init__(self, type_name: str, fields):
        self.type_name = type_name
        self.fields = sorted(str(f) for f in fields)
        super().__init__(f"[{type_name}] differences in: {', '.join(self.fields)}")


def _load_schema(loader: SchemaLoader):
    console.step(log, "Loading schema:", loader.yaml_path)
    schema = loader.load()
    console.ok(log, f"Schema loaded with {len(schema)} type(s).")
    return schema


def _load_json(parser: JsonParser, title: str, path: str):
    console.step(log, f"Reading {title} JSON:", path)
    data = parser.parse(path)
    console.ok(log, f"{title} loaded.")
    return data


def main() -> int:
    p = argparse.ArgumentParser(
        description="YAML-declared field-by-field comparison of two JSON records."
    )
    p.add_argument("-s", "--schema",    required=True, help="Path to the types .yml")
    p.add_argument("-r", "--reference", required=True, help="Path to the reference JSON file")
    p.add_argument("-p", "--profile",   required=True, help="Path to the tested JSON file")

    p.add_argument("-v", "--verbose", action="count", default=0,
                   help="Increase log verbosity (-v, -vv)")
    p.add_argument("--log-file", default=None, help="Also write the log to this file")
    p.add_argument("-f", "--fields", nargs="+", default=None, metavar="FIELD",
                   help="Only check these fields (default: every field of every type)")
    p.add_argument("--fail-on-diff", action="store_true",
                   help="Exit with status 1 when a checked field differs")

    args = p.parse_args()
    console.setup_logging(args.verbose, args.log_file)

    loader = SchemaLoader(args.schema)
    schema = _load_schema(loader)
    parser = JsonParser(schema)

    data_ref = _load_json(parser, "reference", args.reference)
    data_tst = _load_json(parser, "profile", args.profile)

    wanted = set(args.fields or [])
    known = set()
    failures = []

    for type_name, class_data in loader.class_data(schema).items():
        field_type, comparator = create_field_data_and_comparator(class_data)
        getters = {field_type[fd.enum_name]: fd.getter() for fd in class_data.accessible_fields()}

        ref = data_ref[type_name]
        tst = data_tst[type_name]
        comparison = comparator.compare(ref, tst)

        selected = [f for f in field_type if str(f) in wanted]
        known.update(str(f) for f in selected)
        if wanted and not selected:
            log.debug("[%s] none of the requested fields, skipped", type_name)
            continue

        console.step(log, "Comparing type:", f"[{type_name}] {comparator.name}")
        if selected:
            comparison.evaluate_fields(selected)
        else:
            comparison.evaluate_all()

        checked = selected or list(field_type)
        different = [f for f in checked if comparison.is_different(f)]
        log.info("    • %s: diffs %d/%d", type_name, len(different), len(checked))
        for f in different:
            getter = getters[f]
            log.info("       - %s: %r != %r", f, getter(ref), getter(tst))

        comparison.do_when_all_equal(lambda: console.ok(log, f"[{type_name}] all checked fields match"), selected)

        if args.fail_on_diff:
            try:
                comparison.throw_when_any_different(lambda: DifferenceFound(type_name, different), selected)
            except DifferenceFound as e:
                log.error(str(e))
                failures.append(e)

    for name in sorted(wanted - known):
        log.warning("Field '%s' is not declared by any type", name)

    if failures:
        return 1

    console.ok(log, "Done.")
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except Exception as e:
        log.error("Error: %s", e)
        sys.exit(2)
