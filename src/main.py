"""
1) Load a family document (JSON, or GEDCOM via --gedcom) into memory.
2) Normalize derived relationships (children, inferred spouses).
3) Validate the records and the graph for cycles, impossible ages and date ordering.
4) Optionally keep only the persons within --radius steps of --center.
5) Assign generation levels and compute the node layout and connector lines.
6) Write the layout as JSON and/or DOT for an external renderer.
"""

import argparse
import json
import logging
from pathlib import Path
import sys

from config import DEFAULT_CONFIG
from graph import get_ego_graph
from layout import compute_layout
from parsing import DocumentError, import_gedcom, load_document_file
from plotting import layout_to_dot, write_dot
from validation import validate_graph, validate_person


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Normalize a family tree and compute its layout.")
    parser.add_argument("input", type=Path, help="Family document (.json) or GEDCOM file (.ged)")
    parser.add_argument("--gedcom", action="store_true", help="Treat the input as GEDCOM")
    parser.add_argument("--json", type=Path, dest="json_out", help="Write levels/positions/connectors here")
    parser.add_argument("--dot", type=Path, help="Write a DOT (or .png/.svg/.pdf) rendering here")
    parser.add_argument("--horizontal-spacing", type=float)
    parser.add_argument("--vertical-spacing", type=float)
    parser.add_argument("--node-width", type=float)
    parser.add_argument("--node-height", type=float)
    parser.add_argument("--legacy-levels", action="store_true", help="Do not requeue a person lowered by a spouse")
    parser.add_argument("--center", help="Only lay out persons near this person ID")
    parser.add_argument("--radius", type=int, default=2, help="Relationship steps kept around --center")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    config = DEFAULT_CONFIG.with_overrides(
        horizontal_spacing=args.horizontal_spacing,
        vertical_spacing=args.vertical_spacing,
        node_width=args.node_width,
        node_height=args.node_height,
    )

    print(f"Loading family document: {args.input}")
    record_errors: dict[str, dict[str, list[str]]] = {}
    try:
        if args.gedcom or args.input.suffix.lower() == ".ged":
            graph = import_gedcom(args.input)
        else:
            graph = load_document_file(args.input, record_errors)
    except (OSError, DocumentError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(f"  Found {len(graph)} persons")

    print("Validating...")
    warnings = []
    # Raw document records are checked before malformed values were dropped
    for person_id, errors in record_errors.items():
        for field_name, messages in errors.items():
            warnings.extend(f"{person_id}.{field_name}: {m}" for m in messages)
    for person_id, person in graph.persons().items():
        if person_id in record_errors:
            continue
        for field_name, messages in validate_person(person).items():
            warnings.extend(f"{person_id}.{field_name}: {m}" for m in messages)
    warnings.extend(validate_graph(graph))
    if warnings:
        print(f"  Found {len(warnings)} validation warnings:")
        for w in warnings[:10]:  # Show first 10 warnings
            print(f"    - {w}")
        if len(warnings) > 10:
            print(f"    ... and {len(warnings) - 10} more")
    else:
        print("  No validation issues found")

    if args.center:
        try:
            graph = get_ego_graph(graph, args.center, radius=args.radius)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        print(f"  Kept {len(graph)} persons within {args.radius} steps of {args.center}")

    print("Computing layout...")
    result = compute_layout(graph, config=config, requeue_lowered=not args.legacy_levels)
    generations = len(set(result.levels.values()))
    print(
        f"  {len(result.positions)} nodes on {generations} generations, "
        f"{len(result.connectors)} connector segments, {len(result.conflicts)} level conflicts"
    )

    if args.json_out:
        args.json_out.write_text(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        print(f"Layout saved to {args.json_out}")

    if args.dot:
        write_dot(layout_to_dot(graph, result, config=config), args.dot)
        print(f"Graph saved to {args.dot}")

    print("Done!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
