# src/giraffe/cli.py
from __future__ import annotations
import argparse
from .build.pipeline import build_cmd, DEFAULT_DB
from .query.engine import query_cmd, DEFAULT_PROVENANCE_KEY
from .io.gff import PLACEHOLDER


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="giraffe",
        description="giraffe: index GFF3 annotations and look up the features overlapping genome coordinates"
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    # build
    p = sub.add_parser(
        "build",
        help="Build an annotation store from a GFF3 file (replaces the store's previous contents)"
    )
    p.add_argument("-i", "--input", default=None, help="GFF3 file (.gff3 or .gff3.gz). Default: stdin")
    p.add_argument("-o", "--output", default=DEFAULT_DB, help=f"Path to the annotation store (default: {DEFAULT_DB})")
    p.set_defaults(func=build_cmd)

    # query
    q = sub.add_parser(
        "query",
        help="Report the annotations overlapping each (seqname, coordinate) of a TSV table"
    )
    q.add_argument("-d", "--db", default=DEFAULT_DB, help=f"Path to the annotation store (default: {DEFAULT_DB})")
    q.add_argument("-i", "--input", default=None, help="Query TSV: seqname<TAB>coordinate, no header. Default: stdin")
    q.add_argument("-o", "--output", default=None, help="Output GFF3 path. Default: stdout")
    q.add_argument("--threads", type=int, default=1, help="Worker threads for per-sequence lookups (default: 1)")
    q.add_argument("--provenance-key", default=DEFAULT_PROVENANCE_KEY,
                   help=f"Attribute listing the query coordinates that hit each record (default: {DEFAULT_PROVENANCE_KEY})")
    q.add_argument("--no-provenance", action="store_true", help="Do not add the provenance attribute")
    q.add_argument("--frame-placeholder", default=PLACEHOLDER,
                   help=f"Text written when a record has no frame (default: '{PLACEHOLDER}')")
    q.set_defaults(func=query_cmd)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    main()
