# src/giraffe/io/__init__.py

from .gff import (
    parse_attributes,
    parse_line,
    read_gff3,
    format_record,
    GFF3Writer,
)
from .points import read_query_points
