# src/giraffe/query/__init__.py

from .engine import (
    group_points,
    OverlapQueryEngine,
    query_paths,
    query_cmd,
)
