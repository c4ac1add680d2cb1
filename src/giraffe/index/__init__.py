# src/giraffe/index/__init__.py

from .interval_index import (
    Partition,
    IntervalIndex,
    drop_intervals,
)
