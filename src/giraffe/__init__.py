# src/giraffe/__init__.py

from .errors import (
    GiraffeError,
    CodecError,
    InvalidInterval,
    StorageError,
    IndexSealed,
    IndexNotReady,
    BuildError,
    InternalError,
    UnknownRecord,
    NotFound,
)
from .models import AnnotationRecord, AnnotationEntry, QueryPoint, ResolvedRecord
from .store import StoreHandle, RecordStore, AttributeTable
from .index import IntervalIndex
from .build import BuildPipeline, build_paths
from .query import OverlapQueryEngine, query_paths

__version__ = "0.1.0"
