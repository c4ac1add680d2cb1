# src/giraffe/models.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

# Type hints for clarity
Attr = Tuple[str, str]  # (key, value)


@dataclass(frozen=True)
class AnnotationRecord:
    """
    Fixed-shape fields of one stored feature.
    Coordinates are inclusive on both ends; `score`, `strand` and `frame`
    are None when the input did not provide them.
    """
    id: int
    seqname: str
    source: str
    feature_type: str
    start: int
    end: int
    score: Optional[float] = None
    strand: Optional[str] = None
    frame: Optional[int] = None


@dataclass
class AnnotationEntry:
    """One decoded annotation line, before it is given an id."""
    seqname: str
    source: str
    feature_type: str
    start: int
    end: int
    score: Optional[float] = None
    strand: Optional[str] = None
    frame: Optional[int] = None
    attributes: List[Attr] = field(default_factory=list)


@dataclass(frozen=True)
class QueryPoint:
    seqname: str
    coordinate: int


@dataclass
class ResolvedRecord:
    """A matched record with its attributes and the coordinates that hit it."""
    record: AnnotationRecord
    attributes: List[Attr]
    hits: List[int]
