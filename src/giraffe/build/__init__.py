# src/giraffe/build/__init__.py

from .pipeline import (
    BuildPipeline,
    build_paths,
    build_cmd,
)
