# src/giraffe/store/__init__.py

from .handle import StoreHandle
from .records import RecordStore
from .attributes import AttributeTable
