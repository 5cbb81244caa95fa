"""
Document store for featureflow.

Feature records live as Markdown files under one directory per lifecycle
stage. The directory a record is in and the status in its header must agree.
"""

from featureflow.lib.types import Stage
from featureflow.store.models import FeatureRecord
from featureflow.store.records import (
    create_record,
    find_record,
    init_store,
    list_all_records,
    list_records,
    next_record_id,
    normalize_record_id,
    stage_dir,
    store_exists,
)

__all__ = [
    "FeatureRecord",
    "Stage",
    "create_record",
    "find_record",
    "init_store",
    "list_all_records",
    "list_records",
    "next_record_id",
    "normalize_record_id",
    "stage_dir",
    "store_exists",
]
