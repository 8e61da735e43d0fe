"""
AlertMap Grouping

Field extraction, hierarchical grouping, aggregation and filtering of
alert collections.
"""

from alertmap.grouping.aggregate import (
    Severity,
    active_count,
    alert_severity,
    count,
    is_active,
    is_dismissed,
    leaves,
    severity,
    summarize,
    totals,
)
from alertmap.grouping.engine import (
    FlatRow,
    GroupRow,
    LeafRow,
    dedupe_dimensions,
    flatten_groups,
    group_alerts,
    group_path_key,
)
from alertmap.grouping.fields import (
    UNKNOWN,
    FieldExtractor,
    alert_service_id,
    normalize_group_value,
    service_name_resolver,
    tag_key_dimension,
)
from alertmap.grouping.filters import (
    SortDirection,
    filter_active,
    filter_by_fields,
    search_alerts,
    sort_alerts,
)

__all__ = [
    # Fields
    "UNKNOWN",
    "FieldExtractor",
    "alert_service_id",
    "normalize_group_value",
    "service_name_resolver",
    "tag_key_dimension",
    # Grouping
    "group_alerts",
    "dedupe_dimensions",
    "flatten_groups",
    "group_path_key",
    "FlatRow",
    "GroupRow",
    "LeafRow",
    # Aggregation
    "Severity",
    "count",
    "active_count",
    "severity",
    "alert_severity",
    "is_dismissed",
    "is_active",
    "leaves",
    "summarize",
    "totals",
    # Filters
    "filter_active",
    "filter_by_fields",
    "search_alerts",
    "sort_alerts",
    "SortDirection",
]
