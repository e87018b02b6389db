"""Remote schema reconciliation."""

from opsboard.schema.normalize import normalize
from opsboard.schema.resolver import TITLE_FIELD, ColumnMapping, SchemaContext, SchemaResolver, build_column_mapping

__all__ = [
    "TITLE_FIELD",
    "ColumnMapping",
    "SchemaContext",
    "SchemaResolver",
    "build_column_mapping",
    "normalize",
]
