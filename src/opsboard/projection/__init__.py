"""Record projection between remote lists and logical records."""

from opsboard.projection.bound import BoundList, day_window
from opsboard.projection.codec import decode_value, encode_value, from_remote, to_remote
from opsboard.projection.layouts import LAYOUTS, FieldKind, FieldSpec, RecordLayout

__all__ = [
    "LAYOUTS",
    "BoundList",
    "FieldKind",
    "FieldSpec",
    "RecordLayout",
    "day_window",
    "decode_value",
    "encode_value",
    "from_remote",
    "to_remote",
]
