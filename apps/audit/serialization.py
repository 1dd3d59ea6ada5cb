from __future__ import annotations

import json
from typing import Any, Optional

from rest_framework.utils.encoders import JSONEncoder

from .exceptions import AuditSerializationError


def serialize_state(value: Any) -> Optional[str]:
    """Encode an entity snapshot as stable JSON text (sorted keys)."""
    if value is None:
        return None
    try:
        return json.dumps(value, cls=JSONEncoder, sort_keys=True, ensure_ascii=False)
    except (TypeError, ValueError, OverflowError) as exc:
        raise AuditSerializationError(f"Cannot serialize {type(value).__name__}: {exc}") from exc
