from __future__ import annotations

import uuid


def new_id() -> str:
    """Application-generated primary key (UUID4 string)."""
    return str(uuid.uuid4())
