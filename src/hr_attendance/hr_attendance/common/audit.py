from __future__ import annotations

import logging
from typing import Any

audit_logger = logging.getLogger("audit")


def log_user_action(user_id: Any, action: str, entity: str, entity_id: Any = None, **details: Any) -> None:
    """Log user actions for audit trail"""
    extra = " ".join(f"{k}={v}" for k, v in sorted(details.items()) if v is not None)
    audit_logger.info(
        "user=%s action=%s entity=%s id=%s%s",
        user_id,
        action,
        entity,
        "" if entity_id is None else entity_id,
        f" {extra}" if extra else "",
    )
