from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

AuthClaims = dict[str, Any]


@dataclass(frozen=True)
class IssuedToken:
    token: str
    subject: str
    expires_at: datetime
