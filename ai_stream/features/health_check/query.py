from typing import Dict, Literal

from pydantic import BaseModel


class RelayHealth(BaseModel):
    """Liveness report. Never contacts upstream and never echoes the key."""

    status: Literal["ok", "error"]
    upstream_model: str
    services: Dict[str, Literal["configured", "missing"]]
