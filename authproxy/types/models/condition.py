from typing import Optional
from authproxy.types.base import BaseModel


class ConditionStatus:
    """Tri-state status of a condition."""

    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


class Condition(BaseModel):
    type: str
    status: str
    observed_generation: Optional[int]
    reason: Optional[str]
    message: Optional[str]
    last_transition_time: Optional[str]
