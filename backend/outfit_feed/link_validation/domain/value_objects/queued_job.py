from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class QueuedJob:
    job_name: str
    payload: Dict[str, Any] = field(default_factory=dict)
    attempt: int = 1  # 第几次投递
