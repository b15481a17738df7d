from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RequestContext:
    """Who is asking: passed into every repository call instead of a global session."""

    company_id: int
    user_id: str = "system"
    role: Optional[str] = None

    def __post_init__(self):
        if self.company_id is None:
            raise ValueError("RequestContext requires company_id")
        object.__setattr__(self, "company_id", int(self.company_id))
