import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Expense:
    date: datetime
    amount: int             # whole currency units, > 0
    category_name: str      # copied at entry time, not a foreign key
    note: Optional[str] = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
