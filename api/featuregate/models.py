from dataclasses import dataclass, field
from typing import Optional, Set

@dataclass(frozen=True)
class User:
    id: int

@dataclass
class FeatureState:
    name: str
    groups: Set[str] = field(default_factory=set)
    users: Set[int] = field(default_factory=set)
    percentage: Optional[int] = None
