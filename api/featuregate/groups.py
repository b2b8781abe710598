import threading
from typing import Any, Callable, Dict, List, Optional

Predicate = Callable[[Any], bool]

ALL = "all"

def _everyone(user) -> bool:
    return True

class GroupRegistry:
    """Process-local mapping of group name -> predicate over a user.

    Predicates cannot be serialized, so groups live here rather than in the
    store. Registration normally happens at startup; lookups happen on every
    evaluation and never take the lock.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._groups: Dict[str, Predicate] = {ALL: _everyone}

    def define(self, name, predicate: Predicate) -> None:
        with self._lock:
            groups = dict(self._groups)
            groups[str(name)] = predicate
            self._groups = groups

    def group(self, name):
        def decorator(predicate: Predicate) -> Predicate:
            self.define(name, predicate)
            return predicate
        return decorator

    def get(self, name) -> Optional[Predicate]:
        return self._groups.get(str(name))

    def names(self) -> List[str]:
        return sorted(self._groups)

    def __contains__(self, name) -> bool:
        return str(name) in self._groups
