import logging
from typing import Iterable, Optional, Tuple

from featuregate.groups import GroupRegistry

logger = logging.getLogger(__name__)

BUCKETS = 100

def parse_percentage(raw) -> Optional[int]:
    if raw is None:
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        logger.warning("ignoring malformed stored percentage %r", raw)
        return None

def within_percentage(user, percentage: Optional[int]) -> bool:
    # Deterministic: the same id always lands in the same bucket.
    if percentage is None or user is None:
        return False
    return user.id % BUCKETS < percentage

def match_groups(group_names: Iterable[str], registry: GroupRegistry, user) -> Optional[str]:
    for name in sorted(group_names):
        predicate = registry.get(name)
        if predicate is None:
            continue
        if predicate(user):
            return name
    return None

def evaluate_feature(
    group_names: Iterable[str],
    registry: GroupRegistry,
    user,
    is_listed_user,
    load_percentage,
) -> Tuple[bool, str]:
    """Combine the three strategies; the first one that matches wins.

    ``is_listed_user`` and ``load_percentage`` are called lazily so that a
    group match never touches the store again.
    """
    group = match_groups(group_names, registry, user)
    if group is not None:
        return True, f"group:{group}"
    if user is not None and is_listed_user(user):
        return True, "user"
    percentage = parse_percentage(load_percentage())
    if within_percentage(user, percentage):
        return True, f"percentage-{percentage}%"
    return False, "inactive"
