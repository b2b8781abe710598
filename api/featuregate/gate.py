import logging
from contextlib import contextmanager
from typing import Any, Callable, FrozenSet, Iterable, Optional, Set, Tuple

import redis

from featuregate.exceptions import InvalidFeature, StoreError
from featuregate.groups import GroupRegistry
from featuregate.keys import (
    KEY_PATTERN,
    feature_keys,
    feature_name,
    group_key,
    is_valid_name,
    percentage_key,
    user_key,
)
from featuregate.models import FeatureState
from featuregate.services.rollout import evaluate_feature, parse_percentage

logger = logging.getLogger(__name__)

@contextmanager
def _store_errors(operation: str):
    try:
        yield
    except redis.exceptions.RedisError as exc:
        raise StoreError(f"{operation} failed: {exc}") from exc

def _user_ids(members: Iterable[str]) -> Set[int]:
    ids = set()
    for member in members:
        try:
            ids.add(int(member))
        except ValueError:
            logger.warning("ignoring malformed stored user id %r", member)
    return ids

class FeatureGate:
    """Decides whether a feature is active for a user.

    All toggle state lives in Redis under ``feature:<name>:{groups,users,percentage}``.
    The only local state is the group registry, since predicates cannot be
    stored. When ``features`` is given, only those names may be mutated.
    """

    def __init__(self, redis_client, features: Optional[Iterable[str]] = None, groups: Optional[GroupRegistry] = None):
        self.redis = redis_client
        self._features = None if features is None else frozenset(str(f) for f in features)
        self.groups = GroupRegistry() if groups is None else groups

    # configuration

    def define_group(self, group, predicate: Callable[[Any], bool]) -> None:
        self.groups.define(group, predicate)

    @property
    def is_restricted(self) -> bool:
        return self._features is not None

    def registered_features(self) -> Optional[FrozenSet[str]]:
        return self._features

    def is_valid(self, key: str) -> bool:
        if self._features is None:
            return True
        return feature_name(key) in self._features

    # evaluation

    def active(self, feature, user=None) -> bool:
        return self.explain(feature, user)[0]

    def explain(self, feature, user=None) -> Tuple[bool, str]:
        with _store_errors(f"evaluate {feature}"):
            return evaluate_feature(
                group_names=self.redis.smembers(group_key(feature)) or set(),
                registry=self.groups,
                user=user,
                is_listed_user=lambda u: bool(self.redis.sismember(user_key(feature), u.id)),
                load_percentage=lambda: self.redis.get(percentage_key(feature)),
            )

    # mutation

    def activate_group(self, feature, group) -> None:
        key = group_key(feature)
        self._guard(feature, key)
        with _store_errors(f"activate group {group} on {feature}"):
            self.redis.sadd(key, str(group))
        logger.info("activated group %s for feature %s", group, feature)

    def deactivate_group(self, feature, group) -> None:
        key = group_key(feature)
        self._guard(feature, key)
        with _store_errors(f"deactivate group {group} on {feature}"):
            self.redis.srem(key, str(group))
        logger.info("deactivated group %s for feature %s", group, feature)

    def activate_user(self, feature, user) -> None:
        key = user_key(feature)
        self._guard(feature, key)
        with _store_errors(f"activate user {user.id} on {feature}"):
            self.redis.sadd(key, user.id)
        logger.info("activated user %s for feature %s", user.id, feature)

    def deactivate_user(self, feature, user) -> None:
        key = user_key(feature)
        self._guard(feature, key)
        with _store_errors(f"deactivate user {user.id} on {feature}"):
            self.redis.srem(key, user.id)
        logger.info("deactivated user %s for feature %s", user.id, feature)

    def activate_percentage(self, feature, percentage: int) -> None:
        key = percentage_key(feature)
        self._guard(feature, key)
        # thresholds are whole percents; 12.5 is stored as 12
        percentage = int(percentage)
        if not 0 <= percentage <= 100:
            logger.warning("percentage %s for feature %s is outside 0..100", percentage, feature)
        with _store_errors(f"activate percentage on {feature}"):
            self.redis.set(key, percentage)
        logger.info("activated %s%% of users for feature %s", percentage, feature)

    def deactivate_percentage(self, feature) -> None:
        key = percentage_key(feature)
        self._guard(feature, key)
        with _store_errors(f"deactivate percentage on {feature}"):
            self.redis.delete(key)
        logger.info("deactivated percentage for feature %s", feature)

    def deactivate_all(self, feature) -> None:
        keys = feature_keys(feature)
        # all three keys are checked before anything is deleted
        for key in keys:
            self._guard(feature, key)
        with _store_errors(f"deactivate {feature}"):
            self.redis.delete(*keys)
        logger.info("deactivated feature %s completely", feature)

    # inspection

    def active_features(self) -> Set[str]:
        with _store_errors("list active features"):
            return {feature_name(key) for key in self.redis.scan_iter(match=KEY_PATTERN)}

    def is_known(self, feature) -> bool:
        if self._features is not None:
            return str(feature) in self._features
        with _store_errors(f"read {feature}"):
            return self.redis.exists(*feature_keys(feature)) > 0

    def feature_state(self, feature) -> FeatureState:
        with _store_errors(f"read {feature}"):
            groups = self.redis.smembers(group_key(feature)) or set()
            users = self.redis.smembers(user_key(feature)) or set()
            percentage = self.redis.get(percentage_key(feature))
        return FeatureState(
            name=str(feature),
            groups=set(groups),
            users=_user_ids(users),
            percentage=parse_percentage(percentage),
        )

    def _guard(self, feature, key: str) -> None:
        if not is_valid_name(feature) or not self.is_valid(key):
            logger.warning("rejected mutation of invalid feature %r", feature)
            raise InvalidFeature(feature)
