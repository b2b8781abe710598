from functools import lru_cache
from featuregate.gate import FeatureGate
from featuregate.store import configured_features, redis_client

@lru_cache(maxsize=None)
def get_gate() -> FeatureGate:
    # one gate per process; groups defined on it at startup apply to every request
    return FeatureGate(redis_client(), features=configured_features())
