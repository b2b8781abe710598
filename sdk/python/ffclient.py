from typing import Optional, Set
from urllib.parse import quote
import requests

NOT_REGISTERED = "feature not registered"

def _segment(value) -> str:
    return quote(str(value), safe="")

class InvalidFeature(Exception):
    def __init__(self, feature: str):
        self.feature = feature
        super().__init__(f"Invalid feature: {feature}")

def _error_detail(response) -> Optional[str]:
    try:
        return response.json().get("detail")
    except ValueError:
        return None

class FFClient:
    """Thin HTTP client for the feature gate service. No local caching."""

    def __init__(self, api_url: str, timeout: float = 2.0, actor: Optional[str] = None, session: Optional[requests.Session] = None):
        self.api_url = api_url.rstrip('/')
        self.timeout = timeout
        self.actor = actor
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, feature: Optional[str] = None, **kwargs):
        url = f"{self.api_url}{path}"
        headers = {"X-Actor": self.actor} if self.actor else {}
        r = self.session.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        # only the gate's own 404 means the name is outside the allow-list
        if feature is not None and r.status_code == 404 and _error_detail(r) == NOT_REGISTERED:
            raise InvalidFeature(feature)
        r.raise_for_status()
        if r.status_code == 204:
            return None
        return r.json()

    def explain(self, feature: str, user_id: Optional[int] = None) -> dict:
        params = {"user_id": user_id} if user_id is not None else None
        return self._request("GET", f"/evaluate/{_segment(feature)}", params=params)

    def is_active(self, feature: str, user_id: Optional[int] = None) -> bool:
        return self.explain(feature, user_id)["active"]

    def active_features(self) -> Set[str]:
        return set(self._request("GET", "/features")["active"])

    def registered_features(self) -> Optional[Set[str]]:
        registered = self._request("GET", "/features")["registered"]
        return set(registered) if registered is not None else None

    def feature_state(self, feature: str) -> dict:
        return self._request("GET", f"/features/{_segment(feature)}")

    def activate_group(self, feature: str, group: str) -> dict:
        return self._request("POST", f"/features/{_segment(feature)}/groups", feature, json={"group": group})

    def deactivate_group(self, feature: str, group: str) -> dict:
        return self._request("DELETE", f"/features/{_segment(feature)}/groups/{_segment(group)}", feature)

    def activate_user(self, feature: str, user_id: int) -> dict:
        return self._request("POST", f"/features/{_segment(feature)}/users", feature, json={"user_id": user_id})

    def deactivate_user(self, feature: str, user_id: int) -> dict:
        return self._request("DELETE", f"/features/{_segment(feature)}/users/{_segment(user_id)}", feature)

    def activate_percentage(self, feature: str, percentage: int) -> dict:
        return self._request("PUT", f"/features/{_segment(feature)}/percentage", feature, json={"percentage": percentage})

    def deactivate_percentage(self, feature: str) -> dict:
        return self._request("DELETE", f"/features/{_segment(feature)}/percentage", feature)

    def deactivate_all(self, feature: str) -> None:
        self._request("DELETE", f"/features/{_segment(feature)}", feature)
