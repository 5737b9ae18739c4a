import logging
from dataclasses import dataclass
from typing import Optional

import requests

from config import get_float_setting, get_setting

log = logging.getLogger(__name__)

DEFAULT_URL_TEMPLATE = "https://ipinfo.io/{ip}/json"
DEFAULT_TIMEOUT = 5.0


class OrganizationLookupError(LookupError):
    """Raised when the IP metadata service cannot describe an address."""


@dataclass(frozen=True)
class OrganizationInfo:
    ip: str
    org: str = ""


class IpInfoClient:
    def __init__(self, url_template: Optional[str] = None, token: Optional[str] = None,
                 timeout: Optional[float] = None, session: Optional[requests.Session] = None):
        self.url_template = url_template or get_setting("IPINFO_URL", "ipinfo_url", DEFAULT_URL_TEMPLATE)
        if "{ip}" not in self.url_template:
            raise ValueError(f"IP metadata URL template must contain '{{ip}}': {self.url_template}")
        if timeout is None:
            timeout = get_float_setting("IPINFO_TIMEOUT", "ipinfo_timeout", DEFAULT_TIMEOUT)
        self.timeout = timeout
        token = token or get_setting("IPINFO_TOKEN", "ipinfo_token")

        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if token:
            self.session.headers.update({"Authorization": f"Bearer {token}"})
            log.debug("Initialized IP metadata client (token mode) for %s", self.url_template)
        else:
            log.debug("Initialized IP metadata client (anonymous) for %s", self.url_template)

    def _build_url(self, ip: str) -> str:
        return self.url_template.format(ip=ip)

    def _request(self, ip: str) -> dict:
        url = self._build_url(ip)
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            resp = getattr(exc, "response", None)
            status = resp.status_code if resp is not None else "request"
            log.debug("IP metadata lookup for %s failed", ip, exc_info=True)
            raise OrganizationLookupError(f"GET {url} failed ({status}): {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise OrganizationLookupError(f"GET {url} returned invalid JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise OrganizationLookupError(f"GET {url} returned {type(payload).__name__}, expected an object")
        return payload

    def lookup(self, ip: str) -> OrganizationInfo:
        data = self._request(ip)
        org = data.get("org")
        return OrganizationInfo(
            ip=str(data.get("ip") or ip),
            org=org if isinstance(org, str) else "",
        )

    def __call__(self, ip: str) -> OrganizationInfo:
        return self.lookup(ip)


_client: Optional[IpInfoClient] = None


def _get_client() -> IpInfoClient:
    global _client
    if _client is None:
        _client = IpInfoClient()
    return _client


def lookup_organization(ip: str) -> OrganizationInfo:
    return _get_client().lookup(ip)
