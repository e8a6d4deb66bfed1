import requests
import structlog
from pydantic import BaseModel

from ..config import USER_AGENT
from ..errors import MutationError, RecordFetchError, ZoneListError

log = structlog.get_logger()

CLOUDFLARE_API_URL = "https://api.cloudflare.com/client/v4"
ZONES_PER_PAGE = 50
RECORDS_PER_PAGE = 100


class Zone(BaseModel):
    id: str
    name: str


class DNSRecord(BaseModel):
    id: str
    type: str
    name: str
    content: str = ""
    proxied: bool = False


class CloudflareAPIError(Exception):
    pass


class CloudflareClient:
    def __init__(self, credential, api_url=CLOUDFLARE_API_URL, timeout=10):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = self._get_requests_session(credential)

    def _get_requests_session(self, credential):
        session = requests.Session()
        session.headers.update(credential.auth_headers())
        session.headers.update({"Content-Type": "application/json", "User-Agent": USER_AGENT})
        return session

    def _api_request(self, method, path, params=None, data=None):
        url = f"{self.api_url}{path}"
        log.debug("Cloudflare API Request", url=url, method=method, params=params, data=data)
        try:
            response = self.session.request(method, url, params=params, json=data, timeout=self.timeout)
            log.debug("Cloudflare API Response", url=response.url, status_code=response.status_code)
        except requests.exceptions.RequestException as e:
            raise CloudflareAPIError(f"request failed: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            body = None

        if not response.ok or not body or not body.get("success"):
            errors = (body or {}).get("errors") or []
            detail = "; ".join(f"{err.get('code')}: {err.get('message')}" for err in errors)
            raise CloudflareAPIError(
                f"HTTP {response.status_code}" + (f" ({detail})" if detail else "")
            )
        return body

    def list_zones(self):
        """
        Lists every zone visible to the credential, in API order.

        Raises:
            ZoneListError: If any page cannot be fetched.
        """
        zones = []
        page = 1
        try:
            while True:
                body = self._api_request("GET", "/zones", params={"page": page, "per_page": ZONES_PER_PAGE})
                zones.extend(Zone.model_validate(z) for z in body["result"])
                total_pages = (body.get("result_info") or {}).get("total_pages") or 1
                if page >= total_pages:
                    break
                page += 1
        except CloudflareAPIError as e:
            log.debug("Failed to list Cloudflare zones", error=str(e))
            raise ZoneListError(f"Unable to list zones: {e}") from e
        log.debug("Found Cloudflare zones", count=len(zones))
        return zones

    def get_dns_records(self, zone_id, name, record_type="A"):
        params = {"type": record_type, "name": name, "per_page": RECORDS_PER_PAGE}
        try:
            body = self._api_request("GET", f"/zones/{zone_id}/dns_records", params=params)
        except CloudflareAPIError as e:
            raise RecordFetchError(f"Unable to get existing record for {name}: {e}") from e
        return [DNSRecord.model_validate(r) for r in body["result"]]

    def create_dns_record(self, zone_id, name, content):
        data = {"type": "A", "name": name, "content": content, "proxied": False}
        try:
            body = self._api_request("POST", f"/zones/{zone_id}/dns_records", data=data)
        except CloudflareAPIError as e:
            raise MutationError(f"Failed to create {name}: {e}") from e
        log.info("Created DNS record", name=name, content=content)
        return DNSRecord.model_validate(body["result"])

    def update_dns_record(self, zone_id, record_id, name, content):
        data = {"type": "A", "name": name, "content": content, "proxied": False}
        try:
            body = self._api_request("PUT", f"/zones/{zone_id}/dns_records/{record_id}", data=data)
        except CloudflareAPIError as e:
            raise MutationError(f"Failed to update {name}: {e}") from e
        log.info("Updated DNS record", name=name, content=content)
        return DNSRecord.model_validate(body["result"])

    def delete_dns_record(self, zone_id, record_id, name=None):
        try:
            self._api_request("DELETE", f"/zones/{zone_id}/dns_records/{record_id}")
        except CloudflareAPIError as e:
            raise MutationError(f"Failed to delete {name or record_id}: {e}") from e
        log.info("Deleted DNS record", name=name, record_id=record_id)
