"""Google Cloud DNS REST client.

The client is intentionally thin so it can be replaced in tests.
"""

from __future__ import annotations

import logging
from typing import List, Optional

import requests
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import AuthorizedSession
from google.oauth2 import service_account

from .config import ServiceAccountKey
from .errors import ConfigError, TransportError
from .records import ChangeSet, ExistingRecord, records_from_api

LOGGER = logging.getLogger(__name__)

CLOUD_DNS_API = "https://dns.googleapis.com/dns/v1"
CLOUD_DNS_SCOPE = "https://www.googleapis.com/auth/ndev.clouddns.readwrite"
DEFAULT_TIMEOUT = 30.0


class CloudDnsClient:
    """List and change resource record sets of a managed zone."""

    def __init__(
        self,
        session: requests.Session,
        project: str,
        *,
        base_url: str = CLOUD_DNS_API,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the client.

        Args:
            session (requests.Session): Session that adds credentials to requests.
            project (str): Cloud project identifier.
            base_url (str): API root URL.
            timeout (Optional[float]): Per-request timeout in seconds.
        """
        self._session = session
        self.project = project
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    @classmethod
    def from_service_account(cls, key: ServiceAccountKey, **kwargs: object) -> "CloudDnsClient":
        """Build a client authorized by a service account key.

        Args:
            key (ServiceAccountKey): Parsed key file.
            **kwargs (object): Extra keyword arguments for the constructor.

        Returns:
            CloudDnsClient: Client bound to the key's project.

        Raises:
            ConfigError: If the key cannot be turned into credentials.
        """
        try:
            credentials = service_account.Credentials.from_service_account_info(
                key.info,
                scopes=[CLOUD_DNS_SCOPE],
            )
        except (ValueError, KeyError) as err:
            raise ConfigError(f"Invalid service account key: {err}") from err
        return cls(AuthorizedSession(credentials), key.project_id, **kwargs)

    def _zone_url(self, zone: str, resource: str) -> str:
        """Return the URL of a managed zone sub-resource.

        Args:
            zone (str): Managed zone name.
            resource (str): ``rrsets`` or ``changes``.

        Returns:
            str: Absolute URL.
        """
        return f"{self._base_url}/projects/{self.project}/managedZones/{zone}/{resource}"

    def _request(self, operation: str, zone: str, method: str, url: str, **kwargs: object) -> dict:
        """Send one API request and decode the JSON response.

        Args:
            operation (str): Operation name used in errors.
            zone (str): Managed zone name used in errors.
            method (str): HTTP method.
            url (str): Request URL.
            **kwargs (object): Extra arguments for ``requests``.

        Returns:
            dict: Decoded response body.

        Raises:
            TransportError: On connection, authorization, HTTP or decoding errors.
        """
        try:
            response = self._session.request(method, url, timeout=self._timeout, **kwargs)
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, GoogleAuthError, ValueError) as err:
            LOGGER.warning("Cloud DNS %s failed for %s: %s", operation, zone, err)
            raise TransportError(operation, zone, err) from err
        if not isinstance(payload, dict):
            raise TransportError(operation, zone, "response is not a JSON object")
        return payload

    def list_records(self, zone: str) -> List[ExistingRecord]:
        """List every resource record set in a zone.

        Args:
            zone (str): Managed zone name.

        Returns:
            List[ExistingRecord]: Records in API order across all pages.

        Raises:
            TransportError: If any page request fails.
        """
        url = self._zone_url(zone, "rrsets")
        records: List[ExistingRecord] = []
        params: dict = {}
        while True:
            payload = self._request("list", zone, "GET", url, params=params)
            records.extend(records_from_api(payload.get("rrsets", [])))
            page_token = payload.get("nextPageToken")
            if not page_token:
                break
            params = {"pageToken": page_token}
        LOGGER.debug("Listed %d record sets in zone %s", len(records), zone)
        return records

    def apply_change(self, zone: str, change: ChangeSet) -> dict:
        """Submit a change to a zone.

        Args:
            zone (str): Managed zone name.
            change (ChangeSet): Deletions and additions to apply.

        Returns:
            dict: Created ``Change`` resource with ``id`` and ``status``.

        Raises:
            TransportError: If the request fails or is rejected.
        """
        url = self._zone_url(zone, "changes")
        LOGGER.info(
            "Applying %d deletions and %d additions to zone %s",
            len(change.deletions),
            len(change.additions),
            zone,
        )
        return self._request("apply", zone, "POST", url, json=change.to_api())


__all__ = ["CLOUD_DNS_API", "CLOUD_DNS_SCOPE", "CloudDnsClient"]
