"""
Bulk package lookups against the AUR RPC interface.

    GET {url}/rpc/?v=5&type=info&arg[]=foo&arg[]=bar

A lookup of many names is split into requests of at most ``split_n`` names
to keep the query string within server limits. Every request must succeed;
the caller never sees a partial result.
"""

import logging
from typing import List, Optional, Sequence

import requests

from aurclean.core.interfaces import AurPackage
from aurclean.exceptions import RemoteQueryError

logger = logging.getLogger(__name__)

RPC_VERSION = "5"


def _chunks(names: Sequence[str], size: int):
    for start in range(0, len(names), size):
        yield names[start : start + size]


class AurClient:
    """RemoteIndex implementation over the AUR RPC v5 ``info`` endpoint."""

    def __init__(
        self,
        url: str = "https://aur.archlinux.org",
        split_n: int = 150,
        timeout: Optional[float] = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.rpc_url = f"{url.rstrip('/')}/rpc/"
        self.split_n = max(1, split_n)
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls) -> "AurClient":
        from aurclean.config import get_aur_timeout, get_aur_url, get_request_split_n

        return cls(
            url=get_aur_url(),
            split_n=get_request_split_n(),
            timeout=get_aur_timeout(),
        )

    def info(self, names: Sequence[str]) -> List[AurPackage]:
        """
        Look up package names on the AUR.

        Names unknown to the AUR are simply absent from the result.

        Args:
            names: Package names to look up

        Returns:
            One record per package found

        Raises:
            RemoteQueryError: On network errors, timeouts, HTTP errors,
                malformed responses or an RPC error reply
        """
        names = list(dict.fromkeys(names))
        packages: List[AurPackage] = []
        for chunk in _chunks(names, self.split_n):
            packages.extend(self._info_request(chunk))
        return packages

    def _info_request(self, names: Sequence[str]) -> List[AurPackage]:
        params = [("v", RPC_VERSION), ("type", "info")]
        params.extend(("arg[]", name) for name in names)

        logger.debug(f"AUR info request for {len(names)} packages")
        try:
            response = self.session.get(self.rpc_url, params=params, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.Timeout as e:
            raise RemoteQueryError(f"AUR request timed out: {e}", names)
        except requests.RequestException as e:
            raise RemoteQueryError(f"AUR request failed: {e}", names)
        except ValueError as e:
            raise RemoteQueryError(f"AUR returned invalid JSON: {e}", names)

        if not isinstance(payload, dict):
            raise RemoteQueryError("AUR returned an unexpected response", names)
        if payload.get("type") == "error":
            raise RemoteQueryError(
                f"AUR RPC error: {payload.get('error', 'unknown error')}", names
            )

        results = payload.get("results")
        if not isinstance(results, list):
            raise RemoteQueryError("AUR response has no results list", names)

        packages = []
        for record in results:
            try:
                packages.append(
                    AurPackage(name=record["Name"], base=record["PackageBase"])
                )
            except (KeyError, TypeError) as e:
                raise RemoteQueryError(f"AUR record is missing {e}", names)
        return packages
