"""
Resolver for the ``did:web`` method.
"""
import logging
import urllib.parse
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config import get_resolver_timeout
from ..exceptions import ResolutionError

logger = logging.getLogger(__name__)

DOC_PATH = "/.well-known/did.json"


def did_web_url(method_id: str) -> str:
    """
    Map the method-specific id of a did:web DID to its document URL.

    ``example.com`` maps to ``https://example.com/.well-known/did.json`` and
    ``example.com:user:alice`` to ``https://example.com/user/alice/did.json``.
    """
    parts = [urllib.parse.unquote(p) for p in method_id.split(":")]
    domain, path = parts[0], parts[1:]
    if not domain:
        raise ResolutionError(f"Missing domain in did:web id: {method_id}")
    if path:
        return f"https://{domain}/{'/'.join(path)}/did.json"
    return f"https://{domain}{DOC_PATH}"


class WebResolver:
    """Fetches did:web documents over HTTPS"""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        retry_count: int = 2
    ):
        """
        Initialize the resolver.

        Args:
            session: Optional requests session to use
            timeout: HTTP timeout in seconds
            retry_count: Retries on connection errors and 5xx responses
        """
        self.timeout = timeout if timeout is not None else get_resolver_timeout()
        if session is None:
            session = requests.Session()
            retries = Retry(
                total=retry_count,
                backoff_factor=0.5,
                status_forcelist=[500, 502, 503, 504],
                allowed_methods=["GET"],
                raise_on_status=False
            )
            session.mount("https://", HTTPAdapter(max_retries=retries))
        self.session = session

    def resolve(self, did: str) -> Dict[str, Any]:
        """
        Resolve a did:web DID.

        Raises:
            ResolutionError: If the document cannot be fetched or does not match the DID
        """
        parts = did.split(":", 2)
        if len(parts) != 3 or parts[1] != "web":
            raise ResolutionError(f"Not a did:web DID: {did}", did=did)
        url = did_web_url(parts[2])

        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"did:web resolution failed for {url}: {e}")
            raise ResolutionError(
                f"resolver_error: DID must resolve to a valid https URL containing a JSON document: {e}",
                did=did
            ) from e

        # requests' JSONDecodeError is also a ValueError
        try:
            doc = response.json()
        except ValueError as e:
            raise ResolutionError(f"resolver_error: DID document for {did} is not valid JSON", did=did) from e

        if not isinstance(doc, dict) or doc.get("id") != did:
            raise ResolutionError(f"resolver_error: DID document id does not match requested did {did}", did=did)
        return doc
