"""
DID resolution for the did-credentials SDK.

``Resolver`` dispatches a DID to the resolver registered for its method.
Method resolvers are objects with a ``resolve(did) -> dict`` method or plain
callables with the same signature.
"""
import logging
import re
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Protocol, Union

from cachetools import TTLCache

from ..exceptions import ResolutionError

__all__ = [
    'Resolver', 'DIDResolver', 'ParsedDID', 'parse_did', 'default_resolver',
    'EthrResolver', 'WebResolver', 'build_ethr_document',
]

logger = logging.getLogger(__name__)

# Resolved documents are cached for at most an hour
DEFAULT_CACHE_TTL = 3600
DEFAULT_CACHE_SIZE = 256

DID_PATTERN = re.compile(r"^did:([a-z0-9]+):((?:[A-Za-z0-9._%-]*:)*[A-Za-z0-9._%-]+)([/?#].*)?$")


class DIDResolver(Protocol):
    """Protocol for DID method resolvers"""

    def resolve(self, did: str) -> Dict[str, Any]:
        """Return the DID document for did"""
        ...


MethodResolver = Union[DIDResolver, Callable[[str], Dict[str, Any]]]


@dataclass(frozen=True)
class ParsedDID:
    did: str
    method: str
    id: str
    suffix: Optional[str] = None


def parse_did(did: str) -> ParsedDID:
    """
    Split a DID URL into its parts.

    Raises:
        ResolutionError: If did is not a syntactically valid DID
    """
    match = DID_PATTERN.match(did or "")
    if not match:
        raise ResolutionError(f"Invalid DID: {did}", did=did)
    method, method_id, suffix = match.groups()
    return ParsedDID(did=f"did:{method}:{method_id}", method=method, id=method_id, suffix=suffix)


class Resolver:
    """Resolves DIDs by dispatching on their method"""

    def __init__(
        self,
        registry: Mapping[str, MethodResolver],
        cache: bool = False,
        cache_ttl: int = DEFAULT_CACHE_TTL,
        cache_size: int = DEFAULT_CACHE_SIZE
    ):
        """
        Initialize the resolver.

        Args:
            registry: Mapping of DID method name to method resolver
            cache: Cache resolved documents
            cache_ttl: Seconds a cached document stays valid
            cache_size: Maximum number of cached documents
        """
        self.registry = dict(registry)
        self._cache: Optional[TTLCache] = TTLCache(maxsize=cache_size, ttl=cache_ttl) if cache else None
        self._cache_lock = threading.RLock()

    @property
    def methods(self):
        return sorted(self.registry)

    def resolve(self, did: str) -> Dict[str, Any]:
        """
        Resolve a DID to its document.

        Raises:
            ResolutionError: If the method is unsupported or resolution fails
        """
        parsed = parse_did(did)
        method_resolver = self.registry.get(parsed.method)
        if method_resolver is None:
            raise ResolutionError(f"Unsupported DID method: '{parsed.method}'", did=did)

        if self._cache is not None:
            with self._cache_lock:
                if parsed.did in self._cache:
                    return self._cache[parsed.did]

        resolve = getattr(method_resolver, "resolve", method_resolver)
        doc = resolve(parsed.did)
        if not doc:
            raise ResolutionError(f"resolver returned an empty document for {parsed.did}", did=did)
        logger.debug(f"Resolved DID document for {parsed.did[:16]}…")

        if self._cache is not None:
            with self._cache_lock:
                self._cache[parsed.did] = doc
        return doc


from .ethr import EthrResolver, build_ethr_document  # noqa: E402
from .web import WebResolver  # noqa: E402


def default_resolver(networks: Optional[Dict[str, Any]] = None) -> Resolver:
    """
    Resolver for the ``ethr`` and ``web`` methods.

    Args:
        networks: Extra networks keyed by chain id; the dict is shared, so
                  entries added later are visible to the ethr resolver
    """
    return Resolver({
        "ethr": EthrResolver(networks if networks is not None else {}),
        "web": WebResolver(),
    })
