"""
Credential aggregation.

Verifies a batch of credential tokens independently and partitions them
into verified and invalid ones. A single bad token never fails the batch.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)

# Upper bound on concurrent verifications per batch
DEFAULT_MAX_WORKERS = 8


@dataclass
class CredentialPartition:
    """
    Outcome of verifying a batch of credentials.

    Attributes:
        verified: Decoded payloads of the valid credentials, each with its ``jwt``
        invalid: Raw entries that failed verification, including ones that
                 are not JWT strings at all
    """
    verified: List[Dict[str, Any]] = field(default_factory=list)
    invalid: List[Any] = field(default_factory=list)


def aggregate(
    tokens: Sequence[Any],
    verify_one: Callable[[str], Dict[str, Any]],
    max_workers: Optional[int] = None,
) -> CredentialPartition:
    """
    Verify every token and partition the results.

    Verifications run concurrently on a thread pool. Each token ends up in
    exactly one list; input order is kept within each list.

    Args:
        tokens: Credential JWTs
        verify_one: Returns the decoded payload of a token, raising if it is invalid
        max_workers: Thread pool size (defaults to min(8, len(tokens)))

    Returns:
        CredentialPartition
    """
    partition = CredentialPartition()
    if not tokens:
        return partition

    workers = max_workers or min(DEFAULT_MAX_WORKERS, len(tokens))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [
            executor.submit(verify_one, token) if isinstance(token, str) else None
            for token in tokens
        ]
        for token, future in zip(tokens, futures):
            if future is None:
                logger.warning(f"Credential is not a JWT string: {type(token).__name__}")
                partition.invalid.append(token)
                continue
            try:
                payload = future.result()
            except Exception as e:
                # Any failure only invalidates this credential
                logger.warning(f"Credential verification failed: {e}")
                partition.invalid.append(token)
                continue
            partition.verified.append({**payload, "jwt": token})

    logger.debug(f"Verified {len(partition.verified)} credentials, {len(partition.invalid)} invalid")
    return partition
