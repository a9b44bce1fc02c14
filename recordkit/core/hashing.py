"""
Content digests used for record, cell and graph identity.
"""

import hashlib

from recordkit.exceptions import HashUnavailableError


DIGEST_ALGORITHM = "md5"


class ContentDigest:
    """
    Incremental digest over an ordered sequence of strings.

    Empty strings are skipped, so an unassigned title or value does not
    change the digest of its neighbours.

    Example:
        digest = ContentDigest()
        digest.update("first_name")
        digest.update("Text")
        digest.hexdigest()
    """

    def __init__(self, algorithm: str = DIGEST_ALGORITHM):
        try:
            self._digest = hashlib.new(algorithm)
        except ValueError as exc:
            raise HashUnavailableError(
                f"Digest algorithm '{algorithm}' is not available"
            ) from exc

    def update(self, text) -> 'ContentDigest':
        if text:
            self._digest.update(str(text).encode("utf-8"))
        return self

    def hexdigest(self) -> str:
        return self._digest.hexdigest()


def digest_of(*parts, algorithm: str = DIGEST_ALGORITHM) -> str:
    """Hex digest over the non-empty parts, in order."""
    digest = ContentDigest(algorithm)
    for part in parts:
        digest.update(part)
    return digest.hexdigest()
