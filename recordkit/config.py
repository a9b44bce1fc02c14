"""
Naming configuration.

The application prefix and the segment delimiter are the only settings
that influence key generation. They live in an immutable value so that a
key can never be observed with a half-updated configuration.
"""

import os
from dataclasses import dataclass, replace


DEFAULT_APP_PREFIX = "ASRC"
DEFAULT_DELIMITER = ":"

ENV_APP_PREFIX = "RECORDKIT_APP_PREFIX"


@dataclass(frozen=True)
class NamingConfig:
    """
    Settings used when encoding and parsing store keys.

    Attributes:
        app_prefix: Leading segment shared by every key of one application
        delimiter: Segment separator, a single character
    """
    app_prefix: str = DEFAULT_APP_PREFIX
    delimiter: str = DEFAULT_DELIMITER

    def __post_init__(self):
        if not self.app_prefix:
            raise ValueError("app_prefix must not be empty")
        if len(self.delimiter) != 1:
            raise ValueError("delimiter must be a single character")

    def with_prefix(self, app_prefix: str) -> 'NamingConfig':
        """Return a copy using a different application prefix."""
        return replace(self, app_prefix=app_prefix)

    @classmethod
    def from_env(cls, environ=None) -> 'NamingConfig':
        """
        Build a configuration from the process environment.

        Args:
            environ: Mapping to read instead of ``os.environ``

        Returns:
            NamingConfig with ``RECORDKIT_APP_PREFIX`` applied when set
        """
        env = os.environ if environ is None else environ
        prefix = env.get(ENV_APP_PREFIX, "").strip()
        return cls(app_prefix=prefix or DEFAULT_APP_PREFIX)
