"""Input validation helpers.

The organization binding uses ``valid_string`` and ``valid_string_id`` as
predicates inside each input's ``valid()`` check. ``InputValidator`` holds
the stricter, raising checks applied to configuration values.
"""

import re
from typing import Optional
from urllib.parse import urlparse

from .errors import ValidationError

ID_PATTERN = re.compile(r'^[a-zA-Z0-9\-\._]+$')


def valid_string(value: Optional[str]) -> bool:
    """Return True when ``value`` is set and non-empty."""
    return value is not None and value != ""


def valid_string_id(value: Optional[str]) -> bool:
    """Return True when ``value`` is a usable resource identifier.

    Identifiers end up as a literal URL path segment, so only letters,
    digits, hyphens, underscores and dots are accepted.
    """
    return valid_string(value) and ID_PATTERN.match(value) is not None


class InputValidator:
    """Validates configuration inputs."""

    PATTERNS = {
        'api_token': re.compile(r'^[a-zA-Z0-9\-_\.]+$'),
    }

    MAX_LENGTHS = {
        'url': 2048,
        'api_token': 1024,
    }

    @classmethod
    def validate_url(cls, url: str) -> str:
        """Validate an API address.

        Args:
            url: Address to validate

        Returns:
            Address without a trailing slash

        Raises:
            ValidationError: If the address is invalid
        """
        if not url:
            raise ValidationError("URL cannot be empty")

        if len(url) > cls.MAX_LENGTHS['url']:
            raise ValidationError(f"URL cannot exceed {cls.MAX_LENGTHS['url']} characters")

        parsed = urlparse(url)
        if parsed.scheme not in ('http', 'https'):
            raise ValidationError("URL must use http or https protocol")
        if not parsed.netloc:
            raise ValidationError(f"URL has no host: {url}")

        return url.rstrip('/')

    @classmethod
    def validate_api_token(cls, token: str) -> str:
        """Validate API token format.

        Args:
            token: API token to validate

        Returns:
            The token

        Raises:
            ValidationError: If the token is malformed
        """
        if not token:
            raise ValidationError("API token cannot be empty")

        if len(token) < 10:
            raise ValidationError("API token is too short")

        if len(token) > cls.MAX_LENGTHS['api_token']:
            raise ValidationError(f"API token cannot exceed {cls.MAX_LENGTHS['api_token']} characters")

        if not cls.PATTERNS['api_token'].match(token):
            raise ValidationError("API token contains invalid characters")

        return token
