"""HTTP transport for the TFE API v2."""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Self

import requests
from requests.adapters import HTTPAdapter

from . import __version__
from .audit_logging import AuditLogger
from .config import DEFAULT_ADDRESS
from .errors import APIConnectionError, APIError, DecodeError
from .validators import InputValidator

logger = logging.getLogger(__name__)
JSONAPI_CONTENT_TYPE = "application/vnd.api+json"


@dataclass
class ListOptions:
    """Paging parameters passed through to list endpoints."""

    page_number: Optional[int] = None
    page_size: Optional[int] = None

    def to_params(self: Self) -> Dict[str, int]:
        """Return the query parameters for the options that are set."""
        params = {}
        if self.page_number is not None:
            params['page[number]'] = self.page_number
        if self.page_size is not None:
            params['page[size]'] = self.page_size
        return params


@dataclass
class Request:
    """A single API call handed to the transport.

    ``input`` is a JSON:API document sent as the body. When ``decode`` is
    False the response body is discarded.
    """

    method: str
    path: str
    input: Optional[Dict[str, Any]] = None
    list_options: Optional[ListOptions] = None
    decode: bool = True


def _error_messages(response: requests.Response) -> List[str]:
    """Collect human readable messages from a JSON:API error body."""
    try:
        body = response.json()
    except ValueError:
        return [response.text] if response.text else []

    messages = []
    for error in body.get('errors', []) if isinstance(body, dict) else []:
        if isinstance(error, dict):
            message = error.get('detail') or error.get('title')
            if message:
                messages.append(message)
        elif error:
            messages.append(str(error))
    return messages


class TFEClient:
    """Client for the TFE REST API.

    The client is safe to share between callers; it stores no per-call
    state beyond the underlying ``requests.Session``.
    """

    def __init__(
        self: Self,
        token: str,
        address: str = DEFAULT_ADDRESS,
        timeout: int = 30,
        verify_ssl: bool = True,
        audit_logger: Optional[AuditLogger] = None,
        session: Optional[requests.Session] = None
    ) -> None:
        """Initialize API client.

        Args:
            token: API authentication token
            address: Base address of the API (e.g., https://app.terraform.io)
            timeout: Request timeout in seconds
            verify_ssl: Whether to verify TLS certificates
            audit_logger: Optional audit log for mutating requests
            session: Optional pre-built session, mainly for tests
        """
        from .organizations import Organizations

        self.address = InputValidator.validate_url(address)
        self.token = InputValidator.validate_api_token(token)
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.audit_logger = audit_logger
        self.session = session or requests.Session()

        self._setup_session()

        self.organizations = Organizations(self)

    @classmethod
    def from_config(cls, config: Any, audit_logger: Optional[AuditLogger] = None) -> "TFEClient":
        """Build a client from a ``Config`` instance."""
        return cls(
            address=config.get_address(),
            token=config.get_token(),
            timeout=config.get('timeout', 30),
            verify_ssl=config.get('verify_ssl', True),
            audit_logger=audit_logger
        )

    def _setup_session(self: Self) -> None:
        """Mount adapters and set default headers."""
        adapter = HTTPAdapter(max_retries=0)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

        self.session.headers.update({
            'Authorization': f'Bearer {self.token}',
            'Content-Type': JSONAPI_CONTENT_TYPE,
            'Accept': JSONAPI_CONTENT_TYPE,
            'User-Agent': f'tfe-cli/{__version__}'
        })

    def _audit(
        self: Self,
        request: Request,
        success: bool,
        status_code: Optional[int] = None,
        error: Optional[str] = None
    ) -> None:
        if self.audit_logger is None or request.method.upper() == 'GET':
            return
        details = {"error": error} if error else None
        self.audit_logger.log_request(request.method, request.path, success, status_code, details)

    def do(self: Self, request: Request) -> Optional[Dict[str, Any]]:
        """Send a request and return the decoded JSON body.

        Args:
            request: The call to perform

        Returns:
            The parsed response document, or None when the request asked
            for no decoding or the response has no body.

        Raises:
            APIConnectionError: If the server could not be reached
            APIError: If the server answered with a non-2xx status
            DecodeError: If the body is not valid JSON
        """
        url = f"{self.address}{request.path}"
        kwargs: Dict[str, Any] = {}
        if request.input is not None:
            kwargs['data'] = json.dumps(request.input)
        if request.list_options is not None:
            kwargs['params'] = request.list_options.to_params()

        logger.debug("%s %s %s", request.method, url, kwargs.get('params', ''))

        try:
            response = self.session.request(
                request.method,
                url,
                timeout=self.timeout,
                verify=self.verify_ssl,
                **kwargs
            )
            response.raise_for_status()

        except requests.exceptions.Timeout as e:
            self._audit(request, False, error="timeout")
            raise APIConnectionError(f"Request timeout: {e}")

        except requests.exceptions.ConnectionError as e:
            self._audit(request, False, error="connection error")
            raise APIConnectionError(f"Connection error: {e}")

        except requests.exceptions.HTTPError as e:
            status_code = e.response.status_code
            messages = _error_messages(e.response)
            error_msg = "; ".join(messages) or f"{status_code} {e.response.reason}"
            logger.debug("%s %s failed with %s: %s", request.method, url, status_code, error_msg)
            self._audit(request, False, status_code, error_msg)
            raise APIError(
                f"{status_code}: {error_msg}",
                status_code=status_code,
                errors=[{"detail": message} for message in messages]
            )

        except requests.exceptions.RequestException as e:
            self._audit(request, False, error=str(e))
            raise APIError(f"Request failed: {e}")

        logger.debug("%s %s -> %s", request.method, url, response.status_code)
        self._audit(request, True, response.status_code)

        if not request.decode or not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"Invalid JSON in response: {e}", status_code=response.status_code)

    def close(self: Self) -> None:
        """Close the session and cleanup resources."""
        if self.session:
            self.session.close()
        if self.audit_logger is not None:
            self.audit_logger.close()

    def __enter__(self: Self) -> Self:
        """Context manager entry."""
        return self

    def __exit__(self: Self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()
