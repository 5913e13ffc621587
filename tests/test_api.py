"""Tests for the HTTP transport, JSON:API codec and validators."""

import json
import unittest
from typing import Any, Optional
from unittest.mock import MagicMock, Mock

import requests

from tfe_cli.api import ListOptions, Request, TFEClient
from tfe_cli.errors import APIConnectionError, APIError, DecodeError, ValidationError
from tfe_cli.jsonapi import marshal_resource, unmarshal_collection, unmarshal_resource
from tfe_cli.organizations import Organizations
from tfe_cli.validators import InputValidator, valid_string, valid_string_id

TOKEN = "abcdefghij.atlasv1.klmnopqrst"


def make_response(status_code: int, body: Optional[Any] = None, reason: str = "OK") -> requests.Response:
    """Build a real requests.Response with a JSON body."""
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    response.url = "https://tfe.example.com/api/v2/organizations"
    response._content = json.dumps(body).encode() if body is not None else b""
    return response


class TestTFEClient(unittest.TestCase):
    """Test cases for TFEClient.do."""

    def setUp(self) -> None:
        """Set up a client over a mocked session."""
        self.session = MagicMock()
        self.audit_logger = Mock()
        self.client = TFEClient(
            token=TOKEN,
            address="https://tfe.example.com/",
            timeout=10,
            audit_logger=self.audit_logger,
            session=self.session
        )

    def test_headers(self) -> None:
        """Auth and JSON:API content type headers are set on the session."""
        headers = self.session.headers.update.call_args[0][0]
        self.assertEqual(headers['Authorization'], f'Bearer {TOKEN}')
        self.assertEqual(headers['Content-Type'], 'application/vnd.api+json')

    def test_address_trailing_slash_stripped(self) -> None:
        self.assertEqual(self.client.address, "https://tfe.example.com")

    def test_organizations_bound_to_client(self) -> None:
        self.assertIsInstance(self.client.organizations, Organizations)
        self.assertIs(self.client.organizations.transport, self.client)

    def test_get_with_list_options(self) -> None:
        """List options become page[...] query parameters."""
        self.session.request.return_value = make_response(200, {"data": []})

        result = self.client.do(Request(
            method='GET',
            path='/api/v2/organizations',
            list_options=ListOptions(page_number=3, page_size=10)
        ))

        self.assertEqual(result, {"data": []})
        args, kwargs = self.session.request.call_args
        self.assertEqual(args, ('GET', 'https://tfe.example.com/api/v2/organizations'))
        self.assertEqual(kwargs['params'], {'page[number]': 3, 'page[size]': 10})
        self.assertEqual(kwargs['timeout'], 10)
        self.audit_logger.log_request.assert_not_called()

    def test_post_serializes_input(self) -> None:
        """The input document is sent as the JSON body and audited."""
        self.session.request.return_value = make_response(201, {"data": {"attributes": {}}})
        body = marshal_resource("organizations", {"name": "acme"})

        self.client.do(Request(method='POST', path='/api/v2/organizations', input=body))

        kwargs = self.session.request.call_args[1]
        self.assertEqual(json.loads(kwargs['data']), body)
        self.audit_logger.log_request.assert_called_once_with(
            'POST', '/api/v2/organizations', True, 201, None
        )

    def test_no_decode_returns_none(self) -> None:
        self.session.request.return_value = make_response(204)

        result = self.client.do(Request(method='DELETE', path='/api/v2/organizations/acme', decode=False))

        self.assertIsNone(result)

    def test_http_error_carries_status_and_detail(self) -> None:
        """Non-2xx responses raise APIError with the server's error details."""
        self.session.request.return_value = make_response(
            404, {"errors": [{"status": "404", "title": "not found"}]}, reason="Not Found"
        )

        with self.assertRaises(APIError) as ctx:
            self.client.do(Request(method='DELETE', path='/api/v2/organizations/ghost'))

        self.assertEqual(ctx.exception.status_code, 404)
        self.assertIn("not found", str(ctx.exception))
        self.assertEqual(self.audit_logger.log_request.call_args[0][2], False)

    def test_http_error_with_string_errors(self) -> None:
        self.session.request.return_value = make_response(
            422, {"errors": ["Name has already been taken"]}, reason="Unprocessable Entity"
        )

        with self.assertRaises(APIError) as ctx:
            self.client.do(Request(method='GET', path='/api/v2/organizations/acme'))

        self.assertIn("already been taken", ctx.exception.message)

    def test_connection_error(self) -> None:
        self.session.request.side_effect = requests.exceptions.ConnectionError("refused")

        with self.assertRaises(APIConnectionError):
            self.client.do(Request(method='GET', path='/api/v2/organizations'))

    def test_timeout(self) -> None:
        self.session.request.side_effect = requests.exceptions.Timeout("slow")

        with self.assertRaises(APIConnectionError) as ctx:
            self.client.do(Request(method='GET', path='/api/v2/organizations'))
        self.assertIn("timeout", str(ctx.exception).lower())

    def test_invalid_json(self) -> None:
        response = make_response(200)
        response._content = b"<html>"
        self.session.request.return_value = response

        with self.assertRaises(DecodeError):
            self.client.do(Request(method='GET', path='/api/v2/organizations'))

    def test_context_manager_closes_session(self) -> None:
        with self.client:
            pass
        self.session.close.assert_called_once()
        self.audit_logger.close.assert_called_once()

    def test_invalid_token_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            TFEClient(token="short", session=MagicMock())

    def test_from_config(self) -> None:
        config = Mock()
        config.get_address.return_value = "https://tfe.example.com"
        config.get_token.return_value = TOKEN
        config.get.side_effect = lambda key, default=None: {'timeout': 45}.get(key, default)

        client = TFEClient.from_config(config)

        self.assertEqual(client.address, "https://tfe.example.com")
        self.assertEqual(client.timeout, 45)
        self.assertTrue(client.verify_ssl)
        client.close()


class TestJSONAPI(unittest.TestCase):
    """Test cases for the JSON:API codec."""

    def test_marshal_includes_id_only_when_set(self) -> None:
        self.assertNotIn("id", marshal_resource("organizations", {})["data"])
        self.assertEqual(marshal_resource("organizations", {}, "org-1")["data"]["id"], "org-1")

    def test_unmarshal_resource(self) -> None:
        resource = unmarshal_resource({
            "data": {"id": "acme", "type": "organizations", "attributes": {"name": "acme"}}
        })
        self.assertEqual(resource, {"name": "acme", "id": "acme", "type": "organizations"})

    def test_unmarshal_resource_rejects_collection(self) -> None:
        with self.assertRaises(DecodeError):
            unmarshal_resource({"data": []})

    def test_unmarshal_rejects_non_document(self) -> None:
        for payload in [None, [], "x", {"meta": {}}]:
            with self.subTest(payload=payload):
                with self.assertRaises(DecodeError):
                    unmarshal_resource(payload)
                with self.assertRaises(DecodeError):
                    unmarshal_collection(payload)

    def test_unmarshal_collection_rejects_single(self) -> None:
        with self.assertRaises(DecodeError):
            unmarshal_collection({"data": {"attributes": {}}})


class TestValidators(unittest.TestCase):
    """Test cases for identifier and configuration validation."""

    def test_valid_string(self) -> None:
        self.assertTrue(valid_string("a@acme.io"))
        self.assertTrue(valid_string(" "))
        self.assertFalse(valid_string(""))
        self.assertFalse(valid_string(None))

    def test_valid_string_id(self) -> None:
        for value in ["acme", "acme-corp", "acme_corp", "Acme.2", "a"]:
            with self.subTest(value=value):
                self.assertTrue(valid_string_id(value))
        for value in [None, "", "acme corp", "acme/corp", "acme%20", "ácme"]:
            with self.subTest(value=value):
                self.assertFalse(valid_string_id(value))

    def test_validate_url(self) -> None:
        self.assertEqual(InputValidator.validate_url("https://tfe.example.com/"), "https://tfe.example.com")
        for url in ["", "ftp://tfe.example.com", "tfe.example.com", "https://"]:
            with self.subTest(url=url):
                with self.assertRaises(ValidationError):
                    InputValidator.validate_url(url)

    def test_validate_api_token(self) -> None:
        self.assertEqual(InputValidator.validate_api_token(TOKEN), TOKEN)
        for token in ["", "a" * 9, "a" * 1025, "token with spaces"]:
            with self.subTest(token=token):
                with self.assertRaises(ValidationError):
                    InputValidator.validate_api_token(token)


if __name__ == '__main__':
    unittest.main()
