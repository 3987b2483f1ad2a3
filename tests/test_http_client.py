"""Tests for the timeout-enforcing HTTP wrapper."""

from unittest.mock import MagicMock

import pytest
import requests

from vault_aws_login.http_client import VAULT_TOKEN_HEADER, HttpFetchError, VaultHttpClient


class TestRequest:
    """Test request construction."""

    def test_timeout_is_always_sent(self):
        session = MagicMock(spec=requests.Session)
        client = VaultHttpClient(timeout=10, session=session)

        client.get("https://vault.example.io/v1/sys/mounts")

        assert session.request.call_args.kwargs["timeout"] == 10

    def test_token_sent_as_vault_header(self):
        session = MagicMock(spec=requests.Session)
        client = VaultHttpClient(timeout=10, session=session)

        client.get("https://vault.example.io/v1/sys/mounts", token="s.abc")

        assert session.request.call_args.kwargs["headers"] == {VAULT_TOKEN_HEADER: "s.abc"}

    def test_no_token_header_without_token(self):
        session = MagicMock(spec=requests.Session)
        client = VaultHttpClient(timeout=10, session=session)

        client.post("https://vault.example.io/v1/auth/ldap/login/alice", json={"password": "pw"})

        call = session.request.call_args
        assert call.args == ("POST", "https://vault.example.io/v1/auth/ldap/login/alice")
        assert call.kwargs["headers"] == {}
        assert call.kwargs["json"] == {"password": "pw"}

    def test_list_uses_list_verb(self):
        session = MagicMock(spec=requests.Session)
        client = VaultHttpClient(timeout=10, session=session)

        client.list("https://vault.example.io/v1/aws/prod/roles", token="s.abc")

        assert session.request.call_args.args[0] == "LIST"

    def test_non_2xx_is_returned_not_raised(self):
        session = MagicMock(spec=requests.Session)
        response = MagicMock(status_code=403, ok=False)
        session.request.return_value = response
        client = VaultHttpClient(timeout=10, session=session)

        assert client.get("https://vault.example.io/v1/sys/mounts") is response


class TestTransportErrors:
    """Test conversion of requests exceptions."""

    @pytest.mark.parametrize(
        "error",
        [
            requests.exceptions.Timeout("read timed out"),
            requests.exceptions.ConnectionError("connection refused"),
            requests.exceptions.InvalidURL("bad url"),
        ],
    )
    def test_request_exceptions_become_fetch_errors(self, error):
        session = MagicMock(spec=requests.Session)
        session.request.side_effect = error
        client = VaultHttpClient(timeout=10, session=session)

        with pytest.raises(HttpFetchError) as exc_info:
            client.get("https://vault.example.io/v1/sys/mounts")

        assert exc_info.value.cause is error
        assert exc_info.value.method == "GET"
        assert type(error).__name__ in exc_info.value.serialize()

    def test_other_exceptions_propagate(self):
        session = MagicMock(spec=requests.Session)
        session.request.side_effect = RuntimeError("bug")
        client = VaultHttpClient(timeout=10, session=session)

        with pytest.raises(RuntimeError, match="bug"):
            client.get("https://vault.example.io/v1/sys/mounts")
