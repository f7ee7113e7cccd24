"""Unit tests for the requests based HTTP transport."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from saml_mdq.transport.http_client import (
    DEFAULT_MAX_CONNECTIONS,
    DEFAULT_TIMEOUT,
    SAML_METADATA_MEDIA_TYPE,
    ConnectionPoolConfig,
    HttpTransport,
    TLS12Adapter,
    TransportResponse,
)
from saml_mdq.utils.exceptions import TransportError

URL = "https://mdq.example.org/entities/https%3A%2F%2Fidp.example.org"


def _mock_response(status_code=200, content=b"<xml/>", url=URL):
    response = MagicMock()
    response.status_code = status_code
    response.content = content
    response.url = url
    return response


class TestConnectionPoolConfig:
    """Test transport configuration validation."""

    def test_defaults(self):
        config = ConnectionPoolConfig()

        assert config.timeout == DEFAULT_TIMEOUT == 10.0
        assert config.max_connections == DEFAULT_MAX_CONNECTIONS
        assert config.verify_tls is True
        assert config.ca_bundle is None

    @pytest.mark.parametrize("timeout", [0, -2.5])
    def test_invalid_timeout(self, timeout):
        with pytest.raises(ValueError, match="timeout"):
            ConnectionPoolConfig(timeout=timeout)

    def test_invalid_max_connections(self):
        with pytest.raises(ValueError, match="max_connections"):
            ConnectionPoolConfig(max_connections=0)

    def test_missing_ca_bundle(self, tmp_path):
        with pytest.raises(ValueError, match="CA bundle"):
            ConnectionPoolConfig(ca_bundle=tmp_path / "ca.pem")


class TestTransportResponse:
    """Test response value helpers."""

    def test_ok_range(self):
        assert TransportResponse(200, b"").ok
        assert TransportResponse(204, b"").ok
        assert not TransportResponse(404, b"").ok
        assert not TransportResponse(500, b"").ok


class TestHttpTransport:
    """Test HttpTransport request handling."""

    def test_session_setup(self):
        """Test adapters, Accept header and TLS verification on the session."""
        with HttpTransport() as transport:
            session = transport._session

            assert isinstance(session.get_adapter("https://mdq.example.org"), TLS12Adapter)
            assert session.headers["Accept"] == SAML_METADATA_MEDIA_TYPE
            assert session.verify is True

    def test_ca_bundle_used_for_verification(self, tmp_path):
        ca_bundle = tmp_path / "ca.pem"
        ca_bundle.write_text("placeholder")

        with HttpTransport(ConnectionPoolConfig(ca_bundle=ca_bundle)) as transport:
            assert transport._session.verify == str(ca_bundle)

    def test_verification_disabled(self):
        with HttpTransport(ConnectionPoolConfig(verify_tls=False)) as transport:
            assert transport._session.verify is False

    def test_get_returns_status_and_body(self):
        """Test response fields are copied into a TransportResponse."""
        # Arrange
        transport = HttpTransport()
        with patch.object(
            transport._session, "get", return_value=_mock_response(200, b"<md/>")
        ) as mock_get:
            # Act
            response = transport.get(URL, timeout=3)

        # Assert
        mock_get.assert_called_once_with(URL, timeout=3)
        assert response == TransportResponse(status_code=200, content=b"<md/>", url=URL)

    def test_get_uses_configured_timeout(self):
        transport = HttpTransport(ConnectionPoolConfig(timeout=4))
        with patch.object(transport._session, "get", return_value=_mock_response()) as mock_get:
            transport.get(URL)

        assert mock_get.call_args.kwargs["timeout"] == 4

    def test_error_status_is_not_raised(self):
        """Test non-2xx statuses are returned for the client to interpret."""
        transport = HttpTransport()
        with patch.object(transport._session, "get", return_value=_mock_response(404, b"")):
            response = transport.get(URL, 10)

        assert response.status_code == 404

    @pytest.mark.parametrize(
        "error",
        [
            requests.Timeout("read timed out"),
            requests.ConnectionError("refused"),
            requests.exceptions.SSLError("certificate verify failed"),
        ],
    )
    def test_request_failures_wrapped(self, error):
        transport = HttpTransport()
        with patch.object(transport._session, "get", side_effect=error):
            with pytest.raises(TransportError) as exc_info:
                transport.get(URL, 10)

        assert exc_info.value.__cause__ is error

    def test_timeout_message(self):
        transport = HttpTransport()
        with patch.object(transport._session, "get", side_effect=requests.Timeout("slow")):
            with pytest.raises(TransportError, match="timed out"):
                transport.get(URL, 10)

    def test_closed_transport_rejects_requests(self):
        transport = HttpTransport()
        transport.close()

        with pytest.raises(TransportError, match="closed"):
            transport.get(URL, 10)

    def test_close_is_idempotent(self):
        transport = HttpTransport()

        transport.close()
        transport.close()

    def test_session_failure_wrapped(self):
        with patch.object(HttpTransport, "_create_session", side_effect=OSError("no certs")):
            with pytest.raises(TransportError, match="Failed to initialize"):
                HttpTransport()
