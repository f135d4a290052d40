"""Unit tests for the HTTP transport."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest

from confluent_ops.integrations.confluent.exceptions import (
    DeadlineExceededError,
    DecodeError,
    HttpStatusError,
    NotFoundError,
    TransportError,
)
from confluent_ops.integrations.confluent.models import KafkaTopic
from confluent_ops.integrations.confluent.retry import Deadline
from confluent_ops.integrations.confluent.transport import (
    ApiTransport,
    bearer_auth,
    cookie_auth,
    decode,
)


@pytest.fixture
def mock_httpx_client(mocker: Any) -> MagicMock:
    """Create a mock httpx client."""
    mock_client = MagicMock(spec=httpx.Client)
    mocker.patch("httpx.Client", return_value=mock_client)
    return mock_client


@pytest.fixture
def transport(mock_httpx_client: MagicMock) -> ApiTransport:
    return ApiTransport("https://confluent.cloud/", timeout=10.0)


def _make_response(status_code: int, json_data: Any = None, text: str = "") -> Any:
    """Helper: build a mock httpx Response."""
    resp: Any = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = json_data if json_data is not None else {}
    resp.text = text
    return resp


class TestAuthHeaders:
    """Tests for the authentication header helpers."""

    @pytest.mark.unit
    def test_cookie_auth(self) -> None:
        assert cookie_auth("abc") == {"Cookie": "auth_token=abc"}

    @pytest.mark.unit
    def test_bearer_auth(self) -> None:
        assert bearer_auth("xyz") == {"Authorization": "Bearer xyz"}


class TestApiTransport:
    """Tests for ApiTransport.request."""

    @pytest.mark.unit
    def test_base_url_normalized(self, transport: ApiTransport) -> None:
        """Trailing slash should be dropped from the base URL."""
        assert transport.base_url == "https://confluent.cloud"

    @pytest.mark.unit
    def test_successful_request(
        self, transport: ApiTransport, mock_httpx_client: MagicMock
    ) -> None:
        """Expected status should return the parsed body."""
        mock_httpx_client.request.return_value = _make_response(200, {"clusters": []})

        result = transport.request(
            "GET", "/api/clusters", headers=cookie_auth("s"), params={"account_id": "env-1"}
        )

        assert result == {"clusters": []}
        mock_httpx_client.request.assert_called_once_with(
            "GET",
            "/api/clusters",
            headers={"Cookie": "auth_token=s"},
            params={"account_id": "env-1"},
        )

    @pytest.mark.unit
    def test_expected_204_with_empty_body(
        self, transport: ApiTransport, mock_httpx_client: MagicMock
    ) -> None:
        """A 204 without body should return an empty dict."""
        resp = _make_response(204)
        resp.json.side_effect = ValueError("no body")
        mock_httpx_client.request.return_value = resp

        assert transport.request("DELETE", "/topics/x", expected_status=204) == {}

    @pytest.mark.unit
    def test_other_2xx_is_an_error(
        self, transport: ApiTransport, mock_httpx_client: MagicMock
    ) -> None:
        """Only the expected status counts as success."""
        mock_httpx_client.request.return_value = _make_response(200, {})

        with pytest.raises(HttpStatusError) as exc_info:
            transport.request("PUT", "/topics", expected_status=204)

        assert exc_info.value.status_code == 200

    @pytest.mark.unit
    def test_404_raises_not_found(
        self, transport: ApiTransport, mock_httpx_client: MagicMock
    ) -> None:
        """404 should raise NotFoundError."""
        mock_httpx_client.request.return_value = _make_response(404)

        with pytest.raises(NotFoundError) as exc_info:
            transport.request("GET", "/api/clusters/lkc-x")

        assert exc_info.value.status_code == 404
        assert exc_info.value.endpoint == "/api/clusters/lkc-x"

    @pytest.mark.unit
    def test_error_message_from_body(
        self, transport: ApiTransport, mock_httpx_client: MagicMock
    ) -> None:
        """Error bodies should provide the message."""
        mock_httpx_client.request.return_value = _make_response(
            400, {"error": {"code": 400, "message": "Cluster not ready"}}
        )

        with pytest.raises(HttpStatusError) as exc_info:
            transport.request("PUT", "/topics")

        assert exc_info.value.message == "Cluster not ready"
        assert exc_info.value.body == {"error": {"code": 400, "message": "Cluster not ready"}}
        assert "status: 400" in str(exc_info.value)

    @pytest.mark.unit
    def test_non_json_error_keeps_raw_text(
        self, transport: ApiTransport, mock_httpx_client: MagicMock
    ) -> None:
        """A non-JSON body should be kept under "raw"."""
        resp = _make_response(502, text="Bad Gateway")
        resp.json.side_effect = ValueError("not json")
        mock_httpx_client.request.return_value = resp

        with pytest.raises(HttpStatusError) as exc_info:
            transport.request("GET", "/api/me")

        assert exc_info.value.body == {"raw": "Bad Gateway"}

    @pytest.mark.unit
    def test_connect_error_raises_transport_error(
        self, transport: ApiTransport, mock_httpx_client: MagicMock
    ) -> None:
        """Connection failures should raise TransportError with status 0."""
        mock_httpx_client.request.side_effect = httpx.ConnectError("refused")

        with pytest.raises(TransportError) as exc_info:
            transport.request("GET", "/api/me")

        assert exc_info.value.status_code == 0
        assert isinstance(exc_info.value.original_error, httpx.ConnectError)

    @pytest.mark.unit
    def test_timeout_raises_transport_error(
        self, transport: ApiTransport, mock_httpx_client: MagicMock
    ) -> None:
        """Timeouts should raise TransportError."""
        mock_httpx_client.request.side_effect = httpx.ReadTimeout("slow")

        with pytest.raises(TransportError, match="timed out"):
            transport.request("GET", "/api/me")

    @pytest.mark.unit
    def test_expired_deadline_sends_nothing(
        self, transport: ApiTransport, mock_httpx_client: MagicMock
    ) -> None:
        """An expired deadline should fail before the request is sent."""
        with pytest.raises(DeadlineExceededError):
            transport.request("GET", "/api/me", deadline=Deadline(expires_at=0.0))

        mock_httpx_client.request.assert_not_called()

    @pytest.mark.unit
    def test_deadline_caps_timeout(
        self, transport: ApiTransport, mock_httpx_client: MagicMock
    ) -> None:
        """The per-request timeout should not exceed the deadline."""
        mock_httpx_client.request.return_value = _make_response(200, {})

        transport.request("GET", "/api/me", deadline=Deadline.after(2.0))

        timeout = mock_httpx_client.request.call_args.kwargs["timeout"]
        assert 0 < timeout <= 2.0

    @pytest.mark.unit
    def test_close(self, transport: ApiTransport, mock_httpx_client: MagicMock) -> None:
        transport.close()
        mock_httpx_client.close.assert_called_once()


class TestDecode:
    """Tests for decode."""

    @pytest.mark.unit
    def test_decode_list(self) -> None:
        """Type expressions should be accepted."""
        topics = decode(list[KafkaTopic], [{"name": "orders"}], "/topics")

        assert topics[0].name == "orders"

    @pytest.mark.unit
    def test_decode_error(self) -> None:
        """Shape mismatches should raise DecodeError naming the endpoint."""
        with pytest.raises(DecodeError, match="/topics"):
            decode(list[KafkaTopic], {"topics": "nope"}, "/topics")
