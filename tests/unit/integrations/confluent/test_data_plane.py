"""Unit tests for the per-cluster data plane client."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import pytest

from confluent_ops.integrations.confluent.config import ConfluentConfig
from confluent_ops.integrations.confluent.data_plane import DataPlaneClient
from confluent_ops.integrations.confluent.exceptions import (
    ClusterNotReadyError,
    DecodeError,
    HttpStatusError,
    TransportError,
)
from confluent_ops.integrations.confluent.models import Cluster, TopicConfigEntry
from confluent_ops.integrations.confluent.retry import RetryPolicy
from confluent_ops.integrations.confluent.session import SessionManager
from confluent_ops.integrations.confluent.transport import ApiTransport

TOPICS = "/2.0/kafka/lkc-abc123/topics"


def _bad_request() -> HttpStatusError:
    return HttpStatusError("cluster not ready", status_code=400, endpoint=TOPICS)


@pytest.fixture
def dp_transport() -> MagicMock:
    """Transport mock for data plane calls."""
    return MagicMock(spec=ApiTransport)


@pytest.fixture
def client(
    confluent_config: ConfluentConfig,
    ready_session: SessionManager,
    cluster: Cluster,
    no_sleep_policy: RetryPolicy,
    dp_transport: MagicMock,
) -> DataPlaneClient:
    """Data plane client over mocked transports."""
    return DataPlaneClient(
        confluent_config,
        ready_session,
        cluster,
        retry_policy=no_sleep_policy,
        transport=dp_transport,
    )


class TestDataPlaneInit:
    """Tests for client construction."""

    @pytest.mark.unit
    def test_requires_api_endpoint(
        self, confluent_config: ConfluentConfig, ready_session: SessionManager, cluster: Cluster
    ) -> None:
        """A cluster without an API endpoint cannot be targeted."""
        provisioning = cluster.model_copy(update={"api_endpoint": ""})

        with pytest.raises(ClusterNotReadyError, match="no API endpoint") as exc_info:
            DataPlaneClient(confluent_config, ready_session, provisioning)
        assert exc_info.value.cluster_id == "lkc-abc123"

    @pytest.mark.unit
    def test_targets_cluster_api_endpoint(
        self,
        confluent_config: ConfluentConfig,
        ready_session: SessionManager,
        cluster: Cluster,
        mocker: Any,
    ) -> None:
        """The default transport should use the cluster's API endpoint."""
        transport_cls = mocker.patch("confluent_ops.integrations.confluent.data_plane.ApiTransport")

        with DataPlaneClient(confluent_config, ready_session, cluster):
            pass

        assert transport_cls.call_args.args[0] == "https://pkac-1.eu-west-1.aws.confluent.cloud"
        transport_cls.return_value.close.assert_called_once()


class TestTopicReads:
    """Tests for topic reads."""

    @pytest.mark.unit
    def test_list_topics_uses_bearer(
        self, client: DataPlaneClient, dp_transport: MagicMock
    ) -> None:
        """Data plane calls should authenticate with the access token."""
        dp_transport.request.return_value = [
            {"name": "orders", "partitions": [{"partition": 0}, {"partition": 1}]}
        ]

        topics = client.list_topics()

        assert topics[0].partition_count == 2
        call = dp_transport.request.call_args
        assert call.args == ("GET", TOPICS)
        assert call.kwargs["headers"] == {"Authorization": "Bearer access-token"}

    @pytest.mark.unit
    def test_get_topic_loads_config(
        self,
        client: DataPlaneClient,
        dp_transport: MagicMock,
        make_router: Callable[..., Any],
    ) -> None:
        """get_topic should attach the config entries."""
        dp_transport.request.side_effect = make_router(
            {
                ("GET", TOPICS): [[{"name": "orders"}]],
                ("GET", f"{TOPICS}/orders/config"): [
                    {
                        "entries": [
                            {
                                "name": "retention.ms",
                                "value": "1000",
                                "isReadOnly": False,
                                "isSensitive": False,
                            }
                        ]
                    }
                ],
            }
        )

        topic = client.get_topic("orders")

        assert topic is not None
        assert topic.writable_configs() == {"retention.ms": "1000"}

    @pytest.mark.unit
    def test_get_topic_absent(self, client: DataPlaneClient, dp_transport: MagicMock) -> None:
        dp_transport.request.return_value = [{"name": "payments"}]

        assert client.get_topic("orders") is None

    @pytest.mark.unit
    def test_config_with_wrong_types_raises_decode_error(
        self, client: DataPlaneClient, dp_transport: MagicMock
    ) -> None:
        """A config entry with a numeric value should raise DecodeError."""
        dp_transport.request.return_value = {
            "entries": [
                {"name": "retention.ms", "value": 1000, "isReadOnly": False, "isSensitive": False}
            ]
        }

        with pytest.raises(DecodeError):
            client.get_topic_config("orders")

    @pytest.mark.unit
    def test_config_missing_flags_raises_decode_error(
        self, client: DataPlaneClient, dp_transport: MagicMock
    ) -> None:
        """An entry without isReadOnly/isSensitive should not decode as writable."""
        dp_transport.request.return_value = {"entries": [{"name": "segment.bytes", "value": "1"}]}

        with pytest.raises(DecodeError):
            client.get_topic_config("orders")

    @pytest.mark.unit
    def test_config_null_value_accepted(
        self, client: DataPlaneClient, dp_transport: MagicMock
    ) -> None:
        """A present but null value is a valid entry."""
        dp_transport.request.return_value = {
            "entries": [
                {"name": "ssl.key", "value": None, "isReadOnly": False, "isSensitive": True}
            ]
        }

        entries = client.get_topic_config("orders")

        assert entries[0].value is None
        assert entries[0].sensitive is True


class TestCreateTopic:
    """Tests for the two-phase topic creation."""

    @pytest.mark.unit
    def test_retries_while_cluster_warms_up(
        self,
        client: DataPlaneClient,
        dp_transport: MagicMock,
        make_router: Callable[..., Any],
    ) -> None:
        """400, 400, 204 on create then 204 on config should succeed."""
        dp_transport.request.side_effect = make_router(
            {
                ("PUT", TOPICS): [_bad_request(), _bad_request(), {}],
                ("PUT", f"{TOPICS}/orders/config"): [{}],
            }
        )
        retention = TopicConfigEntry.writable("retention.ms", "3600000")

        client.create_topic("orders", 6, [retention])

        calls = dp_transport.request.call_args_list
        assert [c.args for c in calls] == [("PUT", TOPICS)] * 3 + [
            ("PUT", f"{TOPICS}/orders/config")
        ]
        create = calls[0].kwargs
        assert create["expected_status"] == 204
        assert create["params"] == {"validate": "false"}
        assert create["json"] == {
            "name": "orders",
            "numPartitions": 6,
            "replicationFactor": 3,
            "configs": {"retention.ms": "3600000"},
        }
        assert calls[3].kwargs["json"] == {
            "entries": [{"name": "retention.ms", "value": "3600000"}]
        }

    @pytest.mark.unit
    def test_persistent_400_fails_after_bounded_attempts(
        self, client: DataPlaneClient, dp_transport: MagicMock
    ) -> None:
        """A cluster that never accepts the topic should fail with the 400."""
        dp_transport.request.side_effect = _bad_request()

        with pytest.raises(HttpStatusError) as exc_info:
            client.create_topic("orders", 3)

        assert exc_info.value.status_code == 400
        assert dp_transport.request.call_count == 5

    @pytest.mark.unit
    def test_transport_failures_retried_during_create(
        self,
        client: DataPlaneClient,
        dp_transport: MagicMock,
        make_router: Callable[..., Any],
    ) -> None:
        """A dropped connection during warm-up should be retried."""
        dp_transport.request.side_effect = make_router(
            {
                ("PUT", TOPICS): [TransportError("reset"), {}],
                ("PUT", f"{TOPICS}/orders/config"): [{}],
            }
        )

        client.create_topic("orders", 3)

        assert dp_transport.request.call_count == 3

    @pytest.mark.unit
    def test_config_failure_after_create_is_raised(
        self,
        client: DataPlaneClient,
        dp_transport: MagicMock,
        make_router: Callable[..., Any],
    ) -> None:
        """A failed config step should surface; the topic is not rolled back."""
        dp_transport.request.side_effect = make_router(
            {
                ("PUT", TOPICS): [{}],
                ("PUT", f"{TOPICS}/orders/config"): [
                    HttpStatusError("invalid config", status_code=422)
                ],
            }
        )

        with pytest.raises(HttpStatusError) as exc_info:
            client.create_topic("orders", 3, [TopicConfigEntry.writable("retention.ms", "x")])

        assert exc_info.value.status_code == 422
        methods = [c.args[0] for c in dp_transport.request.call_args_list]
        assert "DELETE" not in methods


class TestUpdateAndDelete:
    """Tests for config updates and deletion."""

    @pytest.mark.unit
    def test_read_only_entries_are_not_sent(
        self, client: DataPlaneClient, dp_transport: MagicMock
    ) -> None:
        """Only writable entries should be part of the update."""
        dp_transport.request.return_value = {}

        client.update_topic_config(
            "orders",
            [
                TopicConfigEntry(
                    name="segment.bytes", value="1073741824", read_only=True, sensitive=False
                ),
                TopicConfigEntry.writable("retention.ms", "1000"),
            ],
        )

        call = dp_transport.request.call_args
        assert call.args == ("PUT", f"{TOPICS}/orders/config")
        assert call.kwargs["expected_status"] == 204
        assert call.kwargs["json"] == {"entries": [{"name": "retention.ms", "value": "1000"}]}

    @pytest.mark.unit
    def test_update_does_not_retry_400(
        self, client: DataPlaneClient, dp_transport: MagicMock
    ) -> None:
        """Config updates should use the default classification."""
        dp_transport.request.side_effect = _bad_request()

        with pytest.raises(HttpStatusError):
            client.update_topic_config("orders", [TopicConfigEntry.writable("retention.ms", "1")])

        dp_transport.request.assert_called_once()

    @pytest.mark.unit
    def test_delete_topic(self, client: DataPlaneClient, dp_transport: MagicMock) -> None:
        dp_transport.request.return_value = {}

        client.delete_topic("orders")

        call = dp_transport.request.call_args
        assert call.args == ("DELETE", f"{TOPICS}/orders")
        assert call.kwargs["expected_status"] == 204
