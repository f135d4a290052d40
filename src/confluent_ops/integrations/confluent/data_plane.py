"""Per-cluster Kafka REST client (topics and their configuration)."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import structlog

from confluent_ops.integrations.confluent.exceptions import ClusterNotReadyError, ConfluentError
from confluent_ops.integrations.confluent.models import (
    CreateTopicRequest,
    KafkaTopic,
    TopicConfigEntry,
    TopicConfigListResponse,
    TopicConfigUpdateRequest,
    TopicConfigValue,
)
from confluent_ops.integrations.confluent.retry import RetryPolicy, is_cluster_warming_up
from confluent_ops.integrations.confluent.transport import ApiTransport, bearer_auth, decode

if TYPE_CHECKING:
    from confluent_ops.integrations.confluent.config import ConfluentConfig
    from confluent_ops.integrations.confluent.models import Cluster
    from confluent_ops.integrations.confluent.retry import Deadline
    from confluent_ops.integrations.confluent.session import SessionManager

logger = structlog.get_logger()


class DataPlaneClient:
    """HTTP client for one cluster's Kafka REST API.

    Each cluster is reached through its own ``api_endpoint``, so a client is
    built per cluster. Every call authenticates with the bearer token.

    Topic creation runs under a retry override that also treats HTTP 400 as
    retryable: a cluster that was just created rejects topic operations with
    400 until it finishes provisioning.

    Example:
        ```python
        cluster = control_plane.find_cluster(None, "lkc-abc123")
        with DataPlaneClient(config, session, cluster) as client:
            retention = TopicConfigEntry.writable("retention.ms", "3600000")
            client.create_topic("orders", 6, [retention])
        ```
    """

    def __init__(
        self,
        config: ConfluentConfig,
        session: SessionManager,
        cluster: Cluster,
        retry_policy: RetryPolicy | None = None,
        transport: ApiTransport | None = None,
    ) -> None:
        """Initialize the data plane client.

        Args:
            config: Confluent configuration.
            session: Session manager providing the access token.
            cluster: Cluster whose API endpoint is targeted.
            retry_policy: Default policy for mutating calls; built from config if omitted.
            transport: Transport to the cluster; created from ``cluster.api_endpoint`` if omitted.

        Raises:
            ClusterNotReadyError: If the cluster has no API endpoint yet.
        """
        if transport is None and not cluster.api_endpoint:
            raise ClusterNotReadyError(cluster.id)
        self.config = config
        self.cluster = cluster
        self._session = session
        self._retry = retry_policy or RetryPolicy.from_config(config)
        self._create_retry = self._retry.with_override(
            is_cluster_warming_up,
            max_attempts=config.topic_create_max_attempts,
        )
        self._transport = transport or ApiTransport(
            cluster.api_endpoint,
            timeout=config.timeout,
            verify_ssl=config.verify_ssl,
            name="data_plane",
        )
        self._topics_endpoint = f"/2.0/kafka/{cluster.id}/topics"
        self._log = logger.bind(cluster_id=cluster.id)

    def __enter__(self) -> DataPlaneClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()

    def close(self) -> None:
        """Close the HTTP client."""
        self._transport.close()

    def _request(
        self,
        method: str,
        endpoint: str,
        *,
        expected_status: int = 200,
        json: Any = None,
        params: dict[str, Any] | None = None,
        deadline: Deadline | None = None,
    ) -> Any:
        self._session.ensure_ready(deadline)
        return self._transport.request(
            method,
            endpoint,
            expected_status=expected_status,
            headers=bearer_auth(self._session.access_token),
            json=json,
            params=params,
            deadline=deadline,
        )

    def list_topics(self, *, deadline: Deadline | None = None) -> list[KafkaTopic]:
        """List the cluster's topics.

        Config values are not part of this response; use ``get_topic`` for them.

        Args:
            deadline: Optional deadline.

        Returns:
            Topics with their partitions.
        """
        body = self._request("GET", self._topics_endpoint, deadline=deadline)
        topics = decode(list[KafkaTopic], body, self._topics_endpoint)
        self._log.debug("listed_topics", count=len(topics))
        return topics

    def get_topic_config(
        self,
        name: str,
        *,
        deadline: Deadline | None = None,
    ) -> list[TopicConfigEntry]:
        """Fetch the configuration entries of a topic.

        Args:
            name: Topic name.
            deadline: Optional deadline.

        Returns:
            Configuration entries, read-only ones included.

        Raises:
            DecodeError: If an entry does not have the expected shape.
        """
        endpoint = f"{self._topics_endpoint}/{name}/config"
        body = self._request("GET", endpoint, deadline=deadline)
        return decode(TopicConfigListResponse, body, endpoint).entries

    def get_topic(self, name: str, *, deadline: Deadline | None = None) -> KafkaTopic | None:
        """Get a topic with its configuration.

        Args:
            name: Topic name.
            deadline: Optional deadline.

        Returns:
            The topic if found, None otherwise.
        """
        for topic in self.list_topics(deadline=deadline):
            if topic.name == name:
                configs = self.get_topic_config(name, deadline=deadline)
                return topic.model_copy(update={"configs": configs})
        self._log.debug("topic_not_found", topic=name)
        return None

    def create_topic(
        self,
        name: str,
        partitions: int,
        configs: Sequence[TopicConfigEntry] = (),
        *,
        deadline: Deadline | None = None,
    ) -> None:
        """Create a topic and apply its configuration.

        This is two calls and is not atomic. The create call runs under the
        warm-up retry override. The config update is then always issued; if it
        fails the topic exists with default configuration, the error is raised
        and nothing is rolled back. A later ``get_topic`` shows the defaults.

        Args:
            name: Topic name.
            partitions: Number of partitions.
            configs: Desired configuration entries; read-only ones are ignored.
            deadline: Optional deadline.
        """
        writable = [entry for entry in configs if not entry.read_only]
        request = CreateTopicRequest(
            name=name,
            num_partitions=partitions,
            replication_factor=self.config.replication_factor,
            configs={entry.name: entry.value for entry in writable if entry.value is not None},
        )
        self._log.info("creating_topic", topic=name, partitions=partitions)
        self._create_retry.run(
            lambda: self._request(
                "PUT",
                self._topics_endpoint,
                expected_status=204,
                json=request.to_payload(),
                params={"validate": "false"},
                deadline=deadline,
            ),
            deadline=deadline,
            description=f"create topic {name}",
        )
        self._log.info("created_topic", topic=name)

        try:
            self.update_topic_config(name, writable, deadline=deadline)
        except ConfluentError as e:
            self._log.warning(
                "topic_created_with_default_config",
                topic=name,
                error=str(e),
            )
            raise

    def update_topic_config(
        self,
        name: str,
        configs: Sequence[TopicConfigEntry],
        *,
        deadline: Deadline | None = None,
    ) -> None:
        """Write configuration entries of a topic.

        Read-only entries are never sent.

        Args:
            name: Topic name.
            configs: Configuration entries.
            deadline: Optional deadline.
        """
        request = TopicConfigUpdateRequest(
            entries=[
                TopicConfigValue(name=entry.name, value=entry.value)
                for entry in configs
                if not entry.read_only
            ]
        )
        endpoint = f"{self._topics_endpoint}/{name}/config"
        self._log.info(
            "updating_topic_config",
            topic=name,
            entries=[entry.name for entry in request.entries],
        )
        self._retry.run(
            lambda: self._request(
                "PUT",
                endpoint,
                expected_status=204,
                json=request.to_payload(),
                deadline=deadline,
            ),
            deadline=deadline,
            description=f"update topic config {name}",
        )

    def delete_topic(self, name: str, *, deadline: Deadline | None = None) -> None:
        """Delete a topic.

        Args:
            name: Topic name.
            deadline: Optional deadline.
        """
        endpoint = f"{self._topics_endpoint}/{name}"
        self._log.info("deleting_topic", topic=name)
        self._retry.run(
            lambda: self._request("DELETE", endpoint, expected_status=204, deadline=deadline),
            deadline=deadline,
            description=f"delete topic {name}",
        )
        self._log.info("deleted_topic", topic=name)
