"""Topic reconciler.

Topic attributes carry the topic configuration as flat fields named after
the Kafka config key with dots replaced by underscores
(``retention.ms`` -> ``retention_ms``).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from pydantic import Field, ValidationError

from confluent_ops.integrations.confluent.data_plane import DataPlaneClient
from confluent_ops.integrations.confluent.exceptions import (
    ClusterNotReadyError,
    DecodeError,
    NotFoundError,
    ReplacementRequiredError,
)
from confluent_ops.integrations.confluent.models import Cluster, KafkaTopic, TopicConfigEntry
from confluent_ops.integrations.confluent.retry import RetryPolicy, is_cluster_warming_up
from confluent_ops.services.confluent.base import (
    Attributes,
    ResourceReconciler,
    ResourceSpec,
    State,
)

if TYPE_CHECKING:
    from confluent_ops.integrations.confluent.control_plane import ControlPlaneClient
    from confluent_ops.integrations.confluent.session import SessionManager

DataPlaneFactory = Callable[[Cluster], DataPlaneClient]


class TopicSpec(ResourceSpec):
    """Desired state of a topic.

    ``name`` and ``num_partitions`` are fixed at creation.
    """

    id: str | None = None
    cluster_id: str
    name: str
    num_partitions: int = Field(default=3, ge=1)
    cleanup_policy: str = "delete"
    retention_ms: int = 604800000
    segment_bytes: int = 1073741824
    max_message_bytes: int = 2097164
    min_compaction_lag_ms: int = 0
    message_timestamp_type: str = "CreateTime"
    delete_retention_ms: int = 86400000
    retention_bytes: int = -1
    segment_ms: int = 604800000
    message_timestamp_difference_max_ms: str = "9223372036854775807"

    def config_entries(self) -> list[TopicConfigEntry]:
        """Desired topic configuration as Kafka config entries."""
        return [
            TopicConfigEntry.writable(config_key(field), str(getattr(self, field)))
            for field in TOPIC_CONFIG_FIELDS
        ]


TOPIC_CONFIG_FIELDS = tuple(
    field
    for field in TopicSpec.model_fields
    if field not in {"id", "account_id", "cluster_id", "name", "num_partitions"}
)


def config_key(field: str) -> str:
    """Kafka config key for an attribute name."""
    return field.replace("_", ".")


def topic_id(account_id: str, cluster_id: str, name: str) -> str:
    """Composite key of a topic."""
    return f"{account_id}-{cluster_id}-{name}"


def topic_state(topic: KafkaTopic, cluster: Cluster, account_id: str) -> State:
    """Persisted attributes of a topic.

    Only writable config entries are mapped back; read-only ones are not
    managed and never show up as drift.

    Raises:
        DecodeError: If a writable remote value does not fit its attribute type.
    """
    remote = topic.writable_configs()
    configs = {
        field: remote[config_key(field)]
        for field in TOPIC_CONFIG_FIELDS
        if remote.get(config_key(field)) is not None
    }
    try:
        spec = TopicSpec.model_validate(
            {
                "account_id": account_id,
                "cluster_id": cluster.id,
                "name": topic.name,
                "num_partitions": max(topic.partition_count, 1),
                **configs,
            }
        )
    except ValidationError as e:
        raise DecodeError(
            f"Topic '{topic.name}' has configuration values that cannot be mapped",
            details=str(e),
        ) from e
    return {
        "id": topic_id(account_id, cluster.id, topic.name),
        "cluster_name": cluster.name,
        "internal": topic.internal,
        **spec.model_dump(exclude={"id"}),
        "num_partitions": topic.partition_count,
    }


class TopicReconciler(ResourceReconciler[TopicSpec]):
    """Reconciles Kafka topics, keyed by ``(account_id, cluster_id, name)``.

    Renaming a topic or changing its partition count is not supported in
    place; the orchestrator must delete and recreate it.
    """

    _resource_type = "topic"
    _spec_class = TopicSpec

    def __init__(
        self,
        session: SessionManager,
        control_plane: ControlPlaneClient,
        data_plane_factory: DataPlaneFactory | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        """Initialize the topic reconciler.

        Args:
            session: Session manager.
            control_plane: Control plane client, used to resolve clusters.
            data_plane_factory: Builds a data plane client for a cluster.
            retry_policy: Policy for waiting on a new cluster's API endpoint;
                defaults to the topic-create warm-up policy from config.
        """
        super().__init__(session, control_plane)
        self._data_plane_factory = data_plane_factory or (
            lambda cluster: DataPlaneClient(session.config, session, cluster)
        )
        self._provisioning_retry = retry_policy or RetryPolicy.from_config(
            session.config
        ).with_override(
            is_cluster_warming_up,
            max_attempts=session.config.topic_create_max_attempts,
        )

    def _provisioned_cluster(self, account_id: str, cluster_id: str) -> Cluster:
        """Resolve a cluster, waiting until a new one is assigned its API endpoint."""

        def resolve() -> Cluster:
            cluster = self._control_plane.find_cluster(account_id, cluster_id)
            if not cluster.api_endpoint:
                raise ClusterNotReadyError(cluster.id)
            return cluster

        return self._provisioning_retry.run(resolve, description=f"resolve cluster {cluster_id}")

    def create(self, attributes: Attributes) -> State:
        spec = self.parse(attributes)
        account_id = self.account_id(spec)
        cluster = self._provisioned_cluster(account_id, spec.cluster_id)

        with self._data_plane_factory(cluster) as data_plane:
            data_plane.create_topic(spec.name, spec.num_partitions, spec.config_entries())
            topic = data_plane.get_topic(spec.name)

        if topic is None:
            # Freshly created topics can take a moment to be listed.
            return {
                "id": topic_id(account_id, cluster.id, spec.name),
                "cluster_name": cluster.name,
                "internal": False,
                **spec.model_dump(exclude={"id"}),
                "account_id": account_id,
            }
        return topic_state(topic, cluster, account_id)

    def read(self, attributes: Attributes) -> State | None:
        spec = self.parse(attributes)
        account_id = self.account_id(spec)
        cluster = self._control_plane.get_cluster(account_id, spec.cluster_id)
        if cluster is None:
            self._log.info("topic_cluster_absent", cluster_id=spec.cluster_id, topic=spec.name)
            return None
        if not cluster.api_endpoint:
            self._log.info("topic_cluster_not_ready", cluster_id=cluster.id, topic=spec.name)
            return None

        try:
            with self._data_plane_factory(cluster) as data_plane:
                topic = data_plane.get_topic(spec.name)
        except NotFoundError:
            topic = None

        if topic is None:
            self._log.info("topic_absent", cluster_id=cluster.id, topic=spec.name)
            return None
        return topic_state(topic, cluster, account_id)

    def update(self, attributes: Attributes) -> State:
        spec = self.parse(attributes)
        account_id = self.account_id(spec)
        if spec.id and spec.id != topic_id(account_id, spec.cluster_id, spec.name):
            raise ReplacementRequiredError(self._resource_type, ["name", "cluster_id"])
        cluster = self._control_plane.find_cluster(account_id, spec.cluster_id)

        with self._data_plane_factory(cluster) as data_plane:
            topic = data_plane.get_topic(spec.name)
            if topic is None:
                raise NotFoundError(resource_type="topic", resource_id=spec.name)
            if topic.partition_count and topic.partition_count != spec.num_partitions:
                raise ReplacementRequiredError(self._resource_type, ["num_partitions"])

            read_only = topic.read_only_config_names()
            remote = topic.writable_configs()
            changes = [
                entry
                for entry in spec.config_entries()
                if entry.name not in read_only and remote.get(entry.name) != entry.value
            ]
            if changes:
                data_plane.update_topic_config(spec.name, changes)
                topic = data_plane.get_topic(spec.name) or topic
            else:
                self._log.debug("topic_config_unchanged", topic=spec.name)

        return topic_state(topic, cluster, account_id)

    def delete(self, attributes: Attributes) -> None:
        spec = self.parse(attributes)
        account_id = self.account_id(spec)
        cluster = self._control_plane.get_cluster(account_id, spec.cluster_id)
        if cluster is None:
            self._log.info("topic_cluster_absent", cluster_id=spec.cluster_id, topic=spec.name)
            return
        if not cluster.api_endpoint:
            self._log.info("topic_cluster_not_ready", cluster_id=cluster.id, topic=spec.name)
            return

        with self._data_plane_factory(cluster) as data_plane:
            try:
                data_plane.delete_topic(spec.name)
            except NotFoundError:
                self._log.info("topic_already_absent", cluster_id=cluster.id, topic=spec.name)
