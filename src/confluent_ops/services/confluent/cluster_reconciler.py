"""Cluster reconciler."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from confluent_ops.integrations.confluent.exceptions import (
    InvalidAttributesError,
    NotFoundError,
    ReplacementRequiredError,
)
from confluent_ops.integrations.confluent.models import Cluster
from confluent_ops.services.confluent.base import (
    Attributes,
    ResourceReconciler,
    ResourceSpec,
    State,
)

IMMUTABLE_CLUSTER_FIELDS = ("service_provider", "region", "durability")


class ClusterSpec(ResourceSpec):
    """Desired state of a cluster.

    ``name`` is the only attribute that can change in place.
    """

    id: str | None = None
    name: str
    service_provider: str = Field(..., description="Cloud provider: aws, gcp or azure")
    region: str = Field(..., description="Cloud provider region (e.g. eu-west-1)")
    durability: str = Field(default="LOW", description="LOW (single zone) or HIGH (multi zone)")


def cluster_state(cluster: Cluster, account_id: str) -> State:
    """Persisted attributes of a cluster, endpoint components included."""
    address = cluster.address
    return {
        "id": cluster.id,
        "account_id": account_id,
        "name": cluster.name,
        "service_provider": cluster.service_provider,
        "region": cluster.region,
        "durability": cluster.durability,
        "organization_id": cluster.organization_id,
        "endpoint": cluster.endpoint,
        "api_endpoint": cluster.api_endpoint,
        "status": cluster.status,
        "protocol": address.protocol,
        "host": address.host,
        "port": address.port,
    }


class ClusterReconciler(ResourceReconciler[ClusterSpec]):
    """Reconciles Kafka clusters, keyed by their server-assigned ID.

    A cluster enters the existing state as soon as the create call returns,
    but may still be provisioning. Nothing here waits for it; the first topic
    creation on the cluster retries until the cluster accepts it.
    """

    _resource_type = "cluster"
    _spec_class = ClusterSpec

    def create(self, attributes: Attributes) -> State:
        spec = self.parse(attributes)
        account_id = self.account_id(spec)
        cluster = self._control_plane.create_cluster(
            account_id,
            spec.name,
            spec.durability,
            spec.region,
            spec.service_provider,
        )
        self._log.info("cluster_created", id=cluster.id, name=cluster.name)
        state = self._read(account_id, cluster.id)
        # The cluster list can lag behind the create call.
        return state if state is not None else cluster_state(cluster, account_id)

    def read(self, attributes: Attributes) -> State | None:
        spec = self.parse(attributes)
        account_id = self.account_id(spec)
        if spec.id:
            return self._read(account_id, spec.id)
        cluster = self._control_plane.get_cluster_by_name(account_id, spec.name)
        return cluster_state(cluster, account_id) if cluster is not None else None

    def update(self, attributes: Attributes) -> State:
        spec = self.parse(attributes)
        if not spec.id:
            raise InvalidAttributesError("Cluster update requires an id")
        account_id = self.account_id(spec)
        cluster = self._control_plane.get_cluster(account_id, spec.id)
        if cluster is None:
            raise NotFoundError(resource_type="cluster", resource_id=spec.id)

        changed = [
            field
            for field in IMMUTABLE_CLUSTER_FIELDS
            if _differs(getattr(spec, field), getattr(cluster, field))
        ]
        if changed:
            raise ReplacementRequiredError(self._resource_type, changed)

        if spec.name != cluster.name:
            self._log.info("renaming_cluster", id=cluster.id, old=cluster.name, new=spec.name)
            cluster = self._control_plane.update_cluster(cluster, spec.name)

        state = self._read(account_id, spec.id)
        return state if state is not None else cluster_state(cluster, account_id)

    def delete(self, attributes: Attributes) -> None:
        spec = self.parse(attributes)
        account_id = self.account_id(spec)
        cluster = (
            self._control_plane.get_cluster(account_id, spec.id)
            if spec.id
            else self._control_plane.get_cluster_by_name(account_id, spec.name)
        )
        if cluster is None:
            self._log.info("cluster_already_absent", id=spec.id, name=spec.name)
            return
        self._control_plane.delete_cluster(cluster)

    def _read(self, account_id: str, cluster_id: str) -> State | None:
        cluster = self._control_plane.get_cluster(account_id, cluster_id)
        if cluster is None:
            self._log.info("cluster_absent", id=cluster_id, account_id=account_id)
            return None
        return cluster_state(cluster, account_id)


def _differs(desired: Any, actual: Any) -> bool:
    """Compare an attribute, ignoring case and unset remote values."""
    if not actual:
        return False
    return str(desired).lower() != str(actual).lower()
