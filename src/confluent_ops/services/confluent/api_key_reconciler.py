"""API key reconciler."""

from __future__ import annotations

from confluent_ops.integrations.confluent.exceptions import InvalidAttributesError
from confluent_ops.integrations.confluent.models import ApiKey, Cluster
from confluent_ops.services.confluent.base import (
    Attributes,
    ResourceReconciler,
    ResourceSpec,
    State,
)


class ApiKeySpec(ResourceSpec):
    """Desired state of an API key bound to one cluster."""

    id: int | None = None
    cluster_id: str
    secret: str = ""


def api_key_state(api_key: ApiKey, cluster: Cluster, secret: str = "") -> State:
    """Persisted attributes of an API key.

    The API only discloses the secret in the create response, so ``secret``
    is whatever was captured then.
    """
    return {
        "id": api_key.id,
        "key": api_key.key,
        "secret": api_key.secret or secret,
        "account_id": cluster.account_id,
        "cluster_id": cluster.id,
        "logical_clusters": api_key.cluster_ids,
        "description": api_key.description,
        "created": api_key.created,
        "modified": api_key.modified,
    }


class ApiKeyReconciler(ResourceReconciler[ApiKeySpec]):
    """Reconciles cluster API keys, keyed by their integer ID.

    API keys have no mutable attributes; any change requires a new key.
    """

    _resource_type = "api_key"
    _spec_class = ApiKeySpec

    def create(self, attributes: Attributes) -> State:
        spec = self.parse(attributes)
        cluster = self._cluster(spec, required=True)
        api_key = self._control_plane.create_api_key(cluster)
        self._log.info("api_key_created", id=api_key.id, cluster_id=cluster.id)
        return api_key_state(api_key, cluster)

    def read(self, attributes: Attributes) -> State | None:
        spec = self.parse(attributes)
        if spec.id is None:
            raise InvalidAttributesError("API key read requires an id")
        cluster = self._cluster(spec)
        if cluster is None:
            return None
        api_key = self._control_plane.get_api_key(cluster, spec.id)
        if api_key is None:
            self._log.info("api_key_absent", id=spec.id, cluster_id=cluster.id)
            return None
        return api_key_state(api_key, cluster, secret=spec.secret)

    def delete(self, attributes: Attributes) -> None:
        spec = self.parse(attributes)
        if spec.id is None:
            raise InvalidAttributesError("API key delete requires an id")
        cluster = self._cluster(spec)
        if cluster is None or self._control_plane.get_api_key(cluster, spec.id) is None:
            self._log.info("api_key_already_absent", id=spec.id, cluster_id=spec.cluster_id)
            return
        self._control_plane.delete_api_key(cluster, spec.id)

    def _cluster(self, spec: ApiKeySpec, required: bool = False) -> Cluster | None:
        account_id = self.account_id(spec)
        if required:
            cluster = self._control_plane.find_cluster(account_id, spec.cluster_id)
        else:
            cluster = self._control_plane.get_cluster(account_id, spec.cluster_id)
        if cluster is None:
            return None
        if not cluster.account_id:
            cluster = cluster.model_copy(update={"account_id": account_id})
        return cluster
