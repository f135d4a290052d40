"""Confluent Cloud control plane client (clusters and API keys)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from confluent_ops.integrations.confluent.exceptions import NotFoundError
from confluent_ops.integrations.confluent.models import (
    ApiKey,
    ApiKeyBody,
    ApiKeyDeleteBody,
    ApiKeyListResponse,
    ApiKeyResponse,
    Cluster,
    ClusterCreateConfig,
    ClusterListResponse,
    ClusterMutationRequest,
    ClusterRecord,
    ClusterResponse,
    CreateApiKeyRequest,
    CreateClusterRequest,
    DeleteApiKeyRequest,
    LogicalClusterRequest,
)
from confluent_ops.integrations.confluent.retry import RetryPolicy
from confluent_ops.integrations.confluent.transport import (
    ApiTransport,
    bearer_auth,
    cookie_auth,
    decode,
)

if TYPE_CHECKING:
    from confluent_ops.integrations.confluent.config import ConfluentConfig
    from confluent_ops.integrations.confluent.retry import Deadline
    from confluent_ops.integrations.confluent.session import SessionManager

logger = structlog.get_logger()


class ControlPlaneClient:
    """HTTP client for the Confluent Cloud management API.

    Reads (list/get) authenticate with the session cookie and are never
    retried. Mutations authenticate with the bearer access token and run
    under the retry policy.

    Example:
        ```python
        session = SessionManager(config)
        with ControlPlaneClient(config, session) as client:
            for cluster in client.list_clusters():
                print(cluster.name, cluster.endpoint)
        ```
    """

    def __init__(
        self,
        config: ConfluentConfig,
        session: SessionManager,
        retry_policy: RetryPolicy | None = None,
        transport: ApiTransport | None = None,
    ) -> None:
        """Initialize the control plane client.

        Args:
            config: Confluent configuration.
            session: Session manager providing credentials.
            retry_policy: Policy for mutating calls; built from config if omitted.
            transport: Transport to the control plane; created from config if omitted.
        """
        self.config = config
        self._session = session
        self._retry = retry_policy or RetryPolicy.from_config(config)
        self._transport = transport or ApiTransport(
            config.api_url,
            timeout=config.timeout,
            verify_ssl=config.verify_ssl,
            name="control_plane",
        )
        logger.info("control_plane_client_initialized", api_url=config.api_url)

    def __enter__(self) -> ControlPlaneClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()

    def close(self) -> None:
        """Close the HTTP client."""
        self._transport.close()

    def _read(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
        deadline: Deadline | None = None,
    ) -> Any:
        self._session.ensure_ready(deadline)
        return self._transport.request(
            "GET",
            endpoint,
            headers=cookie_auth(self._session.session_token),
            params=params,
            deadline=deadline,
        )

    def _mutate(
        self,
        method: str,
        endpoint: str,
        payload: dict[str, Any],
        deadline: Deadline | None = None,
    ) -> Any:
        self._session.ensure_ready(deadline)
        headers = bearer_auth(self._session.access_token)
        return self._retry.run(
            lambda: self._transport.request(
                method,
                endpoint,
                headers=headers,
                json=payload,
                deadline=deadline,
            ),
            deadline=deadline,
            description=f"{method} {endpoint}",
        )

    # Clusters

    def list_clusters(
        self,
        account_id: str | None = None,
        *,
        deadline: Deadline | None = None,
    ) -> list[Cluster]:
        """List the clusters of an account.

        Args:
            account_id: Account ID; defaults to the primary account.
            deadline: Optional deadline.

        Returns:
            List of clusters.
        """
        account_id = self._session.resolve_account_id(account_id)
        endpoint = "/api/clusters"
        logger.debug("listing_clusters", account_id=account_id)
        body = self._read(endpoint, params={"account_id": account_id}, deadline=deadline)
        clusters = decode(ClusterListResponse, body, endpoint).clusters
        logger.info("listed_clusters", account_id=account_id, count=len(clusters))
        return clusters

    def get_cluster(
        self,
        account_id: str | None,
        cluster_id: str,
        *,
        deadline: Deadline | None = None,
    ) -> Cluster | None:
        """Get a cluster by ID.

        Args:
            account_id: Account ID; defaults to the primary account.
            cluster_id: Cluster ID.
            deadline: Optional deadline.

        Returns:
            Cluster if found, None otherwise.
        """
        for cluster in self.list_clusters(account_id, deadline=deadline):
            if cluster.id == cluster_id:
                return cluster
        return None

    def get_cluster_by_name(
        self,
        account_id: str | None,
        name: str,
        *,
        deadline: Deadline | None = None,
    ) -> Cluster | None:
        """Get a cluster by name.

        Args:
            account_id: Account ID; defaults to the primary account.
            name: Cluster name.
            deadline: Optional deadline.

        Returns:
            Cluster if found, None otherwise.
        """
        for cluster in self.list_clusters(account_id, deadline=deadline):
            if cluster.name == name:
                return cluster
        return None

    def find_cluster(
        self,
        account_id: str | None,
        cluster_id: str,
        *,
        deadline: Deadline | None = None,
    ) -> Cluster:
        """Get a cluster by ID, failing when it does not exist.

        Raises:
            NotFoundError: If the cluster is not in the account.
        """
        cluster = self.get_cluster(account_id, cluster_id, deadline=deadline)
        if cluster is None:
            raise NotFoundError(resource_type="cluster", resource_id=cluster_id)
        return cluster

    def create_cluster(
        self,
        account_id: str | None,
        name: str,
        durability: str,
        region: str,
        provider: str,
        *,
        deadline: Deadline | None = None,
    ) -> Cluster:
        """Create a cluster.

        The cluster is returned as soon as the API accepts it; it may still be
        provisioning and reject data plane calls for a while.

        Args:
            account_id: Account ID; defaults to the primary account.
            name: Cluster name.
            durability: ``LOW`` (single zone) or ``HIGH`` (multi zone).
            region: Cloud provider region.
            provider: Cloud provider (``aws``, ``gcp`` or ``azure``).
            deadline: Optional deadline.

        Returns:
            The created cluster.
        """
        account_id = self._session.resolve_account_id(account_id)
        request = CreateClusterRequest(
            config=ClusterCreateConfig(
                name=name,
                account_id=account_id,
                durability=durability,
                region=region,
                service_provider=provider,
            )
        )
        endpoint = "/api/clusters"
        logger.info("creating_cluster", account_id=account_id, name=name, region=region)
        body = self._mutate("POST", endpoint, request.to_payload(), deadline)
        cluster = decode(ClusterResponse, body, endpoint).cluster
        logger.info("created_cluster", id=cluster.id, status=cluster.status)
        return cluster

    def update_cluster(
        self,
        cluster: Cluster,
        new_name: str,
        *,
        deadline: Deadline | None = None,
    ) -> Cluster:
        """Rename a cluster.

        Args:
            cluster: Current cluster record.
            new_name: New cluster name.
            deadline: Optional deadline.

        Returns:
            The updated cluster.
        """
        request = ClusterMutationRequest(cluster=ClusterRecord.from_cluster(cluster, name=new_name))
        endpoint = f"/api/clusters/{cluster.id}"
        logger.info("updating_cluster", id=cluster.id, name=new_name)
        body = self._mutate("PUT", endpoint, request.to_payload(), deadline)
        updated = decode(ClusterResponse, body, endpoint).cluster
        logger.info("updated_cluster", id=updated.id)
        return updated

    def delete_cluster(self, cluster: Cluster, *, deadline: Deadline | None = None) -> None:
        """Delete a cluster.

        Args:
            cluster: Cluster to delete.
            deadline: Optional deadline.
        """
        request = ClusterMutationRequest(cluster=ClusterRecord.from_cluster(cluster))
        endpoint = f"/api/clusters/{cluster.id}"
        logger.info("deleting_cluster", id=cluster.id, name=cluster.name)
        self._mutate("DELETE", endpoint, request.to_payload(), deadline)
        logger.info("deleted_cluster", id=cluster.id)

    # API keys

    def list_api_keys(self, cluster: Cluster, *, deadline: Deadline | None = None) -> list[ApiKey]:
        """List the API keys attached to a cluster.

        Args:
            cluster: Cluster the keys grant access to.
            deadline: Optional deadline.

        Returns:
            List of API keys (without secrets).
        """
        endpoint = "/api/api_keys"
        body = self._read(
            endpoint,
            params={"account_id": cluster.account_id, "cluster_id": cluster.id},
            deadline=deadline,
        )
        keys = decode(ApiKeyListResponse, body, endpoint).api_keys
        logger.info("listed_api_keys", cluster_id=cluster.id, count=len(keys))
        return keys

    def get_api_key(
        self,
        cluster: Cluster,
        key_id: int,
        *,
        deadline: Deadline | None = None,
    ) -> ApiKey | None:
        """Get an API key by ID.

        Args:
            cluster: Cluster the key grants access to.
            key_id: API key ID.
            deadline: Optional deadline.

        Returns:
            API key if found, None otherwise. The secret is never included.
        """
        for api_key in self.list_api_keys(cluster, deadline=deadline):
            if api_key.id == key_id:
                return api_key
        logger.debug("api_key_not_found", cluster_id=cluster.id, key_id=key_id)
        return None

    def create_api_key(self, cluster: Cluster, *, deadline: Deadline | None = None) -> ApiKey:
        """Create an API key for a cluster.

        The returned key carries its secret; this is the only time the API
        discloses it.

        Args:
            cluster: Cluster to grant access to.
            deadline: Optional deadline.

        Returns:
            The created API key, secret included.
        """
        request = CreateApiKeyRequest(
            api_key=ApiKeyBody(
                account_id=cluster.account_id,
                logical_clusters=[LogicalClusterRequest(id=cluster.id)],
            )
        )
        endpoint = "/api/api_keys"
        logger.info("creating_api_key", cluster_id=cluster.id)
        body = self._mutate("POST", endpoint, request.to_payload(), deadline)
        api_key = decode(ApiKeyResponse, body, endpoint).api_key
        logger.info("created_api_key", id=api_key.id, key=api_key.key)
        return api_key

    def delete_api_key(
        self,
        cluster: Cluster,
        key_id: int,
        *,
        deadline: Deadline | None = None,
    ) -> None:
        """Delete an API key.

        Args:
            cluster: Cluster the key grants access to.
            key_id: API key ID.
            deadline: Optional deadline.
        """
        request = DeleteApiKeyRequest(
            api_key=ApiKeyDeleteBody(
                id=key_id,
                account_id=cluster.account_id,
                logical_clusters=[LogicalClusterRequest(id=cluster.id)],
            )
        )
        endpoint = f"/api/api_keys/{key_id}"
        logger.info("deleting_api_key", id=key_id, cluster_id=cluster.id)
        self._mutate("DELETE", endpoint, request.to_payload(), deadline)
        logger.info("deleted_api_key", id=key_id)
