"""Read-only lookups of existing accounts and clusters."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from pydantic import Field, ValidationError

from confluent_ops.integrations.confluent.exceptions import InvalidAttributesError
from confluent_ops.services.confluent.base import Attributes, ResourceSpec, State
from confluent_ops.services.confluent.cluster_reconciler import cluster_state

if TYPE_CHECKING:
    from confluent_ops.integrations.confluent.control_plane import ControlPlaneClient
    from confluent_ops.integrations.confluent.session import SessionManager

logger = structlog.get_logger()


class AccountLookup:
    """Resolves an account of the authenticated user."""

    def __init__(self, session: SessionManager) -> None:
        self._session = session

    def read(self, attributes: Attributes) -> State | None:
        """Return the named account, or the primary one when no name is given."""
        name = attributes.get("name") or None
        account = self._session.find_account(name)
        if account is None:
            logger.info("account_not_found", name=name)
            return None
        return {
            "id": account.id,
            "name": account.name,
            "organization_id": account.organization_id,
        }


class ClusterLookupSpec(ResourceSpec):
    """Attributes of a cluster lookup."""

    name: str = Field(min_length=1)


class ClusterLookup:
    """Resolves a cluster by name."""

    def __init__(self, session: SessionManager, control_plane: ControlPlaneClient) -> None:
        self._session = session
        self._control_plane = control_plane

    def read(self, attributes: Attributes) -> State | None:
        """Return the cluster's attributes, endpoint components included.

        Args:
            attributes: ``name`` and an optional ``account_id``.

        Returns:
            Cluster attributes, or None when no cluster has that name.

        Raises:
            InvalidAttributesError: If ``name`` is missing or empty.
        """
        try:
            spec = ClusterLookupSpec.model_validate(dict(attributes))
        except ValidationError as e:
            raise InvalidAttributesError("Invalid cluster lookup attributes", details=str(e)) from e
        account_id = self._session.resolve_account_id(spec.account_id)
        cluster = self._control_plane.get_cluster_by_name(account_id, spec.name)
        if cluster is None:
            logger.info("cluster_not_found", name=spec.name, account_id=account_id)
            return None
        return cluster_state(cluster, account_id)
