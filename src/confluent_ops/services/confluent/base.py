"""Base reconciler for Confluent Cloud resources.

A reconciler maps a flat mapping of desired-state attributes onto client
calls and maps the remote state back into a flat mapping the orchestrator
persists. One reconciler exists per resource kind.

``read`` returns None when the remote resource cannot be found; that is the
signal used to recreate it, never an error.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, ClassVar

import structlog
from pydantic import BaseModel, ConfigDict, ValidationError

from confluent_ops.integrations.confluent.exceptions import (
    InvalidAttributesError,
    ReplacementRequiredError,
)

if TYPE_CHECKING:
    from confluent_ops.integrations.confluent.control_plane import ControlPlaneClient
    from confluent_ops.integrations.confluent.session import SessionManager

logger = structlog.get_logger()

Attributes = Mapping[str, Any]
State = dict[str, Any]


class ResourceSpec(BaseModel):
    """Desired state of a resource, validated from orchestrator attributes.

    Computed attributes the orchestrator echoes back are ignored.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, str_strip_whitespace=True)

    account_id: str | None = None


class ResourceReconciler[S: ResourceSpec](ABC):
    """Abstract Create/Read/Update/Delete over one resource kind.

    Type Parameters:
        S: The desired-state model validating this kind's attributes.

    Class Attributes:
        _resource_type: Human-readable resource name for logs and errors.
        _spec_class: Spec model class.
    """

    _resource_type: ClassVar[str] = ""
    _spec_class: type[S]

    def __init__(self, session: SessionManager, control_plane: ControlPlaneClient) -> None:
        """Initialize the reconciler.

        Args:
            session: Session manager, used to resolve the default account.
            control_plane: Control plane client.
        """
        self._session = session
        self._control_plane = control_plane
        self._log = logger.bind(resource=self._resource_type)

    def parse(self, attributes: Attributes) -> S:
        """Validate attributes into the desired-state model.

        Raises:
            InvalidAttributesError: If required attributes are missing or malformed.
        """
        try:
            return self._spec_class.model_validate(dict(attributes))
        except ValidationError as e:
            raise InvalidAttributesError(
                f"Invalid {self._resource_type} attributes",
                details=str(e),
            ) from e

    def account_id(self, spec: S) -> str:
        """Account scope of a spec, defaulting to the primary account."""
        return self._session.resolve_account_id(spec.account_id)

    @abstractmethod
    def create(self, attributes: Attributes) -> State:
        """Create the resource and return its persisted state."""

    @abstractmethod
    def read(self, attributes: Attributes) -> State | None:
        """Return the persisted state, or None when the resource is gone."""

    def update(self, attributes: Attributes) -> State:
        """Apply mutable attribute changes and return the new state.

        Kinds without mutable attributes keep this default.

        Raises:
            ReplacementRequiredError: Always, for immutable kinds.
        """
        raise ReplacementRequiredError(self._resource_type, sorted(attributes))

    @abstractmethod
    def delete(self, attributes: Attributes) -> None:
        """Delete the resource. Deleting an absent resource succeeds."""
