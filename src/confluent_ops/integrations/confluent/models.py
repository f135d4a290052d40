"""Confluent Cloud API data models.

Response records ignore fields they do not know about so that additive
changes on the server side do not break decoding. Request records are built
explicitly and serialized with ``model_dump(by_alias=True)``.
"""

from __future__ import annotations

import re
from typing import Any, NamedTuple

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr

_ENDPOINT_PATTERN = re.compile(
    r"^(?P<protocol>[A-Za-z][A-Za-z0-9_+.-]*)://(?P<host>[^:/\s]+):(?P<port>\d+)/?$"
)


class EndpointAddress(NamedTuple):
    """Components of a ``protocol://host:port`` bootstrap endpoint."""

    protocol: str
    host: str
    port: int


EMPTY_ENDPOINT = EndpointAddress("", "", 0)


def parse_endpoint(endpoint: str | None) -> EndpointAddress:
    """Split a cluster endpoint into protocol, host and port.

    Empty or malformed endpoints yield ``("", "", 0)`` instead of raising.

    Example:
        >>> parse_endpoint("SASL_SSL://broker.example.com:9092")
        EndpointAddress(protocol='SASL_SSL', host='broker.example.com', port=9092)
    """
    if not endpoint:
        return EMPTY_ENDPOINT
    match = _ENDPOINT_PATTERN.match(endpoint.strip())
    if match is None:
        return EMPTY_ENDPOINT
    return EndpointAddress(match["protocol"], match["host"], int(match["port"]))


class ConfluentModel(BaseModel):
    """Base class for records decoded from Confluent Cloud responses."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class RequestModel(BaseModel):
    """Base class for request bodies."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        """Serialize to a JSON-ready dictionary using wire field names."""
        return self.model_dump(by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------


class User(ConfluentModel):
    """Authenticated user."""

    id: int | None = None
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    organization_id: int | None = None
    deactivated: bool = False
    service_account: bool = False
    internal: bool = False


class Account(ConfluentModel):
    """Account (environment) owning clusters."""

    id: str
    name: str = ""
    organization_id: int | None = None
    deactivated: bool = False
    created: str | None = None
    modified: str | None = None
    internal: bool = False


class Organization(ConfluentModel):
    """Organization the user belongs to."""

    id: int | None = None
    name: str = ""
    deactivated: bool = False
    created: str | None = None
    modified: str | None = None
    billing_email: str | None = None
    resource_id: str | None = None


class Identity(ConfluentModel):
    """Profile returned by ``GET /api/me``.

    ``account`` is the primary account; ``accounts`` lists every account
    visible to the user.
    """

    user: User | None = None
    account: Account
    organization: Organization | None = None
    accounts: list[Account] = Field(default_factory=list)
    error: Any = None

    def find_account(self, name: str) -> Account | None:
        """Find an account by name.

        Args:
            name: Account name.

        Returns:
            The account if found, None otherwise.
        """
        if self.account.name == name:
            return self.account
        for account in self.accounts:
            if account.name == name:
                return account
        return None


class SessionResponse(ConfluentModel):
    """Response of ``POST /api/sessions``."""

    token: str = ""
    user: User | None = None
    error: Any = None


class AccessTokenResponse(ConfluentModel):
    """Response of ``POST /api/access_tokens``."""

    token: str = ""
    error: Any = None


class LoginRequest(RequestModel):
    """Credentials sent to ``POST /api/sessions``."""

    email: str
    password: str


# ---------------------------------------------------------------------------
# Clusters
# ---------------------------------------------------------------------------


class Cluster(ConfluentModel):
    """Logical Kafka cluster."""

    id: str
    name: str
    account_id: str = ""
    organization_id: int | None = None
    network_ingress: int = 0
    network_egress: int = 0
    storage: int = 0
    durability: str = ""
    status: str = ""
    endpoint: str = ""
    api_endpoint: str = ""
    region: str = ""
    service_provider: str = ""
    created: str | None = None
    modified: str | None = None

    @property
    def address(self) -> EndpointAddress:
        """Parsed bootstrap endpoint."""
        return parse_endpoint(self.endpoint)

    @property
    def protocol(self) -> str:
        """Bootstrap protocol (e.g. ``SASL_SSL``)."""
        return self.address.protocol

    @property
    def host(self) -> str:
        """Bootstrap host."""
        return self.address.host

    @property
    def port(self) -> int:
        """Bootstrap port, 0 when the endpoint is unknown."""
        return self.address.port


class ClusterListResponse(ConfluentModel):
    """Response of ``GET /api/clusters``."""

    clusters: list[Cluster] = Field(default_factory=list)
    error: Any = None


class ClusterResponse(ConfluentModel):
    """Response of cluster create and update calls."""

    cluster: Cluster
    error: Any = None
    validation_errors: Any = None


class ClusterCreateConfig(RequestModel):
    """Cluster definition for ``POST /api/clusters``."""

    name: str
    account_id: str
    network_ingress: int = 100
    network_egress: int = 100
    storage: int = 5000
    durability: str
    region: str
    service_provider: str


class CreateClusterRequest(RequestModel):
    """Body of ``POST /api/clusters``."""

    config: ClusterCreateConfig


class ClusterRecord(RequestModel):
    """Full cluster record sent with update and delete calls."""

    id: str
    name: str
    account_id: str
    network_ingress: int
    network_egress: int
    storage: int
    durability: str
    region: str
    service_provider: str
    organization_id: int | None = None

    @classmethod
    def from_cluster(cls, cluster: Cluster, name: str | None = None) -> ClusterRecord:
        """Build a record from a cluster, optionally with a new name."""
        return cls(
            id=cluster.id,
            name=name if name is not None else cluster.name,
            account_id=cluster.account_id,
            network_ingress=cluster.network_ingress,
            network_egress=cluster.network_egress,
            storage=cluster.storage,
            durability=cluster.durability,
            region=cluster.region,
            service_provider=cluster.service_provider,
            organization_id=cluster.organization_id,
        )


class ClusterMutationRequest(RequestModel):
    """Body of ``PUT``/``DELETE /api/clusters/{id}``."""

    cluster: ClusterRecord


# ---------------------------------------------------------------------------
# API keys
# ---------------------------------------------------------------------------


class LogicalClusterRef(ConfluentModel):
    """Reference to a logical cluster attached to an API key."""

    id: str
    type: str | None = None


class ApiKey(ConfluentModel):
    """Cluster API key.

    ``secret`` is only populated in the response to the create call.
    """

    id: int
    key: str = ""
    secret: str = ""
    account_id: str = ""
    user_id: int | None = None
    description: str = ""
    deactivated: bool = False
    sasl_mechanism: str | None = None
    service_account: bool = False
    logical_clusters: list[LogicalClusterRef] = Field(default_factory=list)
    created: str | None = None
    modified: str | None = None

    @property
    def cluster_ids(self) -> list[str]:
        """IDs of the logical clusters this key grants access to."""
        return [ref.id for ref in self.logical_clusters]


class ApiKeyListResponse(ConfluentModel):
    """Response of ``GET /api/api_keys``."""

    api_keys: list[ApiKey] = Field(default_factory=list)
    error: Any = None


class ApiKeyResponse(ConfluentModel):
    """Response of ``POST /api/api_keys``."""

    api_key: ApiKey
    error: Any = None


class LogicalClusterRequest(RequestModel):
    """Logical cluster reference in API key requests."""

    id: str


class ApiKeyBody(RequestModel):
    """API key definition for create requests."""

    account_id: str
    logical_clusters: list[LogicalClusterRequest]


class ApiKeyDeleteBody(ApiKeyBody):
    """API key identification for delete requests."""

    id: int


class CreateApiKeyRequest(RequestModel):
    """Body of ``POST /api/api_keys``."""

    api_key: ApiKeyBody


class DeleteApiKeyRequest(RequestModel):
    """Body of ``DELETE /api/api_keys/{id}``."""

    api_key: ApiKeyDeleteBody


# ---------------------------------------------------------------------------
# Topics
# ---------------------------------------------------------------------------


class KafkaHost(ConfluentModel):
    """Broker reference inside partition metadata."""

    id: int | None = None
    host: str = ""
    port: int | None = None
    rack: str | int | None = None


class KafkaPartition(ConfluentModel):
    """Partition metadata."""

    partition: int
    leader: KafkaHost | None = None
    replicas: list[KafkaHost] = Field(default_factory=list)
    isr: list[KafkaHost] = Field(default_factory=list)


class TopicConfigEntry(BaseModel):
    """Single topic configuration entry.

    Decoding is strict: every entry must carry ``name``, ``value`` (possibly
    null), ``isReadOnly`` and ``isSensitive`` with the right types. Missing
    or mistyped fields are rejected rather than defaulted or coerced.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, strict=True)

    name: StrictStr
    value: StrictStr | None
    read_only: StrictBool = Field(alias="isReadOnly")
    sensitive: StrictBool = Field(alias="isSensitive")

    @classmethod
    def writable(cls, name: str, value: str | None) -> TopicConfigEntry:
        """Build a desired, writable, non-sensitive entry."""
        return cls(name=name, value=value, read_only=False, sensitive=False)


class TopicConfigListResponse(ConfluentModel):
    """Response of ``GET /topics/{name}/config``."""

    entries: list[TopicConfigEntry] = Field(default_factory=list)


class KafkaTopic(ConfluentModel):
    """Kafka topic with its partitions and, once loaded, its configuration."""

    name: str
    internal: bool = False
    authorized_operations: list[str] = Field(default_factory=list, alias="authorizedOperations")
    partitions: list[KafkaPartition] = Field(default_factory=list)
    configs: list[TopicConfigEntry] = Field(default_factory=list)

    @property
    def partition_count(self) -> int:
        """Number of partitions."""
        return len(self.partitions)

    def writable_configs(self) -> dict[str, str | None]:
        """Configuration values that may be written back to the API."""
        return {entry.name: entry.value for entry in self.configs if not entry.read_only}

    def read_only_config_names(self) -> set[str]:
        """Names of configuration entries the broker will not accept changes for."""
        return {entry.name for entry in self.configs if entry.read_only}


class CreateTopicRequest(RequestModel):
    """Body of the topic creation call."""

    name: str
    num_partitions: int = Field(alias="numPartitions")
    replication_factor: int = Field(alias="replicationFactor")
    configs: dict[str, str] = Field(default_factory=dict)


class TopicConfigValue(RequestModel):
    """Single entry of a config update."""

    name: str
    value: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """Keep explicit nulls, which reset an entry to its default."""
        return self.model_dump(by_alias=True)


class TopicConfigUpdateRequest(RequestModel):
    """Body of ``PUT /topics/{name}/config``."""

    entries: list[TopicConfigValue]

    def to_payload(self) -> dict[str, Any]:
        """Serialize entries with explicit nulls preserved."""
        return {"entries": [entry.to_payload() for entry in self.entries]}
