"""Integrator (sync binding) models as served by the NAM directory."""

from enum import Enum
from urllib.parse import parse_qsl

from pydantic import BaseModel, Field


class SyncPriority(str, Enum):
    """Sync priority class of an integrator."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class APIEndpoint(BaseModel):
    """Connection details for one external API endpoint."""

    model_config = {"frozen": True, "extra": "ignore", "populate_by_name": True}

    id: int | str | None = Field(default=None, description="Directory id")
    name: str = Field(default="", description="Endpoint name")
    url: str = Field(description="Base URL")
    key: str | None = Field(default=None, description="API key or token")
    user: str | None = Field(default=None, description="Username for basic auth")
    password: str | None = Field(default=None, alias="pass", description="Password for basic auth")
    type: str | None = Field(default=None, description="Endpoint type (e.g. 'global')")
    enabled: bool = Field(default=True, description="Whether the endpoint is enabled")

    @property
    def is_global(self) -> bool:
        return self.type == "global"


class FirewallScope(BaseModel):
    """A named partition (VDOM) inside one firewall endpoint."""

    model_config = {"frozen": True, "extra": "ignore"}

    name: str = Field(description="Scope name")


class FirewallEndpoint(BaseModel):
    """A firewall endpoint and the scopes to reconcile on it."""

    model_config = {"frozen": True, "extra": "ignore"}

    endpoint: APIEndpoint = Field(description="Firewall API endpoint")
    vdoms: list[FirewallScope] = Field(default_factory=list, description="Scopes to reconcile")


class Integrator(BaseModel):
    """A sync binding between one IPAM query and its firewall targets."""

    model_config = {"frozen": True, "extra": "ignore"}

    id: int | str | None = Field(default=None, description="Directory id")
    name: str = Field(description="Integrator name")
    description: str | None = Field(default=None, description="Free-form description")
    enabled: bool = Field(default=False, description="Whether the integrator is enabled")
    query: str = Field(default="", description="IPAM prefix query (URL or query string)")
    sync_priority: SyncPriority = Field(default=SyncPriority.LOW, description="Priority class")
    netbox_endpoint: APIEndpoint | None = Field(default=None, description="IPAM endpoint")

    # FortiOS
    create_fg_group: bool = Field(default=False, description="Manage firewall address groups")
    fg_group_name: str | None = Field(default=None, description="Firewall group name suffix")
    fortigate_endpoints: list[FirewallEndpoint] = Field(default_factory=list)

    # NSX
    create_nsx_group: bool = Field(default=False, description="Manage security groups")
    nsx_group_name: str | None = Field(default=None, description="Security group name suffix")
    nsx_group_scope: str | None = Field(default=None, description="Security group tag scope")
    nsx_group_tag: str | None = Field(default=None, description="Security group tag value")
    nsx_endpoints: list[APIEndpoint] = Field(default_factory=list)

    def query_params(self) -> list[tuple[str, str]]:
        """Return the query-string part of ``query`` as key/value pairs."""
        query = self.query.split("?", 1)[1] if "?" in self.query else self.query
        return parse_qsl(query, keep_blank_values=True)
