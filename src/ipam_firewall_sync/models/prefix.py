"""IPAM prefix models."""

from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from ipam_firewall_sync.models.common import AddressFamily


class Vlan(BaseModel):
    """VLAN associated with a prefix."""

    model_config = {"frozen": True, "extra": "ignore"}

    id: int | None = Field(default=None, description="IPAM VLAN id")
    name: str | None = Field(default=None, description="VLAN name")


class Prefix(BaseModel):
    """A desired-state prefix record as returned by the IPAM.

    The family accepts both a plain integer and the NetBox
    ``{"value": 4, "label": "IPv4"}`` shape.
    """

    model_config = {"frozen": True, "extra": "ignore"}

    id: int | None = Field(default=None, description="IPAM prefix id")
    prefix: str = Field(description="CIDR text")
    display: str = Field(default="", description="Canonical display string")
    family: AddressFamily = Field(description="Address family")
    vlan: Vlan | None = Field(default=None, description="Associated VLAN")

    @field_validator("family", mode="before")
    @classmethod
    def _unwrap_family(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return value.get("value")
        return value

    @model_validator(mode="before")
    @classmethod
    def _default_display(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("display"):
            data = {**data, "display": data.get("prefix")}
        return data

    @property
    def label(self) -> str | None:
        """Name of the associated VLAN, if any."""
        if self.vlan is None:
            return None
        return self.vlan.name
