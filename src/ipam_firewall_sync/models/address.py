"""Firewall address object and address group models."""

from typing import Any

from pydantic import BaseModel, Field

from ipam_firewall_sync.models.common import AddressFamily


class AddressObject(BaseModel):
    """A firewall address object for one prefix.

    ``value`` holds ``"<network> <mask>"`` for IPv4 and the CIDR
    string for IPv6.
    """

    model_config = {"frozen": True}

    name: str = Field(description="Object name")
    family: AddressFamily = Field(description="Address family")
    value: str = Field(default="", description="Family-specific address payload")
    comment: str | None = Field(default=None, description="Object comment")
    color: int = Field(default=0, description="Display color")

    def to_api(self) -> dict[str, Any]:
        """Build the FortiOS payload for this object."""
        payload: dict[str, Any] = {"name": self.name}
        if self.family == AddressFamily.IPV4:
            payload["subnet"] = self.value
            payload["color"] = self.color
        else:
            payload["ip6"] = self.value
        if self.comment is not None:
            payload["comment"] = self.comment
        return payload

    @classmethod
    def from_api(cls, data: dict[str, Any], family: AddressFamily) -> "AddressObject":
        """Parse an address record returned by FortiOS."""
        key = "subnet" if family == AddressFamily.IPV4 else "ip6"
        return cls(
            name=data["name"],
            family=family,
            value=data.get(key) or "",
            comment=data.get("comment") or None,
            color=data.get("color") or 0,
        )


class AddressGroup(BaseModel):
    """A named group of address objects, referenced by name."""

    model_config = {"frozen": True}

    name: str = Field(description="Group name")
    family: AddressFamily = Field(description="Address family")
    members: list[str] = Field(default_factory=list, description="Member object names")
    comment: str | None = Field(default=None, description="Group comment")
    color: int = Field(default=0, description="Display color")

    def to_api(self) -> dict[str, Any]:
        """Build the FortiOS payload for this group."""
        payload: dict[str, Any] = {
            "name": self.name,
            "color": self.color,
            "member": [{"name": member} for member in self.members],
        }
        if self.comment is not None:
            payload["comment"] = self.comment
        return payload

    @classmethod
    def from_api(cls, data: dict[str, Any], family: AddressFamily) -> "AddressGroup":
        """Parse an address group record returned by FortiOS."""
        return cls(
            name=data["name"],
            family=family,
            members=[m["name"] for m in data.get("member") or [] if m.get("name")],
            comment=data.get("comment") or None,
            color=data.get("color") or 0,
        )
