"""Security platform (NSX) group models."""

from typing import Any

from pydantic import BaseModel, Field


class IPAddressExpression(BaseModel):
    """An expression holding a flat list of IP/CIDR strings."""

    model_config = {"frozen": True, "extra": "ignore"}

    resource_type: str = Field(default="IPAddressExpression", description="Expression type")
    ip_addresses: list[str] = Field(default_factory=list, description="IP/CIDR values")


class GroupTag(BaseModel):
    """A scope/tag pair attached to a group."""

    model_config = {"frozen": True, "extra": "ignore"}

    scope: str = Field(description="Tag scope")
    tag: str = Field(default="", description="Tag value")


class SecurityGroup(BaseModel):
    """A security group whose membership is a list of raw IP values."""

    model_config = {"frozen": True, "extra": "ignore"}

    display_name: str = Field(description="Group name, also used as its id")
    description: str | None = Field(default=None, description="Group description")
    expression: list[IPAddressExpression] = Field(
        default_factory=list, description="Membership expressions"
    )
    tags: list[GroupTag] = Field(default_factory=list, description="Tags")

    def ip_addresses(self) -> list[str]:
        """Flatten every expression into one de-duplicated list."""
        values: dict[str, None] = {}
        for expression in self.expression:
            for value in expression.ip_addresses:
                values.setdefault(value, None)
        return list(values)

    def to_api(self) -> dict[str, Any]:
        """Build the NSX payload for this group."""
        payload = self.model_dump(mode="json", exclude_none=True)
        if not self.expression:
            payload.pop("expression", None)
        return payload

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "SecurityGroup":
        """Parse a group returned by NSX.

        Only IP address expressions carry membership; other expression
        types (conditions, conjunctions) are dropped.
        """
        expressions = [
            IPAddressExpression.model_validate(e)
            for e in data.get("expression") or []
            if e.get("resource_type") == "IPAddressExpression"
        ]
        return cls(
            display_name=data.get("display_name") or data.get("id") or "",
            description=data.get("description"),
            expression=expressions,
            tags=[GroupTag.model_validate(t) for t in data.get("tags") or [] if t.get("scope")],
        )
