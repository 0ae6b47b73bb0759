"""Collaborator protocols consumed by the reconciliation core."""

from typing import Protocol, runtime_checkable

from ipam_firewall_sync.models.address import AddressGroup, AddressObject
from ipam_firewall_sync.models.common import AddressFamily
from ipam_firewall_sync.models.integrator import Integrator, SyncPriority
from ipam_firewall_sync.models.prefix import Prefix
from ipam_firewall_sync.models.security_group import SecurityGroup


@runtime_checkable
class Handle(Protocol):
    """An open, authenticated connection to one endpoint."""

    @property
    def hostname(self) -> str:
        """Hostname of the endpoint, used in log records."""
        ...

    async def close(self) -> None:
        """Release the connection."""
        ...


@runtime_checkable
class DirectoryClient(Handle, Protocol):
    """Protocol for the integrator directory (NAM).

    Raises:
        CollaboratorFetchError: If the directory cannot be read
        NotFoundError: If a single integrator does not exist
    """

    async def get_integrators(self, priority: SyncPriority | str) -> list[Integrator]:
        """List integrators of one priority class."""
        ...

    async def get_integrator(self, integrator_id: str) -> Integrator:
        """Fetch one integrator by id."""
        ...


@runtime_checkable
class IPAMClient(Handle, Protocol):
    """Protocol for the IPAM (NetBox) prefix query."""

    async def get_prefixes(self, query: list[tuple[str, str]]) -> list[Prefix]:
        """Return every prefix matching the query.

        Raises:
            CollaboratorFetchError: If the prefixes cannot be read
        """
        ...


@runtime_checkable
class FirewallClient(Handle, Protocol):
    """Protocol for a FortiOS-style firewall.

    Every call takes the scope (VDOM) it applies to and, where the API
    is split per address family, the family.

    Reads raise CollaboratorFetchError (NotFoundError for a missing
    object); writes raise CollaboratorMutationError.
    """

    async def get_addresses(self, scope: str, family: AddressFamily) -> list[AddressObject]:
        ...

    async def add_address(self, address: AddressObject, scope: str) -> None:
        ...

    async def get_reference_count(self, name: str, scope: str, family: AddressFamily) -> int:
        """Number of objects on the target still referencing the address."""
        ...

    async def delete_address(self, name: str, scope: str, family: AddressFamily) -> None:
        ...

    async def get_address_groups(self, scope: str, family: AddressFamily) -> list[AddressGroup]:
        ...

    async def add_address_group(self, group: AddressGroup, scope: str) -> None:
        ...

    async def update_address_group(self, name: str, group: AddressGroup, scope: str) -> None:
        ...


@runtime_checkable
class SecurityPlatformClient(Handle, Protocol):
    """Protocol for an NSX-style security platform."""

    async def get_group(self, name: str, global_manager: bool = False) -> SecurityGroup:
        """Fetch a group.

        Raises:
            NotFoundError: If the group does not exist
            CollaboratorFetchError: For other read failures
        """
        ...

    async def patch_group(
        self, name: str, group: SecurityGroup, global_manager: bool = False
    ) -> None:
        """Create or replace a group.

        Raises:
            CollaboratorMutationError: If the write fails
        """
        ...
