"""AWS Organizations-backed tag store and OU lookup."""

from __future__ import annotations

from typing import Any, Callable

from ..domain.account import AccountStatus, OuRef, Tag

ClientProvider = Callable[[], Any]


class OrganizationsTagStore:
    """Reads and removes account tags through the Organizations API."""

    def __init__(self, client_provider: ClientProvider) -> None:
        self._client_provider = client_provider

    def list_tags(self, account_id: str) -> list[Tag]:
        paginator = self._client_provider().get_paginator("list_tags_for_resource")
        tags: list[Tag] = []
        for page in paginator.paginate(ResourceId=account_id):
            tags.extend(Tag(key=item["Key"], value=item.get("Value", "")) for item in page.get("Tags", []))
        return tags

    def remove_tag(self, account_id: str, key: str) -> None:
        self._client_provider().untag_resource(ResourceId=account_id, TagKeys=[key])


class OrganizationsOuLookup:
    """Finds lifecycle OUs (``CleanUp``, ``Quarantine``, ``Available`` ...) under the sandbox OU by name.

    Nothing is cached: an OU that was renamed or recreated is picked up on the
    next call.
    """

    def __init__(self, client_provider: ClientProvider, sandbox_ou_id: str) -> None:
        self._client_provider = client_provider
        self._sandbox_ou_id = sandbox_ou_id

    def resolve(self, name: AccountStatus) -> OuRef:
        paginator = self._client_provider().get_paginator("list_organizational_units_for_parent")
        for page in paginator.paginate(ParentId=self._sandbox_ou_id):
            for unit in page.get("OrganizationalUnits", []):
                if unit.get("Name") == name.value:
                    return OuRef(id=unit["Id"], name=unit["Name"])
        raise LookupError(f"OU {name.value} not found under {self._sandbox_ou_id}")
