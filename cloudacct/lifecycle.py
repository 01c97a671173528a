"""
Create / read / update / delete / import for one cloud account resource.

All calls are sequential and blocking. The orchestrator keeps no state of its
own; everything it needs lives in the ResourceData it is handed, so distinct
resources may be driven in parallel. Calls on the same resource must be
serialised by the caller.
"""
import abc
from typing import List, Optional

from rich.console import Console

from cloudacct.config import Settings
from cloudacct.errors import DuplicateAccountError, NotFoundError, ValidationError
from cloudacct.mapper.diff import plan
from cloudacct.mapper.identity import compose_id, parse_id
from cloudacct.mapper.variant import decode, encode
from cloudacct.models.account import CloudAccount, CloudType, local_id
from cloudacct.models.resource import AccountIdentity, ProviderConfig, ResourceData

console = Console(stderr=True)

# Advisory upper bounds in seconds; the caller enforces them around each call
TIMEOUTS = {
    "create": 10 * 60,
    "update": 10 * 60,
    "delete": 5 * 60,
}

_PROVIDER_KEYS = ("disable_on_destroy", "update_on_create")


class AccountClient(abc.ABC):
    """
    Platform API as seen by the lifecycle.

    Implementations raise NotFoundError and DuplicateAccountError for those
    two conditions; anything else is passed through to the caller untouched.
    """

    @abc.abstractmethod
    def create(self, account: CloudAccount) -> None: ...

    @abc.abstractmethod
    def update(self, account: CloudAccount) -> None: ...

    @abc.abstractmethod
    def get(self, cloud_type: CloudType, platform_id: str) -> CloudAccount: ...

    @abc.abstractmethod
    def delete(self, cloud_type: CloudType, platform_id: str) -> None: ...

    @abc.abstractmethod
    def disable(self, cloud_type: CloudType, platform_id: str) -> None: ...

    @abc.abstractmethod
    def identify(self, cloud_type: CloudType, name: str) -> str:
        """Look up the platform id of the account named ``name``."""

    def local_id(self, account: CloudAccount) -> str:
        return local_id(account)


class CloudAccountLifecycle:
    def __init__(self, client: AccountClient, settings: Optional[Settings] = None):
        self.client = client
        self.settings = settings or Settings()

    def create(self, d: ResourceData) -> AccountIdentity:
        cloud_type, name, account = decode(d.config, self.settings)
        update_if_exists = d.provider_config.update_on_create
        successful_update = False

        try:
            self.client.create(account)
        except DuplicateAccountError:
            if not update_if_exists:
                raise
            console.print("[yellow]Warning:[/yellow] duplicate cloud account detected, attempting to update")
            self.client.update(account)
            successful_update = True

        try:
            platform_id = self.client.identify(cloud_type, name)
        except NotFoundError:
            if not successful_update:
                raise
            # The name index can lag behind a rename done by the update above
            console.print(
                f"[yellow]Warning:[/yellow] failed to identify updated cloud account "
                f"(type: {cloud_type.value}, name: {name}); constructing id"
            )
            platform_id = self.client.local_id(account)
            console.print(f"[dim]Account id is {platform_id}. type: {cloud_type.value}, name: {name}[/dim]")

        identity = AccountIdentity(cloud_type, platform_id)
        d.id = compose_id(cloud_type, platform_id)
        self.read(d)
        return identity

    def read(self, d: ResourceData) -> Optional[CloudAccount]:
        identity = parse_id(d.id)
        try:
            account = self.client.get(identity.cloud_type, identity.platform_id)
        except NotFoundError:
            d.id = ""
            d.state = {}
            return None

        base = dict(d.state)
        provider = ProviderConfig.from_tree({k: d.config.get(k, base.get(k)) for k in _PROVIDER_KEYS})
        base["disable_on_destroy"] = provider.disable_on_destroy
        base["update_on_create"] = provider.update_on_create
        d.state = encode(identity.cloud_type, account, base)
        return account

    def update(self, d: ResourceData) -> Optional[CloudAccount]:
        _, _, account = decode(d.config, self.settings)
        if d.state:
            replaced = [c.path for c in plan(d.state, d.config).changes if c.force_new]
            if replaced:
                raise ValidationError(
                    f"{', '.join(replaced)} cannot change on an existing account; recreate it instead",
                    details={"fields": replaced},
                )
        self.client.update(account)
        return self.read(d)

    def delete(self, d: ResourceData) -> None:
        identity = parse_id(d.id)
        disable = d.provider_config.disable_on_destroy
        try:
            if disable:
                self.client.disable(identity.cloud_type, identity.platform_id)
            else:
                self.client.delete(identity.cloud_type, identity.platform_id)
        except NotFoundError:
            pass
        d.id = ""
        d.state = {}

    def import_state(self, d: ResourceData) -> List[ResourceData]:
        parse_id(d.id)
        return [d]

