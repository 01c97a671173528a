"""
Composite resource id: ``{cloud_type}:{platform_id}``.

The persisted format must not change; Terraform state and ``terraform import``
both carry it verbatim.
"""
from typing import Union

from cloudacct.errors import MalformedIdError
from cloudacct.models.account import CloudType
from cloudacct.models.resource import AccountIdentity

SEPARATOR = ":"


def compose_id(cloud_type: Union[CloudType, str], platform_id: str) -> str:
    try:
        ct = CloudType(cloud_type)
    except ValueError:
        raise MalformedIdError(
            f"cannot build cloud account id: unknown cloud type {cloud_type!r}",
            details={"cloud_type": str(cloud_type)},
        ) from None
    if not platform_id:
        raise MalformedIdError(
            f"cannot build cloud account id for {ct.value}: empty platform id",
            details={"cloud_type": ct.value},
        )
    return f"{ct.value}{SEPARATOR}{platform_id}"


def parse_id(id_string: str) -> AccountIdentity:
    cloud_type, sep, platform_id = (id_string or "").partition(SEPARATOR)
    if not sep:
        raise MalformedIdError(
            f"malformed cloud account id {id_string!r}: expected '<cloud_type>{SEPARATOR}<id>'",
            details={"id": id_string},
        )
    try:
        ct = CloudType(cloud_type)
    except ValueError:
        raise MalformedIdError(
            f"malformed cloud account id {id_string!r}: unknown cloud type {cloud_type!r}",
            details={"id": id_string},
        ) from None
    if not platform_id:
        raise MalformedIdError(
            f"malformed cloud account id {id_string!r}: empty platform id",
            details={"id": id_string},
        )
    return AccountIdentity(cloud_type=ct, platform_id=platform_id)
