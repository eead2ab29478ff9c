"""Role → permission catalog seeded into every new tenant.

Single source of truth for the bootstrap permission matrix. The mapping is
read-only; per-tenant copies live in ``role_permissions`` once provisioned.
"""

from collections.abc import Iterator
from types import MappingProxyType

OWNER = "owner"
MANAGER = "manager"
WAITER = "waiter"
EMPLOYEE = "employee"

# Roles allowed to invite new members into their tenant.
INVITER_ROLES: frozenset[str] = frozenset({OWNER, MANAGER})

_FULL_ACCESS: tuple[str, ...] = (
    "TAB_CREATE",
    "TAB_ADD_ITEM",
    "TAB_ADD_TIP",
    "TAB_CLOSE",
    "PAYMENT_RECORD_BAR",
    "PAYMENT_RECORD_CAR_WASH",
    "TIP_PAYOUT",
    "STOCK_ADJUST",
    "CAR_WASH_CREATE_ORDER",
    "CAR_WASH_ADD_ITEM",
    "CAR_WASH_FINISH",
    "USERS_MANAGE",
    "SETTINGS_MANAGE",
)

PERMISSIONS_BY_ROLE: MappingProxyType[str, tuple[str, ...]] = MappingProxyType({
    OWNER: _FULL_ACCESS,
    MANAGER: _FULL_ACCESS,
    WAITER: (
        "TAB_CREATE",
        "TAB_ADD_ITEM",
        "TAB_ADD_TIP",
        "TAB_CLOSE",
        "PAYMENT_RECORD_BAR",
    ),
    EMPLOYEE: (
        "CAR_WASH_CREATE_ORDER",
        "CAR_WASH_ADD_ITEM",
        "CAR_WASH_FINISH",
    ),
})

ROLES: tuple[str, ...] = tuple(PERMISSIONS_BY_ROLE)


def permissions_for(role: str) -> tuple[str, ...]:
    """Return the permission keys granted to ``role``.

    Raises KeyError for unknown roles: callers validate roles against
    ``ROLES`` before looking them up.
    """
    return PERMISSIONS_BY_ROLE[role]


def catalog_grants() -> Iterator[tuple[str, str]]:
    """Yield every (role, permission_key) pair in catalog order."""
    for role, keys in PERMISSIONS_BY_ROLE.items():
        for key in keys:
            yield role, key
