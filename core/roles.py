"""
Marketplace Roles and Capabilities

Roles are grouped into three portals (brand, admin, publisher). Route
authorization checks a named capability instead of comparing role strings.
"""

from enum import Enum
from typing import Dict, FrozenSet, Optional, Union


class Portal(str, Enum):
    """Portal a role belongs to"""
    BRAND = "brand"
    ADMIN = "admin"
    PUBLISHER = "publisher"


class Role(str, Enum):
    """Account roles"""
    # Brand portal
    MARKETING_HEAD = "marketing_head"
    CAMPAIGN_MANAGER = "campaign_manager"
    ADMIN_BRAND = "admin_brand"
    FINANCE_MANAGER = "finance_manager"
    VALIDATOR_APPROVER = "validator_approver"
    CAMPAIGN_CONSULTANT = "campaign_consultant"
    SALES_REPRESENTATIVE = "sales_representative"
    SUPPORT_2_BRAND = "support_2_brand"
    SUPPORT_1_BRAND = "support_1_brand"

    # Admin portal
    SUPER_ADMIN = "super_admin"
    ADMIN_EXCHANGE = "admin_exchange"
    PLATFORM_SUCCESS_MANAGER = "platform_success_manager"
    CUSTOMER_SUCCESS_MANAGER = "customer_success_manager"
    CAMPAIGN_SUCCESS_MANAGER = "campaign_success_manager"
    SUPPORT_2_ADMIN = "support_2_admin"
    SUPPORT_1_ADMIN = "support_1_admin"

    # Publisher portal
    INDEPENDENT_PUBLISHER = "independent_publisher"
    ARTISTE_MANAGER = "artiste_manager"
    STREAMER_INDIVIDUAL = "streamer_individual"
    LIAISON_MANAGER = "liaison_manager"
    SUPPORT_2_PUBLISHER = "support_2_publisher"
    SUPPORT_1_PUBLISHER = "support_1_publisher"

    # Legacy roles
    STREAMER = "streamer"
    BRAND = "brand"
    ADMIN = "admin"


class Capability(str, Enum):
    """Named permissions checked before a route is dispatched"""
    # G-Keys
    HOLD_GKEYS = "hold_gkeys"
    MANAGE_GKEYS = "manage_gkeys"

    # Campaigns
    JOIN_CAMPAIGNS = "join_campaigns"
    VIEW_CAMPAIGNS = "view_campaigns"
    MANAGE_CAMPAIGNS = "manage_campaigns"
    ACTIVATE_CAMPAIGNS = "activate_campaigns"

    # Money
    VIEW_WALLET = "view_wallet"
    CREATE_PAYMENTS = "create_payments"
    VIEW_EARNINGS = "view_earnings"

    # Account
    VIEW_PROFILE = "view_profile"
    SUBMIT_KYC = "submit_kyc"
    VIEW_NOTIFICATIONS = "view_notifications"
    VIEW_ANALYTICS = "view_analytics"

    # Admin portal
    ADMIN_ACCESS = "admin_access"


PORTAL_BY_ROLE: Dict[Role, Portal] = {
    Role.MARKETING_HEAD: Portal.BRAND,
    Role.CAMPAIGN_MANAGER: Portal.BRAND,
    Role.ADMIN_BRAND: Portal.BRAND,
    Role.FINANCE_MANAGER: Portal.BRAND,
    Role.VALIDATOR_APPROVER: Portal.BRAND,
    Role.CAMPAIGN_CONSULTANT: Portal.BRAND,
    Role.SALES_REPRESENTATIVE: Portal.BRAND,
    Role.SUPPORT_2_BRAND: Portal.BRAND,
    Role.SUPPORT_1_BRAND: Portal.BRAND,
    Role.BRAND: Portal.BRAND,
    Role.SUPER_ADMIN: Portal.ADMIN,
    Role.ADMIN_EXCHANGE: Portal.ADMIN,
    Role.PLATFORM_SUCCESS_MANAGER: Portal.ADMIN,
    Role.CUSTOMER_SUCCESS_MANAGER: Portal.ADMIN,
    Role.CAMPAIGN_SUCCESS_MANAGER: Portal.ADMIN,
    Role.SUPPORT_2_ADMIN: Portal.ADMIN,
    Role.SUPPORT_1_ADMIN: Portal.ADMIN,
    Role.ADMIN: Portal.ADMIN,
    Role.INDEPENDENT_PUBLISHER: Portal.PUBLISHER,
    Role.ARTISTE_MANAGER: Portal.PUBLISHER,
    Role.STREAMER_INDIVIDUAL: Portal.PUBLISHER,
    Role.LIAISON_MANAGER: Portal.PUBLISHER,
    Role.SUPPORT_2_PUBLISHER: Portal.PUBLISHER,
    Role.SUPPORT_1_PUBLISHER: Portal.PUBLISHER,
    Role.STREAMER: Portal.PUBLISHER,
}

_COMMON = frozenset({
    Capability.VIEW_PROFILE,
    Capability.VIEW_NOTIFICATIONS,
    Capability.VIEW_WALLET,
    Capability.SUBMIT_KYC,
    Capability.VIEW_CAMPAIGNS,
})

_STREAMER = _COMMON | {
    Capability.HOLD_GKEYS,
    Capability.JOIN_CAMPAIGNS,
    Capability.VIEW_EARNINGS,
}

_BRAND = _COMMON | {
    Capability.MANAGE_CAMPAIGNS,
    Capability.ACTIVATE_CAMPAIGNS,
    Capability.CREATE_PAYMENTS,
    Capability.VIEW_ANALYTICS,
}

_ADMIN = frozenset(Capability) - {Capability.HOLD_GKEYS, Capability.JOIN_CAMPAIGNS}

# Support and sales roles only see their portal's read-only surface
_PORTAL_SUPPORT = {
    Portal.BRAND: _COMMON | {Capability.VIEW_ANALYTICS},
    Portal.ADMIN: _COMMON | {Capability.VIEW_ANALYTICS},
    Portal.PUBLISHER: _COMMON | {Capability.VIEW_EARNINGS},
}

ROLE_CAPABILITIES: Dict[Role, FrozenSet[Capability]] = {
    Role.STREAMER: frozenset(_STREAMER),
    Role.STREAMER_INDIVIDUAL: frozenset(_STREAMER),
    Role.INDEPENDENT_PUBLISHER: frozenset(_STREAMER),
    Role.ARTISTE_MANAGER: frozenset(_PORTAL_SUPPORT[Portal.PUBLISHER] | {Capability.VIEW_ANALYTICS}),
    Role.LIAISON_MANAGER: frozenset(_PORTAL_SUPPORT[Portal.PUBLISHER]),
    Role.SUPPORT_2_PUBLISHER: frozenset(_PORTAL_SUPPORT[Portal.PUBLISHER]),
    Role.SUPPORT_1_PUBLISHER: frozenset(_PORTAL_SUPPORT[Portal.PUBLISHER]),

    Role.BRAND: frozenset(_BRAND),
    Role.MARKETING_HEAD: frozenset(_BRAND),
    Role.CAMPAIGN_MANAGER: frozenset(_BRAND),
    Role.ADMIN_BRAND: frozenset(_BRAND),
    Role.FINANCE_MANAGER: frozenset(_COMMON | {Capability.CREATE_PAYMENTS, Capability.VIEW_ANALYTICS}),
    Role.VALIDATOR_APPROVER: frozenset(_BRAND - {Capability.CREATE_PAYMENTS}),
    Role.CAMPAIGN_CONSULTANT: frozenset(_PORTAL_SUPPORT[Portal.BRAND]),
    Role.SALES_REPRESENTATIVE: frozenset(_PORTAL_SUPPORT[Portal.BRAND]),
    Role.SUPPORT_2_BRAND: frozenset(_PORTAL_SUPPORT[Portal.BRAND]),
    Role.SUPPORT_1_BRAND: frozenset(_PORTAL_SUPPORT[Portal.BRAND]),

    Role.ADMIN: _ADMIN,
    Role.SUPER_ADMIN: _ADMIN,
    Role.ADMIN_EXCHANGE: _ADMIN,
    Role.PLATFORM_SUCCESS_MANAGER: frozenset(_PORTAL_SUPPORT[Portal.ADMIN] | {Capability.ADMIN_ACCESS}),
    Role.CUSTOMER_SUCCESS_MANAGER: frozenset(_PORTAL_SUPPORT[Portal.ADMIN] | {Capability.ADMIN_ACCESS}),
    Role.CAMPAIGN_SUCCESS_MANAGER: frozenset(
        _PORTAL_SUPPORT[Portal.ADMIN] | {Capability.ADMIN_ACCESS, Capability.MANAGE_CAMPAIGNS}
    ),
    Role.SUPPORT_2_ADMIN: frozenset(_PORTAL_SUPPORT[Portal.ADMIN]),
    Role.SUPPORT_1_ADMIN: frozenset(_PORTAL_SUPPORT[Portal.ADMIN]),
}


def parse_role(value: Union[str, Role, None]) -> Optional[Role]:
    """Map a raw role claim to a Role, None if unknown"""
    if value is None:
        return None
    if isinstance(value, Role):
        return value
    try:
        return Role(value.strip().lower())
    except ValueError:
        return None


def capabilities_for(role: Union[str, Role, None]) -> FrozenSet[Capability]:
    """Capabilities granted to a role (unknown roles get none)"""
    parsed = parse_role(role)
    if parsed is None:
        return frozenset()
    return ROLE_CAPABILITIES.get(parsed, frozenset())


def has_capability(role: Union[str, Role, None], capability: Capability) -> bool:
    return capability in capabilities_for(role)


def portal_for(role: Union[str, Role, None]) -> Optional[Portal]:
    parsed = parse_role(role)
    return PORTAL_BY_ROLE.get(parsed) if parsed else None


__all__ = [
    "Portal",
    "Role",
    "Capability",
    "ROLE_CAPABILITIES",
    "PORTAL_BY_ROLE",
    "parse_role",
    "capabilities_for",
    "has_capability",
    "portal_for",
]
