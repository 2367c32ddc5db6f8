"""
Gateway Route Table

Declarative list of proxied routes. Each entry maps a gateway path onto a
backend path under the API prefix, together with the capability it needs
and the label used when the backend answers with an error.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from core.roles import Capability


@dataclass(frozen=True)
class QuerySwitch:
    """Use ``backend_path`` instead when ``?param=value`` is present"""
    param: str
    value: str
    backend_path: str


@dataclass(frozen=True)
class ProxyRoute:
    path: str
    backend_path: str
    methods: Tuple[str, ...] = ("GET",)
    capability: Optional[Capability] = None
    public: bool = False
    error_label: str = "Request failed"
    query_switch: Optional[QuerySwitch] = None
    # body field filled with the session user id
    inject_user: Optional[str] = None
    required_body_fields: Tuple[str, ...] = ()
    extra_query: Tuple[Tuple[str, str], ...] = ()
    name: Optional[str] = None

    @property
    def route_name(self) -> str:
        if self.name:
            return self.name
        slug = self.path.strip("/").replace("/", "_").replace("{", "").replace("}", "")
        return f"proxy_{slug}_{'_'.join(m.lower() for m in self.methods)}"


_C = Capability

ROUTES: Tuple[ProxyRoute, ...] = (
    # G-Keys
    ProxyRoute(
        "/api/g-keys", "/g-keys",
        error_label="Failed to fetch G-Keys",
        query_switch=QuerySwitch("summary", "true", "/g-keys/summary"),
    ),
    ProxyRoute(
        "/api/g-keys/initialize", "/g-keys/initialize", ("POST",),
        capability=_C.HOLD_GKEYS, error_label="Failed to initialize G-Keys",
    ),
    ProxyRoute(
        "/api/g-keys/category/{category}", "/g-keys/category/{category}",
        error_label="Failed to fetch G-Key status",
    ),

    # Campaigns
    ProxyRoute(
        "/api/campaigns/join", "/campaigns/join", ("POST",),
        capability=_C.JOIN_CAMPAIGNS, error_label="Failed to join campaign",
        inject_user="streamerId", required_body_fields=("campaignId",),
    ),
    ProxyRoute(
        "/api/campaigns/streamer/available", "/campaigns/streamer/available",
        capability=_C.JOIN_CAMPAIGNS, error_label="Failed to fetch available campaigns",
    ),
    ProxyRoute(
        "/api/campaigns/streamer/active", "/campaigns/streamer/active",
        capability=_C.JOIN_CAMPAIGNS, error_label="Failed to fetch active campaigns",
    ),
    ProxyRoute(
        "/api/campaigns/brand", "/campaigns/brand",
        capability=_C.MANAGE_CAMPAIGNS, error_label="Failed to fetch brand campaigns",
    ),
    ProxyRoute(
        "/api/campaigns/{campaign_id}/activate", "/campaigns/{campaign_id}/activate", ("POST",),
        capability=_C.ACTIVATE_CAMPAIGNS, error_label="Failed to activate campaign",
    ),

    # Admin: campaigns
    ProxyRoute(
        "/api/admin/campaigns", "/campaigns",
        capability=_C.ADMIN_ACCESS, error_label="Failed to fetch campaigns",
    ),
    ProxyRoute(
        "/api/admin/campaigns/search", "/admin/campaigns/search",
        capability=_C.ADMIN_ACCESS, error_label="Failed to search campaigns",
    ),
    ProxyRoute(
        "/api/admin/campaigns/{campaign_id}", "/campaigns/{campaign_id}",
        capability=_C.ADMIN_ACCESS, error_label="Failed to fetch campaign",
        extra_query=(("adminAccess", "true"),),
    ),
    ProxyRoute(
        "/api/admin/campaigns/{campaign_id}", "/campaigns/{campaign_id}", ("DELETE",),
        capability=_C.ADMIN_ACCESS, error_label="Failed to delete campaign",
    ),
    ProxyRoute(
        "/api/admin/campaigns/{campaign_id}/financial-overview",
        "/admin/campaigns/{campaign_id}/financial-overview",
        capability=_C.ADMIN_ACCESS, error_label="Failed to fetch financial overview",
    ),
    ProxyRoute(
        "/api/admin/campaigns/{campaign_id}/force-cancel",
        "/admin/campaigns/{campaign_id}/force-cancel", ("POST",),
        capability=_C.ADMIN_ACCESS, error_label="Failed to cancel campaign",
    ),
    ProxyRoute(
        "/api/admin/campaigns/{campaign_id}/override-budget",
        "/admin/campaigns/{campaign_id}/override-budget", ("PUT",),
        capability=_C.ADMIN_ACCESS, error_label="Failed to override budget",
    ),
    ProxyRoute(
        "/api/admin/conflict-rules", "/conflict-rules", ("GET", "POST"),
        capability=_C.ADMIN_ACCESS, error_label="Failed to process conflict rules",
    ),
    ProxyRoute(
        "/api/admin/conflict-rules/violations", "/conflict-rules/violations",
        capability=_C.ADMIN_ACCESS, error_label="Failed to fetch conflict violations",
    ),

    # Admin: users
    ProxyRoute(
        "/api/admin/users", "/users", ("GET", "POST"),
        capability=_C.ADMIN_ACCESS, error_label="Failed to process users request",
    ),
    ProxyRoute(
        "/api/admin/users/{user_id}", "/users/{user_id}", ("GET", "PUT", "DELETE"),
        capability=_C.ADMIN_ACCESS, error_label="Failed to process user request",
    ),

    # Admin: wallets and finance
    ProxyRoute(
        "/api/admin/wallets/{user_id}/adjust", "/admin/wallets/{user_id}/adjust", ("POST",),
        capability=_C.ADMIN_ACCESS, error_label="Failed to adjust wallet",
    ),
    ProxyRoute(
        "/api/admin/wallets/{user_id}/freeze", "/admin/wallets/{user_id}/freeze", ("POST",),
        capability=_C.ADMIN_ACCESS, error_label="Failed to freeze wallet",
    ),
    ProxyRoute(
        "/api/admin/wallets/{user_id}/unfreeze", "/admin/wallets/{user_id}/unfreeze", ("POST",),
        capability=_C.ADMIN_ACCESS, error_label="Failed to unfreeze wallet",
    ),
    ProxyRoute(
        "/api/admin/wallets/{user_id}/details", "/admin/wallets/{user_id}/details",
        capability=_C.ADMIN_ACCESS, error_label="Failed to fetch wallet details",
    ),
    ProxyRoute(
        "/api/admin/wallets/{user_id}/transactions", "/admin/wallets/{user_id}/transactions",
        capability=_C.ADMIN_ACCESS, error_label="Failed to fetch wallet transactions",
    ),
    ProxyRoute(
        "/api/admin/finance/transactions", "/admin/finance/transactions",
        capability=_C.ADMIN_ACCESS, error_label="Failed to fetch transactions",
    ),
    ProxyRoute(
        "/api/admin/finance/withdrawals", "/admin/finance/withdrawals",
        capability=_C.ADMIN_ACCESS, error_label="Failed to fetch withdrawals",
    ),
    ProxyRoute(
        "/api/admin/dashboard/financial", "/admin/dashboard/financial",
        capability=_C.ADMIN_ACCESS, error_label="Failed to fetch financial dashboard",
    ),
    ProxyRoute(
        "/api/admin/reports/audit", "/admin/reports/audit",
        capability=_C.ADMIN_ACCESS, error_label="Failed to fetch audit report",
    ),

    # Wallet
    ProxyRoute(
        "/api/wallet/balance", "/wallet/balance",
        capability=_C.VIEW_WALLET, error_label="Failed to fetch wallet balance",
    ),
    ProxyRoute(
        "/api/wallet/transactions", "/wallet/transactions",
        capability=_C.VIEW_WALLET, error_label="Failed to fetch transactions",
    ),

    # Notifications
    ProxyRoute(
        "/api/notifications", "/notifications", ("GET", "POST"),
        capability=_C.VIEW_NOTIFICATIONS, error_label="Failed to process notifications",
    ),
    ProxyRoute(
        "/api/notifications/latest", "/notifications/latest",
        capability=_C.VIEW_NOTIFICATIONS, error_label="Failed to fetch notifications",
    ),
    ProxyRoute(
        "/api/notifications/count/unread", "/notifications/count/unread",
        capability=_C.VIEW_NOTIFICATIONS, error_label="Failed to fetch unread count",
    ),
    ProxyRoute(
        "/api/notifications/mark-as-read", "/notifications/mark-as-read", ("PATCH",),
        capability=_C.VIEW_NOTIFICATIONS, error_label="Failed to mark notifications as read",
    ),
    ProxyRoute(
        "/api/notifications/read/all", "/notifications/read/all", ("PUT",),
        capability=_C.VIEW_NOTIFICATIONS, error_label="Failed to mark notifications as read",
    ),
    ProxyRoute(
        "/api/notifications/read/batch", "/notifications/read/batch", ("PUT",),
        capability=_C.VIEW_NOTIFICATIONS, error_label="Failed to mark notifications as read",
    ),
    ProxyRoute(
        "/api/notifications/{notification_id}/read", "/notifications/{notification_id}/read", ("PUT",),
        capability=_C.VIEW_NOTIFICATIONS, error_label="Failed to mark notification as read",
    ),
    ProxyRoute(
        "/api/notifications/{notification_id}", "/notifications/{notification_id}", ("DELETE",),
        capability=_C.VIEW_NOTIFICATIONS, error_label="Failed to delete notification",
    ),

    # KYC
    ProxyRoute(
        "/api/kyc/status", "/kyc/status",
        capability=_C.SUBMIT_KYC, error_label="Failed to fetch KYC status",
    ),
    ProxyRoute(
        "/api/kyc/submit", "/kyc/submit", ("POST",),
        capability=_C.SUBMIT_KYC, error_label="Failed to submit KYC",
    ),

    # Overlay (public, keyed by overlay token)
    ProxyRoute(
        "/api/overlay/{token}", "/overlay/{token}",
        public=True, error_label="Failed to fetch overlay",
    ),
    ProxyRoute(
        "/api/overlay/{token}/data", "/overlay/{token}/data",
        public=True, error_label="Failed to fetch overlay data",
    ),
    ProxyRoute(
        "/api/overlay/{token}/click", "/overlay/{token}/click", ("POST",),
        public=True, error_label="Failed to record overlay click",
    ),
    ProxyRoute(
        "/api/overlay/{token}/ping", "/overlay/{token}/ping", ("POST",),
        public=True, error_label="Failed to ping overlay",
    ),

    # User
    ProxyRoute(
        "/api/user/profile", "/users/me",
        capability=_C.VIEW_PROFILE, error_label="Failed to fetch profile",
    ),
    ProxyRoute(
        "/api/user/overlay", "/users/me/overlay",
        capability=_C.HOLD_GKEYS, error_label="Failed to fetch overlay settings",
    ),
    ProxyRoute(
        "/api/user/me/campaign-selection", "/users/me/campaign-selection", ("GET", "PUT"),
        capability=_C.JOIN_CAMPAIGNS, error_label="Failed to process campaign selection",
    ),
    ProxyRoute(
        "/api/users/me/level", "/users/me/level",
        capability=_C.VIEW_PROFILE, error_label="Failed to fetch level",
    ),
    ProxyRoute(
        "/api/users/me/rp", "/users/me/rp",
        capability=_C.VIEW_PROFILE, error_label="Failed to fetch RP",
    ),
    ProxyRoute(
        "/api/users/me/streak", "/users/me/streak",
        capability=_C.VIEW_PROFILE, error_label="Failed to fetch streak",
    ),

    # Earnings
    ProxyRoute(
        "/api/earnings/summary", "/earnings/summary",
        capability=_C.VIEW_EARNINGS, error_label="Failed to fetch earnings",
    ),
    ProxyRoute(
        "/api/earnings/summary/{streamer_id}", "/earnings/summary/{streamer_id}",
        capability=_C.VIEW_ANALYTICS, error_label="Failed to fetch earnings",
    ),
    ProxyRoute(
        "/api/earnings/campaign/{campaign_id}", "/earnings/campaign/{campaign_id}",
        capability=_C.VIEW_EARNINGS, error_label="Failed to fetch campaign earnings",
    ),

    # Analytics
    ProxyRoute(
        "/api/analytics/advanced", "/analytics/advanced",
        capability=_C.VIEW_ANALYTICS, error_label="Failed to fetch analytics",
    ),
    ProxyRoute(
        "/api/analytics/campaigns/top", "/analytics/campaigns/top",
        capability=_C.VIEW_ANALYTICS, error_label="Failed to fetch top campaigns",
    ),
    ProxyRoute(
        "/api/analytics/streamers/top", "/analytics/streamers/top",
        capability=_C.VIEW_ANALYTICS, error_label="Failed to fetch top streamers",
    ),
    ProxyRoute(
        "/api/analytics/streamer/{streamer_id}", "/analytics/streamer/{streamer_id}",
        capability=_C.VIEW_ANALYTICS, error_label="Failed to fetch streamer analytics",
    ),

    # Payments
    ProxyRoute(
        "/api/payments/create-intent", "/payments/create-intent", ("POST",),
        capability=_C.CREATE_PAYMENTS, error_label="Failed to create payment intent",
    ),

    # Stream verification
    ProxyRoute(
        "/api/stream-status", "/stream-verification/status/{session_user_id}",
        error_label="Failed to fetch stream status",
    ),
)


__all__ = ["ProxyRoute", "QuerySwitch", "ROUTES"]
