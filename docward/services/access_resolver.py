"""Access resolution: the one place document capability rules are defined.

Every call site that needs to know what a principal may do to a document
(document handlers, sharing management, version history, the real-time
session bridge) goes through ``resolve_access``. Nothing else re-derives
these rules.

Design:
    - Capabilities: none < viewer < commenter < editor
    - Rules are evaluated in order and the first match wins:
        1. owner           → editor
        2. same organization → editor
        3. explicit permission row → that row's role
        4. share token (only if 1-3 matched nothing) → the link's role,
           provided the link exists, targets this document and is unexpired
        5. otherwise none
    - Resolution never raises. Callers turn ``none`` into an error.
    - ``now`` is read once per resolution so a link cannot expire between
      the existence check and the role application.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import TYPE_CHECKING, Optional, Protocol

from ..core import clock
from ..exceptions import DocumentNotFoundError, ForbiddenError

if TYPE_CHECKING:
    from ..core.auth import Principal
    from ..models import Document, Permission, ShareLink


class AccessStore(Protocol):
    """The store lookups resolution needs. EntityStore satisfies it."""

    def get_document(self, document_id: str) -> Optional[Document]: ...

    def get_permission(self, document_id: str, user_id: str) -> Optional[Permission]: ...

    def get_share_link_by_token(self, token: str) -> Optional[ShareLink]: ...

    def list_share_links(self, document_id: str) -> list[ShareLink]: ...


class Capability(IntEnum):
    NONE = 0
    VIEWER = 1
    COMMENTER = 2
    EDITOR = 3

    @classmethod
    def from_role(cls, role: Optional[str]) -> Capability:
        """Map a stored role string to a capability. Unknown roles map to NONE."""
        return _ROLE_CAPABILITIES.get((role or "").lower(), cls.NONE)

    @property
    def role(self) -> str:
        return self.name.lower()


_ROLE_CAPABILITIES: dict[str, Capability] = {
    "viewer": Capability.VIEWER,
    "commenter": Capability.COMMENTER,
    "editor": Capability.EDITOR,
}

ROLES: tuple[str, ...] = tuple(_ROLE_CAPABILITIES)


class AccessRule(str, Enum):
    """Which rule produced a decision."""

    OWNER = "owner"
    ORGANIZATION = "organization"
    PERMISSION = "permission"
    SHARE_LINK = "share_link"
    NONE = "none"


@dataclass(frozen=True)
class AccessDecision:
    capability: Capability
    rule: AccessRule
    is_owner: bool = False

    def allows(self, required: Capability) -> bool:
        return self.capability >= required


NO_ACCESS = AccessDecision(Capability.NONE, AccessRule.NONE)


class Action(str, Enum):
    """Operations gated by a capability check."""

    READ = "read"
    COMMENT = "comment"
    EDIT = "edit"
    CREATE_VERSION = "create_version"
    MANAGE_SHARING = "manage_sharing"
    DELETE = "delete"


# Minimum capability per action. DELETE may additionally require ownership,
# see check_action.
REQUIRED_CAPABILITY: dict[Action, Capability] = {
    Action.READ: Capability.VIEWER,
    Action.COMMENT: Capability.COMMENTER,
    Action.EDIT: Capability.EDITOR,
    Action.CREATE_VERSION: Capability.EDITOR,
    Action.MANAGE_SHARING: Capability.EDITOR,
    Action.DELETE: Capability.EDITOR,
}


def is_link_active(link: ShareLink, now: int) -> bool:
    """A link with ``expires_at <= now`` is treated as nonexistent."""
    return link.expires_at is None or link.expires_at > now


def find_active_share_link(store: AccessStore, token: str, now: Optional[int] = None) -> Optional[ShareLink]:
    """Look up a link by token, returning None for missing and expired alike."""
    if not token:
        return None
    if now is None:
        now = clock.now_ms()
    link = store.get_share_link_by_token(token)
    if link is None or not is_link_active(link, now):
        return None
    return link


def has_active_share_link(store: AccessStore, document_id: str, now: Optional[int] = None) -> bool:
    """True if the document has at least one unexpired share link."""
    if now is None:
        now = clock.now_ms()
    return any(is_link_active(link, now) for link in store.list_share_links(document_id))


def resolve_access(
    store: AccessStore,
    document: Document,
    principal: Optional[Principal],
    share_token: Optional[str] = None,
    now: Optional[int] = None,
) -> AccessDecision:
    """Resolve what *principal* may do to *document*.

    Args:
        store: Lookup surface for permission and share-link rows.
        document: The loaded document row.
        principal: The caller, or None for an anonymous token holder.
        share_token: Optional bearer token from a share link.
        now: Epoch milliseconds to check link expiry against.

    Returns:
        The first matching rule's decision, or ``NO_ACCESS``.
    """
    if now is None:
        now = clock.now_ms()

    if principal is not None:
        if principal.principal_id == document.owner_id:
            return AccessDecision(Capability.EDITOR, AccessRule.OWNER, is_owner=True)

        if document.organization_id and principal.organization_id == document.organization_id:
            return AccessDecision(Capability.EDITOR, AccessRule.ORGANIZATION)

        permission = store.get_permission(document.id, principal.principal_id)
        if permission is not None:
            capability = Capability.from_role(permission.role)
            if capability > Capability.NONE:
                return AccessDecision(capability, AccessRule.PERMISSION)

    if share_token:
        link = find_active_share_link(store, share_token, now)
        if link is not None and link.document_id == document.id:
            capability = Capability.from_role(link.role)
            if capability > Capability.NONE:
                return AccessDecision(capability, AccessRule.SHARE_LINK)

    return NO_ACCESS


def resolve_capability(
    store: AccessStore,
    document: Document,
    principal: Optional[Principal],
    share_token: Optional[str] = None,
    now: Optional[int] = None,
) -> Capability:
    return resolve_access(store, document, principal, share_token, now).capability


def check_action(decision: AccessDecision, action: Action, delete_requires_owner: bool = True) -> bool:
    """Whether *decision* permits *action*."""
    if action is Action.DELETE and delete_requires_owner:
        return decision.is_owner
    return decision.allows(REQUIRED_CAPABILITY[action])


def require_action(
    decision: AccessDecision,
    action: Action,
    document_id: str,
    delete_requires_owner: bool = True,
) -> None:
    """Raise ForbiddenError unless *decision* permits *action*."""
    if check_action(decision, action, delete_requires_owner):
        return
    if action is Action.DELETE and delete_requires_owner:
        message = "Only the document owner can delete it"
    else:
        message = f"You need {REQUIRED_CAPABILITY[action].role} access to {action.value.replace('_', ' ')} this document"
    raise ForbiddenError(
        message,
        details={
            "document_id": document_id,
            "action": action.value,
            "capability": decision.capability.role,
        },
    )


def authorize_document(
    store: AccessStore,
    document_id: str,
    principal: Optional[Principal],
    action: Action,
    share_token: Optional[str] = None,
    now: Optional[int] = None,
    delete_requires_owner: bool = True,
) -> tuple[Document, AccessDecision]:
    """Load a document and enforce *action* on it.

    Raises DocumentNotFoundError if the row is absent and ForbiddenError if
    the resolved capability is insufficient.
    """
    document = store.get_document(document_id)
    if document is None:
        raise DocumentNotFoundError(document_id)
    decision = resolve_access(store, document, principal, share_token, now)
    require_action(decision, action, document.id, delete_requires_owner)
    return document, decision
