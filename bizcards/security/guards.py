"""Token extraction and composable authorization checks."""

import re
from abc import ABC, abstractmethod
from collections.abc import Mapping

from bizcards.security.tokens import TokenClaims, TokenProvider
from bizcards.services.errors import AuthenticationRequired, Forbidden, InvalidToken

DEFAULT_TOKEN_HEADER = "x-auth-token"

_BEARER = re.compile(r"^bearer$", re.IGNORECASE)


def extract_token(
    headers: Mapping[str, str], header_name: str = DEFAULT_TOKEN_HEADER
) -> str | None:
    """Find a session token in request headers.

    Looks at, in order: the dedicated token header, an ``Authorization: Bearer``
    header (scheme matched case-insensitively), and finally the raw
    ``Authorization`` value for legacy clients that send no scheme.
    """
    direct = (headers.get(header_name) or "").strip()
    if direct:
        return direct

    authorization = (headers.get("authorization") or "").strip()
    if not authorization:
        return None

    parts = authorization.split(" ")
    if len(parts) == 2 and _BEARER.match(parts[0]):
        return parts[1].strip() or None

    return authorization


def authenticate(
    headers: Mapping[str, str],
    provider: TokenProvider,
    header_name: str = DEFAULT_TOKEN_HEADER,
) -> TokenClaims:
    """Resolve the caller's claims or raise an authentication error."""
    token = extract_token(headers, header_name)
    if token is None:
        raise AuthenticationRequired()
    claims = provider.verify(token)
    if claims is None:
        raise InvalidToken()
    return claims


class Check(ABC):
    """A predicate over token claims.

    Checks compose with ``|`` (either passes) and ``&`` (both pass).
    """

    denial = "Access denied"

    @abstractmethod
    def allows(self, claims: TokenClaims) -> bool:
        """Whether the claims satisfy the check."""

    def enforce(self, claims: TokenClaims, message: str | None = None) -> None:
        """Raise Forbidden unless the check passes."""
        if not self.allows(claims):
            raise Forbidden(message or self.denial)

    def __or__(self, other: "Check") -> "Check":
        return AnyOf(self, other)

    def __and__(self, other: "Check") -> "Check":
        return AllOf(self, other)


class IsAdmin(Check):
    denial = "Access denied: admin only"

    def allows(self, claims: TokenClaims) -> bool:
        return claims.is_admin


class IsBusiness(Check):
    denial = "Access denied: business accounts only"

    def allows(self, claims: TokenClaims) -> bool:
        return claims.is_business


class IsOwner(Check):
    denial = "Access denied: owner only"

    def __init__(self, owner_id: int):
        self.owner_id = owner_id

    def allows(self, claims: TokenClaims) -> bool:
        return claims.subject_id == self.owner_id


class AnyOf(Check):
    def __init__(self, *checks: Check, denial: str | None = None):
        self.checks = checks
        if denial:
            self.denial = denial

    def allows(self, claims: TokenClaims) -> bool:
        return any(check.allows(claims) for check in self.checks)


class AllOf(Check):
    def __init__(self, *checks: Check):
        self.checks = checks

    def allows(self, claims: TokenClaims) -> bool:
        return all(check.allows(claims) for check in self.checks)

    def enforce(self, claims: TokenClaims, message: str | None = None) -> None:
        # Report the first failing check
        for check in self.checks:
            check.enforce(claims, message)


def owner_or_admin(owner_id: int) -> Check:
    """Passes for the resource owner or any admin."""
    return AnyOf(
        IsOwner(owner_id),
        IsAdmin(),
        denial="Access denied: only the owner or an admin can perform this action",
    )
