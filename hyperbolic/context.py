"""
hyperbolic.context — Per-Request Caller Identity
=================================================

Built by :func:`hyperbolic.api.deps.get_request_context` from the bearer
token and handed to services as an explicit argument.  Services never
read the caller from globals.
"""

from __future__ import annotations

from dataclasses import dataclass

from hyperbolic.errors import AuthenticationError, PermissionDeniedError


@dataclass(frozen=True, slots=True)
class RequestContext:
    identity: str | None = None
    is_staff: bool = False

    @property
    def authenticated(self) -> bool:
        return bool(self.identity)

    def require_identity(self) -> str:
        if not self.identity:
            raise AuthenticationError()
        return self.identity

    def require_staff(self) -> str:
        identity = self.require_identity()
        if not self.is_staff:
            raise PermissionDeniedError("Staff access required")
        return identity

