from dataclasses import dataclass, field
from typing import FrozenSet

from fastapi import Depends, Header, HTTPException
from jose import JWTError, jwt

from clubero import config
from clubero.errors import Forbidden


@dataclass(frozen=True)
class Caller:
    email: str
    roles: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def is_admin(self):
        return "admin" in self.roles

    def can_view(self, email):
        return self.is_admin or (email or "").lower() == self.email.lower()


def verify_token(authorization: str = Header(...)) -> Caller:
    try:
        scheme, token = authorization.split()
        if scheme.lower() != "bearer":
            raise ValueError("unsupported scheme")
        claims = jwt.decode(token, config.jwt_secret(), algorithms=[config.jwt_algorithm()])
        email = claims["email"]
    except (ValueError, KeyError, JWTError):
        raise HTTPException(status_code=401, detail="Invalid or missing token")

    role = claims.get("role")
    roles = claims.get("roles") or ([role] if role else [])
    if isinstance(roles, str):
        roles = [roles]
    if not isinstance(roles, (list, tuple)) or not all(isinstance(r, str) for r in roles):
        raise HTTPException(status_code=401, detail="Invalid or missing token")
    return Caller(email=email, roles=frozenset(roles))


def require_role(*allowed):
    def dependency(caller: Caller = Depends(verify_token)) -> Caller:
        if caller.roles.isdisjoint(allowed):
            raise Forbidden()
        return caller
    return dependency


def ensure_can_view(caller: Caller, email):
    if not caller.can_view(email):
        raise Forbidden("You can only view your own records")
