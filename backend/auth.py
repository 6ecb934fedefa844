"""Request session: who is calling and which Gmail token to use.

The OAuth flow that issues the access token lives in the frontend. Each API
request carries the token as a bearer credential plus the user's id.
"""

from dataclasses import dataclass

from fastapi import Header

from errors import UnauthenticatedError


@dataclass(frozen=True)
class Session:
    user_id: str
    access_token: str


def get_session(
    authorization: str | None = Header(None),
    x_user_id: str | None = Header(None),
) -> Session:
    """FastAPI dependency resolving the caller's session from request headers."""
    user_id = (x_user_id or "").strip()
    if not authorization or not user_id:
        raise UnauthenticatedError()

    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise UnauthenticatedError("Malformed Authorization header")

    return Session(user_id=user_id, access_token=token)
