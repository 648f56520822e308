"""The authenticated caller, threaded explicitly through every call."""

from dataclasses import dataclass

from taskboard.db.models import AccessToken, User


@dataclass(frozen=True)
class CurrentIdentity:
    """Who is making the request, and with which token.

    Learn: resolved once per request by the get_current_user dependency,
    then handed to route handlers, services and policy.authorize(). The
    token is kept so logout can revoke exactly the one that was used.
    """

    user: User
    token: AccessToken

    @property
    def user_id(self) -> int:
        return self.user.id
