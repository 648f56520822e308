"""Authorization guard — who may do what to which row.

Learn: the rule is ownership. A Project belongs to its owner_id, a Task
to its creator_id. Update and delete always require ownership. View
requires ownership too, unless TASKBOARD_SHARED_READ is on, in which case
any authenticated identity may read any row.

authorize() raises AuthorizationDenied. Services convert that into
NotFound so a caller cannot discover the existence of other users' rows.
"""

from enum import Enum
from typing import Union

from taskboard.auth.identity import CurrentIdentity
from taskboard.config import settings
from taskboard.db.models import Project, Task
from taskboard.errors import AuthorizationDenied


class Action(str, Enum):
    VIEW = "view"
    UPDATE = "update"
    DELETE = "delete"


Resource = Union[Project, Task]


def owner_of(resource: Resource) -> int:
    """Return the user id that owns a resource."""
    if isinstance(resource, Project):
        return resource.owner_id
    if isinstance(resource, Task):
        return resource.creator_id
    raise TypeError(f"No ownership rule for {type(resource).__name__}")


def is_allowed(identity: CurrentIdentity, resource: Resource, action: Action) -> bool:
    if owner_of(resource) == identity.user_id:
        return True
    return action is Action.VIEW and settings.shared_read


def authorize(identity: CurrentIdentity, resource: Resource, action: Action) -> None:
    """Raise AuthorizationDenied unless the identity may perform the action."""
    if not is_allowed(identity, resource, action):
        raise AuthorizationDenied()
