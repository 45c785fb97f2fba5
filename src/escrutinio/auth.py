"""Colaborador de autorización: roles y acciones protegidas.

The engine entities perform no role checks; ``ElectoralService`` asks an
``Authorizer`` before registering votes or sealing records and elections.
Authentication and sessions live outside this package.

English:
    Authorization collaborator: roles and protected actions.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, Protocol, Union

from escrutinio.core.errors import PermissionDeniedError

logger = logging.getLogger(__name__)


class Role(str, Enum):
    ADMIN = "admin"
    OPERATOR = "operator"
    OBSERVER = "observer"


class Action(str, Enum):
    REGISTER_VOTES = "register_votes"
    FINALIZE_RECORD = "finalize_record"
    FINALIZE_ELECTION = "finalize_election"
    VIEW_REPORTS = "view_reports"


ROLE_HIERARCHY: Dict[Role, int] = {
    Role.OBSERVER: 1,
    Role.OPERATOR: 2,
    Role.ADMIN: 3,
}

DEFAULT_REQUIREMENTS: Dict[Action, Role] = {
    Action.VIEW_REPORTS: Role.OBSERVER,
    Action.REGISTER_VOTES: Role.OPERATOR,
    Action.FINALIZE_RECORD: Role.ADMIN,
    Action.FINALIZE_ELECTION: Role.ADMIN,
}


class Authorizer(Protocol):
    def check(self, role: Union[Role, str], action: Action) -> None:
        """Raise ``PermissionDeniedError`` when ``role`` may not perform ``action``."""


class RoleAuthorizer:
    """Autoriza por jerarquía de roles (admin > operator > observer).

    English:
        Authorizes by role hierarchy. ``requirements`` overrides the minimum
        role per action.
    """

    def __init__(self, requirements: Dict[Action, Role] | None = None) -> None:
        self.requirements = dict(DEFAULT_REQUIREMENTS)
        if requirements:
            self.requirements.update(requirements)

    def allows(self, role: Union[Role, str], action: Action) -> bool:
        required = self.requirements[action]
        return ROLE_HIERARCHY[Role(role)] >= ROLE_HIERARCHY[required]

    def check(self, role: Union[Role, str], action: Action) -> None:
        if not self.allows(role, action):
            logger.warning("authorization_denied role=%s action=%s", Role(role).value, action.value)
            raise PermissionDeniedError(Role(role).value, action.value)
