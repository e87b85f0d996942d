import uuid
from typing import FrozenSet, Iterable
from pydantic import BaseModel, ConfigDict


class Actor(BaseModel):
    """
    The authenticated principal an action is performed on behalf of.
    Built once per request from the user record; roles are a fixed capability set.
    """
    id: uuid.UUID
    roles: FrozenSet[str] = frozenset()

    model_config = ConfigDict(frozen=True)

    def has_any_role(self, roles: Iterable[str]) -> bool:
        return not self.roles.isdisjoint(roles)
