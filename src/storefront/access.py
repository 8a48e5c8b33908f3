"""The authenticated caller, as handed over by the upstream auth layer."""

from dataclasses import dataclass
from enum import Enum


class Role(Enum):
    CUSTOMER = "CUSTOMER"
    ADMIN = "ADMIN"


@dataclass(frozen=True)
class Requester:
    id: str
    role: str = Role.CUSTOMER.value

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value
