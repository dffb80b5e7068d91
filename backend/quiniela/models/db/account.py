from enum import auto

from quiniela.utils.types import EnumAutoStr


class UserAccountType(EnumAutoStr):
    REGULAR = auto()
    ADMIN = auto()
