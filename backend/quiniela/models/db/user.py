from heliclockter import datetime_utc

from quiniela.models.db.account import UserAccountType
from quiniela.models.db.shared import BaseModelORM
from quiniela.utils.id_types import UserId


class UserBase(BaseModelORM):
    email: str
    name: str
    created: datetime_utc
    account_type: UserAccountType = UserAccountType.REGULAR


class UserPublic(UserBase):
    id: UserId

    @property
    def is_admin(self) -> bool:
        return self.account_type == UserAccountType.ADMIN
