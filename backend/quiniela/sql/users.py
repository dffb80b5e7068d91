from quiniela.database import database
from quiniela.models.db.user import UserPublic
from quiniela.utils.id_types import UserId


async def get_user_by_id(user_id: UserId) -> UserPublic | None:
    query = """
        SELECT id, email, name, created, account_type
        FROM users
        WHERE id = :user_id
        """
    result = await database.fetch_one(query=query, values={"user_id": user_id})
    return UserPublic.model_validate(dict(result._mapping)) if result is not None else None
