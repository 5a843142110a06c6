from datetime import datetime

from mongoengine import StringField
from pydantic import BaseModel

from app.models.base import BaseDocument


# Fields that never leave the credential store
PRIVATE_FIELDS = ("password", "refresh_token")


class User(BaseDocument):
    """User document.

    Fields:
    - roll_no (str, unique): Institutional roll number, login identifier
    - name (str): Display name
    - email_id (str, unique): Lower-cased email, login identifier
    - password (str, hashed): Bcrypt-hashed password
    - refresh_token (str|None): The single refresh token currently honoured
    """
    roll_no = StringField(required=True, null=False)
    name = StringField(required=True, null=False)
    email_id = StringField(required=True, null=False)
    password = StringField(required=True, null=False)
    refresh_token = StringField(required=False, null=True)

    meta = {
        "collection": "users",
        "indexes": [
            {"fields": ["roll_no"], "unique": True},
            {"fields": ["email_id"], "unique": True},
        ],
    }


class PublicUser(BaseModel):
    """Public projection of a `User`: no password hash, no refresh token."""
    id: str
    roll_no: str
    name: str
    email_id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_document(cls, user: User) -> "PublicUser":
        return cls.model_validate(user.to_output(exclude=PRIVATE_FIELDS))
