from sqlalchemy import Column, String, Enum
from designquote.models.base import BaseModel
from designquote.core.enums import UserRole


class User(BaseModel):
    __tablename__ = "users"
    username = Column(String(64), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    email = Column(String(120))
    first_name = Column(String(80))
    last_name = Column(String(80))
    role = Column(Enum(UserRole), nullable=False, default=UserRole.SALES)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def display_name(self) -> str:
        if self.first_name and self.last_name:
            return f"{self.first_name} {self.last_name}"
        return self.username
