from models.base_model import Base, BaseModel
from sqlalchemy import Boolean, Column, String
from sqlalchemy.orm import relationship

# provider -> column holding that provider's external id
PROVIDER_ID_FIELDS = {
    "google": "google_id",
    "github": "github_id",
}


class User(BaseModel, Base):
    __tablename__ = "users"
    email = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=True)
    avatar = Column(String(1024), nullable=True)
    # set at creation, kept when the account later links other providers
    provider = Column(String(16), nullable=False, default="local")
    password_hash = Column(String(255), nullable=True)
    google_id = Column(String(255), nullable=True, index=True)
    github_id = Column(String(255), nullable=True, index=True)
    is_verified = Column(Boolean, nullable=False, default=False)

    refresh_tokens = relationship(
        "RefreshToken",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def has_password(self) -> bool:
        return bool(self.password_hash)
