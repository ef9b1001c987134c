"""Settings model"""

from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from ..database import Base

# Keys containing any of these always hold ciphertext
SECRET_KEY_MARKERS = ("token", "api_key")


def is_secret_key(key: str) -> bool:
    return any(marker in key for marker in SECRET_KEY_MARKERS)


class Setting(Base):
    """One configuration value; a missing row means the key was never saved"""

    __tablename__ = "settings"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(100), unique=True, nullable=False, index=True)
    value = Column(Text, nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    @property
    def is_secret(self) -> bool:
        return is_secret_key(self.key)

    def __repr__(self):
        # Never print secret values
        shown = "<encrypted>" if self.is_secret else self.value
        return f"<Setting {self.key}={shown}>"
