from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, String

from recipe_ai.app.db.base import Base


class User(Base):
    __tablename__ = "users"

    user_id = Column(String, primary_key=True, index=True)
    email = Column(String)
    is_server_admin = Column(Boolean, nullable=False, default=False)


class ServerConfig(Base):
    __tablename__ = "server_config"

    key = Column(String, primary_key=True)
    value = Column(JSON, nullable=False)
    is_sensitive = Column(Boolean, nullable=False, default=False)
    updated_by = Column(String)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
