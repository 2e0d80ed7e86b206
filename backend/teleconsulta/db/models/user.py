# teleconsulta/db/models/user.py
from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from teleconsulta.config.constants import Role
from teleconsulta.core.clock import utcnow
from teleconsulta.db.base import Base


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    national_id = Column(String(20), unique=True, nullable=False, index=True)
    phone = Column(String(30))
    role = Column(Enum(Role, native_enum=False, length=20), nullable=False)
    active = Column(Boolean, nullable=False, default=True)

    # doctor-only fields, required at registration when role == DOCTOR
    license_id = Column(String(50))
    specialty = Column(String(100), index=True)

    plan_id = Column(Integer, ForeignKey("plans.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    # shared reference, clearing it never touches the plan row
    plan = relationship("PlanModel", lazy="selectin")

    def __repr__(self):
        return f"<UserModel(id={self.id}, email={self.email!r}, role={self.role})>"
