"""
User and employment models
"""
from sqlalchemy import Column, Integer, String, DateTime, Date, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from leave_api.db.base import Base


class Role(str, enum.Enum):
    EMPLOYEE = "employee"
    MANAGER = "manager"
    ADMIN = "admin"


class EmploymentType(str, enum.Enum):
    PROBATION = "probation"
    CONFIRMED = "confirmed"
    CONTRACT = "contract"
    INTERNSHIP = "internship"


# Employment types that earn casual leave month by month
ACCRUING_EMPLOYMENT_TYPES = (EmploymentType.PROBATION, EmploymentType.INTERNSHIP)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(String(50), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=Role.EMPLOYEE.value)
    manager_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)

    # Relationships
    manager = relationship("User", remote_side=[id], backref="direct_reports")
    details = relationship("EmployeeDetails", back_populates="user", uselist=False)


class EmployeeDetails(Base):
    __tablename__ = "employee_details"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    employment_type = Column(String(20), nullable=False, default=EmploymentType.PROBATION.value)
    confirmation_date = Column(Date, nullable=True)
    probation_start_date = Column(Date, nullable=True)
    probation_end_date = Column(Date, nullable=True)
    last_accrual_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)

    user = relationship("User", back_populates="details")
