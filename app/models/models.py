import datetime as dt

from sqlalchemy import Boolean, Date, DateTime, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.db import Base

JOB_STATUSES = {"scheduled", "completed", "cancelled"}
PAYMENT_STATUSES = {"pending", "paid", "overdue"}
RATE_TYPES = {"flat", "hourly"}
RECURRENCE_RULES = {"weekly", "biweekly", "monthly"}
PAYMENT_METHODS = {"venmo", "zelle", "card", "check", "cash"}
SERVICE_TYPES = {"cleaning", "landscaping", "pool", "handyman", "pressure", "pest", "moving", "other"}
CLIENT_FREQUENCIES = {"weekly", "biweekly", "monthly", "one_time"}
PAY_TYPES = {"hourly", "per_job"}


class Business(Base):
    __tablename__ = "businesses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), unique=True, index=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=dt.datetime.utcnow)

    memberships = relationship("Membership", back_populates="business", cascade="all, delete-orphan")
    clients = relationship("Client", back_populates="business", cascade="all, delete-orphan")
    employees = relationship("Employee", back_populates="business", cascade="all, delete-orphan")


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255))
    full_name: Mapped[str] = mapped_column(String(120))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=dt.datetime.utcnow)

    memberships = relationship("Membership", back_populates="user", cascade="all, delete-orphan")


class Membership(Base):
    __tablename__ = "memberships"
    __table_args__ = (UniqueConstraint("business_id", "user_id", name="uq_business_user"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("businesses.id"), index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    employee_id: Mapped[int | None] = mapped_column(ForeignKey("employees.id"), nullable=True)
    role: Mapped[str] = mapped_column(String(20), default="employee")
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=dt.datetime.utcnow)

    business = relationship("Business", back_populates="memberships")
    user = relationship("User", back_populates="memberships")


class Client(Base):
    __tablename__ = "clients"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("businesses.id"), index=True)
    name: Mapped[str] = mapped_column(String(120), index=True)
    contact_name: Mapped[str] = mapped_column(String(120), default="")
    phone: Mapped[str] = mapped_column(String(40), default="")
    email: Mapped[str] = mapped_column(String(255), default="")
    address: Mapped[str] = mapped_column(String(255), default="")
    frequency: Mapped[str] = mapped_column(String(20), default="one_time")
    payment_method: Mapped[str] = mapped_column(String(20), default="cash")
    service_type: Mapped[str] = mapped_column(String(24), default="other")
    service_rate_cents: Mapped[int] = mapped_column(Integer, default=0)
    service_rate_type: Mapped[str] = mapped_column(String(12), default="flat")
    notes: Mapped[str] = mapped_column(String, default="")
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=dt.datetime.utcnow)

    business = relationship("Business", back_populates="clients")
    jobs = relationship("Job", back_populates="client")


class Employee(Base):
    __tablename__ = "employees"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("businesses.id"), index=True)
    name: Mapped[str] = mapped_column(String(120), index=True)
    phone: Mapped[str] = mapped_column(String(40), default="")
    role_title: Mapped[str] = mapped_column(String(80), default="")
    rate_cents: Mapped[int] = mapped_column(Integer, default=0)
    pay_type: Mapped[str] = mapped_column(String(12), default="hourly")
    color: Mapped[str] = mapped_column(String(16), default="#3B82F6")
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=dt.datetime.utcnow)

    business = relationship("Business", back_populates="employees")


class Job(Base):
    __tablename__ = "jobs"
    __table_args__ = (UniqueConstraint("series_id", "date", name="uq_job_series_date"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("businesses.id"), index=True)
    client_id: Mapped[int | None] = mapped_column(ForeignKey("clients.id"), nullable=True, index=True)
    date: Mapped[dt.date] = mapped_column(Date, index=True)
    time: Mapped[str] = mapped_column(String(16), default="")
    duration: Mapped[float] = mapped_column(Float, default=1.0)
    status: Mapped[str] = mapped_column(String(16), default="scheduled", index=True)
    amount_cents: Mapped[int] = mapped_column(Integer, default=0)
    rate_type: Mapped[str] = mapped_column(String(12), default="flat")
    payment_status: Mapped[str] = mapped_column(String(16), default="pending", index=True)
    payment_via: Mapped[str | None] = mapped_column(String(20), nullable=True)
    invoice_sent_at: Mapped[dt.datetime | None] = mapped_column(DateTime, nullable=True)
    is_recurring: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    recurrence_rule: Mapped[str | None] = mapped_column(String(16), nullable=True)
    recurrence_end_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    parent_job_id: Mapped[int | None] = mapped_column(ForeignKey("jobs.id", ondelete="SET NULL"), nullable=True, index=True)
    series_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=dt.datetime.utcnow)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime, default=dt.datetime.utcnow, onupdate=dt.datetime.utcnow)

    client = relationship("Client", back_populates="jobs")
    assignments = relationship("JobEmployee", back_populates="job", cascade="all, delete-orphan")

    @property
    def employee_ids(self) -> list[int]:
        return [a.employee_id for a in self.assignments]


class JobEmployee(Base):
    __tablename__ = "job_employees"
    __table_args__ = (UniqueConstraint("job_id", "employee_id", name="uq_job_employee"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    job_id: Mapped[int] = mapped_column(ForeignKey("jobs.id", ondelete="CASCADE"), index=True)
    employee_id: Mapped[int] = mapped_column(ForeignKey("employees.id"), index=True)

    job = relationship("Job", back_populates="assignments")


class Expense(Base):
    __tablename__ = "expenses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("businesses.id"), index=True)
    date: Mapped[dt.date] = mapped_column(Date, index=True)
    description: Mapped[str] = mapped_column(String(240))
    amount_cents: Mapped[int] = mapped_column(Integer, default=0)
    category: Mapped[str] = mapped_column(String(60), default="general", index=True)
    vendor: Mapped[str] = mapped_column(String(120), default="")
    job_id: Mapped[int | None] = mapped_column(ForeignKey("jobs.id", ondelete="SET NULL"), nullable=True, index=True)
    notes: Mapped[str] = mapped_column(String, default="")
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=dt.datetime.utcnow)
