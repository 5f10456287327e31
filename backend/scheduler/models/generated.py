from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, Text, text
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class Employees(Base):
    """Read-only mirror of the personnel directory."""
    __tablename__ = 'employees'

    name = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)
    phone = Column(Text)
    email = Column(Text)
    is_active = Column(Boolean, nullable=False, server_default=text('true'))

    availability = relationship('EmployeeAvailability', back_populates='employee')
    blocked_times = relationship('BlockedTimes', back_populates='employee')
    appointments = relationship('Appointments', back_populates='assigned_employee')


class EmployeeAvailability(Base):
    __tablename__ = 'employee_availability'
    __table_args__ = (
        Index('ix_employee_availability_day', 'day_of_week', 'employee_id'),
    )

    employee_id = Column(ForeignKey('employees.id', ondelete='CASCADE'), nullable=False)
    day_of_week = Column(Integer, nullable=False)  # 0 = Sunday ... 6 = Saturday
    start_time = Column(Text, nullable=False)  # "HH:MM"
    end_time = Column(Text, nullable=False)  # "HH:MM"
    is_available = Column(Boolean, nullable=False, server_default=text('true'))
    id = Column(Integer, primary_key=True)

    employee = relationship('Employees', back_populates='availability')


class BlockedTimes(Base):
    __tablename__ = 'blocked_times'
    __table_args__ = (
        Index('ix_blocked_times_employee_range', 'employee_id', 'start_datetime', 'end_datetime'),
    )

    employee_id = Column(ForeignKey('employees.id', ondelete='CASCADE'), nullable=False)
    start_datetime = Column(DateTime, nullable=False)
    end_datetime = Column(DateTime, nullable=False)
    reason = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)
    notes = Column(Text)
    created_by = Column(Integer)
    created_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))

    employee = relationship('Employees', back_populates='blocked_times')


class Appointments(Base):
    __tablename__ = 'appointments'
    __table_args__ = (
        Index('ix_appointments_employee_range', 'assigned_employee_id', 'appointment_date', 'appointment_end'),
    )

    client_name = Column(Text, nullable=False)
    client_email = Column(Text, nullable=False)
    client_phone = Column(Text, nullable=False)
    client_language = Column(Text, nullable=False, server_default=text("'en'"))
    appointment_type = Column(Text, nullable=False)
    appointment_date = Column(DateTime, nullable=False)
    appointment_end = Column(DateTime, nullable=False)  # appointment_date + duration
    duration = Column(Integer, nullable=False, server_default=text('60'))
    status = Column(Text, nullable=False, server_default=text("'pending'"))
    cancellation_token = Column(Text, nullable=False, unique=True)
    id = Column(Integer, primary_key=True)
    location_address = Column(Text)
    notes = Column(Text)
    assigned_employee_id = Column(ForeignKey('employees.id', ondelete='SET NULL'))
    cancel_reason = Column(Text)
    reschedule_message = Column(Text)
    created_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'))

    assigned_employee = relationship('Employees', back_populates='appointments')
