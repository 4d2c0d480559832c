from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, Text, UniqueConstraint, text
from sqlalchemy.orm import declarative_base

Base = declarative_base()
metadata = Base.metadata

WEEKDAY_NAMES = "'monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday'"


class CalendarUser(Base):
    __tablename__ = 'calendar_user'

    id = Column(Integer, primary_key=True)
    name = Column(Text, nullable=False)
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))


class CalendarUserAvailability(Base):
    __tablename__ = 'calendar_user_availability'
    __table_args__ = (
        CheckConstraint(f"day IN ({WEEKDAY_NAMES})"),
        CheckConstraint('start_time_hour >= 0 AND start_time_hour < 24'),
        CheckConstraint('start_time_minutes >= 0 AND start_time_minutes < 60'),
        CheckConstraint('end_time_hour >= 0 AND end_time_hour < 24'),
        CheckConstraint('end_time_minutes >= 0 AND end_time_minutes < 60'),
    )

    user_id = Column(ForeignKey('calendar_user.id'), primary_key=True)
    day = Column(Text, primary_key=True)
    start_time_hour = Column(Integer, nullable=False)
    start_time_minutes = Column(Integer, nullable=False)
    end_time_hour = Column(Integer, nullable=False)
    end_time_minutes = Column(Integer, nullable=False)
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))


class CalendarUserBookedSlot(Base):
    __tablename__ = 'calendar_user_booked_slots'
    __table_args__ = (
        CheckConstraint('user_id_1 < user_id_2'),
        CheckConstraint('start_time_hour >= 0 AND start_time_hour < 24'),
        CheckConstraint('start_time_minutes >= 0 AND start_time_minutes < 60'),
        CheckConstraint('end_time_hour >= 0 AND end_time_hour < 24'),
        CheckConstraint('end_time_minutes >= 0 AND end_time_minutes < 60'),
        CheckConstraint("slot_type IN ('hourly', 'half-hourly')"),
        UniqueConstraint('user_id_1', 'user_id_2', 'date', 'start_time_hour', 'start_time_minutes'),
    )

    id = Column(Integer, primary_key=True)
    user_id_1 = Column(ForeignKey('calendar_user.id'), nullable=False)
    user_id_2 = Column(ForeignKey('calendar_user.id'), nullable=False)
    date = Column(Text, nullable=False)
    start_time_hour = Column(Integer, nullable=False)
    start_time_minutes = Column(Integer, nullable=False)
    end_time_hour = Column(Integer, nullable=False)
    end_time_minutes = Column(Integer, nullable=False)
    slot_type = Column(Text, nullable=False)
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))
