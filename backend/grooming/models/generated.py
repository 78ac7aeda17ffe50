from sqlalchemy import Column, ForeignKey, Integer, Text, UniqueConstraint, text

from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class Shops(Base):
    __tablename__ = 'shops'

    name = Column(Text, nullable=False)
    slug = Column(Text, nullable=False, unique=True)
    phone = Column(Text, nullable=False)
    address = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)
    # Legacy single range "HH:MM-HH:MM", used when business_days is empty
    business_hours = Column(Text, nullable=False, server_default=text("'09:00-18:00'"))
    # JSON: {"mon": {"open": "09:00", "close": "18:00", "closed": false}, ...}
    business_days = Column(Text)
    deposit_amount = Column(Integer, nullable=False, server_default=text('10000'))
    deposit_required = Column(Integer, nullable=False, server_default=text('1'))
    shop_memo = Column(Text)
    is_approved = Column(Integer, nullable=False, server_default=text('0'))
    created_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))

    services = relationship('Services', back_populates='shop')
    customers = relationship('Customers', back_populates='shop')
    bookings = relationship('Bookings', back_populates='shop')
    calendar_overrides = relationship('CalendarOverrides', back_populates='shop')


class Services(Base):
    __tablename__ = 'services'

    shop_id = Column(ForeignKey('shops.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    duration = Column(Integer, nullable=False)  # minutes
    price = Column(Integer, nullable=False)
    id = Column(Integer, primary_key=True)
    is_active = Column(Integer, nullable=False, server_default=text('1'))

    shop = relationship('Shops', back_populates='services')
    bookings = relationship('Bookings', back_populates='service')


class Customers(Base):
    __tablename__ = 'customers'
    __table_args__ = (
        UniqueConstraint('shop_id', 'phone'),
    )

    shop_id = Column(ForeignKey('shops.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    phone = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)
    visit_count = Column(Integer, nullable=False, server_default=text('0'))
    last_visit = Column(Text)
    first_visit_date = Column(Text)
    pet_name = Column(Text)
    pet_breed = Column(Text)
    pet_age = Column(Text)
    pet_weight = Column(Text)
    memo = Column(Text)
    behavior_notes = Column(Text)
    special_notes = Column(Text)
    created_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))

    shop = relationship('Shops', back_populates='customers')
    bookings = relationship('Bookings', back_populates='customer')


class Bookings(Base):
    __tablename__ = 'bookings'

    shop_id = Column(ForeignKey('shops.id', ondelete='CASCADE'), nullable=False)
    service_id = Column(ForeignKey('services.id'), nullable=False)
    customer_id = Column(ForeignKey('customers.id', ondelete='SET NULL'))
    date = Column(Text, nullable=False)  # YYYY-MM-DD
    time = Column(Text, nullable=False)  # HH:MM
    customer_name = Column(Text, nullable=False)
    customer_phone = Column(Text, nullable=False)
    status = Column(Text, nullable=False, server_default=text("'pending'"))
    deposit_status = Column(Text, nullable=False, server_default=text("'none'"))
    deposit_deadline = Column(Text)
    id = Column(Integer, primary_key=True)
    pet_name = Column(Text)
    pet_breed = Column(Text)
    memo = Column(Text)
    is_first_visit = Column(Integer, nullable=False, server_default=text('0'))
    visit_counted = Column(Integer, nullable=False, server_default=text('0'))
    reminded_at = Column(Text)
    created_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))

    shop = relationship('Shops', back_populates='bookings')
    service = relationship('Services', back_populates='bookings')
    customer = relationship('Customers', back_populates='bookings')


class CalendarOverrides(Base):
    __tablename__ = 'calendar_overrides'
    __table_args__ = (
        UniqueConstraint('shop_id', 'date', 'time', 'override_kind'),
    )

    shop_id = Column(ForeignKey('shops.id', ondelete='CASCADE'), nullable=False)
    date = Column(Text, nullable=False)  # YYYY-MM-DD
    override_kind = Column(Text, nullable=False)  # day_off / block / force_open
    id = Column(Integer, primary_key=True)
    time = Column(Text)  # HH:MM, NULL for day_off
    reason = Column(Text)
    created_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))

    shop = relationship('Shops', back_populates='calendar_overrides')
