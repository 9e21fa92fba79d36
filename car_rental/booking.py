"""
Booking engine.

A booking is validated in a fixed order (date range, car, availability,
user), priced, and then recorded in a single transaction that both flips
the car's availability flag and inserts the rental row.  The flag is
flipped with a conditional update so two requests racing for the same car
cannot both succeed.
"""

import logging
import math
from collections import namedtuple
from datetime import date, datetime

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from .errors import CarNotFound, CarUnavailable, PersistenceError, UserNotFound, ValidationError
from .models import Car, Rental, User, db


logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60

Booking = namedtuple('Booking', ['rental_id', 'total_amount'])


def parse_datetime(value) -> datetime:
    """
    Accept a ``datetime``, a ``date`` (midnight) or an ISO-8601 string.
    Timezone-aware values are converted to naive local time, which is how
    rental dates are stored.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            raise ValidationError('Invalid date range')
    else:
        raise ValidationError('Invalid date range')
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def as_id(value, field: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f'Invalid {field}')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'Invalid {field}')


def calculate_rental_fee(start: datetime, end: datetime, rate_per_day: float) -> float:
    """Bill every started day in full: ceil(seconds / 86400) * rate."""
    days = math.ceil((end - start).total_seconds() / SECONDS_PER_DAY)
    return round(days * rate_per_day, 2)


def create_rental(car_id, user_id, start_date, end_date) -> Booking:
    start = parse_datetime(start_date)
    end = parse_datetime(end_date)
    if end <= start:
        raise ValidationError('Invalid date range')
    car_id = as_id(car_id, 'car_id')
    user_id = as_id(user_id, 'user_id')

    car = db.session.get(Car, car_id)
    if car is None:
        raise CarNotFound()
    if not car.available:
        raise CarUnavailable()
    if db.session.get(User, user_id) is None:
        raise UserNotFound()

    total_amount = calculate_rental_fee(start, end, car.rate_per_day)

    try:
        reserved = db.session.execute(
            update(Car)
            .where(Car.id == car.id, Car.available.is_(True))
            .values(available=False)
        )
        if reserved.rowcount != 1:
            # Another booking took the car after we read it
            db.session.rollback()
            raise CarUnavailable()
        rental = Rental(
            car_id=car.id,
            user_id=user_id,
            start_date=start,
            end_date=end,
            total_amount=total_amount,
            active=True,
        )
        db.session.add(rental)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error("Booking car %s for user %s failed: %s", car_id, user_id, e)
        raise PersistenceError(str(e))

    logger.info("Rental %s created for car %s (%s to %s), total %.2f",
                rental.id, car.id, start, end, total_amount)
    return Booking(rental.id, total_amount)
