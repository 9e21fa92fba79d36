"""Next-available lookup for a car."""

import logging
from collections import namedtuple
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from .booking import as_id
from .errors import CarNotFound, PersistenceError
from .models import Car, Rental, db


logger = logging.getLogger(__name__)

Availability = namedtuple('Availability', ['available', 'next_available_date'])


def next_availability(car_id, now: datetime = None) -> Availability:
    """
    Report whether a car is free and, if not, when it will be.

    A car flagged unavailable whose active rentals have all ended is
    flagged available again here; later calls then return early.
    """
    car = db.session.get(Car, as_id(car_id, 'car id'))
    if car is None:
        raise CarNotFound()
    if car.available:
        return Availability(True, None)

    now = now or datetime.now()
    try:
        rental = (Rental.query
                  .filter(Rental.car_id == car.id,
                          Rental.active.is_(True),
                          Rental.end_date > now)
                  .order_by(Rental.end_date.desc())
                  .first())
        if rental is None:
            car.available = True
            db.session.commit()
            logger.info("Car %s had no running rental, marked available", car.id)
            return Availability(True, None)
    except SQLAlchemyError as e:
        db.session.rollback()
        raise PersistenceError(str(e))
    return Availability(False, rental.end_date)
