"""
Expiration reminders.

``find_expiring_rentals`` selects the active rentals ending on one exact
calendar day; ``send_expiration_reminders`` mails each renter independently.
The cron job calls it with ``days_ahead=1`` once a day and the on-demand
endpoint calls it for today, tomorrow and the day after.
"""

import logging
from collections import namedtuple
from datetime import date, datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError

from .errors import DeliveryError, PersistenceError
from .models import Car, Rental, User, db


logger = logging.getLogger(__name__)

REMINDER_SUBJECT = 'Your car rental is expiring soon'

ExpiringRental = namedtuple('ExpiringRental', ['email', 'user_name', 'car_name', 'end_date'])

ReminderRun = namedtuple('ReminderRun', ['matched', 'delivered'])


def find_expiring_rentals(days_ahead: int, today: date = None) -> list:
    today = today or date.today()
    target = today + timedelta(days=days_ahead)
    day_start = datetime(target.year, target.month, target.day)
    day_end = day_start + timedelta(days=1)
    try:
        rows = (db.session.query(User.email, User.name, Car.name, Rental.end_date)
                .select_from(Rental)
                .join(User, Rental.user_id == User.id)
                .join(Car, Rental.car_id == Car.id)
                .filter(Rental.active.is_(True),
                        Rental.end_date >= day_start,
                        Rental.end_date < day_end)
                .order_by(Rental.id)
                .all())
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error("Error checking expiring rentals: %s", e)
        raise PersistenceError(str(e))
    return [ExpiringRental(*row) for row in rows]


def reminder_text(rental: ExpiringRental) -> str:
    return (f"Dear {rental.user_name},\n\n"
            f"Your rental for {rental.car_name} is expiring on {rental.end_date:%Y-%m-%d}. "
            "Please ensure to return the vehicle on time.\n\n"
            "Thank you for using our service!")


def send_expiration_reminders(days_ahead: int, mailer, today: date = None) -> ReminderRun:
    """
    Mail every renter whose rental ends ``days_ahead`` days from today.
    A failed delivery is logged and the remaining ones still go out.
    """
    rentals = find_expiring_rentals(days_ahead, today=today)
    delivered = 0
    for rental in rentals:
        try:
            if mailer.send(rental.email, REMINDER_SUBJECT, reminder_text(rental), name=rental.user_name):
                delivered += 1
        except DeliveryError as e:
            logger.error("Reminder to %s failed: %s", rental.email, e)
    logger.info("Expiration check for +%d day(s): %d rental(s) matched, %d email(s) delivered",
                days_ahead, len(rentals), delivered)
    return ReminderRun(len(rentals), delivered)
