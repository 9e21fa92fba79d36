"""Simple writes: adding cars, registering users and reviewing rentals."""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .booking import as_id
from .errors import (DeliveryError, DuplicateError, PersistenceError, RentalNotFound,
                     ValidationError)
from .models import Car, Rental, Review, User, db


logger = logging.getLogger(__name__)

WELCOME_SUBJECT = 'Welcome to Car Rental Service'


def _save(obj):
    db.session.add(obj)
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise PersistenceError(str(e))
    return obj


def add_car(name, type, rate_per_day) -> Car:
    if not name or not type or not rate_per_day:
        raise ValidationError('Missing required fields')
    try:
        rate = float(rate_per_day)
    except (TypeError, ValueError):
        raise ValidationError('rate_per_day must be a number')
    if isinstance(rate_per_day, bool) or rate <= 0:
        raise ValidationError('rate_per_day must be a positive number')
    car = _save(Car(name=name, type=type, rate_per_day=rate, available=True))
    logger.info("Car %s added: %s (%s) at %.2f/day", car.id, name, type, rate)
    return car


def register_user(name, phone, license_no, email, mailer=None) -> User:
    """
    Create a user and send a welcome email.  The email is best-effort: a
    failed or skipped delivery does not undo the registration.
    """
    if not name or not phone or not license_no or not email:
        raise ValidationError('Missing required fields')
    user = User(name=name, phone=phone, license_no=license_no, email=email)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise DuplicateError()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise PersistenceError(str(e))
    logger.info("User %s registered (%s)", user.id, phone)

    if mailer is not None:
        text = (f"Dear {name},\n\n"
                "Thank you for registering with our Car Rental Service. "
                "Your account has been successfully created.\n\n"
                "Best regards,\nCar Rental Service Team")
        try:
            mailer.send(email, WELCOME_SUBJECT, text, name=name)
        except DeliveryError as e:
            logger.error("Error sending confirmation email: %s", e)
    return user


def _parse_rating(value):
    """Whole numbers 1..5, also when sent as a numeric string; None otherwise."""
    if isinstance(value, (bool, float)):
        return None
    try:
        rating = int(value)
    except (TypeError, ValueError):
        return None
    return rating if 1 <= rating <= 5 else None


def submit_review(rental_id, rating, comment=None) -> Review:
    rating = _parse_rating(rating)
    if not rental_id or rating is None:
        raise ValidationError('Invalid review data')
    rental = db.session.get(Rental, as_id(rental_id, 'rental_id'))
    if rental is None:
        raise RentalNotFound()
    if rental.reviews:
        raise ValidationError('Rental already has a review')
    review = Review(rental_id=rental.id, rating=rating, comment=comment)
    db.session.add(review)
    try:
        db.session.commit()
    except IntegrityError:
        # lost a race with another review for the same rental
        db.session.rollback()
        raise ValidationError('Rental already has a review')
    except SQLAlchemyError as e:
        db.session.rollback()
        raise PersistenceError(str(e))
    return review
