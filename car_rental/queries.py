"""Read-only listings backing the GET endpoints."""

from datetime import datetime

from sqlalchemy.orm import joinedload, selectinload

from .booking import as_id
from .errors import CarNotFound, UserNotFound
from .models import Car, Rental, Review, User, db


def _rental_row(rental: Rental, with_user: bool = True) -> dict:
    row = rental.to_dict()
    row.update(car_name=rental.car.name, car_type=rental.car.type,
               rate_per_day=rental.car.rate_per_day)
    if with_user:
        row.update(user_name=rental.user.name, user_phone=rental.user.phone)
    return row


def list_cars() -> list:
    return [car.to_dict() for car in Car.query.order_by(Car.id).all()]


def list_available_cars() -> list:
    cars = Car.query.filter(Car.available.is_(True)).order_by(Car.id).all()
    return [car.to_dict() for car in cars]


def get_user_by_phone(phone: str) -> dict:
    user = User.query.filter_by(phone=phone).first()
    if user is None:
        raise UserNotFound()
    return user.to_dict()


def list_active_rentals(now: datetime = None) -> list:
    now = now or datetime.now()
    rentals = (Rental.query
               .options(joinedload(Rental.car), joinedload(Rental.user))
               .filter(Rental.active.is_(True), Rental.end_date > now)
               .order_by(Rental.start_date.desc(), Rental.id.desc())
               .all())
    return [_rental_row(r) for r in rentals]


def list_rental_history() -> list:
    rentals = (Rental.query
               .options(joinedload(Rental.car), joinedload(Rental.user),
                        selectinload(Rental.reviews))
               .order_by(Rental.start_date.desc(), Rental.id.desc())
               .all())
    rows = []
    for rental in rentals:
        row = _rental_row(rental)
        row['has_review'] = bool(rental.reviews)
        rows.append(row)
    return rows


def list_user_rentals(user_id) -> list:
    user = db.session.get(User, as_id(user_id, 'user id'))
    if user is None:
        raise UserNotFound()
    rentals = (Rental.query
               .options(joinedload(Rental.car))
               .filter(Rental.user_id == user.id)
               .order_by(Rental.start_date.desc(), Rental.id.desc())
               .all())
    return [_rental_row(r, with_user=False) for r in rentals]


def list_reviews() -> list:
    reviews = (Review.query
               .options(joinedload(Review.rental).joinedload(Rental.car),
                        joinedload(Review.rental).joinedload(Rental.user))
               .order_by(Review.created_at.desc(), Review.id.desc())
               .all())
    rows = []
    for review in reviews:
        row = review.to_dict()
        row.update(car_name=review.rental.car.name, car_type=review.rental.car.type,
                   user_name=review.rental.user.name)
        rows.append(row)
    return rows


def list_car_reviews(car_id) -> list:
    car = db.session.get(Car, as_id(car_id, 'car id'))
    if car is None:
        raise CarNotFound()
    reviews = (Review.query
               .join(Review.rental)
               .options(joinedload(Review.rental).joinedload(Rental.user))
               .filter(Rental.car_id == car.id)
               .order_by(Review.created_at.desc(), Review.id.desc())
               .all())
    rows = []
    for review in reviews:
        row = review.to_dict()
        row['user_name'] = review.rental.user.name
        rows.append(row)
    return rows
