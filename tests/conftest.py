from datetime import datetime, timedelta

import pytest

from car_rental.app import create_app
from car_rental.errors import DeliveryError
from car_rental.models import Car, Rental, User, db


class FakeMailer:
    """Records messages instead of sending them.  Addresses in ``failing`` raise."""

    configured = True

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.sent = []

    def send(self, to, subject, text, name=None):
        if to in self.failing:
            raise DeliveryError(f"bounce for {to}")
        self.sent.append((to, subject, text))
        return True


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def app(mailer):
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
    }, mailer=mailer)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_car(app):
    def _make(name='Toyota Camry', type='economy', rate_per_day=50.0, available=True):
        car = Car(name=name, type=type, rate_per_day=rate_per_day, available=available)
        db.session.add(car)
        db.session.commit()
        return car
    return _make


@pytest.fixture
def make_user(app):
    counter = {'n': 0}

    def _make(name='Jane Doe', email=None):
        counter['n'] += 1
        n = counter['n']
        user = User(name=name, phone=f'555-000{n}', license_no=f'LIC-{n}',
                    email=email or f'user{n}@example.com')
        db.session.add(user)
        db.session.commit()
        return user
    return _make


@pytest.fixture
def make_rental(app):
    """Insert a rental row directly, bypassing the booking checks."""
    def _make(car, user, start, end, total_amount=100.0, active=True):
        rental = Rental(car_id=car.id, user_id=user.id, start_date=start, end_date=end,
                        total_amount=total_amount, active=active)
        db.session.add(rental)
        db.session.commit()
        return rental
    return _make


def days_from_now(days):
    return datetime.now() + timedelta(days=days)
