"""
Database models for the rental store.

Cars, users, rentals and reviews live in four tables.  Every foreign key
cascades on delete of its parent, both in the schema and in the ORM
relationships, so removing a car (or a user) removes its rentals and their
reviews with it.
"""

import sqlite3
from datetime import datetime

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import CheckConstraint, event
from sqlalchemy.engine import Engine


db = SQLAlchemy()


@event.listens_for(Engine, 'connect')
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless this is set per connection
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.close()


def isoformat(value):
    return value.isoformat() if value is not None else None


class Car(db.Model):
    __tablename__ = 'cars'
    __table_args__ = (CheckConstraint('rate_per_day > 0', name='ck_cars_rate_positive'),)

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    type = db.Column(db.String(50), nullable=False)
    rate_per_day = db.Column(db.Float, nullable=False)
    available = db.Column(db.Boolean, nullable=False, default=True)

    rentals = db.relationship('Rental', back_populates='car',
                              cascade='all, delete-orphan', passive_deletes=True)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'type': self.type,
            'rate_per_day': self.rate_per_day,
            'available': bool(self.available),
        }

    def __repr__(self) -> str:
        return f"<Car {self.name} available={self.available}>"


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    phone = db.Column(db.String(50), unique=True, nullable=False)
    license_no = db.Column(db.String(50), unique=True, nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)

    rentals = db.relationship('Rental', back_populates='user',
                              cascade='all, delete-orphan', passive_deletes=True)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'phone': self.phone,
            'license_no': self.license_no,
            'email': self.email,
        }

    def __repr__(self) -> str:
        return f"<User {self.phone}>"


class Rental(db.Model):
    __tablename__ = 'rentals'
    __table_args__ = (CheckConstraint('end_date > start_date', name='ck_rentals_date_range'),)

    id = db.Column(db.Integer, primary_key=True)
    car_id = db.Column(db.Integer, db.ForeignKey('cars.id', ondelete='CASCADE'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    start_date = db.Column(db.DateTime, nullable=False)
    end_date = db.Column(db.DateTime, nullable=False)
    total_amount = db.Column(db.Float, nullable=False)
    # Never cleared: there is no rental-closure operation.
    active = db.Column(db.Boolean, nullable=False, default=True)

    car = db.relationship('Car', back_populates='rentals')
    user = db.relationship('User', back_populates='rentals')
    reviews = db.relationship('Review', back_populates='rental',
                              cascade='all, delete-orphan', passive_deletes=True)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'car_id': self.car_id,
            'user_id': self.user_id,
            'start_date': isoformat(self.start_date),
            'end_date': isoformat(self.end_date),
            'total_amount': self.total_amount,
            'active': bool(self.active),
        }

    def __repr__(self) -> str:
        return f"<Rental car={self.car_id} user={self.user_id} {self.start_date}-{self.end_date}>"


class Review(db.Model):
    __tablename__ = 'reviews'
    __table_args__ = (CheckConstraint('rating >= 1 AND rating <= 5', name='ck_reviews_rating_range'),)

    id = db.Column(db.Integer, primary_key=True)
    rental_id = db.Column(db.Integer, db.ForeignKey('rentals.id', ondelete='CASCADE'),
                          unique=True, nullable=False)
    rating = db.Column(db.Integer, nullable=False)
    comment = db.Column(db.Text)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)

    rental = db.relationship('Rental', back_populates='reviews')

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'rental_id': self.rental_id,
            'rating': self.rating,
            'comment': self.comment,
            'created_at': isoformat(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<Review rental={self.rental_id} rating={self.rating}>"
