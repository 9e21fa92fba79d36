"""Sample fleet used to populate a fresh database."""

from .models import Car, Rental, Review, User, db


SAMPLE_CARS = [
    {'name': 'Toyota Camry', 'type': 'economy', 'rate_per_day': 50.0},
    {'name': 'Honda CR-V', 'type': 'suv', 'rate_per_day': 65.0},
    {'name': 'BMW 3 Series', 'type': 'luxury', 'rate_per_day': 85.0},
    {'name': 'Ford Focus', 'type': 'economy', 'rate_per_day': 45.0},
    {'name': 'Mercedes E-Class', 'type': 'luxury', 'rate_per_day': 90.0},
]


def seed_sample_data() -> int:
    """Clear every table and insert the sample cars.  Returns the car count."""
    Review.query.delete()
    Rental.query.delete()
    User.query.delete()
    Car.query.delete()
    db.session.add_all(Car(available=True, **car) for car in SAMPLE_CARS)
    db.session.commit()
    return len(SAMPLE_CARS)
