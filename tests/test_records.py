import pytest

from car_rental.errors import DuplicateError, RentalNotFound, ValidationError
from car_rental.models import Car, Rental, Review, User, db
from car_rental.records import WELCOME_SUBJECT, add_car, register_user, submit_review
from car_rental.seed import SAMPLE_CARS, seed_sample_data

from .conftest import FakeMailer, days_from_now


def test_add_car(app):
    car = add_car('Honda CR-V', 'suv', 65)
    stored = db.session.get(Car, car.id)
    assert stored.rate_per_day == 65.0
    assert stored.available is True


@pytest.mark.parametrize('name, type, rate', [
    ('', 'suv', 65),
    ('Honda CR-V', None, 65),
    ('Honda CR-V', 'suv', None),
    ('Honda CR-V', 'suv', -10),
    ('Honda CR-V', 'suv', 'cheap'),
])
def test_add_car_rejects_bad_input(app, name, type, rate):
    with pytest.raises(ValidationError):
        add_car(name, type, rate)
    assert Car.query.count() == 0


def test_register_user_sends_welcome_email(app, mailer):
    user = register_user('Jane', '555-1234', 'D1234', 'jane@example.com', mailer=mailer)

    assert db.session.get(User, user.id).email == 'jane@example.com'
    assert mailer.sent[0][:2] == ('jane@example.com', WELCOME_SUBJECT)


@pytest.mark.parametrize('field', ['phone', 'license_no', 'email'])
def test_register_duplicate_is_rejected(app, field):
    first = {'name': 'Jane', 'phone': '555-1234', 'license_no': 'D1234',
             'email': 'jane@example.com'}
    register_user(**first)
    second = {'name': 'John', 'phone': '555-9999', 'license_no': 'D9999',
              'email': 'john@example.com'}
    second[field] = first[field]

    with pytest.raises(DuplicateError):
        register_user(**second)
    assert User.query.count() == 1


def test_register_missing_field(app):
    with pytest.raises(ValidationError):
        register_user('Jane', '555-1234', '', 'jane@example.com')


def test_registration_survives_mail_failure(app):
    mailer = FakeMailer(failing={'jane@example.com'})
    user = register_user('Jane', '555-1234', 'D1234', 'jane@example.com', mailer=mailer)
    assert user.id is not None


@pytest.fixture
def rental(make_car, make_user, make_rental):
    return make_rental(make_car(), make_user(), days_from_now(-3), days_from_now(-1))


@pytest.mark.parametrize('rating', [1, 5])
def test_review_rating_bounds_accepted(rental, rating):
    review = submit_review(rental.id, rating, 'ok')
    assert db.session.get(Review, review.id).rating == rating


def test_review_rating_as_numeric_string(rental):
    review = submit_review(rental.id, '4')
    assert db.session.get(Review, review.id).rating == 4


@pytest.mark.parametrize('rating', [0, 6, None, '0', 'five', '4.5', 4.5, True])
def test_review_rating_out_of_range_rejected(rental, rating):
    with pytest.raises(ValidationError):
        submit_review(rental.id, rating)
    assert Review.query.count() == 0


def test_review_unknown_rental(app):
    with pytest.raises(RentalNotFound):
        submit_review(77, 4)


def test_second_review_for_rental_rejected(rental):
    submit_review(rental.id, 4, 'fine')
    with pytest.raises(ValidationError):
        submit_review(rental.id, 2, 'changed my mind')
    assert Review.query.count() == 1


def test_deleting_car_cascades(rental):
    submit_review(rental.id, 5)
    db.session.delete(db.session.get(Car, rental.car_id))
    db.session.commit()

    assert Rental.query.count() == 0
    assert Review.query.count() == 0


def test_seed_replaces_data(rental):
    assert seed_sample_data() == len(SAMPLE_CARS)
    assert Rental.query.count() == 0
    assert User.query.count() == 0
    assert sorted(c.name for c in Car.query.all()) == sorted(c['name'] for c in SAMPLE_CARS)
