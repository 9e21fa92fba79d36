"""Car rental API.

This Flask application exposes a JSON API over a small relational store of
cars, users, rentals and reviews.  It is consumed by a single-page browser
client and by a daily cron job that mails expiration reminders.

To run the app locally:

    # Install the package
    pip install -e .

    # Initialise the database and load the sample fleet
    python -m car_rental.app --init-db --seed

    # Start the development server
    python -m car_rental.app

    # Mail tomorrow's expiration reminders (run this from cron once a day)
    python -m car_rental.app --send-reminders 1

Configuration is read from environment variables, see ``config.Config``.
"""

import argparse
import logging
from datetime import time

from flask import Blueprint, Flask, current_app, jsonify, request
from flask_cors import CORS
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from . import availability, booking, notifications, queries, records
from .config import Config
from .email_service import Mailer
from .errors import PersistenceError
from .models import db
from .seed import seed_sample_data


logger = logging.getLogger(__name__)

api = Blueprint('api', __name__)


def create_app(overrides=None, mailer=None) -> Flask:
    """
    Build the application.  ``overrides`` replaces any configuration key and
    ``mailer`` replaces the Brevo mailer built from the configuration.
    """
    app = Flask(__name__)
    app.config.update(Config.as_dict())
    if overrides:
        app.config.update(overrides)

    logging.basicConfig(
        level=getattr(logging, app.config['LOG_LEVEL'], logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    CORS(app, origins=app.config['CORS_ORIGINS'])
    db.init_app(app)
    app.extensions['mailer'] = mailer or Mailer.from_config(app.config)
    if not app.extensions['mailer'].configured:
        logger.warning("Email credentials are missing, notifications will not be sent")

    app.register_blueprint(api)
    app.register_error_handler(HTTPException, handle_http_error)
    app.register_error_handler(SQLAlchemyError, handle_database_error)
    return app


def handle_http_error(e: HTTPException):
    return jsonify({'error': e.description}), e.code


def handle_database_error(e: SQLAlchemyError):
    db.session.rollback()
    logger.error("Database error: %s", e)
    return jsonify({'error': str(e)}), 500


def _mailer() -> Mailer:
    return current_app.extensions['mailer']


def _payload() -> dict:
    return request.get_json(silent=True) or {}


def _date_text(value) -> str:
    # date-only bookings are stored at midnight
    if value.time() == time.min:
        return value.date().isoformat()
    return value.isoformat()


@api.route('/')
def index():
    return jsonify({'message': 'Car Rental API is running'})


# ---------------------------------------------------------------------------
# Cars

@api.route('/api/cars')
def list_cars():
    return jsonify(queries.list_cars())


@api.route('/api/cars/available')
def list_available_cars():
    return jsonify(queries.list_available_cars())


@api.route('/api/cars', methods=['POST'])
def add_car():
    data = _payload()
    car = records.add_car(data.get('name'), data.get('type'), data.get('rate_per_day'))
    return jsonify({'id': car.id})


@api.route('/api/cars/<car_id>/next-available')
def next_available(car_id):
    """
    Report whether a car can be booked now.  Unknown cars are a 404; a car
    that is out on rent is a 200 carrying the date it comes back.
    """
    result = availability.next_availability(car_id)
    if result.available:
        return jsonify({'available': True, 'message': 'Car is currently available'})
    next_date = _date_text(result.next_available_date)
    return jsonify({
        'available': False,
        'next_available_date': next_date,
        'message': f'Car will be available after {next_date}',
    })


# ---------------------------------------------------------------------------
# Users

@api.route('/api/users', methods=['POST'])
def register_user():
    data = _payload()
    user = records.register_user(data.get('name'), data.get('phone'),
                                 data.get('license_no'), data.get('email'),
                                 mailer=_mailer())
    return jsonify({
        'id': user.id,
        'message': 'User registered successfully. A confirmation email has been sent.',
    })


@api.route('/api/users/<phone>')
def get_user(phone):
    return jsonify(queries.get_user_by_phone(phone))


# ---------------------------------------------------------------------------
# Rentals

@api.route('/api/rentals', methods=['POST'])
def create_rental():
    data = _payload()
    result = booking.create_rental(data.get('car_id'), data.get('user_id'),
                                   data.get('start_date'), data.get('end_date'))
    return jsonify({'id': result.rental_id, 'total_amount': result.total_amount})


@api.route('/api/rentals/active')
def list_active_rentals():
    return jsonify(queries.list_active_rentals())


@api.route('/api/rentals/history')
def list_rental_history():
    return jsonify(queries.list_rental_history())


@api.route('/api/rentals/user/<user_id>')
def list_user_rentals(user_id):
    return jsonify(queries.list_user_rentals(user_id))


# ---------------------------------------------------------------------------
# Reviews

@api.route('/api/reviews', methods=['POST'])
def submit_review():
    data = _payload()
    review = records.submit_review(data.get('rental_id'), data.get('rating'), data.get('comment'))
    return jsonify({'id': review.id})


@api.route('/api/reviews')
def list_reviews():
    return jsonify(queries.list_reviews())


@api.route('/api/reviews/car/<car_id>')
def list_car_reviews(car_id):
    return jsonify(queries.list_car_reviews(car_id))


# ---------------------------------------------------------------------------
# Notifications

@api.route('/api/send-expiration-emails', methods=['POST'])
def send_expiration_emails():
    """
    Mail reminders for rentals ending today, tomorrow and the day after.
    The reported count is the number of rentals matched, whether or not
    their email went out; ``delivered`` carries the confirmed sends.
    """
    try:
        runs = [notifications.send_expiration_reminders(days, _mailer()) for days in (0, 1, 2)]
    except PersistenceError as e:
        logger.error("Error sending expiration emails: %s", e.description)
        raise PersistenceError('Failed to send expiration emails')
    matched = sum(run.matched for run in runs)
    return jsonify({
        'message': f'Sent {matched} expiration reminder emails',
        'delivered': sum(run.delivered for run in runs),
    })


def init_db():
    db.create_all()
    print("Database initialised.")


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description="Car rental API")
    parser.add_argument('--init-db', action='store_true', help='Initialise the database')
    parser.add_argument('--seed', action='store_true', help='Replace all data with the sample fleet')
    parser.add_argument('--send-reminders', type=int, metavar='DAYS',
                        help='Mail reminders for rentals ending DAYS days from today and exit')
    parser.add_argument('--port', type=int, default=5000)
    args = parser.parse_args()
    app = create_app()
    if args.init_db or args.seed or args.send_reminders is not None:
        with app.app_context():
            if args.init_db:
                init_db()
            if args.seed:
                print(f"Inserted {seed_sample_data()} sample cars.")
            if args.send_reminders is not None:
                run = notifications.send_expiration_reminders(args.send_reminders, app.extensions['mailer'])
                print(f"Sent {run.matched} expiration reminder emails")
    else:
        app.run(debug=False, host='0.0.0.0', port=args.port)
