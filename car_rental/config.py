"""Application configuration read from the environment."""

import os


class Config:
    SECRET_KEY = os.getenv('SECRET_KEY', 'change-me')
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///rental.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*')

    # Mail delivery is skipped when either of these is missing.
    BREVO_API_KEY = os.getenv('BREVO_API_KEY')
    MAIL_SENDER_EMAIL = os.getenv('MAIL_SENDER_EMAIL')
    MAIL_SENDER_NAME = os.getenv('MAIL_SENDER_NAME', 'Car Rental Service')

    @classmethod
    def as_dict(cls) -> dict:
        return {key: getattr(cls, key) for key in dir(cls) if key.isupper()}
