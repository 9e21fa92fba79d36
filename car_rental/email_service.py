"""Transactional email delivery through Brevo."""

import logging

import sib_api_v3_sdk
from sib_api_v3_sdk.rest import ApiException
from urllib3.exceptions import HTTPError

from .errors import DeliveryError


logger = logging.getLogger(__name__)


class Mailer:
    """
    Sends plain-text emails.  When no API key or sender address is
    configured every send is skipped with a log line and reported as not
    delivered, so the rest of the application works without mail set up.
    """

    def __init__(self, api_key=None, sender_email=None, sender_name='Car Rental Service'):
        self.sender = {'email': sender_email, 'name': sender_name}
        self._api = None
        if api_key and sender_email:
            configuration = sib_api_v3_sdk.Configuration()
            configuration.api_key['api-key'] = api_key
            self._api = sib_api_v3_sdk.TransactionalEmailsApi(sib_api_v3_sdk.ApiClient(configuration))

    @classmethod
    def from_config(cls, config) -> 'Mailer':
        return cls(
            api_key=config.get('BREVO_API_KEY'),
            sender_email=config.get('MAIL_SENDER_EMAIL'),
            sender_name=config.get('MAIL_SENDER_NAME') or 'Car Rental Service',
        )

    @property
    def configured(self) -> bool:
        return self._api is not None

    def send(self, to: str, subject: str, text: str, name: str = None) -> bool:
        """Send one email.  Returns False if skipped, raises DeliveryError on failure."""
        if not self.configured:
            logger.warning("Email credentials are missing, not sending '%s' to %s", subject, to)
            return False
        recipient = {'email': to}
        if name:
            recipient['name'] = name
        message = sib_api_v3_sdk.SendSmtpEmail(
            to=[recipient],
            sender=self.sender,
            subject=subject,
            text_content=text,
        )
        try:
            self._api.send_transac_email(message)
        except ApiException as e:
            raise DeliveryError(f"Error sending email to {to}: {e.status} {e.reason}") from e
        except (HTTPError, OSError) as e:
            raise DeliveryError(f"Error sending email to {to}: {e}") from e
        logger.info("Email sent to %s", to)
        return True
