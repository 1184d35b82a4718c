# =============================================================================
# Password reset email (AWS SES)
# =============================================================================
#
# Set AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY, AWS_REGION and EMAIL_FROM.
# Without them the message is written to the log instead of being sent.
#
# =============================================================================

import logging
from functools import lru_cache

import boto3
from botocore.exceptions import ClientError

from config import Settings, get_settings

logger = logging.getLogger(__name__)

RESET_SUBJECT = "Password Reset Request"

RESET_HTML = """
<h2>Password Reset Request</h2>
<p>Click the link below to reset your password:</p>
<a href="{reset_url}">{reset_url}</a>
<p>This link will expire in {minutes} minutes.</p>
<p>If you didn't request this, please ignore this email.</p>
"""

RESET_TEXT = """Password Reset Request

Visit this link to reset your password:
{reset_url}

This link will expire in {minutes} minutes.
If you didn't request this, please ignore this email.
"""


class MailDeliveryError(Exception):
    pass


class Mailer:
    def __init__(self, settings: Settings):
        self.settings = settings
        self._client = None

    @property
    def is_configured(self) -> bool:
        return self.settings.use_ses

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client(
                "ses",
                region_name=self.settings.aws_region,
                aws_access_key_id=self.settings.aws_access_key_id,
                aws_secret_access_key=self.settings.aws_secret_access_key,
            )
        return self._client

    def send_password_reset(self, to: str, reset_url: str) -> None:
        data = {
            "reset_url": reset_url,
            "minutes": self.settings.reset_token_expire_minutes,
        }
        if not self.is_configured:
            logger.warning("Email not configured - would send password reset to %s", to)
            logger.info("Email content: %s", RESET_TEXT.format(**data))
            return
        try:
            response = self.client.send_email(
                Source=self.settings.email_from,
                Destination={"ToAddresses": [to]},
                Message={
                    "Subject": {"Data": RESET_SUBJECT, "Charset": "UTF-8"},
                    "Body": {
                        "Html": {"Data": RESET_HTML.format(**data), "Charset": "UTF-8"},
                        "Text": {"Data": RESET_TEXT.format(**data), "Charset": "UTF-8"},
                    },
                },
            )
        except ClientError as e:
            logger.error("Failed to send password reset to %s: %s", to, e)
            raise MailDeliveryError(str(e)) from e
        logger.info("Password reset sent to %s (MessageId: %s)", to, response["MessageId"])


@lru_cache(maxsize=1)
def get_mailer() -> Mailer:
    return Mailer(get_settings())
