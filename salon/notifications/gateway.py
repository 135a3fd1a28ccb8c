"""Email and SMS delivery for booking confirmations and reminders."""

import html
import logging
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from twilio.base.exceptions import TwilioRestException
from twilio.rest import Client as TwilioClient

from salon.core import config
from salon.core.errors import NotificationError
from salon.scheduling.appointments import ANY_STYLIST_NAME, AppointmentView

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderedMessage:
    subject: str
    text_body: str
    html_body: str
    sms_body: str


def _details(view: AppointmentView) -> dict:
    return {
        'service': view.service_name,
        'stylist': view.stylist_name or ANY_STYLIST_NAME,
        'date': view.appointment_date.isoformat(),
        'time': view.appointment_time,
    }


def _detail_lines(details: dict) -> tuple[str, str]:
    text = (
        f"Service: {details['service']}\n"
        f"Stylist: {details['stylist']}\n"
        f"Date: {details['date']}\n"
        f"Time: {details['time']}\n"
    )
    escaped = {key: html.escape(str(value)) for key, value in details.items()}
    markup = (
        '<ul>'
        f"<li><strong>Service:</strong> {escaped['service']}</li>"
        f"<li><strong>Stylist:</strong> {escaped['stylist']}</li>"
        f"<li><strong>Date:</strong> {escaped['date']}</li>"
        f"<li><strong>Time:</strong> {escaped['time']}</li>"
        '</ul>'
    )
    return text, markup


def render_confirmation(view: AppointmentView, business_name: str = config.BUSINESS_NAME) -> RenderedMessage:
    details = _details(view)
    text_details, html_details = _detail_lines(details)

    return RenderedMessage(
        subject=f'Appointment Confirmation - {business_name}',
        text_body=(
            f'Hello {view.customer_name},\n\n'
            'Your appointment has been confirmed!\n\n'
            f'{text_details}\n'
            'You will receive a reminder 1 day before your appointment.\n\n'
            f'Thank you for choosing {business_name}!\n'
        ),
        html_body=(
            '<h2>Appointment Confirmation</h2>'
            f'<p>Hello {html.escape(view.customer_name)},</p>'
            '<p>Your appointment has been confirmed!</p>'
            f'{html_details}'
            '<p>You will receive a reminder 1 day before your appointment.</p>'
            f'<p>Thank you for choosing {html.escape(business_name)}!</p>'
        ),
        sms_body=(
            f"{business_name}: Your appointment is confirmed for {details['date']} "
            f"at {details['time']}. Service: {details['service']}"
        ),
    )


def render_reminder(view: AppointmentView, business_name: str = config.BUSINESS_NAME) -> RenderedMessage:
    details = _details(view)
    text_details, html_details = _detail_lines(details)

    return RenderedMessage(
        subject=f'Reminder: Appointment Tomorrow - {business_name}',
        text_body=(
            f'Hello {view.customer_name},\n\n'
            'This is a reminder about your appointment tomorrow:\n\n'
            f'{text_details}\n'
            'We look forward to seeing you!\n\n'
            f'{business_name}\n'
        ),
        html_body=(
            '<h2>Appointment Reminder</h2>'
            f'<p>Hello {html.escape(view.customer_name)},</p>'
            '<p>This is a reminder about your appointment tomorrow:</p>'
            f'{html_details}'
            '<p>We look forward to seeing you!</p>'
            f'<p>{html.escape(business_name)}</p>'
        ),
        sms_body=(
            f"{business_name}: Reminder - Your appointment is tomorrow at {details['time']}. "
            f"Service: {details['service']}"
        ),
    )


class NotificationGateway:
    """Sends rendered messages by email (SMTP) and SMS (Twilio).

    A channel without credentials logs the message instead of sending it.
    Any delivery failure is raised as ``NotificationError`` after every
    channel was attempted.
    """

    def __init__(
        self,
        business_name: str = config.BUSINESS_NAME,
        smtp_host: str | None = None,
        smtp_port: int = 587,
        smtp_username: str = '',
        smtp_password: str = '',
        smtp_use_tls: bool = True,
        email_from: str = 'noreply@salon.com',
        twilio_client: TwilioClient | None = None,
        sms_from: str = '',
    ):
        self.business_name = business_name
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_username = smtp_username
        self.smtp_password = smtp_password
        self.smtp_use_tls = smtp_use_tls
        self.email_from = email_from
        self.twilio_client = twilio_client
        self.sms_from = sms_from

    @classmethod
    def from_config(cls) -> 'NotificationGateway':
        smtp_host = config.EMAIL_HOST if config.EMAIL_API_KEY else None
        if smtp_host is None:
            logger.warning('Email not configured - notifications will be logged.')

        twilio_client = None
        if config.TWILIO_ACCOUNT_SID and config.TWILIO_AUTH_TOKEN:
            twilio_client = TwilioClient(config.TWILIO_ACCOUNT_SID, config.TWILIO_AUTH_TOKEN)
        else:
            logger.warning('SMS not configured - notifications will be logged.')

        return cls(
            business_name=config.BUSINESS_NAME,
            smtp_host=smtp_host,
            smtp_port=config.EMAIL_PORT,
            smtp_username=config.EMAIL_USERNAME,
            smtp_password=config.EMAIL_API_KEY,
            smtp_use_tls=config.EMAIL_USE_TLS,
            email_from=config.EMAIL_FROM,
            twilio_client=twilio_client,
            sms_from=config.TWILIO_PHONE_NUMBER,
        )

    def send_email(self, to: str, subject: str, text_body: str, html_body: str) -> None:
        if not self.smtp_host:
            logger.info('[EMAIL] To: %s, Subject: %s, Body: %s', to, subject, text_body)
            return

        msg = MIMEMultipart('alternative')
        msg['Subject'] = subject
        msg['From'] = self.email_from
        msg['To'] = to
        msg.attach(MIMEText(text_body, 'plain'))
        msg.attach(MIMEText(html_body, 'html'))

        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
                if self.smtp_use_tls:
                    server.starttls()
                server.login(self.smtp_username, self.smtp_password)
                server.sendmail(self.email_from, [to], msg.as_string())
        except (smtplib.SMTPException, OSError) as exc:
            raise NotificationError(f'Email delivery failed: {exc}') from exc

        logger.info('Email sent to %s', to)

    def send_sms(self, to: str, body: str) -> None:
        if not self.twilio_client:
            logger.info('[SMS] To: %s, Message: %s', to, body)
            return

        try:
            self.twilio_client.messages.create(body=body, from_=self.sms_from, to=to)
        except TwilioRestException as exc:
            raise NotificationError(f'SMS delivery failed: {exc.msg}') from exc

        logger.info('SMS sent to %s', to)

    def _deliver(self, view: AppointmentView, message: RenderedMessage) -> None:
        failures: list[NotificationError] = []

        if view.customer_email:
            try:
                self.send_email(view.customer_email, message.subject, message.text_body, message.html_body)
            except NotificationError as exc:
                failures.append(exc)

        if view.customer_phone:
            try:
                self.send_sms(view.customer_phone, message.sms_body)
            except NotificationError as exc:
                failures.append(exc)

        if failures:
            raise NotificationError('; '.join(failure.detail for failure in failures))

    def send_confirmation(self, view: AppointmentView) -> None:
        self._deliver(view, render_confirmation(view, self.business_name))

    def send_reminder(self, view: AppointmentView) -> None:
        self._deliver(view, render_reminder(view, self.business_name))
