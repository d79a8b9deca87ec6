# classvote/notifications/mailer.py

import logging

from flask_mail import Message
from markupsafe import escape

logger = logging.getLogger(__name__)


REGISTRATION_SUBJECT = "Complete Your Voter Registration - Class Representative Election"
VOTING_SUBJECT = "Your Voting Link - Class Representative Election"


class Notifier:
    """Best-effort outbound email. ``send`` never raises."""

    def __init__(self, mail):
        self.mail = mail

    def send(self, recipient, subject, body, html=None) -> bool:
        try:
            msg = Message(subject, recipients=[recipient], body=body, html=html)
            self.mail.send(msg)
            logger.info("Email sent: %s", subject)
            return True
        except Exception as e:
            logger.warning("Failed to send email '%s': %s", subject, e)
            return False

    def send_registration_link(self, email, link, ttl_minutes):
        body = (
            "Thank you for your interest in the class representative election.\n\n"
            f"Complete your registration here: {link}\n\n"
            f"This link expires in {ttl_minutes} minutes. "
            "If you didn't request this registration, please ignore this email."
        )
        html = (
            "<p>Thank you for your interest in the class representative election.</p>"
            f'<p><a href="{escape(link)}">Complete Registration</a></p>'
            f"<p>This link expires in {ttl_minutes} minutes.</p>"
        )
        return self.send(email, REGISTRATION_SUBJECT, body, html=html)

    def send_voting_link(self, email, voter_name, class_label, link, ttl_minutes):
        body = (
            f"Hello {voter_name}!\n\n"
            f"Your voting link for class {class_label} is ready: {link}\n\n"
            f"It can be used once and expires in {ttl_minutes} minutes."
        )
        html = (
            f"<p>Hello {escape(voter_name)}!</p>"
            f'<p><a href="{escape(link)}">Start Voting</a></p>'
            f"<ul><li>Class: {escape(class_label)}</li>"
            f"<li>Expires: {ttl_minutes} minutes from now</li>"
            "<li>Security: One-time use token</li></ul>"
        )
        return self.send(email, VOTING_SUBJECT, body, html=html)
