"""
Outgoing email.

Wraps Flask-Mail. Deliveries run on a small shared worker pool so that a
slow or silent SMTP server can hold at most ``MAIL_MAX_WORKERS`` sessions
and never blocks a request for longer than ``MAIL_SEND_TIMEOUT`` seconds.
``send`` waits for the result; ``notify`` is fire and forget and is what
relationship and account flows use, so a mail outage never changes the
outcome of the operation that triggered it.
"""
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout

from flask import current_app
from flask_mail import Message


class Notifier:
    """Flask extension around a ``flask_mail.Mail`` instance."""

    def __init__(self, mail, app=None):
        self.mail = mail
        self.default_sender = None
        self.send_async = False
        self.timeout = 10
        self._executor = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self.default_sender = app.config.get('MAIL_DEFAULT_SENDER')
        self.send_async = app.config.get('MAIL_SEND_ASYNC', False)
        self.timeout = app.config.get('MAIL_SEND_TIMEOUT', 10)
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=app.config.get('MAIL_MAX_WORKERS', 4),
                thread_name_prefix='mail',
            )
        app.extensions['notifier'] = self

    def send(self, to, subject, body, sender=None):
        """Send one plain-text email and wait for it.

        Returns False (and logs) on failure or when delivery takes longer
        than ``timeout`` seconds.
        """
        msg = self._message(to, subject, body, sender)
        future = self._submit(msg)
        try:
            future.result(timeout=self.timeout)
        except FutureTimeout:
            current_app.logger.error(f'Timed out after {self.timeout}s sending "{subject}" to {to}')
            return False
        except Exception:
            current_app.logger.exception(f'Failed to send "{subject}" to {to}')
            return False
        current_app.logger.info(f'Sent "{subject}" to {to}')
        return True

    def notify(self, to, subject, body):
        """Send without waiting for the result."""
        if not self.send_async:
            self.send(to, subject, body)
            return

        logger = current_app.logger
        future = self._submit(self._message(to, subject, body))

        def _log_result(done):
            if done.exception() is not None:
                logger.error(f'Failed to send "{subject}" to {to}: {done.exception()}')
            else:
                logger.info(f'Sent "{subject}" to {to}')

        future.add_done_callback(_log_result)

    def _message(self, to, subject, body, sender=None):
        return Message(
            subject,
            sender=sender or self.default_sender,
            recipients=[to],
            body=body,
        )

    def _submit(self, msg):
        app = current_app._get_current_object()

        def _deliver():
            with app.app_context():
                self.mail.send(msg)

        return self._executor.submit(_deliver)
