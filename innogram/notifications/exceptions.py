class InfrastructureError(Exception):
    """A broker, mail server or other backing service failed."""


class PasswordResetDeliveryError(InfrastructureError):
    """A password reset email could not be handed to the mail backend.

    Raised by the consumer so the message goes back on the queue for another
    attempt; these emails are never dropped silently.
    """
