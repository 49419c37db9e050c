# apps/outreach/errors.py

from apps.common.exceptions import PermanentError, TransientError


class ReviewError(PermanentError):
    """A review action was called without what it needs (e.g. no reviewer)."""


class Blocklisted(PermanentError):
    """Recipient address, its domain or the site domain is blocklisted."""


class DuplicateSend(PermanentError):
    """The contact was already emailed within a suppression window."""


class OutsideSendWindow(PermanentError):
    """Sending is not allowed at this time of day."""


class NoAccountAvailable(TransientError):
    """Every active send account is out of daily or hourly capacity."""


class TransportError(TransientError):
    """
    Delivery failed in the mail transport.

    ``permanent`` errors (rejected recipient, policy refusal) are not
    retried. ``bounce_type`` is "hard" or "soft" when the server bounced
    the recipient.
    """

    def __init__(self, message: str = "", permanent: bool = False, bounce_type: str | None = None):
        super().__init__(message)
        self.permanent = permanent
        self.bounce_type = bounce_type

    @property
    def retryable(self) -> bool:
        return not self.permanent
