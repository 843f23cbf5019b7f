import datetime
import logging
import time
from typing import Callable, Optional, Union

from . import utils
from .errors import DecodeError, InvalidParameter
from .otp import DEFAULT_DIGITS, MAX_COUNTER, OTP, generate_code

log = logging.getLogger(__name__)

DEFAULT_INTERVAL = 30
DEFAULT_WINDOW = 1

Clock = Callable[[], float]
ForTime = Union[int, float, datetime.datetime]


class TOTP(OTP):
    """
    Handler for time-based OTP counters.
    """

    def __init__(
        self,
        s: str,
        digits: int = DEFAULT_DIGITS,
        name: Optional[str] = None,
        issuer: Optional[str] = None,
        interval: int = DEFAULT_INTERVAL,
        clock: Clock = time.time,
    ) -> None:
        """
        :param s: secret in base32 format
        :param digits: number of integers in the OTP. Some apps expect this to be 6 digits, others support more.
        :param name: account name
        :param issuer: issuer
        :param interval: the time interval in seconds for OTP. This defaults to 30.
        :param clock: zero-argument callable returning the current Unix time in seconds
        """
        if interval <= 0:
            raise InvalidParameter("interval must be a positive number of seconds")
        self.interval = interval
        self.clock = clock
        super().__init__(s=s, digits=digits, name=name, issuer=issuer)

    def _seconds(self, for_time: Optional[ForTime]) -> float:
        if for_time is None:
            return self.clock()
        if isinstance(for_time, datetime.datetime):
            return for_time.timestamp()
        return for_time

    def timecode(self, for_time: Optional[ForTime] = None) -> int:
        """
        Accepts either a timezone naive (`for_time.tzinfo is None`) or
        a timezone aware datetime as argument and returns the
        corresponding counter value (timecode). Plain numbers are read as
        Unix seconds; ``None`` reads the clock.
        """
        return int(self._seconds(for_time) // self.interval)

    def at(self, for_time: Optional[ForTime] = None, counter_offset: int = 0) -> str:
        """
        Accepts either a Unix timestamp integer or a datetime object.

        :param for_time: the time to generate an OTP for
        :param counter_offset: the amount of ticks to add to the time counter
        :returns: OTP value
        """
        return self.generate_otp(self.timecode(for_time) + counter_offset)

    def now(self) -> str:
        """
        Generate the current time OTP

        :returns: OTP value
        """
        return self.at()

    def verify(self, otp: str, for_time: Optional[ForTime] = None, window: int = DEFAULT_WINDOW) -> bool:
        """
        Verifies the OTP passed in against the current time OTP.

        Counters from ``t - window`` to ``t + window`` are tried in
        increasing order. Counters that would fall below zero never match.

        :param otp: the OTP to check against
        :param for_time: Time to check OTP at (defaults to now)
        :param window: number of steps tolerated on either side of the
            current one; 0 checks only the current step
        :returns: True if verification succeeded, False otherwise
        """
        if window < 0:
            raise InvalidParameter("window must not be negative, got {}".format(window))

        key = self.byte_secret()
        counter = self.timecode(for_time)
        otp = str(otp)
        for offset in range(-window, window + 1):
            candidate = counter + offset
            if candidate < 0 or candidate > MAX_COUNTER:
                log.debug("skipping out-of-range counter %d", candidate)
                continue
            if utils.strings_equal(otp, generate_code(key, candidate, self.digits)):
                return True
        return False

    def time_remaining(self, for_time: Optional[ForTime] = None) -> int:
        """
        Whole seconds left in the current step after the running second,
        between 0 and ``interval - 1``. Right on a step boundary this is
        ``interval - 1``.
        """
        return self.interval - 1 - int(self._seconds(for_time)) % self.interval

    def provisioning_uri(self, name: Optional[str] = None, issuer_name: Optional[str] = None, **kwargs) -> str:
        """
        Returns the provisioning URI for the OTP.  This can then be
        encoded in a QR Code and used to provision an OTP app like
        Google Authenticator.

        See also:
            https://github.com/google/google-authenticator/wiki/Key-Uri-Format

        :param name: name of the user account
        :param issuer_name: the name of the OTP issuer; this will be the
            organization title of the OTP entry in Authenticator
        :returns: provisioning URI
        """
        return utils.build_uri(
            self.secret,
            name if name else self.name,
            issuer=issuer_name if issuer_name else self.issuer,
            digits=self.digits,
            period=self.interval,
            **kwargs,
        )


def validate(secret: str, input_code: str, window: int = DEFAULT_WINDOW, clock: Optional[Clock] = None) -> bool:
    """
    Checks a submitted code against the default 6-digit, 30-second TOTP.

    A secret that is not valid Base32 never validates: the decode error is
    logged and False is returned.
    """
    totp = TOTP(secret, clock=clock or time.time)
    try:
        return totp.verify(input_code, window=window)
    except DecodeError as e:
        log.debug("rejecting code for undecodable secret: %s", e)
        return False


def get_current_code(secret: str, clock: Optional[Clock] = None) -> str:
    """
    :raises DecodeError: if the secret is not valid Base32
    """
    return TOTP(secret, clock=clock or time.time).now()


def time_remaining(clock: Optional[Clock] = None) -> int:
    seconds = (clock or time.time)()
    return DEFAULT_INTERVAL - 1 - int(seconds) % DEFAULT_INTERVAL
