class OTPError(Exception):
    """
    Base class for errors raised by pytotp.
    """


class DecodeError(OTPError, ValueError):
    """
    The Base32 secret could not be decoded into a usable key.
    """


class InvalidParameter(OTPError, ValueError):
    """
    An argument is outside the range the algorithm supports.
    """
