import base64
import hashlib
import hmac
from typing import Optional

from .errors import DecodeError, InvalidParameter

DEFAULT_DIGITS = 6
MIN_DIGITS = 1
# The truncated value has 31 bits (at most 2147483647), so ten digits is the
# widest code that is not just padding.
MAX_DIGITS = 10
MAX_COUNTER = 2**64 - 1


def int_to_bytestring(i: int, padding: int = 8) -> bytes:
    """
    Turns an integer to the OATH specified
    bytestring, which is fed to the HMAC
    along with the secret
    """
    result = bytearray()
    while i != 0:
        result.append(i & 0xFF)
        i >>= 8
    return bytes(bytearray(reversed(result)).rjust(padding, b"\0"))


def dynamic_truncate(hmac_hash: bytes) -> int:
    """
    RFC 4226 section 5.3: the low nibble of the last byte selects four bytes,
    read big-endian with the top bit cleared.
    """
    offset = hmac_hash[-1] & 0xF
    return (
        (hmac_hash[offset] & 0x7F) << 24
        | (hmac_hash[offset + 1] & 0xFF) << 16
        | (hmac_hash[offset + 2] & 0xFF) << 8
        | (hmac_hash[offset + 3] & 0xFF)
    )


def check_digits(digits: int) -> None:
    if not MIN_DIGITS <= digits <= MAX_DIGITS:
        raise InvalidParameter("digits must be between {} and {}, got {}".format(MIN_DIGITS, MAX_DIGITS, digits))


def generate_code(key: bytes, counter: int, digits: int = DEFAULT_DIGITS) -> str:
    """
    Computes the HOTP value for a raw key and counter (RFC 4226).

    :param key: the shared secret as raw bytes, must not be empty
    :param counter: moving factor, an unsigned 64-bit integer
    :param digits: length of the code, 1 to 10
    :returns: the code, zero-padded to exactly ``digits`` characters
    :raises InvalidParameter: if any argument is out of range
    """
    if not key:
        raise InvalidParameter("key must not be empty")
    if counter < 0 or counter > MAX_COUNTER:
        raise InvalidParameter("counter must fit in an unsigned 64-bit integer, got {}".format(counter))
    check_digits(digits)

    hmac_hash = hmac.new(key, int_to_bytestring(counter), hashlib.sha1).digest()
    code = dynamic_truncate(hmac_hash) % 10**digits
    return str(code).rjust(digits, "0")


def decode_secret(secret: str) -> bytes:
    """
    Decodes a Base32 secret the way authenticator apps accept it: case
    insensitive, spaces ignored and trailing ``=`` padding optional.

    :raises DecodeError: if the secret is not valid Base32 or decodes to no bytes
    """
    # The otpauth scheme drops base32 padding for lengths not divisible by 8.
    secret = "".join(secret.split())
    missing_padding = len(secret) % 8
    if missing_padding != 0:
        secret += "=" * (8 - missing_padding)
    try:
        key = base64.b32decode(secret, casefold=True)
    except ValueError as e:
        # binascii.Error is a ValueError, as is non-ASCII input
        raise DecodeError("invalid base32 secret: {}".format(e)) from e
    if not key:
        raise DecodeError("secret decodes to an empty key")
    return key


class OTP(object):
    """
    Base class for OTP handlers.
    """

    def __init__(
        self,
        s: str,
        digits: int = DEFAULT_DIGITS,
        name: Optional[str] = None,
        issuer: Optional[str] = None,
    ) -> None:
        check_digits(digits)
        self.digits = digits
        self.secret = s
        self.name = name or "Secret"
        self.issuer = issuer

    def generate_otp(self, input: int) -> str:
        """
        :param input: the HMAC counter value to use as the OTP input.
            Usually either the counter, or the computed integer based on the Unix timestamp
        """
        return generate_code(self.byte_secret(), input, self.digits)

    def byte_secret(self) -> bytes:
        return decode_secret(self.secret)
