import logging
import random
from typing import Any, Dict, Optional, Sequence
from urllib.parse import parse_qsl, unquote, urlparse

from . import utils
from .errors import DecodeError as DecodeError
from .errors import InvalidParameter as InvalidParameter
from .errors import OTPError as OTPError
from .otp import OTP as OTP
from .otp import generate_code as generate_code
from .totp import TOTP as TOTP
from .totp import get_current_code as get_current_code
from .totp import time_remaining as time_remaining
from .totp import validate as validate

logging.getLogger(__name__).addHandler(logging.NullHandler())

BASE32_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"
DEFAULT_SECRET_LENGTH = 16

_system_random = random.SystemRandom()


def _random_string(length: int, chars: Sequence[str], rng: Optional[random.Random]) -> str:
    rng = rng or _system_random
    return "".join(rng.choice(chars) for _ in range(length))


def random_base32(
    length: int = 32, chars: Sequence[str] = BASE32_ALPHABET, rng: Optional[random.Random] = None
) -> str:
    # Note: the otpauth scheme DOES NOT use base32 padding for secret lengths not divisible by 8.
    # Some third-party tools have bugs when dealing with such secrets.
    if length < 32:
        raise InvalidParameter("Secrets should be at least 160 bits")

    return _random_string(length, chars, rng)


def generate_secret(length: int = DEFAULT_SECRET_LENGTH, rng: Optional[random.Random] = None) -> str:
    """
    Returns ``length`` characters drawn uniformly from the Base32 alphabet.

    The default source is the operating system CSPRNG; pass ``rng`` to
    substitute a seeded generator in tests. Lengths leaving 1, 3 or 6
    characters in the last 8-character group carry no whole byte and can
    never be decoded, so they are refused.

    :param length: number of Base32 characters, decoding to ``length * 5 // 8`` bytes
    :param rng: object with a ``choice`` method, defaults to ``random.SystemRandom``
    """
    if length <= 0 or length % 8 in (1, 3, 6):
        raise InvalidParameter("{} is not a decodable base32 secret length".format(length))
    return _random_string(length, BASE32_ALPHABET, rng)


def get_uri(secret: str, account: str, issuer: str) -> str:
    """
    Builds the ``otpauth://totp/{issuer}:{account}?secret=...&issuer=...``
    provisioning URI for the default 6-digit, 30-second TOTP.

    Issuer and account are percent-encoded, so reserved characters such as
    ``:``, ``@``, ``?`` or spaces cannot break the label. Plain alphanumeric
    names come out exactly as written.
    """
    return utils.build_uri(secret, account, issuer=issuer)


def _int_param(key: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise InvalidParameter("{} must be an integer, got {!r}".format(key, value)) from e


def parse_uri(uri: str) -> TOTP:
    """
    Parses a TOTP provisioning URI, the reverse of :func:`get_uri`.

    See also:
        https://github.com/google/google-authenticator/wiki/Key-Uri-Format

    :param uri: the otpauth://totp URI to parse
    :returns: TOTP object
    """
    secret = None
    digits = None

    # Data we'll parse to the TOTP constructor
    otp_data: Dict[str, Any] = {}

    parsed_uri = urlparse(uri)

    if parsed_uri.scheme != "otpauth":
        raise InvalidParameter("Not an otpauth URI")
    if parsed_uri.netloc != "totp":
        raise InvalidParameter("Not a supported OTP type: {!r}".format(parsed_uri.netloc))

    # Only a literal colon separates issuer from account; an encoded one
    # belongs to whichever part it appears in.
    accountinfo_parts = parsed_uri.path[1:].split(":", 1)
    if len(accountinfo_parts) == 1:
        otp_data["name"] = unquote(accountinfo_parts[0])
    else:
        otp_data["issuer"] = unquote(accountinfo_parts[0])
        otp_data["name"] = unquote(accountinfo_parts[1])

    for key, value in parse_qsl(parsed_uri.query):
        if key == "secret":
            secret = value
        elif key == "issuer":
            if "issuer" in otp_data and otp_data["issuer"] != value:
                raise InvalidParameter("If issuer is specified in both label and parameters, it should be equal.")
            otp_data["issuer"] = value
        elif key == "algorithm":
            if value.upper() != "SHA1":
                raise InvalidParameter("Invalid value for algorithm, only SHA1 is supported")
        elif key == "digits":
            digits = _int_param(key, value)
            otp_data["digits"] = digits
        elif key == "period":
            otp_data["interval"] = _int_param(key, value)

    if digits is not None and digits not in [6, 7, 8]:
        raise InvalidParameter("Digits may only be 6, 7, or 8")
    if not secret:
        raise InvalidParameter("No secret found in URI")

    return TOTP(secret, **otp_data)
