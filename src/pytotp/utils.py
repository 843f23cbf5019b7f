from hmac import compare_digest
from typing import Dict, Optional, Union
from urllib.parse import quote, urlencode, urlparse

from .errors import InvalidParameter


def build_uri(
    secret: str,
    name: str,
    issuer: Optional[str] = None,
    digits: Optional[int] = None,
    period: Optional[int] = None,
    **kwargs,
) -> str:
    """
    Builds an ``otpauth://totp/`` provisioning URI, ready to be rendered as
    a QR code for an authenticator app.

    See also:
        https://github.com/google/google-authenticator/wiki/Key-Uri-Format

    :param secret: base32 secret
    :param name: account name, the part of the label after the colon
    :param issuer: service name; prefixes the label and is repeated as a
        query parameter
    :param digits: code length, only written when it is not 6
    :param period: time step in seconds, only written when it is not 30
    :param kwargs: extra string query parameters, e.g. ``image``
    :returns: provisioning uri
    """
    params: Dict[str, Union[int, str]] = {"secret": secret}

    # quote() keeps "/" by default, which would split the label
    label = quote(name, safe="")
    if issuer is not None:
        label = "{}:{}".format(quote(issuer, safe=""), label)
        params["issuer"] = issuer

    if digits is not None and digits != 6:
        params["digits"] = digits
    if period is not None and period != 30:
        params["period"] = period

    for key, value in kwargs.items():
        if not isinstance(value, str):
            raise InvalidParameter("otpauth parameter {} must be a string".format(key))
        if key == "image":
            image = urlparse(value)
            if image.scheme != "https" or not image.netloc or not image.path:
                raise InvalidParameter("image must be an https url, got {!r}".format(value))
        params[key] = value

    return "otpauth://totp/{}?{}".format(label, urlencode(params).replace("+", "%20"))


def strings_equal(s1: str, s2: str) -> bool:
    """
    Timing-attack resistant string comparison.

    Normal comparison using == will short-circuit on the first mismatching
    character. This avoids that by scanning the whole string, though we
    still reveal to a timing attack whether the strings are the same
    length. No normalization is applied: "007890" and "7890" differ.
    """
    # surrogatepass keeps lone surrogates (e.g. from JSON input) comparable
    return compare_digest(s1.encode("utf-8", "surrogatepass"), s2.encode("utf-8", "surrogatepass"))
