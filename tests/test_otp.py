import pytest

from pytotp import DecodeError, InvalidParameter, generate_code
from pytotp.otp import MAX_COUNTER, decode_secret, dynamic_truncate, int_to_bytestring

RFC_KEY = b"12345678901234567890"
RFC_SECRET = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"


# RFC 4226 Appendix D
@pytest.mark.parametrize(
    "counter,expected",
    [
        (0, "755224"),
        (1, "287082"),
        (2, "359152"),
        (3, "969429"),
        (4, "338314"),
        (5, "254676"),
        (6, "287922"),
        (7, "162583"),
        (8, "399871"),
        (9, "520489"),
    ],
)
def test_hotp_vectors(counter, expected):
    assert generate_code(RFC_KEY, counter) == expected


# RFC 6238 Appendix B, SHA1 column, counter = T // 30
@pytest.mark.parametrize(
    "counter,expected",
    [
        (1, "94287082"),
        (37037036, "07081804"),
        (37037037, "14050471"),
        (41152263, "89005924"),
        (66666666, "69279037"),
        (666666666, "65353130"),
    ],
)
def test_totp_vectors(counter, expected):
    assert generate_code(RFC_KEY, counter, digits=8) == expected
    assert generate_code(RFC_KEY, counter, digits=6) == expected[-6:]


def test_zero_padding():
    assert generate_code(RFC_KEY, 41152263) == "005924"
    assert generate_code(RFC_KEY, 37037036, digits=8) == "07081804"
    # the untruncated value for counter 7 is 82162583
    assert generate_code(RFC_KEY, 7, digits=10) == "0082162583"
    assert generate_code(RFC_KEY, 0, digits=10) == "1284755224"
    assert generate_code(RFC_KEY, 0, digits=1) == "4"


def test_deterministic():
    first = generate_code(RFC_KEY, 123456789, digits=7)
    for _ in range(5):
        assert generate_code(RFC_KEY, 123456789, digits=7) == first
    assert len(first) == 7


@pytest.mark.parametrize("digits", [0, -1, 11])
def test_digits_out_of_range(digits):
    with pytest.raises(InvalidParameter):
        generate_code(RFC_KEY, 1, digits=digits)


def test_empty_key_rejected():
    with pytest.raises(InvalidParameter):
        generate_code(b"", 1)


@pytest.mark.parametrize("counter", [-1, MAX_COUNTER + 1])
def test_counter_out_of_range(counter):
    with pytest.raises(InvalidParameter):
        generate_code(RFC_KEY, counter)


def test_largest_counter_accepted():
    assert len(generate_code(RFC_KEY, MAX_COUNTER)) == 6


def test_int_to_bytestring():
    assert int_to_bytestring(0) == b"\x00" * 8
    assert int_to_bytestring(1) == b"\x00\x00\x00\x00\x00\x00\x00\x01"
    assert int_to_bytestring(0x3039) == b"\x00\x00\x00\x00\x00\x00\x30\x39"
    assert int_to_bytestring(MAX_COUNTER) == b"\xff" * 8


def test_dynamic_truncate_rfc4226_example():
    # RFC 4226 section 5.4
    digest = bytes.fromhex("1f8698690e02ca16618550ef7f19da8e945b555a")
    assert dynamic_truncate(digest) == 0x50EF7F19
    assert dynamic_truncate(digest) % 10**6 == 872921


def test_dynamic_truncate_clears_top_bit():
    digest = b"\xff" * 19 + b"\x00"
    assert dynamic_truncate(digest) == 0x7FFFFFFF


def test_decode_secret():
    assert decode_secret(RFC_SECRET) == RFC_KEY
    assert decode_secret(RFC_SECRET.lower()) == RFC_KEY
    assert decode_secret("GEZD GNBV GY3T QOJQ GEZD GNBV GY3T QOJQ") == RFC_KEY
    assert decode_secret("JBSWY3DPEHPK3PXP") == b"Hello!\xde\xad\xbe\xef"


@pytest.mark.parametrize("secret", ["", "   ", "not base32!", "GEZDGNB1", "A", "ÄÖÜ"])
def test_decode_secret_invalid(secret):
    with pytest.raises(DecodeError):
        decode_secret(secret)


def test_decode_error_is_value_error():
    with pytest.raises(ValueError):
        decode_secret("0000")
