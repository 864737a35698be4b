import os

import pytest

from amp_cache_tools.errors import KeyLoadError, SigningError
from amp_cache_tools.utils import signing
from conftest import PASSWORD

PATH = "/update-cache/c/s/www.example.com/amp/test-amp-page?amp_action=flush&amp_ts=1637421562"


def test_sign_is_deterministic(private_key):
    assert signing.sign(PATH, private_key) == signing.sign(PATH, private_key)
    assert len(signing.sign(PATH, private_key)) == private_key.key_size // 8


def test_sign_verifies_with_public_key(private_key):
    encoded = signing.sign_path(PATH, private_key)
    assert signing.verify_signature(PATH, encoded, private_key.public_key())
    assert not signing.verify_signature(PATH + "0", encoded, private_key.public_key())
    assert not signing.verify_signature(PATH, encoded[:-4], private_key.public_key())


def test_sign_str_and_bytes_match(private_key):
    assert signing.sign(PATH, private_key) == signing.sign(PATH.encode(), private_key)


def test_sign_without_key():
    with pytest.raises(SigningError):
        signing.sign(PATH, None)


@pytest.mark.parametrize(
    "expected,data",
    [
        ("-_-_", b"\xfb\xff\xbf"),
        # padding stripped
        ("_w", b"\xff"),
        ("AAE", b"\x00\x01"),
        ("", b""),
    ],
)
def test_encode_signature(expected, data):
    assert signing.encode_signature(data) == expected


@pytest.mark.parametrize("size", [1, 2, 3, 64, 255, 256, 512])
def test_encode_signature_is_url_safe(size):
    for _ in range(20):
        encoded = signing.encode_signature(os.urandom(size))
        assert not set(encoded) & {"/", "+", "="}


def test_decode_signature_reverses_encode():
    data = os.urandom(256)
    assert signing.decode_signature(signing.encode_signature(data)) == data


def test_load_private_key(key_file, private_key):
    key = signing.load_private_key(key_file)
    assert key.private_numbers() == private_key.private_numbers()


def test_load_encrypted_private_key(encrypted_key_file, private_key):
    key = signing.load_private_key(encrypted_key_file, PASSWORD)
    assert key.private_numbers() == private_key.private_numbers()


@pytest.mark.parametrize("password", ["", "wrong password"])
def test_load_encrypted_private_key_bad_password(encrypted_key_file, password):
    with pytest.raises(KeyLoadError):
        signing.load_private_key(encrypted_key_file, password)


def test_load_private_key_password_for_plain_key(key_file):
    with pytest.raises(KeyLoadError):
        signing.load_private_key(key_file, PASSWORD)


def test_load_private_key_empty_location():
    with pytest.raises(KeyLoadError):
        signing.load_private_key("")


def test_load_private_key_missing_file(tmp_path):
    with pytest.raises(KeyLoadError):
        signing.load_private_key(tmp_path / "missing.pem")


def test_load_private_key_not_pem(tmp_path):
    path = tmp_path / "garbage.pem"
    path.write_text("not a key")
    with pytest.raises(KeyLoadError):
        signing.load_private_key(path)


def test_load_private_key_wrong_type(ec_key_file):
    with pytest.raises(KeyLoadError, match="expected an RSA key"):
        signing.load_private_key(ec_key_file)


def test_file_key_provider_reloads(key_file):
    provider = signing.FileKeyProvider(key_file)
    assert provider.current_key() is not provider.current_key()

    key_file.unlink()
    with pytest.raises(KeyLoadError):
        provider.current_key()


def test_file_key_provider_cached(key_file):
    provider = signing.FileKeyProvider(key_file, cache=True)
    key = provider.current_key()

    key_file.unlink()
    assert provider.current_key() is key


def test_public_key_pem(private_key):
    pem = signing.public_key_pem(private_key)
    assert pem.startswith("-----BEGIN PUBLIC KEY-----")
    assert pem == signing.public_key_pem(private_key.public_key())
