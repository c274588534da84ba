import hashlib

from lockgraph.models import ChecksumSource, HashAlgorithm
from lockgraph.resolution.checksum import (
    hash_url, is_valid_digest, parse_integrity, resolve_checksum
)

from .conftest import BAR_SHASUM, BCRYPT_SHA1, BODY_PARSER_SHA512


def test_declared_digest_is_used_verbatim():
    checksum = resolve_checksum("https://example.com/bar.zip", BAR_SHASUM, HashAlgorithm.SHA1)

    assert checksum.algorithm is HashAlgorithm.SHA1
    assert checksum.value == BAR_SHASUM
    assert checksum.source is ChecksumSource.DECLARED


def test_declared_algorithm_is_kept_per_record():
    sha512 = resolve_checksum("u1", BODY_PARSER_SHA512, HashAlgorithm.SHA512)
    sha1 = resolve_checksum("u2", BCRYPT_SHA1, HashAlgorithm.SHA1)

    assert sha512.algorithm is HashAlgorithm.SHA512
    assert sha1.algorithm is HashAlgorithm.SHA1


def test_missing_digest_falls_back_to_sha1_of_url():
    url = "https://example.com/foo.git"
    checksum = resolve_checksum(url)

    assert checksum.algorithm is HashAlgorithm.SHA1
    assert checksum.value == hashlib.sha1(url.encode()).hexdigest()
    assert checksum.value == "9004367ae8380541193f5e8df361c023c14a2965"
    assert checksum.is_placeholder


def test_fallback_is_deterministic():
    url = "https://github.com/phpunit/phpunit.git"
    assert resolve_checksum(url) == resolve_checksum(url)
    assert hash_url(url) == hash_url(url)


def test_empty_url_and_no_digest_gives_empty_value():
    checksum = resolve_checksum("")
    assert checksum.value == ""
    assert checksum.source is ChecksumSource.NONE


def test_invalid_declared_digest_is_replaced_by_fallback():
    checksum = resolve_checksum("https://example.com/x.zip", "not-a-digest", HashAlgorithm.SHA1)

    assert checksum.source is ChecksumSource.URL_PLACEHOLDER
    assert checksum.value == hash_url("https://example.com/x.zip")


def test_parse_integrity():
    assert parse_integrity(f"sha512-{BODY_PARSER_SHA512}") == (HashAlgorithm.SHA512, BODY_PARSER_SHA512)
    assert parse_integrity(f"sha1-{BCRYPT_SHA1}") == (HashAlgorithm.SHA1, BCRYPT_SHA1)


def test_parse_integrity_skips_unknown_algorithms():
    assert parse_integrity(f"blake3-abc sha1-{BCRYPT_SHA1}") == (HashAlgorithm.SHA1, BCRYPT_SHA1)
    assert parse_integrity("garbage") is None


def test_is_valid_digest_accepts_hex_and_base64():
    assert is_valid_digest(HashAlgorithm.SHA1, BAR_SHASUM)
    assert is_valid_digest(HashAlgorithm.SHA1, BCRYPT_SHA1)
    assert is_valid_digest(HashAlgorithm.SHA512, BODY_PARSER_SHA512)
    assert not is_valid_digest(HashAlgorithm.SHA512, BCRYPT_SHA1)
    assert not is_valid_digest(HashAlgorithm.SHA256, BAR_SHASUM)
