from myumc.utils import token_crypto


def test_generate_and_parse_roundtrip():
    tid, secret, full = token_crypto.generate_token()
    assert full.startswith("rt_")
    parsed = token_crypto.parse_token(full)
    assert parsed is not None
    assert parsed.token_id == tid
    assert parsed.secret == secret


def test_parse_rejects_malformed_tokens():
    assert token_crypto.parse_token("") is None
    assert token_crypto.parse_token("pat_abc_def") is None
    assert token_crypto.parse_token("rt_abcdef") is None
    assert token_crypto.parse_token("rt__secret") is None
    assert token_crypto.parse_token("rt_abc_") is None


def test_secret_may_contain_underscores():
    parsed = token_crypto.parse_token("rt_abc123_part_one_two")
    assert parsed.token_id == "abc123"
    assert parsed.secret == "part_one_two"


def test_hash_and_verify_argon2():
    encoded = token_crypto.hash_secret("s3cr3t-test-value")
    assert encoded.startswith("$argon2id$")
    assert token_crypto.verify_secret("s3cr3t-test-value", encoded)
    assert not token_crypto.verify_secret("wrong-secret", encoded)


def test_verify_handles_missing_or_invalid_hash():
    assert not token_crypto.verify_secret("anything", None)
    assert not token_crypto.verify_secret("", "$argon2id$whatever")
    assert not token_crypto.verify_secret("anything", "not-a-hash")
