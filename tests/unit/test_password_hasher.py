from src.domain.services.password_hasher import PasswordHasher


def test_hash_is_salted_and_verifies():
    hasher = PasswordHasher()
    first = hasher.hash("secret123")
    second = hasher.hash("secret123")
    assert first != "secret123"
    assert first != second
    assert hasher.verify("secret123", first)
    assert not hasher.verify("wrong", first)


def test_corrupt_hash_does_not_verify():
    assert not PasswordHasher().verify("secret123", "not-a-hash")
