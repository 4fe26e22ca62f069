import pytest

from efflog.crypt import (
    AESCrypt,
    CryptError,
    binary_key_to_hex,
    compute_ecdh_shared_secret,
    generate_ecdh_key_pair,
    hex_key_to_binary,
)

TEST_KEY = b"K" * 32
HEX_CHARS = set("0123456789ABCDEF")


# ECDH


def test_key_pair_sizes():
    private_key, public_key = generate_ecdh_key_pair()
    assert len(private_key) == 32
    assert len(public_key) == 65
    assert public_key[0] == 0x04


def test_key_pairs_are_unique():
    pri1, pub1 = generate_ecdh_key_pair()
    pri2, pub2 = generate_ecdh_key_pair()
    assert pri1 != pri2
    assert pub1 != pub2


def test_shared_secret_matches_for_both_parties():
    client_pri, client_pub = generate_ecdh_key_pair()
    server_pri, server_pub = generate_ecdh_key_pair()
    client_shared = compute_ecdh_shared_secret(client_pri, server_pub)
    server_shared = compute_ecdh_shared_secret(server_pri, client_pub)
    assert client_shared == server_shared
    assert len(client_shared) == 32


def test_different_peers_give_different_secrets():
    client_pri, _ = generate_ecdh_key_pair()
    _, server1_pub = generate_ecdh_key_pair()
    _, server2_pub = generate_ecdh_key_pair()
    assert compute_ecdh_shared_secret(client_pri, server1_pub) != compute_ecdh_shared_secret(
        client_pri, server2_pub
    )


def test_invalid_public_key_raises():
    client_pri, _ = generate_ecdh_key_pair()
    with pytest.raises(CryptError):
        compute_ecdh_shared_secret(client_pri, b"invalid_public_key_data")


def test_invalid_public_key_is_runtime_error():
    client_pri, _ = generate_ecdh_key_pair()
    with pytest.raises(RuntimeError):
        compute_ecdh_shared_secret(client_pri, b"\x04" + b"\x00" * 64)


# Hex encoding


def test_binary_to_hex():
    assert binary_key_to_hex(b"\x01\x23\x45\x67\x89\xab\xcd\xef") == "0123456789ABCDEF"


def test_hex_to_binary():
    assert hex_key_to_binary("0123456789ABCDEF") == b"\x01\x23\x45\x67\x89\xab\xcd\xef"


def test_hex_to_binary_lower_case():
    assert hex_key_to_binary("0123456789abcdef") == b"\x01\x23\x45\x67\x89\xab\xcd\xef"


def test_hex_round_trip():
    _, public_key = generate_ecdh_key_pair()
    assert hex_key_to_binary(binary_key_to_hex(public_key)) == public_key


def test_hex_empty():
    assert binary_key_to_hex(b"") == ""
    assert hex_key_to_binary("") == b""


# AES


def test_generate_key_is_hex():
    key = AESCrypt.generate_key()
    assert len(key) == 32
    assert set(key) <= HEX_CHARS


def test_generate_key_unique():
    keys = {AESCrypt.generate_key() for _ in range(5)}
    assert len(keys) == 5
    assert {len(k) for k in keys} == {32}


def test_generate_iv_is_hex():
    iv = AESCrypt.generate_iv()
    assert len(iv) == 32
    assert set(iv) <= HEX_CHARS


def test_generate_iv_unique():
    ivs = {AESCrypt.generate_iv() for _ in range(5)}
    assert len(ivs) == 5
    assert {len(v) for v in ivs} == {32}


def test_encrypt_decrypt_basic():
    cipher = AESCrypt(TEST_KEY)
    plaintext = b"Hello, World!"
    ciphertext = cipher.encrypt(plaintext)
    assert len(ciphertext) > 0
    assert ciphertext != plaintext
    assert cipher.decrypt(ciphertext) == plaintext


def test_encrypt_decrypt_empty():
    cipher = AESCrypt(TEST_KEY)
    ciphertext = cipher.encrypt(b"")
    assert len(ciphertext) == 16
    assert cipher.decrypt(ciphertext) == b""


@pytest.mark.parametrize("length", [1, 15, 16, 17, 31, 32, 100, 1000])
def test_encrypt_decrypt_various_lengths(length):
    cipher = AESCrypt(TEST_KEY)
    plaintext = b"A" * length
    assert cipher.decrypt(cipher.encrypt(plaintext)) == plaintext


@pytest.mark.parametrize(("length", "expected"), [(1, 16), (15, 16), (16, 32), (17, 32)])
def test_ciphertext_is_padded_to_block(length, expected):
    assert len(AESCrypt(TEST_KEY).encrypt(b"A" * length)) == expected


def test_encrypt_decrypt_binary_data():
    cipher = AESCrypt(TEST_KEY)
    plaintext = bytes(range(256))
    assert cipher.decrypt(cipher.encrypt(plaintext)) == plaintext


def test_encrypt_decrypt_null_bytes():
    cipher = AESCrypt(TEST_KEY)
    plaintext = b"Hello\x00World\x00Test"
    decrypted = cipher.decrypt(cipher.encrypt(plaintext))
    assert len(decrypted) == 16
    assert decrypted == plaintext


def test_same_plaintext_same_ciphertext():
    cipher = AESCrypt(TEST_KEY)
    first = cipher.encrypt(b"Test message")
    second = cipher.encrypt(b"Test message")
    assert len(first) == 16
    assert first == second
    assert cipher.decrypt(second) == b"Test message"


def test_different_keys_different_ciphertext():
    c1 = AESCrypt(b"A" * 32).encrypt(b"Test message")
    c2 = AESCrypt(b"B" * 32).encrypt(b"Test message")
    assert c1 != c2


def test_wrong_key_raises():
    ciphertext = AESCrypt(b"A" * 32).encrypt(b"Test message")
    with pytest.raises(CryptError):
        AESCrypt(b"B" * 32).decrypt(ciphertext)


def test_truncated_ciphertext_raises():
    cipher = AESCrypt(TEST_KEY)
    ciphertext = cipher.encrypt(b"Test message")
    with pytest.raises(CryptError):
        cipher.decrypt(ciphertext[:-1])


def test_invalid_key_length_raises():
    with pytest.raises(CryptError):
        AESCrypt(b"short").encrypt(b"data")


# ECDH + AES


def test_full_encryption_flow():
    client_pri, client_pub = generate_ecdh_key_pair()
    server_pri, server_pub = generate_ecdh_key_pair()
    client_shared = compute_ecdh_shared_secret(client_pri, server_pub)
    server_shared = compute_ecdh_shared_secret(server_pri, client_pub)
    assert client_shared == server_shared
    message = b"Confidential log data"
    encrypted = AESCrypt(client_shared).encrypt(message)
    assert AESCrypt(server_shared).decrypt(encrypted) == message


def test_multiple_round_trips():
    client_pri, _ = generate_ecdh_key_pair()
    _, server_pub = generate_ecdh_key_pair()
    cipher = AESCrypt(compute_ecdh_shared_secret(client_pri, server_pub))
    messages = [b"Message 1", b"Another message", b"Yet another message with more data", b"X" * 1000]
    assert [cipher.decrypt(cipher.encrypt(m)) for m in messages] == messages


def test_key_storage_and_recovery():
    _, server_pub = generate_ecdh_key_pair()
    restored_server_pub = hex_key_to_binary(binary_key_to_hex(server_pub))
    client_pri, _ = generate_ecdh_key_pair()
    cipher = AESCrypt(compute_ecdh_shared_secret(client_pri, restored_server_pub))
    assert cipher.decrypt(cipher.encrypt(b"Test")) == b"Test"


def test_large_data():
    cipher = AESCrypt(TEST_KEY)
    data = b"A" * (1024 * 1024)
    assert cipher.decrypt(cipher.encrypt(data)) == data