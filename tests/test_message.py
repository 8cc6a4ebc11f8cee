import pytest

from gost_cipher.cipher import GOST28147_89, InvalidBlockLength
from gost_cipher.message import MessageCipher
from gost_cipher.text_codec import LangMode, encode_key, encode_text

KEY = "алексеевалексеевалексеевалексеев"


@pytest.fixture
def cipher():
    return GOST28147_89(encode_key(KEY, LangMode.CYRILLIC))


def test_single_block_round_trip(cipher):
    messenger = MessageCipher(cipher, LangMode.CYRILLIC)
    ciphertext = messenger.encrypt("кулешов ")
    assert len(ciphertext) == 8
    assert messenger.decrypt(ciphertext) == "кулешов "


def test_short_message_is_space_padded(cipher):
    messenger = MessageCipher(cipher)
    assert messenger.encode("да") == encode_text("да      ")
    assert messenger.decrypt(messenger.encrypt("да")) == "да      "


def test_long_message_is_chunked(cipher):
    messenger = MessageCipher(cipher)
    text = "шифрование по госту"
    ciphertext = messenger.encrypt(text)
    assert len(ciphertext) == 24
    assert messenger.decrypt(ciphertext) == text + " " * 5
    # blocks are independent: each one matches a standalone encryption
    assert ciphertext[:8] == cipher.encrypt_block(encode_text(text[:8]))


def test_latin_mode():
    key = "abcdefghijklmnopqrstuvwxyzABCDEF"
    messenger = MessageCipher(GOST28147_89(encode_key(key, "l")), "l")
    assert messenger.decrypt(messenger.encrypt("Hello, GOST!")).rstrip() == "Hello, GOST!"


def test_thread_pool_keeps_block_order(cipher):
    text = "абвгдежзийклмнопрстуфхцчшщъыьэюя" * 4
    sequential = MessageCipher(cipher).encrypt(text)
    parallel = MessageCipher(cipher, workers=4)
    assert parallel.encrypt(text) == sequential
    assert parallel.decrypt(sequential) == text


def test_raw_bytes_must_be_whole_blocks(cipher):
    messenger = MessageCipher(cipher)
    with pytest.raises(InvalidBlockLength):
        messenger.encrypt_bytes(bytes(12))
    assert messenger.decrypt_bytes(b"") == b""


def test_wrong_key_does_not_recover_text(cipher):
    ciphertext = MessageCipher(cipher).encrypt("секретно")
    other = GOST28147_89(encode_key("б" * 32))
    assert MessageCipher(other).decrypt(ciphertext) != "секретно"
