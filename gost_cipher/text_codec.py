import logging
import string
from enum import Enum
from typing import List

import numpy as np

from gost_cipher.cipher import BLOCK_SIZE, KEY_SIZE

logger = logging.getLogger(__name__)

SPACE_CODE = 0b00010000
REPLACEMENT_CHAR = "\ufffd"


class TextEncodingError(ValueError):
    pass


class KeyTextError(TextEncodingError):
    pass


class LangMode(Enum):
    CYRILLIC = "c"
    LATIN = "l"

    @property
    def offset(self) -> int:
        # code = ord(char) + offset
        return -880 if self is LangMode.CYRILLIC else 100

    @classmethod
    def parse(cls, value) -> "LangMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise TextEncodingError(f"Неизвестный языковой режим {value!r}: ожидается 'c' или 'l'.") from None


def encode_char(char: str, mode: LangMode) -> int:
    if char == " ":
        return SPACE_CODE
    code = ord(char) + mode.offset
    if not 0 <= code <= 0xFF or code == SPACE_CODE:
        raise TextEncodingError(
            f"Символ {char!r} нельзя закодировать 8 битами в режиме {mode.value!r} (код {code})."
        )
    return code


def decode_byte(value: int, mode: LangMode, errors: str = "replace") -> str:
    if value == SPACE_CODE:
        return " "
    code = value - mode.offset
    if 0 <= code < 0x110000 and not 0xD800 <= code <= 0xDFFF:
        return chr(code)
    if errors == "strict":
        raise TextEncodingError(f"Байт {value:#04x} не соответствует символу в режиме {mode.value!r}.")
    logger.warning(f"Байт {value:#04x} не декодируется в режиме {mode.value!r}, заменён на U+FFFD")
    return REPLACEMENT_CHAR


def encode_text(text: str, mode: LangMode = LangMode.CYRILLIC) -> bytes:
    """Map every character to exactly one 8-bit code."""
    mode = LangMode.parse(mode)
    return bytes(encode_char(ch, mode) for ch in text)


def decode_text(data: bytes, mode: LangMode = LangMode.CYRILLIC, errors: str = "replace") -> str:
    mode = LangMode.parse(mode)
    if errors not in ("strict", "replace"):
        raise ValueError(f"Неизвестный режим обработки ошибок: {errors!r}")
    return "".join(decode_byte(b, mode, errors) for b in data)


def split_into_chunks(text: str, size: int = BLOCK_SIZE) -> List[str]:
    return [text[i:i + size] for i in range(0, len(text), size)]


def pad_chunk(chunk: str, size: int = BLOCK_SIZE) -> str:
    return chunk + " " * (size - len(chunk))


def prepare_blocks(text: str, size: int = BLOCK_SIZE) -> List[str]:
    """Split text into space-padded chunks; empty text still gives one block."""
    chunks = split_into_chunks(text, size) or [""]
    return [pad_chunk(chunk, size) for chunk in chunks]


def encode_key(key_text: str, mode: LangMode = LangMode.CYRILLIC) -> bytes:
    if not key_text:
        raise KeyTextError("Ключ не задан.")
    if len(key_text) != KEY_SIZE:
        raise KeyTextError(
            f"Ключ должен содержать ровно {KEY_SIZE} символа (256 бит), получено {len(key_text)}."
        )
    return encode_text(key_text, mode)


def to_bit_string(data: bytes) -> str:
    bits = np.unpackbits(np.frombuffer(bytes(data), dtype=np.uint8))
    return (bits + ord("0")).astype(np.uint8).tobytes().decode("ascii")


def from_bit_string(text: str) -> bytes:
    text = "".join(text.split())
    if set(text) - {"0", "1"}:
        raise ValueError("Битовая строка может содержать только символы '0' и '1'.")
    if not text or len(text) % (BLOCK_SIZE * 8):
        raise ValueError(f"Длина битовой строки должна быть кратна {BLOCK_SIZE * 8}, получено {len(text)}.")
    bits = np.frombuffer(text.encode("ascii"), dtype=np.uint8) - ord("0")
    return np.packbits(bits).tobytes()


def to_hex(data: bytes) -> str:
    return bytes(data).hex()


def from_hex(text: str) -> bytes:
    text = "".join(text.split()).lower()
    if set(text) - set(string.hexdigits.lower()):
        raise ValueError("Шестнадцатеричная строка содержит недопустимые символы.")
    if not text or len(text) % (BLOCK_SIZE * 2):
        raise ValueError(f"Длина шестнадцатеричной строки должна быть кратна {BLOCK_SIZE * 2}, получено {len(text)}.")
    return bytes.fromhex(text)


FORMATTERS = {"bits": to_bit_string, "hex": to_hex}
PARSERS = {"bits": from_bit_string, "hex": from_hex}


def format_ciphertext(data: bytes, fmt: str = "bits") -> str:
    try:
        formatter = FORMATTERS[fmt]
    except KeyError:
        raise ValueError(f"Неизвестный формат вывода: {fmt!r}") from None
    return formatter(data)


def parse_ciphertext(text: str, fmt: str = "bits") -> bytes:
    try:
        parser = PARSERS[fmt]
    except KeyError:
        raise ValueError(f"Неизвестный формат ввода: {fmt!r}") from None
    return parser(text)
