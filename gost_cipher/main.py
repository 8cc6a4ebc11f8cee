import argparse
import logging
from typing import Callable, Iterable, Optional

from gost_cipher.cipher import GOST28147_89
from gost_cipher.message import MessageCipher
from gost_cipher.text_codec import (
    LangMode,
    decode_text,
    encode_key,
    format_ciphertext,
    parse_ciphertext,
    to_bit_string,
)

logger = logging.getLogger(__name__)

DEFAULT_LOG_FILE = "cipher.log"

PROMPT_MESSAGE = "message to encrypt/decrypt (max 64 bit - 8 characters, q: quit): "
PROMPT_KEY = "encryption key (max 256 bit - 32 characters): "
PROMPT_LANG = "choose language mode (c: ciryllic, l: latin): "
PROMPT_MODE = "choose mode (enc: encrypting, dec: decryption, q: quit): "


def setup_logging(level: str = "WARNING", log_file: Optional[str] = None) -> None:
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )


def run_operation(message: str, key: str, lang: str, mode: str, fmt: str = "bits",
                  workers: Optional[int] = None, output: Callable[[str], None] = print) -> str:
    """Encrypt or decrypt one message and print the result lines. Returns the main result."""
    lang_mode = LangMode.parse(lang)
    cipher = GOST28147_89(encode_key(key, lang_mode))
    messenger = MessageCipher(cipher, lang_mode, workers=workers)

    if mode == "enc":
        cleartext = messenger.encode(message)
        output(f"cleartext: {to_bit_string(cleartext)}")
        encrypted = format_ciphertext(messenger.encrypt_bytes(cleartext), fmt)
        output(f"encrypted message: {encrypted}\n")
        return encrypted
    if mode == "dec":
        ciphertext = parse_ciphertext(message, fmt)
        plain = messenger.decrypt_bytes(ciphertext)
        text = decode_text(plain, lang_mode)
        output(f"\ndecrypted message: {to_bit_string(plain)}")
        output(f"decrypted message in characters: {text}\n")
        return text
    raise ValueError(f"unexpected option {mode!r}")


def run_interactive(fmt: str = "bits", workers: Optional[int] = None,
                    input_func: Callable[[str], str] = input,
                    output: Callable[[str], None] = print) -> None:
    while True:
        try:
            message = input_func(PROMPT_MESSAGE)
            if message == "q":
                return
            key = input_func(PROMPT_KEY)
            lang = input_func(PROMPT_LANG)
            mode = input_func(PROMPT_MODE)
        except (EOFError, KeyboardInterrupt):
            output("")
            return

        if mode == "q":
            return
        if mode not in ("enc", "dec"):
            output("unexpected option\ntry again")
            continue
        try:
            run_operation(message, key, lang, mode, fmt, workers, output)
        except ValueError as exc:
            logger.error(f"Ошибка при выполнении операции {mode}: {exc}")
            output(f"error: {exc}\ntry again")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="GOST 28147-89 style block cipher for short text messages."
    )
    parser.add_argument("--message", help="Message to encrypt, or ciphertext to decrypt.")
    parser.add_argument("--key", help="Key of exactly 32 characters (256 bit).")
    parser.add_argument("--lang", choices=("c", "l"), default="c",
                        help="Language mode: c - cyrillic, l - latin (default: c).")
    parser.add_argument("--mode", choices=("enc", "dec"), help="Operation: enc or dec.")
    parser.add_argument("--format", dest="fmt", choices=("bits", "hex"), default="bits",
                        help="Ciphertext representation (default: bits).")
    parser.add_argument("--workers", type=int, default=None,
                        help="Process blocks on a thread pool of this size.")
    parser.add_argument("--log-level", default="WARNING",
                        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
                        help="Logging level (default: WARNING).")
    parser.add_argument("--log-file", nargs="?", const=DEFAULT_LOG_FILE, default=None,
                        help=f"Also write the log to a file (default name: {DEFAULT_LOG_FILE}).")
    return parser


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    if args.message is None or args.key is None or args.mode is None:
        logger.info("Запуск интерактивного режима.")
        run_interactive(args.fmt, args.workers)
        return 0

    try:
        run_operation(args.message, args.key, args.lang, args.mode, args.fmt, args.workers)
    except ValueError as exc:
        logger.error(f"Произошла ошибка: {exc}")
        print(f"error: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
