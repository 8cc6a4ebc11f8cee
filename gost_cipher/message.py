import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from gost_cipher.cipher import BLOCK_SIZE, GOST28147_89, Direction, InvalidBlockLength
from gost_cipher.text_codec import LangMode, decode_text, encode_text, prepare_blocks

logger = logging.getLogger(__name__)


class MessageCipher:
    """Runs the block cipher over a whole text message, one 8-character block at a time.

    Blocks are independent (no chaining), so with ``workers > 1`` they are
    handed to a thread pool; the output keeps the input block order.
    """

    def __init__(self, cipher: GOST28147_89, mode: LangMode = LangMode.CYRILLIC, workers: Optional[int] = None):
        self.cipher = cipher
        self.mode = LangMode.parse(mode)
        self.workers = workers
        logger.debug(f"Инициализирован MessageCipher: режим={self.mode.value}, потоков={workers}")

    @staticmethod
    def _split_blocks(data: bytes) -> List[bytes]:
        if len(data) % BLOCK_SIZE:
            logger.error(f"Длина данных {len(data)} не кратна {BLOCK_SIZE} байтам.")
            raise InvalidBlockLength(f"Длина данных должна быть кратна {BLOCK_SIZE} байтам.")
        return [data[i:i + BLOCK_SIZE] for i in range(0, len(data), BLOCK_SIZE)]

    def _process(self, data: bytes, direction: Direction) -> bytes:
        blocks = self._split_blocks(data)
        if self.workers and self.workers > 1 and len(blocks) > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                results = list(executor.map(lambda b: self.cipher.process_block(b, direction), blocks))
        else:
            results = [self.cipher.process_block(b, direction) for b in blocks]
        logger.debug(f"Обработано блоков: {len(results)}")
        return b"".join(results)

    def encrypt_bytes(self, data: bytes) -> bytes:
        return self._process(data, Direction.ENCRYPT)

    def decrypt_bytes(self, data: bytes) -> bytes:
        return self._process(data, Direction.DECRYPT)

    def encode(self, text: str) -> bytes:
        """Cleartext bytes exactly as they enter the cipher (padded to whole blocks)."""
        return b"".join(encode_text(chunk, self.mode) for chunk in prepare_blocks(text))

    def encrypt(self, text: str) -> bytes:
        logger.info(f"Начало шифрования сообщения из {len(text)} символов.")
        ciphertext = self.encrypt_bytes(self.encode(text))
        logger.info(f"Шифрование завершено: {len(ciphertext) // BLOCK_SIZE} блок(ов).")
        return ciphertext

    def decrypt(self, ciphertext: bytes, errors: str = "replace") -> str:
        logger.info(f"Начало расшифрования: {len(ciphertext) // BLOCK_SIZE} блок(ов).")
        text = decode_text(self.decrypt_bytes(ciphertext), self.mode, errors)
        logger.info("Расшифрование завершено.")
        return text
