import logging
from enum import Enum
from functools import lru_cache
from typing import List, Sequence, Tuple, Union

import numpy as np

logger = logging.getLogger(__name__)

MASK32 = 0xFFFFFFFF
BLOCK_SIZE = 8
KEY_SIZE = 32
SUBKEY_COUNT = 8
ROUNDS = 32
ROTATION = 11


class GostError(ValueError):
    pass


class InvalidKeyLength(GostError):
    pass


class InvalidBlockLength(GostError):
    pass


class InvalidDirection(GostError):
    pass


class Direction(Enum):
    ENCRYPT = "enc"
    DECRYPT = "dec"

    @classmethod
    def parse(cls, value: Union["Direction", str]) -> "Direction":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            logger.error(f"Неизвестное направление: {value!r}")
            raise InvalidDirection(f"Направление должно быть 'enc' или 'dec', получено {value!r}.") from None


def make_substitution_table(rows: Sequence[Sequence[int]]) -> np.ndarray:
    """Build a read-only 16x8 table: row = nibble value, column = nibble position."""
    table = np.array(rows, dtype=np.uint8)
    if table.shape != (16, 8):
        raise ValueError(f"Таблица замен должна иметь размер 16x8, получено {table.shape}.")
    if (table > 0xF).any():
        raise ValueError("Значения таблицы замен должны лежать в диапазоне 0..15.")
    table.setflags(write=False)
    return table


SUBSTITUTION_TABLE = make_substitution_table([
    [1, 13, 4, 6, 7, 5, 14, 4],
    [15, 11, 11, 12, 13, 8, 11, 10],
    [13, 4, 10, 7, 10, 1, 4, 9],
    [0, 1, 0, 1, 1, 13, 12, 2],
    [5, 3, 7, 5, 0, 10, 6, 13],
    [7, 15, 2, 15, 8, 3, 13, 8],
    [10, 5, 1, 13, 9, 4, 15, 0],
    [4, 9, 13, 8, 15, 2, 10, 14],
    [9, 0, 3, 4, 14, 14, 2, 6],
    [2, 10, 6, 10, 4, 15, 3, 11],
    [3, 14, 8, 9, 6, 12, 8, 1],
    [14, 7, 5, 14, 12, 7, 1, 12],
    [6, 6, 9, 0, 11, 6, 0, 7],
    [11, 8, 12, 3, 2, 0, 7, 15],
    [8, 2, 15, 11, 5, 9, 5, 5],
    [12, 12, 14, 2, 3, 11, 9, 3],
])


def rotl32(x: int, r: int) -> int:
    return ((x << r) | (x >> (32 - r))) & MASK32


def substitute(value: int, table: Sequence[Sequence[int]] = SUBSTITUTION_TABLE) -> int:
    result = 0
    for i in range(8):
        nibble = (value >> (28 - 4 * i)) & 0xF
        result = (result << 4) | int(table[nibble][i])
    return result


def round_function(left: int, right: int, subkey: int, table: Sequence[Sequence[int]] = SUBSTITUTION_TABLE) -> int:
    sum_mod = (right + subkey) & MASK32
    logger.debug(f"  Сложение по mod 2^32: {hex(right)} + {hex(subkey)} = {hex(sum_mod)}")

    substituted = substitute(sum_mod, table)
    logger.debug(f"  Подстановка: {hex(sum_mod)} -> {hex(substituted)}")

    shifted = rotl32(substituted, ROTATION)
    logger.debug(f"  Циклический сдвиг влево на {ROTATION}: {hex(substituted)} -> {hex(shifted)}")

    result = left ^ shifted
    logger.debug(f"  XOR с левой половиной: {hex(left)} ^ {hex(shifted)} = {hex(result)}")
    return result


class KeySchedule:
    """Derives K0..K7 from 256 key bits and the per-direction round order."""

    def __init__(self, key: Union[bytes, Sequence[int]]):
        self.subkeys = self.derive_subkeys(key)

    @staticmethod
    def derive_subkeys(key: Union[bytes, Sequence[int]]) -> Tuple[int, ...]:
        if isinstance(key, (bytes, bytearray)):
            if len(key) != KEY_SIZE:
                logger.error(f"Неверная длина ключа: {len(key)} байт. Ожидается {KEY_SIZE} байта.")
                raise InvalidKeyLength("Ключ должен быть длиной 32 байта (256 бит).")
            subkeys = tuple(int.from_bytes(key[i * 4:(i + 1) * 4], 'big') for i in range(SUBKEY_COUNT))
        else:
            subkeys = tuple(key)
            if len(subkeys) != SUBKEY_COUNT or not all(isinstance(k, int) and not isinstance(k, bool) and 0 <= k <= MASK32 for k in subkeys):
                logger.error(f"Неверный набор подключей: {subkeys!r}")
                raise InvalidKeyLength("Ключ должен состоять из 8 беззнаковых 32-битных слов (256 бит).")
        logger.debug(f"Сгенерированы подключи: {[hex(k) for k in subkeys]}")
        return subkeys

    @staticmethod
    def _next_index(index: int, iteration: int, direction: Direction) -> int:
        if direction is Direction.ENCRYPT:
            if iteration == 23:
                return 7
            if iteration < 24:
                return (index + 1) % SUBKEY_COUNT
            return index - 1
        if index == 0 and iteration != 0:
            return 7
        if iteration == 7:
            return 7
        if iteration < 7:
            return index + 1
        return index - 1

    @staticmethod
    @lru_cache(maxsize=None)
    def _order(direction: Direction) -> Tuple[int, ...]:
        order: List[int] = []
        index = 0
        for i in range(ROUNDS):
            order.append(index)
            index = KeySchedule._next_index(index, i, direction)
        return tuple(order)

    @staticmethod
    def round_key_order(direction: Union[Direction, str]) -> Tuple[int, ...]:
        return KeySchedule._order(Direction.parse(direction))


class FeistelEngine:
    def __init__(self, table: np.ndarray = SUBSTITUTION_TABLE):
        self.table = table
        # plain ints for the round loop
        self.rows = tuple(tuple(row) for row in table.tolist())

    def run(self, block: int, subkeys: Sequence[int], direction: Union[Direction, str]) -> int:
        if not isinstance(block, int) or isinstance(block, bool) or not 0 <= block < 1 << 64:
            logger.error(f"Неверный блок: {block!r}. Ожидается 64-битное беззнаковое число.")
            raise InvalidBlockLength("Блок должен быть длиной 64 бита.")
        if len(subkeys) != SUBKEY_COUNT:
            logger.error(f"Неверное число подключей: {len(subkeys)}. Ожидается {SUBKEY_COUNT}.")
            raise InvalidKeyLength("Требуется ровно 8 подключей (256 бит).")
        if not all(isinstance(k, int) and not isinstance(k, bool) and 0 <= k <= MASK32 for k in subkeys):
            logger.error(f"Подключ вне диапазона 32 бит: {[hex(k) if isinstance(k, int) else k for k in subkeys]}")
            raise InvalidKeyLength("Каждый подключ должен быть беззнаковым 32-битным числом.")
        order = KeySchedule.round_key_order(direction)

        left, right = block >> 32, block & MASK32
        logger.debug(f"Начальные значения L: {hex(left)}, R: {hex(right)}")

        for i in range(ROUNDS):
            k_index = order[i]
            logger.debug(f"Раунд {i + 1}, подключ K{k_index} ({hex(subkeys[k_index])})")
            left, right = right, round_function(left, right, subkeys[k_index], self.rows)

        return (right << 32) | left


class GOST28147_89:
    def __init__(self, key: Union[bytes, Sequence[int]], sbox: Sequence[Sequence[int]] = None):
        self.schedule = KeySchedule(key)
        table = SUBSTITUTION_TABLE if sbox is None else make_substitution_table(sbox)
        self.engine = FeistelEngine(table)
        logger.debug("Инициализирован объект GOST28147_89.")

    @property
    def subkeys(self) -> Tuple[int, ...]:
        return self.schedule.subkeys

    def process_block(self, block: bytes, direction: Union[Direction, str]) -> bytes:
        if len(block) != BLOCK_SIZE:
            logger.error(f"Неверная длина блока: {len(block)} байт. Ожидается {BLOCK_SIZE} байт.")
            raise InvalidBlockLength("Блок должен быть длиной 8 байт (64 бита).")
        direction = Direction.parse(direction)
        logger.debug(f"Обработка блока ({direction.value}): {bytes(block).hex()}")
        result = self.engine.run(int.from_bytes(block, 'big'), self.subkeys, direction)
        out = result.to_bytes(BLOCK_SIZE, 'big')
        logger.debug(f"Результат: {out.hex()}")
        return out

    def encrypt_block(self, block: bytes) -> bytes:
        return self.process_block(block, Direction.ENCRYPT)

    def decrypt_block(self, block: bytes) -> bytes:
        return self.process_block(block, Direction.DECRYPT)
