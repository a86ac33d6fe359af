"""Block cipher used to scramble every message sent over the network."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from os import PathLike
from pathlib import Path

BLOCK_SIZE = 8
P_BOX_SIZE = 18
S_BOX_COUNT = 4
S_BOX_COLUMNS = 8
S_BOX_ROWS = 32

_ROUNDS = 16
_MASK32 = 0xFFFFFFFF
_MASK64 = 0xFFFFFFFFFFFFFFFF
_P_BOX_FILE = "pBox.txt"


def _read_lines(path: Path, limit: int) -> list[bytes]:
    lines = path.read_bytes().splitlines()
    if len(lines) > limit:
        raise ValueError(f"{path} holds {len(lines)} lines, at most {limit} allowed")
    return lines


def _pack(chunk: bytes) -> int:
    return int.from_bytes(chunk, "big")


class Blowfish:
    """Feistel cipher over 64-bit blocks, keyed by a P-box and four S-boxes."""

    def __init__(self, p_box: Iterable[int], s_box: Iterable[Iterable[Iterable[int]]]) -> None:
        p_values = tuple(value & _MASK32 for value in p_box)
        if len(p_values) != P_BOX_SIZE:
            raise ValueError(f"P-box needs {P_BOX_SIZE} entries, got {len(p_values)}")

        boxes = tuple(
            tuple(tuple(value & _MASK32 for value in column) for column in box)
            for box in s_box
        )
        if len(boxes) != S_BOX_COUNT:
            raise ValueError(f"need {S_BOX_COUNT} S-boxes, got {len(boxes)}")
        for box in boxes:
            if len(box) != S_BOX_COLUMNS or any(len(column) != S_BOX_ROWS for column in box):
                raise ValueError(
                    f"each S-box must be {S_BOX_COLUMNS} columns of {S_BOX_ROWS} values"
                )

        self._p_box = p_values
        self._s_box = boxes

    @property
    def p_box(self) -> tuple[int, ...]:
        return self._p_box

    @property
    def s_box(self) -> tuple[tuple[tuple[int, ...], ...], ...]:
        return self._s_box

    @classmethod
    def from_directory(cls, path: str | PathLike[str]) -> Blowfish:
        """Load the boxes from pBox.txt and s1.txt .. s4.txt in *path*.

        Each P-box line packs its first four characters into a 32-bit value;
        each S-box line packs characters five to eight. Missing lines are zero.
        """
        root = Path(path)

        p_box = []
        for line in _read_lines(root / _P_BOX_FILE, P_BOX_SIZE):
            if len(line) < 4:
                raise ValueError(f"P-box line {line!r} is shorter than 4 characters")
            p_box.append(_pack(line[:4]))
        p_box.extend([0] * (P_BOX_SIZE - len(p_box)))

        per_box = S_BOX_COLUMNS * S_BOX_ROWS
        s_box = []
        for number in range(1, S_BOX_COUNT + 1):
            values = []
            for line in _read_lines(root / f"s{number}.txt", per_box):
                if len(line) < 8:
                    raise ValueError(f"S-box line {line!r} is shorter than 8 characters")
                values.append(_pack(line[4:8]))
            values.extend([0] * (per_box - len(values)))
            s_box.append(
                [values[start:start + S_BOX_ROWS] for start in range(0, per_box, S_BOX_ROWS)]
            )

        return cls(p_box, s_box)

    def feistel(self, value: int) -> int:
        """Round function: pick one S-box entry per byte and combine them."""
        value &= _MASK32
        picked = []
        for box, shift in zip(self._s_box, (24, 16, 8, 0)):
            byte = (value >> shift) & 0xFF
            picked.append(box[byte >> 5][byte >> 3])
        first, second, third, fourth = picked
        return ((first & second) ^ third) & fourth

    def encode_block(self, block: int) -> int:
        block &= _MASK64
        left, right = block >> 32, block & _MASK32

        for key in self._p_box[:_ROUNDS]:
            left ^= key
            right ^= self.feistel(left)
            left, right = right, left

        left, right = right, left
        left ^= self._p_box[17]
        right ^= self._p_box[16]
        return (left << 32) | right

    def decode_block(self, block: int) -> int:
        block &= _MASK64
        left, right = block >> 32, block & _MASK32

        left ^= self._p_box[17]
        right ^= self._p_box[16]
        left, right = right, left

        for key in reversed(self._p_box[:_ROUNDS]):
            left, right = right, left
            right ^= self.feistel(left)
            left ^= key

        return (left << 32) | right

    @staticmethod
    def _blocks(data: bytes | str, transform: Callable[[int], int]) -> bytes:
        raw = data.encode("utf-8") if isinstance(data, str) else bytes(data)
        out = bytearray()
        for offset in range(0, len(raw), BLOCK_SIZE):
            chunk = raw[offset:offset + BLOCK_SIZE].ljust(BLOCK_SIZE, b"\0")
            out += transform(_pack(chunk)).to_bytes(BLOCK_SIZE, "big")
        return bytes(out)

    def encrypt(self, data: bytes | str) -> bytes:
        """Encrypt *data*, zero-padding the last block to eight bytes."""
        return self._blocks(data, self.encode_block)

    def decrypt(self, data: bytes | str) -> bytes:
        """Decrypt *data*; zero padding added by encryption is kept."""
        return self._blocks(data, self.decode_block)