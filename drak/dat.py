import struct
from typing import NamedTuple

import numpy as np
from PIL import Image


UINT32LE = struct.Struct('<I')

# 4 bytes garbage, 4 bytes image data length, 4 bytes garbage
RECORD_PREFIX = 4 + 4 + 4
HEADER_LENGTH = 14
HEADER_WIDTH = 2
HEADER_HEIGHT = 4

TRANSPARENT_KEY = (1, 1, 1)


class RecordHeader(NamedTuple):
    length: int
    width: int
    height: int


def read_record_header(dat: bytes, offset: int, has_header: bool = True) -> RecordHeader | None:
    if offset < 0 or offset + RECORD_PREFIX > len(dat):
        return None
    length = UINT32LE.unpack_from(dat, offset + 4)[0]
    if not has_header:
        return RecordHeader(length, 0, 0)

    start = offset + RECORD_PREFIX
    header = dat[start:start + HEADER_LENGTH]
    if len(header) < HEADER_LENGTH:
        return None
    return RecordHeader(length, header[HEADER_WIDTH], header[HEADER_HEIGHT])


def read_payload(dat: bytes, offset: int, length: int, has_header: bool = True) -> bytes | None:
    header_length = HEADER_LENGTH if has_header else 0
    item_length = length - header_length
    if item_length <= 0:
        return None

    start = offset + RECORD_PREFIX + header_length
    end = start + item_length
    if end > len(dat):
        return None
    return dat[start:end]


def decode_pixels(payload: bytes, width: int, height: int) -> np.ndarray:
    """Unpack a record payload into a (height, width, 4) RGBA array.

    The first 3 bytes only hold the place of pixel 0, which is always transparent.
    Each following triplet is stored as (blue, red, green) and written out as
    (green, red, blue, 255); the (1, 1, 1) key becomes fully transparent.
    Triplets past the last pixel are dropped.
    """
    pixels = np.zeros((width * height, 4), dtype=np.uint8)

    body = payload[3:]
    body += b'\0' * (-len(body) % 3)
    groups = np.frombuffer(body, dtype=np.uint8).reshape(-1, 3)
    count = min(len(groups), width * height - 1)
    if count <= 0:
        return pixels.reshape(height, width, 4)

    groups = groups[:count]
    keyed = (groups == TRANSPARENT_KEY).all(axis=1)
    pixels[1:count + 1, :3] = groups[:, ::-1]
    pixels[1:count + 1, 3] = 255
    pixels[1:count + 1][keyed] = 0
    return pixels.reshape(height, width, 4)


def decode_record(dat: bytes, offset: int, has_header: bool = True, width: int = 0, height: int = 0) -> np.ndarray | None:
    header = read_record_header(dat, offset, has_header)
    if not header:
        return None
    payload = read_payload(dat, offset, header.length, has_header)
    if not payload:
        return None

    width = width or header.width
    height = height or header.height
    if not width or not height:
        return None

    return decode_pixels(payload, width, height)


def to_image(pixels: np.ndarray) -> Image.Image:
    height, width, _ = pixels.shape
    return Image.frombuffer('RGBA', (width, height), pixels.tobytes(), 'raw', 'RGBA', 0, 1)
