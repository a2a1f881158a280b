import struct

import pytest

import ndx
from sections import SECTION_COUNT

UINT32LE = struct.Struct('<I')


def make_ndx(tables, size=None):
    data = bytearray(size if size is not None else ndx.table_base(SECTION_COUNT))
    for index, offsets in tables.items():
        base = ndx.table_base(index)
        for idx, value in enumerate(offsets):
            UINT32LE.pack_into(data, base + idx * UINT32LE.size, value)
    return bytes(data)


def make_record(payload, header=None):
    header = header or b''
    return b'\xAA' * 4 + UINT32LE.pack(len(header) + len(payload)) + b'\xBB' * 4 + header + payload


def make_header(width, height):
    header = bytearray(14)
    header[2] = width
    header[4] = height
    return bytes(header)


class DatBuilder:
    def __init__(self):
        self.data = bytearray(b'\0' * 16)

    def add(self, record):
        offset = len(self.data)
        self.data += record
        return offset

    def build(self):
        return bytes(self.data)


@pytest.fixture
def dat_builder():
    return DatBuilder()
