import pathlib
import struct
from typing import NamedTuple


UINT32LE = struct.Struct('<I')

# layout of the section tables inside the .ndx
TABLE_BASE = 0
TABLE_HEADER = 0x708
TABLE_PREFIX = 0x108
TABLE_STRIDE = 0xE0C
TABLE_ENTRIES = 449


class NdxError(ValueError):
    pass


class NotFoundError(NdxError):
    pass


class OutOfBoundsError(NdxError):
    pass


class Offset(NamedTuple):
    value: int

    @property
    def key(self) -> int:
        return self.value

    def resolve(self, ndx: bytes) -> int:
        return self.value

    def __str__(self) -> str:
        return str(self.value)


class Tag(NamedTuple):
    name: str

    @property
    def key(self) -> str:
        return self.name

    def resolve(self, ndx: bytes) -> int:
        try:
            marker = self.name.encode('ascii')
        except UnicodeEncodeError as exc:
            raise NotFoundError(f'Tag {self.name!r} is not ASCII, cannot be in index') from exc
        pos = ndx.find(marker)
        if pos < 0:
            raise NotFoundError(f'Tag {self.name!r} not found in index')
        # back-pointer sits right before the marker
        return read_uint32le(ndx, pos - UINT32LE.size)

    def __str__(self) -> str:
        return self.name


SectionId = Offset | Tag


class Asset(NamedTuple):
    name: str
    ndx: bytes
    dat: bytes


def load_asset(name: str, base_path='.') -> Asset:
    base_path = pathlib.Path(base_path)
    ndx = (base_path / f'{name}.ndx').read_bytes()
    dat = (base_path / f'{name}.dat').read_bytes()
    return Asset(name, ndx, dat)


def parse_section_id(text: str) -> SectionId:
    if text.isdigit():
        return Offset(int(text))
    return Tag(text)


def read_uint32le(data: bytes, offset: int) -> int:
    if offset < 0 or offset + UINT32LE.size > len(data):
        raise OutOfBoundsError(f'Read of 4 bytes at {offset:#x} outside of {len(data):#x} bytes')
    return UINT32LE.unpack_from(data, offset)[0]


def resolve_section_offset(ndx: bytes, section: SectionId) -> int:
    return section.resolve(ndx)


def table_base(section_index: int) -> int:
    return TABLE_BASE + TABLE_HEADER + TABLE_PREFIX + section_index * TABLE_STRIDE


def read_offset_list(ndx: bytes, table_offset: int) -> list[int]:
    """Read the zero-terminated list of .dat offsets starting at `table_offset`.

    At most TABLE_ENTRIES values are read; the terminating zero is not included.
    """
    offsets = []
    for idx in range(TABLE_ENTRIES):
        value = read_uint32le(ndx, table_offset + idx * UINT32LE.size)
        if value == 0:
            break
        offsets.append(value)
    return offsets


def read_section(ndx: bytes, section: SectionId) -> list[int]:
    return read_offset_list(ndx, table_base(resolve_section_offset(ndx, section)))
