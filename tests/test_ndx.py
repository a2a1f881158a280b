import struct

import pytest

import ndx
from conftest import make_ndx

UINT32LE = struct.Struct('<I')


def test_offset_resolves_to_itself():
    assert ndx.resolve_section_offset(b'', ndx.Offset(42)) == 42


def test_tag_reads_back_pointer():
    data = b'\xFF' * 8 + UINT32LE.pack(0x100) + b'TEST' + b'\0' * 8
    assert ndx.resolve_section_offset(data, ndx.Tag('TEST')) == 256


def test_tag_first_match_wins():
    data = UINT32LE.pack(3) + b'OAN1' + UINT32LE.pack(9) + b'OAN1'
    assert ndx.resolve_section_offset(data, ndx.Tag('OAN1')) == 3


def test_tag_not_found():
    with pytest.raises(ndx.NotFoundError):
        ndx.resolve_section_offset(b'\0' * 32, ndx.Tag('TBUT'))


def test_tag_without_room_for_pointer():
    with pytest.raises(ndx.OutOfBoundsError):
        ndx.resolve_section_offset(b'DISC' + b'\0' * 8, ndx.Tag('DISC'))


def test_table_base():
    assert ndx.table_base(0) == 0x708 + 0x108
    assert ndx.table_base(1) == 0x708 + 0x108 + 0xE0C
    assert ndx.table_base(67) == 0x810 + 67 * 0xE0C


def test_offset_list_stops_at_zero():
    data = b''.join(UINT32LE.pack(x) for x in [5, 10, 0, 99])
    assert ndx.read_offset_list(data, 0) == [5, 10]


def test_offset_list_empty():
    assert ndx.read_offset_list(b'\0' * 8, 0) == []


def test_offset_list_capped():
    values = list(range(1, 460))
    data = b''.join(UINT32LE.pack(x) for x in values)
    offsets = ndx.read_offset_list(data, 0)
    assert len(offsets) == 449
    assert offsets == values[:449]


def test_offset_list_at_table_offset():
    data = b'\xEE' * 12 + b''.join(UINT32LE.pack(x) for x in [7, 8, 0])
    assert ndx.read_offset_list(data, 12) == [7, 8]


def test_offset_list_out_of_bounds():
    data = b''.join(UINT32LE.pack(x) for x in [1, 2, 3])
    with pytest.raises(ndx.OutOfBoundsError):
        ndx.read_offset_list(data, 0)
    with pytest.raises(ndx.OutOfBoundsError):
        ndx.read_offset_list(data, 100)


def test_read_section_by_index():
    data = make_ndx({6: [0x20, 0x40], 7: [0x60]})
    assert ndx.read_section(data, ndx.Offset(6)) == [0x20, 0x40]
    assert ndx.read_section(data, ndx.Offset(7)) == [0x60]
    assert ndx.read_section(data, ndx.Offset(8)) == []


def test_read_section_by_tag():
    data = bytearray(make_ndx({3: [0x123]}))
    data[0x10:0x18] = UINT32LE.pack(3) + b'SKLS'
    assert ndx.read_section(bytes(data), ndx.Tag('SKLS')) == [0x123]


def test_parse_section_id():
    assert ndx.parse_section_id('6') == ndx.Offset(6)
    assert ndx.parse_section_id('OAN1') == ndx.Tag('OAN1')
    assert str(ndx.Offset(6)) == '6'
    assert str(ndx.Tag('OAN1')) == 'OAN1'


def test_load_asset(tmp_path):
    (tmp_path / 'drak24.ndx').write_bytes(b'index')
    (tmp_path / 'drak24.dat').write_bytes(b'data')
    asset = ndx.load_asset('drak24', tmp_path)
    assert asset == ndx.Asset('drak24', b'index', b'data')


def test_load_asset_missing(tmp_path):
    (tmp_path / 'drak24.ndx').write_bytes(b'index')
    with pytest.raises(FileNotFoundError) as excinfo:
        ndx.load_asset('drak24', tmp_path)
    assert str(excinfo.value.filename).endswith('drak24.dat')


def test_non_ascii_tag_is_not_found():
    data = UINT32LE.pack(3) + b'OAN1' + b'\0' * 8
    with pytest.raises(ndx.NotFoundError):
        ndx.resolve_section_offset(data, ndx.Tag('OAN\xe91'))


def test_section_key():
    assert ndx.Offset(6).key == 6
    assert ndx.Tag('DK64').key == 'DK64'
