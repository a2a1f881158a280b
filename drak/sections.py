from typing import NamedTuple


SECTION_COUNT = 68


class SectionConfig(NamedTuple):
    has_header: bool = True
    width: int = 0
    height: int = 0


class AssetConfig(NamedTuple):
    ignore: frozenset[int]
    overrides: dict[int, SectionConfig]
    tags: dict[str, tuple[str, SectionConfig]]

    def section_config(self, section) -> SectionConfig:
        if section.key in self.tags:
            return self.tags[section.key][1]
        return self.overrides.get(section.key, SectionConfig())


TILE_64 = SectionConfig(True, 64, 64)


DRAK24 = AssetConfig(
    ignore=frozenset({
        0,  # terrain
        1,
        2,
        3,
        4,
        5,
        8,
        9,
        11,
        12,
        13,
        14,
        15,
        16,
        17,
        18,
        19,
        20,
        21,
        22,
        23,
        25,
        32,
        33,
        34,
        35,
        36,
        37,
        38,  # character portraits
        39,  # character portraits
        40,
        41,
        42,
        43,
        44,
        45,
        46,
        47,
        48,
        49,
        50,
        51,
        52,
        53,
        54,
        55,
        56,
        57,
        58,
        59,
        60,
        61,
        62,
        63,
        64,
        65,
        66,  # discs
        67,
    }),
    overrides={
        **{idx: TILE_64 for idx in range(1, 34)},
        35: TILE_64,
        36: TILE_64,
    },
    # sections that can also be read by their marker in the index
    tags={
        'O241': ('character items held', SectionConfig()),
        'O242': ('character items held', SectionConfig()),
        'O243': ('character items held', SectionConfig()),
        'OAN1': ('all the NL items', SectionConfig()),
        'OAN2': ('?', SectionConfig()),
        'OAN3': ('?', SectionConfig()),
        'TBUT': ('macro bar images', SectionConfig()),
        'DOBS': ('character portraits', SectionConfig()),
        'MSKN1': ('?', SectionConfig()),
        'MKNE2': ('?', SectionConfig()),
        'MSKE3': ('?', SectionConfig()),
        'MKSE4': ('?', SectionConfig()),
        'MSKS5': ('?', SectionConfig()),
        'MKSW6': ('?', SectionConfig()),
        'MSKW7': ('?', SectionConfig()),
        'MKNW': ('?', SectionConfig()),
        'SKLS': ('skill trainer icons', SectionConfig()),
        'ADVS': ('modal dialog icons', SectionConfig()),
        'DISC': ('discipline boxes', SectionConfig()),
        'DK64': ('64x64 tiles', SectionConfig(False, 64, 64)),
        'DK24': ('24x24 tiles', SectionConfig(False, 24, 24)),
    },
)


ASSET_TYPES = {
    'drak24': DRAK24,
}
