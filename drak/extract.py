import argparse
from collections import deque
from collections.abc import Iterable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
import pathlib
import shutil
import sys

import numpy as np

import dat
import ndx
from sections import ASSET_TYPES, SECTION_COUNT, AssetConfig


@dataclass
class RunStats:
    total_images: int = 0
    skipped_records: int = 0
    failed_sections: list[str] = field(default_factory=list)
    failed_writes: list[tuple[pathlib.Path, BaseException]] = field(default_factory=list)


@dataclass
class SectionRun:
    section: ndx.SectionId
    images: int = 0


def warn(*args):
    print('WARNING:', *args, file=sys.stderr)


def recreate_dir(output_dir) -> pathlib.Path:
    output_dir = pathlib.Path(output_dir)
    if output_dir.exists():
        shutil.rmtree(output_dir)
    output_dir.mkdir(parents=True)
    return output_dir


def save_png(pixels: np.ndarray, path: pathlib.Path) -> None:
    with dat.to_image(pixels) as im:
        im.save(path)


class PngWriter:
    """Encode and write images on a thread pool.

    At most `limit` writes are in flight; submitting more waits for the oldest one.
    Results are collected on the submitting thread, so `stats` is never shared.
    """

    def __init__(self, stats: RunStats, workers: int = 4, limit: int | None = None):
        if workers < 1:
            raise ValueError(f'workers must be at least 1, got {workers}')
        self.stats = stats
        self.limit = limit or 2 * workers
        self.pending: deque[tuple[pathlib.Path, Future]] = deque()
        self._pool = ThreadPoolExecutor(max_workers=workers)

    def submit(self, pixels: np.ndarray, path: pathlib.Path) -> None:
        while len(self.pending) >= self.limit:
            self._collect(*self.pending.popleft())
        self.pending.append((path, self._pool.submit(save_png, pixels, path)))

    def _collect(self, path: pathlib.Path, future: Future) -> None:
        exc = future.exception()
        if exc is not None:
            warn(f'failed to write {path}:', exc)
            self.stats.failed_writes.append((path, exc))

    def close(self) -> None:
        while self.pending:
            self._collect(*self.pending.popleft())
        self._pool.shutdown()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


def default_sections(config: AssetConfig) -> list[ndx.SectionId]:
    return [ndx.Offset(idx) for idx in range(SECTION_COUNT) if idx not in config.ignore]


def parse_section(asset: ndx.Asset, config: AssetConfig, run: SectionRun, output_dir: pathlib.Path, writer: PngWriter, stats: RunStats):
    section = run.section
    print(f'parsing {section} - @image: {stats.total_images}')

    try:
        offsets = ndx.read_section(asset.ndx, section)
    except ndx.NdxError as exc:
        warn(f'section {section}:', exc)
        stats.failed_sections.append(str(section))
        return

    section_config = config.section_config(section)
    for offset in offsets:
        pixels = dat.decode_record(asset.dat, offset, *section_config)
        if pixels is None:
            stats.skipped_records += 1
            continue

        path = output_dir / f'{section}-{run.images}.png'
        run.images += 1
        stats.total_images += 1
        writer.submit(pixels, path)

    print(f'{section}: {run.images} images')


def process_asset(
    asset: ndx.Asset,
    config: AssetConfig,
    output_dir='images',
    sections: Iterable[ndx.SectionId] | None = None,
    workers: int = 4,
) -> RunStats:
    stats = RunStats()
    with PngWriter(stats, workers) as writer:
        output_dir = recreate_dir(output_dir)
        if sections is None:
            sections = default_sections(config)

        for section in sections:
            parse_section(asset, config, SectionRun(section), output_dir, writer, stats)
    return stats


def positive_int(text: str) -> int:
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError(f'must be at least 1, got {value}')
    return value


def main(argv=None):
    parser = argparse.ArgumentParser(description='Extract images from NDX/DAT asset pairs.')
    parser.add_argument('--asset-type', default='drak24', choices=sorted(ASSET_TYPES), help='Asset type, names the .ndx and .dat files')
    parser.add_argument('--data-dir', default='.', help='Directory holding the .ndx and .dat files')
    parser.add_argument('--output-dir', default='images', help='Output directory, recreated on every run')
    parser.add_argument('--sections', type=lambda s: [ndx.parse_section_id(x.strip()) for x in s.split(',') if x.strip()], help='Comma separated section indices or tags, e.g. 6,7,OAN1')
    parser.add_argument('--workers', type=positive_int, default=4, help='Number of PNG writer threads')
    args = parser.parse_args(argv)

    try:
        asset = ndx.load_asset(args.asset_type, args.data_dir)
    except OSError as exc:
        raise SystemExit(f'Cannot read {exc.filename}: {exc.strerror}') from exc

    try:
        stats = process_asset(asset, ASSET_TYPES[args.asset_type], args.output_dir, args.sections, args.workers)
    except OSError as exc:
        raise SystemExit(f'Cannot create output directory {exc.filename}: {exc.strerror}') from exc

    print(
        f'done: {stats.total_images} images,',
        f'{len(stats.failed_sections)} failed sections,',
        f'{stats.skipped_records} skipped records,',
        f'{len(stats.failed_writes)} failed writes',
    )


if __name__ == '__main__':
    main()
