"""Optional thread pool for per-file checksum computation.

Each task opens its own file handle and never raises for I/O problems, so a
failing file cannot disturb the others. ``Executor.map`` yields results in
submission order, which keeps manifests and error lists identical to the
sequential run.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Sequence, Tuple

from keeper.common import compute_file_checksum

logger = logging.getLogger(__name__)


def checksum_files(
    paths: Sequence[Path],
    buffer_size: int,
    workers: int = 1,
) -> List[Tuple[int, bool]]:
    """Compute ``(checksum, ok)`` for every path, in input order.

    Args:
        paths: Files to checksum
        buffer_size: Read buffer size in bytes
        workers: Number of threads; 1 computes sequentially

    Raises:
        ValueError: If buffer_size or workers is smaller than 1
    """
    if buffer_size < 1:
        raise ValueError(f"buffer_size must be at least 1, got {buffer_size}")
    if workers < 1:
        raise ValueError(f"workers must be at least 1, got {workers}")

    if workers == 1 or len(paths) < 2:
        return [compute_file_checksum(path, buffer_size) for path in paths]

    logger.debug(f"Checksumming in parallel: {{'files': {len(paths)}, 'workers': {workers}}}")
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="keeper-checksum") as pool:
        return list(pool.map(lambda path: compute_file_checksum(path, buffer_size), paths))
