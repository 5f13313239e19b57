#!/usr/bin/env python3
import os, sys, logging, argparse
from pathlib import Path
from typing import BinaryIO, Dict, Optional, Union
from dotenv import load_dotenv
from logging.handlers import RotatingFileHandler

from parse_access_logs import Discard, printable, scan_fields, second_level_domain, extract_datetime
from log_paths import DEFAULT_ROOT, Destination, SplitterConfig, resolve_destination, suffix_from_arg

DIR_MODE = 0o755   # rwxr-xr-x
FILE_MODE = 0o644  # rw-r--r--
OPEN_FLAGS = os.O_WRONLY | os.O_CREAT | os.O_APPEND

# -------- logging --------
def setup_logger(log_dir: Optional[Path] = None, level: str = 'WARNING'):
    logger = logging.getLogger("split_access_logs")
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    fmt = logging.Formatter("%(asctime)s %(levelname)s %(message)s")
    logger.handlers.clear()
    sh = logging.StreamHandler(sys.stderr)
    sh.setFormatter(fmt)
    logger.addHandler(sh)
    if log_dir:
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(log_dir / "split-access-logs.log", maxBytes=10_000_000, backupCount=7,
                                 encoding='utf-8')
        fh.setFormatter(fmt)
        logger.addHandler(fh)
    return logger

# -------- counters --------
class SplitStats:
    def __init__(self):
        self.read = 0
        self.written = 0
        self.skipped = 0
        self.errors = 0
        self.by_kind: Dict[str, int] = {}

    def record_discard(self, discard: Discard):
        if discard.diagnose:
            self.errors += 1
        else:
            self.skipped += 1
        self.by_kind[discard.kind] = self.by_kind.get(discard.kind, 0) + 1

    def summary(self):
        kinds = " ".join(f"{k}={n}" for k, n in sorted(self.by_kind.items()))
        return (f"read={self.read} written={self.written} skipped={self.skipped} errors={self.errors}"
                + (f" ({kinds})" if kinds else ""))

# -------- append helpers --------
def write_long(fd: int, data: bytes):
    """Write all of ``data``, retrying short writes. OSError propagates."""
    view = memoryview(data)
    while view:
        written = os.write(fd, view)
        view = view[written:]

def append_entry(dest: Destination, payload: bytes) -> Optional[Discard]:
    shown = printable(os.fsencode(dest.file))
    # only the month level is created; ${ROOT}/${SLD}/logs must already exist
    try:
        os.mkdir(dest.directory, DIR_MODE)
    except OSError:
        pass  # EEXIST is the normal case, anything else fails the open below
    try:
        fd = os.open(dest.file, OPEN_FLAGS, FILE_MODE)
    except OSError as ex:
        return Discard('open_failed', f"Cannot open {shown}: {ex.strerror or ex}", diagnose=True)
    try:
        write_long(fd, payload + b'\n')
    except OSError as ex:
        return Discard('write_failed', f"Cannot write {shown}: {ex.strerror or ex}", diagnose=True)
    finally:
        os.close(fd)
    return None

# -------- router --------
def route_entry(line: bytes, config: SplitterConfig) -> Union[Destination, Discard]:
    fields = scan_fields(line)
    if isinstance(fields, Discard):
        return fields
    raw_domain, access = fields
    domain = os.fsdecode(raw_domain)

    sld = second_level_domain(domain)
    if isinstance(sld, Discard):
        return sld

    log_time = extract_datetime(access)
    if isinstance(log_time, Discard):
        return log_time

    dest = resolve_destination(config, sld, log_time.year, log_time.month, domain)
    failed = append_entry(dest, access)
    if failed is not None:
        return failed
    return dest

# -------- stream driver --------
def run(stream: BinaryIO, config: SplitterConfig, logger: logging.Logger, stats: Optional[SplitStats] = None) -> int:
    stats = stats if stats is not None else SplitStats()
    logger.info(f"Split started: root={config.root!r} suffix={config.suffix!r}")
    for chunk in stream:
        stats.read += 1
        line = chunk[:-1] if chunk.endswith(b'\n') else chunk
        try:
            result = route_entry(line, config)
        except Exception as ex:
            # every line is independent, keep reading
            stats.errors += 1
            logger.error(f"Unexpected exception while processing access log entry: {ex!r}")
            continue
        if isinstance(result, Discard):
            stats.record_discard(result)
            if result.diagnose:
                logger.warning(f"Exception while processing access log entry: {result.reason}")
        else:
            stats.written += 1
    logger.info(f"Split finished: {stats.summary()}")
    return 0

def load_env():
    load_dotenv(override=True)
    return {
        'HTTPD_ROOT': os.getenv('HTTPD_ROOT', DEFAULT_ROOT),
        'SPLITTER_LOG_DIR': os.getenv('SPLITTER_LOG_DIR', ''),
        'SPLITTER_LOG_LEVEL': os.getenv('SPLITTER_LOG_LEVEL', 'WARNING'),
    }

def main(argv=None):
    ap = argparse.ArgumentParser(description='Split a vhost-prefixed access log stream into per-domain monthly logs.',
                                 add_help=False, allow_abbrev=False)
    ap.add_argument('suffix', nargs='?', default=None,
                    help='Log directory suffix; only the leading a-z run is used (e.g. "ssl" -> 2024-03.ssl)')
    # the web server may pass anything here, even -h; unknown options are ignored
    args, _ = ap.parse_known_args(argv)

    env = load_env()
    log_dir = Path(env['SPLITTER_LOG_DIR']) if env['SPLITTER_LOG_DIR'] else None
    logger = setup_logger(log_dir, env['SPLITTER_LOG_LEVEL'])
    config = SplitterConfig(root=env['HTTPD_ROOT'], suffix=suffix_from_arg(args.suffix))
    return run(sys.stdin.buffer, config, logger)

if __name__ == "__main__":
    sys.exit(main())
