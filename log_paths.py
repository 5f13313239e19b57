import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_ROOT = '/home/httpd'

_SUFFIX_RE = re.compile(r'[a-z]*')


@dataclass(frozen=True)
class SplitterConfig:
    """Process-wide settings, built once in main() and passed down."""
    root: str = DEFAULT_ROOT
    suffix: str = ''


@dataclass(frozen=True)
class Destination:
    directory: Path
    file: Path


def suffix_from_arg(arg: Optional[str]) -> str:
    # 'ssl-v2' -> '.ssl'; only the leading run of a-z counts
    if not arg:
        return ''
    word = _SUFFIX_RE.match(arg).group(0)
    return '.' + word if word else ''

def lead_zero(s: str, num: int = 2) -> str:
    """Left-pad ``s`` with zeroes up to ``num`` chars.

    Strings starting with a non-digit are returned untouched so the helper
    is safe on arbitrary text, not only on encoded numbers.
    """
    if s and not '0' <= s[0] <= '9':
        return s
    return s.rjust(num, '0')

def resolve_destination(config: SplitterConfig, sld: str, year: int, month: int,
                        domain: str) -> Destination:
    # ${ROOT}/${SLD}/logs/${YYYY}-${MM}${SUFFIX}/${DOMAIN}
    # plain joins: a label starting with '/' must not replace the root
    month_dir = f"{lead_zero(str(year), 4)}-{lead_zero(str(month))}{config.suffix}"
    directory = Path(f"{config.root}/{sld}/logs/{month_dir}")
    return Destination(directory=directory, file=Path(f"{directory}/{domain}"))
