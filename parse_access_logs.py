"""Parse helpers for vhost-prefixed access log lines.

A line looks like ``<vhost> <combined log entry>``, e.g.::

    www.example.com 203.0.113.5 - - [14/Mar/2024:10:22:31 +0000] "GET / HTTP/1.1" 200 512

Every stage returns its value or a ``Discard``; none of them raise for bad input.
"""
import re
from dataclasses import dataclass
from typing import List, Tuple, Union

MONTH_MAP = {'Jan':1,'Feb':2,'Mar':3,'Apr':4,'May':5,'Jun':6,
             'Jul':7,'Aug':8,'Sep':9,'Oct':10,'Nov':11,'Dec':12}

# [DD/Mon/YYYY:HH:MM:SS +OOOO], month is checked against MONTH_MAP after the match
_TIME_RE = re.compile(
    rb'\[([0-9]{2})/(.{3})/([0-9]{4}):([0-9]{2}):([0-9]{2}):([0-9]{2}) ([+-][0-9]{4})\]'
)

SPACE = b' '


def printable(raw: bytes) -> str:
    # log-safe text: undecodable bytes become \xNN escapes
    return raw.decode('utf-8', 'backslashreplace')


@dataclass(frozen=True)
class Discard:
    kind: str          # fixed category, safe to count on
    reason: str = ''   # human readable, may quote input
    diagnose: bool = False


@dataclass(frozen=True)
class AccessTime:
    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: int
    offset: int  # raw signed value, +0530 -> 530


# -------- field scanner --------
def scan_fields(line: bytes) -> Union[Tuple[bytes, bytes], Discard]:
    """Split a raw line into (vhost, payload) on spaces only; tabs are not separators."""
    rest = line.lstrip(SPACE)
    domain, _, access = rest.partition(SPACE)
    access = access.lstrip(SPACE)
    if not domain:
        return Discard('empty_domain')
    if not access:
        return Discard('empty_payload')
    return domain, access


# -------- domain splitter --------
def split_domain(domain: str) -> List[str]:
    # keeps empty labels: 'a..b' -> ['a', '', 'b']
    return domain.split('.')

def second_level_domain(domain: str) -> Union[str, Discard]:
    parts = split_domain(domain)
    if len(parts) < 2:
        return Discard('short_domain')
    return parts[-2] + '.' + parts[-1]


# -------- timestamp extractor --------
def decode_month(token: str) -> Union[int, Discard]:
    month = MONTH_MAP.get(token)
    if month is None:
        return Discard('invalid_month', f"Invalid month '{token}'", diagnose=True)
    return month

def extract_datetime(entry: bytes) -> Union[AccessTime, Discard]:
    m = _TIME_RE.search(entry)
    if not m:
        return Discard('no_timestamp', 'Date & time not found or not complete', diagnose=True)
    day, mon, year, hour, minute, second, offset = m.groups()
    month = decode_month(printable(mon))
    if isinstance(month, Discard):
        return month
    return AccessTime(
        year=int(year), month=month, day=int(day),
        hour=int(hour), minute=int(minute), second=int(second),
        offset=int(offset),
    )
