"""Image finder: glob expansion, random pick, newest pick.

Patterns are relative to the images root and matched segment by segment,
case-insensitively. A file matches when its relative path matches
`<pattern>/**/*.jpg`, or matches `<pattern>` itself and is a `.jpg`.

Nothing is cached: every call walks the tree again.
"""

import fnmatch
import logging
import os
import random
import re
from pathlib import Path
from typing import List, Optional, Sequence, Tuple
from urllib.parse import quote

logger = logging.getLogger(__name__)

IMAGE_EXTENSION = ".jpg"
URL_PREFIX = "/images/"

# None stands for a `**` segment
Segment = Optional["re.Pattern[str]"]

_rng = random.SystemRandom()


class SelectionError(Exception):
    """The tree or a file's metadata could not be read."""


class PatternError(SelectionError):
    """The glob pattern is malformed."""


def _compile_segment(segment: str) -> "re.Pattern[str]":
    return re.compile(fnmatch.translate(segment), re.IGNORECASE)


_IMAGE_SEGMENT = _compile_segment("*" + IMAGE_EXTENSION)


def compile_pattern(pattern: str) -> List[Segment]:
    """
    Split a glob pattern into per-segment matchers.

    Raises:
        PatternError: `**` inside a segment, or a `..` segment
    """
    segments: List[Segment] = []
    for part in pattern.replace("\\", "/").split("/"):
        if part in ("", "."):
            continue
        if part == "..":
            raise PatternError(f"pattern must stay under the images root: {pattern!r}")
        if part == "**":
            segments.append(None)
        elif "**" in part:
            raise PatternError(f"'**' must be a whole path segment: {pattern!r}")
        else:
            segments.append(_compile_segment(part))
    return segments


def _match(segments: Sequence[Segment], parts: Sequence[str]) -> bool:
    if not segments:
        return not parts
    head, rest = segments[0], segments[1:]
    if head is None:
        return any(_match(rest, parts[i:]) for i in range(len(parts) + 1))
    return bool(parts) and head.match(parts[0]) is not None and _match(rest, parts[1:])


def matches(segments: Sequence[Segment], parts: Tuple[str, ...]) -> bool:
    """True when the relative path `parts` is selected by the compiled pattern."""
    if _match(list(segments) + [None, _IMAGE_SEGMENT], parts):
        return True
    return bool(parts) and parts[-1].lower().endswith(IMAGE_EXTENSION) and _match(segments, parts)


def _raise(exc: OSError) -> None:
    raise exc


def expand(root: Path, pattern: str) -> List[Path]:
    """
    List every file under `root` matching `pattern`.

    Order is deterministic: directories and files are visited sorted by name.

    Raises:
        PatternError: malformed pattern
        SelectionError: part of the tree could not be read
    """
    segments = compile_pattern(pattern)
    found: List[Path] = []
    try:
        for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
            dirnames.sort()
            base = Path(dirpath)
            prefix = base.relative_to(root).parts
            for name in sorted(filenames):
                path = base / name
                # StaticFiles will not serve links that leave the root
                if matches(segments, prefix + (name,)) and path.is_file() and not path.is_symlink():
                    found.append(path)
    except OSError as exc:
        raise SelectionError(f"cannot read images under {root}: {exc}") from exc
    logger.debug("Pattern %r matched %d images under %s", pattern, len(found), root)
    return found


def creation_time(path: Path) -> float:
    """
    Creation timestamp of `path`.

    Uses `st_birthtime` where the platform reports it, the modification
    time otherwise.

    Raises:
        SelectionError: the file could not be stat'ed
    """
    try:
        st = os.stat(path)
    except OSError as exc:
        raise SelectionError(f"cannot read metadata of {path}: {exc}") from exc
    birth = getattr(st, "st_birthtime", None)
    return float(birth) if birth is not None else float(st.st_mtime)


def pick_random(root: Path, pattern: str) -> Optional[Path]:
    """Uniformly random match, or None when nothing matches."""
    images = expand(root, pattern)
    if not images:
        return None
    return _rng.choice(images)


def pick_newest(root: Path, pattern: str) -> Optional[Path]:
    """Match with the latest creation time; ties go to the first in walk order."""
    images = expand(root, pattern)
    if not images:
        return None
    return max(images, key=creation_time)


def relative_url(root: Path, image: Path) -> str:
    """
    Static-file URL for `image`, e.g. `/data/images/2024/a.jpg` under
    `/data/images` becomes `/images/2024/a.jpg`. Names are percent-encoded.
    """
    try:
        relative = image.relative_to(root)
    except ValueError as exc:
        raise SelectionError(f"{image} is not under {root}") from exc
    return URL_PREFIX + quote(relative.as_posix())
