"""Collision-free output paths."""

from __future__ import annotations

import logging
from pathlib import Path

from elite_shots.exceptions import ResolutionExhaustedError

logger = logging.getLogger(__name__)

OUTPUT_EXTENSION = ".png"
HIGHRES_SUFFIX = "-highres"
MAX_COUNTER = 9999


def resolve_output_path(base_name: str, directory: str | Path, suffix: str = "") -> Path:
    """
    Return ``directory/<base_name><suffix>.png``, or the first free
    numbered variant ``<base_name><suffix>_0001.png``, ``_0002``, … when
    that name is already taken.

    The existence check and the later write are not atomic: two
    conversions resolving the same name at the same moment may both get
    the same path.  Screenshots are taken by hand, so this is accepted.
    """
    directory = Path(directory)
    stem = f"{base_name}{suffix}"
    candidate = directory / f"{stem}{OUTPUT_EXTENSION}"
    if not candidate.exists():
        return candidate

    for n in range(1, MAX_COUNTER + 1):
        candidate = directory / f"{stem}_{n:04d}{OUTPUT_EXTENSION}"
        if not candidate.exists():
            logger.debug("'%s%s' is taken, using %s", stem, OUTPUT_EXTENSION, candidate.name)
            return candidate

    raise ResolutionExhaustedError(
        f"All {MAX_COUNTER} numbered variants of '{stem}{OUTPUT_EXTENSION}' "
        f"already exist in '{directory}'."
    )
