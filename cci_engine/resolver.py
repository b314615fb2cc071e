"""
Setting Resolver

Selects the single CCI setting version that governs a given date.
"""

import logging
from datetime import date
from typing import Iterable

from .errors import NoActiveSettingError
from .models import CciSetting

logger = logging.getLogger(__name__)


def resolve_active_setting(settings: Iterable[CciSetting], on_date: date) -> CciSetting:
    """
    Return the setting whose effective window covers ``on_date``.

    When windows overlap, the later ``effective_from`` supersedes the earlier
    one for the dates it covers (ties go to the higher version). The
    ``is_active`` flag is not consulted. Raises NoActiveSettingError when
    nothing covers the date.
    """
    candidates = [s for s in settings if s.covers(on_date)]
    if not candidates:
        raise NoActiveSettingError(on_date)

    chosen = max(candidates, key=lambda s: (s.effective_from, s.version))
    logger.debug("Resolved CCI setting for %s: %s", on_date, chosen.version_info)
    return chosen
