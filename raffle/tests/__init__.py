# -*- coding: utf-8 -*-
"""
raffle.tests
============

Test package for the raffle engine. Importing it pins a few environment
defaults so local runs behave like CI.
"""
from __future__ import annotations

import os


def _set_if_absent(key: str, value: str) -> None:
    if not os.environ.get(key):
        os.environ[key] = value


_set_if_absent("PYTHONHASHSEED", "0")
_set_if_absent("TZ", "UTC")
_set_if_absent("RAFFLE_LOG_FORMAT", "text")
