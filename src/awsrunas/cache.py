#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#
"""Provides the ability to compute a single value at most once.

## Overview

The module provides `LazyValue`, which is responsible for the lazy loading of a
value that, once obtained, is kept for the lifetime of the holder. It is used
wherever aws-runas must not repeat a call to AWS: the caller identity lookup,
the role session name, and the credentials themselves. The following example
demonstrates its use:

    >>> import time
    >>> lv = LazyValue(time.ctime)
    >>> lv.is_loaded()
    False
    >>> lv.value(); time.sleep(5); lv.value()
    'Sat Jul 13 15:04:30 2019'
    'Sat Jul 13 15:04:30 2019'

Both values are the same because the `refresh_fn` is only called the first
time. If `refresh_fn` raises an exception, nothing is saved and the exception
propagates, so the next call to `value` will try again.
"""

import logging
import threading

LOG = logging.getLogger(__name__)


class LazyValue:
    """Represents a lazily loaded value that never expires.

    The constructor takes a `refresh_fn` function of zero arguments, which is
    called to obtain the value the first time `value` is invoked. At the time
    of instantiation, the value is not retrieved. This class is thread-safe.
    """

    def __init__(self, refresh_fn):
        self._refresh_fn = refresh_fn
        self._lock = threading.Lock()
        self._value = None
        self._loaded = False

    def value(self):
        """Returns the value, calling `refresh_fn` only the first time."""
        with self._lock:
            if self._loaded:
                LOG.debug("Loading value from cache")
                return self._value

            value = self._refresh_fn()
            self._value = value
            self._loaded = True
            LOG.debug("Saving value to cache")
            return value

    def is_loaded(self):
        """Returns `True` if the value has already been obtained."""
        return self._loaded
