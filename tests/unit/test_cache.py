#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#

# pylint: disable=redefined-outer-name,missing-docstring

import random

import pytest

from awsrunas import cache


def test_lazy_value_is_computed_once(mocker):
    refresh_fn = mocker.Mock(side_effect=random.random)
    lv = cache.LazyValue(refresh_fn)
    assert not lv.is_loaded()

    value = lv.value()
    assert lv.is_loaded()
    assert lv.value() == value
    assert lv.value() == value
    refresh_fn.assert_called_once()


def test_lazy_value_is_not_computed_on_init(mocker):
    refresh_fn = mocker.Mock()
    cache.LazyValue(refresh_fn)
    refresh_fn.assert_not_called()


def test_lazy_value_failure_is_not_remembered(mocker):
    refresh_fn = mocker.Mock(side_effect=[RuntimeError("boom"), "ok"])
    lv = cache.LazyValue(refresh_fn)

    with pytest.raises(RuntimeError):
        lv.value()
    assert not lv.is_loaded()

    assert lv.value() == "ok"
    assert lv.is_loaded()


def test_lazy_value_caches_none(mocker):
    refresh_fn = mocker.Mock(return_value=None)
    lv = cache.LazyValue(refresh_fn)
    assert lv.value() is None
    assert lv.value() is None
    refresh_fn.assert_called_once()
