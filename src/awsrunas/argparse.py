#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#
"""Provides additional actions and formatters for the builtin argparse module."""

import argparse


class RawAndDefaultsFormatter(
    argparse.ArgumentDefaultsHelpFormatter, argparse.RawDescriptionHelpFormatter
):
    """Mixin of ArgumentDefaultsHelpFormatter and RawDescriptionHelpFormatter.

    The argparse module does not allow for easy combinations of help formatters.
    This class combines the raw formatter, so the examples in the CLI
    description keep their layout, along with the default args formatter.
    """


def positive_int(value):
    """Argparse type that converts `value` to an int greater than zero.

        >>> parser = argparse.ArgumentParser()
        >>> parser.add_argument('--duration', type=positive_int)
        >>> parser.parse_args(['--duration', '3600'])
        Namespace(duration=3600)
        >>> parser.parse_args(['--duration', '0'])
        usage: ...
        error: argument --duration: must be a positive integer: '0'
    """
    try:
        number = int(value)
    except ValueError:
        number = 0
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer: {value!r}")
    return number
