#
# molvote - point-allocation voting and results for "mol" prediction games
# Copyright (C) 2025  The molvote authors
#
# This file is part of molvote.
#
# molvote is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.
#

"""
The budget ledger: how one ballot's fixed budget of points is divided
among the candidates.

An "allocations" value is a dict mapping candidate id to points.  None
of the functions here change their arguments.  Instead they return new
dicts, so callers can keep older states around (e.g. for undo).

Interactive input is never rejected.  Values are coerced and clamped so
the allocated total can't exceed the budget: a candidate can always be
lowered, but can only be raised using points that are still available.
"""

from collections import OrderedDict
import logging
import math

import molvote.utils as utils


_log = logging.getLogger(__name__)

DEFAULT_BUDGET = 100
DEFAULT_STEP = 5


def coerce_points(value):
    """
    Convert an input value to an int number of points.

    Malformed input (None, the empty string, non-numeric text, NaN,
    infinities, etc.) becomes 0.  Fractional values are truncated.

    >>> coerce_points('42')
    42
    >>> coerce_points('abc')
    0
    """
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value

    if isinstance(value, str):
        value = value.strip()
        try:
            return int(value)
        except ValueError:
            pass

    try:
        value = float(value)
    except (TypeError, ValueError):
        _log.debug(f'treating malformed points value as 0: {utils.truncate(value)}')
        return 0

    if not math.isfinite(value):
        return 0

    return int(value)


def clamp(value, lower, upper):
    return min(max(lower, value), upper)


def total_points(allocations):
    return sum(allocations.values())


def remaining(allocations, budget=DEFAULT_BUDGET):
    """
    Return the number of points still available.
    """
    return budget - total_points(allocations)


def max_allowed(allocations, candidate_id, budget=DEFAULT_BUDGET):
    """
    Return the highest value the given candidate can be set to without
    taking points from anyone else.
    """
    others_total = total_points(allocations) - allocations.get(candidate_id, 0)

    return budget - others_total


def set_candidate_points(allocations, candidate_id, requested_value, budget=DEFAULT_BUDGET):
    """
    Set a candidate's points, and return `(new_allocations, applied_value)`.

    The requested value is first clamped to `[0, budget]` and then capped
    at max_allowed().

    Args:
      allocations: a dict mapping candidate id to points.
      candidate_id: the candidate to change.
      requested_value: the new value.  This can be raw widget input
        (see coerce_points()).
    """
    requested = clamp(coerce_points(requested_value), 0, budget)
    # A ledger that is already over budget (e.g. from bad stored data)
    # can still be lowered, so don't let the cap go negative.
    cap = max(max_allowed(allocations, candidate_id, budget=budget), 0)
    applied = min(requested, cap)

    new_allocations = OrderedDict(allocations)
    new_allocations[candidate_id] = applied

    return (new_allocations, applied)


def snap_to_step(value, step=DEFAULT_STEP):
    """
    Round a value to the nearest multiple of step, rounding halves up.

    >>> snap_to_step(12)
    10
    >>> snap_to_step(13)
    15
    """
    value = coerce_points(value)

    return utils.round_half_up(value / step) * step
