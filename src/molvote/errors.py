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
The exception and warning classes raised by molvote.

Interactive editing never raises: the ledger clamps instead.  The only
hard gate is the budget check when a ballot is submitted.
"""

import molvote.utils as utils


class ValidationError(ValueError):

    """
    Raised when a ballot is submitted whose points don't add up to the
    budget exactly.

    Instance attributes:

      total: the number of points allocated.
      budget: the number of points the ballot must add up to.
      difference: `budget - total`.  This is positive if points are still
        remaining, and negative if the ballot is over the budget.
    """

    def __init__(self, total, budget):
        self.total = total
        self.budget = budget
        self.difference = budget - total

        super().__init__(self.make_message())

    def make_message(self):
        difference = self.difference
        if difference > 0:
            points = utils.pluralize(difference, 'point')
            return f'You still have {points} to distribute. Please allocate all {self.budget} points.'

        points = utils.pluralize(-difference, 'point')
        return f'Your ballot is {points} over the budget of {self.budget} points.'

    @property
    def remaining(self):
        """
        Return the points still available (0 if over the budget).
        """
        if self.difference is None:
            return None
        return max(self.difference, 0)

    @property
    def excess(self):
        """
        Return the number of points over the budget (0 if under).
        """
        if self.difference is None:
            return None
        return max(-self.difference, 0)


class InvalidPointsError(ValidationError):

    """
    Raised when a ballot is submitted with a candidate value that isn't
    a whole number from 0 to the budget.

    The `total` and `difference` attributes are None, since the total of
    such a ballot isn't meaningful.
    """

    def __init__(self, candidate_id, points, budget):
        self.candidate_id = candidate_id
        self.points = points
        self.total = None
        self.budget = budget
        self.difference = None

        # ValidationError.__init__() needs a total.
        ValueError.__init__(self, self.make_message())

    def make_message(self):
        return (f'Invalid points for candidate {self.candidate_id!r}: {self.points!r} '
                f'(must be a whole number from 0 to {self.budget}).')


class RoundClosedError(RuntimeError):

    """
    Raised when writing a ballot for a round that isn't accepting votes.
    """

    def __init__(self, round_, now):
        self.round = round_
        self.now = now
        super().__init__(f'{round_!r} is not accepting votes at {now.isoformat()} '
                         f'(status: {round_.status(now)})')


class StoreError(RuntimeError):

    """
    Raised by a ballot store when loading or saving fails.
    """


class RecordError(ValueError):

    """
    Raised when a raw store record can't be converted to a data model
    object.
    """


class DataIntegrityWarning(UserWarning):

    """
    A non-fatal record of a ballot entry that was dropped while
    aggregating, because it references a candidate not on the roster.
    """

    def __init__(self, user_id, round_id, candidate_id, points):
        self.user_id = user_id
        self.round_id = round_id
        self.candidate_id = candidate_id
        self.points = points

        msg = (f'ignoring {utils.pluralize(points, "point")} for unknown candidate '
               f'{candidate_id!r} (user {user_id!r}, round {round_id!r})')
        super().__init__(msg)
