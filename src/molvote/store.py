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
The interface molvote uses to read and write ballots, and an in-memory
implementation of it.

The document store behind a real deployment is outside this package.
A store only needs to implement the BallotStore methods: ballots are
whole documents keyed by (user id, round id), so saving a ballot
replaces any earlier ballot by the same user for the same round.
"""

from collections import OrderedDict
import logging

from molvote.datamodel import Ballot
from molvote.errors import StoreError


_log = logging.getLogger(__name__)


def copy_ballot(ballot):
    """
    Return a copy of a Ballot object that shares no mutable state.
    """
    return Ballot(user_id=ballot.user_id, round_id=ballot.round_id,
                  allocations=ballot.allocations, group_id=ballot.group_id,
                  submitted_at=ballot.submitted_at)


class BallotStore:

    """
    The methods a ballot store must provide.

    Errors reading from or writing to the underlying store should be
    raised as StoreError.
    """

    def load_ballot(self, user_id, round_id):
        """
        Return the user's Ballot for the round, or None.
        """
        raise NotImplementedError()

    def save_ballot(self, ballot):
        """
        Insert or replace the ballot stored under `ballot.key`.
        """
        raise NotImplementedError()

    def list_ballots(self, round_id, group_id=None, user_id=None):
        """
        Return the ballots for a round, as a list.

        If `group_id` is given, only the ballots of that group's members
        are returned.  Otherwise only the ballots of `user_id` are
        returned, so one user never sees another's ballots outside a
        group.
        """
        raise NotImplementedError()

    def get_round(self, round_id):
        """
        Return the Round object with the given id, or None.
        """
        raise NotImplementedError()

    def list_rounds(self):
        """
        Return all Round objects, ordered by start date.
        """
        raise NotImplementedError()

    def get_group(self, group_id):
        """
        Return the Group object with the given id, or None.
        """
        raise NotImplementedError()


class MemoryBallotStore(BallotStore):

    """
    A BallotStore that keeps everything in dicts.
    """

    def __init__(self, rounds=None, groups=None, ballots=None):
        """
        Args:
          rounds: an iterable of Round objects.
          groups: an iterable of Group objects.
          ballots: an iterable of Ballot objects.  A later ballot with
            the same key replaces an earlier one.
        """
        if rounds is None:
            rounds = []
        if groups is None:
            groups = []
        if ballots is None:
            ballots = []

        self._rounds = OrderedDict((round_.id, round_) for round_ in rounds)
        self._groups = OrderedDict((group.id, group) for group in groups)
        self._ballots = OrderedDict()

        for ballot in ballots:
            self.save_ballot(ballot)

    def __repr__(self):
        return (f'<MemoryBallotStore rounds={len(self._rounds)} '
                f'groups={len(self._groups)} ballots={len(self._ballots)}>')

    def load_ballot(self, user_id, round_id):
        ballot = self._ballots.get((user_id, round_id))
        if ballot is None:
            return None

        return copy_ballot(ballot)

    def save_ballot(self, ballot):
        if ballot.user_id is None or ballot.round_id is None:
            raise StoreError(f'ballot is missing its user id or round id: {ballot!r}')

        key = ballot.key
        if key in self._ballots:
            _log.debug(f'replacing ballot: {key!r}')

        self._ballots[key] = copy_ballot(ballot)

    def list_ballots(self, round_id, group_id=None, user_id=None):
        ballots = [
            ballot for ballot in self._ballots.values() if ballot.round_id == round_id
        ]

        if group_id is not None:
            group = self.get_group(group_id)
            if group is None:
                raise StoreError(f'unknown group id: {group_id!r}')
            ballots = [ballot for ballot in ballots if group.has_member(ballot.user_id)]
        elif user_id is not None:
            ballots = [ballot for ballot in ballots if ballot.user_id == user_id]
        else:
            ballots = []

        return [copy_ballot(ballot) for ballot in ballots]

    def get_round(self, round_id):
        return self._rounds.get(round_id)

    def list_rounds(self):
        return sorted(self._rounds.values(), key=lambda round_: round_.start_date)

    def get_group(self, group_id):
        return self._groups.get(group_id)
