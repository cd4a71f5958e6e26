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
Class definitions for the rounds, candidates, groups and ballots of a
series, plus the derived result objects computed from them.

The objects are plain containers.  They are created either directly or
from raw store records by the functions in molvote.dataloading.
"""

from collections import OrderedDict
import logging

import molvote.utils as utils
from molvote.utils import truncate


_log = logging.getLogger(__name__)


ROUND_STATUS_UPCOMING = 'upcoming'
ROUND_STATUS_ACTIVE = 'active'
ROUND_STATUS_COMPLETED = 'completed'


def make_index_map(values):
    """
    Return an `indexes_by_value` dict mapping the value to its (0-based)
    index in the list.
    """
    return {value: index for index, value in enumerate(values)}


def make_indexes_by_id(objects):
    """
    Return a dict mapping object id to its (0-based) index in the list.
    """
    return make_index_map(obj.id for obj in objects)


class Candidate:

    """
    A candidate on a round's roster.

    Instance attributes:

      id: a stable string id.
      name:
      eliminated: whether the candidate has left the game.
      age: optional.
    """

    def __init__(self, id_=None, name=None, eliminated=False, age=None):
        self.id = id_
        self.name = name
        self.eliminated = eliminated
        self.age = age

    def __repr__(self):
        return f'<Candidate id={self.id!r} name={truncate(self.name)}>'


class Round:

    """
    A voting round (e.g. one episode).  A round is "active" from its
    start date (inclusive) until its end date (exclusive).

    Instance attributes:

      id:
      start_date: an aware datetime object.
      end_date: an aware datetime object.
      candidates: the roster, as an ordered list of Candidate objects.
      mol_revealed: whether the mol has been revealed for this round.
      mol_candidate_id: the id of the mol, if known.
      name: an optional display name.
      episode_number: an optional int.
    """

    def __init__(self, id_=None, start_date=None, end_date=None, candidates=None,
        mol_revealed=False, mol_candidate_id=None, name=None, episode_number=None):
        if candidates is None:
            candidates = []

        self.id = id_
        self.start_date = start_date
        self.end_date = end_date
        self.candidates = list(candidates)
        self.mol_revealed = mol_revealed
        self.mol_candidate_id = mol_candidate_id
        self.name = name
        self.episode_number = episode_number

    def __repr__(self):
        return f'<Round id={self.id!r}>'

    @property
    def display_name(self):
        if self.name:
            return self.name
        if self.episode_number is not None:
            return f'Round {self.episode_number}'

        return f'Round {self.id}'

    @property
    def candidate_ids(self):
        return [candidate.id for candidate in self.candidates]

    def get_candidate(self, candidate_id):
        """
        Return the Candidate object with the given id, or None.
        """
        for candidate in self.candidates:
            if candidate.id == candidate_id:
                return candidate

        return None

    def is_active(self, now):
        return self.start_date <= now < self.end_date

    def is_completed(self, now):
        return now >= self.end_date

    def status(self, now):
        """
        Return one of "upcoming", "active" or "completed".
        """
        if self.is_completed(now):
            return ROUND_STATUS_COMPLETED
        if self.is_active(now):
            return ROUND_STATUS_ACTIVE

        return ROUND_STATUS_UPCOMING


class Group:

    """
    A group of users who compare their votes.

    Instance attributes:

      id:
      name:
      members: the user ids of the members, as an ordered list.
    """

    def __init__(self, id_=None, name=None, members=None):
        if members is None:
            members = []

        self.id = id_
        self.name = name
        self.members = list(members)

    def __repr__(self):
        return f'<Group id={self.id!r} members={len(self.members)}>'

    def has_member(self, user_id):
        return user_id in self.members


class Ballot:

    """
    One user's point allocation for one round.

    Instance attributes:

      user_id:
      round_id:
      group_id: the group the ballot was cast from, or None.
      allocations: an ordered dict mapping candidate id to points.
      submitted_at: an aware datetime object, or None for a draft.
    """

    def __init__(self, user_id=None, round_id=None, allocations=None, group_id=None,
        submitted_at=None):
        if allocations is None:
            allocations = {}

        self.user_id = user_id
        self.round_id = round_id
        self.group_id = group_id
        self.allocations = OrderedDict(allocations)
        self.submitted_at = submitted_at

    def __repr__(self):
        return f'<Ballot user_id={self.user_id!r} round_id={self.round_id!r}>'

    @property
    def key(self):
        """
        Return the key under which the ballot is stored.
        """
        return (self.user_id, self.round_id)

    @property
    def total_points(self):
        return sum(self.allocations.values())


class CandidateResult:

    """
    A candidate's line in an AggregateResult.

    Instance attributes:

      candidate: a Candidate object.
      total_points: the points received, summed over all ballots.
      percentage: the average points received per ballot.  Since each
        ballot has 100 points, this reads as a percentage.
      share: the candidate's share of all points cast, as a percentage.
      is_mol: whether the candidate has been revealed as the mol.
      roster_index: the (0-based) position of the candidate on the roster.
    """

    def __init__(self, candidate, total_points, percentage, share=0, is_mol=False,
        roster_index=None):
        self.candidate = candidate
        self.total_points = total_points
        self.percentage = percentage
        self.share = share
        self.is_mol = is_mol
        self.roster_index = roster_index

    def __repr__(self):
        return (f'<CandidateResult candidate_id={self.candidate_id!r} '
                f'total_points={self.total_points!r}>')

    @property
    def candidate_id(self):
        return self.candidate.id


class AggregateResult:

    """
    The ranked summary of many ballots.

    Instance attributes:

      results: the CandidateResult objects, starting with the most
        suspected candidate.
      ballot_count: the number of ballots aggregated.
      warnings: a list of DataIntegrityWarning objects for the ballot
        entries that were dropped.
    """

    def __init__(self, results, ballot_count, warnings=None):
        if warnings is None:
            warnings = []

        self.results = list(results)
        self.ballot_count = ballot_count
        self.warnings = list(warnings)

    def __repr__(self):
        return f'<AggregateResult ballots={self.ballot_count} candidates={len(self.results)}>'

    def __iter__(self):
        yield from self.results

    def __len__(self):
        return len(self.results)

    @property
    def total_points(self):
        return sum(result.total_points for result in self.results)

    def get_result(self, candidate_id):
        """
        Return the CandidateResult for a candidate id.

        Raises:
          * `KeyError` if the candidate isn't part of the result.
        """
        for result in self.results:
            if result.candidate_id == candidate_id:
                return result

        raise KeyError(candidate_id)

    def top_suspects(self, count=3):
        return self.results[:count]

    def least_suspects(self, count=3):
        """
        Return the candidates with the fewest points, starting with the
        fewest.  Ties keep roster order.
        """
        # Reversing the ranking would reverse the roster order of ties,
        # so sort again instead.
        ranked = sorted(self.results,
                        key=lambda result: (result.total_points, result.roster_index))

        return ranked[:count]


class RoundParticipation:

    """
    How many members of a group voted in a round.

    Raises:
      * `ValueError` if a count is negative, or more members voted than
        the group has.
    """

    def __init__(self, round_id, voted_member_count, total_member_count):
        if voted_member_count < 0 or voted_member_count > total_member_count:
            raise ValueError(f'invalid participation for round {round_id!r}: '
                             f'{voted_member_count} of {total_member_count} members voted')
        self.round_id = round_id
        self.voted_member_count = voted_member_count
        self.total_member_count = total_member_count

    def __repr__(self):
        return (f'<RoundParticipation round_id={self.round_id!r} '
                f'{self.voted_member_count}/{self.total_member_count}>')

    @property
    def percent(self):
        """
        Return the participation as a whole-number percentage.
        """
        percent = utils.compute_percent(self.voted_member_count, self.total_member_count)

        return utils.round_half_up(percent)


class MemberVotes:

    """
    A member's votes for a group view, summed over the selected rounds.

    Instance attributes:

      user_id:
      points: an ordered dict mapping candidate id to points, starting
        with the most points.
      top: the first `top_count` items of `points`, as (candidate_id,
        points) pairs.
      other_points: the points given to everyone not in `top`.
    """

    def __init__(self, user_id, points, top_count=3):
        self.user_id = user_id
        self.points = OrderedDict(points)

        items = list(self.points.items())
        self.top = items[:top_count]
        self.other_points = sum(value for _, value in items[top_count:])

    def __repr__(self):
        return f'<MemberVotes user_id={self.user_id!r}>'

    @property
    def total_points(self):
        return sum(self.points.values())
