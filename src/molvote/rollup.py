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
Support for combining results across a group's rounds.

Selecting a single round versus "all rounds" is done up front by
select_ballot_sets().  The functions that combine results don't treat
"all" specially.
"""

from collections import OrderedDict
import logging

from molvote.aggregation import get_mol_ids, rank_results, tally_points
from molvote.datamodel import MemberVotes, RoundParticipation


_log = logging.getLogger(__name__)

# The selection value meaning every round.
ALL_ROUNDS = 'all'


def select_ballot_sets(rounds, ballots, selection=ALL_ROUNDS):
    """
    Return the `(round, ballots)` pairs for a selection, in round order.

    Args:
      rounds: a sequence of Round objects.
      ballots: an iterable of Ballot objects, for any of the rounds.
      selection: ALL_ROUNDS or a round id.

    Raises:
      * `ValueError` if the selection isn't ALL_ROUNDS or a known round id.
    """
    ballots = list(ballots)

    if selection == ALL_ROUNDS:
        selected = list(rounds)
    else:
        selected = [round_ for round_ in rounds if round_.id == selection]
        if not selected:
            raise ValueError(f'unknown round selection: {selection!r}')

    return [
        (round_, [ballot for ballot in ballots if ballot.round_id == round_.id])
        for round_ in selected
    ]


def combined_across_rounds(round_ballot_sets):
    """
    Combine the ballots of several rounds into one AggregateResult.

    Candidates are matched by id across rounds, and listed in the order
    they are first seen.  Each round's ballots are counted against that
    round's own roster, so a candidate missing from a later roster gets
    no further points.  Percentages are over the ballot count of all
    rounds together.

    Args:
      round_ballot_sets: an iterable of `(round, ballots)` pairs.
    """
    round_ballot_sets = [(round_, list(ballots)) for round_, ballots in round_ballot_sets]

    candidates_by_id = OrderedDict()
    for round_, _ in round_ballot_sets:
        for candidate in round_.candidates:
            candidates_by_id.setdefault(candidate.id, candidate)

    totals = OrderedDict((candidate_id, 0) for candidate_id in candidates_by_id)
    warnings = []
    ballot_count = 0
    for round_, ballots in round_ballot_sets:
        round_totals, round_warnings = tally_points(round_.candidate_ids, ballots)
        for candidate_id, points in round_totals.items():
            totals[candidate_id] += points

        warnings.extend(round_warnings)
        ballot_count += len(ballots)

    rounds = [round_ for round_, _ in round_ballot_sets]
    _log.debug(f'combined {ballot_count} ballots from {len(rounds)} rounds')

    return rank_results(list(candidates_by_id.values()), totals, ballot_count=ballot_count,
                        mol_ids=get_mol_ids(rounds), warnings=warnings)


def participation(round_, group_members, ballots):
    """
    Return a RoundParticipation object for a group and round.

    Args:
      round_: a Round object.
      group_members: the user ids of the group's members.
      ballots: an iterable of Ballot objects.  Ballots for other rounds
        and from non-members are ignored, and a member is counted once.
    """
    members = list(group_members)
    member_ids = set(members)

    voted = {
        ballot.user_id for ballot in ballots
            if ballot.round_id == round_.id and ballot.user_id in member_ids
    }

    return RoundParticipation(round_.id, voted_member_count=len(voted),
                              total_member_count=len(members))


def participation_by_round(rounds, group_members, ballots):
    """
    Return a list of RoundParticipation objects, one for each round.
    """
    ballots = list(ballots)
    group_members = list(group_members)

    return [participation(round_, group_members, ballots) for round_ in rounds]


def member_votes(ballots, group_members, selection=ALL_ROUNDS, top_count=3):
    """
    Return a list of MemberVotes objects, one for each member with at
    least one ballot in the selection, in member order.

    With ALL_ROUNDS, a member's points are summed over all their ballots.
    """
    ballots = list(ballots)

    all_votes = []
    for user_id in group_members:
        user_ballots = [
            ballot for ballot in ballots
                if ballot.user_id == user_id and
                   (selection == ALL_ROUNDS or ballot.round_id == selection)
        ]
        if not user_ballots:
            continue

        points = OrderedDict()
        for ballot in user_ballots:
            for candidate_id, value in ballot.allocations.items():
                points[candidate_id] = points.get(candidate_id, 0) + value

        ranked = sorted(points.items(), key=lambda item: -item[1])
        all_votes.append(MemberVotes(user_id, ranked, top_count=top_count))

    return all_votes


def latest_completed_round(rounds, now):
    """
    Return the completed round with the latest end date, or None.
    """
    completed = [round_ for round_ in rounds if round_.is_completed(now)]
    if not completed:
        return None

    return max(completed, key=lambda round_: round_.end_date)


def active_round(rounds, now):
    """
    Return the active round with the latest start date, or None.
    """
    active = [round_ for round_ in rounds if round_.is_active(now)]
    if not active:
        return None

    return max(active, key=lambda round_: round_.start_date)
