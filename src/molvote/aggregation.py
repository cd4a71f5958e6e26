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
Support for combining ballots into ranked results.
"""

from collections import OrderedDict
import logging

from molvote.datamodel import AggregateResult, CandidateResult, make_indexes_by_id
from molvote.errors import DataIntegrityWarning
import molvote.utils as utils


_log = logging.getLogger(__name__)


def tally_points(candidate_ids, ballots):
    """
    Sum the points each candidate received, and return
    `(totals, warnings)`.

    Args:
      candidate_ids: the ids of the candidates to count, in roster order.
      ballots: an iterable of Ballot objects.

    Returns:
      totals: an OrderedDict mapping every candidate id to its total,
        including candidates with no points.
      warnings: a list of DataIntegrityWarning objects, one for each
        ballot entry whose candidate id isn't in `candidate_ids`.
    """
    totals = OrderedDict((candidate_id, 0) for candidate_id in candidate_ids)
    warnings = []

    for ballot in ballots:
        for candidate_id, points in ballot.allocations.items():
            if candidate_id not in totals:
                warning = DataIntegrityWarning(ballot.user_id, round_id=ballot.round_id,
                                               candidate_id=candidate_id, points=points)
                _log.warning(str(warning))
                warnings.append(warning)
                continue

            totals[candidate_id] += points

    return (totals, warnings)


def rank_results(candidates, totals, ballot_count, mol_ids=None, warnings=None):
    """
    Create and return an AggregateResult object.

    Args:
      candidates: the Candidate objects, in roster order.
      totals: a dict mapping candidate id to total points.
      ballot_count: the number of ballots the totals came from.
      mol_ids: the ids of the candidates to flag as the mol.
    """
    if mol_ids is None:
        mol_ids = set()

    roster_indexes = make_indexes_by_id(candidates)
    all_points = sum(totals.values())

    results = []
    for candidate in candidates:
        total = totals[candidate.id]
        result = CandidateResult(
            candidate,
            total_points=total,
            percentage=utils.compute_average(total, ballot_count),
            share=utils.compute_percent(total, all_points),
            is_mol=(candidate.id in mol_ids),
            roster_index=roster_indexes[candidate.id],
        )
        results.append(result)

    # sorted() is stable, so ties keep roster order.
    results = sorted(results, key=lambda result: -result.total_points)

    return AggregateResult(results, ballot_count=ballot_count, warnings=warnings)


def get_mol_ids(rounds):
    """
    Return the ids of the candidates revealed as the mol in any of the
    given rounds, as a set.
    """
    return {
        round_.mol_candidate_id for round_ in rounds
            if round_.mol_revealed and round_.mol_candidate_id is not None
    }


def aggregate(round_, ballots):
    """
    Combine the ballots for a round into an AggregateResult.

    Every candidate on the roster appears in the result, including
    candidates without any points.  Points for candidates not on the
    roster are dropped (see tally_points()).

    Args:
      round_: a Round object.
      ballots: a sequence of Ballot objects for the round.
    """
    ballots = list(ballots)
    candidates = round_.candidates

    totals, warnings = tally_points(round_.candidate_ids, ballots)
    mol_ids = get_mol_ids([round_])

    _log.debug(f'aggregated {len(ballots)} ballots for: {round_!r}')

    return rank_results(candidates, totals, ballot_count=len(ballots), mol_ids=mol_ids,
                        warnings=warnings)
