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
Support for turning results into reports: the template context, and the
TSV and XLSX exports.
"""

import logging
from pathlib import Path

from molvote.ledger import DEFAULT_BUDGET
import molvote.utils as utils
import molvote.writers.tsvwriting as tsvwriting
import molvote.writers.xlsxwriting as xlsxwriting


_log = logging.getLogger(__name__)

RESULTS_TEMPLATE_NAME = 'results.txt'

RESULT_HEADERS = ('rank', 'candidate_id', 'name', 'total_points', 'percentage', 'share',
                  'is_mol')

PARTICIPATION_HEADERS = ('round_id', 'round', 'voted_members', 'total_members', 'percent')


def iter_result_rows(result):
    """
    Yield the rows of a results table, starting with the header row.

    Args:
      result: an AggregateResult object.
    """
    yield RESULT_HEADERS

    for rank, entry in enumerate(result, start=1):
        yield (
            rank,
            entry.candidate_id,
            entry.candidate.name,
            entry.total_points,
            round(entry.percentage, 2),
            round(entry.share, 2),
            entry.is_mol,
        )


def iter_participation_rows(participations, rounds_by_id):
    yield PARTICIPATION_HEADERS

    for item in participations:
        round_ = rounds_by_id[item.round_id]
        yield (item.round_id, round_.display_name, item.voted_member_count,
               item.total_member_count, item.percent)


def make_export_name(title):
    """
    Return the base file name to use for a report's exports.
    """
    return utils.make_element_id(title) or 'results'


def find_off_budget_ballots(ballots, budget=DEFAULT_BUDGET):
    """
    Return the ballots whose points don't add up to the budget, logging
    a warning for each.

    Submitted ballots always add up, so these can only come from data
    written some other way, or from a budget that has since changed.
    """
    off_budget = [ballot for ballot in ballots if ballot.total_points != budget]
    for ballot in off_budget:
        points = utils.pluralize(ballot.total_points, 'point')
        _log.warning(f'ballot of user {ballot.user_id!r} in round {ballot.round_id!r} '
                     f'has {points} instead of {budget}')

    return off_budget


def make_report_context(title, result, round_=None, group=None, rounds=None,
    participations=None, member_votes=None, top_count=3, budget=DEFAULT_BUDGET,
    off_budget_ballots=None):
    """
    Return the dict of data to render the results template with.

    Args:
      title: the report title.
      result: an AggregateResult object.
      round_: the Round object, if a single round was selected.
      group: the Group object, if the results are for a group.
      rounds: the Round objects the participation refers to.
      participations: a list of RoundParticipation objects.
      member_votes: a list of MemberVotes objects.
      budget: the number of points a ballot should add up to.
      off_budget_ballots: the Ballot objects that don't add up to the
        budget (see find_off_budget_ballots()).
    """
    if rounds is None:
        rounds = [] if round_ is None else [round_]

    candidate_names = {}
    for round_item in rounds:
        for candidate in round_item.candidates:
            candidate_names.setdefault(candidate.id, candidate.name or candidate.id)

    return dict(
        title=title,
        result=result,
        round_=round_,
        group=group,
        rounds_by_id={round_item.id: round_item for round_item in rounds},
        candidate_names=candidate_names,
        participations=participations or [],
        member_votes=member_votes or [],
        top_count=top_count,
        budget=budget,
        off_budget_ballots=off_budget_ballots or [],
    )


def write_tsv_exports(output_dir, context):
    """
    Write the results (and participation, if any) as TSV files, and
    return the paths written, as a list of Path objects.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    name = make_export_name(context['title'])

    path = tsvwriting.make_tsv_path(output_dir, name)
    tsvwriting.make_tsv_file(path, iter_result_rows(context['result']))
    paths = [path]

    participations = context['participations']
    if participations:
        path = tsvwriting.make_tsv_path(output_dir, f'{name}-participation')
        rows = iter_participation_rows(participations, context['rounds_by_id'])
        tsvwriting.make_tsv_file(path, rows)
        paths.append(path)

    _log.info(f'wrote {len(paths)} TSV files to: {output_dir}')

    return paths


def write_xlsx_export(output_dir, context):
    """
    Write the results as an XLSX file with one worksheet per table, and
    return the path written.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / f"{make_export_name(context['title'])}.xlsx"

    with xlsxwriting.creating_workbook(path) as book:
        book.add_sheet('Results', rows=iter_result_rows(context['result']))
        participations = context['participations']
        if participations:
            rows = iter_participation_rows(participations, context['rounds_by_id'])
            book.add_sheet('Participation', rows=rows)

    _log.info(f'wrote XLSX file: {path}')

    return path
