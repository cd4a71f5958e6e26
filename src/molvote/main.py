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
Program to report on the votes in a molvote export.

The report is written to stdout (or to the output directory, if one is
given), followed by a JSON summary of the run.
"""

import argparse
import json
import logging
from pathlib import Path
from textwrap import dedent

import molvote.aggregation as aggregation
import molvote.configlib as configlib
import molvote.dataloading as dataloading
from molvote.dataloading import INPUT_FILE_NAME
import molvote.reporting as reporting
from molvote.reporting import RESULTS_TEMPLATE_NAME
import molvote.rollup as rollup
from molvote.rollup import ALL_ROUNDS
import molvote.utils as utils
from molvote.utils import DEFAULT_JSON_DUMPS_ARGS


_log = logging.getLogger(__name__)

VERSION='0.1.0'     # Program version

#--- Command line arguments: ---

DESCRIPTION = """\
Report on the points allocated in a molvote export.

A JSON summary of the run is written to stdout at the end of the script.
"""

def parse_args(args=None):
    """
    Parse sys.argv (or the given args) and return a Namespace object.
    """
    parser = argparse.ArgumentParser(description=DESCRIPTION,
                    formatter_class=argparse.RawDescriptionHelpFormatter)

    parser.add_argument('--version', action='version', version='%(prog)s '+VERSION)
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='enable verbose info printout')
    parser.add_argument('--debug', action='store_true', help='enable debug printout')
    parser.add_argument('--config-path', '-c', dest='config_path', metavar='PATH',
                        help='path to the configuration file to use')
    input_help = dedent(f"""\
    path to the directory containing the input data files (e.g. the
    {INPUT_FILE_NAME} file).
    """)
    parser.add_argument('--input-dir', metavar='PATH', help=input_help)
    parser.add_argument('--round', dest='round_id', metavar='ID',
                        help=('the round to report on, or "all" for every round. '
                              'Defaults to the latest completed round.'))

    scope = parser.add_mutually_exclusive_group()
    scope.add_argument('--group', dest='group_id', metavar='ID',
                       help='report on the votes of a group')
    scope.add_argument('--user', dest='user_id', metavar='ID',
                       help="report on a single user's votes")

    parser.add_argument('--template-dir', metavar='DIR',
                        help=('directory to search for templates before the '
                              'templates that ship with molvote.'))
    parser.add_argument('--output-dir', metavar='DIR',
                        help=('the directory to write the report to. '
                              'Defaults to writing the report to stdout.'))
    parser.add_argument('--tsv', action='store_true',
                        help='also write the results as TSV files.')
    parser.add_argument('--xlsx', action='store_true',
                        help='also write the results as an XLSX file.')
    parser.add_argument('--build-time', metavar='DATETIME',
                        help=('the datetime to use as the current time, '
                              'in the format "2025-03-02 20:00:00". '
                              'Defaults to the current datetime.'))

    ns = parser.parse_args(args)

    return ns


#--- Utility Routines: ---

def select_rounds(store, selection, now):
    """
    Return the rounds to report on, as a list of Round objects.

    Args:
      store: a BallotStore object.
      selection: a round id, ALL_ROUNDS, or None for the latest
        completed round.
      now: an aware datetime object.
    """
    if selection == ALL_ROUNDS:
        return store.list_rounds()

    if selection is None:
        round_ = rollup.latest_completed_round(store.list_rounds(), now)
        if round_ is None:
            raise RuntimeError('no round has been completed yet: pass --round to choose one')
    else:
        round_ = store.get_round(selection)
        if round_ is None:
            raise RuntimeError(f'--round: unknown round id: {selection!r}')

    return [round_]


def make_title(rounds, selection, group=None, user_id=None):
    if selection == ALL_ROUNDS:
        rounds_label = 'All rounds'
    else:
        rounds_label = rounds[0].display_name

    if group is not None:
        owner = group.name or group.id
    else:
        owner = user_id

    return f'{owner}: {rounds_label}'


def format_output(build_time, title, result, output_dir=None, paths=None,
    off_budget_count=0):
    """
    Return the output data and its JSON form.
    """
    if paths is None:
        paths = []

    output_data = dict(
        build_time=build_time.isoformat(),
        title=title,
        ballot_count=result.ballot_count,
        top_suspects=[entry.candidate_id for entry in result.top_suspects(1)],
        files=[str(path) for path in paths],
        off_budget_count=off_budget_count,
    )
    if output_dir is not None:
        output_data['output_dir'] = str(output_dir)

    output = json.dumps(output_data, **DEFAULT_JSON_DUMPS_ARGS)

    return (output_data, output)


#--- Top level processing: ---

def run(config_path=None, input_dir=None, round_id=None, group_id=None, user_id=None,
    template_dir=None, output_dir=None, tsv=False, xlsx=False, build_time=None):
    """
    Args:
      config_path: optional path to the config file, as a string.
      input_dir: required path to the input directory, as a string.
      round_id: a round id, ALL_ROUNDS, or None for the latest completed
        round.
      group_id: the group to report on.
      user_id: the user to report on, if no group is given.
      template_dir: an optional directory to search for templates first.
      output_dir: the directory to write the report and exports to.
        Defaults to writing the report to stdout.
      build_time: an aware datetime to use as the current time.  This is
        exposed to permit reproducible builds more easily.
    """
    if build_time is None:
        build_time = utils.now_utc()

    config = configlib.Config(config_path)

    if input_dir is None:
        raise RuntimeError('--input-dir not provided')

    input_dir = Path(input_dir)
    if not input_dir.is_dir():
        raise RuntimeError(f'--input-dir is not a directory: {input_dir}')

    if group_id is None and user_id is None:
        raise RuntimeError('one of --group or --user must be provided')

    if (tsv or xlsx) and output_dir is None:
        raise RuntimeError('--tsv and --xlsx require --output-dir')

    store = dataloading.load_store(input_dir / INPUT_FILE_NAME)

    group = None
    if group_id is not None:
        group = store.get_group(group_id)
        if group is None:
            raise RuntimeError(f'--group: unknown group id: {group_id!r}')

    rounds = select_rounds(store, round_id, now=build_time)
    _log.debug(f'reporting on rounds: {rounds!r}')

    round_ballot_sets = [
        (round_, store.list_ballots(round_.id, group_id=group_id, user_id=user_id))
        for round_ in rounds
    ]
    if round_id == ALL_ROUNDS:
        result = rollup.combined_across_rounds(round_ballot_sets)
        report_round = None
    else:
        round_, ballots = round_ballot_sets[0]
        result = aggregation.aggregate(round_, ballots)
        report_round = round_

    ballots = [ballot for _, round_ballots in round_ballot_sets for ballot in round_ballots]
    off_budget_ballots = reporting.find_off_budget_ballots(ballots, budget=config['budget'])

    participations = None
    member_votes = None
    if group is not None:
        participations = rollup.participation_by_round(rounds, group.members, ballots)
        member_votes = rollup.member_votes(ballots, group.members,
                                           top_count=config['top_count'])

    title = make_title(rounds, round_id, group=group, user_id=user_id)
    context = reporting.make_report_context(title, result, round_=report_round, group=group,
                    rounds=rounds, participations=participations,
                    member_votes=member_votes, top_count=config['top_count'],
                    budget=config['budget'], off_budget_ballots=off_budget_ballots)

    title = make_title(rounds, round_id, group=group, user_id=user_id)
    context = reporting.make_report_context(title, result, round_=report_round, group=group,
                    rounds=rounds, participations=participations,
                    member_votes=member_votes, top_count=config['top_count'])

    template_dirs = [] if template_dir is None else [Path(template_dir)]
    env = configlib.create_jinja_env(template_dirs=template_dirs, lang=config['lang'])

    paths = []
    if output_dir is None:
        text = utils.process_template(env, RESULTS_TEMPLATE_NAME, context=context)
        print(text, end='')
    else:
        output_dir = Path(output_dir)
        report_path = output_dir / f'{reporting.make_export_name(title)}.txt'
        utils.process_template(env, RESULTS_TEMPLATE_NAME, output_path=report_path,
                               context=context)
        paths.append(report_path)

        if tsv:
            paths.extend(reporting.write_tsv_exports(output_dir, context))
        if xlsx:
            paths.append(reporting.write_xlsx_export(output_dir, context))

    output_data, output = format_output(build_time, title, result, output_dir=output_dir,
                                        paths=paths, off_budget_count=len(off_budget_ballots))

    print(output)

    return output_data


def main(args=None):
    ns = parse_args(args)

    if ns.debug:
        level = logging.DEBUG
    elif ns.verbose:
        level = logging.INFO
    else:
        level = logging.ERROR

    logging.basicConfig(level=level)

    build_time = ns.build_time
    if build_time is not None:
        build_time = utils.parse_datetime(build_time)

    run(config_path=ns.config_path, input_dir=ns.input_dir, round_id=ns.round_id,
        group_id=ns.group_id, user_id=ns.user_id, template_dir=ns.template_dir,
        output_dir=ns.output_dir, tsv=ns.tsv, xlsx=ns.xlsx, build_time=build_time)
