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
Test the molvote.aggregation module.
"""

from unittest import TestCase

import molvote.aggregation as aggregation
from molvote.errors import DataIntegrityWarning
from molvote.tests.testhelpers import make_ballot, make_round


class AggregationModuleTest(TestCase):

    """
    Test the functions in molvote.aggregation.
    """

    def test_tally_points(self):
        ballots = [
            make_ballot('u1', c1=60, c2=40),
            make_ballot('u2', c1=30, c2=70),
        ]
        totals, warnings = aggregation.tally_points(['c1', 'c2', 'c3'], ballots)
        self.assertEqual(list(totals.items()), [('c1', 90), ('c2', 110), ('c3', 0)])
        self.assertEqual(warnings, [])

    def test_tally_points__stale_candidate(self):
        ballots = [
            make_ballot('u1', c1=60, gone=40),
        ]
        with self.assertLogs('molvote.aggregation', level='WARNING'):
            totals, warnings = aggregation.tally_points(['c1', 'c2'], ballots)

        self.assertEqual(dict(totals), {'c1': 60, 'c2': 0})
        self.assertEqual(len(warnings), 1)
        warning = warnings[0]
        self.assertIsInstance(warning, DataIntegrityWarning)
        self.assertEqual((warning.user_id, warning.round_id, warning.candidate_id,
                          warning.points), ('u1', 'r1', 'gone', 40))

    def test_aggregate(self):
        round_ = make_round(candidate_ids=('c1', 'c2'))
        ballots = [
            make_ballot('u1', c1=60, c2=40),
            make_ballot('u2', c1=30, c2=70),
        ]
        result = aggregation.aggregate(round_, ballots)

        self.assertEqual(result.ballot_count, 2)
        self.assertEqual([entry.candidate_id for entry in result], ['c2', 'c1'])
        self.assertEqual([entry.total_points for entry in result], [110, 90])
        self.assertEqual([entry.percentage for entry in result], [55, 45])
        for entry, expected in zip(result, [55, 45]):
            self.assertAlmostEqual(entry.share, expected)
        self.assertEqual(result.total_points, 200)

    def test_aggregate__no_ballots(self):
        round_ = make_round(candidate_ids=('a', 'b', 'c'))
        result = aggregation.aggregate(round_, [])

        self.assertEqual(len(result), 3)
        self.assertEqual(result.ballot_count, 0)
        for entry in result:
            with self.subTest(candidate_id=entry.candidate_id):
                self.assertEqual(entry.total_points, 0)
                self.assertEqual(entry.percentage, 0)
                self.assertEqual(entry.share, 0)
        # Ties keep roster order.
        self.assertEqual([entry.candidate_id for entry in result], ['a', 'b', 'c'])

    def test_aggregate__empty_roster(self):
        round_ = make_round(candidate_ids=())
        result = aggregation.aggregate(round_, [make_ballot('u1', a=100)])

        self.assertEqual(len(result), 0)
        self.assertEqual(result.ballot_count, 1)
        self.assertEqual(len(result.warnings), 1)

    def test_aggregate__ties_keep_roster_order(self):
        round_ = make_round(candidate_ids=('a', 'b', 'c', 'd'))
        ballots = [
            make_ballot('u1', a=10, b=40, c=10, d=40),
        ]
        result = aggregation.aggregate(round_, ballots)
        self.assertEqual([entry.candidate_id for entry in result], ['b', 'd', 'a', 'c'])

        least = result.least_suspects(2)
        self.assertEqual([entry.candidate_id for entry in least], ['a', 'c'])
        top = result.top_suspects(1)
        self.assertEqual([entry.candidate_id for entry in top], ['b'])

    def test_aggregate__deterministic(self):
        round_ = make_round(candidate_ids=('a', 'b', 'c'))
        ballots = [
            make_ballot('u1', a=50, b=50, c=0),
            make_ballot('u2', a=0, b=50, c=50),
            make_ballot('u3', a=50, b=0, c=50),
        ]
        first = aggregation.aggregate(round_, ballots)
        second = aggregation.aggregate(round_, list(reversed(ballots)))

        def summarize(result):
            return [(entry.candidate_id, entry.total_points) for entry in result]

        self.assertEqual(summarize(first), summarize(second))
        self.assertEqual(summarize(first), [('a', 100), ('b', 100), ('c', 100)])

    def test_aggregate__mol_flag(self):
        cases = [
            # (mol_revealed, expected mol ids)
            (True, ['c1']),
            (False, []),
        ]
        ballots = [
            make_ballot('u1', c1=0, c2=100, c3=0),
        ]
        for mol_revealed, expected in cases:
            with self.subTest(mol_revealed=mol_revealed):
                round_ = make_round(candidate_ids=('c1', 'c2', 'c3'),
                                    mol_revealed=mol_revealed, mol_candidate_id='c1')
                result = aggregation.aggregate(round_, ballots)
                actual = [entry.candidate_id for entry in result if entry.is_mol]
                self.assertEqual(actual, expected)
                # The mol's position in the ranking is unaffected.
                self.assertEqual(result.results[0].candidate_id, 'c2')

    def test_aggregate__get_result(self):
        round_ = make_round(candidate_ids=('a', 'b'))
        result = aggregation.aggregate(round_, [make_ballot('u1', a=30, b=70)])
        self.assertEqual(result.get_result('a').total_points, 30)
        with self.assertRaises(KeyError):
            result.get_result('x')

    def test_get_mol_ids(self):
        rounds = [
            make_round('r1', mol_revealed=True, mol_candidate_id='a'),
            make_round('r2', mol_revealed=False, mol_candidate_id='b'),
            make_round('r3', mol_revealed=True),
        ]
        self.assertEqual(aggregation.get_mol_ids(rounds), {'a'})
