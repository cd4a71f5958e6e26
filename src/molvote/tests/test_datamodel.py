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
Test the molvote.datamodel module.
"""

from datetime import timedelta
from unittest import TestCase

import molvote.datamodel as datamodel
from molvote.datamodel import Candidate, MemberVotes, Round, RoundParticipation
from molvote.tests.testhelpers import NOW, make_ballot, make_group, make_round


class DataModelModuleTest(TestCase):

    """
    Test the functions in molvote.datamodel.
    """

    def test_make_indexes_by_id(self):
        candidates = [Candidate(id_='b'), Candidate(id_='a')]
        actual = datamodel.make_indexes_by_id(candidates)
        self.assertEqual(actual, {'b': 0, 'a': 1})


class CandidateTest(TestCase):

    def test_repr(self):
        candidate = Candidate(id_='a', name='Anna ' + 100 * 'a')
        expected = "<Candidate id='a' name='Anna " + 35 * 'a' + "'...>"
        self.assertEqual(repr(candidate), expected)


class RoundTest(TestCase):

    def test_display_name(self):
        cases = [
            (dict(name='Finale', episode_number=10), 'Finale'),
            (dict(episode_number=3), 'Round 3'),
            (dict(), 'Round r7'),
        ]
        for kwargs, expected in cases:
            with self.subTest(kwargs=kwargs):
                round_ = Round(id_='r7', **kwargs)
                self.assertEqual(round_.display_name, expected)

    def test_status(self):
        round_ = make_round(start=NOW, days=7)
        cases = [
            (NOW - timedelta(seconds=1), 'upcoming', False),
            # The start is inclusive.
            (NOW, 'active', True),
            (NOW + timedelta(days=7) - timedelta(seconds=1), 'active', True),
            # The end is exclusive.
            (NOW + timedelta(days=7), 'completed', False),
        ]
        for now, expected_status, expected_active in cases:
            with self.subTest(now=now):
                self.assertEqual(round_.status(now), expected_status)
                self.assertEqual(round_.is_active(now), expected_active)

    def test_get_candidate(self):
        round_ = make_round(candidate_ids=('a', 'b'))
        self.assertEqual(round_.get_candidate('b').name, 'B')
        self.assertIsNone(round_.get_candidate('z'))


class GroupTest(TestCase):

    def test_has_member(self):
        group = make_group(members=['u1', 'u2'])
        self.assertTrue(group.has_member('u2'))
        self.assertFalse(group.has_member('u3'))


class BallotTest(TestCase):

    def test_key_and_total(self):
        ballot = make_ballot('u1', 'r2', a=30, b=70)
        self.assertEqual(ballot.key, ('u1', 'r2'))
        self.assertEqual(ballot.total_points, 100)


class RoundParticipationTest(TestCase):

    def test_percent(self):
        cases = [
            ((1, 3), 33),
            ((2, 3), 67),
            ((1, 2), 50),
            ((3, 3), 100),
            ((0, 0), 0),
        ]
        for (voted, total), expected in cases:
            with self.subTest(voted=voted, total=total):
                item = RoundParticipation('r1', voted, total)
                self.assertEqual(item.percent, expected)

    def test_init__invalid_counts(self):
        cases = [
            (4, 3),
            (1, 0),
            (-1, 3),
        ]
        for voted, total in cases:
            with self.subTest(voted=voted, total=total):
                with self.assertRaises(ValueError):
                    RoundParticipation('r1', voted, total)


class MemberVotesTest(TestCase):

    def test_top(self):
        votes = MemberVotes('u1', [('c', 50), ('a', 30), ('b', 15), ('d', 5)])
        self.assertEqual(votes.top, [('c', 50), ('a', 30), ('b', 15)])
        self.assertEqual(votes.other_points, 5)
        self.assertEqual(votes.total_points, 100)
        self.assertEqual(list(votes.points), ['c', 'a', 'b', 'd'])
