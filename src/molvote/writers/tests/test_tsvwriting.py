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
Test the molvote.writers.tsvwriting module.
"""

from pathlib import Path
from tempfile import TemporaryDirectory
from textwrap import dedent
from unittest import TestCase

import molvote.writers.tsvwriting as tsvwriting


class TsvWritingModuleTest(TestCase):

    """
    Test the functions in molvote.writers.tsvwriting.
    """

    def test_make_tsv_path(self):
        dir_path = 'my/output'
        cases = [
            ('results', Path('my/output/results.tsv')),
            ('friends-round-1', Path('my/output/friends-round-1.tsv')),
        ]
        for name, expected in cases:
            with self.subTest(name=name):
                actual = tsvwriting.make_tsv_path(dir_path, name)
                self.assertEqual(actual, expected)

    def test_format_value(self):
        cases = [
            (None, ''),
            (True, 'Y'),
            (False, 'N'),
            (0, '0'),
            (45.5, '45.5'),
            ('a\tb\nc', 'a␉b␤c'),
        ]
        for value, expected in cases:
            with self.subTest(value=value):
                actual = tsvwriting.format_value(value)
                self.assertEqual(actual, expected)

    def test_make_tsv_file(self):
        rows = [
            ('candidate_id', 'total_points', 'is_mol'),
            ('a', 100, False),
            ('b', 200, True),
        ]
        expected = dedent("""\
        candidate_id\ttotal_points\tis_mol
        a\t100\tN
        b\t200\tY
        """)
        with TemporaryDirectory() as temp_dir:
            temp_dir = Path(temp_dir)
            path = temp_dir / 'test.tsv'

            tsvwriting.make_tsv_file(path, rows=rows)
            actual = path.read_text(encoding='utf-8')
            self.assertEqual(actual, expected)
