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
Test the molvote.writers.xlsxwriting module.
"""

from pathlib import Path
from tempfile import TemporaryDirectory
from unittest import TestCase

import molvote.writers.xlsxwriting as xlsxwriting
import molvote.testing.xlstesting as xlstesting


class XLSXBookTest(TestCase):

    def test_add_sheet(self):
        rows1 = [
            ('id', 'name'),
            ('a', 'Anna'),
            ('b', 'Bart'),
        ]
        rows2 = [
            ('id', 'points', 'is_mol'),
            ('a', 40, False),
            ('b', 60, True),
        ]

        with TemporaryDirectory() as temp_dir:
            temp_dir = Path(temp_dir)
            path = temp_dir / 'test.xlsx'

            with xlsxwriting.creating_workbook(path) as book:
                book.add_sheet(rows=rows1)
                sheet = book.add_sheet('Points', rows=rows2)

            self.assertTrue(book.closed)
            self.assertEqual(sheet.row_count, 3)

            wb = xlstesting.load(path)
            try:
                # Check the sheet names.
                actual = xlstesting.get_sheet_names(wb)
                expected = ['Sheet1', 'Points']
                self.assertEqual(actual, expected)

                # Check the data in the second sheet, for example.
                sheet = wb.worksheets[1]
                actual_rows = xlstesting.get_sheet_rows(sheet)
                self.assertEqual(actual_rows, rows2)
            finally:
                wb.close()

    def test_add_sheet__no_rows(self):
        with TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / 'test.xlsx'
            with xlsxwriting.creating_workbook(path) as book:
                sheet = book.add_sheet('Empty')

            self.assertEqual(sheet.row_count, 0)
            sheets = xlstesting.read_workbook(path)

        self.assertEqual(list(sheets), ['Empty'])

    def test_column_widths(self):
        rows = [
            ('id', 'name'),
            ('a', 'Anna ' + 30 * 'a'),
            ('b', None),
        ]
        with TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / 'test.xlsx'
            with xlsxwriting.creating_workbook(path) as book:
                sheet = book.add_sheet('Names', rows=rows)

        self.assertEqual(sheet.column_widths, [xlsxwriting.MIN_COLUMN_WIDTH, 35])
        self.assertEqual(repr(book), '<XLSXBook sheets=1 closed=True>')
