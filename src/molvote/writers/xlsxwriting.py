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
Writing the results exports as Excel XLSX workbooks.

Each table becomes one worksheet.  The first row of a table is its
header: it is written in bold and frozen.  Columns are widened to fit
their longest value.
"""

from contextlib import contextmanager
import logging

import xlsxwriter


_log = logging.getLogger(__name__)

# The widths of the narrowest and widest columns, in characters.
MIN_COLUMN_WIDTH = 6
MAX_COLUMN_WIDTH = 40

DECIMAL_NUMBER_FORMAT = '0.00'


class XLSXSheet:

    """
    Wraps one worksheet, and tracks the next row to write.
    """

    def __init__(self, worksheet, formats):
        """
        Args:
          worksheet: an xlsxwriter.worksheet.Worksheet object.
          formats: a dict with the workbook's "header" and "decimal"
            Format objects.
        """
        self.worksheet = worksheet
        self.formats = formats
        self.row_count = 0
        self.column_widths = []

    def __repr__(self):
        return f'<XLSXSheet name={self.worksheet.name!r} rows={self.row_count}>'

    def _cell_format(self, value, is_header):
        if is_header:
            return self.formats['header']
        if type(value) is float:
            return self.formats['decimal']

        return None

    def _note_width(self, column, value):
        width = len('' if value is None else str(value))
        if column >= len(self.column_widths):
            self.column_widths.append(MIN_COLUMN_WIDTH)
        self.column_widths[column] = max(self.column_widths[column], width)

    def write_row(self, values, is_header=False):
        row = self.row_count
        for column, value in enumerate(values):
            self.worksheet.write(row, column, value, self._cell_format(value, is_header))
            self._note_width(column, value)

        if is_header:
            self.worksheet.freeze_panes(row + 1, 0)

        self.row_count += 1

    def fit_columns(self):
        for column, width in enumerate(self.column_widths):
            self.worksheet.set_column(column, column, min(width + 1, MAX_COLUMN_WIDTH))


class XLSXBook:

    """
    Wraps an XLSX workbook being written.
    """

    def __init__(self, path):
        """
        Args:
          path: the path to write to, as a path-like object.
        """
        _log.info(f'writing XLSX file: {path}')
        self.workbook = xlsxwriter.Workbook(str(path))
        self.formats = {
            'header': self.workbook.add_format({'bold': True}),
            'decimal': self.workbook.add_format({'num_format': DECIMAL_NUMBER_FORMAT}),
        }
        self.sheets = []
        self.closed = False

    def __repr__(self):
        return f'<XLSXBook sheets={len(self.sheets)} closed={self.closed}>'

    def add_sheet(self, name=None, rows=None, has_header=True):
        """
        Add a worksheet, and return its XLSXSheet object.

        Args:
          name: the worksheet name.  Defaults to e.g. "Sheet1".
          rows: the table to write, as an iterable of sequences.
          has_header: whether the first row is a header row.
        """
        sheet = XLSXSheet(self.workbook.add_worksheet(name), formats=self.formats)
        for row in (rows or []):
            sheet.write_row(row, is_header=(has_header and sheet.row_count == 0))
        sheet.fit_columns()

        self.sheets.append(sheet)

        return sheet

    def close(self):
        _log.debug(f'closing: {self!r}')
        self.workbook.close()
        self.closed = True


@contextmanager
def creating_workbook(path):
    """
    Yield a new XLSXBook object, and close it on exit.
    """
    book = XLSXBook(path)
    try:
        yield book
    finally:
        book.close()
