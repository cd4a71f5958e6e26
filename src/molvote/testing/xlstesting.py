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
This module provides support for testing our XLSX-related code.

It exposes functions for reading and introspecting XLSX files.
"""

from collections import OrderedDict

import openpyxl


def load(path):
    """
    Return a Workbook object.

    Args:
      path: the path to an xlsx file, as a path-like object.
    """
    wb = openpyxl.load_workbook(filename=path, read_only=True)

    return wb


def get_sheet_names(wb):
    """
    Return the names of the sheets, as a list of strings.

    Args:
      wb: a Workbook object.
    """
    return wb.sheetnames


def get_sheet_rows(sheet):
    """
    Return the values in a worksheet, as a list of tuples.
    """
    return [tuple(cell.value for cell in row) for row in sheet.rows]


def read_workbook(path):
    """
    Read an xlsx file, and return an OrderedDict mapping each sheet name
    to its rows (see get_sheet_rows()).

    The workbook is closed before returning.
    """
    wb = load(path)
    try:
        return OrderedDict(
            (name, get_sheet_rows(wb[name])) for name in get_sheet_names(wb)
        )
    finally:
        wb.close()
