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
Support for creating TSV files.
"""

import logging
from pathlib import Path

from molvote.utils import UTF8_ENCODING


_log = logging.getLogger(__name__)

TSV_SUFFIX = '.tsv'

TSV_SOURCE_CHAR_MAP = '\n\t'
TSV_FILE_CHAR_MAP = '␤␉'

# Newlines and tabs inside values are written as the Unicode "symbol for"
# characters so that each row stays on one line.
map_tsv_data = str.maketrans(TSV_SOURCE_CHAR_MAP, TSV_FILE_CHAR_MAP)


def make_tsv_path(dir_path, name):
    """
    Return the path to the file, as a Path object.

    Args:
      dir_path: the directory in which to write the TSV file, as a
        path-like object.
      name: the base name, without the file suffix.
    """
    base_path = Path(dir_path) / name
    path = base_path.with_suffix(TSV_SUFFIX)

    return path


def format_value(value):
    if value is None:
        return ''
    if type(value) is bool:
        return 'Y' if value else 'N'

    return str(value).translate(map_tsv_data)


def make_tsv_file(path, rows):
    _log.info(f'writing TSV file: {path}')
    with Path(path).open('w', encoding=UTF8_ENCODING) as f:
        for row in rows:
            line = '\t'.join(format_value(value) for value in row) + '\n'
            f.write(line)
