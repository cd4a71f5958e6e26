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
Simple helper functions.
"""

from datetime import datetime, timezone
import json
import logging
import math
import re
import unicodedata

import babel.dates
import dateutil.parser
import yaml


_log = logging.getLogger(__name__)

ENGLISH_LANG = 'en'

UTF8_ENCODING = 'utf-8'

ELEMENT_ID_SEP = '-'
# A regex pattern matching one or more consecutive hyphens (ELEMENT_ID_SEP).
ELEMENT_ID_PATTERN = re.compile('-+')

# Our options for pretty-printing JSON for increased human readability.
DEFAULT_JSON_DUMPS_ARGS = dict(sort_keys=True, indent=4, ensure_ascii=False)


def truncate(obj):
    """
    Return an object representation guaranteed not to exceed a reasonable
    length.  This is useful e.g. for logging.
    """
    if type(obj) != str:
        obj = repr(obj)
    if len(obj) > 40:
        # Add an ellipsis to indicate that a truncation occurred.
        return f'{obj[:40]!r}...'

    return repr(obj)


def pluralize(count, singular, plural=None):
    """
    Return e.g. "1 point" or "5 points".
    """
    if plural is None:
        plural = f'{singular}s'
    word = singular if abs(count) == 1 else plural

    return f'{count} {word}'


def format_number(num):
    """
    Format a number for display, e.g.

    >>> format_number(9999)
    '9,999'
    """
    if num is None: return ''
    return f'{num:,}'


def compute_average(total, count):
    """
    Return total / count, or 0 if the count is 0.

    >>> compute_average(90, 2)
    45.0
    >>> compute_average(10, 0)
    0
    """
    if not count:
        return 0

    return total / count


def compute_percent(numer, denom):
    """
    Compute a numeric percent, given a numerator and denominator.

    This returns a number even if the denominator is 0.

    >>> compute_percent(1, 3)
    33.333333333333336
    >>> compute_percent(1, 0)
    0
    """
    if not denom:
        return 0

    if numer == denom:
        # Special-casing equality ensures e.g. that 100 is returned instead
        # of 99.99999999999 in certain floating-point edge cases (like 1/3).
        quotient = 1
    else:
        quotient = numer / denom

    return 100 * quotient


def round_half_up(value):
    """
    Round a number to the nearest integer, rounding halves up (unlike
    Python's built-in round(), which rounds halves to even).

    >>> round_half_up(2.5)
    3
    """
    return math.floor(value + 0.5)


def format_percent(percent):
    """
    Format a percentage for display.

    >>> format_percent(12.44)
    '12.4%'
    """
    if percent is None:
        return ''
    return f'{percent:.1f}%'


def _convert_fragment(char):
    if unicodedata.category(char)[0] in ('L', 'N'):  # letter or number
        return char

    return ELEMENT_ID_SEP


def make_element_id(text):
    """
    Create an element id (or file name stem) from text.

    Examples:

    >>> make_element_id('Round 3 - All Rounds')
    'round-3-all-rounds'
    """
    element_id = ''.join(_convert_fragment(char) for char in text.lower())
    # Collapse consecutive hyphens.
    element_id = re.sub(ELEMENT_ID_PATTERN, ELEMENT_ID_SEP, element_id)
    # Strip trailing dashes (for cosmetic reasons).
    element_id = element_id.rstrip(ELEMENT_ID_SEP)

    return element_id


def strip_trailing_whitespace(text):
    """
    Strip trailing whitespace from the end of each line.
    """
    lines = text.splitlines()
    text = ''.join(line.rstrip() + '\n' for line in lines)

    return text


def now_utc():
    return datetime.now(timezone.utc)


def ensure_aware(dt):
    """
    Return the datetime back, interpreting a naive datetime as UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt


def parse_datetime(dt_string):
    """
    Parse an ISO 8601 string and return an aware datetime.datetime object.

    Args:
      dt_string: a datetime string, e.g. "2025-03-02T20:00:00+01:00" or
        "2025-03-02 20:00:00".  Strings without an offset are taken as UTC.
    """
    dt = dateutil.parser.isoparse(dt_string)

    return ensure_aware(dt)


def format_date(date, lang, format_=None):
    """
    Args:
      date: a datetime.date object.
      lang: a language code or locale (e.g. "en" or "nl_BE").
    """
    if format_ is None:
        format_ = 'long'
    return babel.dates.format_date(date, format=format_, locale=lang)


def read_json(filepath):
    """
    Read the specified json file into a python data structure.
    """
    _log.debug(f'read_json({filepath})')
    with open(filepath, encoding=UTF8_ENCODING) as f:
        data = json.load(f)

    return data


def read_yaml(filepath):
    """
    Read the specified yaml file into a python data structure.
    """
    _log.debug(f'read_yaml({filepath})')
    with open(filepath, encoding=UTF8_ENCODING) as f:
        data = yaml.safe_load(f)

    return data


def process_template(env, template_name, output_path=None, context=None):
    """
    Render a template, and return the rendered text.

    Args:
      env: a Jinja2 Environment object.
      template_name: template to expand.
      output_path: an optional path-like object to write the rendered
        text to.  The parent directory is created if necessary.
      context: optional context data, as a dict.
    """
    if context is None:
        context = {}

    _log.debug(f'process_template: {template_name} -> {output_path}')
    template = env.get_template(template_name)
    rendered = template.render(context)
    # Strip trailing whitespace as a normalization step to simplify
    # testing.
    rendered = strip_trailing_whitespace(rendered)

    if output_path is not None:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(rendered, encoding=UTF8_ENCODING)
        _log.info(f'Processed template {template_name} and wrote to: {output_path}')

    return rendered
