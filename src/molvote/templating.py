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
Includes custom template filters.
"""

import logging

from jinja2 import pass_context

import molvote.utils as utils
from molvote.utils import ENGLISH_LANG


_log = logging.getLogger(__name__)


def get_language(context):
    """
    Return the currently active language code (e.g. "en").
    """
    return context.get('lang') or ENGLISH_LANG


def _format_date(context, date, format_=None, lang=None):
    if lang is None:
        lang = get_language(context)

    try:
        return utils.format_date(date, lang=lang, format_=format_)
    except Exception:
        raise RuntimeError(f'error formatting date: {date!r}')


@pass_context
def format_date(context, day, format_=None, lang=None):
    """
    Format a date in the form "February 5, 2025" (internationalized).

    Args:
      day: a datetime.date or datetime.datetime object.
      format_: a string format parameter, either the standard "short",
        "medium", "long", or "full" (default is "long"), or a pattern in
        the Locale Data Markup Language specification.
    """
    return _format_date(context, day, format_=format_, lang=lang)


@pass_context
def format_datetime(context, dt):
    """
    Format a datetime in a "long" form, e.g. "November 1, 2025 17:34 UTC".

    Args:
      dt: an aware datetime object.
    """
    formatted_date = _format_date(context, dt)
    formatted_time = dt.strftime('%H:%M %Z')

    return f'{formatted_date} {formatted_time}'.rstrip()


def join_names(entries, sep=', '):
    """
    Join the candidate names of a sequence of CandidateResult objects,
    falling back to the candidate id if a candidate has no name.
    """
    return sep.join(entry.candidate.name or entry.candidate_id for entry in entries)
