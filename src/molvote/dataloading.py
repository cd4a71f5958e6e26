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
Support for converting raw document-store records (e.g. deserialized
JSON) into our data model objects.

Raw records are loosely typed, so every value passes through a parse
function here before it reaches the rest of the package.  The main
functions this module exposes are load_object() and load_store().
"""

from collections import OrderedDict
from datetime import datetime
import logging

from molvote.datamodel import Ballot, Candidate, Group, Round
from molvote.errors import RecordError
from molvote.store import MemoryBallotStore
import molvote.utils as utils
from molvote.utils import truncate


_log = logging.getLogger(__name__)


INPUT_FILE_NAME = 'molvote.json'

# Marks a key that is absent from the record being loaded.
_MISSING = object()


def parse_as_is(loader, value):
    """
    Return the given value as is, without any validation, etc.
    """
    _log.debug(f'parsing as is: {truncate(value)}')
    return value


def parse_id(loader, value):
    """
    Parse a required id, and return it as a string.

    Numeric ids are converted so that e.g. round 3 can be looked up as "3".
    """
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise RecordError(f'invalid id for {loader!r}: {truncate(value)}')
    value = str(value)
    if not value:
        raise RecordError(f'empty id for {loader!r}')

    return value


def parse_optional_id(loader, value):
    if value is None or value == '':
        return None

    return parse_id(loader, value)


def parse_int(loader, value):
    _log.debug(f'parsing int: {value}')
    if value is None or value == '':
        return None
    if isinstance(value, bool):
        raise RecordError(f'invalid int value for {loader!r}: {value!r}')

    try:
        return int(value)
    except (TypeError, ValueError):
        raise RecordError(f'invalid int value for {loader!r}: {truncate(value)}') from None


def parse_bool(loader, value):
    """
    Convert a value to True or False.  A string value starting with
    Y/T/1 or N/F/0 becomes True or False, and None or the empty string
    becomes False.
    """
    _log.debug(f'parsing bool: {value}')
    if value is None:
        return False
    if type(value) is bool:
        return value
    if type(value) is int:
        return value != 0
    if type(value) is str:
        if value == '':
            return False
        if value[0] in 'YyTt1':
            return True
        if value[0] in 'NnFf0':
            return False

    raise RecordError(f'invalid boolean value for {loader!r}: {truncate(value)}')


def parse_datetime(loader, value):
    """
    Parse a timestamp, and return an aware datetime object.

    Args:
      value: an ISO 8601 string or a datetime object.
    """
    if isinstance(value, datetime):
        return utils.ensure_aware(value)
    if not isinstance(value, str):
        raise RecordError(f'invalid timestamp for {loader!r}: {truncate(value)}')

    try:
        return utils.parse_datetime(value)
    except ValueError:
        raise RecordError(f'invalid timestamp for {loader!r}: {value!r}') from None


def parse_optional_datetime(loader, value):
    if value is None:
        return None

    return parse_datetime(loader, value)


def parse_points(loader, value):
    """
    Parse the points given to a candidate, as a non-negative int.
    """
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise RecordError(f'invalid points value for {loader!r}: {truncate(value)}')
    if value < 0:
        raise RecordError(f'negative points value for {loader!r}: {value}')

    return value


def parse_allocations(loader, value):
    """
    Parse a dict mapping candidate id to points, and return an OrderedDict.
    """
    if not isinstance(value, dict):
        raise RecordError(f'allocations must be a mapping for {loader!r}: {truncate(value)}')

    return OrderedDict(
        (parse_id(loader, candidate_id), parse_points(loader, points))
        for candidate_id, points in value.items()
    )


def parse_candidates(loader, value):
    if not isinstance(value, list):
        raise RecordError(f'candidates must be a list for {loader!r}: {truncate(value)}')

    candidates = [load_object(CandidateLoader(), data) for data in value]

    ids = [candidate.id for candidate in candidates]
    if len(set(ids)) != len(ids):
        raise RecordError(f'duplicate candidate ids for {loader!r}: {ids}')

    return candidates


def parse_members(loader, value):
    """
    Parse a list of user ids.  A member listed more than once is kept once.
    """
    if not isinstance(value, list):
        raise RecordError(f'members must be a list for {loader!r}: {truncate(value)}')

    members = [parse_id(loader, user_id) for user_id in value]

    return list(OrderedDict.fromkeys(members))


class AutoAttr:

    """
    Defines a key-value to read when loading raw data, and how to load it.
    """

    def __init__(self, attr_name, load_value, data_key=None, required=False):
        """
        Args:
          attr_name: the name of the attribute to set.
          load_value: the function to call when loading.  The function
            should have the signature load_value(loader, value).
          data_key: the name of the key to access from the raw data.
            Defaults to attr_name.
          required: whether the data_key is required to be present.
        """
        if data_key is None:
            data_key = attr_name

        self.attr_name = attr_name
        self.data_key = data_key
        self.load_value = load_value
        self.required = required

    def __repr__(self):
        # Using __qualname__ instead of __name__ includes also the class
        # name and not just the function / method name.
        try:
            func_name = self.load_value.__qualname__
        except AttributeError:
            func_name = repr(self.load_value)

        return f'<AutoAttr {self.data_key!r}: attr_name={self.attr_name!r}, load_value={func_name}>'

    def process_key(self, loader, data):
        """
        Remove and parse the value for this attribute from the given data
        dict, and return it (or _MISSING if the key is absent).
        """
        key = self.data_key
        if key in data:
            value = data.pop(key)
        elif self.required:
            msg = f'key {key!r} missing from data; remaining keys: {sorted(data)}'
            raise RecordError(msg)
        else:
            return _MISSING

        return self.load_value(loader, value)


class CandidateLoader:

    model_class = Candidate

    auto_attrs = [
        AutoAttr('id', parse_id, required=True),
        AutoAttr('name', parse_as_is),
        AutoAttr('eliminated', parse_bool),
        AutoAttr('age', parse_int),
    ]


class RoundLoader:

    model_class = Round

    auto_attrs = [
        AutoAttr('id', parse_id, required=True),
        AutoAttr('start_date', parse_datetime, data_key='startDate', required=True),
        AutoAttr('end_date', parse_datetime, data_key='endDate', required=True),
        AutoAttr('candidates', parse_candidates),
        AutoAttr('mol_revealed', parse_bool, data_key='molRevealed'),
        AutoAttr('mol_candidate_id', parse_optional_id, data_key='molCandidateId'),
        AutoAttr('name', parse_as_is),
        AutoAttr('episode_number', parse_int, data_key='episodeNumber'),
    ]

    def finalize(self, round_):
        if round_.start_date >= round_.end_date:
            raise RecordError(f'{round_!r} does not end after it starts: '
                              f'{round_.start_date} >= {round_.end_date}')

        mol_id = round_.mol_candidate_id
        if mol_id is not None and round_.get_candidate(mol_id) is None:
            _log.warning(f'mol candidate {mol_id!r} is not on the roster of: {round_!r}')


class GroupLoader:

    model_class = Group

    auto_attrs = [
        AutoAttr('id', parse_id, required=True),
        AutoAttr('name', parse_as_is),
        AutoAttr('members', parse_members),
    ]


class BallotLoader:

    model_class = Ballot

    auto_attrs = [
        AutoAttr('user_id', parse_id, data_key='userId', required=True),
        AutoAttr('round_id', parse_id, data_key='roundId', required=True),
        AutoAttr('group_id', parse_optional_id, data_key='groupId'),
        AutoAttr('allocations', parse_allocations, required=True),
        AutoAttr('submitted_at', parse_optional_datetime, data_key='submittedAt'),
    ]


def format_abbreviated_dict(mapping):
    """
    Return a string formatting a dict for brief display.
    """
    items = []
    for key, value in mapping.items():
        if type(value) in (dict, list):
            value = type(value).__name__
        else:
            value = repr(value)

        # Truncate the value in case e.g. a string is really long.
        value = str(value)[:100]
        item = f'* {key}: {value}'
        items.append(item)

    return '\n'.join(items)


def load_object(loader, data, strict=False):
    """
    Load and return an object in our data model.

    This function instantiates the data model class associated with the
    given loader (`loader.model_class`), and then sets attributes on the
    instance using the loader's `auto_attrs` and the given raw data.

    Args:
      loader: an instance of a Loader class.
      data: the dict of raw data.  It isn't modified.
      strict: whether unrecognized keys are an error (as opposed to being
        logged).

    Raises:
      * `RecordError` if the data is invalid.
    """
    if type(loader) == type:
        msg = f'loader argument must be an instance of a Loader class: {loader}'
        raise TypeError(msg)
    if not isinstance(data, dict):
        raise RecordError(f'expected a record for {loader!r}, got: {truncate(data)}')

    model_obj = loader.model_class()

    # Make a (shallow) copy of the data because process_key() removes
    # keys while processing.  We want the original in case an error occurs.
    original_data = data
    data = data.copy()

    try:
        for attr in loader.auto_attrs:
            value = attr.process_key(loader, data)
            if value is not _MISSING:
                setattr(model_obj, attr.attr_name, value)
    except RecordError as exc:
        # Include data about the object that failed in the error message.
        formatted = format_abbreviated_dict(original_data)
        raise RecordError(f'{exc}\nrecord has key values:\n{formatted}') from exc

    # Check that all keys in the data have been processed.
    if data:
        msg = f'unrecognized keys for model object {model_obj!r}: {sorted(data.keys())}'
        if strict:
            raise RecordError(msg)
        _log.warning(msg)

    if hasattr(loader, 'finalize'):
        # Perform class-specific checks after the data is loaded.
        loader.finalize(model_obj)

    return model_obj


def load_objects(loader_class, seq, strict=False):
    return [load_object(loader_class(), data, strict=strict) for data in seq]


def load_store(path, strict=False):
    """
    Read a JSON export of the document store, and return a
    MemoryBallotStore object.

    The export is a JSON object with the (optional) keys "rounds",
    "groups" and "ballots", each a list of records.

    Args:
      path: a path-like object.
    """
    data = utils.read_json(path)
    if not isinstance(data, dict):
        raise RecordError(f'expected a JSON object in: {path}')

    rounds = load_objects(RoundLoader, data.get('rounds', []), strict=strict)
    groups = load_objects(GroupLoader, data.get('groups', []), strict=strict)
    ballots = load_objects(BallotLoader, data.get('ballots', []), strict=strict)

    _log.info(f'loaded {len(rounds)} rounds, {len(groups)} groups and '
              f'{len(ballots)} ballots from: {path}')

    return MemoryBallotStore(rounds=rounds, groups=groups, ballots=ballots)
