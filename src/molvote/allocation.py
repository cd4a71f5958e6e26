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
The allocation controller: the bulk and step operations a voter uses
while distributing points, layered on molvote.ledger.

Every operation is a pure function of the current allocations.  The
apply_action() reducer exposes them as `(state, action) -> state`
transitions, and AllocationSession holds the latest state (with undo and
redo) for a UI binding.
"""

from collections import namedtuple, OrderedDict
import logging

from molvote.datamodel import Ballot
from molvote.errors import InvalidPointsError, RoundClosedError, ValidationError
import molvote.ledger as ledger
from molvote.ledger import DEFAULT_BUDGET, DEFAULT_STEP
import molvote.utils as utils


_log = logging.getLogger(__name__)

ACTION_SET = 'set'
ACTION_SLIDE = 'slide'
ACTION_INCREMENT = 'increment'
ACTION_DECREMENT = 'decrement'
ACTION_DISTRIBUTE = 'distribute'
ACTION_RESET = 'reset'

# An edit made by the voter.
#
# Attributes:
#   kind: one of the ACTION_* constants.
#   candidate_id: the candidate being changed, for "set", "slide",
#     "increment" and "decrement".
#   value: the requested value, for "set" and "slide".
Action = namedtuple('Action', 'kind, candidate_id, value', defaults=(None, None))


def reset(candidates):
    """
    Return allocations giving every candidate 0 points.

    Args:
      candidates: the roster, as an iterable of Candidate objects.
    """
    return OrderedDict((candidate.id, 0) for candidate in candidates)


def distribute_remaining_evenly(candidates, allocations, budget=DEFAULT_BUDGET):
    """
    Hand out the remaining points evenly, and return the new allocations.

    The points go to the candidates that don't have any points yet or,
    if every candidate already has points, to all of the candidates.
    Each gets `remaining // count` points, and the first
    `remaining % count` of them (in roster order) get one extra point.

    Args:
      candidates: the roster, as a sequence of Candidate objects.
      allocations: a dict mapping candidate id to points.
    """
    new_allocations = OrderedDict(allocations)

    points_left = ledger.remaining(allocations, budget=budget)
    if points_left <= 0 or not candidates:
        return new_allocations

    candidate_ids = [candidate.id for candidate in candidates]
    receiving = [cid for cid in candidate_ids if not allocations.get(cid, 0)]
    if not receiving:
        receiving = candidate_ids

    per_candidate, extra = divmod(points_left, len(receiving))
    for index, candidate_id in enumerate(receiving):
        points = per_candidate + (1 if index < extra else 0)
        new_allocations[candidate_id] = new_allocations.get(candidate_id, 0) + points

    _log.debug(f'distributed {points_left} points over {len(receiving)} candidates')

    return new_allocations


def adjust_points(allocations, candidate_id, direction, step=DEFAULT_STEP,
    budget=DEFAULT_BUDGET):
    """
    Move a candidate's points one step up or down, and return
    `(new_allocations, applied_value)`.

    Args:
      direction: a positive number to increase, or a negative number to
        decrease.
    """
    current = allocations.get(candidate_id, 0)
    if direction < 0:
        target = max(current - step, 0)
    else:
        cap = max(ledger.max_allowed(allocations, candidate_id, budget=budget), 0)
        if current >= cap:
            # An increment never lowers a value, even on an over-budget ledger.
            return (OrderedDict(allocations), current)
        target = current + step

    return ledger.set_candidate_points(allocations, candidate_id, target, budget=budget)


def set_slider_points(allocations, candidate_id, raw_value, step=DEFAULT_STEP,
    budget=DEFAULT_BUDGET):
    """
    Apply a slider value: snap it to the step, then apply the ledger's
    clamp-and-cap rule.  Returns `(new_allocations, applied_value)`.
    """
    value = ledger.snap_to_step(raw_value, step=step)

    return ledger.set_candidate_points(allocations, candidate_id, value, budget=budget)


def apply_action(allocations, action, candidates, budget=DEFAULT_BUDGET, step=DEFAULT_STEP):
    """
    Return the allocations resulting from applying an Action.

    Raises:
      * `ValueError` if the action kind isn't recognized.
    """
    kind = action.kind
    candidate_id = action.candidate_id

    if kind == ACTION_SET:
        new_allocations, _ = ledger.set_candidate_points(allocations, candidate_id,
                                                         action.value, budget=budget)
    elif kind == ACTION_SLIDE:
        new_allocations, _ = set_slider_points(allocations, candidate_id, action.value,
                                               step=step, budget=budget)
    elif kind in (ACTION_INCREMENT, ACTION_DECREMENT):
        direction = 1 if kind == ACTION_INCREMENT else -1
        new_allocations, _ = adjust_points(allocations, candidate_id, direction,
                                           step=step, budget=budget)
    elif kind == ACTION_DISTRIBUTE:
        new_allocations = distribute_remaining_evenly(candidates, allocations, budget=budget)
    elif kind == ACTION_RESET:
        new_allocations = reset(candidates)
    else:
        raise ValueError(f'unrecognized action kind: {kind!r}')

    return new_allocations


class AllocationSession:

    """
    Holds one voter's allocations while they edit a ballot.

    The session only keeps the latest state plus the states needed for
    undo and redo.  All changes go through apply_action().
    """

    def __init__(self, candidates, allocations=None, budget=DEFAULT_BUDGET,
        step=DEFAULT_STEP):
        """
        Args:
          candidates: the roster, as a sequence of Candidate objects.
          allocations: the initial allocations.  Defaults to 0 points for
            every candidate.
        """
        if allocations is None:
            allocations = reset(candidates)

        self.candidates = list(candidates)
        self.budget = budget
        self.step = step
        self.state = OrderedDict(allocations)

        self._undo_stack = []
        self._redo_stack = []

    def __repr__(self):
        return f'<AllocationSession remaining={self.remaining}>'

    @property
    def remaining(self):
        return ledger.remaining(self.state, budget=self.budget)

    @property
    def is_complete(self):
        return self.remaining == 0

    @property
    def can_undo(self):
        return bool(self._undo_stack)

    @property
    def can_redo(self):
        return bool(self._redo_stack)

    def dispatch(self, action):
        """
        Apply an action, and return the new state.
        """
        new_state = apply_action(self.state, action, candidates=self.candidates,
                                 budget=self.budget, step=self.step)
        if new_state != self.state:
            self._undo_stack.append(self.state)
            self._redo_stack.clear()
            self.state = new_state

        return self.state

    def set_points(self, candidate_id, value):
        return self.dispatch(Action(ACTION_SET, candidate_id, value))

    def slide(self, candidate_id, value):
        return self.dispatch(Action(ACTION_SLIDE, candidate_id, value))

    def increment(self, candidate_id):
        return self.dispatch(Action(ACTION_INCREMENT, candidate_id))

    def decrement(self, candidate_id):
        return self.dispatch(Action(ACTION_DECREMENT, candidate_id))

    def distribute_evenly(self):
        return self.dispatch(Action(ACTION_DISTRIBUTE))

    def reset(self):
        return self.dispatch(Action(ACTION_RESET))

    def undo(self):
        """
        Return whether there was a change to undo.
        """
        if not self._undo_stack:
            return False

        self._redo_stack.append(self.state)
        self.state = self._undo_stack.pop()

        return True

    def redo(self):
        if not self._redo_stack:
            return False

        self._undo_stack.append(self.state)
        self.state = self._redo_stack.pop()

        return True


def validate_submission(allocations, budget=DEFAULT_BUDGET):
    """
    Check that each value is a whole number from 0 to the budget, and
    that the allocations add up to the budget exactly.

    Raises:
      * `InvalidPointsError` if a value is out of range or not an int.
      * `ValidationError` if the total is wrong.
    """
    for candidate_id, points in allocations.items():
        # bool is a subclass of int.
        is_int = isinstance(points, int) and not isinstance(points, bool)
        if not is_int or not 0 <= points <= budget:
            raise InvalidPointsError(candidate_id, points, budget=budget)

    total = ledger.total_points(allocations)
    if total != budget:
        raise ValidationError(total, budget=budget)


def submit_ballot(store, user_id, round_, allocations, group_id=None, now=None,
    budget=DEFAULT_BUDGET):
    """
    Validate the allocations and save them as the user's ballot for the
    round, and return the saved Ballot object.

    A resubmission replaces the user's earlier ballot.  If the store
    fails, the StoreError propagates and nothing else changes, so the
    caller can retry with the same allocations.

    Args:
      store: a BallotStore object.
      round_: the Round object being voted on.
      now: the current time, as an aware datetime.  Defaults to now.

    Raises:
      * `RoundClosedError` if the round isn't active.
      * `ValidationError` if a value is invalid or the points don't add
        up to the budget.
      * `StoreError` if saving fails.
    """
    if now is None:
        now = utils.now_utc()

    if not round_.is_active(now):
        raise RoundClosedError(round_, now)

    validate_submission(allocations, budget=budget)

    ballot = Ballot(user_id=user_id, round_id=round_.id, allocations=allocations,
                    group_id=group_id, submitted_at=now)
    store.save_ballot(ballot)
    _log.info(f'saved ballot for user {user_id!r} in round {round_.id!r}')

    return ballot


def load_allocations(store, user_id, round_):
    """
    Return the allocations to start an editing session with: the points
    from the user's saved ballot, or 0 for every candidate.

    Saved points for candidates no longer on the roster are dropped.
    """
    ballot = store.load_ballot(user_id, round_.id)
    saved = {} if ballot is None else ballot.allocations

    return OrderedDict((cid, saved.get(cid, 0)) for cid in round_.candidate_ids)
