# encoding: utf-8
#
# Copyright 2019-2024 The osupdatenotifier Authors.
#
# Licensed under the Apache License, Version 2.0 (the 'License');
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#      https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an 'AS IS' BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""
policy.py

The escalation policy: given the saved deferral state and the current
time, decide how hard to push the user, and fold the user's answer back
into the state.

Tiers, in increasing urgency:

    dormant   before the start date; say nothing
    reminder  friendly reminder offering delay options
    nagging   past the nag date; re-prompt every renotify period
    final     past the end date; postponing uses up a deferral
    forced    past the end date with no deferrals left

evaluate() is a pure function of (config, state, now). This is the only
module that produces new DeferralState values.
"""

import collections

from . import config as configmod
from . import display
from .constants import (
    FINAL_POSTPONE_PERIOD, FORCE_METHOD_GUI, MINIMUM_FORCED_WINDOW,
    MINIMUM_FORCED_WINDOW_REMAINING, PROCEED_GRACE_PERIOD)
from .dialog import BUTTON_MORE_INFO, BUTTON_PROCEED


TIER_DORMANT = 'dormant'
TIER_REMINDER = 'reminder'
TIER_NAGGING = 'nagging'
TIER_FINAL = 'final'
TIER_FORCED = 'forced'

TIER_ORDER = (TIER_DORMANT, TIER_REMINDER, TIER_NAGGING, TIER_FINAL,
              TIER_FORCED)

ACTION_SHOW_REMINDER = 'showReminder'
ACTION_SHOW_NAG = 'showNag'
ACTION_SHOW_FINAL = 'showFinal'
ACTION_FORCE_CLI = 'forceViaCLI'
ACTION_FORCE_GUI = 'forceViaGUI'
ACTION_NOTHING = 'doNothing'

FORCE_ACTIONS = (ACTION_FORCE_CLI, ACTION_FORCE_GUI)

# what the caller should do after a dialog has been answered
FOLLOW_UP_NONE = 'none'
FOLLOW_UP_PROCEED = 'proceed'
FOLLOW_UP_MORE_INFO = 'more_info'
FOLLOW_UP_ENFORCE = 'enforce'


Decision = collections.namedtuple('Decision', ['tier', 'action', 'reason'])
Resolution = collections.namedtuple('Resolution', ['state', 'follow_up'])


_TIER_ACTIONS = {
    TIER_REMINDER: ACTION_SHOW_REMINDER,
    TIER_NAGGING: ACTION_SHOW_NAG,
    TIER_FINAL: ACTION_SHOW_FINAL,
}


class EscalationPolicy(object):
    """Maps (state, now) to a Decision for one PolicyConfig."""

    def __init__(self, config):
        self.config = config

    def tier_for(self, state, now):
        '''Returns the tier a Mac with this state is in at time now'''
        cfg = self.config
        if cfg.start_date is not None and now < cfg.start_date:
            return TIER_DORMANT
        if cfg.end_date is not None and now >= cfg.end_date:
            if state.deferral_count >= cfg.max_deferrals:
                return TIER_FORCED
            return TIER_FINAL
        if cfg.nag_date is not None and now >= cfg.nag_date:
            return TIER_NAGGING
        return TIER_REMINDER

    def evaluate(self, state, now):
        '''Decides what to do this run. Never changes state.'''
        cfg = self.config
        tier = self.tier_for(state, now)
        if state.next_reminder_time is not None and (
                now < state.next_reminder_time):
            return Decision(tier, ACTION_NOTHING, 'debounced')

        configmod.validate_dates(cfg.start_date, cfg.nag_date, cfg.end_date)

        if tier == TIER_DORMANT:
            return Decision(tier, ACTION_NOTHING, 'start date not reached')
        if tier == TIER_FORCED:
            if cfg.force_method == FORCE_METHOD_GUI:
                return Decision(tier, ACTION_FORCE_GUI, 'out of deferrals')
            return Decision(tier, ACTION_FORCE_CLI, 'out of deferrals')
        return Decision(tier, _TIER_ACTIONS[tier], tier)

    def resolve(self, decision, response, state, now):
        '''Applies a dialog response (None or dismissed for a timeout or
        force-quit) to state. Returns a Resolution.'''
        if decision.action == ACTION_NOTHING:
            raise ValueError('Nothing to resolve for %s' % (decision,))
        state = state._replace(last_run_time=now)
        if decision.action in FORCE_ACTIONS:
            # out of deferrals: any answer, including none, is consent
            return Resolution(state, FOLLOW_UP_ENFORCE)

        cfg = self.config
        dismissed = response is None or response.dismissed
        button = None if dismissed else response.button

        if decision.action == ACTION_SHOW_REMINDER:
            if dismissed:
                return self._postpone(state, now)
            delay = response.delay or 0
            if button == BUTTON_MORE_INFO:
                return Resolution(
                    state._replace(
                        next_reminder_time=now + (
                            delay or cfg.renotify_period),
                        times_ignored=state.times_ignored + 1),
                    FOLLOW_UP_MORE_INFO)
            if not delay:
                return self._proceed(state, now)
            display.display_info(
                'User chose to be reminded again in %s seconds.', delay)
            return Resolution(
                state._replace(next_reminder_time=now + delay),
                FOLLOW_UP_NONE)

        if decision.action == ACTION_SHOW_NAG:
            if button == BUTTON_PROCEED:
                return self._proceed(state, now)
            if button == BUTTON_MORE_INFO:
                return Resolution(
                    state._replace(
                        next_reminder_time=now + cfg.renotify_period),
                    FOLLOW_UP_MORE_INFO)
            return self._postpone(state, now)

        if decision.action == ACTION_SHOW_FINAL:
            if button == BUTTON_PROCEED:
                return self._proceed(state, now)
            deferral_count = state.deferral_count + 1
            display.display_info(
                'Deferral %s of %s used.', deferral_count, cfg.max_deferrals)
            return Resolution(
                state._replace(
                    deferral_count=deferral_count,
                    next_reminder_time=now + FINAL_POSTPONE_PERIOD,
                    times_ignored=state.times_ignored + 1),
                FOLLOW_UP_NONE)

        raise ValueError('Unknown action %s' % decision.action)

    def _proceed(self, state, now):
        # give the installer time to work before asking again
        return Resolution(
            state._replace(next_reminder_time=now + PROCEED_GRACE_PERIOD),
            FOLLOW_UP_PROCEED)

    def _postpone(self, state, now):
        return Resolution(
            state._replace(
                next_reminder_time=now + self.config.renotify_period,
                times_ignored=state.times_ignored + 1),
            FOLLOW_UP_NONE)

    @staticmethod
    def reset_deferrals(state):
        '''Called after a successful update or when nothing is pending.
        TimesIgnored is kept as telemetry.'''
        return state._replace(
            deferral_count=0,
            next_reminder_time=None,
            force_update_start_time=None,
            assertions_encountered=0)

    @staticmethod
    def record_update_check(state, now):
        return state._replace(last_update_check_time=now)

    @staticmethod
    def record_assertion(state):
        return state._replace(
            assertions_encountered=state.assertions_encountered + 1)

    def forced_window(self):
        '''Seconds a user gets to install through the GUI before we shut
        down; never less than an hour'''
        return max(self.config.dialog_timeout, MINIMUM_FORCED_WINDOW)

    def begin_forced_window(self, state, now):
        '''Starts the forced-update window, or keeps a window started by an
        earlier run as long as it leaves the user enough time'''
        start = state.force_update_start_time
        if not start or (
                start + self.forced_window() - now
                < MINIMUM_FORCED_WINDOW_REMAINING):
            start = now
        return state._replace(force_update_start_time=start)

    def forced_deadline(self, state):
        '''Returns the epoch time the forced window closes'''
        return state.force_update_start_time + self.forced_window()

    @staticmethod
    def end_forced_window(state):
        return state._replace(force_update_start_time=None)


if __name__ == '__main__':
    print('This is a library of support tools for osupdatenotifier.')
