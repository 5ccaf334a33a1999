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
gate.py

Checks that decide whether now is a reasonable time to bother anyone.

A check that fails is not an error: the run simply ends with exit code 0
and the next scheduled run tries again. No check changes saved state.
"""

import collections
import time

from . import display
from .constants import LOGINWINDOW, POWER_CHECK_ATTEMPTS, POWER_CHECK_INTERVAL


REASON_NO_USER = 'no_user'
REASON_ON_BATTERY = 'on_battery'
REASON_IDLE = 'idle'
REASON_ASSERTION = 'assertion'

GateResult = collections.namedtuple('GateResult', ['proceed', 'reason'])

PROCEED = GateResult(True, None)

# Setup Assistant runs as this user before anyone has logged in
NOT_REAL_USERS = (LOGINWINDOW, '_mbsetupuser')


def _exit(reason):
    return GateResult(False, reason)


class EligibilityGate(object):
    """Environmental preconditions for one PolicyConfig.

    Collaborators are plain callables so they can be swapped out:
      console_user()  -> short name of the console user, or None
      idle_seconds()  -> seconds since the last HID event
      assertions()    -> list of active display sleep assertion lines
      on_battery()    -> True when running on battery power
      sleep(seconds)
    """

    def __init__(self, config, console_user, idle_seconds, assertions,
                 on_battery, sleep=time.sleep):
        self.config = config
        self.console_user = console_user
        self.idle_seconds = idle_seconds
        self.assertions = assertions
        self.on_battery = on_battery
        self.sleep = sleep

    def check_logged_in_user(self):
        user = self.console_user()
        if not user or user in NOT_REAL_USERS:
            display.display_info('No user is logged in.')
            return _exit(REASON_NO_USER)
        display.display_detail('Console user is %s.', user)
        return PROCEED

    def check_idle_time(self):
        idle = self.idle_seconds()
        if idle > self.config.max_idle_time:
            display.display_info(
                'Computer has been idle for %s seconds (limit %s).',
                idle, self.config.max_idle_time)
            return _exit(REASON_IDLE)
        return PROCEED

    def check_display_assertions(self):
        '''Someone presenting or on a video call keeps the display awake;
        don't pop dialogs over them'''
        blocking = []
        for assertion in self.assertions():
            lowered = assertion.lower()
            ignored = [item for item in self.config.assertions_to_ignore
                       if item in lowered]
            if ignored:
                display.display_detail(
                    'Ignoring display sleep assertion (%s): %s',
                    ', '.join(sorted(ignored)), assertion)
                continue
            blocking.append(assertion)
        if blocking:
            display.display_info(
                'Display sleep assertions are active; not notifying:')
            for assertion in blocking:
                display.display_info('    %s', assertion)
            return _exit(REASON_ASSERTION)
        return PROCEED

    def check_interactive(self):
        '''Runs the checks that guard showing a dialog, in order, stopping
        at the first one that says no'''
        for check in (self.check_logged_in_user, self.check_idle_time,
                      self.check_display_assertions):
            result = check()
            if not result.proceed:
                return result
        return PROCEED

    def wait_for_ac_power(self):
        '''Gives the user a few minutes to plug in before a command-line
        install'''
        for dummy_attempt in range(POWER_CHECK_ATTEMPTS):
            if not self.on_battery():
                return PROCEED
            display.display_info(
                'Computer is not currently connected to a power source.')
            self.sleep(POWER_CHECK_INTERVAL)
        display.display_info('Computer is still running on battery power.')
        return _exit(REASON_ON_BATTERY)


if __name__ == '__main__':
    print('This is a library of support tools for osupdatenotifier.')
