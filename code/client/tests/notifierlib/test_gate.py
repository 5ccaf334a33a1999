#!/usr/bin/python
# encoding: utf-8
"""
test_gate.py

Unit tests for gate.EligibilityGate

"""
# Copyright 2019-2024 The osupdatenotifier Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#      https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import unittest

from mock import patch

from notifierlib import gate

from .fakes import log, make_config, make_gate


ZOOM = ('pid 1023(zoom.us): [0x0000e4c90001a0c1] 00:10:02 '
        'NoDisplaySleepAssertion named: "Zoom meeting"')
CHROME = ('pid 620(Google Chrome): [0x0000e4ca0001a0c4] 00:05:00 '
          'PreventUserIdleDisplaySleep named: "Video Wake Lock"')


@patch('notifierlib.notifierlog.log', log)
class TestInteractiveChecks(unittest.TestCase):
    """Checks run before showing a dialog."""

    def setUp(self):
        self.cfg = make_config(max_idle_time=600)

    def test_all_clear(self):
        self.assertEqual(make_gate(self.cfg).check_interactive(), gate.PROCEED)

    def test_nobody_logged_in(self):
        for user in (None, '', 'loginwindow', '_mbsetupuser'):
            result = make_gate(self.cfg, user=user).check_interactive()
            self.assertEqual(result.reason, gate.REASON_NO_USER)

    def test_idle_too_long(self):
        result = make_gate(self.cfg, idle=601).check_interactive()
        self.assertFalse(result.proceed)
        self.assertEqual(result.reason, gate.REASON_IDLE)

    def test_idle_at_limit_is_fine(self):
        self.assertTrue(make_gate(self.cfg, idle=600).check_interactive()
                        .proceed)

    def test_assertion_blocks(self):
        result = make_gate(self.cfg, assertions=[ZOOM]).check_interactive()
        self.assertEqual(result.reason, gate.REASON_ASSERTION)

    def test_ignored_assertion_does_not_block(self):
        cfg = self.cfg._replace(assertions_to_ignore=frozenset(['zoom.us']))
        result = make_gate(cfg, assertions=[ZOOM]).check_interactive()
        self.assertTrue(result.proceed)

    def test_ignoring_one_assertion_leaves_the_others(self):
        cfg = self.cfg._replace(assertions_to_ignore=frozenset(['zoom.us']))
        result = make_gate(cfg, assertions=[ZOOM, CHROME]).check_interactive()
        self.assertEqual(result.reason, gate.REASON_ASSERTION)

    def test_user_check_comes_first(self):
        result = make_gate(self.cfg, user=None, idle=9999,
                           assertions=[ZOOM]).check_interactive()
        self.assertEqual(result.reason, gate.REASON_NO_USER)


@patch('notifierlib.notifierlog.log', log)
class TestWaitForPower(unittest.TestCase):
    """AC power polling before a command-line install."""

    def setUp(self):
        self.sleeps = []

    def test_on_ac_power(self):
        power_gate = make_gate(make_config(), sleep=self.sleeps.append)
        self.assertTrue(power_gate.wait_for_ac_power().proceed)
        self.assertEqual(self.sleeps, [])

    def test_plugged_in_while_waiting(self):
        power_gate = make_gate(make_config(), battery=(True, True, False),
                               sleep=self.sleeps.append)
        self.assertTrue(power_gate.wait_for_ac_power().proceed)
        self.assertEqual(self.sleeps, [60, 60])

    def test_never_plugged_in(self):
        power_gate = make_gate(make_config(), battery=(True,),
                               sleep=self.sleeps.append)
        result = power_gate.wait_for_ac_power()
        self.assertEqual(result.reason, gate.REASON_ON_BATTERY)
        self.assertEqual(self.sleeps, [60] * 5)


def main():
    unittest.main(buffer=True)


if __name__ == '__main__':
    main()
