#!/usr/bin/python
# encoding: utf-8
"""
test_orchestrator.py

Unit tests for orchestrator.Orchestrator: whole runs over fakes

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

from notifierlib import capabilities
from notifierlib import executor
from notifierlib import orchestrator
from notifierlib import policy
from notifierlib.constants import POSTACTION_RESTART, POSTACTION_SHUTDOWN
from notifierlib.dialog import BUTTON_PROCEED, clicked
from notifierlib.messages import Messages
from notifierlib.statestore import DeferralState

from .fakes import (
    DAY, HOUR, NOW, FakeChecker, FakeClock, FakeDialogs, FakeLauncher,
    FakeRestarter, FakeRunner, FakeStore, log, make_config, make_gate)


VENTURA = capabilities.resolve('13.6', 'x86_64')
MACOS_UPDATE = 'macOS Ventura 13.6.1'


class OrchestratorTestCase(unittest.TestCase):
    """Wires an Orchestrator together from fakes."""

    def make_orchestrator(self, cfg, state=None, checker=None, dialogs=None,
                          runner=None, user='alice', idle=0, assertions=(),
                          blocking_app=None):
        self.store = FakeStore(state)
        self.checker = checker or FakeChecker(restart_required=[MACOS_UPDATE])
        self.dialogs = dialogs or FakeDialogs()
        self.launcher = FakeLauncher()
        self.runner = runner or FakeRunner()
        self.restarter = FakeRestarter()
        self.clock = FakeClock()
        self.checked_apps = []
        esc = policy.EscalationPolicy(cfg)
        gate = make_gate(cfg, user=user, idle=idle, assertions=assertions,
                         sleep=self.clock.sleep)
        action_executor = executor.ActionExecutor(
            cfg, VENTURA, esc, Messages(cfg, VENTURA), self.dialogs,
            self.launcher, self.runner, gate, lambda: False, lambda: 50.0,
            lambda name: None,
            lambda state: self.store.save(cfg.policy_id, state),
            clock=self.clock.time, sleep=self.clock.sleep)

        def app_running(names):
            self.checked_apps.append(tuple(names))
            return blocking_app

        return orchestrator.Orchestrator(
            cfg, self.store, self.checker, gate, esc, action_executor,
            self.restarter, app_running, clock=self.clock.time)

    def saved(self, cfg):
        return self.store.load(cfg.policy_id)


@patch('notifierlib.notifierlog.log', log)
class TestPendingUpdates(OrchestratorTestCase):
    """What's available decides whether anyone is bothered."""

    def test_nothing_pending_resets_deferrals(self):
        cfg = make_config()
        subject = self.make_orchestrator(
            cfg, state=DeferralState(deferral_count=2, times_ignored=4),
            checker=FakeChecker())
        self.assertEqual(subject.run(), 0)
        self.assertEqual(self.saved(cfg).deferral_count, 0)
        self.assertEqual(self.saved(cfg).times_ignored, 4)
        self.assertEqual(self.dialogs.shown, [])

    def test_stale_update_list_is_refreshed(self):
        cfg = make_config()
        subject = self.make_orchestrator(
            cfg, checker=FakeChecker(stale=True))
        subject.run()
        self.assertEqual(self.checker.refreshes, 1)
        self.assertEqual(self.store.saves[0].last_update_check_time, NOW)

    def test_no_restart_updates_install_silently(self):
        cfg = make_config()
        subject = self.make_orchestrator(
            cfg, checker=FakeChecker(no_restart=['Safari']))
        self.assertEqual(subject.run(), 0)
        self.assertEqual(self.runner.calls, [False])
        self.assertEqual(self.checker.refreshes, 1)
        self.assertEqual(self.dialogs.shown, [])
        self.assertEqual(self.restarter.actions, [])

    def test_blocking_app_delays_silent_install(self):
        cfg = make_config(blocking_applications=('Safari',))
        subject = self.make_orchestrator(
            cfg, checker=FakeChecker(no_restart=['Safari']),
            blocking_app='Safari')
        self.assertEqual(subject.run(), 0)
        self.assertEqual(self.checked_apps, [('Safari',)])
        self.assertEqual(self.runner.calls, [])

    def test_major_upgrade_skips_update_list(self):
        cfg = make_config(update_action='major',
                          policy_id='com.apple.macOS.upgrade')
        subject = self.make_orchestrator(
            cfg, checker=FakeChecker(), dialogs=FakeDialogs(
                clicked(BUTTON_PROCEED, 3600)))
        self.assertEqual(subject.run(), 0)
        self.assertEqual(len(self.dialogs.shown), 1)
        self.assertEqual(self.saved(cfg).next_reminder_time, NOW + HOUR)


@patch('notifierlib.notifierlog.log', log)
class TestEligibility(OrchestratorTestCase):
    """Nobody is bothered at a bad moment."""

    def test_idle_exits_quietly(self):
        cfg = make_config(max_idle_time=600)
        subject = self.make_orchestrator(cfg, idle=900)
        self.assertEqual(subject.run(), 0)
        self.assertEqual(self.dialogs.shown, [])
        self.assertEqual(self.store.saves, [])

    def test_assertion_is_counted(self):
        cfg = make_config()
        subject = self.make_orchestrator(
            cfg, assertions=['pid 1023(zoom.us): NoDisplaySleepAssertion'])
        self.assertEqual(subject.run(), 0)
        self.assertEqual(self.dialogs.shown, [])
        self.assertEqual(self.saved(cfg).assertions_encountered, 1)

    def test_debounced(self):
        cfg = make_config()
        subject = self.make_orchestrator(
            cfg, state=DeferralState(next_reminder_time=NOW + 60))
        self.assertEqual(subject.run(), 0)
        self.assertEqual(self.dialogs.shown, [])
        self.assertEqual(self.store.saves, [])

    def test_dormant(self):
        cfg = make_config(start_date=NOW + DAY)
        subject = self.make_orchestrator(cfg)
        self.assertEqual(subject.run(), 0)
        self.assertEqual(self.dialogs.shown, [])


@patch('notifierlib.notifierlog.log', log)
class TestUnattended(OrchestratorTestCase):
    """Runs with nobody logged in."""

    def test_disabled_by_default(self):
        cfg = make_config()
        subject = self.make_orchestrator(cfg, user=None)
        self.assertEqual(subject.run(), 0)
        self.assertEqual(self.runner.calls, [])

    def test_installs_and_restarts(self):
        cfg = make_config(allow_unattended_install=True)
        subject = self.make_orchestrator(
            cfg, user='loginwindow',
            state=DeferralState(deferral_count=2))
        self.assertEqual(subject.run(), 0)
        self.assertEqual(self.runner.calls, [True])
        self.assertEqual(self.restarter.actions, [POSTACTION_RESTART])
        self.assertEqual(self.saved(cfg).deferral_count, 0)
        self.assertEqual(self.dialogs.shown, [])


@patch('notifierlib.notifierlog.log', log)
class TestEndToEnd(OrchestratorTestCase):
    """Full runs through the policy and executor."""

    def test_reminder_saves_state(self):
        cfg = make_config()
        subject = self.make_orchestrator(
            cfg, dialogs=FakeDialogs(clicked(BUTTON_PROCEED, 14400)))
        self.assertEqual(subject.run(), 0)
        state = self.saved(cfg)
        self.assertEqual(state.next_reminder_time, NOW + 14400)
        self.assertEqual(state.last_run_time, NOW)
        self.assertEqual(self.restarter.actions, [])

    def test_forced_install_restarts_after_saving(self):
        cfg = make_config(end_date=NOW - DAY, max_deferrals=1)
        subject = self.make_orchestrator(
            cfg, state=DeferralState(deferral_count=1))
        self.assertEqual(subject.run(), 0)
        self.assertEqual(self.saved(cfg).deferral_count, 0)
        self.assertEqual(self.restarter.actions, [POSTACTION_RESTART])

    def test_failed_install_keeps_state(self):
        cfg = make_config(end_date=NOW - DAY, max_deferrals=1)
        start = DeferralState(deferral_count=1, times_ignored=3)
        subject = self.make_orchestrator(
            cfg, state=start, runner=FakeRunner(exit_code=1))
        self.assertEqual(subject.run(), 13)
        self.assertEqual(self.saved(cfg), start)
        self.assertEqual(self.store.saves, [])
        self.assertEqual(self.restarter.actions, [])

    def test_forced_gui_shuts_down(self):
        cfg = make_config(end_date=NOW - DAY, max_deferrals=0,
                          force_method='gui', dialog_timeout=3600)
        subject = self.make_orchestrator(cfg)
        self.assertEqual(subject.run(), 0)
        self.assertEqual(self.restarter.actions, [POSTACTION_SHUTDOWN])
        # checkpoint first, then the final state
        self.assertEqual(self.store.saves[0].force_update_start_time, NOW)
        self.assertIsNone(self.saved(cfg).force_update_start_time)

    def test_escalation_over_several_runs(self):
        cfg = make_config(nag_date=NOW + DAY, end_date=NOW + 3 * DAY,
                          max_deferrals=1)
        state = DeferralState()
        tiers = []
        for now in (NOW, NOW + 2 * DAY, NOW + 4 * DAY, NOW + 5 * DAY):
            esc = policy.EscalationPolicy(cfg)
            tiers.append(esc.evaluate(state, now).tier)
            subject = self.make_orchestrator(cfg, state=state)
            self.clock.now = now
            subject.run()
            state = self.saved(cfg)
        self.assertEqual(tiers, [policy.TIER_REMINDER, policy.TIER_NAGGING,
                                 policy.TIER_FINAL, policy.TIER_FORCED])
        self.assertEqual(self.restarter.actions, [POSTACTION_RESTART])


def main():
    unittest.main(buffer=True)


if __name__ == '__main__':
    main()
