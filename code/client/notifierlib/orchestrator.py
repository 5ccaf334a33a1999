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
orchestrator.py

One complete evaluation: is there anything to install, is now a good time,
what does the escalation policy say, do it, remember what happened.
"""

import time

from . import display
from . import gate as gatemod
from . import policy as policymod
from .constants import EXIT_STATUS_OK, POSTACTION_NONE, UPDATE_ACTION_MAJOR


class Orchestrator(object):
    """Wires the pieces of a run together.

    Collaborators:
      store      DeferralStateStore
      checker    SoftwareUpdateChecker, or None for major upgrades
      gate       EligibilityGate
      policy     EscalationPolicy
      executor   ActionExecutor
      restarter  RestartTrigger
      app_running(names) -> name of a running blocking app, or None
    """

    def __init__(self, config, store, checker, gate, policy, executor,
                 restarter, app_running, clock=time.time):
        self.config = config
        self.store = store
        self.checker = checker
        self.gate = gate
        self.policy = policy
        self.executor = executor
        self.restarter = restarter
        self.app_running = app_running
        self.clock = clock

    def _save(self, state):
        self.store.save(self.config.policy_id, state)

    def _finish(self, result):
        '''Saves state (if any), then restarts or shuts down (if asked)'''
        if result.state is not None:
            self._save(result.state)
        if result.post_action != POSTACTION_NONE:
            self.restarter.perform(result.post_action)
        return result.exit_code

    def run(self):
        '''Returns the exit code for this run'''
        now = int(self.clock())
        state = self.store.load(self.config.policy_id)
        pending = None

        if self.config.update_action != UPDATE_ACTION_MAJOR:
            if self.checker.needs_refresh(
                    state.last_update_check_time, now,
                    self.config.update_check_interval):
                self.checker.refresh()
                state = self.policy.record_update_check(state, now)
                self._save(state)
            pending = self.checker.list_pending()

            if not pending.restart_required and not pending.no_restart:
                display.display_info('No updates available.')
                self._save(self.policy.reset_deferrals(state))
                return EXIT_STATUS_OK

            if not pending.restart_required:
                return self._install_without_restart(state, now)

        user_check = self.gate.check_logged_in_user()
        if not user_check.proceed:
            return self._run_unattended(state, pending)

        for check in (self.gate.check_idle_time,
                      self.gate.check_display_assertions):
            result = check()
            if not result.proceed:
                if result.reason == gatemod.REASON_ASSERTION:
                    self._save(self.policy.record_assertion(state))
                display.display_info('Not notifying this time (%s).',
                                     result.reason)
                return EXIT_STATUS_OK

        decision = self.policy.evaluate(state, now)
        if decision.action == policymod.ACTION_NOTHING:
            if decision.reason == 'debounced':
                display.display_info(
                    'Next reminder is not due until %s.',
                    time.ctime(state.next_reminder_time))
            else:
                display.display_info('Nothing to do: %s.', decision.reason)
            return EXIT_STATUS_OK

        return self._finish(self.executor.run(decision, state, now))

    def _install_without_restart(self, state, now):
        blocking_app = self.app_running(self.config.blocking_applications)
        if blocking_app:
            display.display_info(
                '%s is running. Will not install updates that do not '
                'require a restart.', blocking_app)
            return EXIT_STATUS_OK
        display.display_info(
            'Installing updates that do not require a restart.')
        result = self.executor.install_silently()
        # the list we cached is out of date now
        self.checker.refresh()
        self._save(self.policy.record_update_check(state, now))
        return result.exit_code

    def _run_unattended(self, state, pending):
        if pending is None or not pending.restart_required:
            return EXIT_STATUS_OK
        if not self.config.allow_unattended_install:
            display.display_detail(
                'Unattended installs are not enabled; exiting.')
            return EXIT_STATUS_OK
        display.display_info(
            'Nobody is logged in; installing updates unattended.')
        return self._finish(self.executor.install_unattended(state))


if __name__ == '__main__':
    print('This is a library of support tools for osupdatenotifier.')
