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
executor.py

Carries out a policy Decision: shows the dialog, installs the updates,
waits out a forced-update window.

run() returns an ExecutionResult. Its state is the DeferralState to save,
or None when the saved state must be left alone, which is always the case
when something went wrong: the next scheduled run simply tries again.
"""

import collections
import time

from . import dateutils
from . import display
from . import policy as policymod
from .constants import (
    ACTIVITY_CHECK_INTERVAL, DEADLINE_CHECK_INTERVAL, EXIT_STATUS_OK,
    EXIT_STATUS_FILEVAULT_ENCRYPTING, EXIT_STATUS_INSUFFICIENT_SPACE,
    EXIT_STATUS_SOFTWAREUPDATE_FAILED, INSTALLER_ACTIVITY_BUFFER,
    POSTACTION_NONE, POSTACTION_RESTART, POSTACTION_SHUTDOWN,
    UPDATE_ACTION_MAJOR)


ExecutionResult = collections.namedtuple(
    'ExecutionResult', ['exit_code', 'state', 'post_action'])

NOTHING_DONE = ExecutionResult(EXIT_STATUS_OK, None, POSTACTION_NONE)


class ActionExecutor(object):
    """Performs Decisions for one PolicyConfig.

    Collaborators:
      dialogs         show(dialog), show_and_forget(dialog), start_hud(dialog)
      launcher        open_update_ui(), open_url(url)
      runner          install_all(restart=True) -> InstallResult
      gate            wait_for_ac_power() -> GateResult
      filevault_encrypting()   -> bool
      free_space_gb()          -> float
      installer_activity(name) -> epoch of last log activity, or None
      checkpoint(state)        persists state mid-run
    """

    def __init__(self, config, capabilities, policy, messages, dialogs,
                 launcher, runner, gate, filevault_encrypting,
                 free_space_gb, installer_activity, checkpoint,
                 clock=time.time, sleep=time.sleep):
        self.config = config
        self.capabilities = capabilities
        self.policy = policy
        self.messages = messages
        self.dialogs = dialogs
        self.launcher = launcher
        self.runner = runner
        self.gate = gate
        self.filevault_encrypting = filevault_encrypting
        self.free_space_gb = free_space_gb
        self.installer_activity = installer_activity
        self.checkpoint = checkpoint
        self.clock = clock
        self.sleep = sleep

    def run(self, decision, state, now):
        action = decision.action
        display.display_status_major(
            'Tier %s: %s (%s)', decision.tier, action, decision.reason)
        if action == policymod.ACTION_NOTHING:
            return NOTHING_DONE
        if action == policymod.ACTION_SHOW_REMINDER:
            return self._notify(decision, self.messages.reminder(), state, now)
        if action == policymod.ACTION_SHOW_NAG:
            return self._notify(decision, self.messages.nag(), state, now)
        if action == policymod.ACTION_SHOW_FINAL:
            return self._notify(
                decision, self.messages.final(state), state, now)
        if action == policymod.ACTION_FORCE_CLI:
            return self._force_cli(decision, state, now)
        if action == policymod.ACTION_FORCE_GUI:
            return self._force_gui(decision, state, now)
        raise ValueError('Unknown action %s' % action)

    def _notify(self, decision, dialog, state, now):
        response = self.dialogs.show(dialog)
        resolution = self.policy.resolve(decision, response, state, now)
        if resolution.follow_up == policymod.FOLLOW_UP_PROCEED:
            self.launcher.open_update_ui()
        elif resolution.follow_up == policymod.FOLLOW_UP_MORE_INFO:
            self.launcher.open_url(self.config.more_info_url)
        new_state = resolution.state
        if new_state.next_reminder_time:
            display.display_info(
                'Next reminder no earlier than %s.',
                time.ctime(new_state.next_reminder_time))
        return ExecutionResult(EXIT_STATUS_OK, new_state, POSTACTION_NONE)

    def _force_cli(self, decision, state, now):
        response = self.dialogs.show(self.messages.final_call_cli())
        resolution = self.policy.resolve(decision, response, state, now)
        if not self.gate.wait_for_ac_power().proceed:
            display.display_info(
                'Exiting since the computer is not connected to power.')
            return NOTHING_DONE
        return self.install(resolution.state, show_progress=True)

    def install_unattended(self, state):
        '''Installs restart-required updates while nobody is logged in'''
        if not self.gate.wait_for_ac_power().proceed:
            return NOTHING_DONE
        return self.install(state, show_progress=False)

    def install(self, state, show_progress=True):
        '''Installs everything and works out what has to happen next'''
        if self.filevault_encrypting():
            display.display_error(
                'FileVault encryption is in progress; not installing '
                'updates until it finishes.')
            return ExecutionResult(
                EXIT_STATUS_FILEVAULT_ENCRYPTING, None, POSTACTION_NONE)

        hud = None
        if show_progress:
            hud = self.dialogs.start_hud(
                self.messages.background_install(self.clock()))
        try:
            result = self.runner.install_all()
        finally:
            if hud is not None:
                hud.dismiss()

        if result.out_of_space:
            free_space = self.free_space_gb()
            display.display_error(
                '%s Disk has %.1f GB of free space.',
                result.message or 'Not enough free disk space.', free_space)
            if show_progress:
                self.dialogs.show_and_forget(
                    self.messages.out_of_space(free_space, result.message))
            return ExecutionResult(
                EXIT_STATUS_INSUFFICIENT_SPACE, None, POSTACTION_NONE)

        if result.exit_code != 0:
            display.display_error(
                'Installing updates failed. Exit code: %s', result.exit_code)
            if show_progress:
                self.dialogs.show_and_forget(self.messages.install_failed())
            return ExecutionResult(
                EXIT_STATUS_SOFTWAREUPDATE_FAILED, None, POSTACTION_NONE)

        display.display_info('Updates installed successfully.')
        return ExecutionResult(
            EXIT_STATUS_OK, self.policy.reset_deferrals(state),
            self._post_action(result))

    def install_silently(self):
        '''Installs updates that need no restart, with no UI at all.
        Deferral state isn't touched either way.'''
        result = self.runner.install_all(restart=False)
        if result.exit_code != 0 or result.out_of_space:
            display.display_warning(
                'Installing updates that do not require a restart failed. '
                'Exit code: %s', result.exit_code)
            return ExecutionResult(
                EXIT_STATUS_SOFTWAREUPDATE_FAILED, None, POSTACTION_NONE)
        return NOTHING_DONE

    def _post_action(self, result):
        if self.config.update_action == UPDATE_ACTION_MAJOR:
            # the upgrade policy handles its own restart
            return result.post_action
        if (result.post_action == POSTACTION_SHUTDOWN
                and self.capabilities.supports_halt):
            return POSTACTION_SHUTDOWN
        return POSTACTION_RESTART

    def _force_gui(self, decision, state, now):
        state = self.policy.begin_forced_window(state, now)
        # a run killed mid-window must resume the same window
        self.checkpoint(state)
        deadline = self.policy.forced_deadline(state)
        display.display_info(
            'Forced update window closes at %s (in %s).', time.ctime(deadline),
            dateutils.format_duration(deadline - now))

        response = self.dialogs.show(
            self.messages.final_call_gui(deadline - now))
        state = self.policy.resolve(decision, response, state, now).state
        # timing out means the same as Proceed: the user gets the update UI
        self.launcher.open_update_ui()

        while self.clock() < deadline:
            self.sleep(DEADLINE_CHECK_INTERVAL)

        if self.config.update_action == UPDATE_ACTION_MAJOR:
            process_name = 'osinstallersetupd'
        else:
            process_name = 'softwareupdated'
        while True:
            last_activity = self.installer_activity(process_name)
            if last_activity is None:
                break
            if last_activity + INSTALLER_ACTIVITY_BUFFER <= self.clock():
                break
            display.display_detail(
                '%s is still busy; waiting before shutting down.',
                process_name)
            self.sleep(ACTIVITY_CHECK_INTERVAL)

        state = self.policy.end_forced_window(state)
        self.dialogs.show(self.messages.shutdown_warning())
        return ExecutionResult(EXIT_STATUS_OK, state, POSTACTION_SHUTDOWN)


if __name__ == '__main__':
    print('This is a library of support tools for osupdatenotifier.')
