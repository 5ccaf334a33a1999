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
messages.py

The words users see. Every dialog osupdatenotifier shows is built here.
"""

from . import dateutils
from .constants import SHUTDOWN_WARNING_TIMEOUT, UPDATE_ACTION_MAJOR
from .dialog import (
    BUTTON_MORE_INFO, BUTTON_OK, BUTTON_POSTPONE, BUTTON_PROCEED,
    BUTTON_SHUT_DOWN, WINDOW_HUD, WINDOW_UTILITY, Dialog)


class Messages(object):
    """Builds Dialogs for one PolicyConfig on one Mac."""

    def __init__(self, config, capabilities):
        self.config = config
        self.capabilities = capabilities
        if config.update_action == UPDATE_ACTION_MAJOR:
            self.title = 'macOS Upgrade'
            self.article = 'a major'
            self.noun = 'upgrade'
            self.past = 'upgraded'
            if config.upgrade_trigger:
                self.steps = 'Finder > Applications > Self Service'
            else:
                self.steps = 'Apple menu > App Store > search for macOS'
        else:
            self.title = 'macOS Software Update'
            self.article = 'a'
            self.noun = 'update'
            self.past = 'updated'
            self.steps = 'Apple menu > ' + capabilities.settings_path

    def _intro(self, urgency):
        return ('There is %s software %s available for your Mac that %s.'
                % (self.article, self.noun, urgency))

    def _navigate(self):
        return ('You may install this macOS software %s at any time by '
                'navigating to:\n\n%s' % (self.noun, self.steps))

    def _dialog(self, description, **kwargs):
        return Dialog(title=self.title, description=description,
                      icon=self.capabilities.icon, **kwargs)

    def reminder(self):
        text = '\n\n'.join([
            self._intro('should be installed at your earliest convenience')
            + ' If you have any questions, please contact %s.'
            % self.config.it_contact,
            self._navigate(),
            'Please make a selection and then click Proceed:'])
        return self._dialog(
            text,
            buttons=((BUTTON_PROCEED, 'Proceed'),
                     (BUTTON_MORE_INFO, 'More Info')),
            default_button=1, cancel_button=2,
            timeout=self.config.dialog_timeout,
            delay_options=self.config.delay_options)

    def nag(self):
        paragraphs = [
            self._intro('should be installed at your earliest convenience')
            + ' Click Proceed to ensure your computer is in compliance with '
            'the latest security updates. If you have any questions, please '
            'contact %s.' % self.config.it_contact,
            self._navigate()]
        if self.config.end_date:
            paragraphs.append(
                'After %s, an %s will be required on this computer.'
                % (dateutils.format_time(self.config.end_date), self.noun))
        return self._dialog(
            '\n\n'.join(paragraphs),
            buttons=((BUTTON_PROCEED, 'Proceed'),
                     (BUTTON_MORE_INFO, 'More Info')),
            default_button=1, cancel_button=2,
            timeout=self.config.dialog_timeout)

    def final(self, state):
        remaining = max(self.config.max_deferrals - state.deferral_count, 0)
        text = '\n\n'.join([
            self._intro('should be installed as soon as possible')
            + ' It is required that you %s this computer as soon as '
            'possible, but you can postpone if necessary.' % self.noun,
            'Attempts left to postpone: %s' % remaining,
            'Please save your work and click Proceed to start the %s. '
            % self.noun + self._navigate(),
            'If you have any questions or concerns, please contact %s.'
            % self.config.it_contact])
        return self._dialog(
            text,
            buttons=((BUTTON_PROCEED, 'Proceed'),
                     (BUTTON_POSTPONE, 'Postpone')),
            default_button=2, cancel_button=2,
            timeout=self.config.dialog_timeout)

    def final_call_cli(self):
        text = '\n\n'.join([
            self._intro('needs to be installed immediately')
            + ' There are no opportunities left to postpone this %s any '
            'further.' % self.noun,
            'Please save your work and click Proceed otherwise this message '
            'will disappear and the computer will restart automatically.',
            'If you have any questions or concerns, please contact %s.'
            % self.config.it_contact])
        return self._dialog(
            text, buttons=((BUTTON_PROCEED, 'Proceed'),),
            default_button=1, timeout=self.config.cli_dialog_timeout,
            countdown=True)

    def final_call_gui(self, seconds_left):
        text = '\n\n'.join([
            self._intro('needs to be installed immediately')
            + ' There are no opportunities left to postpone this %s any '
            'further.' % self.noun,
            'Please save your work and %s by navigating to:\n\n%s'
            % (self.noun, self.steps),
            'Failure to complete the %s will result in this computer '
            'shutting down.' % self.noun])
        return self._dialog(
            text, buttons=((BUTTON_PROCEED, 'Proceed'),),
            default_button=1, timeout=max(int(seconds_left), 0),
            countdown=True)

    def shutdown_warning(self):
        return Dialog(
            title='Shut Down',
            description='Please save your work and quit all other '
            'applications. This computer will be shutting down soon.',
            icon=self.capabilities.icon,
            buttons=((BUTTON_SHUT_DOWN, 'Shut Down'),), default_button=1,
            timeout=SHUTDOWN_WARNING_TIMEOUT, countdown=True,
            window_type=WINDOW_HUD)

    def background_install(self, start_time):
        text = '\n\n'.join([
            'Please save your work and quit all other applications. macOS '
            'is being %s in the background. Do not turn off this computer '
            'during this time.' % self.past,
            'This message will go away when the %s is complete and closing '
            'it will not stop the %s process.' % (self.noun, self.noun),
            'If you feel too much time has passed, please contact %s.'
            % self.config.it_contact,
            'START TIME: %s' % dateutils.format_time(
                start_time, '%b %d %Y %H:%M:%S')])
        return self._dialog(text, window_type=WINDOW_HUD, lock=True)

    def out_of_space(self, free_gigabytes, installer_message=None):
        paragraphs = []
        if installer_message:
            paragraphs.append(installer_message)
        paragraphs.extend([
            'Your disk has %.1f GB of free space. Please clear up some space '
            'by deleting files and then attempt to do the %s by navigating '
            'to:\n\n%s' % (free_gigabytes, self.noun, self.steps),
            'If this error persists, please contact %s.'
            % self.config.it_contact])
        return Dialog(
            title='%s Error' % self.title,
            description='\n\n'.join(paragraphs),
            icon=self.capabilities.icon,
            buttons=((BUTTON_OK, 'OK'),), default_button=1)

    def install_failed(self):
        return self._dialog(
            'There seems to have been an error installing the updates. You '
            'can try again by navigating to:\n\n%s\n\nIf the error persists, '
            'please contact %s.' % (self.steps, self.config.it_contact),
            buttons=((BUTTON_OK, 'OK'),), default_button=1,
            window_type=WINDOW_UTILITY)


if __name__ == '__main__':
    print('This is a library of support tools for osupdatenotifier.')
