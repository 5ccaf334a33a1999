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
jamfhelper.py

Shows Dialogs with Jamf's jamfHelper.

jamfHelper reports what happened on stdout (and in its exit code):
    0           button 1 clicked
    2           button 2 clicked
    <delay><n>  with -showDelayOptions: chosen delay in seconds, then the
                button number, e.g. "36001"
    239         the user force-quit the window
    243         a window without buttons timed out
    1, 250, 255 jamfHelper couldn't show the window at all
A window with buttons that times out reports its default button, so a
timeout is recognized by how long the window was up.
"""

import subprocess
import time

from . import display
from .constants import EXIT_STATUS_DIALOG_FAILURE, JAMFHELPER
from .dialog import WINDOW_HUD, clicked, dismissed


JAMFHELPER_QUIT = 239
JAMFHELPER_TIMED_OUT = 243
JAMFHELPER_FAILURES = (1, 250, 255)


class Error(Exception):
    """Base error for jamfHelper"""
    pass


class DialogError(Error):
    """jamfHelper could not be run or could not show the window"""
    exit_code = EXIT_STATUS_DIALOG_FAILURE


def build_command(dialog, jamfhelper=JAMFHELPER):
    '''Returns the jamfHelper argument list for a Dialog'''
    cmd = [jamfhelper, '-windowType', dialog.window_type,
           '-title', dialog.title, '-description', dialog.description]
    if dialog.icon:
        cmd.extend(['-icon', dialog.icon])
    for index, (dummy_key, label) in enumerate(dialog.buttons):
        cmd.extend(['-button%d' % (index + 1), label])
    if dialog.default_button:
        cmd.extend(['-defaultButton', str(dialog.default_button)])
    if dialog.cancel_button:
        cmd.extend(['-cancelButton', str(dialog.cancel_button)])
    if dialog.timeout:
        cmd.extend(['-timeout', str(int(dialog.timeout))])
    if dialog.delay_options:
        cmd.extend(['-showDelayOptions',
                    ', '.join(str(delay) for delay in dialog.delay_options)])
    if dialog.countdown:
        cmd.extend(['-countdown', '-alignCountdown', 'right'])
    if dialog.lock and dialog.window_type == WINDOW_HUD:
        cmd.append('-lockHUD')
    return cmd


def _button_key(dialog, number):
    if number < 1 or number > len(dialog.buttons):
        raise DialogError('jamfHelper reported unknown button %s' % number)
    return dialog.buttons[number - 1][0]


def parse_response(dialog, output, returncode, elapsed):
    '''Turns what jamfHelper reported into a DialogResponse'''
    output = (output or '').strip()
    if returncode == JAMFHELPER_QUIT or output == str(JAMFHELPER_QUIT):
        display.display_info('The notification window was force-quit.')
        return dismissed()
    if returncode == JAMFHELPER_TIMED_OUT:
        return dismissed()
    if dialog.timeout and elapsed >= dialog.timeout:
        display.display_info('The notification window timed out.')
        return dismissed()

    if not output:
        if returncode in JAMFHELPER_FAILURES:
            raise DialogError(
                'jamfHelper failed to show "%s" (exit code %s)'
                % (dialog.title, returncode))
        output = str(returncode)
    if not output.isdigit():
        raise DialogError('Unexpected output from jamfHelper: %r' % output)

    if dialog.delay_options:
        button_number = int(output[-1])
        delay = int(output[:-1] or 0)
        return clicked(_button_key(dialog, button_number), delay)

    code = int(output)
    if code == 0:
        return clicked(_button_key(dialog, 1))
    if code == 2:
        return clicked(_button_key(dialog, 2))
    raise DialogError('Unexpected jamfHelper result %s' % code)


class Hud(object):
    """A jamfHelper window left up while something else happens."""

    def __init__(self, proc):
        self.proc = proc

    def dismiss(self):
        if self.proc.poll() is None:
            self.proc.terminate()
            try:
                self.proc.wait(timeout=10)
            except subprocess.TimeoutExpired:
                self.proc.kill()


class JamfHelper(object):
    """Dialog presenter backed by jamfHelper."""

    def __init__(self, jamfhelper=JAMFHELPER, clock=time.time):
        self.jamfhelper = jamfhelper
        self.clock = clock

    def show(self, dialog):
        '''Shows dialog and blocks until it's answered, times out or is
        force-quit. Returns a DialogResponse.'''
        cmd = build_command(dialog, self.jamfhelper)
        display.display_debug1('jamfHelper cmd: %s', cmd)
        started = self.clock()
        try:
            proc = subprocess.Popen(
                cmd, shell=False, stdin=subprocess.PIPE,
                stdout=subprocess.PIPE, stderr=subprocess.PIPE)
        except OSError as err:
            raise DialogError('Could not run jamfHelper: %s' % err)
        output = proc.communicate()[0].decode('UTF-8', 'replace')
        elapsed = self.clock() - started
        display.display_detail(
            'jamfHelper exit code %s, output %r', proc.returncode,
            output.strip())
        return parse_response(dialog, output, proc.returncode, elapsed)

    def show_and_forget(self, dialog):
        '''Shows dialog without waiting for an answer'''
        self.start_hud(dialog)

    def start_hud(self, dialog):
        '''Puts up dialog in the background; returns a Hud whose dismiss()
        takes it down again'''
        cmd = build_command(dialog, self.jamfhelper)
        try:
            proc = subprocess.Popen(
                cmd, shell=False, stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
        except OSError as err:
            raise DialogError('Could not run jamfHelper: %s' % err)
        return Hud(proc)


if __name__ == '__main__':
    print('This is a library of support tools for osupdatenotifier.')
