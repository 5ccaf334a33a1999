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
launcher.py

Opens things in the logged-in user's GUI session. We run as root from
a Jamf policy, so anything the user should see has to be launched into
their session.
"""

import subprocess

from . import display
from .constants import APP_STORE_UPGRADE_SEARCH_URL, UPDATE_ACTION_MAJOR


def loginwindow_pid(uid):
    '''Returns the pid of uid's loginwindow process, for launchctl bsexec'''
    proc = subprocess.Popen(
        ['/usr/bin/pgrep', '-x', '-u', str(uid), 'loginwindow'], shell=False,
        stdin=subprocess.PIPE, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
    output = proc.communicate()[0].decode('UTF-8')
    pids = output.split()
    if pids:
        return pids[0]
    return None


class UpdateLauncher(object):
    """Takes the user to the place they can install the update."""

    def __init__(self, config, capabilities, username, uid,
                 upgrade_runner=None):
        self.config = config
        self.capabilities = capabilities
        self.username = username
        self.uid = uid
        self.upgrade_runner = upgrade_runner

    def _session_command(self, cmd):
        if self.capabilities.launch_method == 'bsexec':
            target = loginwindow_pid(self.uid)
        else:
            target = self.uid
        return ['/bin/launchctl', self.capabilities.launch_method,
                str(target)] + list(cmd)

    def _call(self, cmd):
        display.display_debug1('Launching: %s', cmd)
        try:
            return subprocess.call(cmd)
        except OSError as err:
            display.display_warning('Could not run %s: %s', cmd[0], err)
            return -1

    def open_update_ui(self):
        '''Shows the user the Software Update UI, or starts the upgrade'''
        if self.config.update_action == UPDATE_ACTION_MAJOR:
            if self.upgrade_runner is not None:
                result = self.upgrade_runner.install_all()
                return result.exit_code
            display.display_info('Opening the App Store to macOS upgrades.')
            return self._call(self._session_command(
                ['/usr/bin/open', APP_STORE_UPGRADE_SEARCH_URL]))
        display.display_info(
            'Opening %s for %s.', self.capabilities.update_ui, self.username)
        return self._call(self._session_command(
            ['/usr/bin/open', self.capabilities.update_ui]))

    def open_url(self, url):
        '''Opens url in the user's default browser'''
        display.display_info('Opening %s for %s.', url, self.username)
        return self._call(
            ['/usr/bin/sudo', '-u', self.username, '/usr/bin/open', url])


if __name__ == '__main__':
    print('This is a library of support tools for osupdatenotifier.')
