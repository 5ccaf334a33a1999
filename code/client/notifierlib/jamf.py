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
jamf.py

Runs Jamf Pro policies by custom trigger. Major upgrades are delegated to
an admin-built policy (typically one that runs startosinstall).
"""

import subprocess

from . import display
from .constants import JAMF_BINARY, POSTACTION_NONE
from .su_tool import InstallResult


class JamfPolicyRunner(object):
    """Runs `jamf policy -event <trigger>`, blocking until it's done."""

    def __init__(self, trigger, jamf=JAMF_BINARY):
        self.trigger = trigger
        self.jamf = jamf

    def command(self):
        return [self.jamf, 'policy', '-event', self.trigger,
                '-randomDelaySeconds', '0']

    def install_all(self, restart=True):
        '''Returns an InstallResult. The upgrade policy owns the restart,
        so there is never a post action for us to take.'''
        cmd = self.command()
        display.display_info('Running Jamf policy trigger %s', self.trigger)
        try:
            proc = subprocess.Popen(
                cmd, shell=False, stdin=subprocess.PIPE,
                stdout=subprocess.PIPE, stderr=subprocess.STDOUT)
        except OSError as err:
            display.display_error('Could not run jamf: %s', err)
            return InstallResult(exit_code=-1, out_of_space=False,
                                 message=str(err),
                                 post_action=POSTACTION_NONE)
        output = proc.communicate()[0].decode('UTF-8', 'replace')
        for line in output.splitlines():
            if line.strip():
                display.display_detail(line.strip())
        return InstallResult(exit_code=proc.returncode, out_of_space=False,
                             message=None, post_action=POSTACTION_NONE)


if __name__ == '__main__':
    print('This is a library of support tools for osupdatenotifier.')
