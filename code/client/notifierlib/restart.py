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
restart.py

Restarting and shutting down the Mac once updates have been installed.
"""

import subprocess

from . import display
from .constants import POSTACTION_RESTART, POSTACTION_SHUTDOWN


class RestartTrigger(object):
    """Performs the post action an install asked for."""

    def restart(self):
        display.display_status_major('Restarting now')
        subprocess.call(['/sbin/shutdown', '-r', 'now'])

    def shutdown(self):
        display.display_status_major('Shutting down now')
        subprocess.call(['/sbin/shutdown', '-h', 'now'])

    def perform(self, post_action):
        if post_action == POSTACTION_SHUTDOWN:
            self.shutdown()
        elif post_action == POSTACTION_RESTART:
            self.restart()


if __name__ == '__main__':
    print('This is a library of support tools for osupdatenotifier.')
