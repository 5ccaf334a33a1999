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
capabilities.py

What this Mac's version of macOS can do, resolved once per run.

Each row of CAPABILITY_TABLE applies from its minimum OS version upward
until the next row takes over. OS versions are normalized tuples of ints,
e.g. (10, 13, 4) or (14, 2).
"""

import collections

from .constants import FORCE_METHOD_CLI, FORCE_METHOD_GUI
from .constants import UPDATE_ACTION_MAJOR


Capabilities = collections.namedtuple('Capabilities', [
    'os_version',
    'arch',
    'launch_method',          # launchctl subcommand to reach the GUI session
    'icon',                   # Software Update icon for jamfHelper
    'update_ui',              # what to `open` to show pending updates
    'settings_path',          # how a user gets there, for dialog text
    'restart_flag',           # extra softwareupdate flag, or None
    'supports_halt',          # firmware updates may ask for a shut down
    'supports_cli_install',   # softwareupdate -ia can install everything
    'supports_unattended',    # install while nobody is logged in
])


_ICON_PREFPANE = ('/System/Library/PreferencePanes/SoftwareUpdate.prefPane'
                  '/Contents/Resources/SoftwareUpdate.icns')
_ICON_CLT = ('/System/Library/CoreServices/Install Command Line Developer '
             'Tools.app/Contents/Resources/SoftwareUpdate.icns')
_ICON_SU_APP = ('/System/Library/CoreServices/Software Update.app'
                '/Contents/Resources/SoftwareUpdate.icns')
_ICON_SU_APP_LEGACY = ('/System/Library/CoreServices/Software Update.app'
                       '/Contents/Resources/Software Update.icns')

_SU_APP = '/System/Library/CoreServices/Software Update.app'
_APP_STORE_UPDATES = 'macappstore://showUpdatesPage'

# (minimum version, launch_method, icon, update_ui, settings_path,
#  restart_flag, supports_halt, supports_unattended)
CAPABILITY_TABLE = (
    ((10, 0), 'bsexec', _ICON_SU_APP_LEGACY, _APP_STORE_UPDATES,
     'App Store > Updates tab', None, False, False),
    ((10, 8), 'bsexec', _ICON_SU_APP, _APP_STORE_UPDATES,
     'App Store > Updates tab', None, False, False),
    ((10, 10), 'asuser', _ICON_SU_APP, _APP_STORE_UPDATES,
     'App Store > Updates tab', None, False, False),
    ((10, 13), 'asuser', _ICON_CLT, _APP_STORE_UPDATES,
     'App Store > Updates tab', None, False, False),
    ((10, 13, 4), 'asuser', _ICON_CLT, _APP_STORE_UPDATES,
     'App Store > Updates tab', None, True, False),
    ((10, 14), 'asuser', _ICON_PREFPANE, _SU_APP,
     'System Preferences > Software Update', None, True, False),
    ((11,), 'asuser', _ICON_PREFPANE, _SU_APP,
     'System Preferences > Software Update', '-R', True, True),
    ((13,), 'asuser', _ICON_PREFPANE, _SU_APP,
     'System Settings > General > Software Update', '-R', True, True),
)


def normalize_version(version):
    '''Turns '10.13.4', (10, 13, 4) or ['13', '2'] into a tuple of ints,
    dropping trailing zeros so (11, 0) == (11,)'''
    if isinstance(version, str):
        version = version.strip().split('.')
    parts = []
    for part in version:
        digits = ''
        for char in str(part):
            if not char.isdigit():
                break
            digits += char
        parts.append(int(digits or 0))
    while len(parts) > 1 and parts[-1] == 0:
        parts.pop()
    return tuple(parts)


def resolve(os_version, arch):
    '''Returns the Capabilities for os_version on arch'''
    os_version = normalize_version(os_version)
    row = CAPABILITY_TABLE[0]
    for candidate in CAPABILITY_TABLE:
        if os_version >= candidate[0]:
            row = candidate
    (dummy_minimum, launch_method, icon, update_ui, settings_path,
     restart_flag, supports_halt, supports_unattended) = row
    apple_silicon = arch == 'arm64'
    return Capabilities(
        os_version=os_version,
        arch=arch,
        launch_method=launch_method,
        icon=icon,
        update_ui=update_ui,
        settings_path=settings_path,
        restart_flag=restart_flag,
        supports_halt=supports_halt,
        # softwareupdate can't authorize restart-required installs on
        # Apple silicon without a volume owner's credentials
        supports_cli_install=not apple_silicon,
        supports_unattended=supports_unattended and not apple_silicon)


def force_method_for(capabilities, update_action, upgrade_trigger=None):
    '''Decides how an out-of-deferrals Mac gets its update: 'cli' installs
    it for the user, 'gui' hands the user the update UI and a deadline'''
    if update_action == UPDATE_ACTION_MAJOR:
        if upgrade_trigger:
            return FORCE_METHOD_CLI
        return FORCE_METHOD_GUI
    if capabilities.supports_cli_install:
        return FORCE_METHOD_CLI
    return FORCE_METHOD_GUI


if __name__ == '__main__':
    print('This is a library of support tools for osupdatenotifier.')
