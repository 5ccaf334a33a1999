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
osutils.py

Common functions and classes for querying the OS.
"""

import platform
import subprocess

# PyLint cannot properly find names inside Cocoa libraries, so issues bogus
# No name 'Foo' in module 'Bar' warnings. Disable them.
# pylint: disable=E0611
from SystemConfiguration import SCDynamicStoreCopyConsoleUser
# pylint: enable=E0611

# we use lots of camelCase-style names. Deal with it.
# pylint: disable=C0103


def getOsVersion(only_major_minor=True, as_tuple=False):
    """Returns an OS version.

    Args:
      only_major_minor: Boolean. If True, only include major/minor versions.
      as_tuple: Boolean. If True, return a tuple of ints, otherwise a string.
    """
    # platform.mac_ver() returns 10.16-style version info on Big Sur when
    # Python was built against an older SDK, so ask sw_vers instead.
    try:
        os_version_tuple = subprocess.check_output(
            ('/usr/bin/sw_vers', '-productVersion'),
            env={'SYSTEM_VERSION_COMPAT': '0'}
        ).decode('UTF-8').rstrip().split('.')
    except subprocess.CalledProcessError:
        os_version_tuple = platform.mac_ver()[0].split(".")
    if only_major_minor:
        os_version_tuple = os_version_tuple[0:2]
    if as_tuple:
        return tuple(map(int, os_version_tuple))
    return '.'.join(os_version_tuple)


def getconsoleuser():
    """Return console user"""
    cfuser = SCDynamicStoreCopyConsoleUser(None, None, None)
    return cfuser[0]


def getconsoleuid():
    """Return the uid of the console user, or None"""
    cfuser = SCDynamicStoreCopyConsoleUser(None, None, None)
    if cfuser[0]:
        return cfuser[1]
    return None


if __name__ == '__main__':
    print('This is a library of support tools for osupdatenotifier.')
