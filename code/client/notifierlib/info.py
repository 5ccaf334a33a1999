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
info.py

Facts about the Mac and the person (maybe) sitting in front of it.
"""

import os
import re
import subprocess

from . import display


DISPLAY_SLEEP_ASSERTION_TYPES = (
    'NoDisplaySleepAssertion', 'PreventUserIdleDisplaySleep')

# audio output holds an assertion whenever anything is playing sound
IGNORED_ASSERTION_OWNERS = ('coreaudiod',)


def _run(cmd):
    '''Runs cmd, returning (returncode, stdout as text)'''
    try:
        proc = subprocess.Popen(cmd, shell=False, stdin=subprocess.PIPE,
                                stdout=subprocess.PIPE,
                                stderr=subprocess.PIPE)
    except OSError as err:
        display.display_warning('Could not run %s: %s', cmd[0], err)
        return (-1, '')
    (output, dummy_err) = proc.communicate()
    return (proc.returncode, output.decode('UTF-8', 'replace'))


def parse_idle_seconds(ioreg_output):
    '''Pulls HIDIdleTime (nanoseconds) out of `ioreg -c IOHIDSystem`
    output and returns whole seconds'''
    regex = re.compile(r'"?HIDIdleTime"?\s+=\s+(\d+)')
    for line in ioreg_output.splitlines():
        idle_re = regex.search(line)
        if idle_re:
            return int(int(idle_re.group(1)) / 1000000000)
    return 0


def get_idle_seconds():
    """Returns the number of seconds since the last mouse
    or keyboard event."""
    dummy_returncode, output = _run(['/usr/sbin/ioreg', '-c', 'IOHIDSystem'])
    return parse_idle_seconds(output)


def parse_display_sleep_assertions(pmset_output):
    '''Returns the per-process lines of `pmset -g assertions` output that
    keep the display awake, minus the audio subsystem's.

    Lines look like:
       pid 412(zoom.us): [0x0001a1b2] 00:10:00 NoDisplaySleepAssertion named: "Zoom"
    The summary lines at the top have no "pid NNN(name)" part.'''
    owner_re = re.compile(r'\(.+\)')
    assertions = []
    for line in pmset_output.splitlines():
        if not any(kind in line for kind in DISPLAY_SLEEP_ASSERTION_TYPES):
            continue
        if not owner_re.search(line):
            continue
        if any(owner in line for owner in IGNORED_ASSERTION_OWNERS):
            continue
        assertions.append(line.strip())
    return assertions


def get_display_sleep_assertions():
    '''Returns active display sleep assertions'''
    dummy_returncode, output = _run(['/usr/bin/pmset', '-g', 'assertions'])
    return parse_display_sleep_assertions(output)


def filevault_encryption_in_progress():
    '''Returns True if FileVault is in the middle of encrypting the boot
    volume. Installing macOS updates then is asking for trouble.'''
    dummy_returncode, output = _run(['/usr/bin/fdesetup', 'status'])
    return 'Encryption in progress' in output


def available_disk_space(volumepath='/'):
    """Returns available diskspace in KBytes.

    Args:
      volumepath: str, optional, default '/'
    Returns:
      int, KBytes in free space available
    """
    if volumepath is None:
        volumepath = '/'
    try:
        stat_val = os.statvfs(volumepath)
    except OSError as err:
        display.display_error(
            'Error getting disk space in %s: %s', volumepath, str(err))
        return 0
    # f_bavail matches df(1) output
    return int(stat_val.f_frsize * stat_val.f_bavail / 1024)


def available_disk_space_gb(volumepath='/'):
    return available_disk_space(volumepath) / 1024.0 / 1024.0


def get_arch():
    """Returns the native architecture: 'arm64' or 'x86_64'"""
    arch = os.uname()[4]
    if arch == 'x86_64':
        # under Rosetta os.uname()[4] is the execution arch, not the
        # native one; the kernel version string gives it away
        if 'ARM64' in os.uname()[3]:
            arch = 'arm64'
    return arch


if __name__ == '__main__':
    print('This is a library of support tools for osupdatenotifier.')
