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
su_tool.py

wrapper for running /usr/sbin/softwareupdate
"""

import collections
import datetime
import os
import subprocess
import time

from . import display
from .constants import (
    POSTACTION_NONE, POSTACTION_RESTART, POSTACTION_SHUTDOWN,
    SOFTWARE_UPDATE_LIST_CACHE)


SOFTWAREUPDATE = '/usr/sbin/softwareupdate'

PendingUpdates = collections.namedtuple(
    'PendingUpdates', ['restart_required', 'no_restart'])

InstallResult = collections.namedtuple(
    'InstallResult', ['exit_code', 'out_of_space', 'message', 'post_action'])

OUT_OF_SPACE_MARKER = 'Not enough free disk space'
SHUTDOWN_MARKERS = ('Please call halt', 'your computer must shut down')
RESTART_MARKER = 'requires that you restart'


def parse_su_update_line_new_style(line):
    '''Parses a new-style software update line'''
    info = {}
    line = line.strip().rstrip(',')
    for subitem in line.split(', '):
        key, _, value = subitem.partition(": ")
        if key:
            info[key] = value
    return info


def parse_su_update_line_old_style(line):
    '''Parses an old-style (pre-10.15) softwareupdate -l output line
    into a dict'''
    info = {}
    line = line.strip()
    title, seperator, line = line.partition("(")
    if not seperator == "(":
        # no idea of the format, just return an empty dict
        return {}
    info['Title'] = title.rstrip()
    version, seperator, line = line.partition(")")
    if not seperator == ")":
        return {}
    info['Version'] = version
    line = line.lstrip(', ')
    size, seperator, line = line.partition('K')
    if seperator == 'K':
        info['Size'] = '%sK' % size
    # now start from the end
    if line.endswith(" [restart]"):
        line = line[0:-len(" [restart]")]
        info['Action'] = 'restart'
    if line.endswith(" [recommended]"):
        line = line[0:-len(" [recommended]")]
        info['Recommended'] = 'YES'
    else:
        info['Recommended'] = 'NO'
    return info


def parse_su_identifier(line):
    '''parses first line of softwareupdate -l item output'''
    if line.startswith('   * '):
        label = line[5:]
    elif line.startswith('* Label: '):
        label = line[9:]
    else:
        return {}
    update_parts = label.split('-')
    # version is the bit after the last hyphen
    vers = update_parts[-1]
    identifier = '-'.join(update_parts[0:-1])
    return {'Label': label,
            'identifier': identifier,
            'version': vers}


def parse_su_update_lines(line1, line2):
    '''Parses two lines from softwareupdate -l output and returns a dict'''
    info = parse_su_identifier(line1)
    if line1.startswith('   * '):
        info.update(parse_su_update_line_old_style(line2))
    elif line1.startswith('* Label: '):
        info.update(parse_su_update_line_new_style(line2))
    return info


def requires_restart(item):
    '''True if an update item from parse_su_update_lines needs a restart
    (or a shut down) to install'''
    action = item.get('Action', '').strip().lower()
    return action in ('restart', 'shut down', 'shutdown')


def parse_update_list(output):
    '''Sorts `softwareupdate -l` output into restart-required and
    no-restart updates. Only recommended updates count as no-restart;
    anything needing a restart counts regardless.'''
    restart_required = []
    no_restart = []
    lines = output.splitlines()
    for index, line in enumerate(lines):
        if not line.startswith(('   * ', '* Label: ')):
            continue
        next_line = ''
        if index + 1 < len(lines):
            next_line = lines[index + 1]
        item = parse_su_update_lines(line, next_line)
        name = item.get('Title') or item.get('Label')
        if requires_restart(item):
            restart_required.append(name)
        elif item.get('Recommended', '').upper() == 'YES':
            no_restart.append(name)
    return PendingUpdates(restart_required=restart_required,
                          no_restart=no_restart)


def parse_install_output(lines, exit_code):
    '''Inspects `softwareupdate -i` output for the things we act on'''
    out_of_space = False
    message = None
    post_action = POSTACTION_NONE
    for line in lines:
        if OUT_OF_SPACE_MARKER in line:
            out_of_space = True
            message = line.strip()
        if any(marker in line for marker in SHUTDOWN_MARKERS):
            # firmware updates on T2 Macs need a full shut down
            post_action = POSTACTION_SHUTDOWN
        elif RESTART_MARKER in line and post_action == POSTACTION_NONE:
            post_action = POSTACTION_RESTART
    return InstallResult(exit_code=exit_code, out_of_space=out_of_space,
                         message=message, post_action=post_action)


def parse_log_stats_end(output):
    '''Returns the "end:" time of `log stats --process` output as epoch
    seconds, or None. The time looks like "Tue Mar 12 14:03:27 2024"
    and is local time.'''
    for line in output.splitlines():
        line = line.strip()
        if not line.startswith('end:'):
            continue
        value = line[len('end:'):].strip()
        try:
            date = datetime.datetime.strptime(value, '%a %b %d %H:%M:%S %Y')
        except ValueError:
            display.display_warning(
                'Could not understand log stats end time: %s', value)
            return None
        return int(time.mktime(date.timetuple()))
    return None


class SoftwareUpdateChecker(object):
    """Lists pending Apple software updates. `softwareupdate -l` is slow,
    so its output is cached in /tmp, which the OS cleans up on restart."""

    def __init__(self, cache_path=SOFTWARE_UPDATE_LIST_CACHE,
                 sleep=time.sleep):
        self.cache_path = cache_path
        self.sleep = sleep

    def needs_refresh(self, last_check, now, interval):
        '''True if the cached update list is missing or stale'''
        if not os.path.exists(self.cache_path):
            return True
        if not last_check:
            return True
        return now - last_check > interval

    def refresh(self):
        '''Restarts softwareupdated and caches a fresh update list'''
        display.display_status_major('Checking for available software updates')
        subprocess.call(
            ['/bin/launchctl', 'kickstart', '-k',
             'system/com.apple.softwareupdated'])
        # give the daemon a moment to come up
        self.sleep(3)
        proc = subprocess.Popen(
            [SOFTWAREUPDATE, '-l'], shell=False, stdin=subprocess.PIPE,
            stdout=subprocess.PIPE, stderr=subprocess.STDOUT)
        output = proc.communicate()[0]
        with open(self.cache_path, 'wb') as fileobj:
            fileobj.write(output)

    def list_pending(self):
        '''Returns PendingUpdates from the cached list'''
        try:
            with open(self.cache_path, 'rb') as fileobj:
                output = fileobj.read().decode('UTF-8', 'replace')
        except (OSError, IOError) as err:
            display.display_warning(
                'Could not read %s: %s', self.cache_path, err)
            output = ''
        pending = parse_update_list(output)
        for name in pending.restart_required:
            display.display_detail('Update requiring restart: %s', name)
        for name in pending.no_restart:
            display.display_detail('Update not requiring restart: %s', name)
        return pending


class SoftwareUpdateRunner(object):
    """Installs all pending updates with softwareupdate, blocking until
    it's finished."""

    def __init__(self, capabilities):
        self.capabilities = capabilities

    def command(self, restart=True):
        cmd = [SOFTWAREUPDATE, '-ia', '--verbose']
        if restart and self.capabilities.restart_flag:
            cmd.append(self.capabilities.restart_flag)
        return cmd

    def install_all(self, restart=True):
        '''Returns an InstallResult'''
        cmd = self.command(restart=restart)
        display.display_debug1('softwareupdate cmd: %s', cmd)
        try:
            proc = subprocess.Popen(
                cmd, shell=False, stdin=subprocess.PIPE,
                stdout=subprocess.PIPE, stderr=subprocess.STDOUT)
        except OSError as err:
            display.display_error('Could not run softwareupdate: %s', err)
            return InstallResult(exit_code=-1, out_of_space=False,
                                 message=str(err),
                                 post_action=POSTACTION_NONE)
        lines = []
        while True:
            output = proc.stdout.readline()
            if not output:
                break
            output = output.decode('UTF-8', 'replace').rstrip('\n\r')
            if output.strip():
                display.display_detail(output.strip())
            lines.append(output)
        exit_code = proc.wait()
        return parse_install_output(lines, exit_code)


def installer_activity_end(process_name):
    '''Returns when process_name last logged anything, as epoch seconds'''
    proc = subprocess.Popen(
        ['/usr/bin/log', 'stats', '--process', process_name], shell=False,
        stdin=subprocess.PIPE, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
    output = proc.communicate()[0].decode('UTF-8', 'replace')
    return parse_log_stats_end(output)


if __name__ == '__main__':
    print('This is a library of support tools for osupdatenotifier.')
