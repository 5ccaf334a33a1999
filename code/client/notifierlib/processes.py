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
processes.py

Functions for finding running processes, and a pid file lock so only one
copy of osupdatenotifier runs at a time.
"""

import errno
import fcntl
import os
import subprocess

from . import display
from .constants import DEFAULT_LOCK_FILE


def get_running_processes():
    """Returns a list of paths of running processes"""
    proc = subprocess.Popen(['/bin/ps', '-axo' 'comm='],
                            shell=False, stdin=subprocess.PIPE,
                            stdout=subprocess.PIPE,
                            stderr=subprocess.PIPE)
    output = proc.communicate()[0].decode('UTF-8')
    if proc.returncode == 0:
        return [item for item in output.splitlines()
                if item.startswith('/')]
    return []


def is_app_running(appname):
    """Tries to determine if the application in appname is currently
    running"""
    display.display_detail('Checking if %s is running...' % appname)
    proc_list = get_running_processes()
    matching_items = []
    if appname.startswith('/'):
        # search by exact path
        matching_items = [item for item in proc_list
                          if item == appname]
    elif appname.endswith('.app'):
        # search by filename
        matching_items = [item for item in proc_list
                          if '/'+ appname + '/Contents/MacOS/' in item]
    else:
        # check executable name
        matching_items = [item for item in proc_list
                          if item.endswith('/' + appname)]
    if not matching_items:
        # try adding '.app' to the name and check again
        matching_items = [item for item in proc_list
                          if '/'+ appname + '.app/Contents/MacOS/' in item]

    if matching_items:
        display.display_debug1('Matching process list: %s' % matching_items)
        display.display_detail('%s is running!' % appname)
        return True

    return False


def blocking_applications_running(appnames):
    """Returns the first of appnames that is running, or None"""
    for appname in appnames:
        if is_app_running(appname):
            return appname
    return None


class LockError(Exception):
    """Another instance holds the lock"""
    def __init__(self, pid):
        if pid is None:
            Exception.__init__(self, 'Another instance is starting up')
        else:
            Exception.__init__(
                self, 'Another instance is running as pid %s' % pid)
        self.pid = pid


class InstanceLock(object):
    """A pid file held under flock(2) for the whole run. The kernel drops
    the flock when its holder exits, so a pid file left behind by a killed
    run never blocks the next one, and a pid file that is still empty
    because its holder hasn't written it yet is still locked."""

    def __init__(self, path=DEFAULT_LOCK_FILE):
        self.path = path
        self.fd = None

    @property
    def held(self):
        return self.fd is not None

    def _read_pid(self):
        try:
            with open(self.path) as fileobj:
                return int(fileobj.read().strip())
        except (OSError, IOError, ValueError):
            return None

    def acquire(self):
        '''Takes the lock or raises LockError'''
        while True:
            fd = os.open(self.path, os.O_CREAT | os.O_RDWR, 0o644)
            try:
                fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
            except OSError as err:
                os.close(fd)
                if err.errno not in (errno.EAGAIN, errno.EACCES):
                    raise
                raise LockError(self._read_pid())
            try:
                opened = os.fstat(fd)
                current = os.stat(self.path)
                same_file = (opened.st_dev, opened.st_ino) == (
                    current.st_dev, current.st_ino)
            except OSError:
                same_file = False
            if same_file:
                break
            # the previous holder removed the file while we were opening it
            os.close(fd)

        previous_pid = self._read_pid()
        if previous_pid:
            display.display_detail(
                'Reclaiming lock file %s left by pid %s.',
                self.path, previous_pid)
        os.ftruncate(fd, 0)
        os.write(fd, ('%s\n' % os.getpid()).encode('UTF-8'))
        self.fd = fd

    def release(self):
        if self.held:
            try:
                os.unlink(self.path)
            except OSError:
                pass
            os.close(self.fd)
            self.fd = None

    def __enter__(self):
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.release()


if __name__ == '__main__':
    print('This is a library of support tools for osupdatenotifier.')
