#!/usr/bin/python
# encoding: utf-8
"""
test_processes.py

Unit tests for processes.py

"""
# Copyright 2019-2024 The osupdatenotifier Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#      https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import fcntl
import os
import shutil
import tempfile
import unittest

from mock import patch

from notifierlib import processes

from .data_scaffolds import RUNNING_PROCESSES
from .fakes import log


@patch('notifierlib.notifierlog.log', log)
@patch('notifierlib.processes.get_running_processes',
       return_value=RUNNING_PROCESSES)
class TestIsAppRunning(unittest.TestCase):
    """Test is_app_running for each match catch."""

    def test_exact_path(self, dummy_ps_mock):
        self.assertTrue(processes.is_app_running(
            '/Applications/Safari.app/Contents/MacOS/Safari'))
        self.assertFalse(processes.is_app_running('/usr/local/bin/bonzi'))

    def test_app_name(self, dummy_ps_mock):
        self.assertTrue(processes.is_app_running('Keynote.app'))
        self.assertFalse(processes.is_app_running('iTunes.app'))

    def test_executable_name(self, dummy_ps_mock):
        self.assertTrue(processes.is_app_running('jamf'))
        self.assertFalse(processes.is_app_running('bonzi'))

    def test_name_without_dot_app(self, dummy_ps_mock):
        self.assertTrue(processes.is_app_running('Safari'))

    def test_first_blocking_application(self, dummy_ps_mock):
        self.assertEqual(
            processes.blocking_applications_running(
                ['iTunes', 'Keynote', 'Safari']), 'Keynote')
        self.assertIsNone(
            processes.blocking_applications_running(['iTunes']))


@patch('notifierlib.notifierlog.log', log)
class TestInstanceLock(unittest.TestCase):
    """The pid file lock."""

    def setUp(self):
        self.tempdir = tempfile.mkdtemp()
        self.path = os.path.join(self.tempdir, 'osupdatenotifier.pid')

    def tearDown(self):
        shutil.rmtree(self.tempdir)

    def _write_pid(self, pid):
        with open(self.path, 'w') as fileobj:
            fileobj.write('%s\n' % pid)

    def _hold_lock(self):
        '''Locks the pid file the way a running instance does'''
        fileobj = open(self.path, 'a')
        self.addCleanup(fileobj.close)
        fcntl.flock(fileobj.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)

    def test_acquire_and_release(self):
        with processes.InstanceLock(self.path) as lock:
            self.assertTrue(lock.held)
            with open(self.path) as fileobj:
                self.assertEqual(int(fileobj.read()), os.getpid())
        self.assertFalse(lock.held)
        self.assertFalse(os.path.exists(self.path))

    def test_another_instance_holds_lock(self):
        self._write_pid(99999)
        self._hold_lock()
        lock = processes.InstanceLock(self.path)
        with self.assertRaises(processes.LockError) as context:
            lock.acquire()
        self.assertEqual(context.exception.pid, 99999)
        self.assertFalse(lock.held)
        lock.release()
        self.assertTrue(os.path.exists(self.path))

    def test_instance_that_has_not_written_its_pid_yet(self):
        open(self.path, 'w').close()
        self._hold_lock()
        lock = processes.InstanceLock(self.path)
        with self.assertRaises(processes.LockError) as context:
            lock.acquire()
        self.assertIsNone(context.exception.pid)
        self.assertFalse(lock.held)
        with open(self.path) as fileobj:
            self.assertEqual(fileobj.read(), '')

    def test_second_lock_in_same_process_fails(self):
        with processes.InstanceLock(self.path):
            with self.assertRaises(processes.LockError) as context:
                processes.InstanceLock(self.path).acquire()
            self.assertEqual(context.exception.pid, os.getpid())

    def test_pid_file_of_dead_instance_is_reclaimed(self):
        self._write_pid(99999)
        lock = processes.InstanceLock(self.path)
        lock.acquire()
        self.assertTrue(lock.held)
        with open(self.path) as fileobj:
            self.assertEqual(int(fileobj.read()), os.getpid())
        lock.release()

    def test_empty_pid_file_of_dead_instance_is_reclaimed(self):
        open(self.path, 'w').close()
        lock = processes.InstanceLock(self.path)
        lock.acquire()
        self.assertTrue(lock.held)
        lock.release()


def main():
    unittest.main(buffer=True)


if __name__ == '__main__':
    main()
