#!/usr/bin/python
# encoding: utf-8
"""
test_info.py

Unit tests for info.py

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

import unittest

from mock import patch

from notifierlib import info

from .data_scaffolds import (
    IOREG_OUTPUT, PMSET_ASSERTIONS, PMSET_NO_ASSERTIONS)
from .fakes import log


@patch('notifierlib.notifierlog.log', log)
class TestIdleTime(unittest.TestCase):
    """HIDIdleTime parsing."""

    def test_parse_idle_seconds(self):
        self.assertEqual(info.parse_idle_seconds(IOREG_OUTPUT), 725)

    def test_missing_idle_time(self):
        self.assertEqual(info.parse_idle_seconds(''), 0)

    @patch('notifierlib.info._run', return_value=(0, IOREG_OUTPUT))
    def test_get_idle_seconds(self, mock_run):
        self.assertEqual(info.get_idle_seconds(), 725)
        mock_run.assert_called_once_with(
            ['/usr/sbin/ioreg', '-c', 'IOHIDSystem'])


@patch('notifierlib.notifierlog.log', log)
class TestDisplaySleepAssertions(unittest.TestCase):
    """pmset -g assertions parsing."""

    def test_finds_meetings_and_video(self):
        assertions = info.parse_display_sleep_assertions(PMSET_ASSERTIONS)
        self.assertEqual(len(assertions), 2)
        self.assertTrue(assertions[0].startswith('pid 1023(zoom.us)'))
        self.assertIn('Video Wake Lock', assertions[1])

    def test_audio_is_ignored(self):
        assertions = info.parse_display_sleep_assertions(PMSET_ASSERTIONS)
        self.assertFalse([item for item in assertions
                          if 'coreaudiod' in item])

    def test_summary_lines_are_not_assertions(self):
        self.assertEqual(
            info.parse_display_sleep_assertions(PMSET_NO_ASSERTIONS), [])

    @patch('notifierlib.info._run', return_value=(0, PMSET_ASSERTIONS))
    def test_get_display_sleep_assertions(self, dummy_mock_run):
        self.assertEqual(len(info.get_display_sleep_assertions()), 2)


@patch('notifierlib.notifierlog.log', log)
class TestFileVault(unittest.TestCase):
    """fdesetup status parsing."""

    @patch('notifierlib.info._run')
    def test_encrypting(self, mock_run):
        mock_run.return_value = (
            0, 'FileVault is On.\nEncryption in progress: Percent '
               'completed = 42.1\n')
        self.assertTrue(info.filevault_encryption_in_progress())

    @patch('notifierlib.info._run', return_value=(0, 'FileVault is On.\n'))
    def test_not_encrypting(self, dummy_mock_run):
        self.assertFalse(info.filevault_encryption_in_progress())


@patch('notifierlib.notifierlog.log', log)
class TestDiskSpace(unittest.TestCase):
    """Free space on the boot volume."""

    @patch('notifierlib.info.os.statvfs')
    def test_available_disk_space(self, mock_statvfs):
        mock_statvfs.return_value.f_frsize = 4096
        mock_statvfs.return_value.f_bavail = 2621440
        self.assertEqual(info.available_disk_space(), 10485760)
        self.assertEqual(info.available_disk_space_gb(), 10.0)

    @patch('notifierlib.info.os.statvfs', side_effect=OSError(2, 'gone'))
    def test_statvfs_failure(self, dummy_mock_statvfs):
        self.assertEqual(info.available_disk_space('/Volumes/Gone'), 0)


@patch('notifierlib.notifierlog.log', log)
class TestArch(unittest.TestCase):
    """Native architecture detection."""

    @patch('notifierlib.info.os.uname')
    def test_rosetta_reports_arm64(self, mock_uname):
        mock_uname.return_value = (
            'Darwin', 'mac01', '23.2.0',
            'Darwin Kernel Version 23.2.0: RELEASE_ARM64_T6000', 'x86_64')
        self.assertEqual(info.get_arch(), 'arm64')

    @patch('notifierlib.info.os.uname')
    def test_intel(self, mock_uname):
        mock_uname.return_value = (
            'Darwin', 'mac01', '22.6.0',
            'Darwin Kernel Version 22.6.0: RELEASE_X86_64', 'x86_64')
        self.assertEqual(info.get_arch(), 'x86_64')


def main():
    unittest.main(buffer=True)


if __name__ == '__main__':
    main()
