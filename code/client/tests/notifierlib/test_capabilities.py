#!/usr/bin/python
# encoding: utf-8
"""
test_capabilities.py

Unit tests for capabilities.py

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

from notifierlib import capabilities


class TestNormalizeVersion(unittest.TestCase):
    """OS version strings and tuples."""

    def test_trailing_zeros_dropped(self):
        self.assertEqual(capabilities.normalize_version('11.0'), (11,))
        self.assertEqual(capabilities.normalize_version((10, 13, 0)),
                         (10, 13))

    def test_strings_and_suffixes(self):
        self.assertEqual(capabilities.normalize_version(['13', '2b']),
                         (13, 2))


class TestResolve(unittest.TestCase):
    """Capability table lookups."""

    def test_old_mac_uses_bsexec(self):
        caps = capabilities.resolve('10.9.5', 'i386')
        self.assertEqual(caps.launch_method, 'bsexec')
        self.assertFalse(caps.supports_halt)

    def test_halt_arrives_in_high_sierra_point_four(self):
        self.assertFalse(capabilities.resolve('10.13.3', 'i386').supports_halt)
        self.assertTrue(capabilities.resolve('10.13.4', 'i386').supports_halt)

    def test_mojave_opens_software_update(self):
        caps = capabilities.resolve('10.14.6', 'i386')
        self.assertTrue(caps.update_ui.endswith('Software Update.app'))
        self.assertIsNone(caps.restart_flag)
        self.assertFalse(caps.supports_unattended)

    def test_big_sur_restart_flag(self):
        caps = capabilities.resolve('11.0', 'i386')
        self.assertEqual(caps.restart_flag, '-R')
        self.assertTrue(caps.supports_unattended)
        self.assertIn('System Preferences', caps.settings_path)

    def test_ventura_says_system_settings(self):
        caps = capabilities.resolve('13.6.1', 'i386')
        self.assertIn('System Settings', caps.settings_path)

    def test_apple_silicon(self):
        caps = capabilities.resolve('14.2', 'arm64')
        self.assertFalse(caps.supports_cli_install)
        self.assertFalse(caps.supports_unattended)


class TestForceMethod(unittest.TestCase):
    """How an out-of-deferrals Mac gets updated."""

    def test_minor_on_intel(self):
        caps = capabilities.resolve('12.7', 'i386')
        self.assertEqual(capabilities.force_method_for(caps, 'minor'), 'cli')

    def test_minor_on_apple_silicon(self):
        caps = capabilities.resolve('12.7', 'arm64')
        self.assertEqual(capabilities.force_method_for(caps, 'minor'), 'gui')

    def test_major_depends_on_trigger(self):
        caps = capabilities.resolve('12.7', 'arm64')
        self.assertEqual(
            capabilities.force_method_for(caps, 'major', 'upgradeOS'), 'cli')
        self.assertEqual(capabilities.force_method_for(caps, 'major'), 'gui')


def main():
    unittest.main(buffer=True)


if __name__ == '__main__':
    main()
