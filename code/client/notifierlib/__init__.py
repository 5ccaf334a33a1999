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
notifierlib

Support library for osupdatenotifier, a Jamf Pro script that nags about,
and eventually enforces, pending macOS software updates and upgrades.
"""

__version__ = '2.1.0'
