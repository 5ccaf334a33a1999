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
prefs.py

Preferences for osupdatenotifier, read from the com.github.osupdatenotifier
domain so admins can set them with a configuration profile instead of (or
as well as) Jamf script parameters.
"""

from Foundation import CFPreferencesAppValueIsForced
from Foundation import CFPreferencesCopyAppValue

from .config import SETTING_NAMES
from .constants import BUNDLE_ID, DEFAULT_LOG_FILE, DEFAULT_STATE_PLIST
from .wrappers import is_a_string


DEFAULT_PREFS = {
    'LogFile': DEFAULT_LOG_FILE,
    'LoggingLevel': 1,
    'LogToSyslog': False,
    'StatePlist': DEFAULT_STATE_PLIST,
}
# policy settings default to None here; config.build_config owns their
# real defaults
for _name in SETTING_NAMES:
    DEFAULT_PREFS.setdefault(_name, None)


def pref(pref_name):
    """Return a preference. Since this uses CFPreferencesCopyAppValue,
    Preferences can be defined several places. Precedence is:
        - MCX/configuration profile
        - /var/root/Library/Preferences/com.github.osupdatenotifier.plist
        - /Library/Preferences/com.github.osupdatenotifier.plist
        - DEFAULT_PREFS defined here.
    """
    pref_value = CFPreferencesCopyAppValue(pref_name, BUNDLE_ID)
    if pref_value is None:
        pref_value = DEFAULT_PREFS.get(pref_name)
    return pref_value


def get_config_level(pref_name, value):
    '''Returns a string indicating where the given preference is defined'''
    if value is None:
        return '[not set]'
    if CFPreferencesAppValueIsForced(pref_name, BUNDLE_ID):
        return '[MANAGED]'
    if value == DEFAULT_PREFS.get(pref_name):
        return '[default]'
    return '[/Library/Preferences/%s.plist]' % BUNDLE_ID


def print_config():
    '''Prints the current preference configuration'''
    print('Current osupdatenotifier preferences:')
    max_pref_name_len = max([len(pref_name) for pref_name in DEFAULT_PREFS])
    for pref_name in sorted(DEFAULT_PREFS):
        value = pref(pref_name)
        where = get_config_level(pref_name, value)
        repr_value = value
        if is_a_string(value):
            repr_value = repr(value)
        print(('%' + str(max_pref_name_len) + 's: %5s %s ') % (
            pref_name, repr_value, where))


if __name__ == '__main__':
    print('This is a library of support tools for osupdatenotifier.')
