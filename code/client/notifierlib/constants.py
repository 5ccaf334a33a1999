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
constants.py

Commonly used constants
"""

# NOTE: it's very important that defined exit codes are never changed!
# Jamf Pro policy logs and smart groups key off of these.
EXIT_STATUS_OK = 0
EXIT_STATUS_INVALID_PARAMETERS = 10
EXIT_STATUS_INVALID_DATE_ORDER = 11
EXIT_STATUS_INSUFFICIENT_SPACE = 12
EXIT_STATUS_SOFTWAREUPDATE_FAILED = 13
EXIT_STATUS_FILEVAULT_ENCRYPTING = 14
EXIT_STATUS_STATE_STORE_FAILURE = 15
EXIT_STATUS_INVALID_DATE = 16
EXIT_STATUS_DIALOG_FAILURE = 17
EXIT_STATUS_OBJC_MISSING = 100
EXIT_STATUS_ROOT_REQUIRED = 201

BUNDLE_ID = 'com.github.osupdatenotifier'

# policy identifiers double as the keys in the state plist
MINOR_UPDATE_POLICY_ID = 'com.apple.macOS.softwareupdates'
MAJOR_UPGRADE_POLICY_ID = 'com.apple.macOS.upgrade'

UPDATE_ACTION_MINOR = 'minor'
UPDATE_ACTION_MAJOR = 'major'

FORCE_METHOD_CLI = 'cli'
FORCE_METHOD_GUI = 'gui'

DEFAULT_STATE_PLIST = (
    '/Library/Application Support/JAMF/com.custom.deprecations.plist')
DEFAULT_LOG_FILE = (
    '/Library/Application Support/JAMF/Logs/OSUpdateNotifier.log')
DEFAULT_LOCK_FILE = '/private/var/run/com.github.osupdatenotifier.pid'
SOFTWARE_UPDATE_LIST_CACHE = '/tmp/ListOfSoftwareUpdates'

JAMFHELPER = ('/Library/Application Support/JAMF/bin/jamfHelper.app'
              '/Contents/MacOS/jamfHelper')
JAMF_BINARY = '/usr/local/bin/jamf'

MAJOR_UPGRADE_INFO_URL = 'https://www.apple.com/macos/how-to-upgrade/'
MINOR_UPDATE_INFO_URL = 'https://support.apple.com/en-us/HT201541'
APP_STORE_UPGRADE_SEARCH_URL = (
    'macappstore://search.itunes.apple.com/WebObjects/MZSearch.woa/wa/'
    'search?q=apple%20macos&mt=12')

# thresholds, all in seconds unless noted
DEFAULT_MAX_DEFERRALS = 3
DEFAULT_RENOTIFY_PERIOD = 3600
DEFAULT_DIALOG_TIMEOUT = 5400
DEFAULT_MAX_IDLE_TIME = 600
DEFAULT_DELAY_OPTIONS = (0, 3600, 14400, 86400)
DEFAULT_UPDATE_CHECK_INTERVAL = 14400
DEFAULT_IT_CONTACT = 'IT'
DEFAULT_BLOCKING_APPLICATIONS = ('Safari', 'iTunes')

PROCEED_GRACE_PERIOD = 3600
FINAL_POSTPONE_PERIOD = 86400
MINIMUM_FORCED_WINDOW = 3600
MINIMUM_FORCED_WINDOW_REMAINING = 1800
INSTALLER_ACTIVITY_BUFFER = 180
POWER_CHECK_ATTEMPTS = 5
POWER_CHECK_INTERVAL = 60
DEADLINE_CHECK_INTERVAL = 60
ACTIVITY_CHECK_INTERVAL = 15
SHUTDOWN_WARNING_TIMEOUT = 60

# keys in the state plist
DEFERRAL_KEY = 'Deferral'
NEXT_REMINDER_KEY = 'NextReminderEpochTime'
NEXT_REMINDER_STRING_KEY = 'NextReminderTimeString'
TIMES_IGNORED_KEY = 'TimesIgnored'
FORCE_START_KEY = 'ForceUpdateStartTimeInEpoch'
FORCE_START_STRING_KEY = 'ForceUpdateStartTimeString'
LAST_RUN_KEY = 'LastRunEpochTime'
LAST_RUN_STRING_KEY = 'LastRunTimeString'
LAST_UPDATE_CHECK_KEY = 'LastUpdateCheckEpochTime'
ASSERTIONS_ENCOUNTERED_KEY = 'DisplaySleepAssertionsEncountered'

LOGINWINDOW = 'loginwindow'

# postinstall actions
POSTACTION_NONE = 0
POSTACTION_RESTART = 2
POSTACTION_SHUTDOWN = 4


if __name__ == '__main__':
    print('This is a library of support tools for osupdatenotifier.')
