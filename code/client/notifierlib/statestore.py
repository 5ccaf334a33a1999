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
statestore.py

Persistence of per-policy deferral state.

All policies share one plist, a dictionary keyed by policy identifier:

    {'com.apple.macOS.softwareupdates': {'Deferral': 2,
                                         'NextReminderEpochTime': ...,
                                         ...},
     'com.apple.macOS.upgrade': {...}}

Loading never fails; a missing or damaged file reads as a fresh state.
Saving replaces the file atomically so a killed process can't leave a
half-written plist behind.
"""

import collections
import os
import tempfile

from . import dateutils
from . import display
from .constants import (
    ASSERTIONS_ENCOUNTERED_KEY, DEFAULT_STATE_PLIST, DEFERRAL_KEY,
    EXIT_STATUS_STATE_STORE_FAILURE, FORCE_START_KEY, FORCE_START_STRING_KEY,
    LAST_RUN_KEY, LAST_RUN_STRING_KEY, LAST_UPDATE_CHECK_KEY,
    NEXT_REMINDER_KEY, NEXT_REMINDER_STRING_KEY, TIMES_IGNORED_KEY)
from .wrappers import PlistReadError, PlistWriteError
from .wrappers import readPlist, writePlistToString


class Error(Exception):
    """Base error for the state store"""
    pass


class StateStoreError(Error):
    """State could not be persisted. There is no safe way to continue
    without losing track of deferrals."""
    exit_code = EXIT_STATUS_STATE_STORE_FAILURE


# a timestamp of 0 means "unset" to every version of this tool
TIMESTAMP_FIELDS = ('next_reminder_time', 'force_update_start_time',
                    'last_run_time', 'last_update_check_time')

_DeferralStateBase = collections.namedtuple('DeferralState', [
    'deferral_count',
    'next_reminder_time',
    'times_ignored',
    'force_update_start_time',
    'last_run_time',
    'last_update_check_time',
    'assertions_encountered',
], defaults=(0, None, 0, None, None, None, 0))


class DeferralState(_DeferralStateBase):
    """Deferral bookkeeping for one policy. Timestamps are epoch seconds
    or None; 0 is stored as None so there is only one way to say unset."""
    __slots__ = ()

    def __new__(cls, *args, **kwargs):
        state = super(DeferralState, cls).__new__(cls, *args, **kwargs)
        if any(getattr(state, field) == 0 for field in TIMESTAMP_FIELDS):
            state = super(DeferralState, cls).__new__(cls, *[
                None if field in TIMESTAMP_FIELDS and value == 0 else value
                for field, value in zip(cls._fields, state)])
        return state

    @classmethod
    def _make(cls, iterable):
        return cls(*iterable)


# (field, plist key, default, companion string key)
FIELD_KEYS = (
    ('deferral_count', DEFERRAL_KEY, 0, None),
    ('next_reminder_time', NEXT_REMINDER_KEY, None,
     NEXT_REMINDER_STRING_KEY),
    ('times_ignored', TIMES_IGNORED_KEY, 0, None),
    ('force_update_start_time', FORCE_START_KEY, None,
     FORCE_START_STRING_KEY),
    ('last_run_time', LAST_RUN_KEY, None, LAST_RUN_STRING_KEY),
    ('last_update_check_time', LAST_UPDATE_CHECK_KEY, None, None),
    ('assertions_encountered', ASSERTIONS_ENCOUNTERED_KEY, 0, None),
)


def _int_value(value, key, default):
    '''Older versions of the script stored some numbers as strings'''
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        display.display_warning(
            'Ignoring unreadable %s value in state: %r', key, value)
        return default


def state_from_record(record):
    '''Builds a DeferralState from one policy's plist dictionary'''
    values = {}
    for field, key, default, dummy_string_key in FIELD_KEYS:
        values[field] = _int_value(record.get(key), key, default)
    return DeferralState(**values)


def record_from_state(state, record=None):
    '''Returns a plist dictionary for state. Keys we don't know about
    in an existing record are kept.'''
    record = dict(record or {})
    for field, key, dummy_default, string_key in FIELD_KEYS:
        value = getattr(state, field)
        if value is None:
            record.pop(key, None)
            if string_key:
                record.pop(string_key, None)
            continue
        record[key] = int(value)
        if string_key:
            record[string_key] = dateutils.format_time(value)
    return record


class DeferralStateStore(object):
    """Reads and writes DeferralState records in a shared plist."""

    def __init__(self, path=DEFAULT_STATE_PLIST):
        self.path = path

    def __repr__(self):
        return '<%s %s>' % (self.__class__.__name__, self.path)

    def _read_all(self):
        '''Returns the whole plist as a dict; {} when missing or damaged'''
        if not os.path.exists(self.path):
            return {}
        try:
            data = readPlist(self.path)
        except PlistReadError as err:
            display.display_warning(
                'Could not read state from %s: %s', self.path, err)
            return {}
        if not isinstance(data, dict):
            display.display_warning(
                'Unexpected data in %s; starting fresh.', self.path)
            return {}
        return data

    def load(self, policy_id):
        '''Returns the DeferralState for policy_id. Never raises.'''
        record = self._read_all().get(policy_id)
        if not isinstance(record, dict):
            display.display_debug1(
                'No saved state for %s; starting fresh.', policy_id)
            return DeferralState()
        state = state_from_record(record)
        display.display_debug1('Loaded state for %s: %s', policy_id, state)
        return state

    def save(self, policy_id, state):
        '''Persists state for policy_id, leaving other policies' records
        alone. Raises StateStoreError if the plist can't be written.'''
        data = self._read_all()
        existing = data.get(policy_id)
        if not isinstance(existing, dict):
            existing = None
        data[policy_id] = record_from_state(state, existing)
        try:
            contents = writePlistToString(data)
        except PlistWriteError as err:
            raise StateStoreError(
                'Could not serialize state for %s: %s' % (policy_id, err))
        self._write_atomically(contents)
        display.display_debug1('Saved state for %s: %s', policy_id, state)

    def _write_atomically(self, contents):
        directory = os.path.dirname(os.path.abspath(self.path))
        try:
            if not os.path.isdir(directory):
                os.makedirs(directory)
            fd, temp_path = tempfile.mkstemp(
                dir=directory, prefix='.%s.' % os.path.basename(self.path))
        except OSError as err:
            raise StateStoreError(
                'Could not write state to %s: %s' % (self.path, err))
        try:
            with os.fdopen(fd, 'wb') as fileobj:
                fileobj.write(contents)
                fileobj.flush()
                os.fsync(fileobj.fileno())
            os.chmod(temp_path, 0o644)
            os.replace(temp_path, self.path)
        except OSError as err:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise StateStoreError(
                'Could not write state to %s: %s' % (self.path, err))


if __name__ == '__main__':
    print('This is a library of support tools for osupdatenotifier.')
