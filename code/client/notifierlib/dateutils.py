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
dateutils.py

Shared date/time functions

Jamf parameters carry dates either as epoch seconds or as strings like
"Sep 03 12:34:56 -0400 2019". Internally everything is epoch seconds.
"""

import datetime
import time


class Error(Exception):
    """Base error for date handling"""
    pass


class InvalidDateError(Error):
    """A date string could not be understood"""
    pass


# tried in order
DATE_FORMATS = (
    '%b %d %H:%M:%S %z %Y',
    '%Y-%m-%d %H:%M:%S %z',
    '%Y-%m-%dT%H:%M:%SZ',
    '%Y-%m-%d %H:%M:%S',
)

DISPLAY_FORMAT = '%a %b %d %H:%M:%S %Z %Y'


def dateFromString(dateString):
    """Attempts to parse a string and return an aware datetime, or None.
       Strings without a UTC offset are taken as local time, except the
       ISO8601 'Z' form which is UTC."""
    dateString = dateString.strip()
    for fmt in DATE_FORMATS:
        try:
            date = datetime.datetime.strptime(dateString, fmt)
        except ValueError:
            continue
        if date.tzinfo is None:
            if fmt.endswith('Z'):
                date = date.replace(tzinfo=datetime.timezone.utc)
            else:
                date = date.astimezone()
        return date
    return None


def parse_date(value, name='date'):
    """Converts a Jamf date parameter to integer epoch seconds.

    Args:
      value: int, a string of digits, a date string in one of
             DATE_FORMATS, or None/'' for "not set"
      name: used in error messages
    Returns:
      int epoch seconds, or None if value is empty
    Raises:
      InvalidDateError
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidDateError('%s is not a valid date: %r' % (name, value))
    if isinstance(value, int):
        return value
    value = str(value).strip()
    if not value:
        return None
    if value.isdigit():
        return int(value)
    date = dateFromString(value)
    if date is None:
        raise InvalidDateError(
            '%s "%s" is not a valid date. Use epoch seconds or a date like '
            '"Sep 03 12:34:56 -0400 2019".' % (name, value))
    return int(date.timestamp())


def format_time(epoch, fmt=None):
    """Returns epoch seconds as a local time string for humans"""
    if epoch is None:
        return 'never'
    return time.strftime(fmt or DISPLAY_FORMAT, time.localtime(epoch))


def format_duration(seconds):
    """Returns something like '1 day, 2 hours' for dialogs and logs"""
    seconds = int(seconds)
    if seconds <= 0:
        return '0 minutes'
    parts = []
    for unit, size in (('day', 86400), ('hour', 3600), ('minute', 60)):
        count, seconds = divmod(seconds, size)
        if count:
            parts.append('%d %s%s' % (count, unit, '' if count == 1 else 's'))
    if not parts:
        return '1 minute'
    return ', '.join(parts)


if __name__ == '__main__':
    print('This is a library of support tools for osupdatenotifier.')
