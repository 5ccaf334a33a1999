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
config.py

Builds the immutable PolicyConfig for a run.

Settings come from, in order of precedence:
    - Jamf Pro script parameters $4 through $11
    - command-line options
    - the com.github.osupdatenotifier preference domain
    - built-in defaults
"""

import collections

from . import capabilities as caps
from . import dateutils
from .constants import (
    DEFAULT_BLOCKING_APPLICATIONS, DEFAULT_DELAY_OPTIONS,
    DEFAULT_DIALOG_TIMEOUT, DEFAULT_IT_CONTACT, DEFAULT_MAX_DEFERRALS,
    DEFAULT_MAX_IDLE_TIME, DEFAULT_RENOTIFY_PERIOD,
    DEFAULT_UPDATE_CHECK_INTERVAL, EXIT_STATUS_INVALID_DATE,
    EXIT_STATUS_INVALID_DATE_ORDER, EXIT_STATUS_INVALID_PARAMETERS,
    FORCE_METHOD_CLI, FORCE_METHOD_GUI, MAJOR_UPGRADE_INFO_URL,
    MAJOR_UPGRADE_POLICY_ID, MINOR_UPDATE_INFO_URL, MINOR_UPDATE_POLICY_ID,
    UPDATE_ACTION_MAJOR, UPDATE_ACTION_MINOR)


class ConfigurationError(Exception):
    """Base error for bad configuration. Carries the exit code the
    script should end with."""
    exit_code = EXIT_STATUS_INVALID_PARAMETERS


class InvalidParameterError(ConfigurationError):
    """A threshold or option could not be understood"""
    exit_code = EXIT_STATUS_INVALID_PARAMETERS


class DateOrderError(ConfigurationError):
    """Start, nag and end dates are out of order"""
    exit_code = EXIT_STATUS_INVALID_DATE_ORDER


class InvalidDateError(ConfigurationError):
    """A date parameter could not be parsed"""
    exit_code = EXIT_STATUS_INVALID_DATE


PolicyConfig = collections.namedtuple('PolicyConfig', [
    'policy_id',
    'update_action',
    'upgrade_trigger',
    'start_date',
    'nag_date',
    'end_date',
    'max_deferrals',
    'renotify_period',
    'dialog_timeout',
    'cli_dialog_timeout',
    'max_idle_time',
    'delay_options',
    'assertions_to_ignore',
    'more_info_url',
    'it_contact',
    'force_method',
    'allow_unattended_install',
    'blocking_applications',
    'update_check_interval',
])


# Jamf Pro passes $1-$3 (mount point, computer name, username) itself
JAMF_PARAMETERS = (
    (4, 'UpdateAction'),
    (5, 'UpgradeTrigger'),
    (6, 'StartDate'),
    (7, 'NagDate'),
    (8, 'EndDate'),
    (9, 'RenotifyPeriod'),
    (10, 'DialogTimeout'),
    (11, 'MaxDeferrals'),
)

SETTING_NAMES = (
    'UpdateAction',
    'UpgradeTrigger',
    'StartDate',
    'NagDate',
    'EndDate',
    'RenotifyPeriod',
    'DialogTimeout',
    'MaxDeferrals',
    'CLIDialogTimeout',
    'MaxIdleTime',
    'DelayOptions',
    'IgnoreAssertions',
    'MoreInfoURL',
    'ITContact',
    'ForceMethod',
    'AllowUnattendedInstall',
    'BlockingApplications',
    'UpdateCheckInterval',
)


def _is_empty(value):
    return value is None or (isinstance(value, str) and not value.strip())


def jamf_parameter(arguments, number):
    '''Returns Jamf parameter $number from the positional arguments,
    or None if it wasn't passed or is blank'''
    if len(arguments) < number:
        return None
    value = arguments[number - 1]
    if _is_empty(value):
        return None
    return value


def collect_settings(arguments=(), overrides=None, pref=None):
    '''Merges Jamf parameters, command-line overrides and preferences
    into one dict keyed by preference name'''
    overrides = overrides or {}
    settings = {}
    for name in SETTING_NAMES:
        value = None
        if pref is not None:
            value = pref(name)
        if not _is_empty(overrides.get(name)):
            value = overrides[name]
        settings[name] = value
    for number, name in JAMF_PARAMETERS:
        value = jamf_parameter(arguments, number)
        if value is not None:
            settings[name] = value
    return settings


def parse_int(value, name, default):
    '''Parses a non-negative integer setting'''
    if _is_empty(value):
        return default
    if isinstance(value, bool):
        raise InvalidParameterError(
            '%s must be a whole number of seconds, not %r' % (name, value))
    if isinstance(value, int):
        result = value
    else:
        try:
            result = int(str(value).strip())
        except ValueError:
            raise InvalidParameterError(
                '%s must be an integer, got "%s"' % (name, value))
    if result < 0:
        raise InvalidParameterError(
            '%s must not be negative, got %s' % (name, result))
    return result


def parse_list(value):
    '''Splits a comma-separated string (or passes a list through) into
    a list of non-empty, stripped strings'''
    if _is_empty(value):
        return []
    if isinstance(value, str):
        value = value.split(',')
    return [str(item).strip() for item in value if str(item).strip()]


def parse_delay_options(value):
    '''Parses delay options like "0, 3600, 14400, 86400"'''
    items = parse_list(value)
    if not items:
        return DEFAULT_DELAY_OPTIONS
    return tuple(parse_int(item, 'DelayOptions', 0) for item in items)


def parse_bool(value, default):
    '''Parses a boolean setting, which may arrive as text'''
    if _is_empty(value):
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return bool(value)
    text = str(value).strip().lower()
    if text in ('1', 'true', 'yes', 'y', 'on'):
        return True
    if text in ('0', 'false', 'no', 'n', 'off'):
        return False
    raise InvalidParameterError(
        'Expected a true/false value, got "%s"' % value)


def parse_date(value, name):
    '''Parses a date setting into epoch seconds'''
    try:
        return dateutils.parse_date(value, name)
    except dateutils.InvalidDateError as err:
        raise InvalidDateError(str(err))


def validate_dates(start_date, nag_date, end_date):
    '''Raises DateOrderError unless start < nag < end for every pair
    of dates that is set'''
    named = [('Start date', start_date), ('Nag date', nag_date),
             ('End date', end_date)]
    present = [(name, date) for (name, date) in named if date is not None]
    for index, (earlier_name, earlier) in enumerate(present):
        for later_name, later in present[index + 1:]:
            if earlier >= later:
                raise DateOrderError(
                    'Make sure Start date < Nag date < End date. '
                    '%s (%s) is not before %s (%s).'
                    % (earlier_name, dateutils.format_time(earlier),
                       later_name, dateutils.format_time(later)))


def build_config(settings, capabilities=None):
    '''Validates settings (as returned by collect_settings) and returns
    a PolicyConfig. Raises a ConfigurationError subclass on bad input.'''
    update_action = UPDATE_ACTION_MINOR
    action = settings.get('UpdateAction')
    if not _is_empty(action) and str(action).strip().lower() == 'major':
        update_action = UPDATE_ACTION_MAJOR

    upgrade_trigger = settings.get('UpgradeTrigger')
    if _is_empty(upgrade_trigger):
        upgrade_trigger = None
    else:
        upgrade_trigger = str(upgrade_trigger).strip()

    start_date = parse_date(settings.get('StartDate'), 'StartDate')
    nag_date = parse_date(settings.get('NagDate'), 'NagDate')
    end_date = parse_date(settings.get('EndDate'), 'EndDate')
    validate_dates(start_date, nag_date, end_date)

    dialog_timeout = parse_int(
        settings.get('DialogTimeout'), 'DialogTimeout',
        DEFAULT_DIALOG_TIMEOUT)

    if update_action == UPDATE_ACTION_MAJOR:
        policy_id = MAJOR_UPGRADE_POLICY_ID
        default_url = MAJOR_UPGRADE_INFO_URL
    else:
        policy_id = MINOR_UPDATE_POLICY_ID
        default_url = MINOR_UPDATE_INFO_URL

    force_method = settings.get('ForceMethod')
    if _is_empty(force_method):
        if capabilities is not None:
            force_method = caps.force_method_for(
                capabilities, update_action, upgrade_trigger)
        elif update_action == UPDATE_ACTION_MAJOR and not upgrade_trigger:
            force_method = FORCE_METHOD_GUI
        else:
            force_method = FORCE_METHOD_CLI
    else:
        force_method = str(force_method).strip().lower()
        if force_method not in (FORCE_METHOD_CLI, FORCE_METHOD_GUI):
            raise InvalidParameterError(
                'ForceMethod must be "cli" or "gui", got "%s"' % force_method)

    unattended_default = bool(
        capabilities is not None and capabilities.supports_unattended)
    blocking_applications = tuple(
        parse_list(settings.get('BlockingApplications'))
    ) or DEFAULT_BLOCKING_APPLICATIONS

    return PolicyConfig(
        policy_id=policy_id,
        update_action=update_action,
        upgrade_trigger=upgrade_trigger,
        start_date=start_date,
        nag_date=nag_date,
        end_date=end_date,
        max_deferrals=parse_int(
            settings.get('MaxDeferrals'), 'MaxDeferrals',
            DEFAULT_MAX_DEFERRALS),
        renotify_period=parse_int(
            settings.get('RenotifyPeriod'), 'RenotifyPeriod',
            DEFAULT_RENOTIFY_PERIOD),
        dialog_timeout=dialog_timeout,
        cli_dialog_timeout=parse_int(
            settings.get('CLIDialogTimeout'), 'CLIDialogTimeout',
            dialog_timeout),
        max_idle_time=parse_int(
            settings.get('MaxIdleTime'), 'MaxIdleTime',
            DEFAULT_MAX_IDLE_TIME),
        delay_options=parse_delay_options(settings.get('DelayOptions')),
        assertions_to_ignore=frozenset(
            item.lower()
            for item in parse_list(settings.get('IgnoreAssertions'))),
        more_info_url=(
            str(settings.get('MoreInfoURL')).strip()
            if not _is_empty(settings.get('MoreInfoURL')) else default_url),
        it_contact=(
            str(settings.get('ITContact')).strip()
            if not _is_empty(settings.get('ITContact'))
            else DEFAULT_IT_CONTACT),
        force_method=force_method,
        allow_unattended_install=parse_bool(
            settings.get('AllowUnattendedInstall'), unattended_default),
        blocking_applications=blocking_applications,
        update_check_interval=parse_int(
            settings.get('UpdateCheckInterval'), 'UpdateCheckInterval',
            DEFAULT_UPDATE_CHECK_INTERVAL),
    )


def describe(config):
    '''Returns printable lines describing a PolicyConfig'''
    lines = []
    for field in PolicyConfig._fields:
        value = getattr(config, field)
        if field in ('start_date', 'nag_date', 'end_date') and value:
            value = '%s (%s)' % (value, dateutils.format_time(value))
        elif isinstance(value, frozenset):
            value = ', '.join(sorted(value)) or '[none]'
        lines.append('%24s: %s' % (field, value))
    return lines


if __name__ == '__main__':
    print('This is a library of support tools for osupdatenotifier.')
