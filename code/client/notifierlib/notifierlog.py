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
notifierlog.py

Logging functions for osupdatenotifier

Jamf captures stdout into the policy log; this module keeps a local log
as well so a history of reminders and deferrals survives on the Mac.
"""

import codecs
import logging
import logging.handlers
import os
import time

from .constants import DEFAULT_LOG_FILE


# module globals, set from preferences by configure()
# pylint: disable=invalid-name
logfile = DEFAULT_LOG_FILE
_logging_level = 1
# pylint: enable=invalid-name


def configure(log_file=None, level=None):
    '''Points logging at log_file and sets the LoggingLevel'''
    global logfile, _logging_level  # pylint: disable=global-statement
    if log_file:
        logfile = log_file
    if level is not None:
        _logging_level = level


def logging_level():
    '''Returns the logging level, which might be defined badly by the admin'''
    try:
        return int(_logging_level)
    except (TypeError, ValueError):
        return 1


def _logpath(logname):
    if not logname:
        return logfile
    return os.path.join(os.path.dirname(logfile), logname)


def log(msg, logname=''):
    """Generic logging function."""
    if len(msg) > 1000:
        # RFC-3164 limits syslog messages, so send 1000 characters at a time
        msg_buffer = msg
        while msg_buffer:
            logging.info(msg_buffer[:1000])
            msg_buffer = msg_buffer[1000:]
    else:
        logging.info(msg)  # noop unless configure_syslog() is called first.

    # date/time format string
    formatstr = '%b %d %Y %H:%M:%S %z'
    try:
        fileobj = codecs.open(_logpath(logname), mode='a', encoding='UTF-8')
        try:
            fileobj.write("%s %s\n" % (time.strftime(formatstr), msg))
        except (OSError, IOError):
            pass
        fileobj.close()
    except (OSError, IOError):
        pass


def configure_syslog():
    """Configures logging to system.log, when pref('LogToSyslog') == True."""
    logger = logging.getLogger()
    # Remove existing handlers to avoid sending unexpected messages.
    for handler in logger.handlers:
        logger.removeHandler(handler)
    logger.setLevel(logging.DEBUG)

    # syslogd may have been restarted, in which case /var/run/syslog stops
    # listening for a moment.
    try:
        syslog = logging.handlers.SysLogHandler('/var/run/syslog')
    except (OSError, IOError):
        log('LogToSyslog is enabled but socket connection failed.')
        return

    syslog.setFormatter(logging.Formatter('osupdatenotifier: %(message)s'))
    syslog.setLevel(logging.INFO)
    logger.addHandler(syslog)


def rotatelog(logname=''):
    """Rotate a log, keeping five generations"""
    logpath = _logpath(logname)
    if os.path.exists(logpath):
        for i in range(3, -1, -1):
            try:
                os.unlink(logpath + '.' + str(i + 1))
            except (OSError, IOError):
                pass
            try:
                os.rename(logpath + '.' + str(i), logpath + '.' + str(i + 1))
            except (OSError, IOError):
                pass
        try:
            os.rename(logpath, logpath + '.0')
        except (OSError, IOError):
            pass


def rotate_main_log():
    """Rotate our main log once it grows past 1MB"""
    if os.path.exists(logfile):
        if os.path.getsize(logfile) > 1000000:
            rotatelog()


def reset_errors():
    """Rotate our errors.log"""
    if os.path.exists(_logpath('errors.log')):
        rotatelog('errors.log')


if __name__ == '__main__':
    print('This is a library of support tools for osupdatenotifier.')
