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
display.py

Common output functions
"""

import sys
import warnings

from . import notifierlog
from .wrappers import unicode_or_str


def _to_unicode(obj, encoding='UTF-8'):
    """Coerces bytes to str"""
    if isinstance(obj, bytes):
        obj = obj.decode(encoding)
    return obj


def _concat_message(msg, *args):
    """Concatenates a string with any additional arguments,
    making sure everything is unicode"""
    msg = _to_unicode(msg)
    if args:
        args = [_to_unicode(arg) for arg in args]
        try:
            msg = msg % tuple(args)
        except TypeError as dummy_err:
            warnings.warn(
                'String format does not match concat args: %s'
                % (str(sys.exc_info())))
    return unicode_or_str(msg).rstrip()


def display_status_major(msg, *args):
    """
    Displays major status messages. These mark the phases of a run
    in the Jamf policy log.
    """
    msg = _concat_message(msg, *args)
    notifierlog.log(msg)
    if verbose:
        if msg.endswith('.') or msg.endswith(u'…'):
            print('%s' % msg)
        else:
            print('%s...' % msg)
        sys.stdout.flush()


def display_info(msg, *args):
    """
    Displays info messages.
    """
    msg = _concat_message(msg, *args)
    notifierlog.log(u'    ' + msg)
    if verbose > 0:
        print('    %s' % msg)
        sys.stdout.flush()


def display_detail(msg, *args):
    """
    Displays minor info messages.
    These are usually logged only, but can be printed to
    stdout if verbose is set greater than 1
    """
    msg = _concat_message(msg, *args)
    if verbose > 1:
        print('    %s' % msg)
        sys.stdout.flush()
    if notifierlog.logging_level() > 0:
        notifierlog.log(u'    ' + msg)


def display_debug1(msg, *args):
    """
    Displays debug messages, formatting as needed.
    """
    msg = _concat_message(msg, *args)
    if verbose > 2:
        print('    %s' % msg)
        sys.stdout.flush()
    if notifierlog.logging_level() > 1:
        notifierlog.log('DEBUG1: %s' % msg)


def display_warning(msg, *args):
    """
    Prints warning msgs to stderr and the log
    """
    msg = _concat_message(msg, *args)
    warning = 'WARNING: %s' % msg
    if verbose > 0:
        print(warning, file=sys.stderr)
    notifierlog.log(warning)


def display_error(msg, *args):
    """
    Prints msg to stderr and the log
    """
    msg = _concat_message(msg, *args)
    errmsg = 'ERROR: %s' % msg
    if verbose > 0:
        print(errmsg, file=sys.stderr)
    notifierlog.log(errmsg)
    # append this error to our errors log
    notifierlog.log(errmsg, 'errors.log')


# module globals
# pylint: disable=invalid-name
verbose = 1
# pylint: enable=invalid-name


if __name__ == '__main__':
    print('This is a library of support tools for osupdatenotifier.')
