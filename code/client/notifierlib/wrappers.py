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
wrappers.py

Thin wrappers around plistlib so callers only ever have to catch our own
exceptions.
"""

import plistlib


class PlistError(Exception):
    """Base error for plists"""
    pass


class PlistReadError(PlistError):
    """Error when reading plists"""
    pass


class PlistWriteError(PlistError):
    """Error when writing plists"""
    pass


def readPlist(filepath):
    '''Reads a plist file and returns the root object'''
    try:
        with open(filepath, "rb") as fileobj:
            return plistlib.load(fileobj)
    except Exception as err:
        raise PlistReadError(err)


def writePlistToString(data):
    '''Serializes data to XML plist bytes'''
    try:
        return plistlib.dumps(data)
    except Exception as err:
        raise PlistWriteError(err)


def is_a_string(something):
    '''Returns True if something is text'''
    return isinstance(something, str)


def unicode_or_str(something, encoding="UTF-8"):
    '''Coerces bytes and other objects to str'''
    if isinstance(something, bytes):
        return str(something, encoding)
    return str(something)
