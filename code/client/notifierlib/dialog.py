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
dialog.py

What we ask a dialog presenter to show, and what comes back.
"""

import collections


BUTTON_PROCEED = 'proceed'
BUTTON_POSTPONE = 'postpone'
BUTTON_MORE_INFO = 'more_info'
BUTTON_OK = 'ok'
BUTTON_SHUT_DOWN = 'shut_down'

WINDOW_UTILITY = 'utility'
WINDOW_HUD = 'hud'


Dialog = collections.namedtuple('Dialog', [
    'title',
    'description',
    'icon',
    'buttons',          # sequence of (button key, label); first is button1
    'default_button',   # 1-based index, or None
    'cancel_button',    # 1-based index, or None
    'timeout',          # seconds, or None to wait forever
    'delay_options',    # seconds the user may choose between, or ()
    'countdown',        # show the remaining time
    'window_type',
    'lock',             # hud only: no way to close the window
], defaults=((), None, None, None, (), False, WINDOW_UTILITY, False))


# button is None when the dialog timed out or was force-quit; delay is
# only set for dialogs offering delay options
DialogResponse = collections.namedtuple(
    'DialogResponse', ['button', 'delay', 'dismissed'])


def clicked(button, delay=None):
    '''Returns the response for a button click'''
    return DialogResponse(button=button, delay=delay, dismissed=False)


def dismissed():
    '''Returns the response for a timed out or force-quit dialog'''
    return DialogResponse(button=None, delay=None, dismissed=True)
