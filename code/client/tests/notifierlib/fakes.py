#!/usr/bin/python
# encoding: utf-8
"""
fakes.py

Stand-ins for the collaborators that talk to the OS, so the policy,
executor and orchestrator can be exercised without a Mac.

"""
# Copyright 2019-2024 The osupdatenotifier Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#      https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from notifierlib import config
from notifierlib import gate
from notifierlib.constants import POSTACTION_NONE
from notifierlib.dialog import dismissed
from notifierlib.su_tool import InstallResult, PendingUpdates
from notifierlib.statestore import DeferralState


NOW = 1700000000
HOUR = 3600
DAY = 86400


def make_config(**kwargs):
    """A PolicyConfig with defaults, overridden by kwargs"""
    return config.build_config({})._replace(**kwargs)


def log(msg, logname=''):
    """Redefine the logging function so our tests don't write
    a bunch of garbage to the log"""
    pass


class FakeClock(object):
    """A clock that only moves when something sleeps"""

    def __init__(self, now=NOW):
        self.now = now
        self.sleeps = []

    def time(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


class FakeHud(object):
    def __init__(self):
        self.dismissed = False

    def dismiss(self):
        self.dismissed = True


class FakeDialogs(object):
    """Answers dialogs from a list of responses; runs out to dismissed"""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.shown = []
        self.forgotten = []
        self.huds = []

    def show(self, dialog):
        self.shown.append(dialog)
        if self.responses:
            return self.responses.pop(0)
        return dismissed()

    def show_and_forget(self, dialog):
        self.forgotten.append(dialog)

    def start_hud(self, dialog):
        hud = FakeHud()
        self.huds.append((dialog, hud))
        return hud


class FakeLauncher(object):
    def __init__(self):
        self.update_ui_opened = 0
        self.urls = []

    def open_update_ui(self):
        self.update_ui_opened += 1
        return 0

    def open_url(self, url):
        self.urls.append(url)
        return 0


class FakeRunner(object):
    def __init__(self, exit_code=0, out_of_space=False, message=None,
                 post_action=POSTACTION_NONE):
        self.result = InstallResult(
            exit_code=exit_code, out_of_space=out_of_space, message=message,
            post_action=post_action)
        self.calls = []

    def install_all(self, restart=True):
        self.calls.append(restart)
        return self.result


class FakeStore(object):
    """An in-memory DeferralStateStore"""

    def __init__(self, state=None):
        self.states = {}
        self.initial = state
        self.saves = []

    def load(self, policy_id):
        if policy_id in self.states:
            return self.states[policy_id]
        return self.initial or DeferralState()

    def save(self, policy_id, state):
        self.states[policy_id] = state
        self.saves.append(state)


class FakeChecker(object):
    def __init__(self, restart_required=(), no_restart=(), stale=False):
        self.pending = PendingUpdates(
            restart_required=list(restart_required),
            no_restart=list(no_restart))
        self.stale = stale
        self.refreshes = 0

    def needs_refresh(self, last_check, now, interval):
        return self.stale

    def refresh(self):
        self.refreshes += 1

    def list_pending(self):
        return self.pending


class FakeRestarter(object):
    def __init__(self):
        self.actions = []

    def perform(self, post_action):
        if post_action != POSTACTION_NONE:
            self.actions.append(post_action)


def make_gate(cfg, user='alice', idle=0, assertions=(), battery=(False,),
              sleep=None):
    """An EligibilityGate over canned answers. battery is consumed one
    answer per poll, repeating the last."""
    answers = list(battery)

    def on_battery():
        if len(answers) > 1:
            return answers.pop(0)
        return answers[0]

    return gate.EligibilityGate(
        cfg, lambda: user, lambda: idle, lambda: list(assertions),
        on_battery, sleep=sleep or (lambda seconds: None))
