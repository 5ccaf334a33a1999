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
osupdatenotifier

Run from a Jamf Pro policy on a recurring trigger. Reminds the logged-in
user about pending macOS software updates (or a major upgrade), nags once
the nag date passes, and once the end date passes and the deferrals are
used up, installs the updates or shuts the Mac down after a deadline.

Jamf Pro script parameters:
    $4  update action: "minor" (default) or "major"
    $5  custom trigger of the policy that performs a major upgrade
    $6  start date    (epoch seconds or "Sep 03 12:34:56 -0400 2019")
    $7  nag date
    $8  end date
    $9  renotify period in seconds (default 3600)
    $10 dialog timeout in seconds (default 5400)
    $11 maximum number of deferrals (default 3)
"""

import optparse
import os
import signal
import sys

from notifierlib import __version__
from notifierlib import capabilities as caps
from notifierlib import config
from notifierlib import constants
from notifierlib import display
from notifierlib import info
from notifierlib import notifierlog
from notifierlib import processes
from notifierlib import su_tool
from notifierlib.executor import ActionExecutor
from notifierlib.gate import EligibilityGate
from notifierlib.jamf import JamfPolicyRunner
from notifierlib.jamfhelper import DialogError, JamfHelper
from notifierlib.launcher import UpdateLauncher
from notifierlib.messages import Messages
from notifierlib.orchestrator import Orchestrator
from notifierlib.policy import EscalationPolicy
from notifierlib.restart import RestartTrigger
from notifierlib.statestore import DeferralStateStore, StateStoreError

# Do not place any imports with ObjC bindings above this!
try:
    from notifierlib import osutils
    from notifierlib import powermgr
    from notifierlib import prefs
except ImportError as import_err:
    print('Python is missing ObjC bindings: %s' % import_err,
          file=sys.stderr)
    sys.exit(constants.EXIT_STATUS_OBJC_MISSING)


# command-line options that override a preference of the same name
SETTING_OPTIONS = (
    ('--update-action', 'UpdateAction',
     '"minor" for software updates (default) or "major" for an upgrade.'),
    ('--upgrade-trigger', 'UpgradeTrigger',
     'Jamf custom trigger of the policy that performs a major upgrade.'),
    ('--start-date', 'StartDate', 'Do nothing before this date.'),
    ('--nag-date', 'NagDate', 'Start nagging after this date.'),
    ('--end-date', 'EndDate',
     'Count deferrals, then enforce, after this date.'),
    ('--renotify-period', 'RenotifyPeriod',
     'Seconds before a dismissed reminder comes back.'),
    ('--dialog-timeout', 'DialogTimeout',
     'Seconds a dialog waits for an answer.'),
    ('--max-deferrals', 'MaxDeferrals',
     'Postponements allowed after the end date.'),
    ('--cli-timeout', 'CLIDialogTimeout',
     'Seconds the final-call dialog waits before a forced install.'),
    ('--max-idle-time', 'MaxIdleTime',
     'Don\'t notify if nobody has touched the Mac for this many seconds.'),
    ('--delay-options', 'DelayOptions',
     'Comma-separated reminder delays in seconds, e.g. "0, 3600, 86400".'),
    ('--ignore-assertions', 'IgnoreAssertions',
     'Comma-separated display sleep assertions that should not block '
     'notifications.'),
    ('--more-info-url', 'MoreInfoURL', 'URL opened by More Info.'),
    ('--it-contact', 'ITContact', 'Who users should contact.'),
    ('--force-method', 'ForceMethod',
     '"cli" or "gui"; how to enforce once deferrals run out.'),
    ('--allow-unattended-install', 'AllowUnattendedInstall',
     'Install restart-required updates when nobody is logged in.'),
)


def signal_handler(signum, _frame):
    """Exit cleanly on SIGTERM so the lock file is released."""
    if signum == signal.SIGTERM:
        sys.exit()


def build_parser():
    parser = optparse.OptionParser()
    parser.set_usage('Usage: %prog [jamf parameters] [options]')
    parser.add_option('--version', '-V', action='store_true',
                      help='Print the version and exit.')

    common_options = optparse.OptionGroup(
        parser, 'Common Options', 'Commonly used options')
    common_options.add_option(
        '--verbose', '-v', action='count', default=1,
        help='More verbose output. May be specified multiple times.')
    common_options.add_option(
        '--quiet', '-q', action='store_true',
        help='Quiet mode. Logs messages, but nothing to stdout. --verbose is '
        'ignored if --quiet is used.')
    parser.add_option_group(common_options)

    config_options = optparse.OptionGroup(
        parser, 'Configuration Options',
        'Options that override Jamf parameters left blank and preferences')
    config_options.add_option(
        '--show-config', action='store_true',
        help='Print the current configuration and exit.')
    config_options.add_option(
        '--state-file', help='Path of the deferral state plist.')
    for flag, pref_name, help_text in SETTING_OPTIONS:
        config_options.add_option(
            flag, dest=pref_name, metavar=pref_name.upper(), help=help_text)
    parser.add_option_group(config_options)
    return parser


def main():
    """Main"""
    progname = 'osupdatenotifier'

    # install handler for SIGTERM
    signal.signal(signal.SIGTERM, signal_handler)

    parser = build_parser()
    options, arguments = parser.parse_args()

    if options.version:
        print(__version__)
        sys.exit(0)

    # check to see if we're root
    if os.geteuid() != 0:
        print('You must run this as root!', file=sys.stderr)
        sys.exit(constants.EXIT_STATUS_ROOT_REQUIRED)

    if options.quiet:
        options.verbose = 0
    display.verbose = options.verbose

    notifierlog.configure(prefs.pref('LogFile'), prefs.pref('LoggingLevel'))
    if prefs.pref('LogToSyslog'):
        notifierlog.configure_syslog()
    notifierlog.rotate_main_log()
    notifierlog.reset_errors()

    capabilities = caps.resolve(
        osutils.getOsVersion(only_major_minor=False), info.get_arch())

    overrides = dict((pref_name, getattr(options, pref_name))
                     for dummy_flag, pref_name, dummy_help in SETTING_OPTIONS)
    settings = config.collect_settings(arguments, overrides, prefs.pref)
    try:
        cfg = config.build_config(settings, capabilities)
    except config.ConfigurationError as err:
        display.display_error(str(err))
        sys.exit(err.exit_code)

    if options.show_config:
        prefs.print_config()
        print('Effective policy configuration:')
        for line in config.describe(cfg):
            print(line)
        print('%24s: %s (%s)' % (
            'os_version', '.'.join(str(part) for part in
                                   capabilities.os_version),
            capabilities.arch))
        sys.exit(0)

    lock = processes.InstanceLock()
    try:
        lock.acquire()
    except processes.LockError as err:
        notifierlog.log('%s launched as pid %s' % (progname, os.getpid()))
        notifierlog.log(str(err))
        print('Another instance of %s is running. Exiting.' % progname,
              file=sys.stderr)
        sys.exit(0)

    notifierlog.log('### Starting %s run for %s ###'
                    % (progname, cfg.policy_id))

    store = DeferralStateStore(options.state_file or prefs.pref('StatePlist'))
    checker = None
    if cfg.update_action != constants.UPDATE_ACTION_MAJOR:
        checker = su_tool.SoftwareUpdateChecker()
    gate = EligibilityGate(
        cfg, osutils.getconsoleuser, info.get_idle_seconds,
        info.get_display_sleep_assertions, powermgr.onBatteryPower)
    policy = EscalationPolicy(cfg)

    upgrade_runner = None
    if cfg.update_action == constants.UPDATE_ACTION_MAJOR and (
            cfg.upgrade_trigger):
        upgrade_runner = JamfPolicyRunner(cfg.upgrade_trigger)
    username = osutils.getconsoleuser()
    launcher = UpdateLauncher(
        cfg, capabilities, username, osutils.getconsoleuid(),
        upgrade_runner=upgrade_runner)

    def checkpoint(state):
        store.save(cfg.policy_id, state)

    executor = ActionExecutor(
        cfg, capabilities, policy, Messages(cfg, capabilities), JamfHelper(),
        launcher, upgrade_runner or su_tool.SoftwareUpdateRunner(capabilities),
        gate, info.filevault_encryption_in_progress,
        info.available_disk_space_gb, su_tool.installer_activity_end,
        checkpoint)
    orchestrator = Orchestrator(
        cfg, store, checker, gate, policy, executor, RestartTrigger(),
        processes.blocking_applications_running)

    try:
        exit_code = orchestrator.run()
    except (StateStoreError, DialogError) as err:
        display.display_error(str(err))
        exit_code = err.exit_code
    except config.ConfigurationError as err:
        display.display_error(str(err))
        exit_code = err.exit_code
    finally:
        lock.release()

    notifierlog.log('### Finished %s run (exit code %s) ###'
                    % (progname, exit_code))
    sys.exit(exit_code)


if __name__ == '__main__':
    main()
