"""Host side iSCSI session setup using iscsiadm."""

import logging
from typing import Callable, Optional

from oslo_concurrency import processutils as putils

LOG = logging.getLogger(__name__)


class IscsiInitiator(object):
    """Runs iscsiadm through a replaceable execute callable.

    ``execute`` follows the ``processutils.execute`` signature and returns
    an ``(stdout, stderr)`` tuple.
    """

    def __init__(self, root_helper: str = 'sudo', execute: Callable = putils.execute,
                 log: Optional[logging.Logger] = None):
        self._root_helper = root_helper
        self._execute = execute
        self.log = log or LOG

    @classmethod
    def from_config(cls, config, execute: Callable = putils.execute, log: Optional[logging.Logger] = None):
        return cls(root_helper=config.iscsi_root_helper, execute=execute, log=log)

    def _run_iscsiadm(self, *args):
        return self._execute('iscsiadm', *args, run_as_root=True, root_helper=self._root_helper)

    def discover_and_login(self, target_ip: str):
        # Errors from either step propagate unchanged. A discovery without a
        # login is left in place, discovering again is harmless.
        out, err = self._run_iscsiadm('-m', 'discoverydb', '-t', 'st', '-p', target_ip, '--discover')
        self.log.info("Successful iSCSI target discovery. target=%s targetIQN=%s" % (target_ip, out.strip()))
        if err:
            self.log.debug("iscsiadm discovery of %s: stderr=%s" % (target_ip, err))

        out, err = self._run_iscsiadm('-m', 'node', '-p', target_ip, '--login')
        self.log.debug("iscsiadm login to %s: stdout=%s stderr=%s" % (target_ip, out, err))


def discover_iscsi_target(target_ip: str, root_helper: str = 'sudo', execute: Callable = putils.execute):
    IscsiInitiator(root_helper=root_helper, execute=execute).discover_and_login(target_ip)
