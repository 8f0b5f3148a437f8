import dataclasses
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from oslo_config import cfg

from ontap_driver import exception
from ontap_driver import storage_attribute as sa
from ontap_driver.api.client import OntapAPIClient
from ontap_driver.options import ontap_connection_opts, ontap_san_opts
from ontap_driver.storage import StorageBackend, StoragePool, VolumeConfig

LOG = logging.getLogger(__name__)

ONTAP_GROUP = 'ontap'
DEFAULT_STORAGE_PREFIX = 'trident'
REDACTED = '<REDACTED>'

CONF = cfg.CONF
CONF.register_opts(ontap_connection_opts, group=ONTAP_GROUP)
CONF.register_opts(ontap_san_opts, group=ONTAP_GROUP)


@dataclass(frozen=True)
class OntapStorageDriverConfig:
    management_lif: str
    data_lif: str
    svm: str
    username: str = 'admin'
    password: str = ''
    verify_ssl: bool = False
    storage_driver_name: str = 'ontap-san'
    storage_prefix: str = DEFAULT_STORAGE_PREFIX
    igroup_name: str = 'trident'
    require_target_iqn: bool = False
    iscsi_root_helper: str = 'sudo'

    @classmethod
    def from_conf(cls, conf: cfg.ConfigOpts = CONF, group: str = ONTAP_GROUP) -> 'OntapStorageDriverConfig':
        conf.register_opts(ontap_connection_opts, group=group)
        conf.register_opts(ontap_san_opts, group=group)
        opts = conf[group]

        for required in ('ontap_management_lif', 'ontap_data_lif', 'ontap_svm'):
            if not getattr(opts, required):
                raise exception.InvalidConfiguration(reason='%s is required' % required)

        return cls(
            management_lif=opts.ontap_management_lif,
            data_lif=opts.ontap_data_lif,
            svm=opts.ontap_svm,
            username=opts.ontap_username,
            password=opts.ontap_password,
            verify_ssl=opts.ontap_verify_ssl,
            storage_driver_name=opts.ontap_storage_driver_name,
            storage_prefix=opts.ontap_storage_prefix,
            igroup_name=opts.ontap_igroup_name,
            require_target_iqn=opts.ontap_require_target_iqn,
            iscsi_root_helper=opts.ontap_iscsi_root_helper,
        )

    def sanitized(self) -> 'OntapStorageDriverConfig':
        if self.storage_prefix:
            return self
        return dataclasses.replace(self, storage_prefix=DEFAULT_STORAGE_PREFIX)


class OntapCommonDriver(object):
    """Behaviour shared by the ONTAP protocol drivers.

    Protocol specific drivers hold a reference to one of these and delegate
    to it, so a single API client and config serve every driver built on
    the same backend.
    """

    def __init__(self, config: OntapStorageDriverConfig, api: Optional[OntapAPIClient] = None,
                 log: Optional[logging.Logger] = None):
        self.config = config
        self.api = api or OntapAPIClient(
            management_lif=config.management_lif,
            svm=config.svm,
            username=config.username,
            password=config.password,
            verify_ssl=config.verify_ssl
        )
        self.log = log or LOG

    def name(self) -> str:
        return self.config.storage_driver_name

    def check_for_setup_error(self):
        aggregates = self.api.get_svm_aggregate_names()
        if not aggregates:
            raise exception.InvalidConfiguration(reason='SVM %s has no aggregates assigned' % self.config.svm)

    def get_internal_volume_name(self, name: str) -> str:
        prefix = self.config.storage_prefix or DEFAULT_STORAGE_PREFIX
        internal_name = '%s-%s' % (prefix, name)
        return internal_name.replace('-', '_').replace('.', '_')

    def create_prepare(self, volume_config: VolumeConfig) -> bool:
        volume_config.internal_name = self.get_internal_volume_name(volume_config.name)
        return True

    def get_volume_opts(self, volume_config: VolumeConfig, pool: Optional[StoragePool],
                        requests: Dict[str, sa.Request]) -> Dict[str, str]:
        opts = {}

        if pool is not None:
            opts['aggregate'] = pool.name

        provisioning_request = requests.get(sa.PROVISIONING_TYPE)
        if provisioning_request is not None:
            if provisioning_request.value == 'thin':
                opts['spaceReserve'] = 'none'
            elif provisioning_request.value == 'thick':
                opts['spaceReserve'] = 'volume'
            else:
                self.log.warning("Expected 'thick' or 'thin' for %s, got %s; ignoring." %
                                 (sa.PROVISIONING_TYPE, provisioning_request.value))

        encryption_request = requests.get(sa.ENCRYPTION)
        if encryption_request is not None and encryption_request.value is True:
            opts['encryption'] = 'true'

        # explicit volume settings win over anything derived from requests
        for key, value in (('snapshotPolicy', volume_config.snapshot_policy),
                           ('unixPermissions', volume_config.unix_permissions),
                           ('snapshotDir', volume_config.snapshot_dir),
                           ('exportPolicy', volume_config.export_policy),
                           ('spaceReserve', volume_config.space_reserve),
                           ('securityStyle', volume_config.security_style),
                           ('encryption', volume_config.encryption),
                           ('fileSystem', volume_config.file_system)):
            if value:
                opts[key] = value

        return opts

    def get_storage_backend_specs(self, backend: StorageBackend, pool_attributes: Dict[str, sa.Offer]):
        aggregates = self.api.get_svm_aggregate_names()
        if not aggregates:
            raise exception.InvalidConfiguration(reason='SVM %s has no aggregates assigned' % self.config.svm)

        for aggregate in aggregates:
            backend.add_storage_pool(StoragePool(
                name=aggregate,
                backend_name=backend.name,
                attributes=dict(pool_attributes)
            ))

    def get_external_config(self) -> dict:
        external_config = dataclasses.asdict(self.config)
        external_config['username'] = REDACTED
        external_config['password'] = REDACTED
        return external_config
