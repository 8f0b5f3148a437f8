import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

import requests.exceptions

from ontap_driver import exception
from ontap_driver import storage_attribute as sa
from ontap_driver.api.objects.cluster import Feature
from ontap_driver.common import CONF, ONTAP_GROUP, OntapCommonDriver, OntapStorageDriverConfig
from ontap_driver.iscsi import IscsiInitiator
from ontap_driver.storage import AccessMode, PersistentStorageBackendConfig, Protocol, StorageBackend, \
    StoragePool, VolumeAccessInfo, VolumeConfig, VolumeExternal

LOG = logging.getLogger(__name__)

BACKEND_NAME_PREFIX = 'ontapsan'
DEFAULT_FILE_SYSTEM = 'ext4'
LUN_PATH_TEMPLATE = '/vol/%s/lun0'


class MappingStatus(Enum):
    MAPPED = 'mapped'
    # the LUN is mapped but no iSCSI service was found for the SVM, so
    # hosts have no target IQN to log in to
    MAPPED_WITHOUT_TARGET = 'mapped_without_target'


@dataclass(frozen=True)
class LunMapping:
    status: MappingStatus
    lun_id: int
    target_iqn: str


class OntapSANStorageDriver(object):
    """iSCSI storage provisioning on an ONTAP SVM."""

    def __init__(self, common: OntapCommonDriver, log: Optional[logging.Logger] = None):
        self.common = common
        self.log = log or LOG

    @classmethod
    def from_conf(cls, conf=CONF, group=ONTAP_GROUP):
        config = OntapStorageDriverConfig.from_conf(conf, group)
        return cls(OntapCommonDriver(config))

    @property
    def config(self):
        return self.common.config

    @property
    def api(self):
        return self.common.api

    def name(self) -> str:
        return self.common.name()

    def get_protocol(self) -> Protocol:
        return Protocol.BLOCK

    def get_driver_name(self) -> str:
        return self.config.storage_driver_name

    def check_for_setup_error(self):
        self.common.check_for_setup_error()

    def get_iscsi_initiator(self) -> IscsiInitiator:
        return IscsiInitiator.from_config(self.config, log=self.log)

    def get_storage_backend_specs(self, backend: StorageBackend):
        backend.name = '%s_%s' % (BACKEND_NAME_PREFIX, self.config.data_lif)
        backend.protocol = self.get_protocol()
        backend.driver_name = self.get_driver_name()
        self.common.get_storage_backend_specs(backend, self.get_storage_pool_attributes())

    def _supports_encryption(self) -> bool:
        try:
            return self.api.supports_feature(Feature.VOLUME_ENCRYPTION)
        except (exception.OntapApiError, requests.exceptions.RequestException) as e:
            self.log.warning("Could not determine whether volume encryption is supported, "
                             "advertising it as unavailable: %s" % e)
            return False

    def get_storage_pool_attributes(self) -> Dict[str, sa.Offer]:
        return {
            sa.BACKEND_TYPE: sa.StringOffer(self.name()),
            sa.SNAPSHOTS: sa.BoolOffer(True),
            sa.ENCRYPTION: sa.BoolOffer(self._supports_encryption()),
            sa.PROVISIONING_TYPE: sa.StringOffer('thick', 'thin'),
        }

    def get_volume_opts(self, volume_config: VolumeConfig, pool: Optional[StoragePool],
                        requests: Dict[str, sa.Request]) -> Dict[str, str]:
        return self.common.get_volume_opts(volume_config, pool, requests)

    def get_internal_volume_name(self, name: str) -> str:
        return self.common.get_internal_volume_name(name)

    def create_prepare(self, volume_config: VolumeConfig) -> bool:
        return self.common.create_prepare(volume_config)

    def create_followup(self, volume_config: VolumeConfig) -> LunMapping:
        return self.map_volume(volume_config)

    def _find_target_iqn(self, volume_config: VolumeConfig) -> str:
        try:
            services = self.api.get_iscsi_services()
        except (exception.OntapApiError, requests.exceptions.RequestException) as e:
            raise exception.IscsiServiceLookupError(reason=e)

        for service in services:
            if service.svm_name == self.config.svm:
                self.log.debug("Successfully discovered target IQN for the volume. "
                               "volume=%s targetIQN=%s" % (volume_config.name, service.node_name))
                return service.node_name

        return ''

    def map_volume(self, volume_config: VolumeConfig) -> LunMapping:
        """Map the volume's LUN into the configured igroup and fill in its access info.

        The access info is only written once every controller call has
        succeeded. When no iSCSI service belongs to the SVM the LUN is still
        mapped, the target IQN is left empty and the result says so, unless
        ``require_target_iqn`` is configured, in which case nothing is mapped
        and TargetIQNNotFound is raised.
        """
        target_iqn = self._find_target_iqn(volume_config)
        if not target_iqn:
            if self.config.require_target_iqn:
                raise exception.TargetIQNNotFound(svm=self.config.svm)
            self.log.warning("No iSCSI service found for SVM %s, volume %s will have no target IQN." %
                             (self.config.svm, volume_config.name))

        lun_path = LUN_PATH_TEMPLATE % volume_config.internal_name
        lun_id = self.api.lun_map_if_not_mapped(self.config.igroup_name, lun_path)

        access_info = volume_config.access_info
        access_info.iscsi_target_portal = self.config.data_lif
        access_info.iscsi_target_iqn = target_iqn
        access_info.iscsi_lun_number = int(lun_id)
        access_info.iscsi_igroup = self.config.igroup_name

        self.log.debug("Successfully mapped ONTAP LUN. volume=%(volume)s volume_internal=%(volume_internal)s "
                       "targetIQN=%(target_iqn)s lunNumber=%(lun_number)d igroup=%(igroup)s",
                       {'volume': volume_config.name,
                        'volume_internal': volume_config.internal_name,
                        'target_iqn': access_info.iscsi_target_iqn,
                        'lun_number': access_info.iscsi_lun_number,
                        'igroup': access_info.iscsi_igroup})

        status = MappingStatus.MAPPED if target_iqn else MappingStatus.MAPPED_WITHOUT_TARGET
        return LunMapping(status=status, lun_id=access_info.iscsi_lun_number, target_iqn=target_iqn)

    def store_config(self, persistent_config: PersistentStorageBackendConfig):
        persistent_config.ontap_config = self.config.sanitized()

    def get_external_config(self) -> dict:
        return self.common.get_external_config()

    def get_external_volume(self, name: str) -> VolumeExternal:
        internal_name = self.get_internal_volume_name(name)
        volume = self.api.volume_get(internal_name)

        volume_config = VolumeConfig(
            version='1',
            name=name,
            internal_name=internal_name,
            size=str(volume.space.size_total),
            protocol=Protocol.BLOCK,
            snapshot_policy=volume.snapshot.snapshot_policy,
            export_policy=volume.export.policy,
            snapshot_dir=str(volume.snapshot.snapdir_access_enabled).lower(),
            unix_permissions=volume.security.unix.permissions,
            storage_class='',
            access_mode=AccessMode.READ_WRITE_ONCE,
            access_info=VolumeAccessInfo(),
            block_size='',
            file_system=DEFAULT_FILE_SYSTEM
        )

        return VolumeExternal(
            config=volume_config,
            backend=self.name(),
            pool=volume.id.containing_aggregate_name
        )
