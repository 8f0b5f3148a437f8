from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from ontap_driver.storage_attribute import Offer


class Protocol(Enum):
    FILE = 'file'
    BLOCK = 'block'


class AccessMode(Enum):
    READ_WRITE_ONCE = 'ReadWriteOnce'
    READ_ONLY_MANY = 'ReadOnlyMany'
    READ_WRITE_MANY = 'ReadWriteMany'


@dataclass
class VolumeAccessInfo:
    iscsi_target_portal: str = ''
    iscsi_target_iqn: str = ''
    iscsi_lun_number: int = 0
    iscsi_igroup: str = ''


@dataclass
class VolumeConfig:
    name: str
    internal_name: str = ''
    version: str = '1'
    size: str = ''
    protocol: Protocol = Protocol.BLOCK
    snapshot_policy: str = ''
    export_policy: str = ''
    snapshot_dir: str = ''
    unix_permissions: str = ''
    storage_class: str = ''
    access_mode: AccessMode = AccessMode.READ_WRITE_ONCE
    access_info: VolumeAccessInfo = field(default_factory=VolumeAccessInfo)
    block_size: str = ''
    file_system: str = ''
    space_reserve: str = ''
    security_style: str = ''
    encryption: str = ''


@dataclass(frozen=True)
class VolumeExternal:
    config: VolumeConfig
    backend: str
    pool: str


@dataclass
class StoragePool:
    name: str
    backend_name: str
    attributes: Dict[str, Offer] = field(default_factory=dict)


@dataclass
class StorageBackend:
    name: str = ''
    protocol: Optional[Protocol] = None
    driver_name: str = ''
    storage: Dict[str, StoragePool] = field(default_factory=dict)

    def add_storage_pool(self, pool: StoragePool):
        self.storage[pool.name] = pool


@dataclass
class PersistentStorageBackendConfig:
    ontap_config: Optional[object] = None
