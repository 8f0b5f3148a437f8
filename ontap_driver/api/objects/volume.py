from dataclasses import dataclass, field


@dataclass
class VolumeExportAttributes:
    policy: str = ''


@dataclass
class VolumeIdAttributes:
    name: str = ''
    uuid: str = ''
    containing_aggregate_name: str = ''


@dataclass
class VolumeSecurityUnixAttributes:
    permissions: str = ''


@dataclass
class VolumeSecurityAttributes:
    unix: VolumeSecurityUnixAttributes = field(default_factory=VolumeSecurityUnixAttributes)
    style: str = ''


@dataclass
class VolumeSpaceAttributes:
    size_total: int = 0


@dataclass
class VolumeSnapshotAttributes:
    snapshot_policy: str = ''
    snapdir_access_enabled: bool = False


@dataclass
class Volume:
    id: VolumeIdAttributes
    export: VolumeExportAttributes
    security: VolumeSecurityAttributes
    space: VolumeSpaceAttributes
    snapshot: VolumeSnapshotAttributes
