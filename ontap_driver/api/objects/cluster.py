from dataclasses import dataclass
from enum import Enum


class Feature(Enum):
    VOLUME_ENCRYPTION = 'volume_encryption'


@dataclass(order=True, frozen=True)
class ClusterVersion:
    generation: int
    major: int
    minor: int = 0

    def __str__(self):
        return '%d.%d.%d' % (self.generation, self.major, self.minor)


# Lowest ONTAP release supporting each optional feature.
FEATURE_MIN_VERSIONS = {
    Feature.VOLUME_ENCRYPTION: ClusterVersion(9, 1),
}
