from dataclasses import dataclass


@dataclass
class IscsiService:
    svm_name: str
    node_name: str
    enabled: bool = True


@dataclass
class LunMap:
    igroup_name: str
    lun_path: str
    logical_unit_number: int
