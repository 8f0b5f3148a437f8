import logging
from ipaddress import ip_address
from typing import List

import requests
from requests.compat import urljoin

from ontap_driver import exception
from ontap_driver.api.objects.cluster import ClusterVersion, Feature, FEATURE_MIN_VERSIONS
from ontap_driver.api.objects.iscsi import IscsiService, LunMap
from ontap_driver.api.objects.volume import Volume, VolumeExportAttributes, VolumeIdAttributes, \
    VolumeSecurityAttributes, VolumeSecurityUnixAttributes, VolumeSpaceAttributes, VolumeSnapshotAttributes

LOG = logging.getLogger(__name__)


def _url_host(host: str) -> str:
    try:
        if ip_address(host).version == 6:
            return "[%s]" % host
    except ValueError:
        pass
    return host


VOLUME_FIELDS = ','.join([
    'name',
    'uuid',
    'aggregates.name',
    'space.size',
    'snapshot_policy.name',
    'snapshot_directory_access_enabled',
    'nas.export_policy.name',
    'nas.unix_permissions',
    'nas.security_style',
])


class OntapAPIClient(object):
    """Client for the ONTAP REST API, scoped to a single SVM."""

    def __init__(self, management_lif: str, svm: str, username: str, password: str, verify_ssl: bool = False):
        self.__url = "https://%s/api/" % _url_host(management_lif)
        self.svm = svm

        self.__client_session = requests.Session()
        self.__client_session.auth = (username, password)
        self.__client_session.verify = verify_ssl
        self.__client_session.headers.update({'Accept': 'application/json'})

    def _request(self, method: str, path: str, action: str, **kwargs) -> dict:
        url = urljoin(self.__url, path)
        try:
            resp = self.__client_session.request(method, url, **kwargs)
        except requests.exceptions.RequestException as e:
            LOG.error("error %s: %s" % (action, e))
            raise exception.OntapApiError(action=action, reason=e)

        if resp.status_code not in (200, 201, 202):
            LOG.error("error %s: %s" % (action, resp.text))
            raise exception.OntapApiError(action=action, reason=resp.text, status_code=resp.status_code)

        return resp.json()

    def _get_records(self, path: str, action: str, params: dict) -> List[dict]:
        output_data = self._request('GET', path, action, params=params)
        records = list(output_data.get('records', []))

        # the API pages large collections, the next link carries the query
        next_link = output_data.get('_links', {}).get('next', {}).get('href')
        while next_link:
            output_data = self._request('GET', next_link, action)
            records.extend(output_data.get('records', []))
            next_link = output_data.get('_links', {}).get('next', {}).get('href')

        return records

    def get_cluster_version(self) -> ClusterVersion:
        output_data = self._request('GET', 'cluster', 'getting cluster version', params={'fields': 'version'})
        try:
            version = output_data['version']
            return ClusterVersion(
                generation=int(version['generation']),
                major=int(version['major']),
                minor=int(version.get('minor', 0))
            )
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            LOG.error("error parsing cluster version %s: %s" % (output_data, e))
            raise exception.OntapApiError(action='getting cluster version',
                                          reason='unexpected response %s' % output_data)

    def supports_feature(self, feature: Feature) -> bool:
        return self.get_cluster_version() >= FEATURE_MIN_VERSIONS[feature]

    def get_iscsi_services(self) -> List[IscsiService]:
        """Return the enabled iSCSI services of every SVM on the cluster."""
        params = {
            'enabled': 'true',
            'fields': 'svm.name,target.name,enabled',
        }
        records = self._get_records('protocols/san/iscsi/services', 'listing iscsi services', params)

        return [
            IscsiService(
                svm_name=record['svm']['name'],
                node_name=record.get('target', {}).get('name', ''),
                enabled=record.get('enabled', True)
            )
            for record in records
        ]

    def get_lun_maps(self, lun_path: str) -> List[LunMap]:
        params = {
            'lun.name': lun_path,
            'svm.name': self.svm,
            'fields': 'igroup.name,lun.name,logical_unit_number',
        }
        records = self._get_records('protocols/san/lun-maps', 'listing lun maps for %s' % lun_path, params)

        return [
            LunMap(
                igroup_name=record['igroup']['name'],
                lun_path=record['lun']['name'],
                logical_unit_number=int(record['logical_unit_number'])
            )
            for record in records
        ]

    def lun_map(self, igroup_name: str, lun_path: str) -> int:
        lun_map_props = {
            "svm": {"name": self.svm},
            "igroup": {"name": igroup_name},
            "lun": {"name": lun_path},
        }
        output_data = self._request('POST', 'protocols/san/lun-maps', 'mapping lun %s' % lun_map_props,
                                    params={'return_records': 'true'}, json=lun_map_props)

        return int(output_data['records'][0]['logical_unit_number'])

    def lun_map_if_not_mapped(self, igroup_name: str, lun_path: str) -> int:
        """Map a LUN into an igroup, returning the existing LUN ID if it is already mapped there."""
        for lun_map in self.get_lun_maps(lun_path):
            if lun_map.igroup_name == igroup_name:
                return lun_map.logical_unit_number
            LOG.debug("LUN %s is mapped to igroup %s." % (lun_path, lun_map.igroup_name))

        return self.lun_map(igroup_name, lun_path)

    def volume_get(self, name: str) -> Volume:
        params = {
            'name': name,
            'svm.name': self.svm,
            'fields': VOLUME_FIELDS,
        }
        records = self._get_records('storage/volumes', 'getting volume %s' % name, params)
        if not records:
            raise exception.VolumeNotFound(volume_name=name)

        record = records[0]
        nas = record.get('nas', {})

        permissions = nas.get('unix_permissions', '')
        if isinstance(permissions, int):
            # the API reports the octal mode as its decimal digits, i.e. 755
            permissions = '%04d' % permissions

        aggregates = record.get('aggregates', [])

        return Volume(
            id=VolumeIdAttributes(
                name=record['name'],
                uuid=record.get('uuid', ''),
                containing_aggregate_name=aggregates[0]['name'] if aggregates else ''
            ),
            export=VolumeExportAttributes(
                policy=nas.get('export_policy', {}).get('name', '')
            ),
            security=VolumeSecurityAttributes(
                unix=VolumeSecurityUnixAttributes(permissions=permissions),
                style=nas.get('security_style', '')
            ),
            space=VolumeSpaceAttributes(
                size_total=int(record.get('space', {}).get('size', 0))
            ),
            snapshot=VolumeSnapshotAttributes(
                snapshot_policy=record.get('snapshot_policy', {}).get('name', ''),
                snapdir_access_enabled=bool(record.get('snapshot_directory_access_enabled', False))
            )
        )

    def get_svm_aggregate_names(self) -> List[str]:
        params = {
            'name': self.svm,
            'fields': 'aggregates.name',
        }
        records = self._get_records('svm/svms', 'getting svm %s' % self.svm, params)
        if not records:
            raise exception.OntapApiError(action='getting svm %s' % self.svm, reason='SVM not found')

        return [aggregate['name'] for aggregate in records[0].get('aggregates', [])]
