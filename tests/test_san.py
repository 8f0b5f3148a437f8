import unittest
from unittest import mock

from ontap_driver import exception
from ontap_driver import storage_attribute as sa
from ontap_driver.api.objects.cluster import Feature
from ontap_driver.api.objects.iscsi import IscsiService
from ontap_driver.api.objects.volume import Volume, VolumeExportAttributes, VolumeIdAttributes, \
    VolumeSecurityAttributes, VolumeSecurityUnixAttributes, VolumeSpaceAttributes, VolumeSnapshotAttributes
from ontap_driver.common import OntapCommonDriver, OntapStorageDriverConfig
from ontap_driver.san import MappingStatus, OntapSANStorageDriver
from ontap_driver.storage import AccessMode, PersistentStorageBackendConfig, Protocol, StorageBackend, \
    VolumeAccessInfo, VolumeConfig

TARGET_IQN = 'iqn.1992-08.com.netapp:sn.0123456789:vs.3'


class TestOntapSANStorageDriver(unittest.TestCase):

    def setUp(self):
        self.config = OntapStorageDriverConfig(
            management_lif='10.0.0.100',
            data_lif='10.0.0.1',
            svm='svm0',
            username='admin',
            password='secret',
            igroup_name='trident',
        )
        self.api = mock.Mock()
        self.api.supports_feature.return_value = True
        self.api.get_iscsi_services.return_value = [
            IscsiService(svm_name='other_svm', node_name='iqn.other'),
            IscsiService(svm_name='svm0', node_name=TARGET_IQN),
        ]
        self.api.lun_map_if_not_mapped.return_value = 3
        self.log = mock.Mock()
        self.driver = OntapSANStorageDriver(OntapCommonDriver(self.config, api=self.api), log=self.log)

    def _volume_config(self):
        volume_config = VolumeConfig(name='vol1')
        self.driver.create_prepare(volume_config)
        return volume_config

    def test_protocol_and_driver_name(self):
        self.assertEqual(Protocol.BLOCK, self.driver.get_protocol())
        self.assertEqual('ontap-san', self.driver.get_driver_name())
        self.assertEqual('ontap-san', self.driver.name())

    def test_storage_pool_attributes(self):
        attributes = self.driver.get_storage_pool_attributes()

        self.assertEqual({sa.BACKEND_TYPE, sa.SNAPSHOTS, sa.ENCRYPTION, sa.PROVISIONING_TYPE},
                         set(attributes))
        self.assertEqual(('ontap-san',), attributes[sa.BACKEND_TYPE].value)
        self.assertTrue(attributes[sa.SNAPSHOTS].value)
        self.assertTrue(attributes[sa.ENCRYPTION].value)
        self.assertEqual(('thick', 'thin'), attributes[sa.PROVISIONING_TYPE].value)
        self.api.supports_feature.assert_called_once_with(Feature.VOLUME_ENCRYPTION)

    def test_storage_pool_attributes_no_encryption(self):
        self.api.supports_feature.return_value = False

        attributes = self.driver.get_storage_pool_attributes()

        self.assertFalse(attributes[sa.ENCRYPTION].value)

    def test_storage_pool_attributes_probe_error(self):
        self.api.supports_feature.side_effect = exception.OntapApiError(
            action='getting cluster version', reason='timeout')

        attributes = self.driver.get_storage_pool_attributes()

        self.assertFalse(attributes[sa.ENCRYPTION].value)
        self.assertEqual(4, len(attributes))
        self.assertTrue(self.log.warning.called)

    def test_get_storage_backend_specs(self):
        self.api.get_svm_aggregate_names.return_value = ['aggr1', 'aggr2']
        backend = StorageBackend()

        self.driver.get_storage_backend_specs(backend)

        self.assertEqual('ontapsan_10.0.0.1', backend.name)
        self.assertEqual(Protocol.BLOCK, backend.protocol)
        self.assertEqual(['aggr1', 'aggr2'], sorted(backend.storage))
        pool = backend.storage['aggr1']
        self.assertEqual('ontapsan_10.0.0.1', pool.backend_name)
        self.assertTrue(pool.attributes[sa.PROVISIONING_TYPE].matches(sa.StringRequest('thin')))

    def test_create_prepare_sets_internal_name(self):
        volume_config = self._volume_config()

        self.assertEqual('trident_vol1', volume_config.internal_name)

    def test_map_volume(self):
        volume_config = self._volume_config()

        result = self.driver.create_followup(volume_config)

        self.api.lun_map_if_not_mapped.assert_called_once_with('trident', '/vol/trident_vol1/lun0')
        self.assertEqual(MappingStatus.MAPPED, result.status)
        self.assertEqual(3, result.lun_id)
        self.assertEqual(
            VolumeAccessInfo(
                iscsi_target_portal='10.0.0.1',
                iscsi_target_iqn=TARGET_IQN,
                iscsi_lun_number=3,
                iscsi_igroup='trident'
            ),
            volume_config.access_info)

    def test_map_volume_service_query_fails(self):
        self.api.get_iscsi_services.side_effect = exception.OntapApiError(
            action='listing iscsi services', reason='internal error', status_code=500)
        volume_config = self._volume_config()

        self.assertRaises(exception.IscsiServiceLookupError, self.driver.map_volume, volume_config)

        self.assertFalse(self.api.lun_map_if_not_mapped.called)
        self.assertEqual(VolumeAccessInfo(), volume_config.access_info)

    def test_map_volume_no_matching_service(self):
        self.api.get_iscsi_services.return_value = [IscsiService(svm_name='other_svm', node_name='iqn.other')]
        volume_config = self._volume_config()

        result = self.driver.map_volume(volume_config)

        self.assertEqual(MappingStatus.MAPPED_WITHOUT_TARGET, result.status)
        self.assertEqual('', volume_config.access_info.iscsi_target_iqn)
        self.assertEqual('10.0.0.1', volume_config.access_info.iscsi_target_portal)
        self.assertEqual(3, volume_config.access_info.iscsi_lun_number)

    def test_map_volume_no_matching_service_required(self):
        self.api.get_iscsi_services.return_value = []
        config = OntapStorageDriverConfig(management_lif='10.0.0.100', data_lif='10.0.0.1', svm='svm0',
                                          require_target_iqn=True)
        driver = OntapSANStorageDriver(OntapCommonDriver(config, api=self.api))
        volume_config = VolumeConfig(name='vol1', internal_name='trident_vol1')

        self.assertRaises(exception.TargetIQNNotFound, driver.map_volume, volume_config)

        self.assertFalse(self.api.lun_map_if_not_mapped.called)
        self.assertEqual(VolumeAccessInfo(), volume_config.access_info)

    def test_map_volume_lun_map_fails(self):
        error = exception.OntapApiError(action='mapping lun', reason='igroup not found', status_code=404)
        self.api.lun_map_if_not_mapped.side_effect = error
        volume_config = self._volume_config()

        with self.assertRaises(exception.OntapApiError) as ctx:
            self.driver.map_volume(volume_config)

        self.assertIs(error, ctx.exception)
        self.assertEqual(VolumeAccessInfo(), volume_config.access_info)

    def test_get_external_volume(self):
        self.api.volume_get.return_value = Volume(
            id=VolumeIdAttributes(name='trident_vol1', containing_aggregate_name='aggr1'),
            export=VolumeExportAttributes(policy='default'),
            security=VolumeSecurityAttributes(unix=VolumeSecurityUnixAttributes(permissions='0755')),
            space=VolumeSpaceAttributes(size_total=10737418240),
            snapshot=VolumeSnapshotAttributes(snapshot_policy='default', snapdir_access_enabled=True),
        )

        volume = self.driver.get_external_volume('vol1')

        self.api.volume_get.assert_called_once_with('trident_vol1')
        self.assertEqual('ontap-san', volume.backend)
        self.assertEqual('aggr1', volume.pool)
        config = volume.config
        self.assertEqual('vol1', config.name)
        self.assertEqual('trident_vol1', config.internal_name)
        self.assertEqual('10737418240', config.size)
        self.assertEqual('default', config.snapshot_policy)
        self.assertEqual('default', config.export_policy)
        self.assertEqual('true', config.snapshot_dir)
        self.assertEqual('0755', config.unix_permissions)
        self.assertEqual(Protocol.BLOCK, config.protocol)
        self.assertEqual(AccessMode.READ_WRITE_ONCE, config.access_mode)
        self.assertEqual('ext4', config.file_system)
        self.assertEqual(VolumeAccessInfo(), config.access_info)

    def test_get_external_volume_not_found(self):
        self.api.volume_get.side_effect = exception.VolumeNotFound(volume_name='trident_missing')

        self.assertRaises(exception.VolumeNotFound, self.driver.get_external_volume, 'missing')

    def test_store_config(self):
        persistent_config = PersistentStorageBackendConfig()

        self.driver.store_config(persistent_config)

        self.assertEqual(self.config, persistent_config.ontap_config)

    def test_iscsi_initiator_uses_configured_root_helper(self):
        config = OntapStorageDriverConfig(management_lif='10.0.0.100', data_lif='10.0.0.1', svm='svm0',
                                          iscsi_root_helper='doas')
        driver = OntapSANStorageDriver(OntapCommonDriver(config, api=self.api))
        execute = mock.Mock(return_value=('', ''))

        initiator = driver.get_iscsi_initiator()
        initiator._execute = execute
        initiator.discover_and_login(config.data_lif)

        self.assertEqual(2, execute.call_count)
        for call in execute.call_args_list:
            self.assertEqual('doas', call[1]['root_helper'])

    def test_get_external_config_redacts_credentials(self):
        external_config = self.driver.get_external_config()

        self.assertEqual('<REDACTED>', external_config['password'])
        self.assertEqual('<REDACTED>', external_config['username'])
        self.assertEqual('svm0', external_config['svm'])
