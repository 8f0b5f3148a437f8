from oslo_config import cfg

ontap_connection_opts = [
    cfg.StrOpt('ontap_management_lif',
               required=True,
               help='Hostname or IP address of the ONTAP cluster management '
                    'interface.'),
    cfg.StrOpt('ontap_data_lif',
               required=True,
               help='IP address of the iSCSI data interface hosts log in to.'),
    cfg.StrOpt('ontap_svm',
               required=True,
               help='Storage virtual machine that owns the volumes.'),
    cfg.StrOpt('ontap_username',
               default='admin',
               help='Username of the ONTAP API account.'),
    cfg.StrOpt('ontap_password',
               default='',
               secret=True,
               help='Password of the ONTAP API account.'),
    cfg.BoolOpt('ontap_verify_ssl',
                default=False,
                help='Verify the certificate of the management interface.'),
]

ontap_san_opts = [
    cfg.StrOpt('ontap_storage_driver_name',
               default='ontap-san',
               help='Name this driver reports to the orchestrator.'),
    cfg.StrOpt('ontap_storage_prefix',
               default='trident',
               help='Prefix prepended to the names of volumes created on '
                    'the controller.'),
    cfg.StrOpt('ontap_igroup_name',
               default='trident',
               help='Initiator group new LUNs are mapped into.'),
    cfg.BoolOpt('ontap_require_target_iqn',
                default=False,
                help='Fail the mapping when no iSCSI service is found for '
                     'the SVM instead of leaving the target IQN empty.'),
    cfg.StrOpt('ontap_iscsi_root_helper',
               default='sudo',
               help='Command used to run iscsiadm with root privileges.'),
]
