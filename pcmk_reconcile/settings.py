import os.path

pacemaker_binaries = "/usr/sbin/"
cibadmin_exec = os.path.join(pacemaker_binaries, "cibadmin")
crm_attribute_exec = os.path.join(pacemaker_binaries, "crm_attribute")

# retry / wait defaults, see PacemakerOptions
retry_count = 360
retry_step = 5
retry_timeout = 60
retry_false_is_failure = True
retry_fail_on_timeout = False

debug_enabled = False
debug_show_properties = ["symmetric-cluster", "no-quorum-policy"]
prefetch = False

# pacemaker writes this into dc-uuid until a DC is elected
no_designated_controller = "NONE"

pcmk_reconcile_version = "0.1.0"
