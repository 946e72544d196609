"""
Building blocks of cibs and of pacemaker commands used in tests
"""

from pcmk_reconcile_test.tools.mock_runner import Call

PRIMITIVES = """
    <primitive id="A" class="ocf" provider="heartbeat" type="Dummy"/>
    <primitive id="B" class="ocf" provider="heartbeat" type="Dummy"/>
    <clone id="C-clone">
        <primitive id="C" class="ocf" provider="heartbeat" type="Dummy"/>
    </clone>
    <master id="D-master">
        <primitive id="D" class="ocf" provider="pacemaker" type="Stateful">
            <meta_attributes id="D-meta">
                <nvpair id="D-meta-managed" name="is-managed" value="false"/>
            </meta_attributes>
        </primitive>
    </master>
"""


def cib(
    resources=PRIMITIVES,
    constraints="",
    crm_config="",
    rsc_defaults=None,
    status="",
    dc_uuid="1",
):
    # pylint: disable=too-many-arguments
    return """
        <cib epoch="1" num_updates="0" admin_epoch="0"
            validate-with="pacemaker-3.0"{dc_uuid}
        >
            <configuration>
                <crm_config>{crm_config}</crm_config>
                <nodes>
                    <node id="1" uname="node1"/>
                    <node id="2" uname="node2"/>
                </nodes>
                <resources>{resources}</resources>
                <constraints>{constraints}</constraints>
                {rsc_defaults}
            </configuration>
            <status>{status}</status>
        </cib>
    """.format(
        dc_uuid=f' dc-uuid="{dc_uuid}"' if dc_uuid is not None else "",
        crm_config=crm_config,
        resources=resources,
        constraints=constraints,
        rsc_defaults=(
            f"<rsc_defaults>{rsc_defaults}</rsc_defaults>"
            if rsc_defaults is not None
            else ""
        ),
        status=status,
    )


def nvset(tag, set_id, nvpairs):
    return "<{tag} id='{set_id}'>{pairs}</{tag}>".format(
        tag=tag,
        set_id=set_id,
        pairs="".join(
            f'<nvpair id="{set_id}-{name}" name="{name}" value="{value}"/>'
            for name, value in nvpairs.items()
        ),
    )


def cluster_properties(nvpairs, set_id="cib-bootstrap-options"):
    return nvset("cluster_property_set", set_id, nvpairs)


def meta_attributes(nvpairs, set_id="rsc-options"):
    return nvset("meta_attributes", set_id, nvpairs)


def rsc_op(operation, rc_code, call_id):
    return (
        f'<lrm_rsc_op id="op-{operation}-{call_id}" operation="{operation}" '
        f'rc-code="{rc_code}" call-id="{call_id}"/>'
    )


def node_state(uname, resources, node_id=None):
    """
    resources -- dict: lrm_resource id -> list of lrm_rsc_op strings
    """
    return """
        <node_state id="{node_id}" uname="{uname}">
            <lrm id="{node_id}">
                <lrm_resources>{resources}</lrm_resources>
            </lrm>
        </node_state>
    """.format(
        node_id=node_id or uname,
        uname=uname,
        resources="".join(
            f'<lrm_resource id="{rsc_id}">{"".join(op_list)}</lrm_resource>'
            for rsc_id, op_list in resources.items()
        ),
    )


def started(call_id=2):
    return [rsc_op("start", 0, call_id)]


def stopped(call_id=2):
    return [rsc_op("stop", 0, call_id)]


def promoted(call_id=3):
    return [rsc_op("start", 0, call_id - 1), rsc_op("promote", 0, call_id)]


def order(constraint_id, first, then, score="INFINITY"):
    return (
        f'<rsc_order id="{constraint_id}" first="{first}" then="{then}" '
        f'score="{score}"/>'
    )


def colocation(constraint_id, rsc, with_rsc, score="INFINITY"):
    return (
        f'<rsc_colocation id="{constraint_id}" rsc="{rsc}" '
        f'with-rsc="{with_rsc}" score="{score}"/>'
    )


def load_cib_call(cib_xml, returncode=0, stderr=""):
    return Call(
        ["cibadmin", "--query"],
        stdout=cib_xml,
        stderr=stderr,
        returncode=returncode,
    )


def patch_cib_call(action, xml, scope="constraints", returncode=0, stderr=""):
    # pylint: disable=too-many-arguments
    return Call(
        ["cibadmin", "--force", "--sync-call", f"--{action}"]
        + (["--scope", scope] if scope else [])
        + ["--xml-text", xml],
        stderr=stderr,
        returncode=returncode,
    )


def dc_version_call(version="2.1.5-a3f44794f94", returncode=0):
    return Call(
        [
            "crm_attribute",
            "-q",
            "--type",
            "crm_config",
            "--query",
            "--name",
            "dc-version",
        ],
        stdout=f"{version}\n" if version else "",
        returncode=returncode,
    )


def update_attribute_call(
    attribute_type, name, value, returncode=0, stderr=""
):
    # pylint: disable=too-many-arguments
    return Call(
        [
            "crm_attribute",
            "--type",
            attribute_type,
            "--name",
            name,
            "--update",
            value,
        ],
        stderr=stderr,
        returncode=returncode,
    )


def delete_attribute_call(attribute_type, name, returncode=0, stderr=""):
    return Call(
        ["crm_attribute", "--type", attribute_type, "--name", name, "--delete"],
        stderr=stderr,
        returncode=returncode,
    )
