from unittest import TestCase

from lxml import etree

from pcmk_reconcile.lib.cib import status

from pcmk_reconcile_test.tools import fixture_cib


def ops(*op_list):
    return [etree.fromstring(fixture_cib.rsc_op(*op)) for op in op_list]


class DeterminePrimitiveStatus(TestCase):
    def assert_status(self, operation_list, expected_status, expected_failed):
        self.assertEqual(
            status.determine_primitive_status(operation_list),
            status.PrimitiveStatus(expected_status, expected_failed),
        )

    def test_no_operations(self):
        self.assert_status([], None, False)

    def test_monitor_codes(self):
        self.assert_status(ops(("monitor", 0, 1)), "start", False)
        self.assert_status(ops(("monitor", 7, 1)), "stop", False)
        self.assert_status(ops(("monitor", 8, 1)), "master", False)

    def test_failed_monitor(self):
        self.assert_status(ops(("monitor", 1, 1)), "stop", True)

    def test_operations_are_replayed_by_call_id(self):
        self.assert_status(
            ops(("stop", 0, 3), ("start", 0, 2), ("promote", 0, 4)),
            "master",
            False,
        )
        self.assert_status(
            ops(("promote", 0, 2), ("demote", 0, 3), ("start", 0, 1)),
            "start",
            False,
        )

    def test_failed_operation_keeps_status(self):
        self.assert_status(
            ops(("start", 0, 1), ("stop", 1, 2)),
            "start",
            True,
        )


CIB = etree.fromstring(
    fixture_cib.cib(
        status=(
            fixture_cib.node_state(
                "node1",
                {
                    "A": fixture_cib.started(),
                    "D:0": fixture_cib.promoted(),
                    "B": [fixture_cib.rsc_op("start", 1, 1)],
                },
            )
            + fixture_cib.node_state(
                "node2",
                {
                    "A": fixture_cib.stopped(),
                    "D:1": fixture_cib.started(),
                },
            )
        )
    )
)


class GetNodesStatus(TestCase):
    def test_nodes(self):
        nodes = status.get_nodes_status(CIB)
        self.assertEqual(sorted(nodes), ["node1", "node2"])
        self.assertEqual(sorted(nodes["node1"]), ["A", "B", "D"])
        self.assertEqual(
            nodes["node2"]["D"], status.PrimitiveStatus("start", False)
        )

    def test_no_status_section(self):
        cib = etree.fromstring("<cib><configuration/></cib>")
        self.assertEqual(status.get_node_states(cib), [])
        self.assertEqual(status.get_nodes_status(cib), {})


class PrimitiveStatus(TestCase):
    def test_best_status_on_any_node(self):
        self.assertEqual(status.primitive_status(CIB, "A"), "start")
        self.assertEqual(status.primitive_status(CIB, "D"), "master")

    def test_status_on_node(self):
        self.assertEqual(status.primitive_status(CIB, "A", "node2"), "stop")
        self.assertEqual(status.primitive_status(CIB, "D", "node2"), "start")

    def test_unknown(self):
        self.assertIsNone(status.primitive_status(CIB, "C"))
        self.assertIsNone(status.primitive_status(CIB, "A", "node3"))
        self.assertIsNone(status.primitive_status(CIB, "B"))

    def test_is_running(self):
        self.assertTrue(status.primitive_is_running(CIB, "A"))
        self.assertFalse(status.primitive_is_running(CIB, "A", "node2"))
        self.assertIsNone(status.primitive_is_running(CIB, "C"))

    def test_has_master_running(self):
        self.assertTrue(status.primitive_has_master_running(CIB, "D"))
        self.assertFalse(
            status.primitive_has_master_running(CIB, "D", "node2")
        )
        self.assertIsNone(status.primitive_has_master_running(CIB, "C"))

    def test_has_failures(self):
        self.assertTrue(status.primitive_has_failures(CIB, "B"))
        self.assertTrue(status.primitive_has_failures(CIB, "B", "node1"))
        self.assertFalse(status.primitive_has_failures(CIB, "B", "node2"))
        self.assertFalse(status.primitive_has_failures(CIB, "A"))
