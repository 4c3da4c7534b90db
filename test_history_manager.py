import unittest

import pandas as pd

from column_schema import PLAIN
from history_manager import DocumentSnapshot, SnapshotHistory


def _snap(value, headers=("A",)):
    frame = pd.DataFrame({"A": [value]}, index=pd.Index(["r1"], dtype=object), dtype=object)
    return DocumentSnapshot(frame=frame, headers=headers, schema={"A": PLAIN})


class SnapshotHistoryTests(unittest.TestCase):
    def _values(self, history):
        return history.current.frame.at["r1", "A"]

    def test_undo_and_redo_walk_back_and_forth(self):
        history = SnapshotHistory(_snap("0"))
        for i in range(1, 4):
            history.commit(_snap(str(i)))

        for expected in ["2", "1", "0"]:
            self.assertTrue(history.undo())
            self.assertEqual(self._values(history), expected)
        self.assertFalse(history.undo())
        self.assertEqual(self._values(history), "0")

        for expected in ["1", "2", "3"]:
            self.assertTrue(history.redo())
            self.assertEqual(self._values(history), expected)
        self.assertFalse(history.redo())

    def test_commit_after_undo_clears_future(self):
        history = SnapshotHistory(_snap("0"))
        history.commit(_snap("1"))
        history.commit(_snap("2"))
        history.undo()
        self.assertTrue(history.can_redo())

        history.commit(_snap("x"))

        self.assertEqual(history.future, [])
        self.assertFalse(history.redo())
        self.assertEqual(self._values(history), "x")

    def test_depth_cap_evicts_oldest(self):
        history = SnapshotHistory(_snap("0"), max_depth=3)
        for i in range(1, 6):
            history.commit(_snap(str(i)))
        self.assertEqual(len(history.past), 3)
        self.assertEqual([s.frame.at["r1", "A"] for s in history.past], ["2", "3", "4"])

    def test_redo_respects_depth_cap(self):
        history = SnapshotHistory(_snap("0"), max_depth=2)
        history.commit(_snap("1"))
        history.commit(_snap("2"))
        history.undo()
        history.undo()
        history.commit(_snap("a"))
        history.commit(_snap("b"))
        history.undo()
        history.redo()
        self.assertLessEqual(len(history.past), 2)

    def test_preview_then_commit_records_pre_preview_base(self):
        history = SnapshotHistory(_snap("old"))
        history.preview(_snap("o"))
        history.preview(_snap("ne"))
        self.assertEqual(self._values(history), "ne")
        self.assertEqual(history.past, [])

        history.commit(_snap("new"))
        self.assertEqual(len(history.past), 1)

        history.undo()
        self.assertEqual(self._values(history), "old")

    def test_undo_while_pending_abandons_preview(self):
        history = SnapshotHistory(_snap("a"))
        history.commit(_snap("b"))
        history.preview(_snap("b-typing"))

        self.assertTrue(history.undo())
        self.assertEqual(self._values(history), "b")
        self.assertFalse(history.has_pending)
        self.assertEqual(len(history.past), 1)

    def test_reset_clears_both_stacks(self):
        history = SnapshotHistory(_snap("a"))
        history.commit(_snap("b"))
        history.undo()
        history.reset(_snap("z"))
        self.assertFalse(history.can_undo())
        self.assertFalse(history.can_redo())
        self.assertEqual(self._values(history), "z")

    def test_snapshot_equality_ignores_identity(self):
        self.assertTrue(_snap("a").equals(_snap("a")))
        self.assertFalse(_snap("a").equals(_snap("b")))
        self.assertFalse(_snap("a").equals(_snap("a", headers=("A", "B"))))


if __name__ == "__main__":
    unittest.main()
