import unittest

from runtime import QuickAddController
from shortcuts import KeyEvent
from storage import MemoryStore
from tasks import TaskStore


def _type(controller: QuickAddController, text: str) -> None:
    for char in text:
        controller.handle_key_event(KeyEvent(key=char))


RETURN = KeyEvent(key="\r", key_code=36)
ESCAPE = KeyEvent(key="\x1b", key_code=53)
DELETE = KeyEvent(key="\x7f", key_code=51)


class QuickAddControllerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tasks = TaskStore(MemoryStore())
        self.controller = QuickAddController(self.tasks)

    def test_toggle_flips_visibility(self) -> None:
        self.controller.toggle()
        self.assertTrue(self.controller.visible)
        self.controller.toggle()
        self.assertFalse(self.controller.visible)

    def test_keys_are_ignored_while_hidden(self) -> None:
        self.assertFalse(self.controller.handle_key_event(KeyEvent(key="a")))
        self.assertEqual("", self.controller.draft)

    def test_return_adds_task_and_stays_open(self) -> None:
        self.controller.show()
        _type(self.controller, "buy milk")
        self.controller.handle_key_event(RETURN)

        self.assertEqual(["buy milk"], [task.text for task in self.tasks.tasks])
        self.assertTrue(self.controller.visible)
        self.assertEqual("", self.controller.draft)

    def test_blank_draft_is_not_submitted(self) -> None:
        self.controller.show()
        _type(self.controller, "   ")
        self.assertIsNone(self.controller.submit())
        self.assertEqual(0, len(self.tasks))
        self.assertEqual("   ", self.controller.draft)

    def test_delete_removes_last_character(self) -> None:
        self.controller.show()
        _type(self.controller, "tea")
        self.controller.handle_key_event(DELETE)
        self.assertEqual("te", self.controller.draft)

    def test_escape_hides_and_discards_draft(self) -> None:
        self.controller.show()
        _type(self.controller, "later")
        self.controller.handle_key_event(ESCAPE)

        self.assertFalse(self.controller.visible)
        self.assertEqual("", self.controller.draft)
        self.assertEqual(0, len(self.tasks))

    def test_shifted_letters_are_upper_case(self) -> None:
        self.controller.show()
        self.controller.handle_key_event(KeyEvent(key="c", modifiers=frozenset({"shift"})))
        _type(self.controller, "all")
        self.assertEqual("Call", self.controller.draft)

    def test_modified_keys_are_left_for_shortcuts(self) -> None:
        self.controller.show()
        handled = self.controller.handle_key_event(
            KeyEvent(key="n", key_code=45, modifiers=frozenset({"command", "option"}))
        )
        self.assertFalse(handled)
        self.assertEqual("", self.controller.draft)

    def test_arrow_keys_do_not_edit_draft(self) -> None:
        self.controller.show()
        self.assertFalse(self.controller.handle_key_event(KeyEvent(key="↑", key_code=126)))
        self.assertEqual("", self.controller.draft)

    def test_draft_is_capped_at_task_length(self) -> None:
        self.controller.show()
        _type(self.controller, "x" * 120)
        self.assertEqual(100, len(self.controller.draft))

    def test_change_events_report_added_task(self) -> None:
        states = []
        self.controller.changes.add(states.append)
        self.controller.show()
        _type(self.controller, "a")
        self.controller.handle_key_event(RETURN)

        self.assertEqual([True, True, True], [state.visible for state in states])
        self.assertEqual("a", states[-1].last_added.text)


if __name__ == "__main__":
    unittest.main()
