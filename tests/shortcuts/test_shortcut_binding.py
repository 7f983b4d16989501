import unittest

from shortcuts import DEFAULT_BINDINGS, BindingFormatError, KeyEvent, ShortcutBinding, display_key

CMD_OPT = frozenset({"command", "option"})


class ShortcutBindingMatchTests(unittest.TestCase):
    def test_key_code_match_ignores_stored_character(self) -> None:
        binding = ShortcutBinding(key="x", key_code=15, modifiers=CMD_OPT)
        event = KeyEvent(key="r", key_code=15, modifiers=CMD_OPT)
        self.assertTrue(binding.matches(event))

    def test_extra_shift_is_rejected(self) -> None:
        binding = ShortcutBinding(key="r", key_code=15, modifiers=CMD_OPT)
        event = KeyEvent(key="r", key_code=15, modifiers=CMD_OPT | {"shift"})
        self.assertFalse(binding.matches(event))

    def test_missing_modifier_is_rejected(self) -> None:
        binding = ShortcutBinding(key="r", key_code=15, modifiers=CMD_OPT)
        event = KeyEvent(key="r", key_code=15, modifiers=frozenset({"command"}))
        self.assertFalse(binding.matches(event))

    def test_unrecognized_modifiers_are_ignored(self) -> None:
        binding = ShortcutBinding(key="r", key_code=15, modifiers=CMD_OPT)
        event = KeyEvent(key="r", key_code=15, modifiers=CMD_OPT | {"caps_lock"})
        self.assertTrue(binding.matches(event))

    def test_character_match_is_case_insensitive_without_key_code(self) -> None:
        binding = ShortcutBinding(key="k", modifiers=frozenset({"control"}))
        self.assertTrue(binding.matches(KeyEvent(key="K", modifiers=frozenset({"control"}))))
        self.assertFalse(binding.matches(KeyEvent(key="j", modifiers=frozenset({"control"}))))

    def test_key_code_mismatch_is_rejected_even_when_character_matches(self) -> None:
        binding = ShortcutBinding(key="r", key_code=15, modifiers=CMD_OPT)
        self.assertFalse(binding.matches(KeyEvent(key="r", key_code=99, modifiers=CMD_OPT)))


class ShortcutBindingFormatTests(unittest.TestCase):
    def test_defaults(self) -> None:
        self.assertEqual(36, DEFAULT_BINDINGS["startPause"].key_code)
        self.assertEqual(("r", 15), (DEFAULT_BINDINGS["reset"].key, DEFAULT_BINDINGS["reset"].key_code))
        self.assertEqual("s", DEFAULT_BINDINGS["skip"].key)
        self.assertEqual(45, DEFAULT_BINDINGS["quickAdd"].key_code)
        for binding in DEFAULT_BINDINGS.values():
            self.assertEqual(CMD_OPT, binding.modifiers)

    def test_display_string_orders_modifier_symbols(self) -> None:
        binding = ShortcutBinding(
            key="r",
            key_code=15,
            modifiers=frozenset({"command", "option", "shift", "control"}),
        )
        self.assertEqual("^ ⌥ ⇧ ⌘ R", binding.display_string)
        self.assertEqual("⌥ ⌘ ↩", DEFAULT_BINDINGS["startPause"].display_string)

    def test_display_key_special_cases(self) -> None:
        self.assertEqual("Space", display_key(" ", None))
        self.assertEqual("Space", display_key("", 49))
        self.assertEqual("⇥", display_key("\t", 48))
        self.assertEqual("F5", display_key("f05", None))
        self.assertEqual("F", display_key("f", 3))

    def test_dict_format_uses_persisted_field_names(self) -> None:
        binding = ShortcutBinding(key="n", key_code=45, modifiers=CMD_OPT)
        payload = binding.to_dict()

        self.assertEqual(
            {
                "key": "n",
                "keyCode": 45,
                "command": True,
                "option": True,
                "control": False,
                "shift": False,
                "function": False,
            },
            payload,
        )
        self.assertEqual(binding, ShortcutBinding.from_dict(payload))

    def test_key_code_is_optional_in_dict_format(self) -> None:
        binding = ShortcutBinding.from_dict({"key": "p", "control": True})
        self.assertIsNone(binding.key_code)
        self.assertNotIn("keyCode", binding.to_dict())
        self.assertEqual(frozenset({"control"}), binding.modifiers)

    def test_from_dict_rejects_bad_types(self) -> None:
        for raw in (
            {"key": 5},
            {"key": "a", "keyCode": "15"},
            {"key": "a", "keyCode": True},
            {"key": "a", "shift": "yes"},
        ):
            with self.subTest(raw=raw):
                with self.assertRaises(BindingFormatError):
                    ShortcutBinding.from_dict(raw)

    def test_from_event_lowercases_key(self) -> None:
        binding = ShortcutBinding.from_event(
            KeyEvent(key="P", key_code=35, modifiers=frozenset({"control", "shift"}))
        )
        self.assertEqual("p", binding.key)
        self.assertEqual(35, binding.key_code)
        self.assertEqual(frozenset({"control", "shift"}), binding.modifiers)


if __name__ == "__main__":
    unittest.main()
