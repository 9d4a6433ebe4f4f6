import os
import unittest

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from rinkforms.schemas.forms import FieldDefinition
from rinkforms.services.field_types import FieldType
from rinkforms.services.form_collector import (
    EntryState,
    FormEntrySession,
    collect_values,
    render_and_collect,
    render_form,
)
from rinkforms.services.form_errors import EntrySessionStateError


def _fields():
    return [
        FieldDefinition(name="shift", label="Shift", type=FieldType.SELECT, options=["AM", "PM"], is_required=True, order=0),
        FieldDefinition(name="header", label="Readings", type=FieldType.SECTION, order=1),
        FieldDefinition(name="ice_temp", label="Ice temperature", type=FieldType.NUMBER, default_value="-5", order=2),
        FieldDefinition(name="edger_used", label="Edger used", type=FieldType.TOGGLE, order=3),
        FieldDefinition(name="line", type=FieldType.DIVIDER, order=4),
        FieldDefinition(name="notes", label="Notes", type=FieldType.TEXTAREA, order=5),
    ]


class FormCollectorTests(unittest.TestCase):
    def test_render_includes_layout_and_seeds_defaults(self):
        rendered = render_form(_fields(), {"notes": "Cracks near goal"})
        self.assertEqual([item.name for item in rendered], ["shift", "header", "ice_temp", "edger_used", "line", "notes"])
        by_name = {item.name: item for item in rendered}
        self.assertTrue(by_name["header"].is_layout)
        self.assertIsNone(by_name["header"].value)
        self.assertEqual(by_name["ice_temp"].value, -5)
        self.assertIs(by_name["edger_used"].value, False)
        self.assertEqual(by_name["notes"].value, "Cracks near goal")
        self.assertEqual(by_name["shift"].widget, "select")
        self.assertEqual(by_name["shift"].as_dict()["isRequired"], True)

    def test_collect_builds_record_without_layout_fields(self):
        result = collect_values(_fields(), {"shift": "AM", "ice_temp": "-4.5", "edger_used": "true", "notes": "ok"})
        self.assertTrue(result.is_ok)
        self.assertEqual(result.record, {"shift": "AM", "ice_temp": -4.5, "edger_used": True, "notes": "ok"})
        self.assertNotIn("header", result.record)
        self.assertNotIn("line", result.record)

    def test_missing_required_field_blocks_the_record(self):
        for value in (None, "", "   "):
            with self.subTest(value=value):
                result = collect_values(_fields(), {"shift": value, "ice_temp": "1"})
                self.assertFalse(result.is_ok)
                self.assertEqual(result.record, {})
                self.assertEqual([(error.name, error.kind) for error in result.errors], [("shift", "MissingRequiredField")])

    def test_required_boolean_must_be_true(self):
        fields = [FieldDefinition(name="waiver", label="Waiver signed", type=FieldType.CHECKBOX, is_required=True)]
        self.assertEqual(collect_values(fields, {"waiver": False}).errors[0].kind, "MissingRequiredField")
        self.assertEqual(collect_values(fields, {"waiver": "yes"}).record, {"waiver": True})

    def test_invalid_values_are_reported(self):
        result = collect_values(_fields(), {"shift": "NIGHT", "ice_temp": "cold"})
        self.assertEqual(
            sorted((error.name, error.kind) for error in result.errors),
            [("ice_temp", "InvalidValue"), ("shift", "InvalidValue")],
        )
        self.assertEqual(result.record, {})

    def test_non_finite_numbers_are_invalid(self):
        for value in (float("nan"), float("inf"), float("-inf"), "NaN", "Infinity"):
            with self.subTest(value=value):
                result = collect_values(_fields(), {"shift": "AM", "ice_temp": value})
                self.assertEqual([(error.name, error.kind) for error in result.errors], [("ice_temp", "InvalidValue")])
                self.assertEqual(result.record, {})

    def test_render_and_collect_uses_defaults_for_unsubmitted_fields(self):
        result = render_and_collect(_fields(), {"shift": "PM"})
        self.assertTrue(result.is_ok)
        self.assertEqual(result.record["ice_temp"], -5)
        self.assertEqual(result.record["notes"], "")
        self.assertIs(result.record["edger_used"], False)


class FormEntrySessionTests(unittest.TestCase):
    def test_happy_path_moves_to_submitted(self):
        session = FormEntrySession()
        self.assertEqual(session.state, EntryState.LOADING)
        session.load(_fields())
        self.assertEqual(session.state, EntryState.READY)

        session.set_value("shift", "AM")
        result = session.submit()
        self.assertTrue(result.is_ok)
        self.assertEqual(session.state, EntryState.SUBMITTED)
        self.assertEqual(session.record["shift"], "AM")

        with self.assertRaises(EntrySessionStateError):
            session.submit()

    def test_validation_failure_allows_correction(self):
        session = FormEntrySession()
        session.load(_fields())
        result = session.submit({"shift": ""})
        self.assertFalse(result.is_ok)
        self.assertEqual(session.state, EntryState.VALIDATION_FAILED)
        self.assertEqual(session.errors[0].name, "shift")

        session.set_value("shift", "PM")
        self.assertTrue(session.submit().is_ok)
        self.assertEqual(session.state, EntryState.SUBMITTED)

    def test_editing_before_load_is_rejected(self):
        session = FormEntrySession()
        with self.assertRaises(EntrySessionStateError) as ctx:
            session.set_value("shift", "AM")
        self.assertEqual(ctx.exception.status_code, 409)

    def test_cancel_discards_values(self):
        session = FormEntrySession({"notes": "draft"})
        session.load(_fields())
        self.assertEqual(session.values["notes"], "draft")
        session.cancel()
        self.assertEqual(session.values, {})
        self.assertIsNone(session.record)
