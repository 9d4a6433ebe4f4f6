import os
import unittest

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from rinkforms.services.field_names import normalize_field_name, unique_field_name, validate_field_name
from rinkforms.services.form_errors import DuplicateNameError, InvalidCharactersError


class FieldNameTests(unittest.TestCase):
    def test_normalize_collapses_whitespace_and_lowercases(self):
        self.assertEqual(normalize_field_name("Zamboni   Operator"), "zamboni_operator")
        self.assertEqual(normalize_field_name("Ice\tTemp"), "ice_temp")
        self.assertEqual(normalize_field_name(None), "")

    def test_normalize_turns_edge_whitespace_into_underscores(self):
        self.assertEqual(normalize_field_name(" shift lead "), "_shift_lead_")
        self.assertEqual(validate_field_name("\tIce Temp\n"), "_ice_temp_")

    def test_normalize_is_idempotent(self):
        for raw in ("Shift Start", "already_ok", "  A  b  C ", "Rink #2", ""):
            once = normalize_field_name(raw)
            self.assertEqual(normalize_field_name(once), once)

    def test_validate_returns_normalized_name(self):
        self.assertEqual(validate_field_name("Ice Depth"), "ice_depth")

    def test_validate_rejects_invalid_characters(self):
        with self.assertRaises(InvalidCharactersError) as ctx:
            validate_field_name("Rink #2", field_id="f1")
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(ctx.exception.name, "rink_#2")
        self.assertEqual(ctx.exception.field_id, "f1")

        with self.assertRaises(InvalidCharactersError):
            validate_field_name("")

    def test_validate_rejects_duplicates(self):
        with self.assertRaises(DuplicateNameError) as ctx:
            validate_field_name("Shift", taken=["shift", "notes"])
        self.assertEqual(ctx.exception.kind, "DuplicateName")

    def test_unique_name_appends_first_free_suffix(self):
        self.assertEqual(unique_field_name("notes", []), "notes")
        self.assertEqual(unique_field_name("notes", ["notes"]), "notes_2")
        self.assertEqual(unique_field_name("notes", ["notes", "notes_2"]), "notes_3")
