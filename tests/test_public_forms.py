from tests.admin.base import *  # noqa: F401,F403

FORM_URL = "/api/forms/rink-north/ice_maintenance"
CONFIG_URL = "/api/admin/forms/configs/rink-north/ice_maintenance"


class PublicFormEntryTests(FormsApiBase):
    def setUp(self):
        super().setUp()
        self.client.put(
            CONFIG_URL,
            headers=self._auth_headers("ADMIN"),
            json={
                "fields": [
                    self._field("shift", "select", options=["AM", "PM"], isRequired=True),
                    self._field("readings", "section"),
                    self._field("ice_temp", "number", defaultValue="-5"),
                    self._field("edger_used", "toggle"),
                    self._field("line", "divider"),
                    self._field("notes", "textarea"),
                ]
            },
        )

    def test_entry_requires_token(self):
        self.assertEqual(self.client.get(FORM_URL).status_code, 401)
        response = self.client.get(FORM_URL, headers=self._auth_headers("GUEST"))
        self.assertEqual(response.status_code, 403)

    def test_get_form_renders_all_fields(self):
        response = self.client.get(FORM_URL, headers=self._auth_headers("STAFF"))
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["version"], 1)
        self.assertEqual(payload["state"], "ready")
        self.assertEqual(len(payload["fields"]), 6)
        by_name = {item["name"]: item for item in payload["fields"]}
        self.assertTrue(by_name["readings"]["isLayout"])
        self.assertEqual(by_name["ice_temp"]["value"], -5)
        self.assertEqual(by_name["edger_used"]["widget"], "switch")

    def test_render_with_initial_values(self):
        response = self.client.post(
            f"{FORM_URL}/render",
            headers=self._auth_headers("STAFF"),
            json={"values": {"shift": "PM", "notes": "Board 3 cracked"}},
        )
        self.assertEqual(response.status_code, 200)
        by_name = {item["name"]: item for item in response.json()["fields"]}
        self.assertEqual(by_name["shift"]["value"], "PM")
        self.assertEqual(by_name["notes"]["value"], "Board 3 cracked")

    def test_submit_returns_record_without_layout_fields(self):
        response = self.client.post(
            f"{FORM_URL}/submit",
            headers=self._auth_headers("STAFF"),
            json={"values": {"shift": "AM", "ice_temp": "-3.5", "edger_used": True}},
        )
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["status"], "submitted")
        self.assertEqual(payload["version"], 1)
        self.assertEqual(payload["record"], {"shift": "AM", "ice_temp": -3.5, "edger_used": True, "notes": ""})

    def test_submit_missing_required_is_unprocessable(self):
        response = self.client.post(
            f"{FORM_URL}/submit",
            headers=self._auth_headers("STAFF"),
            json={"values": {"ice_temp": "warm"}},
        )
        self.assertEqual(response.status_code, 422)
        errors = {item["name"]: item["kind"] for item in response.json()["detail"]}
        self.assertEqual(errors, {"shift": "MissingRequiredField", "ice_temp": "InvalidValue"})

    def test_unconfigured_form_submits_empty_record(self):
        response = self.client.post(
            "/api/forms/rink-south/incident/submit",
            headers=self._auth_headers("STAFF"),
            json={"values": {"anything": 1}},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["record"], {})
