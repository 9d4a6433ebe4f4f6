from tests.admin.base import *  # noqa: F401,F403

TEMPLATES_URL = "/api/admin/forms/templates"


class AdminFormTemplatesTests(FormsApiBase):
    def _create(self, name="Morning check", system=False, category="Operations", form_type="ice_maintenance"):
        response = self.client.post(
            TEMPLATES_URL,
            headers=self._auth_headers("ADMIN", name="Dana Rivers"),
            json={
                "template_name": name,
                "form_type": form_type,
                "category": category,
                "description": "Daily ice checks",
                "is_system_template": system,
                "fields": [self._field("shift", "select", options=["AM", "PM"]), self._field("notes", "textarea")],
            },
        )
        self.assertEqual(response.status_code, 201)
        return response.json()

    def test_create_and_get_template(self):
        created = self._create()
        self.assertEqual(created["version"], 1)
        self.assertEqual(created["field_count"], 2)
        self.assertEqual(created["created_by"], "Dana Rivers")

        fetched = self.client.get(f"{TEMPLATES_URL}/{created['id']}", headers=self._auth_headers("ADMIN"))
        self.assertEqual(fetched.status_code, 200)
        self.assertEqual([item["name"] for item in fetched.json()["fields"]], ["shift", "notes"])

    def test_create_requires_name(self):
        response = self.client.post(
            TEMPLATES_URL,
            headers=self._auth_headers("ADMIN"),
            json={"template_name": "  ", "form_type": "ice_maintenance"},
        )
        self.assertEqual(response.status_code, 422)

    def test_unknown_template_is_not_found(self):
        headers = self._auth_headers("ADMIN")
        self.assertEqual(self.client.get(f"{TEMPLATES_URL}/not-a-uuid", headers=headers).status_code, 404)
        self.assertEqual(self.client.get(f"{TEMPLATES_URL}/{uuid4()}", headers=headers).status_code, 404)

    def test_list_and_query_templates(self):
        headers = self._auth_headers("ADMIN")
        self._create("Zamboni log", category="Equipment")
        self._create("Morning check")
        self._create("Incident report", form_type="incident", category="Safety")

        listed = self.client.get(TEMPLATES_URL, headers=headers, params={"form_type": "ice_maintenance"}).json()
        self.assertEqual(listed["total"], 2)
        self.assertEqual([row["template_name"] for row in listed["rows"]], ["Morning check", "Zamboni log"])

        queried = self.client.post(
            f"{TEMPLATES_URL}/query",
            headers=headers,
            json={
                "filters": [{"field": "category", "op": "!=", "value": "Safety"}],
                "sort": [{"field": "template_name", "dir": "desc"}],
                "page": {"limit": 1, "offset": 0},
            },
        ).json()
        self.assertEqual(queried["total"], 2)
        self.assertEqual([row["template_name"] for row in queried["rows"]], ["Zamboni log"])

        bad = self.client.post(
            f"{TEMPLATES_URL}/query",
            headers=headers,
            json={"filters": [{"field": "configuration", "op": "=", "value": "x"}]},
        )
        self.assertEqual(bad.status_code, 400)

        out_of_range = self.client.post(f"{TEMPLATES_URL}/query", headers=headers, json={"page": {"limit": 0}})
        self.assertEqual(out_of_range.status_code, 422)

    def test_save_template_fields_and_history(self):
        headers = self._auth_headers("ADMIN")
        created = self._create()
        url = f"{TEMPLATES_URL}/{created['id']}"

        saved = self.client.put(url, headers=headers, json={"fields": [self._field("zone")], "expected_version": 1})
        self.assertEqual(saved.status_code, 200)
        self.assertEqual(saved.json()["version"], 2)
        self.assertEqual([item["name"] for item in saved.json()["fields"]], ["zone"])

        stale = self.client.put(url, headers=headers, json={"fields": [self._field("x")], "expected_version": 1})
        self.assertEqual(stale.status_code, 409)

        versions = self.client.get(f"{url}/versions", headers=headers).json()
        self.assertEqual([row["version"] for row in versions["rows"]], [2, 1])
        self.assertEqual(versions["rows"][1]["changelog"], "Initial version")

        compared = self.client.get(
            f"{url}/versions/compare", headers=headers, params={"from_version": 1, "to_version": 2}
        ).json()
        self.assertEqual(compared["stats"]["added"], 1)
        self.assertEqual(compared["stats"]["removed"], 2)

        restored = self.client.post(f"{url}/versions/1/restore", headers=headers)
        self.assertEqual(restored.status_code, 200)
        self.assertEqual(restored.json()["version"], 3)
        self.assertEqual([item["name"] for item in restored.json()["fields"]], ["shift", "notes"])

    def test_duplicate_and_delete(self):
        headers = self._auth_headers("ADMIN")
        system = self._create("Standard check", system=True)

        copy = self.client.post(
            f"{TEMPLATES_URL}/{system['id']}/duplicate",
            headers=headers,
            json={"template_name": "North rink check"},
        )
        self.assertEqual(copy.status_code, 201)
        copy_payload = copy.json()
        self.assertFalse(copy_payload["is_system_template"])
        self.assertEqual(copy_payload["version"], 1)
        self.assertEqual(
            [item["name"] for item in copy_payload["fields"]],
            ["shift", "notes"],
        )

        forbidden = self.client.delete(f"{TEMPLATES_URL}/{system['id']}", headers=headers)
        self.assertEqual(forbidden.status_code, 403)
        self.assertEqual(forbidden.json()["kind"], "ForbiddenSystemTemplate")

        deleted = self.client.delete(f"{TEMPLATES_URL}/{copy_payload['id']}", headers=headers)
        self.assertEqual(deleted.status_code, 200)
        self.assertEqual(self.client.get(f"{TEMPLATES_URL}/{copy_payload['id']}", headers=headers).status_code, 404)
        with self.SessionLocal() as db:
            actions = sorted(row.action for row in db.query(AuditLog).all())
        self.assertEqual(actions, ["CREATE", "DELETE", "DUPLICATE"])

    def test_apply_template_returns_fresh_session(self):
        headers = self._auth_headers("MANAGER")
        created = self._create()
        template_fields = self.client.get(f"{TEMPLATES_URL}/{created['id']}", headers=headers).json()["fields"]

        applied = self.client.get(f"{TEMPLATES_URL}/{created['id']}/apply", headers=headers)
        self.assertEqual(applied.status_code, 200)
        session = applied.json()["session"]
        self.assertEqual([item["name"] for item in session["fields"]], ["shift", "notes"])
        self.assertTrue({item["id"] for item in session["fields"]}.isdisjoint({item["id"] for item in template_fields}))

    def test_export_template(self):
        created = self._create("Morning check")
        response = self.client.get(f"{TEMPLATES_URL}/{created['id']}/export", headers=self._auth_headers("ADMIN"))
        self.assertEqual(response.status_code, 200)
        self.assertIn('filename="Morning_check.json"', response.headers.get("content-disposition", ""))
        document = response.json()
        self.assertEqual(document["templateName"], "Morning check")
        self.assertEqual(len(document["fields"]), 2)
