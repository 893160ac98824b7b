"""
Machines, processes and dynamic process fields.
"""

from conftest import API


def _machine(client, headers, **extra):
    payload = {"machine_name": "Corrugator BHS-1", "machine_type": "corrugator", "serial_number": "BHS-7781"}
    payload.update(extra)
    resp = client.post(f"{API}/machines", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def _process(machine, name):
    return next(p for p in machine["processes"] if p["process_name"] == name)


class TestMachines:
    """Machine registry."""

    def test_create_with_processes(self, client, headers):
        machine = _machine(
            client,
            headers,
            processes=[{"process_name": "Flute forming", "process_value": {"flute": "B", "speed": 180}}],
        )
        assert machine["machine_generate_id"] == "MC-00001"
        assert machine["machine_status"] == "Active"
        assert _process(machine, "Flute forming")["process_value"] == {"flute": "B", "speed": 180}

    def test_duplicate_serial_conflicts(self, client, headers):
        _machine(client, headers)
        resp = client.post(
            f"{API}/machines", json={"machine_name": "Copy", "serial_number": "bhs-7781"}, headers=headers
        )
        assert resp.status_code == 409

    def test_status_toggle(self, client, headers):
        machine = _machine(client, headers)
        url = f"{API}/machines/{machine['id']}/status"
        assert client.patch(url, json={"status": "broken"}, headers=headers).status_code == 400

        assert client.patch(url, json={"status": "inactive"}, headers=headers).json()["status"] == "inactive"
        assert client.get(f"{API}/machines", headers=headers).json() == []
        assert client.patch(url, json={"status": "active"}, headers=headers).json()["status"] == "active"

    def test_update_upserts_process_by_name(self, client, headers):
        machine = _machine(client, headers, processes=[{"process_name": "Printing", "process_value": {"colors": 2}}])
        resp = client.put(
            f"{API}/machines/{machine['id']}",
            json={
                "machine_status": "Under Maintenance",
                "processes": [{"process_name": "printing", "process_value": {"colors": 4}}],
            },
            headers=headers,
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["machine_status"] == "Under Maintenance"
        assert len(body["processes"]) == 1
        assert body["processes"][0]["process_value"] == {"colors": 4}

    def test_production_role_required(self, client, headers, make_user):
        _machine(client, headers)
        store = make_user("store@acme-boxes.com", ["store"])
        assert client.get(f"{API}/machines", headers=store).status_code == 403
        production = make_user("floor@acme-boxes.com", ["production"])
        assert len(client.get(f"{API}/machines", headers=production).json()) == 1


class TestProcessFields:
    """Field definitions validate process values."""

    def _setup(self, client, headers):
        machine = _machine(client, headers, processes=[{"process_name": "Slotting"}])
        process = _process(machine, "Slotting")
        base = f"{API}/machines/{machine['id']}/processes"
        fields = f"{base}/{process['id']}/fields"
        for field in (
            {"label": "Depth", "field_type": "number", "required": True},
            {"label": "Blade", "field_type": "select", "options": ["straight", "serrated"]},
            {"label": "Calibrated", "field_type": "boolean"},
        ):
            assert client.post(fields, json=field, headers=headers).status_code == 201
        return machine, process, base, fields

    def test_values_are_validated(self, client, headers):
        machine, process, base, _ = self._setup(client, headers)
        resp = client.post(
            base,
            json={"process_name": "Slotting", "process_value": {"Depth": "deep", "Blade": "wavy", "Colour": "red"}},
            headers=headers,
        )
        assert resp.status_code == 400
        details = resp.json()["error"]["details"]
        assert set(details) == {"Depth", "Blade", "Colour"}

        resp = client.post(
            base,
            json={"process_name": "Slotting", "process_value": {"Depth": 12.5, "Blade": "serrated", "Calibrated": True}},
            headers=headers,
        )
        assert resp.status_code == 200
        assert resp.json()["process_value"]["Depth"] == 12.5

    def test_required_field(self, client, headers):
        _, _, base, _ = self._setup(client, headers)
        resp = client.post(base, json={"process_name": "Slotting", "process_value": {}}, headers=headers)
        assert resp.status_code == 400
        assert resp.json()["error"]["details"] == {"Depth": "This field is required"}

    def test_select_needs_options_and_labels_are_unique(self, client, headers):
        _, _, _, fields = self._setup(client, headers)
        assert client.post(fields, json={"label": "Mode", "field_type": "select"}, headers=headers).status_code == 400
        assert client.post(fields, json={"label": "Depth"}, headers=headers).status_code == 409

    def test_labels_match_case_insensitively(self, client, headers):
        _, _, base, fields = self._setup(client, headers)
        resp = client.post(fields, json={"label": "depth", "field_type": "text"}, headers=headers)
        assert resp.status_code == 409

        depth = next(f for f in client.get(fields, headers=headers).json() if f["label"] == "Depth")
        assert client.delete(f"{fields}/{depth['id']}", headers=headers).status_code == 204
        resp = client.post(fields, json={"label": "DEPTH", "field_type": "number", "required": True}, headers=headers)
        assert resp.status_code == 201
        assert resp.json()["id"] == depth["id"]
        assert resp.json()["label"] == "DEPTH"

        resp = client.post(base, json={"process_name": "Slotting", "process_value": {"depth": 3}}, headers=headers)
        assert resp.status_code == 200

    def test_removed_field_stops_validating(self, client, headers):
        _, _, base, fields = self._setup(client, headers)
        depth = next(f for f in client.get(fields, headers=headers).json() if f["label"] == "Depth")
        assert client.delete(f"{fields}/{depth['id']}", headers=headers).status_code == 204

        active = [f["label"] for f in client.get(fields, headers=headers).json()]
        assert active == ["Blade", "Calibrated"]
        every = client.get(fields, params={"status": "all"}, headers=headers).json()
        assert len(every) == 3

        resp = client.post(base, json={"process_name": "Slotting", "process_value": {}}, headers=headers)
        assert resp.status_code == 200

    def test_delete_process(self, client, headers):
        machine, process, base, _ = self._setup(client, headers)
        assert client.delete(f"{base}/{process['id']}", headers=headers).status_code == 204
        assert client.get(base, headers=headers).json() == []
