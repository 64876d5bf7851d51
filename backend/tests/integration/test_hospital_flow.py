"""
End-to-end flow: booking, prescribing, the traceability guard on
consultations, detaching and deleting.
"""

import pytest

from tests.utils.payloads import line_payload


@pytest.mark.integration
@pytest.mark.controllers
def test_consultation_prescription_lifecycle(client, doctor, patient, other_patient, medication):
    booked = client.post(
        "/api/consultations",
        json={
            "doctorId": doctor["id"],
            "patientId": patient["id"],
            "date": "2024-03-01",
            "hour": "10:00",
        },
    )
    assert booked.status_code == 201
    consultation_id = booked.get_json()["data"]["id"]

    # Same doctor, same slot, another patient
    clash = client.post(
        "/api/consultations",
        json={
            "doctorId": doctor["id"],
            "patientId": other_patient["id"],
            "date": "2024-03-01",
            "hour": "10:00",
        },
    )
    assert clash.status_code == 409

    rejected = client.post(
        f"/api/consultations/{consultation_id}/prescriptions",
        json={"date": "2024-03-01", "lines": [line_payload(medication["id"], quantity=0)]},
    )
    assert rejected.status_code == 400

    created = client.post(
        f"/api/consultations/{consultation_id}/prescriptions",
        json={"date": "2024-03-01", "lines": [line_payload(medication["id"], quantity=10)]},
    )
    assert created.status_code == 201
    prescription_id = created.get_json()["data"]["id"]

    listed = client.get(f"/api/consultations/{consultation_id}/prescriptions").get_json()
    assert [p["id"] for p in listed["data"]] == [prescription_id]

    guarded = client.delete(f"/api/consultations/{consultation_id}")
    assert guarded.status_code == 409

    detached = client.delete(f"/api/prescriptions/{prescription_id}/consultation")
    assert detached.status_code == 200
    assert detached.get_json()["data"]["consultationId"] is None

    assert client.delete(f"/api/consultations/{consultation_id}").status_code == 200
    kept = client.get(f"/api/prescriptions/{prescription_id}").get_json()["data"]
    assert kept["patientId"] == patient["id"]
    assert len(kept["lines"]) == 1


@pytest.mark.integration
@pytest.mark.controllers
def test_attach_prescription_to_matching_consultation(
    client, consultation, doctor, patient, other_patient, medication
):
    standalone = client.post(
        "/api/prescriptions",
        json={
            "doctorId": doctor["id"],
            "patientId": patient["id"],
            "date": "2024-01-10",
            "lines": [line_payload(medication["id"])],
        },
    ).get_json()["data"]
    foreign = client.post(
        "/api/prescriptions",
        json={
            "doctorId": doctor["id"],
            "patientId": other_patient["id"],
            "date": "2024-01-10",
            "lines": [line_payload(medication["id"])],
        },
    ).get_json()["data"]

    attached = client.put(
        f"/api/prescriptions/{standalone['id']}/consultation/{consultation['id']}"
    )
    assert attached.status_code == 200
    assert attached.get_json()["data"]["consultationId"] == consultation["id"]

    mismatched = client.put(
        f"/api/prescriptions/{foreign['id']}/consultation/{consultation['id']}"
    )
    assert mismatched.status_code == 400

    missing = client.put(f"/api/prescriptions/{standalone['id']}/consultation/999")
    assert missing.status_code == 404
