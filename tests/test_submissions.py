from datetime import datetime

from hr_eval.models.approval import ApprovalHistory
from hr_eval.services.approval import find_employee_approval
from hr_eval.services.approval_store import SqlApprovalStore
from tests.conftest import EMPLOYEE_SIGNATURE, EVALUATOR_SIGNATURE, make_scores


class TestCreateSubmission:
    def test_create_submission(self, client):
        payload = {
            "employeeName": "Carla Lim",
            "employeeEmail": "carla@example.com",
            "evaluator": "Nina Uy",
            "submittedAt": "2024-08-01T09:00:00",
            "evaluationData": dict(
                make_scores(qualityOfWork=4, adaptability=3, teamwork=3),
                department="Operations",
            ),
        }

        response = client.post("/submissions", json=payload)

        assert response.status_code == 201
        body = response.json()
        assert body["employeeName"] == "Carla Lim"
        assert body["overallRating"] == 4.4
        assert body["ratingLabel"] == "Exceeds Expectations"
        assert body["quarter"] == "Q3 2024"
        assert body["approvalStatus"] == "pending"

    def test_signatures_on_the_form_are_stored(self, client):
        payload = {
            "employeeName": "Carla Lim",
            "evaluationData": {
                "employeeSignature": EMPLOYEE_SIGNATURE,
                "evaluatorSignatureImage": EVALUATOR_SIGNATURE,
                "evaluatorSignature": "Nina Uy",
            },
        }

        body = client.post("/submissions", json=payload).json()

        assert body["employeeSignature"] == EMPLOYEE_SIGNATURE
        assert body["evaluatorSignature"] == "Nina Uy"
        assert body["approvalStatus"] == "fully_approved"

    def test_flat_rating_submission(self, client):
        body = client.post("/submissions", json={"employeeName": "Bob Reyes", "rating": 3.6}).json()
        assert body["overallRating"] == 3.6
        assert body["ratingLabel"] == "Meets Expectations"

    def test_rejects_out_of_range_rating(self, client):
        response = client.post("/submissions", json={"employeeName": "Bob Reyes", "rating": 7})
        assert response.status_code == 422

    def test_rejects_unknown_status(self, client):
        response = client.post("/submissions", json={"employeeName": "Bob Reyes", "approvalStatus": "approved"})
        assert response.status_code == 422


class TestGetSubmission:
    def test_detail_includes_breakdown(self, client, create_submission):
        submission = create_submission(evaluation_data=make_scores(customerService=4))

        response = client.get(f"/submissions/{submission.id}")

        assert response.status_code == 200
        body = response.json()
        assert body["overallRating"] == 4.7
        assert body["passed"] is True
        assert body["overallPercentage"] == 94.0
        assert len(body["categories"]) == 7
        assert body["categories"][-1]["key"] == "customerService"
        assert body["categories"][-1]["score"] == 4

    def test_detail_of_flat_rating(self, client, create_submission):
        submission = create_submission(rating=2.5)
        body = client.get(f"/submissions/{submission.id}").json()
        assert body["overallRating"] == 2.5
        assert body["passed"] is False
        assert all(category["score"] == 0 for category in body["categories"])

    def test_stale_status_is_corrected(self, client, create_submission):
        submission = create_submission(
            approval_status="pending",
            employee_signature=EMPLOYEE_SIGNATURE,
            evaluator_signature="Nina Uy",
        )
        body = client.get(f"/submissions/{submission.id}").json()
        assert body["approvalStatus"] == "employee_approved"

    def test_not_found(self, client):
        response = client.get("/submissions/999")
        assert response.status_code == 404
        assert response.json()["detail"] == "Submission not found"


class TestListSubmissions:
    def seed(self, create_submission):
        create_submission(
            "Alice Santos",
            evaluator="Mark Cruz",
            submitted_at=datetime(2024, 2, 15, 9, 0),
            evaluation_data=dict(make_scores(), department="Sales"),
        )
        create_submission(
            "Bob Reyes",
            evaluator="Mark Cruz",
            submitted_at=datetime(2025, 1, 20, 9, 0),
            rating=2.0,
            approval_status="rejected",
        )
        create_submission(
            "Carla Lim",
            submitted_at=datetime(2024, 8, 1, 9, 0),
            evaluation_data=make_scores(qualityOfWork=4, adaptability=3, teamwork=3),
            employee_signature=EMPLOYEE_SIGNATURE,
        )

    def test_default_listing_newest_first(self, client, create_submission):
        self.seed(create_submission)

        body = client.get("/submissions").json()

        assert body["total"] == 3
        assert body["page"] == 1
        assert [item["employeeName"] for item in body["items"]] == ["Bob Reyes", "Carla Lim", "Alice Santos"]

    def test_filters(self, client, create_submission):
        self.seed(create_submission)

        by_status = client.get("/submissions", params={"approval_status": "employee_approved"}).json()
        by_quarter = client.get("/submissions", params={"quarter": "Q1", "year": 2024}).json()
        by_search = client.get("/submissions", params={"search": "mark"}).json()

        assert [item["employeeName"] for item in by_status["items"]] == ["Carla Lim"]
        assert [item["employeeName"] for item in by_quarter["items"]] == ["Alice Santos"]
        assert by_search["total"] == 2

    def test_sort_and_pages(self, client, create_submission):
        self.seed(create_submission)

        body = client.get("/submissions", params={"sort": "rating", "direction": "desc", "per_page": 2, "page": 2}).json()

        assert body["totalPages"] == 2
        assert body["perPage"] == 2
        assert [item["overallRating"] for item in body["items"]] == [2.0]

    def test_invalid_query(self, client):
        assert client.get("/submissions", params={"quarter": "Q5"}).status_code == 422
        assert client.get("/submissions", params={"sort": "salary"}).status_code == 422
        assert client.get("/submissions", params={"approval_status": "done"}).status_code == 422


class TestDeleteSubmission:
    def test_delete_removes_history(self, client, create_submission, db):
        submission = create_submission()
        db.add(ApprovalHistory(submission_id=submission.id, action="rejected"))
        db.commit()

        response = client.delete(f"/submissions/{submission.id}")

        assert response.status_code == 204
        assert client.get(f"/submissions/{submission.id}").status_code == 404
        assert db.query(ApprovalHistory).count() == 0

    def test_delete_unknown(self, client):
        assert client.delete("/submissions/999").status_code == 404

    def test_delete_removes_legacy_approvals(self, client, create_submission, db):
        deleted = create_submission("Carla", employee_email="carla@example.com")
        client.put(
            f"/approvals/legacy/carla@example.com/{deleted.id}",
            json={"employeeSignature": EMPLOYEE_SIGNATURE},
        )
        deleted_id = deleted.id

        assert client.delete(f"/submissions/{deleted_id}").status_code == 204
        assert find_employee_approval({"id": deleted_id}, SqlApprovalStore(db)) is None

        fresh = create_submission("Dan", employee_email="dan@example.com")

        assert fresh.id != deleted_id
        detail = client.get(f"/submissions/{fresh.id}").json()
        assert detail["approvalStatus"] == "pending"
        assert detail["employeeSignature"] is None
