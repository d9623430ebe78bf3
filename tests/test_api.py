"""End-to-end tests through the HTTP API."""
import uuid

from momentum.errors import ContentGenerationError
from momentum.services.auth import create_session
from momentum.settings import settings


def _create_goal(client, description="Learn Spanish"):
    response = client.post("/api/goals", json={"description": description})
    assert response.status_code == 201
    return response.json()


class TestAuthentication:
    """Session cookie handling."""

    def test_missing_cookie(self, client):
        response = client.get("/api/goals/active")
        assert response.status_code == 401

    def test_invalid_cookie(self, client):
        client.cookies.set(settings.SESSION_COOKIE_NAME, "not-a-session")
        assert client.get("/api/goals/active").status_code == 401

    def test_expired_session(self, client, db_session, test_user):
        session = create_session(db_session, test_user.id, expires_in_seconds=-60)
        client.cookies.set(settings.SESSION_COOKIE_NAME, session.session_token)
        assert client.get("/api/schedule/today").status_code == 401

    def test_inactive_user(self, client, db_session, test_user):
        session = create_session(db_session, test_user.id)
        test_user.is_active = False
        db_session.commit()
        client.cookies.set(settings.SESSION_COOKIE_NAME, session.session_token)
        assert client.get("/api/schedule/today").status_code == 401


class TestGoalRoutes:
    """Goals and roadmap editing."""

    def test_create_and_fetch_active_goal(self, auth_client):
        created = _create_goal(auth_client)
        assert created["goal"]["description"] == "Learn Spanish"
        assert [s["step_order"] for s in created["steps"]] == [1, 2, 3]

        active = auth_client.get("/api/goals/active").json()
        assert active["goal"]["id"] == created["goal"]["id"]

    def test_no_active_goal(self, auth_client):
        assert auth_client.get("/api/goals/active").json() == {"goal": None, "steps": []}

    def test_empty_description_is_400(self, auth_client):
        response = auth_client.post("/api/goals", json={"description": "  "})
        assert response.status_code == 400
        assert response.json() == {"detail": "Goal description cannot be empty"}

    def test_generator_down_is_502(self, auth_client, generator):
        generator.roadmap_error = ContentGenerationError("Content generator request failed: timeout")
        response = auth_client.post("/api/goals", json={"description": "Learn Spanish"})
        assert response.status_code == 502

    def test_replan(self, auth_client, generator):
        goal_id = _create_goal(auth_client)["goal"]["id"]
        generator.roadmap = ["One", "Two"]

        response = auth_client.put(f"/api/goals/{goal_id}", json={"description": "Learn French"})

        assert response.status_code == 200
        assert [s["title"] for s in response.json()["steps"]] == ["One", "Two"]
        assert [s["title"] for s in auth_client.get(f"/api/goals/{goal_id}/steps").json()] == ["One", "Two"]

    def test_unknown_goal_is_404(self, auth_client):
        response = auth_client.get(f"/api/goals/{uuid.uuid4()}/steps")
        assert response.status_code == 404

    def test_add_rename_and_delete_step(self, auth_client):
        goal_id = _create_goal(auth_client)["goal"]["id"]

        added = auth_client.post(f"/api/goals/{goal_id}/steps", json={"title": "Celebrate"})
        assert added.status_code == 201
        assert added.json()["step_order"] == 4

        step_id = added.json()["id"]
        renamed = auth_client.put(f"/api/roadmap-steps/{step_id}", json={"title": "Party"})
        assert renamed.json()["title"] == "Party"

        first_id = auth_client.get(f"/api/goals/{goal_id}/steps").json()[0]["id"]
        assert auth_client.delete(f"/api/roadmap-steps/{first_id}").status_code == 204

        steps = auth_client.get(f"/api/goals/{goal_id}/steps").json()
        assert [(s["step_order"], s["title"]) for s in steps] == [(1, "Practice"), (2, "Ship"), (3, "Party")]

    def test_step_status(self, auth_client):
        step_id = _create_goal(auth_client)["steps"][0]["id"]

        response = auth_client.patch(f"/api/roadmap-steps/{step_id}/status", json={"status": "done"})
        assert response.json()["status"] == "done"

        invalid = auth_client.patch(f"/api/roadmap-steps/{step_id}/status", json={"status": "skipped"})
        assert invalid.status_code == 422

    def test_reorder(self, auth_client):
        steps = _create_goal(auth_client)["steps"]
        new_order = [steps[2]["id"], steps[0]["id"], steps[1]["id"]]

        response = auth_client.put("/api/roadmap-steps/reorder", json={"step_ids": new_order})

        assert response.status_code == 200
        assert [s["title"] for s in response.json()] == ["Ship", "Research", "Practice"]

    def test_reorder_foreign_step_is_403(self, auth_client, db_session, generator, other_user):
        from momentum.services.goals import create_goal

        steps = _create_goal(auth_client)["steps"]
        _, their_steps = create_goal(db_session, generator, other_user.id, "Theirs")

        response = auth_client.put(
            "/api/roadmap-steps/reorder",
            json={"step_ids": [str(their_steps[0].id), steps[1]["id"], steps[2]["id"]]}
        )
        assert response.status_code == 403

    def test_reorder_incomplete_is_400(self, auth_client):
        steps = _create_goal(auth_client)["steps"]
        response = auth_client.put("/api/roadmap-steps/reorder", json={"step_ids": [steps[0]["id"]]})
        assert response.status_code == 400


class TestScheduleRoutes:
    """Daily planning."""

    def test_start_day_generates_once(self, auth_client, generator):
        _create_goal(auth_client)

        first = auth_client.post("/api/schedule/start-day")
        second = auth_client.post("/api/schedule/start-day")

        assert first.status_code == 200
        assert len(first.json()) == 3
        assert {t["id"] for t in first.json()} == {t["id"] for t in second.json()}
        assert generator.count("tasks") == 1

    def test_today_is_read_only(self, auth_client, generator):
        _create_goal(auth_client)

        assert auth_client.get("/api/schedule/today").json() == []
        assert generator.count("tasks") == 0

    def test_schedule_for_date(self, auth_client):
        _create_goal(auth_client)

        response = auth_client.post("/api/schedule/2026-03-12")

        assert response.status_code == 200
        assert {t["scheduled_date"] for t in response.json()} == {"2026-03-12"}

    def test_schedule_without_goal_is_empty(self, auth_client):
        assert auth_client.post("/api/schedule/2026-03-12").json() == []


class TestTaskRoutes:
    """Manual tasks and edits."""

    def test_manual_task_lifecycle(self, auth_client, clock):
        created = auth_client.post("/api/tasks", json={"title": "Call the bank"})
        assert created.status_code == 201
        task_id = created.json()["id"]
        assert created.json()["scheduled_date"] == clock.today().isoformat()

        moved = auth_client.patch(f"/api/tasks/{task_id}/deadline", json={"deadline": "2026-03-10T17:00:00Z"})
        assert moved.status_code == 200
        assert moved.json()["deadline"].startswith("2026-03-10T17:00:00")

        renamed = auth_client.patch(f"/api/tasks/{task_id}/title", json={"title": "Call the insurer"})
        assert renamed.json()["title"] == "Call the insurer"

        completed = auth_client.patch(f"/api/tasks/{task_id}/status", json={"status": "completed"})
        assert completed.json()["status"] == "completed"
        assert completed.json()["completed_at"] is not None

        again = auth_client.patch(f"/api/tasks/{task_id}/status", json={"status": "completed"})
        assert again.status_code == 400

        assert auth_client.delete(f"/api/tasks/{task_id}").status_code == 204
        assert auth_client.get("/api/schedule/today").json() == []

    def test_unknown_task_is_404(self, auth_client):
        response = auth_client.patch(f"/api/tasks/{uuid.uuid4()}/status", json={"status": "completed"})
        assert response.status_code == 404
        assert response.json() == {"detail": "Task not found"}


class TestReviewRoutes:
    """Finalizing and reading days."""

    def test_finalize_and_read(self, auth_client):
        auth_client.post("/api/tasks", json={"title": "Read", "deadline": "2026-03-10T08:00:00Z"})
        auth_client.post("/api/tasks", json={"title": "Write"})

        finalized = auth_client.post("/api/reviews/2026-03-10/finalize")
        assert finalized.status_code == 200
        body = finalized.json()
        assert body["summary"] == [{"status": "pending", "count": 1}, {"status": "missed", "count": 1}]
        assert body["ai_feedback"] == "Nice work today."

        stored = auth_client.get("/api/reviews/2026-03-10").json()
        assert stored["summary"] == body["summary"]
        assert stored["ai_feedback"] == body["ai_feedback"]

    def test_missing_review_is_404(self, auth_client):
        assert auth_client.get("/api/reviews/2026-01-01").status_code == 404

    def test_invalid_date_is_422(self, auth_client):
        assert auth_client.get("/api/reviews/yesterday").status_code == 422


class TestSessions:
    """Session lookup helpers."""

    def test_expired_session_is_removed(self, db_session, test_user):
        from momentum.models.auth import Session as SessionModel
        from momentum.services.auth import get_user_from_session

        session = create_session(db_session, test_user.id, expires_in_seconds=-1)
        token = session.session_token

        assert get_user_from_session(db_session, token) is None
        assert db_session.query(SessionModel).filter(SessionModel.session_token == token).count() == 0

    def test_delete_session(self, db_session, test_user):
        from momentum.services.auth import delete_session, get_user_from_session

        session = create_session(db_session, test_user.id)
        token = session.session_token
        assert get_user_from_session(db_session, token).id == test_user.id

        delete_session(db_session, token)
        assert get_user_from_session(db_session, token) is None
