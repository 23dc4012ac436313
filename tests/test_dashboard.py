from prepdeck.repos import DashboardRepo, SimulationRepo, UserProfileRepo, UserProgressRepo


def test_user_stats_needs_profile(client, auth_headers):
    assert client.get("/api/dashboard/user-stats", headers=auth_headers("alice")).status_code == 404


def test_user_stats_aggregates_attempts(store):
    UserProfileRepo(store).create("alice")
    progress = UserProgressRepo(store)
    progress.mark_attempted("alice", "p1", problem_type="dsa", difficulty="easy")
    progress.mark_completed("alice", "p1", score=90, time_spent=20)
    progress.mark_attempted("alice", "p2", problem_type="system_design", difficulty="hard")
    progress.mark_completed("bob", "p1", score=10, time_spent=5)

    stats = DashboardRepo(store).user_stats("alice")
    assert stats["totalProblems"] == 2
    assert stats["completedProblems"] == 1
    assert stats["completionRate"] == 50
    assert stats["averageScore"] == 90
    assert stats["totalTimeSpent"] == 20
    assert stats["weeklyStats"]["problemsAttempted"] == 2
    assert stats["performanceByType"]["dsa"] == {"attempted": 1, "completed": 1, "averageScore": 90}
    assert stats["problemsByType"]["systemDesign"] == 1
    assert stats["problemsByDifficulty"] == {"easy": 1, "medium": 0, "hard": 1}


def test_mock_interview_stats(store):
    simulations = SimulationRepo(store)
    done = simulations.create("alice", "Acme", "Senior")
    simulations.append_problems("alice", done.id, ["p1", "p2"])
    simulations.set_status("alice", done.id, "completed")
    simulations.create("alice", "Beta", "Junior")

    stats = DashboardRepo(store).mock_interview_stats("alice")
    assert stats["totalInterviews"] == 2
    assert stats["completedRounds"] == 2
    assert stats["averageScore"] == 0
    assert [a["company"] for a in stats["recentActivity"]] == ["Acme"]


def test_mock_interviews_are_owner_only(client, auth_headers):
    created = client.post(
        "/api/mock-interviews", json={"title": "Friday mock", "problemIds": ["p1"]}, headers=auth_headers("alice")
    )
    assert created.status_code == 201
    interview_id = created.json()["id"]

    assert client.get(f"/api/mock-interviews/{interview_id}", headers=auth_headers("alice")).status_code == 200
    assert client.get(f"/api/mock-interviews/{interview_id}", headers=auth_headers("bob")).status_code == 403
    assert [m["id"] for m in client.get("/api/mock-interviews", headers=auth_headers("alice")).json()] == [interview_id]
    assert client.get("/api/mock-interviews/stats", headers=auth_headers("alice")).json()["totalInterviews"] == 0
