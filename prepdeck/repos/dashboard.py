"""Read-only aggregations for the dashboard pages."""

from typing import Optional

from prepdeck.repos.simulations import SimulationRepo
from prepdeck.repos.user_profile import UserProfileRepo
from prepdeck.repos.user_progress import UserProgressRepo
from prepdeck.schemas.documents import Attempt
from prepdeck.store.base import DocumentStore
from prepdeck.utils import now_ms

WEEK_MS = 7 * 24 * 60 * 60 * 1000

# Attempt.problemType values mapped to the camelCase buckets the UI shows
TYPE_BUCKETS = {
    "dsa": "dsa",
    "machine_coding": "machineCoding",
    "machineCoding": "machineCoding",
    "system_design": "systemDesign",
    "systemDesign": "systemDesign",
    "theory": "theory",
    "theory_and_debugging": "theory",
}


def average_score(attempts: list[Attempt]) -> float:
    scores = [a.score for a in attempts if a.status == "completed" and a.score is not None]
    return sum(scores) / len(scores) if scores else 0


def _time_spent(attempts: list[Attempt]) -> float:
    return sum(a.time_spent or 0 for a in attempts)


class DashboardRepo:
    def __init__(self, store: DocumentStore):
        self.progress = UserProgressRepo(store)
        self.profiles = UserProfileRepo(store)
        self.simulations = SimulationRepo(store)

    def user_stats(self, uid: str, now: Optional[int] = None) -> dict:
        now = now if now is not None else now_ms()
        profile = self.profiles.get_by_id(uid)
        attempts = self.progress.list_attempts(uid)

        recent = [a for a in attempts if a.updated_at >= now - WEEK_MS]
        completed = [a for a in attempts if a.status == "completed"]

        performance = {bucket: [] for bucket in ("dsa", "machineCoding", "systemDesign", "theory")}
        for attempt in attempts:
            bucket = TYPE_BUCKETS.get(attempt.problem_type or "")
            if bucket:
                performance[bucket].append(attempt)

        total_time = _time_spent(attempts)
        return {
            "profile": profile.to_document(),
            "progress": [a.to_document() for a in attempts],
            "recentActivity": [a.to_document() for a in recent],
            "weeklyStats": {
                "problemsAttempted": len(recent),
                "problemsCompleted": sum(1 for a in recent if a.status == "completed"),
                "timeSpent": _time_spent(recent),
                "averageScore": average_score(recent),
            },
            "performanceByType": {
                bucket: {
                    "attempted": len(items),
                    "completed": sum(1 for a in items if a.status == "completed"),
                    "averageScore": average_score(items),
                }
                for bucket, items in performance.items()
            },
            "totalProblems": len(attempts),
            "completedProblems": len(completed),
            "currentStreak": profile.streak,
            "longestStreak": profile.longest_streak,
            "totalTimeSpent": total_time,
            "completionRate": len(completed) / len(attempts) * 100 if attempts else 0,
            "averageTimePerProblem": total_time / len(completed) if completed else 0,
            "averageScore": average_score(attempts),
            "problemsByDifficulty": {
                level: sum(1 for a in attempts if a.difficulty == level)
                for level in ("easy", "medium", "hard")
            },
            "problemsByType": {bucket: len(items) for bucket, items in performance.items()},
        }

    def mock_interview_stats(self, uid: str) -> dict:
        simulations = self.simulations.list_for_user(uid)
        completed = [s for s in simulations if s.status == "completed"]

        total_minutes = sum((s.updated_at - s.created_at) // 60000 for s in completed)
        recent = sorted(completed, key=lambda s: s.updated_at, reverse=True)[:5]
        return {
            "totalInterviews": len(simulations),
            "averageScore": 0,
            "completedRounds": sum(max(len(s.problem_ids), 1) for s in completed),
            "totalTime": f"{total_minutes // 60}h {total_minutes % 60}m",
            "recentActivity": [
                {
                    "id": s.id,
                    "title": f"{s.company_name} Interview",
                    "company": s.company_name,
                    "status": "completed",
                    "completedAt": s.updated_at,
                    "type": "interview",
                }
                for s in recent
            ],
        }
