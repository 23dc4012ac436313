"""Deterministic study roadmap used when no AI-generated plan is available."""

ROADMAP_PROBLEM_TYPES = ("dsa", "machine_coding", "system_design", "theory_and_debugging")

PROBLEMS_PER_DAY = 3

ROADMAP_TIPS = [
    "Practice coding problems daily",
    "Focus on understanding concepts, not just memorizing",
    "Build real projects to apply your knowledge",
    "Review and learn from your mistakes",
    "Stay consistent with your learning schedule",
]

# (description, estimated time, focus areas, learning objectives) per slot
_SLOTS = [
    (
        "Basic problem to build foundation",
        "30-45 minutes",
        ["React", "JavaScript"],
        ["Understand basics", "Practice coding"],
    ),
    (
        "Intermediate problem to strengthen skills",
        "45-60 minutes",
        ["TypeScript", "Performance"],
        ["Build practical skills", "Understand concepts"],
    ),
    (
        "Advanced problem to challenge your understanding",
        "45-60 minutes",
        ["System Design", "Performance"],
        ["Think systematically", "Optimize solutions"],
    ),
]


def difficulty_for_day(index: int, duration: int) -> str:
    """Easy for the first third of the plan, medium for the second, hard after."""
    if index < duration / 3:
        return "easy"
    if index < 2 * duration / 3:
        return "medium"
    return "hard"


def problem_type_for_slot(day_index: int, slot: int) -> str:
    # Each slot lags the previous one by a kind, so a day covers three kinds
    return ROADMAP_PROBLEM_TYPES[(day_index - slot) % len(ROADMAP_PROBLEM_TYPES)]


def build_day(index: int, duration: int) -> dict:
    difficulty = difficulty_for_day(index, duration)
    problems = []
    for slot, (description, estimated_time, focus_areas, objectives) in enumerate(_SLOTS):
        problems.append({
            "title": f"Problem {index * PROBLEMS_PER_DAY + slot + 1}",
            "description": description,
            "type": problem_type_for_slot(index, slot),
            "difficulty": difficulty,
            "estimatedTime": estimated_time,
            "focusAreas": list(focus_areas),
            "learningObjectives": list(objectives),
        })
    return {
        "day": index + 1,
        "title": f"Day {index + 1}: Core Practice",
        "description": "Focus on fundamental concepts and problem-solving",
        "problems": problems,
        "totalTime": "2-3 hours",
        "focusAreas": ["React", "JavaScript", "TypeScript"],
    }


def build_fallback_roadmap(companies: list[str], designation: str, duration: int) -> dict:
    """Build the roadmap body (everything except id, owner and timestamps)."""
    return {
        "title": f"{duration}-Day {designation} Interview Prep",
        "description": (
            f"Comprehensive preparation plan for {designation} interviews at {', '.join(companies)}"
        ),
        "duration": duration,
        "companies": list(companies),
        "designation": designation,
        "overview": {
            "totalProblems": duration * PROBLEMS_PER_DAY,
            "totalTime": f"{duration * 2}-{duration * 3} hours",
            "focusAreas": ["React", "JavaScript", "TypeScript", "System Design"],
            "learningObjectives": ["Master core concepts", "Build practical skills"],
        },
        "dailyPlan": [build_day(i, duration) for i in range(duration)],
        "tips": list(ROADMAP_TIPS),
    }
