"""Fixed exercise catalogue.

Records are frozen and the catalogue is a tuple, so nothing downstream can
mutate it. Sessions draw their selection from :data:`EXERCISES` through
:func:`morningpractice.engine.shuffler.select`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ExerciseRecord:
    """
    Single catalogue entry.

    Attributes:
        name: Short title shown on screen and spoken first
        description: Instructions read out before the exercise starts
    """
    name: str
    description: str

    @property
    def instructions(self) -> str:
        """Text spoken before the exercise timer starts."""
        return f"{self.name}. {self.description}"

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "description": self.description}


EXERCISES: tuple[ExerciseRecord, ...] = (
    ExerciseRecord(
        "Cat-Cow Pose",
        "On hands and knees, alternate arching (cow) and rounding (cat) your spine.",
    ),
    ExerciseRecord(
        "High-Stepping/Marching in Place",
        "Lift knees high towards your chest with each step.",
    ),
    ExerciseRecord(
        "Leg Swings (Forward and Back)",
        "Stand on one leg, gently swing the other leg forward and backward. "
        "Use support if needed. Switch legs.",
    ),
    ExerciseRecord(
        "Bird Dog",
        "On hands and knees, extend your opposite arm straight forward and opposite leg "
        "straight back, keeping your core engaged and back flat. Alternate sides.",
    ),
    ExerciseRecord(
        "Plank",
        "Hold a straight line from head to heels, on forearms or hands. Engage your core.",
    ),
    ExerciseRecord(
        "Glute Bridges",
        "Lie on your back, knees bent, feet flat. Lift your hips off the floor, squeezing glutes.",
    ),
    ExerciseRecord(
        "Wall Push-Ups",
        "Stand facing a wall, place hands on the wall. Lean towards the wall by bending "
        "elbows, keeping body straight, then push back.",
    ),
    ExerciseRecord(
        "Mini Squats (or Chair Squats)",
        "Lower hips slightly as if about to sit (mini squat), or fully stand up from a "
        "chair and sit back down.",
    ),
    ExerciseRecord(
        "Lunges (Stationary or Alternating)",
        "Step one foot forward, lower hips until both knees are bent at about 90 degrees. "
        "Keep front knee over ankle. Alternate legs.",
    ),
    ExerciseRecord(
        "Heel Raises",
        "Stand, slowly rise onto the balls of your feet, lifting heels high, then slowly lower.",
    ),
    ExerciseRecord(
        "Low-Impact Jumping Jacks (Modified)",
        "Step one leg out to the side while raising arms overhead; return. "
        "Repeat on the other side (no jump).",
    ),
    ExerciseRecord(
        "Standing Oblique Crunches",
        "Stand with feet hip-width apart, hands gently behind head. Crunch to one side, "
        "bringing elbow towards hip. Alternate sides.",
    ),
    ExerciseRecord(
        "Single Leg Balance",
        "Stand on one leg, trying to maintain balance. Switch legs after 15 seconds or hold "
        "for the full 30 if comfortable. Use support if needed.",
    ),
    ExerciseRecord(
        "Fire Hydrants",
        "On hands and knees, keep one knee bent at 90 degrees and lift it out to the side, "
        "hip height. Lower and repeat. Switch sides.",
    ),
    ExerciseRecord(
        "Seesaw Forearm Plank",
        "In a forearm plank, gently rock your body forward (nose over fingertips) and backward.",
    ),
    ExerciseRecord(
        "Tabletop Oblique Crunch",
        "From hands and knees, extend one leg back. Then, bring that knee towards the "
        "opposite elbow, crunching your side. Extend back. Switch sides.",
    ),
    ExerciseRecord(
        "Windshield Wipers (Seated or Lying)",
        "Seated: Sit with knees bent, feet flat. Lean back slightly on hands. Gently sway "
        "knees from side to side. Lying: Lie on back, knees bent, feet flat. Let knees fall "
        "to one side, then the other.",
    ),
    ExerciseRecord(
        "Modified Side Plank Reach",
        "Start in a modified side plank (on your knee and forearm). Reach your top arm "
        "underneath your body, then open it up towards the ceiling. Switch sides.",
    ),
    ExerciseRecord(
        "Dead Bug",
        "Lie on your back with arms extended towards the ceiling and knees bent at 90 degrees "
        "(shins parallel to floor). Slowly lower your opposite arm and leg towards the floor, "
        "keeping your lower back pressed into the mat. Return to start and alternate.",
    ),
    ExerciseRecord(
        "Wall Sit",
        "Lean against a wall and slide down until your knees are at a 90-degree angle, "
        "as if sitting in a chair. Hold.",
    ),
    ExerciseRecord(
        "Step-Ups",
        "Step up with one foot, then the other. Step down. Alternate lead foot. "
        "If no step, mimic the motion.",
    ),
    ExerciseRecord(
        "Superman",
        "Lie on your stomach with arms and legs extended. Simultaneously lift your arms, "
        "chest, and legs off the floor, keeping your neck in line with your spine. "
        "Hold briefly and lower.",
    ),
)


def find_exercise(name: str) -> Optional[ExerciseRecord]:
    """Case-insensitive lookup by exercise name."""
    wanted = name.strip().lower()
    for record in EXERCISES:
        if record.name.lower() == wanted:
            return record
    return None
