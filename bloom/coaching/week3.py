"""
Week 3: Clarity & Cognitive Flow
"""
from typing import Any, Optional

from bloom.coaching.exercises import Exercise


class HormonalSymphony(Exercise):
    component_id = "hormonal-symphony"
    defaults = {"notes": ""}


class EnhancedCognitiveAssessment(Exercise):
    component_id = "enhanced-cognitive-assessment"
    defaults = {"score": 0}

    def requirement(self, phase: str) -> Optional[str]:
        score: Any = self.fields["score"]
        if not isinstance(score, (int, float)) or not 0 <= score <= 10:
            return "'score' must be between 0 and 10"
        return None


class FocusMemoryRitualsWeek3(Exercise):
    component_id = "focus-memory-rituals-week3"
    defaults = {"completed": True}


class BrainNutritionPlan(Exercise):
    component_id = "brain-nutrition-plan"
    defaults = {"plan": ""}


class MindManagementSystem(Exercise):
    component_id = "mind-management-system"
    defaults = {"tool": ""}


LABEL = "Week 3"

COMPONENTS = {
    cls.component_id: cls
    for cls in (
        HormonalSymphony,
        EnhancedCognitiveAssessment,
        FocusMemoryRitualsWeek3,
        BrainNutritionPlan,
        MindManagementSystem,
    )
}
