"""
Weeks 5-6: Future Self & Goal Mapping (one table serves both modules)
"""
from bloom.coaching.exercises import Exercise


class FutureSelfVisualization(Exercise):
    component_id = "future-self-visualization"
    defaults = {"vision": ""}


class SmartGoalArchitecture(Exercise):
    component_id = "smart-goal-architecture"
    defaults = {"goal": ""}


class ReverseEngineeringSuccess(Exercise):
    component_id = "reverse-engineering-success"
    defaults = {"steps": ""}


class HabitLoopMastery(Exercise):
    component_id = "habit-loop-mastery"
    defaults = {"habit": "", "cue": "", "routine": "", "reward": ""}


LABEL = "Week 5-6"

COMPONENTS = {
    cls.component_id: cls
    for cls in (
        FutureSelfVisualization,
        SmartGoalArchitecture,
        ReverseEngineeringSuccess,
        HabitLoopMastery,
    )
}
