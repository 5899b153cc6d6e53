"""
Week 1: Hormones & Headspace
"""
from typing import Any, Dict

from bloom.coaching.exercises import Exercise


class FocusMemoryRituals(Exercise):
    component_id = "focus-memory-rituals"
    phases = ("select", "practice")
    defaults = {
        "selectedRituals": [],
        "practiceTime": 0,
        "effectiveness": 0,
        "notes": "",
    }
    gates = {"select": "selectedRituals"}


class CortisolResetBreathwork(Exercise):
    component_id = "cortisol-breathwork"
    phases = ("assessment", "technique-selection", "practice", "review")
    defaults = {
        "preStressLevel": 0,
        "postStressLevel": 0,
        "selectedTechnique": "",  # 4-7-8, box, coherent
        "sessionDuration": 0,
        "completedCycles": 0,
        "effectiveness": 0,
        "notes": "",
    }
    gates = {"assessment": "preStressLevel"}
    timestamped = True

    def derive(self) -> Dict[str, Any]:
        return {"improvementScore": self.fields["preStressLevel"] - self.fields["postStressLevel"]}


class MentalSpaceReset(Exercise):
    component_id = "mental-space-reset"
    phases = ("intro", "symptoms", "techniques", "review")
    defaults = {
        "preMentalClarity": 0,
        "postMentalClarity": 0,
        "identifiedSymptoms": [],
        "practiceNotes": "",
        "completedTechniques": [],
        "effectiveness": 0,
        "insights": "",
    }
    gates = {"intro": "preMentalClarity", "symptoms": "identifiedSymptoms"}
    timestamped = True

    def derive(self) -> Dict[str, Any]:
        return {
            # clarity goes up when the reset works, so post minus pre
            "improvementScore": self.fields["postMentalClarity"] - self.fields["preMentalClarity"],
            "symptomCount": len(self.fields["identifiedSymptoms"]),
        }


class SymptomTracker(Exercise):
    component_id = "symptom-tracker"
    phases = ("tracking",)
    defaults = {
        "symptoms": {
            "hotFlashes": 0,
            "brainFog": 0,
            "moodSwings": 0,
            "sleepQuality": 0,
            "energyLevel": 0,
            "anxiety": 0,
        },
        "insights": "",
    }


class MorningRitual(Exercise):
    component_id = "morning-ritual"
    phases = ("create",)
    defaults = {"selectedPractices": [], "customRitual": ""}
    gates = {"create": "selectedPractices"}


class BrainFogClearing(Exercise):
    component_id = "brain-fog-exercise"
    phases = ("rate", "practice", "review")
    defaults = {
        "preFogLevel": 0,
        "postFogLevel": 0,
        "completedTechniques": [],
        "effectiveness": 0,
    }
    gates = {"rate": "preFogLevel", "practice": "completedTechniques"}
    timestamped = True

    def derive(self) -> Dict[str, Any]:
        return {"improvement": self.fields["preFogLevel"] - self.fields["postFogLevel"]}


LABEL = "Week 1"

COMPONENTS = {
    cls.component_id: cls
    for cls in (
        FocusMemoryRituals,
        CortisolResetBreathwork,
        MentalSpaceReset,
        SymptomTracker,
        MorningRitual,
        BrainFogClearing,
    )
}
