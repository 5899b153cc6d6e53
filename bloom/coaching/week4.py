"""
Week 4: Nervous System Reset
"""
from bloom.coaching.exercises import Exercise


class BreathworkVagusReset(Exercise):
    component_id = "breathwork-vagus-reset"
    defaults = {"minutes": 5}
    timestamped = True


class SomaticGroundingPractices(Exercise):
    component_id = "somatic-grounding-practices"
    defaults = {"practice": "5-4-3-2-1 senses"}


class CreateCalmCorner(Exercise):
    component_id = "create-calm-corner"
    defaults = {"items": "Candle, blanket, soft light"}


class GuidedGroundingMeditation(Exercise):
    component_id = "guided-grounding-meditation"
    defaults = {"notes": ""}


LABEL = "Week 4"

COMPONENTS = {
    cls.component_id: cls
    for cls in (
        BreathworkVagusReset,
        SomaticGroundingPractices,
        CreateCalmCorner,
        GuidedGroundingMeditation,
    )
}
