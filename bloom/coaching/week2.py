"""
Week 2: Rewiring Thoughts
"""
from bloom.coaching.exercises import Exercise


class CBTThoughtTransformation(Exercise):
    component_id = "cbt-thought-transformation"
    defaults = {"thought": "", "evidenceFor": "", "evidenceAgainst": "", "reframe": ""}


class MirrorAffirmations(Exercise):
    component_id = "mirror-affirmations"
    defaults = {"affirmation": "I am worthy and enough.", "notes": ""}


class ThoughtAudit(Exercise):
    component_id = "thought-audit"
    defaults = {"entries": []}

    def add_entry(self, text: str):
        text = text.strip()
        if text:
            self.fields["entries"].append(text)
        return self.fields["entries"]


class NLPReframing(Exercise):
    component_id = "nlp-reframing"
    defaults = {"situation": "", "meaning": "", "newMeaning": ""}


class HormoneHarmonyMeditation(Exercise):
    component_id = "hormone-harmony-meditation"
    defaults = {"notes": ""}
    timestamped = True


class OverwhelmPatterns(Exercise):
    component_id = "overwhelm-patterns"
    defaults = {"triggers": "", "supports": ""}


class PauseLabelShift(Exercise):
    component_id = "pause-label-shift"
    defaults = {"label": "", "shift": ""}


class BoundariesWorksheet(Exercise):
    component_id = "boundaries-worksheet"
    defaults = {"boundary": "", "script": ""}


class WeeklyMoodMap(Exercise):
    component_id = "weekly-mood-map"
    defaults = {"weekNotes": ""}


LABEL = "Week 2"

COMPONENTS = {
    cls.component_id: cls
    for cls in (
        CBTThoughtTransformation,
        MirrorAffirmations,
        ThoughtAudit,
        NLPReframing,
        HormoneHarmonyMeditation,
        OverwhelmPatterns,
        PauseLabelShift,
        BoundariesWorksheet,
        WeeklyMoodMap,
    )
}
