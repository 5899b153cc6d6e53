"""
Static component catalogue and the view descriptors returned to clients
"""
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class ComponentType(str, Enum):
    VIDEO = "video"
    AUDIO = "audio"
    TEXT = "text"
    INTERACTIVE = "interactive"


class ViewKind(str, Enum):
    LOADING = "loading"
    EXERCISE = "exercise"
    NOT_FOUND = "not_found"
    COMING_SOON = "coming_soon"


@dataclass(frozen=True)
class ComponentDescriptor:
    """Catalogue entry for one exercise; identity is (module_id, id)"""
    id: str
    title: str
    description: str
    type: ComponentType
    module_id: str

    @property
    def key(self) -> Tuple[str, str]:
        return (self.module_id, self.id)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["type"] = self.type.value
        return data


@dataclass(frozen=True)
class ComponentView:
    """What a client should render for a resolution"""
    kind: ViewKind
    title: str
    message: str = ""
    actions: Tuple[str, ...] = ("close",)
    component_id: Optional[str] = None
    exercise: Optional[Dict[str, Any]] = field(default=None, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "title": self.title,
            "message": self.message,
            "actions": list(self.actions),
            "component_id": self.component_id,
            "exercise": self.exercise,
        }


LOADING_VIEW = ComponentView(
    kind=ViewKind.LOADING,
    title="Loading Interactive Component",
    message="Preparing your personalized coaching experience...",
    actions=(),
)

COMING_SOON_VIEW = ComponentView(
    kind=ViewKind.COMING_SOON,
    title="Component Coming Soon",
    message="This interactive component is being prepared for you.",
)


def not_found_view(label: str, component_id: Optional[str] = None) -> ComponentView:
    return ComponentView(
        kind=ViewKind.NOT_FOUND,
        title=f"Component Not Found ({label})",
        message="This component id is not recognized.",
        component_id=component_id,
    )


def component_id_of(component: Any) -> Optional[str]:
    """
    Pull the id out of a descriptor or a raw mapping.

    Anything without a non-empty string id is treated as missing.
    """
    if isinstance(component, ComponentDescriptor):
        value = component.id
    elif isinstance(component, dict):
        value = component.get("id")
    else:
        value = getattr(component, "id", None)
    if isinstance(value, str) and value:
        return value
    return None


def _entry(module_id: str, component_id: str, title: str, description: str,
           type_: ComponentType = ComponentType.INTERACTIVE) -> ComponentDescriptor:
    return ComponentDescriptor(id=component_id, title=title, description=description,
                               type=type_, module_id=module_id)


CATALOG: List[ComponentDescriptor] = [
    # Week 1
    _entry("week1", "focus-memory-rituals", "Focus & Memory Rituals",
           "Pick daily cognitive rituals and rate how well they work"),
    _entry("week1", "cortisol-breathwork", "Cortisol Reset Breathing System",
           "8-minute breathing practice with stress level tracking and cortisol reduction techniques"),
    _entry("week1", "mental-space-reset", "Mental Clarity Reset Toolkit",
           "10-minute brain fog clearing practice with focus techniques and clarity tracking"),
    _entry("week1", "symptom-tracker", "Daily Hormone Harmony Tracker",
           "Symptom tracking with sliders and insights"),
    _entry("week1", "morning-ritual", "Sunrise Hormone Reset Ritual",
           "15-minute morning practice for hormone regulation"),
    _entry("week1", "brain-fog-exercise", "Mental Clarity Power Practice",
           "10-minute brain fog clearing technique with tracking"),
    # Week 2
    _entry("week2", "cbt-thought-transformation", "CBT Thought Transformation System",
           "Identify, challenge and reframe automatic negative thoughts"),
    _entry("week2", "mirror-affirmations", "Mirror Work & Empowerment Affirmations",
           "Personalized affirmation scripts and guided mirror work"),
    _entry("week2", "thought-audit", "Comprehensive Thought Pattern Audit",
           "Track thoughts to find negative patterns and triggers"),
    _entry("week2", "nlp-reframing", "NLP Language Pattern Mastery",
           "Reframe the meaning you give to a difficult situation"),
    _entry("week2", "hormone-harmony-meditation", "Hormone Harmony Interactive Practice",
           "15-minute guided practice with breathing prompts and visualization cues",
           ComponentType.AUDIO),
    _entry("week2", "overwhelm-patterns", "Overwhelm Pattern Analysis",
           "Map overwhelm triggers and the supports that help"),
    _entry("week2", "pause-label-shift", "Pause-Label-Shift Technique",
           "A 3-step emotion regulation method with guided practice"),
    _entry("week2", "boundaries-worksheet", "Boundaries Worksheet",
           "Boundary scripts for time, emotional, family and digital situations"),
    _entry("week2", "weekly-mood-map", "Weekly Mood Map",
           "Track mood and energy patterns across the week"),
    # Week 3
    _entry("week3", "hormonal-symphony", "Your Personal Hormone Symphony Assessment",
           "Hormonal pattern mapping with notes on brain changes during perimenopause"),
    _entry("week3", "enhanced-cognitive-assessment", "Enhanced Cognitive Clarity Assessment",
           "Score your cognitive clarity from 0 to 10"),
    _entry("week3", "focus-memory-rituals-week3", "Focus & Memory Rituals",
           "Daily cognitive enhancement routine"),
    _entry("week3", "brain-nutrition-plan", "Brain-Boosting Nutrition Plan",
           "Meal plan with cognitive-supporting foods and hydration"),
    _entry("week3", "mind-management-system", "Mind Management System",
           "Brain dumps, priority matrices and cognitive load management"),
    # Week 4
    _entry("week4", "breathwork-vagus-reset", "Breathwork & Vagus Nerve Reset",
           "Box breathing, heart coherence and humming techniques for instant calm"),
    _entry("week4", "somatic-grounding-practices", "Somatic Grounding Practices",
           "Body-based techniques including 5-4-3-2-1 grounding and body scan"),
    _entry("week4", "create-calm-corner", "Create Your Calm Corner",
           "Design a personal sanctuary for mindful rituals"),
    _entry("week4", "guided-grounding-meditation", "Guided Grounding Meditation",
           "12-minute nervous system regulation meditation",
           ComponentType.AUDIO),
    # Weeks 5-6
    _entry("week5", "future-self-visualization", "Future Self Visualization & Values Mapping",
           "Values-based visioning of your future self"),
    _entry("week5", "smart-goal-architecture", "SMART Goal Architecture System",
           "Evidence-based goal framework across life domains"),
    _entry("week5", "reverse-engineering-success", "Reverse Engineering Success Method",
           "Backward planning with milestones and action sequencing"),
    _entry("week5", "habit-loop-mastery", "Habit Loop Mastery System",
           "Cue-routine-reward loops and habit stacking"),
]


def find_component(module_id: str, component_id: str) -> Optional[ComponentDescriptor]:
    for descriptor in CATALOG:
        if descriptor.module_id == module_id and descriptor.id == component_id:
            return descriptor
    return None


def components_for(module_id: Optional[str] = None) -> List[ComponentDescriptor]:
    if module_id is None:
        return list(CATALOG)
    return [d for d in CATALOG if d.module_id == module_id]
