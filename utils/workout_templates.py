# utils/workout_templates.py
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

from .errors import MalformedRecord
from .exercise_library import resolve_exercise_info
from .workout_plans import PlannedExercise, WorkoutPlan

log = logging.getLogger(__name__)

BLOCK_TYPES = ("single", "superset")
DEFAULT_TEMPLATE_SETS = 3
DEFAULT_REP_RANGE = "8-12"


@dataclass(frozen=True)
class TemplateBlock:
    type: str
    exercises: tuple[str, ...]


@dataclass(frozen=True)
class WorkoutTemplate:
    """A user-built session: ordered blocks of single exercises or supersets."""
    template_id: str
    title: str
    blocks: tuple[TemplateBlock, ...]
    notes: str = ""
    version: int = 1

    @property
    def exercise_names(self) -> list[str]:
        seen = []
        for block in self.blocks:
            for name in block.exercises:
                if name not in seen:
                    seen.append(name)
        return seen


def new_template_id() -> str:
    return f"tpl_{uuid.uuid4().hex[:12]}"


def build_blocks(names: Iterable[str], block_type: str = "single") -> tuple[TemplateBlock, ...]:
    """One block per exercise, or a single superset block holding all of them."""
    names = tuple(n for n in names if n)
    if not names:
        return ()
    if block_type == "superset":
        return (TemplateBlock(type="superset", exercises=names),)
    return tuple(TemplateBlock(type="single", exercises=(n,)) for n in names)


def parse_template(raw: Any, warn: Callable[[str], None] | None = None) -> WorkoutTemplate:
    """
    Validate a stored or submitted template.

    Raises MalformedRecord without a title or without any usable block.
    Blocks of an unknown type or with no exercise names are dropped.
    """
    warn = warn or log.warning
    if not isinstance(raw, Mapping):
        raise MalformedRecord(f"Template must be a mapping, got {type(raw).__name__}")

    title = raw.get("title")
    if not isinstance(title, str) or not title.strip():
        raise MalformedRecord("Template has no title")

    blocks = []
    for i, block in enumerate(raw.get("blocks") or []):
        if not isinstance(block, Mapping) or block.get("type") not in BLOCK_TYPES:
            warn(f"Skipping block {i + 1} of template {title!r}: unknown block type.")
            continue
        names = tuple(
            n.strip() for n in block.get("exercises") or [] if isinstance(n, str) and n.strip()
        )
        if not names:
            warn(f"Skipping block {i + 1} of template {title!r}: no exercises.")
            continue
        blocks.append(TemplateBlock(type=block["type"], exercises=names))
    if not blocks:
        raise MalformedRecord(f"Template {title!r} has no exercises")

    version = raw.get("version")
    return WorkoutTemplate(
        template_id=str(raw.get("templateId") or new_template_id()),
        title=title.strip(),
        blocks=tuple(blocks),
        notes=str(raw.get("notes") or ""),
        version=version if isinstance(version, int) and not isinstance(version, bool) else 1,
    )


def template_to_dict(template: WorkoutTemplate) -> dict:
    return {
        "templateId": template.template_id,
        "title": template.title,
        "version": template.version,
        "notes": template.notes,
        "blocks": [{"type": b.type, "exercises": list(b.exercises)} for b in template.blocks],
    }


def template_to_plan(template: WorkoutTemplate, sets: int = DEFAULT_TEMPLATE_SETS) -> WorkoutPlan:
    """Turn a template into a plan the session form can render."""
    exercises = []
    for block in template.blocks:
        for name in block.exercises:
            info = resolve_exercise_info({"name": name})
            description = info["notes"]
            if block.type == "superset" and len(block.exercises) > 1:
                partners = ", ".join(n for n in block.exercises if n != name)
                description = f"Superset with {partners}. {description}".strip()
            exercises.append(PlannedExercise(
                name=info["name"],
                description=description,
                sets=sets,
                rep_range=info["target_reps"] or DEFAULT_REP_RANGE,
                equipment=info["equipment"],
            ))
    return WorkoutPlan(day=template.title, focus=template.notes or "Custom", exercises=tuple(exercises))
