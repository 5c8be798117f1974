"""
Whole-profile export/import.

JSON export is a pass-through of the data model plus version/exportedAt.
Import re-validates every section and returns None on any problem.
CSV export is one row per fighter with one XP column per skill.
"""
from __future__ import annotations

import csv
import io
import json
import logging
from dataclasses import dataclass, field
from typing import Optional

from skillrpg.core.ids import now_ms
from skillrpg.fighters.models import Fighter
from skillrpg.skills.models import Category, SkillTree
from skillrpg.storage import validators
from skillrpg.tasks.models import WorkItem

logger = logging.getLogger(__name__)

EXPORT_VERSION = 1


@dataclass
class ExportData:
    tree: SkillTree
    fighters: list[Fighter] = field(default_factory=list)
    fighter_skill_levels: dict = field(default_factory=dict)
    xp_ledger: dict = field(default_factory=dict)
    tasks: list[WorkItem] = field(default_factory=list)
    version: int = EXPORT_VERSION
    exported_at: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "exportedAt": self.exported_at,
            "tree": self.tree.to_dict(),
            "fighters": [f.to_dict() for f in self.fighters],
            "fighterSkillLevels": self.fighter_skill_levels,
            "xpLedger": self.xp_ledger,
            "tasksV2": [t.to_dict() for t in self.tasks],
        }


def _is_export_payload(value) -> bool:
    return (
        isinstance(value, dict)
        and isinstance(value.get("version"), (int, float))
        and isinstance(value.get("exportedAt"), (int, float))
        and validators.is_skill_tree(value.get("tree"))
        and validators.is_fighters_array(value.get("fighters"))
        and validators.is_skill_levels_record(value.get("fighterSkillLevels"))
        and validators.is_xp_ledger_record(value.get("xpLedger"))
        and validators.is_work_items_array(value.get("tasksV2"))
    )


def export_to_json(data: ExportData) -> str:
    payload = data.to_dict()
    payload["version"] = EXPORT_VERSION
    payload["exportedAt"] = now_ms()
    return json.dumps(payload, ensure_ascii=False, indent=2)


def import_from_json(json_string: str) -> Optional[ExportData]:
    try:
        parsed = json.loads(json_string)
    except (TypeError, ValueError) as exc:
        logger.error("[IMPORT] Failed to import JSON: %r", exc)
        return None

    if not _is_export_payload(parsed):
        logger.error("[IMPORT] Invalid export payload shape.")
        return None

    return ExportData(
        version=int(parsed["version"]),
        exported_at=int(parsed["exportedAt"]),
        tree=SkillTree.from_dict(parsed["tree"]),
        fighters=[Fighter.from_dict(f) for f in parsed["fighters"]],
        fighter_skill_levels={k: dict(v) for k, v in parsed["fighterSkillLevels"].items()},
        xp_ledger={k: dict(v) for k, v in parsed["xpLedger"].items()},
        tasks=[WorkItem.from_dict(t) for t in parsed["tasksV2"]],
    )


def _format_number(value) -> str:
    if isinstance(value, float) and not value.is_integer():
        return f"{value:.3f}".rstrip("0").rstrip(".")
    return str(int(value))


def export_to_csv(
    fighters: list[Fighter],
    xp_ledger: dict,
    categories: list[Category],
    delimiter: str = ",",
) -> str:
    skills = [(cat.name, skill) for cat in categories for skill in cat.skills]

    out = io.StringIO()
    writer = csv.writer(out, delimiter=delimiter, lineterminator="\n")
    writer.writerow(
        ["Name", "Callsign", "Rank", "Unit"] + [f"{cat_name}: {skill.name}" for cat_name, skill in skills]
    )
    for fighter in fighters:
        ledger = xp_ledger.get(fighter.id, {})
        writer.writerow(
            [fighter.full_name or fighter.name or "", fighter.callsign or "", fighter.rank or "", fighter.unit or ""]
            + [_format_number(ledger.get(skill.id, 0)) for _, skill in skills]
        )
    return out.getvalue().rstrip("\n")
